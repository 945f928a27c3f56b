"""Remote timeline service boundary.

The client returns ``RemoteResult`` values instead of raising, so the
orchestrator can fall back to local computation on any failure.
"""

from .client import RemoteTimelineClient, wire_summary_format
from .results import RemoteError, RemoteErrorKind, RemoteResult
from .retry import retry_remote_call
from .schemas import ReminderCheck, RemoteReminder, RemoteSummary, RemoteTimeline

__all__ = [
    "ReminderCheck",
    "RemoteError",
    "RemoteErrorKind",
    "RemoteReminder",
    "RemoteResult",
    "RemoteSummary",
    "RemoteTimeline",
    "RemoteTimelineClient",
    "retry_remote_call",
    "wire_summary_format",
]
