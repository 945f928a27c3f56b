"""HTTP client for the remote timeline service.

Each call makes a single bounded attempt and returns a ``RemoteResult``.
Retrying is left to the caller (see ``remote.retry``).
"""

import logging
from typing import Any, TypeVar
from urllib.parse import quote

import httpx
from pydantic import BaseModel, ValidationError

from ..core.config import Settings, settings
from ..core.domain.conversation import ChatMessage
from ..core.domain.timeline import ReminderType, SummaryFormat, TimelineSettings
from .results import RemoteErrorKind, RemoteResult
from .schemas import (
    ReminderCheck,
    ReminderCheckEnvelope,
    ReminderEnvelope,
    RemoteReminder,
    RemoteSummary,
    RemoteTimeline,
    SummaryEnvelope,
    TimelineEnvelope,
    dump_wire,
)

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=BaseModel)

# The service has no "sentences" summary type
_WIRE_SUMMARY_TYPES = {
    SummaryFormat.BULLET: "bullet",
    SummaryFormat.PARAGRAPH: "paragraph",
    SummaryFormat.SENTENCES: "paragraph",
}


def wire_summary_format(summary_format: SummaryFormat) -> SummaryFormat:
    """Format the service renders when asked for ``summary_format``."""
    return SummaryFormat(_WIRE_SUMMARY_TYPES[summary_format])


class RemoteTimelineClient:
    """Client for the summary and reminder endpoints of the timeline service."""

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
        config: Settings | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: Service base URL (defaults to settings)
            api_key: Bearer credential (defaults to settings)
            timeout: Per-call timeout in seconds (defaults to settings)
            client: Optional pre-built httpx client; not closed by this object
            config: Settings to read defaults from
        """
        config = config or settings
        self.base_url = (base_url or config.api_base_url).rstrip("/")
        self.api_key = api_key if api_key is not None else config.api_key
        self.timeout = timeout if timeout is not None else config.remote_timeout_seconds
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient()

    async def __aenter__(self) -> "RemoteTimelineClient":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this object created it."""
        if self._owns_client:
            await self.client.aclose()

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    async def _request(
        self,
        method: str,
        path: str,
        envelope: type[E],
        payload: dict[str, Any] | None = None,
    ) -> RemoteResult[E]:
        """Perform one HTTP call and decode the response envelope."""
        url = f"{self.base_url}{path}"

        try:
            response = await self.client.request(
                method,
                url,
                headers=self._headers(),
                json=payload,
                timeout=self.timeout,
            )
        except httpx.TimeoutException as e:
            logger.warning(f"Timeline service timed out on {method} {path}: {str(e)}")
            return RemoteResult.failure(RemoteErrorKind.TRANSPORT, f"Timed out: {str(e)}")
        except httpx.RequestError as e:
            logger.warning(f"Timeline service unreachable on {method} {path}: {str(e)}")
            return RemoteResult.failure(RemoteErrorKind.TRANSPORT, f"Request failed: {str(e)}")

        status = response.status_code
        if status == 404:
            return RemoteResult.failure(RemoteErrorKind.NOT_FOUND, "Not found", status)
        if status in (402, 403):
            return RemoteResult.failure(
                RemoteErrorKind.POLICY_REJECTED,
                self._error_message(response),
                status,
            )
        if not response.is_success:
            logger.warning(f"Timeline service error {status} on {method} {path}")
            return RemoteResult.failure(
                RemoteErrorKind.TRANSPORT,
                self._error_message(response),
                status,
            )

        try:
            decoded = envelope.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            logger.warning(f"Malformed response from {method} {path}: {str(e)}")
            return RemoteResult.failure(
                RemoteErrorKind.INVALID_RESPONSE,
                f"Malformed response: {str(e)}",
                status,
            )

        if not decoded.success:
            return RemoteResult.failure(
                RemoteErrorKind.INVALID_RESPONSE,
                decoded.error or "Service reported failure",
                status,
            )

        return RemoteResult.success(decoded)

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            data = response.json()
        except ValueError:
            return f"HTTP {response.status_code}"
        if isinstance(data, dict) and data.get("error"):
            return str(data["error"])
        return f"HTTP {response.status_code}"

    async def request_summary(
        self,
        user_id: str,
        conversation_id: str,
        messages: list[ChatMessage],
        start_index: int,
        end_index: int,
        summary_format: SummaryFormat = SummaryFormat.BULLET,
    ) -> RemoteResult[RemoteSummary]:
        """Ask the service to summarize ``messages[start_index:end_index + 1]``."""
        payload = {
            "userId": user_id,
            "conversationId": conversation_id,
            "messages": [m.to_wire() for m in messages],
            "startIndex": start_index,
            "endIndex": end_index,
            "summaryType": _WIRE_SUMMARY_TYPES[summary_format],
        }

        result = await self._request(
            "POST", "/timeline/summary/generate", SummaryEnvelope, payload
        )
        if not result.ok:
            return RemoteResult(error=result.error)
        if result.value.summary is None:
            return RemoteResult.failure(
                RemoteErrorKind.INVALID_RESPONSE, "Response carried no summary"
            )
        return RemoteResult.success(result.value.summary)

    async def request_reminder_set(
        self,
        user_id: str,
        conversation_id: str,
        reminder_type: ReminderType = ReminderType.PROGRESS,
        content: str | None = None,
        message_count: int = 10,
        timeline_settings: TimelineSettings | None = None,
    ) -> RemoteResult[RemoteReminder]:
        """Register a reminder with the service."""
        payload = dump_wire({
            "userId": user_id,
            "conversationId": conversation_id,
            "reminderType": reminder_type.value,
            "content": content,
            "triggerCondition": {"messageCount": message_count},
            "settings": (
                timeline_settings.model_dump(mode="json") if timeline_settings else None
            ),
        })

        result = await self._request(
            "POST", "/timeline/reminder/set", ReminderEnvelope, payload
        )
        if not result.ok:
            return RemoteResult(error=result.error)
        if result.value.reminder is None:
            return RemoteResult.failure(
                RemoteErrorKind.INVALID_RESPONSE, "Response carried no reminder"
            )
        return RemoteResult.success(result.value.reminder)

    async def check_reminder_trigger(
        self,
        user_id: str,
        conversation_id: str,
        current_message_index: int,
    ) -> RemoteResult[ReminderCheck]:
        """Ask the service whether a stored reminder fires at this index."""
        payload = {
            "userId": user_id,
            "conversationId": conversation_id,
            "currentMessageIndex": current_message_index,
        }

        result = await self._request(
            "POST", "/timeline/reminder/check", ReminderCheckEnvelope, payload
        )
        if not result.ok:
            return RemoteResult(error=result.error)
        return RemoteResult.success(
            ReminderCheck(
                should_trigger=result.value.should_trigger,
                reminders=result.value.reminders,
            )
        )

    async def fetch_timeline(
        self,
        user_id: str,
        conversation_id: str,
    ) -> RemoteResult[RemoteTimeline]:
        """Fetch the stored timeline for a conversation."""
        path = f"/timeline/{quote(user_id, safe='')}/{quote(conversation_id, safe='')}"

        result = await self._request("GET", path, TimelineEnvelope)
        if not result.ok:
            return RemoteResult(error=result.error)
        if not result.value.has_timeline or result.value.timeline is None:
            return RemoteResult.failure(RemoteErrorKind.NOT_FOUND, "No stored timeline")
        return RemoteResult.success(result.value.timeline)
