"""Core configuration, logging, errors and domain models."""
