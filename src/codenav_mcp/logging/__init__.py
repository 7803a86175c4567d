"""Structured logging utilities."""

from .audit import AuditEvent, JsonlAuditLogger, sanitize_arguments, utc_timestamp
from .diagnostics import configure_diagnostics

__all__ = [
    "AuditEvent",
    "JsonlAuditLogger",
    "configure_diagnostics",
    "sanitize_arguments",
    "utc_timestamp",
]
