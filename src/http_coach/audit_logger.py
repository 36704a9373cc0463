"""Structured event logger for header audits.

Every record is one JSON line.  Each audit request gets a
``correlation_id`` so a single audit can be followed end to end:

    audit_rejected | client_identity_minted → header_audit_complete
        → advisory_generated → history_appended   (or audit_failed)

History reads emit ``history_read`` or ``history_read_failed``.

Callers use the per-event helpers on :class:`AuditLogger` rather than
free-form :meth:`AuditLogger.log_event`, so field names stay consistent::

    from http_coach.audit_logger import get_audit_logger

    events = get_audit_logger()
    events.audit_rejected("abc", url="http://x", reason="URL must use https://")
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Dict, Optional

from .errors import describe_error

if TYPE_CHECKING:
    from .models import HeaderReport

_LOGGER_NAME = "http_coach.events"


class _JsonFormatter(logging.Formatter):
    """Render a record and its ``_structured`` fields as one JSON object."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(getattr(record, "_structured", None) or {})
        return json.dumps(payload, default=str)


def get_audit_logger(name: str = _LOGGER_NAME) -> "AuditLogger":
    """Return an :class:`AuditLogger` bound to the logger called *name*."""
    return AuditLogger(name)


class AuditLogger:
    """JSON event logger for the audit pipeline.

    The first instance for a given *name* attaches a stderr handler;
    later instances share it.
    """

    def __init__(self, name: str = _LOGGER_NAME) -> None:
        self._logger = logging.getLogger(name)
        if not self._logger.handlers:
            handler = logging.StreamHandler()
            handler.setFormatter(_JsonFormatter())
            self._logger.addHandler(handler)
            self._logger.setLevel(logging.DEBUG)

    def log_event(
        self,
        event: str,
        *,
        correlation_id: Optional[str] = None,
        level: int = logging.INFO,
        **fields: Any,
    ) -> Dict[str, Any]:
        """Emit *event* with *fields* and return the structured payload."""
        structured: Dict[str, Any] = {"event": event}
        if correlation_id is not None:
            structured["correlation_id"] = correlation_id
        structured.update(fields)

        record = self._logger.makeRecord(
            self._logger.name, level, "(http_coach)", 0, event, (), None
        )
        record._structured = structured  # type: ignore[attr-defined]
        self._logger.handle(record)
        return structured

    # ------------------------------------------------------------------
    # Submit path
    # ------------------------------------------------------------------

    def audit_rejected(
        self, correlation_id: str, url: Optional[str], reason: str
    ) -> Dict[str, Any]:
        return self.log_event(
            "audit_rejected", correlation_id=correlation_id, url=url, reason=reason
        )

    def identity_minted(self, correlation_id: str, client_id: str) -> Dict[str, Any]:
        return self.log_event(
            "client_identity_minted", correlation_id=correlation_id, client_id=client_id
        )

    def header_audit_complete(
        self,
        correlation_id: Optional[str],
        url: str,
        status_code: int,
        report: HeaderReport,
    ) -> Dict[str, Any]:
        return self.log_event(
            "header_audit_complete",
            correlation_id=correlation_id,
            url=url,
            status_code=status_code,
            score=report.score,
            missing=list(report.missing),
        )

    def advisory_generated(
        self, correlation_id: Optional[str], url: str
    ) -> Dict[str, Any]:
        return self.log_event("advisory_generated", correlation_id=correlation_id, url=url)

    def history_appended(
        self,
        correlation_id: Optional[str],
        client_id: str,
        size: int,
        dropped: int,
    ) -> Dict[str, Any]:
        return self.log_event(
            "history_appended",
            correlation_id=correlation_id,
            client_id=client_id,
            size=size,
            dropped=dropped,
        )

    def audit_failed(
        self, correlation_id: str, url: str, err: BaseException
    ) -> Dict[str, Any]:
        """Log a failed audit at WARNING with the error class and message."""
        return self.log_event(
            "audit_failed",
            correlation_id=correlation_id,
            level=logging.WARNING,
            url=url,
            error_type=type(err).__name__,
            details=describe_error(err),
        )

    # ------------------------------------------------------------------
    # History path
    # ------------------------------------------------------------------

    def history_read(self, client_id: str, size: int) -> Dict[str, Any]:
        return self.log_event("history_read", client_id=client_id, size=size)

    def history_read_failed(self, client_id: str, err: BaseException) -> Dict[str, Any]:
        return self.log_event(
            "history_read_failed",
            level=logging.WARNING,
            client_id=client_id,
            error_type=type(err).__name__,
            details=describe_error(err),
        )
