"""Data models for header audits."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Tuple


@dataclass(frozen=True)
class HeaderReport:
    """Outcome of inspecting one response against the checklist.

    Parameters
    ----------
    score : int
        20 points per checklist header present, so one of 0, 20, ... 100.
    headers_found : dict[str, str]
        Checklist header name → literal response value.
    missing : tuple[str, ...]
        Absent checklist headers, in checklist order.
    """

    score: int
    headers_found: Dict[str, str] = field(default_factory=dict)
    missing: Tuple[str, ...] = ()


@dataclass(frozen=True)
class AuditRecord:
    """One completed audit, the unit stored in a client's history.

    Records have no identifier of their own; they are addressed by their
    position in the history list.  ``ai_analysis`` is whatever JSON-like
    value the model produced and is never inspected.
    """

    url: str
    score: int
    headers_found: Dict[str, str]
    missing: Tuple[str, ...]
    ai_analysis: Any
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def from_report(
        cls,
        url: str,
        report: HeaderReport,
        ai_analysis: Any,
        timestamp: datetime,
    ) -> "AuditRecord":
        return cls(
            url=url,
            score=report.score,
            headers_found=dict(report.headers_found),
            missing=tuple(report.missing),
            ai_analysis=ai_analysis,
            timestamp=timestamp,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Return the JSON wire form (camelCase keys, ISO-8601 timestamp)."""
        return {
            "url": self.url,
            "timestamp": _isoformat(self.timestamp),
            "score": self.score,
            "headersFound": dict(self.headers_found),
            "missing": list(self.missing),
            "aiAnalysis": self.ai_analysis,
        }


def _isoformat(ts: datetime) -> str:
    """Format *ts* in UTC with millisecond precision and a ``Z`` suffix."""
    utc = ts.astimezone(timezone.utc) if ts.tzinfo else ts.replace(tzinfo=timezone.utc)
    return utc.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc.microsecond // 1000:03d}Z"
