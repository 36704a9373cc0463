"""AuditService: request/response orchestration for header audits.

Composes identity resolution, the header auditor, the advisory generator
and the history ledger into the two operations exposed over HTTP:

* :meth:`AuditService.submit_audit`: validate, audit, advise, record.
* :meth:`AuditService.read_history`: return the caller's past audits.

Both return a transport-neutral :class:`ServiceResponse`; the HTTP layer
only copies it onto the wire.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from .advisory import AdvisoryGenerator
from .audit_logger import get_audit_logger
from .auditor import HeaderAuditor
from .errors import ValidationError, describe_error
from .identity import ClientIdentity, parse_cookies, resolve_client_identity
from .models import AuditRecord
from .storage.ledger import HistoryLedger

FETCH_FAILED = "Failed to fetch URL"
HISTORY_FAILED = "Failed to read history"

_log = get_audit_logger()


@dataclass
class ServiceResponse:
    """Status, JSON body and extra headers for one response."""

    status: int
    body: Any
    headers: Dict[str, str] = field(
        default_factory=lambda: {"Content-Type": "application/json"}
    )


def validate_target_url(url: Optional[str]) -> str:
    """Return *url* if it is a non-empty ``https://`` URL.

    Raises
    ------
    ValidationError
        With the client-facing reason as its message.
    """
    if not url:
        raise ValidationError("Missing url parameter")
    if not url.startswith("https://"):
        raise ValidationError("URL must use https://")
    return url


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditService:
    """Run header audits and serve per-client history.

    Parameters
    ----------
    auditor : HeaderAuditor
        Fetches and scores the target.
    advisor : AdvisoryGenerator
        Produces the remediation advice.
    ledger : HistoryLedger
        Per-client history storage.
    clock : callable, optional
        Returns the current UTC time; used for record timestamps.
    """

    def __init__(
        self,
        auditor: HeaderAuditor,
        advisor: AdvisoryGenerator,
        ledger: HistoryLedger,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._auditor = auditor
        self._advisor = advisor
        self._ledger = ledger
        self._clock = clock

    # ------------------------------------------------------------------
    # Submit audit
    # ------------------------------------------------------------------

    def submit_audit(
        self, url: Optional[str], cookie_header: Optional[str] = None
    ) -> ServiceResponse:
        """Audit *url* on behalf of the client identified by *cookie_header*.

        Validation failures return 400 before any outbound call.  Any error
        after identity resolution (fetch, model, store) returns a single 500
        with the underlying message in ``details``; nothing is written to
        history in that case.
        """
        correlation_id = uuid.uuid4().hex

        try:
            target_url = validate_target_url(url)
        except ValidationError as err:
            _log.audit_rejected(correlation_id, url, str(err))
            return ServiceResponse(400, {"error": str(err)})

        identity = resolve_client_identity(parse_cookies(cookie_header), mint=True)
        if identity.is_new:
            _log.identity_minted(correlation_id, identity.client_id)

        try:
            record = self._run_audit(target_url, identity, correlation_id)
        except Exception as err:  # noqa: BLE001
            _log.audit_failed(correlation_id, target_url, err)
            return ServiceResponse(
                500, {"error": FETCH_FAILED, "details": describe_error(err)}
            )

        response = ServiceResponse(200, record.to_dict())
        if identity.set_cookie:
            response.headers["Set-Cookie"] = identity.set_cookie
        return response

    def _run_audit(
        self, target_url: str, identity: ClientIdentity, correlation_id: str
    ) -> AuditRecord:
        report = self._auditor.audit(target_url, correlation_id=correlation_id)
        analysis = self._advisor.advise(
            target_url,
            report.headers_found,
            report.missing,
            correlation_id=correlation_id,
        )
        record = AuditRecord.from_report(target_url, report, analysis, self._clock())
        self._ledger.append(identity.client_id, record, correlation_id=correlation_id)
        return record

    # ------------------------------------------------------------------
    # Read history
    # ------------------------------------------------------------------

    def read_history(self, cookie_header: Optional[str] = None) -> ServiceResponse:
        """Return the caller's stored audits, newest first.

        No identity is minted here; a caller without a ``client_id`` cookie
        simply gets an empty list.
        """
        identity = resolve_client_identity(parse_cookies(cookie_header), mint=False)
        if identity is None:
            return ServiceResponse(200, [])

        try:
            history = self._ledger.read(identity.client_id)
        except Exception as err:  # noqa: BLE001
            _log.history_read_failed(identity.client_id, err)
            return ServiceResponse(
                500, {"error": HISTORY_FAILED, "details": describe_error(err)}
            )

        _log.history_read(identity.client_id, len(history))
        return ServiceResponse(200, history)
