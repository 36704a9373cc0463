"""Security header auditor: fetch a URL and score its response headers.

The checklist is five headers worth 20 points each:

1. ``content-security-policy``
2. ``strict-transport-security``
3. ``x-content-type-options``
4. ``x-frame-options``
5. ``referrer-policy``

Only presence is checked; header values are recorded but not judged.  The
HTTP status of the response does not matter: a 404 or 500 page is scored on
its headers like any other.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import httpx

from .audit_logger import get_audit_logger
from .errors import FetchError
from .models import HeaderReport

AUDIT_HEADERS: Tuple[str, ...] = (
    "content-security-policy",
    "strict-transport-security",
    "x-content-type-options",
    "x-frame-options",
    "referrer-policy",
)
POINTS_PER_HEADER = 20
USER_AGENT = "HTTP-Coach-Scanner/1.0"

_log = get_audit_logger()


@dataclass(frozen=True)
class AuditorConfig:
    """Configuration knobs for :class:`HeaderAuditor`.

    Parameters
    ----------
    checklist : tuple[str, ...]
        Lower-case header names to look for, in reporting order.
    user_agent : str
        ``User-Agent`` sent with the outbound request.
    follow_redirects : bool
        Whether redirects are followed before headers are read.
    timeout : float, optional
        Outbound request timeout in seconds.  *None* disables it.
    """

    checklist: Tuple[str, ...] = AUDIT_HEADERS
    user_agent: str = USER_AGENT
    follow_redirects: bool = True
    timeout: Optional[float] = None


class HeaderAuditor:
    """Fetch a target URL and score it against the header checklist.

    Parameters
    ----------
    config : AuditorConfig, optional
        Checklist and request settings.
    client : httpx.Client, optional
        HTTP client to use.  When omitted the auditor creates and owns one;
        call :meth:`close` to release it.
    """

    def __init__(
        self,
        config: AuditorConfig | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        self._config = config or AuditorConfig()
        self._owns_client = client is None
        self._client = client if client is not None else httpx.Client(
            timeout=self._config.timeout
        )

    def audit(self, target_url: str, correlation_id: Optional[str] = None) -> HeaderReport:
        """GET *target_url* and return a :class:`HeaderReport`.

        Raises
        ------
        FetchError
            On transport-level failures (DNS, TLS, connection, timeout,
            redirect loops).  HTTP error statuses are not failures.
        """
        try:
            response = self._client.get(
                target_url,
                headers={"User-Agent": self._config.user_agent},
                follow_redirects=self._config.follow_redirects,
            )
        except httpx.HTTPError as err:
            raise FetchError(target_url, str(err) or type(err).__name__) from err

        report = score_headers(response.headers, self._config.checklist)
        _log.header_audit_complete(correlation_id, target_url, response.status_code, report)
        return report

    def close(self) -> None:
        """Close the HTTP client if this auditor created it."""
        if self._owns_client:
            self._client.close()

    @property
    def config(self) -> AuditorConfig:
        return self._config


def score_headers(
    headers: httpx.Headers, checklist: Tuple[str, ...] = AUDIT_HEADERS
) -> HeaderReport:
    """Score *headers* against *checklist*.

    A header with an empty value counts as absent.
    """
    found: Dict[str, str] = {}
    missing: List[str] = []
    score = 0
    for name in checklist:
        value = headers.get(name)
        if value:
            found[name] = value
            score += POINTS_PER_HEADER
        else:
            missing.append(name)
    return HeaderReport(score=score, headers_found=found, missing=tuple(missing))
