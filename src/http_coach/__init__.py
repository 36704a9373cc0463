"""http-coach: audit HTTP security headers and keep a per-client history."""

from .advisory import AdvisoryGenerator
from .audit_logger import AuditLogger, get_audit_logger
from .auditor import AUDIT_HEADERS, AuditorConfig, HeaderAuditor, score_headers
from .errors import (
    FetchError,
    HistoryCorruptError,
    HttpCoachError,
    UpstreamFailure,
    ValidationError,
)
from .identity import ClientIdentity, build_set_cookie, parse_cookies, resolve_client_identity
from .models import AuditRecord, HeaderReport
from .service import AuditService, ServiceResponse
from .storage import (
    HISTORY_CAPACITY,
    HistoryLedger,
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    KeyValueStore,
)

__version__ = "0.1.0"
__all__ = [
    "AUDIT_HEADERS",
    "AdvisoryGenerator",
    "AuditLogger",
    "AuditRecord",
    "AuditService",
    "AuditorConfig",
    "ClientIdentity",
    "FetchError",
    "HISTORY_CAPACITY",
    "HeaderAuditor",
    "HeaderReport",
    "HistoryCorruptError",
    "HistoryLedger",
    "HttpCoachError",
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "KeyValueStore",
    "ServiceResponse",
    "UpstreamFailure",
    "ValidationError",
    "build_set_cookie",
    "get_audit_logger",
    "parse_cookies",
    "resolve_client_identity",
    "score_headers",
]
