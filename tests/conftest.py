"""Shared fixtures: a stub chat model and a mock-transport HTTP client."""

import json
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List

import httpx
import pytest
from langchain_core.messages import AIMessage

from http_coach.advisory import AdvisoryGenerator
from http_coach.auditor import AUDIT_HEADERS, HeaderAuditor
from http_coach.service import AuditService
from http_coach.storage import HistoryLedger, InMemoryKeyValueStore

FIXED_NOW = datetime(2025, 6, 1, 14, 10, 0, 123000, tzinfo=timezone.utc)

ADVICE = {
    "explanation": "CSP is missing.",
    "suggestions": {"content-security-policy": "default-src 'self'"},
    "warnings": "A strict CSP can break inline scripts.",
}

ALL_HEADERS = {
    "Content-Security-Policy": "default-src 'self'",
    "Strict-Transport-Security": "max-age=31536000",
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "no-referrer",
}


class DummyModel:
    """Chat model stub returning preconfigured content and recording calls."""

    def __init__(self, content: Any = json.dumps(ADVICE), error: Exception | None = None) -> None:
        self._content = content
        self._error = error
        self.calls: List[Dict[str, Any]] = []

    def invoke(self, messages: List[Any], **kwargs: Any) -> AIMessage:
        self.calls.append({"messages": messages, "kwargs": kwargs})
        if self._error is not None:
            raise self._error
        return AIMessage(content=self._content)


class RecordingTransport(httpx.MockTransport):
    """MockTransport that keeps every request it served."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        self.requests: List[httpx.Request] = []

        def _handler(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(_handler)


def headers_handler(headers: Dict[str, str], status: int = 200):
    def _handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status, headers=headers, text="ok")

    return _handler


def connect_error_handler(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("Name or service not known", request=request)


def make_auditor(transport: httpx.MockTransport) -> HeaderAuditor:
    return HeaderAuditor(client=httpx.Client(transport=transport))


@pytest.fixture()
def store():
    return InMemoryKeyValueStore()


@pytest.fixture()
def ledger(store):
    return HistoryLedger(store)


@pytest.fixture()
def model():
    return DummyModel()


@pytest.fixture()
def transport():
    return RecordingTransport(headers_handler(ALL_HEADERS))


@pytest.fixture()
def service(transport, model, ledger):
    return AuditService(
        auditor=make_auditor(transport),
        advisor=AdvisoryGenerator(model),
        ledger=ledger,
        clock=lambda: FIXED_NOW,
    )


@pytest.fixture()
def checklist():
    return AUDIT_HEADERS
