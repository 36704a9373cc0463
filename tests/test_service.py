"""Tests for the AuditService request/response state machine."""

import json

import pytest

from conftest import (
    ADVICE,
    FIXED_NOW,
    DummyModel,
    RecordingTransport,
    connect_error_handler,
    headers_handler,
    make_auditor,
)
from http_coach.advisory import AdvisoryGenerator
from http_coach.errors import ValidationError
from http_coach.identity import parse_cookies
from http_coach.service import (
    FETCH_FAILED,
    HISTORY_FAILED,
    AuditService,
    ServiceResponse,
    validate_target_url,
)
from http_coach.storage import HistoryLedger


def _client_id_from(response: ServiceResponse) -> str:
    return parse_cookies(response.headers["Set-Cookie"])["client_id"]


# ---- Validation -----------------------------------------------------------


@pytest.mark.parametrize(
    "url, reason",
    [
        (None, "Missing url parameter"),
        ("", "Missing url parameter"),
        ("http://example.com", "URL must use https://"),
        ("ftp://example.com", "URL must use https://"),
        ("HTTPS://example.com", "URL must use https://"),
    ],
)
def test_validate_target_url_rejects(url, reason):
    with pytest.raises(ValidationError, match=reason):
        validate_target_url(url)


def test_non_https_url_is_400_without_outbound_call(service, transport, model, store):
    response = service.submit_audit("http://example.com")

    assert response.status == 400
    assert response.body == {"error": "URL must use https://"}
    assert "Set-Cookie" not in response.headers
    assert transport.requests == []
    assert model.calls == []
    assert len(store) == 0


def test_missing_url_is_400(service):
    response = service.submit_audit(None)
    assert response.status == 400
    assert response.body == {"error": "Missing url parameter"}


# ---- Successful submit ----------------------------------------------------


def test_all_headers_scores_100_and_lands_at_index_0(service, ledger):
    response = service.submit_audit("https://good-headers.example")

    assert response.status == 200
    assert response.headers["Content-Type"] == "application/json"
    body = response.body
    assert body["url"] == "https://good-headers.example"
    assert body["score"] == 100
    assert body["missing"] == []
    assert body["aiAnalysis"] == ADVICE
    assert body["timestamp"] == "2025-06-01T14:10:00.123Z"
    assert set(body) == {"url", "timestamp", "score", "headersFound", "missing", "aiAnalysis"}

    history = ledger.read(_client_id_from(response))
    assert history[0] == body


def test_new_client_gets_cookie_matching_storage_key(service, store):
    response = service.submit_audit("https://good-headers.example")

    cookie = response.headers["Set-Cookie"]
    assert cookie.endswith("; Path=/; HttpOnly; SameSite=Strict; Max-Age=31536000")
    client_id = _client_id_from(response)
    assert store.get(f"history:{client_id}") is not None


def test_returning_client_gets_no_cookie(service, ledger):
    response = service.submit_audit("https://a.example", "client_id=returning")

    assert response.status == 200
    assert "Set-Cookie" not in response.headers
    assert len(ledger.read("returning")) == 1


def test_partial_headers_and_advice_prompt(ledger, model):
    transport = RecordingTransport(
        headers_handler({"X-Frame-Options": "DENY", "Referrer-Policy": "no-referrer"})
    )
    service = AuditService(
        make_auditor(transport), AdvisoryGenerator(model), ledger, clock=lambda: FIXED_NOW
    )
    response = service.submit_audit("https://partial.example", "client_id=c1")

    assert response.body["score"] == 40
    assert response.body["headersFound"] == {
        "x-frame-options": "DENY",
        "referrer-policy": "no-referrer",
    }
    assert response.body["missing"] == [
        "content-security-policy",
        "strict-transport-security",
        "x-content-type-options",
    ]
    prompt = model.calls[0]["messages"][1].content
    assert "Missing headers: content-security-policy, strict-transport-security, " in prompt


def test_repeated_submits_cap_history(service, ledger):
    for _ in range(25):
        service.submit_audit("https://good-headers.example", "client_id=busy")
    assert len(ledger.read("busy")) == 20


# ---- Failures -------------------------------------------------------------


def test_fetch_failure_is_500_and_writes_nothing(ledger, model, store):
    service = AuditService(
        make_auditor(RecordingTransport(connect_error_handler)),
        AdvisoryGenerator(model),
        ledger,
    )
    response = service.submit_audit("https://nowhere.invalid")

    assert response.status == 500
    assert response.body["error"] == FETCH_FAILED == "Failed to fetch URL"
    assert response.body["details"]
    assert "Set-Cookie" not in response.headers
    assert model.calls == []
    assert len(store) == 0


def test_model_failure_collapses_into_same_500(transport, ledger, store):
    model = DummyModel(error=RuntimeError("model overloaded"))
    service = AuditService(make_auditor(transport), AdvisoryGenerator(model), ledger)
    response = service.submit_audit("https://good-headers.example", "client_id=c1")

    assert response.status == 500
    assert response.body == {"error": "Failed to fetch URL", "details": "model overloaded"}
    assert ledger.read("c1") == []


def test_corrupt_history_on_submit_is_500(service, store):
    store.put("history:c1", "not json")
    response = service.submit_audit("https://good-headers.example", "client_id=c1")

    assert response.status == 500
    assert response.body["error"] == "Failed to fetch URL"
    assert "history:c1" in response.body["details"]
    assert store.get("history:c1") == "not json"


class BrokenStore:
    def get(self, key):
        raise OSError("store unreachable")

    def put(self, key, value):
        raise OSError("store unreachable")


def test_store_failure_is_500(transport, model):
    service = AuditService(
        make_auditor(transport), AdvisoryGenerator(model), HistoryLedger(BrokenStore())
    )
    response = service.submit_audit("https://good-headers.example")
    assert response.status == 500
    assert response.body["details"] == "store unreachable"


# ---- Read history ---------------------------------------------------------


def test_history_without_cookie_is_empty(service, store):
    response = service.read_history(None)
    assert response.status == 200
    assert response.body == []
    assert "Set-Cookie" not in response.headers


def test_history_for_unknown_client_is_empty(service):
    assert service.read_history("client_id=ghost").body == []


def test_history_returns_newest_first(service):
    service.submit_audit("https://one.example", "client_id=c1")
    service.submit_audit("https://two.example", "client_id=c1")

    response = service.read_history("theme=dark; client_id=c1")
    assert response.status == 200
    assert [r["url"] for r in response.body] == [
        "https://two.example",
        "https://one.example",
    ]
    json.dumps(response.body)


def test_history_corrupt_value_is_500(service, store):
    store.put("history:c1", "[broken")
    response = service.read_history("client_id=c1")
    assert response.status == 500
    assert response.body["error"] == "Failed to read history"
    assert "history:c1" in response.body["details"]


def test_history_store_failure_is_500(transport, model):
    service = AuditService(
        make_auditor(transport), AdvisoryGenerator(model), HistoryLedger(BrokenStore())
    )
    response = service.read_history("client_id=c1")
    assert response.status == 500
    assert response.body == {"error": HISTORY_FAILED, "details": "store unreachable"}


def test_history_store_failure_without_message_reports_type(transport, model):
    class SilentStore:
        def get(self, key):
            raise OSError()

        def put(self, key, value):
            pass

    service = AuditService(
        make_auditor(transport), AdvisoryGenerator(model), HistoryLedger(SilentStore())
    )
    response = service.read_history("client_id=c1")
    assert response.status == 500
    assert response.body["details"] == "OSError"
