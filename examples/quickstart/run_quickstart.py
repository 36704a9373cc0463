"""End-to-end quickstart: audit → advise → record → read history.

Runs fully offline: the target site is an ``httpx.MockTransport`` and the
model is LangChain's ``FakeListChatModel``.

Usage:
    pip install -e ".[test]"
    python examples/quickstart/run_quickstart.py
"""

import json

import httpx
from langchain_core.language_models.fake_chat_models import FakeListChatModel

from http_coach import (
    AdvisoryGenerator,
    AuditService,
    HeaderAuditor,
    HistoryLedger,
    InMemoryKeyValueStore,
)

# ── Configuration ─────────────────────────────────────────────────────
SITES = {
    "good.example": {
        "Content-Security-Policy": "default-src 'self'",
        "Strict-Transport-Security": "max-age=63072000; includeSubDomains",
        "X-Content-Type-Options": "nosniff",
        "X-Frame-Options": "DENY",
        "Referrer-Policy": "strict-origin-when-cross-origin",
    },
    "so-so.example": {
        "X-Frame-Options": "SAMEORIGIN",
        "X-Content-Type-Options": "nosniff",
    },
    "bare.example": {},
}
ADVICE = json.dumps({
    "explanation": "Missing headers leave the site open to XSS and clickjacking.",
    "suggestions": {"content-security-policy": "default-src 'self'"},
    "warnings": "A strict CSP breaks inline scripts until they are moved out.",
})


def serve_site(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, headers=SITES.get(request.url.host, {}), text="<html/>")


# ── 1. Wire the service ───────────────────────────────────────────────
service = AuditService(
    auditor=HeaderAuditor(client=httpx.Client(transport=httpx.MockTransport(serve_site))),
    advisor=AdvisoryGenerator(FakeListChatModel(responses=[ADVICE])),
    ledger=HistoryLedger(InMemoryKeyValueStore()),
)

print("=" * 60)
print("  http-header-coach · End-to-End Quickstart")
print("=" * 60)

# ── 2. First audit mints a client identity ───────────────────────────
print("\n── Step 1: First audit ──\n")
first = service.submit_audit("https://good.example/")
set_cookie = first.headers["Set-Cookie"]
cookie = set_cookie.split(";")[0]
print(f"  status={first.status} score={first.body['score']}")
print(f"  Set-Cookie: {set_cookie}")

# ── 3. Further audits reuse the cookie ───────────────────────────────
print("\n── Step 2: More audits with the same cookie ──\n")
for host in ("so-so.example", "bare.example"):
    resp = service.submit_audit(f"https://{host}/", cookie)
    print(f"  {host}: score={resp.body['score']} missing={resp.body['missing']}")

# ── 4. Validation ─────────────────────────────────────────────────────
print("\n── Step 3: Plain-HTTP URL is rejected ──\n")
rejected = service.submit_audit("http://good.example/", cookie)
print(f"  status={rejected.status} body={rejected.body}")

# ── 5. History ────────────────────────────────────────────────────────
print("\n── Step 4: History (newest first) ──\n")
history = service.read_history(cookie)
for rec in history.body:
    print(f"    {rec['timestamp']}  {rec['score']:>3}  {rec['url']}")

print("\n" + "=" * 60)
print("  Done.")
print("=" * 60)
