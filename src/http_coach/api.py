"""HTTP API for security header audits.

Built on the standard library (``http.server`` + ``json``).  The server
exposes:

* **GET /api/audit?url=<https-url>**: audit a URL and record it in the
  caller's history.  Sets a ``client_id`` cookie on first use.
* **GET /api/history**: the caller's past audits, newest first.
* **GET /health**: liveness probe (always returns 200).

Start with::

    http-coach-api --port 8080 --model gpt-4o-mini
"""

from __future__ import annotations

import json
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any, Dict, Optional, Tuple
from urllib.parse import parse_qs, urlsplit

from .service import AuditService, ServiceResponse


class AuditHTTPServer(ThreadingHTTPServer):
    """Threaded HTTP server carrying the :class:`AuditService` it fronts."""

    def __init__(
        self, server_address: Tuple[str, int], service: AuditService
    ) -> None:
        super().__init__(server_address, _Handler)
        self.service = service


# ------------------------------------------------------------------
# Request handler
# ------------------------------------------------------------------


class _Handler(BaseHTTPRequestHandler):
    """HTTP request handler for the audit API."""

    server: AuditHTTPServer

    def _send_json(
        self, status: int, body: Any, headers: Optional[Dict[str, str]] = None
    ) -> None:
        payload = json.dumps(body).encode()
        self.send_response(status)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(payload)))
        for name, value in (headers or {}).items():
            if name.lower() != "content-type":
                self.send_header(name, value)
        self.end_headers()
        self.wfile.write(payload)

    def _send_service_response(self, response: ServiceResponse) -> None:
        self._send_json(response.status, response.body, response.headers)

    def _query_param(self, query: str, name: str) -> Optional[str]:
        values = parse_qs(query).get(name)
        return values[0] if values else None

    # --- GET /api/audit ------------------------------------------------

    def _handle_audit(self, query: str) -> None:
        url = self._query_param(query, "url")
        response = self.server.service.submit_audit(url, self.headers.get("Cookie"))
        self._send_service_response(response)

    # --- GET /api/history ----------------------------------------------

    def _handle_history(self, query: str) -> None:
        response = self.server.service.read_history(self.headers.get("Cookie"))
        self._send_service_response(response)

    # --- GET /health ---------------------------------------------------

    def _handle_health(self, query: str) -> None:
        self._send_json(200, {"status": "ok"})

    # --- Routing -------------------------------------------------------

    _GET_ROUTES: Dict[str, str] = {
        "/api/audit": "_handle_audit",
        "/api/history": "_handle_history",
        "/health": "_handle_health",
    }

    def do_GET(self) -> None:  # noqa: N802
        parts = urlsplit(self.path)
        handler_name = self._GET_ROUTES.get(parts.path)
        if handler_name:
            getattr(self, handler_name)(parts.query)
        else:
            self._send_json(404, {"error": "Not found"})

    def _method_not_allowed(self) -> None:
        self._send_json(405, {"error": "Method not allowed"}, {"Allow": "GET"})

    do_POST = _method_not_allowed  # noqa: N815
    do_PUT = _method_not_allowed  # noqa: N815
    do_DELETE = _method_not_allowed  # noqa: N815

    # Events go through the JSON audit logger instead.
    def log_message(self, format: str, *args: Any) -> None:  # noqa: A002
        pass


def create_server(
    service: AuditService,
    host: str = "0.0.0.0",
    port: int = 8080,
) -> AuditHTTPServer:
    """Create (but do not start) the audit HTTP server."""
    return AuditHTTPServer((host, port), service)


# ------------------------------------------------------------------
# CLI entry-point
# ------------------------------------------------------------------


def build_service(
    model_name: str,
    base_url: Optional[str] = None,
    store_path: Optional[str] = None,
    timeout: Optional[float] = None,
) -> AuditService:  # pragma: no cover
    """Wire the production collaborators into an :class:`AuditService`."""
    from langchain_openai import ChatOpenAI

    from .advisory import AdvisoryGenerator
    from .auditor import AuditorConfig, HeaderAuditor
    from .storage import HistoryLedger, InMemoryKeyValueStore, JsonFileKeyValueStore

    model = ChatOpenAI(model=model_name, base_url=base_url)
    store = JsonFileKeyValueStore(store_path) if store_path else InMemoryKeyValueStore()
    return AuditService(
        auditor=HeaderAuditor(AuditorConfig(timeout=timeout)),
        advisor=AdvisoryGenerator(model),
        ledger=HistoryLedger(store),
    )


def main() -> None:  # pragma: no cover
    import argparse

    parser = argparse.ArgumentParser(description="Security header audit API")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=8080)
    parser.add_argument("--model", default="gpt-4o-mini", help="Chat model name")
    parser.add_argument(
        "--base-url",
        default=None,
        help="OpenAI-compatible endpoint (defaults to the OpenAI API)",
    )
    parser.add_argument(
        "--store-path",
        default=None,
        help="JSON file for history; in-memory when omitted",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Outbound fetch timeout in seconds (none by default)",
    )
    args = parser.parse_args()

    service = build_service(args.model, args.base_url, args.store_path, args.timeout)
    server = create_server(service, host=args.host, port=args.port)
    print(f"Serving on {args.host}:{args.port}")
    server.serve_forever()


if __name__ == "__main__":
    main()
