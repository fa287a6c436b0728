"""HTTP sidecar server for listing-guard.

Runs as a lightweight stdlib HTTP server on localhost, so a host that is
not written in Python (a browser extension's native helper, a Node
service) can call the engine without spawning a process per request.

Endpoints:
    POST /evaluate     — {"text": "...", "usage": {"copies_last_hour": 3, ...}}
    POST /sanitize     — {"text": "..."}
    POST /detect       — {"text": "..."}
    POST /rate-limit   — {"usage": {...}}
    GET  /health       — Health check

All endpoints expect/return JSON.  Input errors return 400.
"""

from __future__ import annotations
import json
import logging
import os
from http.server import HTTPServer, BaseHTTPRequestHandler
from typing import Any

from .config import create_engine, load_from_yaml
from .engine import ComplianceEngine
from .errors import InvalidInputError

logger = logging.getLogger(__name__)

DEFAULT_PORT = int(os.environ.get("LISTING_GUARD_PORT", "18792"))
DEFAULT_RULES = os.environ.get("LISTING_GUARD_RULES", "")


class GuardHandler(BaseHTTPRequestHandler):
    """HTTP request handler for the listing-guard sidecar."""

    engine: ComplianceEngine = ComplianceEngine()

    def _read_json(self) -> dict[str, Any]:
        length = int(self.headers.get("Content-Length", 0))
        raw = self.rfile.read(length)
        try:
            body = raw.decode("utf-8")
            data = json.loads(body) if body else {}
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise InvalidInputError(f"malformed JSON body: {exc}") from exc
        if not isinstance(data, dict):
            raise InvalidInputError("request body must be a JSON object")
        return data

    def _respond(self, status: int, data: Any) -> None:
        body = json.dumps(data, ensure_ascii=False).encode("utf-8")
        self.send_response(status)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def log_message(self, format: str, *args: Any) -> None:
        logger.debug("%s - %s", self.address_string(), format % args)

    def do_GET(self) -> None:
        if self.path == "/health":
            rules = self.engine.rules
            self._respond(200, {
                "status": "ok",
                "banned_phrases": len(rules.banned_phrases),
                "warning_phrases": len(rules.warning_phrases),
            })
        else:
            self._respond(404, {"error": "not found"})

    def do_POST(self) -> None:
        try:
            body = self._read_json()
            engine = self.engine

            if self.path == "/evaluate":
                result = engine.evaluate(body.get("text"), body.get("usage"))
                self._respond(200, result.to_dict())

            elif self.path == "/sanitize":
                self._respond(200, {"text": engine.sanitize(body.get("text"))})

            elif self.path == "/detect":
                check = engine.pre_check(body.get("text"))
                self._respond(200, {
                    "passed": check.passed,
                    "risk_score": check.risk_score,
                    "findings": [f.to_dict() for f in check.findings],
                })

            elif self.path == "/rate-limit":
                decision = engine.check_rate_limit(body.get("usage") or {})
                self._respond(200, decision.to_dict())

            else:
                self._respond(404, {"error": "not found"})

        except InvalidInputError as e:
            self._respond(400, {"error": str(e)})
        except Exception as e:
            logger.exception("unhandled error on %s", self.path)
            self._respond(500, {"error": str(e)})


def make_server(
    engine: ComplianceEngine,
    *,
    host: str = "127.0.0.1",
    port: int = DEFAULT_PORT,
) -> HTTPServer:
    """Bind a server whose handler uses the given engine (port 0 picks a free port)."""
    handler = type("BoundGuardHandler", (GuardHandler,), {"engine": engine})
    return HTTPServer((host, port), handler)


def serve(port: int = DEFAULT_PORT, rules_path: str = DEFAULT_RULES) -> None:
    """Start the listing-guard HTTP sidecar."""
    config = load_from_yaml(rules_path) if rules_path else {}
    server = make_server(create_engine(config), port=port)
    print(f"listing-guard sidecar listening on http://127.0.0.1:{port}")
    print(f"  rules: {rules_path or 'built-in defaults'}")
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        print("\nShutting down...")
        server.shutdown()


if __name__ == "__main__":
    import argparse
    parser = argparse.ArgumentParser(description="listing-guard HTTP sidecar")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT)
    parser.add_argument("--rules", default=DEFAULT_RULES)
    args = parser.parse_args()
    logging.basicConfig(level=logging.INFO)
    serve(port=args.port, rules_path=args.rules)
