from __future__ import annotations

import json
import threading
from contextlib import contextmanager
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Dict, List, Tuple

import pytest

from bumptrack.api.client import ApiClient, AuthError, RequestError
from bumptrack.api.schemas import User
from bumptrack.api.services import AuthService, ContractionCounterApi, KickCounterApi
from bumptrack.auth.context import AuthContext
from bumptrack.auth.store import CredentialStore
from bumptrack.config.loader import ApiConfig
from bumptrack.validation import ValidationError

# (status, body) keyed by "METHOD /path"
Routes = Dict[str, Tuple[int, object]]


class _ApiHandler(BaseHTTPRequestHandler):
    routes: Routes = {}
    requests: List[dict] = []

    def _handle(self) -> None:
        length = int(self.headers.get("Content-Length", "0"))
        raw = self.rfile.read(length) if length else b""
        type(self).requests.append(
            {
                "method": self.command,
                "path": self.path,
                "authorization": self.headers.get("Authorization"),
                "body": json.loads(raw) if raw else None,
            }
        )
        status, body = type(self).routes.get(f"{self.command} {self.path}", (404, {"message": "Not Found"}))
        payload = b"" if body is None else json.dumps(body).encode("utf-8")
        self.send_response(status)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(payload)))
        self.end_headers()
        self.wfile.write(payload)

    do_GET = do_POST = do_PUT = do_PATCH = do_DELETE = _handle  # noqa: N815

    def log_message(self, format: str, *args: object) -> None:  # noqa: A003
        return


@contextmanager
def _run_server(routes: Routes):
    class Handler(_ApiHandler):
        pass

    Handler.routes = routes
    Handler.requests = []
    server = ThreadingHTTPServer(("127.0.0.1", 0), Handler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        yield f"http://127.0.0.1:{server.server_address[1]}", Handler
    finally:
        server.shutdown()
        server.server_close()
        thread.join(timeout=1)


def _client(base_url: str, auth: AuthContext, timeout_ms: int = 1000) -> ApiClient:
    return ApiClient(ApiConfig(base_url=base_url, timeout_ms=timeout_ms), auth)


def _signed_in() -> AuthContext:
    auth = AuthContext(CredentialStore())
    auth.login("tok-abc", User(id="u1", name="Ana", email="ana@bumptrack.app"))
    return auth


KICK_SESSION = {
    "id": "k1",
    "startedAt": "2026-10-19T08:00:00.000Z",
    "finishedAt": None,
    "kickCount": 4,
    "period": None,
    "isActive": True,
}


def test_bearer_token_attached_and_payload_parsed() -> None:
    routes: Routes = {"GET /kick-counters/my": (200, [KICK_SESSION])}
    with _run_server(routes) as (base_url, handler):
        sessions = KickCounterApi(_client(base_url, _signed_in())).list_sessions()

    assert handler.requests[0]["authorization"] == "Bearer tok-abc"
    assert len(sessions) == 1
    assert sessions[0].kick_count == 4
    assert sessions[0].period == 2
    assert sessions[0].running


def test_kick_log_request_uses_camel_case_iso_payload() -> None:
    log = {"id": 7, "counterId": "k1", "happenedAt": "2026-10-19T08:05:00.250Z"}
    routes: Routes = {"POST /kick-logs": (201, log)}
    with _run_server(routes) as (base_url, handler):
        created = KickCounterApi(_client(base_url, _signed_in())).create_log("k1", 1_792_397_100_250)

    assert handler.requests[0]["body"] == {"counterId": "k1", "happenedAt": "2026-10-19T08:05:00.250Z"}
    assert created.id == "7"


def test_unauthorized_response_signs_out() -> None:
    auth = _signed_in()
    routes: Routes = {"GET /contraction-counters/my": (401, {"message": "Unauthorized"})}
    with _run_server(routes) as (base_url, _handler):
        with pytest.raises(AuthError):
            ContractionCounterApi(_client(base_url, auth)).list_sessions()

    assert not auth.is_authenticated()
    assert auth.current_user() is None


def test_server_error_raises_request_error_with_message() -> None:
    auth = _signed_in()
    routes: Routes = {"DELETE /kick-counters/k1": (500, {"message": ["database", "unavailable"]})}
    with _run_server(routes) as (base_url, _handler):
        with pytest.raises(RequestError) as exc:
            KickCounterApi(_client(base_url, auth)).delete_session("k1")

    assert exc.value.status_code == 500
    assert exc.value.message == "database; unavailable"
    assert auth.is_authenticated()


def test_empty_body_is_accepted_for_deletes() -> None:
    routes: Routes = {"DELETE /contraction-logs/l1": (200, None)}
    with _run_server(routes) as (base_url, handler):
        ContractionCounterApi(_client(base_url, _signed_in())).delete_log("l1")
    assert handler.requests[0]["method"] == "DELETE"


def test_malformed_payload_raises_request_error() -> None:
    routes: Routes = {"GET /kick-counters/k1": (200, {"id": "k1"})}
    with _run_server(routes) as (base_url, _handler):
        with pytest.raises(RequestError):
            KickCounterApi(_client(base_url, _signed_in())).get_session("k1")


def test_unreachable_host_raises_request_error() -> None:
    client = _client("http://127.0.0.1:9", AuthContext(CredentialStore()), timeout_ms=200)
    with pytest.raises(RequestError):
        client.get("/kick-counters/my")


def test_sign_in_stores_token_and_user() -> None:
    auth = AuthContext(CredentialStore())
    routes: Routes = {
        "POST /auth/signin": (
            201,
            {"access_token": "tok-new", "user": {"id": 3, "name": "Ana", "email": "ana@bumptrack.app"}},
        )
    }
    with _run_server(routes) as (base_url, handler):
        user = AuthService(_client(base_url, auth), auth).sign_in(" ana@bumptrack.app ", "secret1")

    assert handler.requests[0]["authorization"] is None
    assert handler.requests[0]["body"] == {"email": "ana@bumptrack.app", "password": "secret1"}
    assert user is not None and user.id == "3"
    assert auth.token == "tok-new"


def test_invalid_sign_in_never_reaches_server() -> None:
    auth = AuthContext(CredentialStore())
    with _run_server({}) as (base_url, handler):
        with pytest.raises(ValidationError):
            AuthService(_client(base_url, auth), auth).sign_in("ana@bumptrack.app", "123")
    assert handler.requests == []


def test_contraction_close_uses_patch() -> None:
    closed = {"id": "c1", "status": "closed", "contractionLogs": None}
    routes: Routes = {"PATCH /contraction-counters/c1/close": (200, closed)}
    with _run_server(routes) as (base_url, _handler):
        session = ContractionCounterApi(_client(base_url, _signed_in())).close_session("c1")

    assert not session.active
    assert session.contraction_logs == []
