"""Typed wrappers around the REST endpoints."""

from __future__ import annotations

import logging
from typing import Any, List, Optional, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as SchemaError

from bumptrack.api.client import ApiClient, RequestError
from bumptrack.api.schemas import (
    ContractionLog,
    ContractionSession,
    ContractionStatus,
    CreateContractionLog,
    CreateContractionSession,
    CreateKickLog,
    CreateKickSession,
    KickLog,
    KickSession,
    SignInResponse,
    User,
    ms_to_iso,
)
from bumptrack.auth.context import AuthContext
from bumptrack.validation import validate_login, validate_signup

LOGGER = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class AuthService:
    """Sign-in, sign-up and sign-out against ``/auth``."""

    def __init__(self, client: ApiClient, auth: AuthContext) -> None:
        self._client = client
        self._auth = auth

    def sign_in(self, email: str, password: str) -> Optional[User]:
        validate_login(email, password)
        body = self._client.post("/auth/signin", {"email": email.strip(), "password": password})
        response = _parse(SignInResponse, body)
        if response.access_token:
            self._auth.login(response.access_token, response.user)
        return response.user

    def sign_up(self, name: str, email: str, password: str, confirm_password: str) -> Any:
        validate_signup(name, email, password, confirm_password)
        return self._client.post(
            "/auth/signup",
            {"name": name.strip(), "email": email.strip(), "password": password},
        )

    def sign_out(self) -> None:
        self._auth.logout()


class KickCounterApi:
    def __init__(self, client: ApiClient) -> None:
        self._client = client

    def create_session(self, started_at_ms: int, period: Optional[int] = None) -> KickSession:
        payload = CreateKickSession(started_at=ms_to_iso(started_at_ms), period=period)
        body = self._client.post("/kick-counters", _dump(payload))
        return _parse(KickSession, body)

    def list_sessions(self) -> List[KickSession]:
        return _parse_list(KickSession, self._client.get("/kick-counters/my"))

    def get_session(self, session_id: str) -> KickSession:
        return _parse(KickSession, self._client.get(f"/kick-counters/{session_id}"))

    def create_log(self, session_id: str, happened_at_ms: int) -> KickLog:
        payload = CreateKickLog(counter_id=session_id, happened_at=ms_to_iso(happened_at_ms))
        return _parse(KickLog, self._client.post("/kick-logs", _dump(payload)))

    def finish_session(self, session_id: str) -> KickSession:
        return _parse(KickSession, self._client.put(f"/kick-counters/{session_id}/complete"))

    def delete_session(self, session_id: str) -> None:
        self._client.delete(f"/kick-counters/{session_id}")

    def list_logs(self, session_id: str) -> List[KickLog]:
        return _parse_list(KickLog, self._client.get(f"/kick-logs/counter/{session_id}"))

    def delete_log(self, log_id: str) -> None:
        self._client.delete(f"/kick-logs/{log_id}")


class ContractionCounterApi:
    """Contraction sessions and their logs."""

    def __init__(self, client: ApiClient) -> None:
        self._client = client

    def create_session(self) -> ContractionSession:
        payload = CreateContractionSession(status=ContractionStatus.ACTIVE)
        body = self._client.post("/contraction-counters", _dump(payload))
        return _parse(ContractionSession, body)

    def list_sessions(self) -> List[ContractionSession]:
        return _parse_list(ContractionSession, self._client.get("/contraction-counters/my"))

    def get_session(self, session_id: str) -> ContractionSession:
        return _parse(ContractionSession, self._client.get(f"/contraction-counters/{session_id}"))

    def close_session(self, session_id: str) -> ContractionSession:
        return _parse(ContractionSession, self._client.patch(f"/contraction-counters/{session_id}/close"))

    def delete_session(self, session_id: str) -> None:
        self._client.delete(f"/contraction-counters/{session_id}")

    def create_log(
        self,
        session_id: str,
        started_at_ms: int,
        ended_at_ms: int,
        duration: int,
    ) -> ContractionLog:
        payload = CreateContractionLog(
            counter_id=session_id,
            started_at=ms_to_iso(started_at_ms),
            ended_at=ms_to_iso(ended_at_ms),
            duration=duration,
        )
        return _parse(ContractionLog, self._client.post("/contraction-logs", _dump(payload)))

    def list_logs(self, session_id: str) -> List[ContractionLog]:
        return _parse_list(ContractionLog, self._client.get(f"/contraction-logs/counter/{session_id}"))

    def delete_log(self, log_id: str) -> None:
        self._client.delete(f"/contraction-logs/{log_id}")


def _dump(payload: BaseModel) -> dict:
    return payload.model_dump(mode="json", by_alias=True, exclude_none=True)


def _parse(model: Type[ModelT], body: Any) -> ModelT:
    try:
        return model.model_validate(body)
    except SchemaError as exc:
        LOGGER.debug("Rejected %s payload: %s", model.__name__, body)
        raise RequestError(f"Unexpected {model.__name__} payload: {exc.error_count()} error(s)") from exc


def _parse_list(model: Type[ModelT], body: Any) -> List[ModelT]:
    if body is None:
        return []
    if not isinstance(body, list):
        raise RequestError(f"Expected a list of {model.__name__}")
    return [_parse(model, item) for item in body]


__all__ = [
    "AuthService",
    "ContractionCounterApi",
    "KickCounterApi",
]
