"""Explicit authentication context shared by the API client and entry points."""

from __future__ import annotations

import json
import logging
from typing import Optional

from pydantic import ValidationError as SchemaError

from bumptrack.api.schemas import User
from bumptrack.auth.store import TOKEN_KEY, USER_KEY, CredentialStore

LOGGER = logging.getLogger(__name__)


class AuthContext:
    """Owns the signed-in token and user profile.

    Components receive an instance from the composition root and never read
    the underlying store themselves.
    """

    def __init__(self, store: CredentialStore) -> None:
        self._store = store

    @property
    def token(self) -> Optional[str]:
        return self._store.get(TOKEN_KEY)

    def is_authenticated(self) -> bool:
        return bool(self.token)

    def current_user(self) -> Optional[User]:
        raw = self._store.get(USER_KEY)
        if not raw:
            return None
        try:
            return User.model_validate(json.loads(raw))
        except (json.JSONDecodeError, SchemaError) as exc:
            LOGGER.warning("Stored user profile is unreadable: %s", exc)
            return None

    def login(self, token: str, user: Optional[User]) -> None:
        self._store.set(TOKEN_KEY, token)
        if user is not None:
            self._store.set(USER_KEY, user.model_dump_json(by_alias=True, exclude_none=True))
        else:
            self._store.remove(USER_KEY)
        LOGGER.debug("Signed in as %s", user.email if user and user.email else "<unknown>")

    def logout(self) -> None:
        self._store.remove(TOKEN_KEY)
        self._store.remove(USER_KEY)


__all__ = ["AuthContext"]
