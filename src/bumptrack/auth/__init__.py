"""Credential storage and the signed-in context."""

from bumptrack.auth.context import AuthContext
from bumptrack.auth.store import TOKEN_KEY, USER_KEY, CredentialStore

__all__ = ["AuthContext", "CredentialStore", "TOKEN_KEY", "USER_KEY"]
