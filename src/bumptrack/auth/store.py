"""Key-scoped credential storage backed by a JSON file."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

LOGGER = logging.getLogger(__name__)

TOKEN_KEY = "token"
USER_KEY = "user"


class CredentialStore:
    """Persists string values under fixed keys.

    With no ``path`` the store lives in memory only, which is what tests and
    one-shot scripts use.
    """

    def __init__(self, path: Optional[str | Path] = None) -> None:
        self._path = Path(path) if path is not None else None
        self._values: Dict[str, str] = {}
        if self._path is not None:
            self._values = self._read(self._path)

    @property
    def path(self) -> Optional[Path]:
        return self._path

    def get(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value
        self._write()

    def remove(self, key: str) -> None:
        if self._values.pop(key, None) is not None:
            self._write()

    def _read(self, path: Path) -> Dict[str, str]:
        if not path.exists():
            return {}
        try:
            data: Any = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            LOGGER.warning("Credential store %s is invalid; starting empty (%s)", path, exc)
            return {}
        if not isinstance(data, dict):
            LOGGER.warning("Credential store %s is not a mapping; starting empty", path)
            return {}
        return {str(key): str(value) for key, value in data.items() if isinstance(value, str)}

    def _write(self) -> None:
        if self._path is None:
            return
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps(self._values, indent=2), encoding="utf-8")
        try:
            self._path.chmod(0o600)
        except OSError as exc:
            LOGGER.debug("Could not restrict permissions on %s: %s", self._path, exc)


__all__ = ["CredentialStore", "TOKEN_KEY", "USER_KEY"]
