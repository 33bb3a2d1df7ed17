"""Shared utilities for CLI entrypoints."""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, TextIO

from bumptrack.api.client import ApiClient, AuthError
from bumptrack.api.services import AuthService, ContractionCounterApi, KickCounterApi
from bumptrack.auth.context import AuthContext
from bumptrack.auth.store import CredentialStore
from bumptrack.config.loader import Config, ConfigError, default_config, load_config
from bumptrack.feedback.notifications import ConsoleNotifier
from bumptrack.validation import ValidationError

DEFAULT_CONFIG_PATH = "config/example.yaml"
LOCAL_CONFIG_PATH = "config/local.yaml"

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_INVALID = 2
EXIT_SIGNED_OUT = 3

LOGGER = logging.getLogger(__name__)


@dataclass
class App:
    """Objects shared by every command, built once per invocation."""

    config: Config
    auth: AuthContext
    client: ApiClient
    notifier: ConsoleNotifier
    output: TextIO

    def auth_service(self) -> AuthService:
        return AuthService(self.client, self.auth)

    def kick_api(self) -> KickCounterApi:
        return KickCounterApi(self.client)

    def contraction_api(self) -> ContractionCounterApi:
        return ContractionCounterApi(self.client)


def add_common_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        dest="config",
        default=None,
        help=(
            "Path to YAML config file (default: "
            f"{LOCAL_CONFIG_PATH} if present, else {DEFAULT_CONFIG_PATH}, else built-in defaults)"
        ),
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging for troubleshooting",
    )


def configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="[%(levelname)s] %(message)s")
    if verbose:
        return
    # HTTP connection chatter only matters when debugging.
    for name in ("urllib3", "requests"):
        logging.getLogger(name).setLevel(logging.WARNING)


def load_cli_config(config_path: Optional[str]) -> Config:
    if config_path:
        resolved: Optional[str] = config_path
    else:
        local = Path(LOCAL_CONFIG_PATH)
        fallback = Path(DEFAULT_CONFIG_PATH)
        resolved = str(local) if local.exists() else (str(fallback) if fallback.exists() else None)
    try:
        if resolved is None:
            return default_config()
        return load_config(resolved)
    except ConfigError as exc:
        raise SystemExit(f"Config validation failed: {exc}") from exc


def build_app(config: Config, *, output: Optional[TextIO] = None) -> App:
    stream = output or sys.stdout
    auth = AuthContext(CredentialStore(config.auth.store_path))
    client = ApiClient(config.api, auth)
    return App(
        config=config,
        auth=auth,
        client=client,
        notifier=ConsoleNotifier(stream),
        output=stream,
    )


def require_sign_in(app: App) -> bool:
    if app.auth.is_authenticated():
        return True
    app.output.write("Not signed in. Run 'bumptrack-auth login' first.\n")
    return False


def run_command(handler: Callable[[], int], output: TextIO) -> int:
    """Map client-side failures onto exit codes."""
    try:
        return handler()
    except ValidationError as exc:
        for field, message in exc.errors.items():
            output.write(f"{field}: {message}\n")
        return EXIT_INVALID
    except AuthError as exc:
        LOGGER.debug("Authentication rejected: %s", exc)
        output.write("Your session has expired. Run 'bumptrack-auth login' to sign in again.\n")
        return EXIT_SIGNED_OUT
