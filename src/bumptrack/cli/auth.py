"""Sign-in, sign-up and sign-out commands."""

from __future__ import annotations

import argparse
import getpass
import logging
from typing import Optional, Sequence, TextIO

from bumptrack.api.client import ApiError
from bumptrack.cli._helpers import (
    EXIT_FAILED,
    EXIT_OK,
    App,
    add_common_args,
    build_app,
    configure_logging,
    load_cli_config,
    run_command,
)

LOGGER = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bumptrack-auth",
        description="Sign in to or out of the pregnancy-tracking service.",
    )
    add_common_args(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    login = subparsers.add_parser("login", help="Sign in and store the access token")
    login.add_argument("--email", required=True, help="Account email address")
    login.add_argument("--password", help="Account password (prompted when omitted)")

    signup = subparsers.add_parser("signup", help="Create a new account")
    signup.add_argument("--name", required=True, help="Display name")
    signup.add_argument("--email", required=True, help="Account email address")
    signup.add_argument("--password", help="Password (prompted when omitted)")
    signup.add_argument("--confirm-password", help="Password confirmation (prompted when omitted)")

    subparsers.add_parser("logout", help="Forget the stored credentials")
    subparsers.add_parser("whoami", help="Show the signed-in user")
    return parser


def main(argv: Sequence[str] | None = None, *, output: Optional[TextIO] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(args.verbose)
    config = load_cli_config(args.config)
    LOGGER.debug("Config loaded (version=%s, api=%s)", config.config_version, config.api.base_url)
    app = build_app(config, output=output)
    return run_command(lambda: _dispatch(app, args), app.output)


def _dispatch(app: App, args: argparse.Namespace) -> int:
    if args.command == "login":
        return _handle_login(app, args)
    if args.command == "signup":
        return _handle_signup(app, args)
    if args.command == "logout":
        app.auth_service().sign_out()
        app.output.write("Signed out.\n")
        return EXIT_OK
    user = app.auth.current_user()
    if not app.auth.is_authenticated():
        app.output.write("Not signed in.\n")
        return EXIT_FAILED
    label = (user.name or user.email) if user else None
    app.output.write(f"Signed in as {label or 'unknown user'}.\n")
    return EXIT_OK


def _handle_login(app: App, args: argparse.Namespace) -> int:
    password = args.password if args.password is not None else getpass.getpass("Password: ")
    try:
        user = app.auth_service().sign_in(args.email, password)
    except ApiError as exc:
        app.output.write(f"Login failed: {exc.message or 'Please try again.'}\n")
        return EXIT_FAILED
    if not app.auth.is_authenticated():
        app.output.write("Login failed: no access token returned.\n")
        return EXIT_FAILED
    name = (user.name or user.email) if user else args.email
    app.output.write(f"Signed in as {name}.\n")
    return EXIT_OK


def _handle_signup(app: App, args: argparse.Namespace) -> int:
    password = args.password if args.password is not None else getpass.getpass("Password: ")
    confirm = args.confirm_password
    if confirm is None:
        confirm = password if args.password is not None else getpass.getpass("Confirm password: ")
    try:
        app.auth_service().sign_up(args.name, args.email, password, confirm)
    except ApiError as exc:
        app.output.write(f"Registration failed: {exc.message or 'Please try again.'}\n")
        return EXIT_FAILED
    app.output.write("Registration successful! You can now sign in.\n")
    return EXIT_OK


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
