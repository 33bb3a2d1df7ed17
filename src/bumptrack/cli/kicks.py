"""Kick counter commands, including an interactive countdown view."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence, TextIO

from bumptrack.cli._helpers import (
    EXIT_FAILED,
    EXIT_OK,
    App,
    add_common_args,
    build_app,
    configure_logging,
    load_cli_config,
    require_sign_in,
    run_command,
)
from bumptrack.feedback.status import ConsoleStatusReporter
from bumptrack.history.aggregates import persist_summary, summarize_kicks
from bumptrack.tracker.kicks import KickTracker
from bumptrack.tracker.ticker import Ticker
from bumptrack.tracker.timing import format_time_remaining

LOGGER = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bumptrack-kicks",
        description="Count fetal kicks within a fixed period.",
    )
    add_common_args(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("list", help="List kick counter sessions")

    new = subparsers.add_parser("new", help="Start a new kick counter session")
    new.add_argument(
        "--period",
        type=int,
        default=None,
        help="Counting period in hours, 1-24 (default: kick.default_period_hours)",
    )

    for name, help_text in (
        ("kick", "Record one kick now"),
        ("finish", "Finish a session"),
        ("delete", "Delete a session and its logs"),
        ("logs", "Show the kicks recorded for a session"),
        ("watch", "Live countdown; press Enter to record a kick"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("session_id", help="Kick counter session ID")

    delete_log = subparsers.add_parser("delete-log", help="Delete one recorded kick")
    delete_log.add_argument("session_id", help="Kick counter session ID")
    delete_log.add_argument("log_id", help="Kick log ID")

    summary = subparsers.add_parser("summary", help="Write a JSON summary of a session's kicks")
    summary.add_argument("session_id", help="Kick counter session ID")
    summary.add_argument(
        "--out",
        default="summaries/kicks.json",
        help="Path to write the summary JSON (default: %(default)s)",
    )
    return parser


def main(
    argv: Sequence[str] | None = None,
    *,
    output: Optional[TextIO] = None,
    stdin: Optional[TextIO] = None,
) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(args.verbose)
    config = load_cli_config(args.config)
    LOGGER.debug("Config loaded (version=%s, api=%s)", config.config_version, config.api.base_url)
    app = build_app(config, output=output)
    if not require_sign_in(app):
        return EXIT_FAILED
    tracker = KickTracker(app.kick_api(), app.notifier)
    return run_command(lambda: KickCommands(app, tracker, stdin or sys.stdin).run(args), app.output)


class KickCommands:
    """Runs one kick counter command against a freshly loaded tracker."""

    def __init__(self, app: App, tracker: KickTracker, stdin: TextIO) -> None:
        self._app = app
        self._tracker = tracker
        self._stdin = stdin
        self._out = app.output

    def run(self, args: argparse.Namespace) -> int:
        if not self._tracker.refresh():
            return EXIT_FAILED
        command = args.command
        if command == "list":
            self._print_sessions()
            return EXIT_OK
        if command == "new":
            period = args.period if args.period is not None else self._app.config.kick.default_period_hours
            created = self._tracker.create_session(period)
            if created is None:
                return EXIT_FAILED
            self._out.write(f"{created.id}\n")
            return EXIT_OK
        if command == "kick":
            return EXIT_OK if self._tracker.record_kick(args.session_id) else EXIT_FAILED
        if command == "finish":
            return EXIT_OK if self._tracker.finish_session(args.session_id) else EXIT_FAILED
        if command == "delete":
            return EXIT_OK if self._tracker.delete_session(args.session_id) else EXIT_FAILED
        if command == "logs":
            logs = self._tracker.fetch_logs(args.session_id)
            if logs is None:
                return EXIT_FAILED
            ConsoleStatusReporter(output=self._out).render_kick_logs(logs)
            return EXIT_OK
        if command == "delete-log":
            if self._tracker.fetch_logs(args.session_id) is None:
                return EXIT_FAILED
            return EXIT_OK if self._tracker.delete_log(args.log_id) else EXIT_FAILED
        if command == "summary":
            return self._write_summary(args.session_id, Path(args.out))
        if command == "watch":
            return self._watch(args.session_id)
        raise ValueError(f"Unknown command {command}")

    def _print_sessions(self) -> None:
        self._tracker.tick()
        reporter = ConsoleStatusReporter(output=self._out, clock_ms=self._tracker.clock)
        reporter.render_kicks(self._tracker, force=True)

    def _write_summary(self, session_id: str, out_path: Path) -> int:
        session = self._tracker.session(session_id)
        if session is None:
            self._out.write(f"No kick counter with id {session_id}.\n")
            return EXIT_FAILED
        logs = self._tracker.fetch_logs(session_id)
        if logs is None:
            return EXIT_FAILED
        summary = summarize_kicks(session, logs, self._tracker.clock())
        persist_summary({"kicks": summary.to_dict()}, out_path=out_path)
        self._out.write(f"Summary written to {out_path}\n")
        return EXIT_OK

    def _watch(self, session_id: str) -> int:
        if self._tracker.session(session_id) is None:
            self._out.write(f"No kick counter with id {session_id}.\n")
            return EXIT_FAILED
        reporter = ConsoleStatusReporter(
            refresh_interval=self._app.config.timers.tick_interval_ms / 1000.0,
            output=self._out,
            clock_ms=self._tracker.clock,
        )

        def _on_tick() -> None:
            timer = self._tracker.tick().get(session_id)
            if timer is not None:
                reporter.render_kicks(self._tracker)

        self._out.write("Press Enter to record a kick, 'f' + Enter to finish, 'q' + Enter to quit.\n")
        reporter.render_kicks(self._tracker, force=True)
        with Ticker(self._app.config.timers.tick_interval_ms / 1000.0, _on_tick):
            for line in self._stdin:
                choice = line.strip().lower()
                if choice == "q":
                    break
                if choice == "f":
                    self._tracker.finish_session(session_id)
                    break
                self._tracker.record_kick(session_id)
                timer = self._tracker.timer_for(session_id)
                if timer is not None:
                    self._out.write(f"Time remaining {format_time_remaining(timer.remaining_ms)}\n")
        reporter.render_kicks(self._tracker, force=True)
        return EXIT_OK


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
