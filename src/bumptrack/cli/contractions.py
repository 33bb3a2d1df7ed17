"""Contraction counter commands, including start/end and press-and-hold recording."""

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
from bumptrack.history.aggregates import persist_summary, summarize_contractions
from bumptrack.tracker.contractions import ContractionTracker
from bumptrack.tracker.ticker import Ticker

LOGGER = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bumptrack-contractions",
        description="Time contractions and the intervals between them.",
    )
    add_common_args(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("list", help="List contraction counter sessions")
    subparsers.add_parser("new", help="Open a new contraction counter session")
    subparsers.add_parser(
        "record",
        help="Press and hold: Enter when a contraction starts, Enter again when it ends",
    )

    for name, help_text in (
        ("close", "Close an active session"),
        ("delete", "Delete a session and its logs"),
        ("logs", "Show the contractions recorded for a session"),
        ("start", "Start a contraction on a session; press Enter to end it"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("session_id", help="Contraction counter session ID")

    delete_log = subparsers.add_parser("delete-log", help="Delete one recorded contraction")
    delete_log.add_argument("session_id", help="Contraction counter session ID")
    delete_log.add_argument("log_id", help="Contraction log ID")

    summary = subparsers.add_parser("summary", help="Write a JSON summary of a session's contractions")
    summary.add_argument("session_id", help="Contraction counter session ID")
    summary.add_argument(
        "--out",
        default="summaries/contractions.json",
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
    tracker = ContractionTracker(
        app.contraction_api(),
        app.notifier,
        pressure_ramp_seconds=config.timers.pressure_ramp_seconds,
    )
    return run_command(lambda: ContractionCommands(app, tracker, stdin or sys.stdin).run(args), app.output)


class ContractionCommands:
    """Runs one contraction counter command against a freshly loaded tracker."""

    def __init__(self, app: App, tracker: ContractionTracker, stdin: TextIO) -> None:
        self._app = app
        self._tracker = tracker
        self._stdin = stdin
        self._out = app.output
        self._interval_s = app.config.timers.tick_interval_ms / 1000.0

    def run(self, args: argparse.Namespace) -> int:
        if not self._tracker.refresh():
            return EXIT_FAILED
        command = args.command
        if command == "list":
            reporter = ConsoleStatusReporter(output=self._out, clock_ms=self._tracker.clock)
            reporter.render_contractions(self._tracker, force=True)
            return EXIT_OK
        if command == "new":
            created = self._tracker.create_session()
            if created is None:
                return EXIT_FAILED
            self._out.write(f"{created.id}\n")
            return EXIT_OK
        if command == "close":
            return EXIT_OK if self._tracker.close_session(args.session_id) else EXIT_FAILED
        if command == "delete":
            return EXIT_OK if self._tracker.delete_session(args.session_id) else EXIT_FAILED
        if command == "logs":
            logs = self._tracker.fetch_logs(args.session_id)
            if logs is None:
                return EXIT_FAILED
            ConsoleStatusReporter(output=self._out).render_contraction_logs(logs)
            return EXIT_OK
        if command == "delete-log":
            if self._tracker.fetch_logs(args.session_id) is None:
                return EXIT_FAILED
            return EXIT_OK if self._tracker.delete_log(args.log_id) else EXIT_FAILED
        if command == "summary":
            return self._write_summary(args.session_id, Path(args.out))
        if command == "start":
            return self._start(args.session_id)
        if command == "record":
            return self._record()
        raise ValueError(f"Unknown command {command}")

    def _write_summary(self, session_id: str, out_path: Path) -> int:
        logs = self._tracker.fetch_logs(session_id)
        if logs is None:
            return EXIT_FAILED
        summary = summarize_contractions(logs)
        if summary is None:
            self._out.write("No contractions recorded for this session.\n")
            return EXIT_FAILED
        persist_summary({"session_id": session_id, "contractions": summary.to_dict()}, out_path=out_path)
        self._out.write(f"Summary written to {out_path}\n")
        return EXIT_OK

    def _start(self, session_id: str) -> int:
        if not self._tracker.start_contraction(session_id):
            return EXIT_FAILED
        self._out.write("Press Enter when the contraction ends.\n")
        with self._pressure_gauge():
            self._stdin.readline()
        return EXIT_OK if self._tracker.end_contraction(session_id) else EXIT_FAILED

    def _record(self) -> int:
        self._out.write("Press Enter when the contraction starts.\n")
        if not self._stdin.readline():
            return EXIT_FAILED
        if not self._tracker.press():
            return EXIT_FAILED
        self._out.write("Press Enter when the contraction ends.\n")
        with self._pressure_gauge():
            self._stdin.readline()
        return EXIT_OK if self._tracker.release() else EXIT_FAILED

    def _pressure_gauge(self) -> Ticker:
        reporter = ConsoleStatusReporter(refresh_interval=self._interval_s, output=self._out)

        def _on_tick() -> None:
            reporter.render_pressure(self._tracker.tick())

        return Ticker(self._interval_s, _on_tick, name="bumptrack-pressure")


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
