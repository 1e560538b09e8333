"""Utility for verifying that the back office can talk to its backend project.

The tool offers two checks:

1. ``config`` instantiates ``AppSettings`` from the provided ``.env`` file,
   surfacing missing or malformed configuration before the API starts failing.
2. ``probe`` additionally contacts the backend and reports whether the
   profiles / music / videos tables and the media buckets exist, and who the
   optional access token belongs to.

Example usages::

    python -m scripts.check_backend config --env-file /opt/showcase/.env

    python -m scripts.check_backend probe --env-file /opt/showcase/.env \
        --access-token "$ADMIN_TOKEN"
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from showcase.core.config import AppSettings, _load_env_file
from showcase.core.logging import configure_logging
from showcase.services.context import ShowcaseContext
from showcase.services.diagnostics import DiagnosticsReport

EXIT_OK = 0
EXIT_VALIDATION_ERROR = 2
EXIT_BACKEND_ERROR = 3
EXIT_RUNTIME_ERROR = 5


def _load_settings(env_file: Path) -> AppSettings:
    """Ensure required settings can be loaded from the supplied env file."""
    _load_env_file(str(env_file))
    return AppSettings()  # type: ignore[call-arg]


def _ensure_env_file(env_file: Path) -> None:
    if not env_file.exists():
        raise FileNotFoundError(
            f"Environment file {env_file} does not exist. "
            "Ensure the path is correct or create it before running this tool."
        )


async def _run_probe(settings: AppSettings, access_token: Optional[str]) -> DiagnosticsReport:
    context = ShowcaseContext(settings)
    try:
        session = context.session(access_token=access_token)
        return await context.diagnostics(session).run()
    finally:
        await context.aclose()


def _print_report(report: DiagnosticsReport) -> None:
    print("Tables:")
    for table in report.tables:
        state = "ok" if table.exists and not table.error else "MISSING" if not table.exists else "UNREADABLE"
        suffix = f" ({table.error})" if table.error else ""
        print(f"  {table.table}: {state}{suffix}")

    print("Session:")
    session = report.session
    if session.error:
        print(f"  lookup failed: {session.error}")
    elif session.signed_in:
        role = "admin" if session.is_admin else "not admin"
        print(f"  signed in as {session.email or session.user_id} ({role})")
    else:
        print("  not signed in")

    print("Buckets:")
    for bucket in report.buckets:
        suffix = f" ({bucket.error})" if bucket.error else ""
        print(f"  {bucket.bucket}: {'ok' if bucket.exists else 'MISSING'}{suffix}")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Validate settings and probe the backend project."
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    def add_common_arguments(subparser: argparse.ArgumentParser) -> None:
        subparser.add_argument(
            "--env-file",
            default=".env",
            type=Path,
            help="Path to the environment file (default: .env in the repo root).",
        )

    config_parser = subparsers.add_parser(
        "config",
        help="Validate settings without contacting the backend.",
    )
    add_common_arguments(config_parser)

    probe_parser = subparsers.add_parser(
        "probe",
        help="Validate settings, then check tables, buckets and the session.",
    )
    add_common_arguments(probe_parser)
    probe_parser.add_argument(
        "--access-token",
        default=None,
        help="Optional user access token to check sign-in and admin status.",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    env_file: Path = args.env_file

    try:
        _ensure_env_file(env_file)
        settings = _load_settings(env_file)
    except FileNotFoundError as exc:
        print(str(exc), file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    except ValidationError as exc:
        print(
            "Settings validation failed. Missing or invalid values detected:\n"
            f"{exc.json(indent=2)}",
            file=sys.stderr,
        )
        return EXIT_VALIDATION_ERROR

    if args.command == "config":
        print(f"Settings OK for {settings.supabase.url} ({settings.environment}).")
        return EXIT_OK

    configure_logging(settings.log_level)
    try:
        report = asyncio.run(_run_probe(settings, args.access_token))
    except Exception as exc:  # pylint: disable=broad-except
        print(f"Unexpected error while probing the backend: {exc}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    _print_report(report)
    return EXIT_OK if report.ok else EXIT_BACKEND_ERROR


if __name__ == "__main__":  # pragma: no cover - script entry point
    sys.exit(main())
