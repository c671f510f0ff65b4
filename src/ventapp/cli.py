"""Command-line entry point: run the API server or vent from the terminal.

Usage::

    vent serve [--host 127.0.0.1] [--port 8000]
    vent say "my landlord raised the rent again" [--lang en]
    vent history [--clear]
    vent lang [zh|en]

Commands:
    serve       Validate configuration and run the API server
    say         Send a complaint to the API and store the exchange
    history     Show (or clear) locally stored exchanges
    lang        Show or set the preferred language
"""

from __future__ import annotations

import argparse
import sys
from collections.abc import Callable

import httpx
import structlog
import uvicorn

from ventapp.config import Settings, get_settings, validate_startup
from ventapp.i18n import Language, translate
from ventapp.logging_config import configure_logging
from ventapp.storage.history import (
    HistoryEntry,
    HistoryRepository,
    JsonFileStore,
    PreferencesRepository,
)

logger = structlog.get_logger()

# Server-side retries can take up to ~3 * 8s + 3s of backoff.
CLIENT_TIMEOUT_SECONDS = 40.0


def _store(settings: Settings) -> JsonFileStore:
    return JsonFileStore(settings.state_path)


def serve(args: argparse.Namespace, settings: Settings) -> None:
    """Run the API server after validating required configuration."""
    configure_logging(
        environment=str(settings.environment),
        log_level=settings.log_level,
    )
    check = validate_startup(settings)
    if not check.ok:
        logger.critical("startup_config_invalid", missing=check.missing)
        print(
            f"Missing required environment variables: {', '.join(check.missing)}",
            file=sys.stderr,
        )
        sys.exit(1)

    uvicorn.run("ventapp.api.app:app", host=args.host, port=args.port)


def say(args: argparse.Namespace, settings: Settings) -> None:
    """Send one complaint; on success print and remember the reply."""
    store = _store(settings)
    prefs = PreferencesRepository(store)
    language = Language(args.lang) if args.lang else prefs.get_language()

    complaint = args.text.strip()
    if not complaint:
        print(translate(language, "empty_complaint"), file=sys.stderr)
        sys.exit(1)

    print(translate(language, "thinking"), file=sys.stderr)
    url = f"{(args.url or settings.api_url).rstrip('/')}/api/complain"
    try:
        response = httpx.post(
            url,
            json={"complaint": complaint, "language": language.value},
            timeout=CLIENT_TIMEOUT_SECONDS,
        )
    except httpx.HTTPError as exc:
        logger.debug("complain_request_failed", url=url, error=str(exc))
        print(translate(language, "error_message"), file=sys.stderr)
        sys.exit(1)

    try:
        data = response.json()
    except ValueError:
        data = {}

    reply = data.get("response") if isinstance(data, dict) else None
    if response.status_code != 200 or not isinstance(reply, str):
        message = data.get("error") if isinstance(data, dict) else None
        print(message or translate(language, "error_message"), file=sys.stderr)
        sys.exit(1)

    HistoryRepository(store).append(HistoryEntry(complaint=complaint, response=reply))
    print(reply)


def history(args: argparse.Namespace, settings: Settings) -> None:
    """Print stored exchanges, most recent first."""
    store = _store(settings)
    language = PreferencesRepository(store).get_language()
    repo = HistoryRepository(store)

    if args.clear:
        repo.clear()
        print(translate(language, "history_cleared"))
        return

    entries = repo.entries()
    if not entries:
        print(translate(language, "history_empty"))
        return

    print(translate(language, "history_title"))
    for entry in entries:
        stamp = entry.timestamp.astimezone().strftime("%Y-%m-%d %H:%M")
        print(f"\n[{stamp}]")
        print(f"> {entry.complaint}")
        print(entry.response)


def lang(args: argparse.Namespace, settings: Settings) -> None:
    """Show the preferred language, or switch it."""
    prefs = PreferencesRepository(_store(settings))
    if args.code:
        prefs.set_language(Language(args.code))
    print(translate(prefs.get_language(), "language_current"))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="vent", description="Let's Vent Together")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("serve", help="Run the API server")
    p.add_argument("--host", default="127.0.0.1", help="Bind address")
    p.add_argument("--port", type=int, default=8000, help="Bind port")

    p = sub.add_parser("say", help="Send a complaint")
    p.add_argument("text", help="What's bothering you")
    p.add_argument("--lang", choices=[code.value for code in Language])
    p.add_argument("--url", help="API base URL (default: API_URL setting)")

    p = sub.add_parser("history", help="Show stored exchanges")
    p.add_argument("--clear", action="store_true", help="Delete stored history")

    p = sub.add_parser("lang", help="Show or set the preferred language")
    p.add_argument("code", nargs="?", choices=[code.value for code in Language])

    return parser


COMMANDS: dict[str, Callable[[argparse.Namespace, Settings], None]] = {
    "serve": serve,
    "say": say,
    "history": history,
    "lang": lang,
}


def main(argv: list[str] | None = None) -> None:
    """Parse arguments and dispatch to a subcommand."""
    args = build_parser().parse_args(argv)
    settings = get_settings()
    if args.command != "serve":
        # stdout carries replies and history only.
        configure_logging(
            environment=str(settings.environment),
            log_level="WARNING",
            stream=sys.stderr,
        )
    COMMANDS[args.command](args, settings)


if __name__ == "__main__":
    main()
