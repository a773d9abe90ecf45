"""Command-line interface for the UserHub service."""

from __future__ import annotations
import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Iterable, Sequence


def _running_in_virtualenv() -> bool:
    """Return ``True`` when the current interpreter is executing inside a venv."""

    base_prefix = getattr(sys, "base_prefix", sys.prefix)
    return sys.prefix != base_prefix


def _bootstrap_virtualenv() -> None:
    """Re-exec the script using the bundled virtualenv interpreter when available."""

    if _running_in_virtualenv():
        return

    root = Path(__file__).resolve().parent
    venv_dir = root / ".venv"
    if not venv_dir.is_dir():
        return

    candidates = (
        venv_dir / "bin" / "python",
        venv_dir / "bin" / "python3",
        venv_dir / "Scripts" / "python.exe",
        venv_dir / "Scripts" / "python",
    )

    script = str(Path(__file__).resolve())
    for candidate in candidates:
        if candidate.exists():
            os.execv(str(candidate), [str(candidate), script, *sys.argv[1:]])


if __name__ == "__main__":
    _bootstrap_virtualenv()

import httpx

from userhub.config import Settings, load_settings
from userhub.database import Database
from userhub.models import User

logger = logging.getLogger("userhub.main")

_KNOWN_COMMANDS = {"serve", "init-db", "users", "ask"}


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--config",
        default=None,
        help="Path to the YAML configuration file (default: USERHUB_CONFIG or config/userhub.yaml)",
    )

    parser = argparse.ArgumentParser(description="UserHub directory and prompt utilities")
    subparsers = parser.add_subparsers(dest="command")

    parser.set_defaults(command="serve")

    subparsers.add_parser("init-db", parents=[common], help="Initialise the user database")

    serve_parser = subparsers.add_parser("serve", parents=[common], help="Start the HTTP service")
    serve_parser.add_argument("--host", default="0.0.0.0", help="Bind address for the API")
    serve_parser.add_argument(
        "--port",
        type=int,
        default=8080,
        help="Port for the HTTP API (default: 8080)",
    )

    users_parser = subparsers.add_parser("users", parents=[common], help="List stored users")
    users_parser.add_argument(
        "--service-url",
        default=None,
        help="Read users from a running service instead of the local database",
    )

    ask_parser = subparsers.add_parser("ask", parents=[common], help="Send a prompt to the configured model")
    ask_parser.add_argument("prompt", help="Prompt text sent as a single user message")

    args_list = list(argv) if argv is not None else sys.argv[1:]

    if not args_list:
        args_list = ["serve"]
    else:
        first = args_list[0]
        if first in ("-h", "--help"):
            return parser.parse_args(args_list)
        if first not in _KNOWN_COMMANDS:
            if any(flag in args_list for flag in ("-h", "--help")):
                return parser.parse_args(args_list)
            args_list = ["serve", *args_list]

    return parser.parse_args(args_list)


def _load_settings(config: str | None) -> Settings:
    if config:
        return load_settings(Path(config).expanduser())
    return load_settings()


def _initialise_database(settings: Settings) -> Database:
    database = Database(settings.database_path)
    database.initialize()
    logger.info("Database initialised at %s", settings.database_path)
    return database


def _serve(*, settings: Settings, database: Database, host: str, port: int) -> None:
    from userhub.application import create_application
    import uvicorn

    logger.info("Starting UserHub API on http://%s:%s", host, port)

    app = create_application(settings=settings, database=database)
    uvicorn.run(app, host=host, port=port, log_level="info")


def _print_users(users: Iterable[User]) -> None:
    users = list(users)
    if not users:
        print("No users are currently stored.")
        return

    print(f"{len(users)} user(s) found:")
    print(f"{'ID':>4}  {'Name':<24}  {'Email':<32}  {'Phone':<16}  Department")
    print("-" * 96)
    for user in users:
        print(
            f"{user.id:>4}  {user.name or '-':<24}  {user.email or '-':<32}  "
            f"{user.phone or '-':<16}  {user.department or '-'}"
        )


def _fetch_remote_users(service_url: str) -> list[User]:
    endpoint = service_url.rstrip("/") + "/api/users"
    try:
        response = httpx.get(endpoint, timeout=10.0)
        response.raise_for_status()
    except httpx.HTTPError as exc:
        raise SystemExit(f"Failed to fetch users from {endpoint}: {exc}") from exc

    payload = response.json()
    if not isinstance(payload, list):
        raise SystemExit(f"Unexpected response from {endpoint}")

    return [
        User(
            id=item.get("id"),
            name=item.get("name"),
            email=item.get("email"),
            phone=item.get("phone"),
            department=item.get("department"),
        )
        for item in payload
        if isinstance(item, dict)
    ]


def _ask(settings: Settings, prompt: str) -> None:
    from userhub.prompts import create_prompt_gateway

    if not settings.llm.enabled:
        raise SystemExit("No Anthropic API key configured. Set ANTHROPIC_API_KEY or llm.api_key.")

    gateway = create_prompt_gateway(settings.llm)
    print(gateway.ask(prompt))


def main(argv: Sequence[str] | None = None) -> None:
    """Entry point for CLI usage."""

    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s")

    args = _parse_args(argv)
    settings = _load_settings(args.config)

    if args.command == "ask":
        _ask(settings, args.prompt)
        return

    if args.command == "users" and args.service_url:
        _print_users(_fetch_remote_users(args.service_url))
        return

    database = _initialise_database(settings)

    if args.command == "serve":
        _serve(settings=settings, database=database, host=args.host, port=args.port)
    elif args.command == "users":
        _print_users(database.list_users())
    elif args.command == "init-db":
        print("Database initialisation complete.")


if __name__ == "__main__":
    main()
