"""Command-line interface for the rental inquiry service."""

from __future__ import annotations

import argparse
import logging
import sys
from getpass import getpass
from typing import Sequence

from rentals.config import Settings, load_settings
from rentals.errors import ConfigurationError, DuplicateUsernameError
from rentals.storage import Storage, create_storage

logger = logging.getLogger("rentals.main")

# Commands whose effects are lost unless the backend outlives the process.
PERSISTENT_COMMANDS = {"create-user", "list-inquiries"}


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Rental inquiry service utilities")
    subparsers = parser.add_subparsers(dest="command")

    parser.set_defaults(command="serve")

    serve_parser = subparsers.add_parser("serve", help="Start the HTTP API")
    serve_parser.add_argument("--host", default=None, help="Bind address (default: HOST or 0.0.0.0)")
    serve_parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port for the HTTP API (default: PORT or 5000)",
    )

    subparsers.add_parser("init-db", help="Initialise the configured storage backend")

    user_parser = subparsers.add_parser("create-user", help="Create a user account")
    user_parser.add_argument("username", help="Unique username for the account")

    subparsers.add_parser("list-inquiries", help="Print stored rental inquiries, newest first")

    args_list = list(argv) if argv is not None else sys.argv[1:]
    known_commands = {"serve", "init-db", "create-user", "list-inquiries"}

    if not args_list:
        args_list = ["serve"]
    else:
        first = args_list[0]
        if first in ("-h", "--help"):
            return parser.parse_args(args_list)
        if first not in known_commands:
            args_list = ["serve", *args_list]

    return parser.parse_args(args_list)


def _serve(*, settings: Settings, storage: Storage, host: str | None, port: int | None) -> None:
    from rentals.service import create_app
    import uvicorn

    bind_host = host or settings.host
    bind_port = port or settings.port
    logger.info("Starting rental inquiry API on http://%s:%s", bind_host, bind_port)

    app = create_app(storage=storage, settings=settings)
    uvicorn.run(app, host=bind_host, port=bind_port, log_level=settings.log_level.lower())


def _prompt_for_password() -> str | None:
    for _ in range(3):
        password = getpass("Password: ")
        if not password:
            print("Password is required. Please try again.")
            continue
        confirmation = getpass("Confirm password: ")
        if password != confirmation:
            print("Passwords do not match. Please try again.")
            continue
        return password
    return None


def _create_user(storage: Storage, username: str) -> int:
    from rentals.schema import validate_user

    password = _prompt_for_password()
    if password is None:
        print("Aborted creating user.", file=sys.stderr)
        return 1

    result = validate_user({"username": username.strip(), "password": password})
    if not result.ok or result.value is None:
        for error in result.errors:
            print(f"Error: {error.message}", file=sys.stderr)
        return 1

    try:
        user = storage.create_user(result.value)
    except DuplicateUsernameError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    print(f"Created user {user.id}: {user.username}")
    return 0


def _list_inquiries(storage: Storage) -> int:
    inquiries = storage.get_all_rental_inquiries()
    if not inquiries:
        print("No rental inquiries have been stored.")
        return 0

    print(f"{len(inquiries)} inquiry(ies) found:")
    print(f"{'Created':<20}  {'Name':<28}  {'Package':<18}  ID")
    print("-" * 100)
    for inquiry in inquiries:
        created = inquiry.created_at.strftime("%Y-%m-%d %H:%M:%S")
        name = f"{inquiry.first_name} {inquiry.last_name}"
        print(f"{created:<20}  {name:<28}  {inquiry.package_interest:<18}  {inquiry.id}")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for CLI usage."""

    args = _parse_args(argv)

    try:
        settings = load_settings()
    except ConfigurationError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 2

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    if args.command in PERSISTENT_COMMANDS and settings.storage == "memory":
        print(
            f"The {args.command} command needs persistent storage; "
            "set RENTALS_STORAGE=sqlite (and optionally RENTALS_DB_PATH).",
            file=sys.stderr,
        )
        return 2

    try:
        storage = create_storage(settings)
    except ConfigurationError as exc:
        logger.error("%s", exc)
        return 2

    if args.command == "serve":
        _serve(settings=settings, storage=storage, host=args.host, port=args.port)
    elif args.command == "init-db":
        if settings.storage == "memory":
            print("In-memory storage needs no initialisation.")
        else:
            print("Storage initialisation complete.")
    elif args.command == "create-user":
        return _create_user(storage, args.username)
    elif args.command == "list-inquiries":
        return _list_inquiries(storage)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
