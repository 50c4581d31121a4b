#!/usr/bin/env python3
"""
bootcamp-auth -- Username/password authentication service.

Usage:
  python main.py serve
  python main.py serve --host 0.0.0.0 --port 8080
  python main.py create-user --username alice --name Alice --email alice@example.com
  python main.py issue-token alice

Environment variables (see core/config.py):
  SECRET_KEY     Token signing key, at least 32 characters. Required unless DEBUG=true.
  DATABASE_URL   SQLAlchemy URL of the user store (default: SQLite next to the code).
  DEBUG          true to auto-generate a throwaway SECRET_KEY for local development.
"""

from __future__ import annotations

import argparse
import getpass
import logging
from typing import Optional

from auth.errors import AuthError, ConflictError, NotFoundError
from auth.models import RegistrationRequest
from auth.service import AuthService
from auth.store import UserStore
from auth.tokens import TokenService
from core.config import Settings, get_settings

logger = logging.getLogger("bootcamp.cli")


def _build_service(settings: Settings, db_url: Optional[str]) -> AuthService:
    store = UserStore(db_url or settings.database_url)
    return AuthService(store, TokenService.from_settings(settings))


def _cmd_serve(args: argparse.Namespace, settings: Settings) -> int:
    import uvicorn

    uvicorn.run("asgi:app", host=args.host, port=args.port, reload=args.reload, log_level=settings.log_level.lower())
    return 0


def _cmd_create_user(args: argparse.Namespace, settings: Settings) -> int:
    password = args.password
    if password is None:
        password = getpass.getpass("Password: ")
        if password != getpass.getpass("Repeat password: "):
            print("  [!] Passwords do not match.")
            return 1

    service = _build_service(settings, args.db_url)
    try:
        result = service.register(
            RegistrationRequest(name=args.name, username=args.username, email=args.email, password=password)
        )
    except ConflictError as exc:
        print(f"  [!] A user with that {exc.reason} already exists.")
        return 1
    except AuthError as exc:
        print(f"  [!] Could not create user: {exc.message}")
        return 1
    finally:
        service.store.close()

    print(f"Created user {result.user.username} ({result.user.id})")
    if args.show_token:
        print(result.access_token)
    return 0


def _cmd_issue_token(args: argparse.Namespace, settings: Settings) -> int:
    service = _build_service(settings, args.db_url)
    try:
        user = service.store.get_by_username(args.username)
    except NotFoundError:
        print(f"  [!] No user named '{args.username}'.")
        return 1
    except AuthError as exc:
        print(f"  [!] Could not look up user: {exc.message}")
        return 1
    finally:
        service.store.close()

    print(service.tokens.issue(user.id, user.username, user.email))
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="bootcamp-auth",
        description="Username/password registration, login and bearer-token validation.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py serve --reload
  python main.py create-user --username alice --name Alice --email alice@example.com
  python main.py issue-token alice
  DATABASE_URL=postgresql://user:pw@host/auth python main.py serve
        """,
    )
    parser.add_argument(
        "--db-url",
        metavar="URL",
        default=None,
        help="SQLAlchemy database URL (overrides DATABASE_URL)",
    )
    sub = parser.add_subparsers(dest="command", metavar="COMMAND")

    serve = sub.add_parser("serve", help="Run the HTTP API with uvicorn")
    serve.add_argument("--host", default="127.0.0.1", help="Bind address (default: 127.0.0.1)")
    serve.add_argument("--port", type=int, default=8000, help="Bind port (default: 8000)")
    serve.add_argument("--reload", action="store_true", help="Restart on code changes (development only)")

    create = sub.add_parser("create-user", help="Register a user from the command line")
    create.add_argument("--username", required=True)
    create.add_argument("--name", required=True)
    create.add_argument("--email", required=True)
    create.add_argument(
        "--password",
        default=None,
        help="Password (prompted for when omitted; avoid passing it on shared machines)",
    )
    create.add_argument("--show-token", action="store_true", help="Print the access token issued on creation")

    issue = sub.add_parser("issue-token", help="Print an access token for an existing user")
    issue.add_argument("username")

    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help()
        return 0

    settings = get_settings()
    logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)-5s %(name)s %(message)s")

    handlers = {
        "serve": _cmd_serve,
        "create-user": _cmd_create_user,
        "issue-token": _cmd_issue_token,
    }
    return handlers[args.command](args, settings)


if __name__ == "__main__":
    raise SystemExit(main())
