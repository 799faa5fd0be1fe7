#!/usr/bin/env python3
"""
Postboard -- command-line entry point.

Usage:
  python main.py serve
  python main.py serve --host 0.0.0.0 --port 8080
  python main.py serve --reload
  python main.py create-admin admin01

Environment variables (see core/config.py for the full list):
  SECRET_KEY     JWT signing key, at least 32 characters. Required unless DEBUG=true.
  DEBUG          true = generate a throwaway SECRET_KEY for local development.
  DATABASE_URL   SQLAlchemy URL. Defaults to a SQLite file next to the code.
  API_PREFIX     Mount all routes under this prefix, e.g. /api/v1.
"""

import argparse
import getpass
import sys

from auth.service import AuthService
from auth.store import UserStore
from core.config import get_settings
from core.results import Failure


def _serve(args: argparse.Namespace) -> int:
    import uvicorn

    uvicorn.run("asgi:app", host=args.host, port=args.port, reload=args.reload)
    return 0


def _create_admin(args: argparse.Namespace) -> int:
    """Seed an ADMIN account. Prompts for the password unless the hidden --password flag is given."""
    password = args.password or getpass.getpass("Password: ")
    settings = get_settings()
    store = UserStore(settings.database_url)
    try:
        result = AuthService(store, settings).ensure_admin(args.username, password)
    finally:
        store.close()

    if isinstance(result, Failure):
        print(f"  [!] {result.message}")
        for field, message in result.field_errors.items():
            print(f"      {field}: {message}")
        return 1
    user = result.value
    print(f"  Admin account ready: {user.username} (id={user.id}, role={user.role})")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="postboard", description="Postboard blog service")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the HTTP API with uvicorn")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)
    serve.add_argument("--reload", action="store_true", help="Restart on code changes (development only)")
    serve.set_defaults(func=_serve)

    admin = sub.add_parser("create-admin", help="Create an ADMIN account, or promote an existing account to ADMIN")
    admin.add_argument("username")
    admin.add_argument("--password", help=argparse.SUPPRESS)
    admin.set_defaults(func=_create_admin)

    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
