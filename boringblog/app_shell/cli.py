import argparse
import logging
import sys

from boringblog.adapters.auth.crypto import JWTAuthAdapter
from boringblog.adapters.clock import SystemClock
from boringblog.adapters.sqlite.database import Database
from boringblog.adapters.sqlite.migrator import SQLiteMigrator
from boringblog.adapters.sqlite.repos import SQLiteUserRepo
from boringblog.api.deps import Settings, get_settings
from boringblog.app_shell.config import configure_logging
from boringblog.components.auth import CreateUserInput, run_create_user
from boringblog.domain.errors import BlogError
from boringblog.rules.loader import load_rules

logger = logging.getLogger("cli")


def handle_migrate(settings: Settings, args: argparse.Namespace) -> int:
    Database(settings.db_path)  # creates the data directory
    applied = SQLiteMigrator(settings.db_path, str(settings.migrations_dir)).run_migrations()
    print(f"Applied {len(applied)} migration(s) to {settings.db_path}")
    return 0


def handle_create_user(settings: Settings, args: argparse.Namespace) -> int:
    rules = load_rules(settings.rules_path)
    db = Database(settings.db_path)
    SQLiteMigrator(settings.db_path, str(settings.migrations_dir)).run_migrations()

    try:
        output = run_create_user(
            CreateUserInput(
                email=args.email, name=args.name, password=args.password, role=args.role
            ),
            SQLiteUserRepo(db),
            JWTAuthAdapter(settings.secret_key),
            SystemClock(),
            min_length=rules.auth.password_min_length,
        )
    except BlogError as e:
        logger.error("Could not create user: %s", e.message)
        return 1

    print(f"Created {output.user.role} {output.user.email} ({output.user.id})")
    return 0


def handle_serve(settings: Settings, args: argparse.Namespace) -> int:
    import uvicorn

    uvicorn.run(
        "boringblog.api.main:create_app",
        factory=True,
        host=args.host,
        port=args.port,
        log_level=settings.log_level.lower(),
    )
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Boring Blog CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # migrate
    subparsers.add_parser("migrate", help="Apply pending database migrations")

    # create-user
    user_parser = subparsers.add_parser("create-user", help="Create an account")
    user_parser.add_argument("--email", required=True)
    user_parser.add_argument("--name", required=True)
    user_parser.add_argument("--password", required=True)
    user_parser.add_argument("--role", choices=["ADMIN", "AUTHOR"], default="AUTHOR")

    # serve
    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)

    return parser


HANDLERS = {
    "migrate": handle_migrate,
    "create-user": handle_create_user,
    "serve": handle_serve,
}


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    configure_logging(settings.log_level)
    return HANDLERS[args.command](settings, args)


if __name__ == "__main__":
    sys.exit(main())
