import argparse
import logging
import sys
from pathlib import Path

from src.adapters.auth.crypto import JWTAuthAdapter
from src.adapters.sqlite.migrator import SQLiteMigrator
from src.app_shell.config import Settings, build_storage, configure_logging, load_app_rules
from src.components.auth import RegisterInput, run_register

logger = logging.getLogger("cli")


def handle_migrate(settings: Settings, args: argparse.Namespace) -> None:
    Path(settings.db_path).parent.mkdir(parents=True, exist_ok=True)
    migrator = SQLiteMigrator(settings.db_path)
    if args.status:
        for name in migrator.pending():
            print(f"pending  {name}")
        print(f"{len(migrator.applied())} applied, {len(migrator.pending())} pending.")
        return
    applied = migrator.run_migrations()
    print(f"Database ready at {settings.db_path} ({len(applied)} migration(s) applied).")


def handle_create_user(settings: Settings, args: argparse.Namespace) -> None:
    rules = load_app_rules(settings)
    storage = build_storage(settings, rules)
    storage.initialize()

    inp = RegisterInput(
        username=args.username,
        password=args.password,
        company_name=args.company,
        business_type=args.business_type,
    )
    result = run_register(
        inp,
        user_repo=storage.users,
        auth_adapter=JWTAuthAdapter(secret_key=settings.secret_key),
        rules=rules.auth,
    )
    if not result.success or result.user is None:
        details = "; ".join(e.message for e in result.errors) or result.error
        logger.error(f"Could not create user {args.username!r}: {details}")
        sys.exit(1)

    print(f"Created user {result.user.username} (id {result.user.id}).")


def handle_serve(args: argparse.Namespace) -> None:
    import uvicorn

    uvicorn.run("src.api.main:create_app", factory=True, host=args.host, port=args.port)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="BizManager CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # migrate
    migrate_parser = subparsers.add_parser("migrate", help="Apply pending SQLite migrations")
    migrate_parser.add_argument(
        "--status", action="store_true", help="List pending migrations without applying them"
    )

    # create-user
    user_parser = subparsers.add_parser("create-user", help="Create an account")
    user_parser.add_argument("--username", required=True)
    user_parser.add_argument("--password", required=True)
    user_parser.add_argument("--company", required=True, help="Company name")
    user_parser.add_argument("--business-type", default=None)

    # serve
    serve_parser = subparsers.add_parser("serve", help="Run the API server")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=5000)

    args = parser.parse_args(argv)

    settings = Settings()
    configure_logging(settings)

    if args.command == "migrate":
        handle_migrate(settings, args)
    elif args.command == "create-user":
        handle_create_user(settings, args)
    elif args.command == "serve":
        handle_serve(args)


if __name__ == "__main__":
    main()
