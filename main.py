import asyncio
import argparse
import logging
import uvicorn
from core.config import LOG_LEVEL
from core.db import init_engine, dispose_engine, get_sessionmaker
from error_store import initialize_storage, teardown_storage
from utils.accounts import create_admin_user, set_user_active

logging.basicConfig(
    level=LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


async def activate():
    await initialize_storage(init_engine())
    await dispose_engine()


async def deactivate():
    await teardown_storage(init_engine())
    await dispose_engine()


async def create_admin(username: str, email: str, password: str):
    await initialize_storage(init_engine())
    try:
        async with get_sessionmaker()() as session:
            user = await create_admin_user(session, username, email, password)
            logger.info("Admin user %s created (id=%s)", user.username, user.id)
    finally:
        await dispose_engine()


async def set_active(username: str, active: bool):
    try:
        async with get_sessionmaker()() as session:
            await set_user_active(session, username, active)
            logger.info("User %s %s", username, "enabled" if active else "disabled")
    finally:
        await dispose_engine()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="JS Error Logger")
    sub = parser.add_subparsers(dest="command")

    serve = sub.add_parser("serve", help="Run the REST API (default)")
    serve.add_argument("--host", default="0.0.0.0", help="Bind address")
    serve.add_argument("--port", type=int, default=8000, help="REST API port")

    sub.add_parser("activate", help="Create the error log tables")
    sub.add_parser("deactivate", help="Drop the error log tables")

    admin = sub.add_parser("create-admin", help="Create an administrator account")
    admin.add_argument("username")
    admin.add_argument("email")
    admin.add_argument("password")

    for name, help_text in (("enable-user", "Allow an account to sign in"), ("disable-user", "Block an account from signing in")):
        sub.add_parser(name, help=help_text).add_argument("username")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    command = args.command or "serve"

    if command == "activate":
        asyncio.run(activate())
    elif command == "deactivate":
        asyncio.run(deactivate())
    elif command == "create-admin":
        try:
            asyncio.run(create_admin(args.username, args.email, args.password))
        except ValueError as e:
            raise SystemExit(str(e))
    elif command in ("enable-user", "disable-user"):
        try:
            asyncio.run(set_active(args.username, command == "enable-user"))
        except ValueError as e:
            raise SystemExit(str(e))
    else:
        host = getattr(args, "host", "0.0.0.0")
        port = getattr(args, "port", 8000)
        logger.info("REST API starting on %s:%s", host, port)
        uvicorn.run("api.rest:app", host=host, port=port, log_level=LOG_LEVEL.lower())


if __name__ == "__main__":
    main()
