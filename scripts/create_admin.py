#!/usr/bin/env python3
"""
Create an admin account, or promote an existing user to admin.

Registration through the API always yields role "user", so the first admin
has to come from here.

Usage (from the project root):
    python scripts/create_admin.py --email admin@example.com --password 'S3cret-pass'
    python scripts/create_admin.py --email someone@example.com --promote
"""
import argparse
import asyncio
import getpass
import sys
from pathlib import Path

# Project root on sys.path so `app` imports when run as a plain script
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from app.core.exceptions import AppException  # noqa: E402
from app.db.database import AsyncSessionLocal, Base, engine  # noqa: E402
from app.db import models  # noqa: E402,F401
from app.db.models.user import UserRole  # noqa: E402
from app.domain.services.user_service import UserService  # noqa: E402


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create or promote an admin user")
    parser.add_argument("--email", required=True)
    parser.add_argument("--password", help="prompted for when omitted")
    parser.add_argument("--full-name", default=None)
    parser.add_argument(
        "--promote",
        action="store_true",
        help="give an existing user the admin role instead of creating one",
    )
    return parser.parse_args(argv)


async def run(args: argparse.Namespace) -> int:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with AsyncSessionLocal() as session:
        service = UserService(session)
        try:
            if args.promote:
                user = await service.get_by_email(args.email)
                if user is None:
                    print(f"ERROR: no user with email {args.email}")
                    return 1
                await service.update_user(user.id, {"role": UserRole.ADMIN})
                print(f"Promoted {user.email} to admin")
                return 0

            password = args.password or getpass.getpass("Password: ")
            user = await service.register(
                email=args.email,
                password=password,
                full_name=args.full_name,
                role=UserRole.ADMIN,
            )
            print(f"Created admin {user.email} ({user.id})")
            return 0
        except AppException as e:
            print(f"ERROR: {e.message}")
            return 1


async def _main(args: argparse.Namespace) -> int:
    try:
        return await run(args)
    finally:
        await engine.dispose()


def main() -> None:
    sys.exit(asyncio.run(_main(parse_args())))


if __name__ == "__main__":
    main()
