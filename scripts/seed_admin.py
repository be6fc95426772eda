#!/usr/bin/env python3
"""Seed script to create an admin user."""

import asyncio
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from app.core.exceptions import ValidationError
from app.database import async_session_maker
from app.schemas.user import UserCreate
from app.services import stats_service, user_service


async def create_admin_user(
    handle: str = "admin",
    password: str = "admin12345",
    display_name: str | None = None,
) -> None:
    """Create an admin user, or promote the user if the handle is taken."""
    async with async_session_maker() as db:
        existing_user = await user_service.get_user_by_handle(db, handle)

        if existing_user:
            if existing_user.is_admin:
                print(f"Admin user already exists: {existing_user.handle}")
            else:
                existing_user.is_admin = True
                await db.commit()
                print(f"Upgraded existing user to admin: {existing_user.handle}")
            return

        try:
            admin = await user_service.create_user(
                db,
                UserCreate(handle=handle, password=password, display_name=display_name),
                is_admin=True,
            )
        except ValidationError as e:
            print(f"Invalid handle: {e.message}")
            return
        await stats_service.apply_increments(db, user=True)
        print(f"Created admin user: {admin.handle}")
        print(f"Password: {password}")
        print("\nYou can now login with these credentials.")


async def make_user_admin(handle: str) -> None:
    """Make an existing user an admin."""
    async with async_session_maker() as db:
        user = await user_service.get_user_by_handle(db, handle)

        if not user:
            print(f"User not found: {handle}")
            return

        if user.is_admin:
            print(f"User is already an admin: {user.handle}")
            return

        user.is_admin = True
        await db.commit()
        print(f"Made user admin: {user.handle}")


def main():
    """Main entry point."""
    import argparse

    parser = argparse.ArgumentParser(description="Admin user seeder")
    parser.add_argument(
        "--handle",
        default="admin",
        help="Admin handle (default: admin)",
    )
    parser.add_argument(
        "--password",
        default="admin12345",
        help="Admin password (default: admin12345)",
    )
    parser.add_argument(
        "--display-name",
        default=None,
        help="Admin display name (optional)",
    )
    parser.add_argument(
        "--make-admin",
        metavar="HANDLE",
        help="Make an existing user an admin by handle",
    )

    args = parser.parse_args()

    if args.make_admin:
        asyncio.run(make_user_admin(args.make_admin))
    else:
        asyncio.run(create_admin_user(args.handle, args.password, args.display_name))


if __name__ == "__main__":
    main()
