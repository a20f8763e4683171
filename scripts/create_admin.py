#!/usr/bin/env python3
"""Bootstrap an administrator account.

There is no public seed endpoint and no login bypass: the first active
administrator is created here, directly against the database. Later
accounts are registered through ``POST /api/v1/admin/users``.

Usage
-----
    DATABASE_URL=postgresql+asyncpg://... python scripts/create_admin.py admin@clinic.example
    python scripts/create_admin.py admin@clinic.example --full-name "Clinic Admin" --print-token

If the email already belongs to a user, that user is promoted to admin
and activated.

``--print-token`` prints a short-lived bearer token for the account so an
operator can make the first authenticated calls. It is refused when
APP_ENV=production.
"""
from __future__ import annotations

import argparse
import asyncio
import sys
from datetime import timedelta
from pathlib import Path

_SRC_DIR = Path(__file__).resolve().parent.parent / "src"
if str(_SRC_DIR) not in sys.path:
    sys.path.insert(0, str(_SRC_DIR))

from urovital.core.config import get_settings  # noqa: E402
from urovital.core.security import create_access_token  # noqa: E402
from urovital.db.session import close_db, get_db_manager  # noqa: E402
from urovital.models.enums import UserRole, UserStatus  # noqa: E402
from urovital.repositories.user_repository import UserRepository  # noqa: E402


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="create_admin.py",
        description="Create or promote an active administrator.",
    )
    parser.add_argument("email", help="Administrator email address")
    parser.add_argument("--full-name", default=None, help="Display name")
    parser.add_argument(
        "--print-token",
        action="store_true",
        help="Print a 15-minute bearer token for the account (not allowed in production)",
    )
    return parser.parse_args()


async def _ensure_admin(email: str, full_name: str | None) -> str:
    async with get_db_manager().session() as db:
        repo = UserRepository(db)
        user = await repo.get_by_email(email)

        if user is None:
            user = await repo.create(
                email=email,
                full_name=full_name,
                role=UserRole.ADMIN,
                status=UserStatus.ACTIVE,
            )
            print(f"[create_admin] Created admin user id={user.id}")
        else:
            user = await repo.update_fields(
                user.id,
                full_name=full_name,
                role=UserRole.ADMIN,
                status=UserStatus.ACTIVE,
            )
            print(f"[create_admin] Promoted existing user id={user.id} to active admin")

        return user.id


async def main() -> int:
    args = _parse_args()
    settings = get_settings()

    if args.print_token and settings.is_production:
        print("[create_admin] ERROR: --print-token is disabled in production.", file=sys.stderr)
        return 1

    try:
        user_id = await _ensure_admin(args.email, args.full_name)
    finally:
        await close_db()

    if args.print_token:
        token = create_access_token(user_id, settings=settings, expires_delta=timedelta(minutes=15))
        print(token)

    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
