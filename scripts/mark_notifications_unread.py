#!/usr/bin/env python3
# ============================================================
# DEV-ONLY LOCAL SCRIPT: DO NOT RUN AGAINST PRODUCTION
# ============================================================
# Purpose : Put a user's notifications back into the unread state so
#           inbox screens can be exercised again on a local database.
# Note    : The service itself never clears read_at. This script is the
#           only place the read-to-unread inversion exists.
#
# Usage:
#   DATABASE_URL=postgresql+asyncpg://... python scripts/mark_notifications_unread.py USER_ID
#   python scripts/mark_notifications_unread.py USER_ID --notification-id ID
# ============================================================
from __future__ import annotations

import argparse
import asyncio
import os
import sys
from pathlib import Path

# ----- Production guard: fail fast if accidentally run in prod -----
if os.environ.get("APP_ENV", "development").lower() == "production":
    print(
        "ERROR: mark_notifications_unread.py must not run in production (APP_ENV=production).",
        file=sys.stderr,
    )
    sys.exit(1)
# -------------------------------------------------------------------

_SRC_DIR = Path(__file__).resolve().parent.parent / "src"
if str(_SRC_DIR) not in sys.path:
    sys.path.insert(0, str(_SRC_DIR))

from sqlalchemy import update  # noqa: E402

from urovital.db.session import close_db, get_db_manager  # noqa: E402
from urovital.models.enums import NotificationStatus  # noqa: E402
from urovital.models.notification import Notification  # noqa: E402


async def main(user_id: str, notification_id: str | None) -> int:
    stmt = (
        update(Notification)
        .where(Notification.owner_actor_id == user_id, Notification.is_read.is_(True))
        .values(is_read=False, status=NotificationStatus.SENT.value, read_at=None)
    )
    if notification_id:
        stmt = stmt.where(Notification.id == notification_id)

    try:
        async with get_db_manager().session() as db:
            result = await db.execute(stmt)
    finally:
        await close_db()

    print(f"Marked {result.rowcount or 0} notification(s) unread for user {user_id}")
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Dev-only: mark notifications unread again.")
    parser.add_argument("user_id")
    parser.add_argument("--notification-id", default=None)
    args = parser.parse_args()
    sys.exit(asyncio.run(main(args.user_id, args.notification_id)))
