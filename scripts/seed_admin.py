"""
Seed Super Admin

Creates the first dashboard super admin. Later admins register through
POST /api/v1/admin/register with the system key.

Usage:
    python scripts/seed_admin.py --email admin@example.org --name "Jane Dlamini"

The password is prompted for unless --password is given.
"""

import argparse
import asyncio
import getpass
import sys
from pathlib import Path

# Add the src directory to the path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from eduhub.core.database import async_session_maker, engine
from eduhub.core.security import hash_password
from eduhub.modules.admins import repository
from eduhub.modules.admins.models import AdminRole


async def seed_admin(email: str, full_name: str, password: str) -> None:
    """Create the super admin if the email is not taken."""
    email = email.strip().lower()

    async with async_session_maker() as db:
        existing = await repository.get_by_email(db, email)
        if existing:
            print(f"Admin already exists: {email}")
            print(f"  ID: {existing.id}")
            print(f"  Role: {existing.role.value}")
            return

        admin = await repository.create(
            db,
            full_name=full_name,
            email=email,
            password_hash=hash_password(password),
            role=AdminRole.SUPER_ADMIN,
        )

        print("Super admin created successfully!")
        print(f"  Email: {admin.email}")
        print(f"  Name: {admin.full_name}")
        print(f"  ID: {admin.id}")

    await engine.dispose()


def main() -> None:
    parser = argparse.ArgumentParser(description="Create the first EduHub super admin")
    parser.add_argument("--email", required=True)
    parser.add_argument("--name", required=True, help="Full name")
    parser.add_argument("--password", help="Prompted for when omitted")
    args = parser.parse_args()

    password = args.password or getpass.getpass("Password: ")
    if len(password) < 8:
        parser.error("password must be at least 8 characters")

    asyncio.run(seed_admin(args.email, args.name, password))


if __name__ == "__main__":
    main()
