import sys
import os

# Add the project root to the Python path
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
sys.path.insert(0, project_root)

import argparse
import asyncio
import getpass

from app.core.database import session_manager
from app.core.exceptions import ConflictError
from app.services.RegistrationService import provision_admin


async def create_admin(name: str, email: str, password: str) -> int:
    """Create an approved, verified admin account."""
    await session_manager.init()
    try:
        async with session_manager.get_session() as db:
            admin = await provision_admin(db, name, email, password)
        print(f"✅ Admin created: {admin.email} (id {admin.id})")
        return 0
    except ConflictError as e:
        print(f"❌ {e.message}")
        return 1
    finally:
        await session_manager.close()


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Provision an admin account for the chat app.")
    parser.add_argument("--name", required=True)
    parser.add_argument("--email", required=True)
    parser.add_argument("--password", help="Prompted for when omitted")
    args = parser.parse_args(argv)

    password = args.password or getpass.getpass("Admin password: ")
    if not password:
        print("❌ Password must not be empty")
        return 1
    return asyncio.run(create_admin(args.name, args.email, password))


if __name__ == "__main__":
    sys.exit(main())
