#!/usr/bin/env python3
"""
Create the first super admin account.

/auth/register only accepts requests from a signed-in super admin, so the
first one is created here, directly against MongoDB.
Usage: python scripts/create_superadmin.py admin@example.com "Jane Doe"
"""
import sys
from getpass import getpass
sys.path.insert(0, '.')

from superadmin.core.errors import DashboardError
from superadmin.db.mongodb import test_mongo_connection, init_mongo_indexes
from superadmin.services.session_service import register_account


def main():
    if len(sys.argv) < 2:
        print(__doc__)
        return

    email = sys.argv[1]
    display_name = sys.argv[2] if len(sys.argv) > 2 else None

    if not test_mongo_connection():
        print("❌ MongoDB connection failed!")
        return
    init_mongo_indexes()

    password = getpass("Password: ")
    if len(password) < 6:
        print("❌ Password must be at least 6 characters")
        return

    try:
        account = register_account(email, password, display_name=display_name, role="superadmin")
    except DashboardError as e:
        print(f"❌ {e}")
        return
    print(f"✅ Created super admin {account['email']} ({account['id']})")


if __name__ == "__main__":
    main()
