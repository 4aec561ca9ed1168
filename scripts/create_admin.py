#!/usr/bin/env python3
"""
Create Admin Script

Creates the portal admin account, or resets the password of an existing one.
Run once from the project root.

Usage: python scripts/create_admin.py
"""
import getpass
import sys

sys.path.insert(0, '.')

from app.core.errors import ValidationError
from app.core.logging_config import configure_logging
from app.db.mongodb import init_mongo_indexes, test_mongo_connection
from app.services.admin_service import AdminService


def main():
    configure_logging()
    if not test_mongo_connection():
        print("❌ MongoDB: FAILED")
        sys.exit(1)
    init_mongo_indexes()

    email = input("Enter admin email: ")
    password = getpass.getpass("Enter admin password: ")

    try:
        created = AdminService().upsert_admin(email, password)
    except ValidationError as e:
        print(f"❌ {e.message}")
        sys.exit(1)

    action = "created" if created else "updated"
    print(f"✅ Admin account for {email.strip().lower()} {action} successfully.")


if __name__ == "__main__":
    main()
