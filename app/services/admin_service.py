"""
Admin Service - portal administrator accounts.

Admins are created out of band with scripts/create_admin.py and log in
through /api/admin/auth/login.
"""

import logging

from pymongo.collection import Collection

from app.core.auth import hash_password, verify_password
from app.core.errors import UnauthorizedError, ValidationError
from app.db.mongodb import get_collection, COLLECTIONS
from app.services.mongo_service import serialize_doc, utcnow

logger = logging.getLogger(__name__)


class AdminService:
    def __init__(self, admins: Collection = None):
        self.admins: Collection = admins if admins is not None else get_collection(COLLECTIONS["admins"])

    def authenticate(self, email: str, password: str) -> dict:
        email = (email or "").strip().lower()
        admin = self.admins.find_one({"email": email})
        if not admin or not verify_password(password, admin.get("passwordHash")):
            logger.warning("Failed admin login for %s", email)
            raise UnauthorizedError("Invalid credentials", error_code="INVALID_CREDENTIALS")

        admin.pop("passwordHash", None)
        return serialize_doc(admin)

    def upsert_admin(self, email: str, password: str) -> bool:
        """
        Create the admin, or reset their password if they exist.
        Returns True when a new admin was created.
        """
        email = (email or "").strip().lower()
        if not email or not password:
            raise ValidationError("Email and password are required.")

        result = self.admins.update_one(
            {"email": email},
            {"$set": {"passwordHash": hash_password(password), "updatedAt": utcnow()}},
            upsert=True,
        )
        created = result.upserted_id is not None
        logger.info("Admin %s %s", email, "created" if created else "updated")
        return created


def get_admin_service() -> AdminService:
    """FastAPI dependency - AdminService on the live collection."""
    return AdminService()
