"""
MongoDB Connection Utility

MongoDB stores every durable record of the portal:
- students: registrations and their approval state
- approved_rolls: roll number allow-list imported from a spreadsheet
- jobs: postings created by admins
- applications: one document per (student, job) pair
- admins: portal administrators

Uniqueness (email, roll number, student+job pair) is enforced by the
indexes created in init_mongo_indexes, not by application code.
"""
import logging

from pymongo import ASCENDING, MongoClient
from pymongo.database import Database
from pymongo.collection import Collection
from app.core.config import get_settings

logger = logging.getLogger(__name__)

# Global client (connection pooling handled internally by pymongo)
_client: MongoClient = None
_db: Database = None


def get_mongo_client() -> MongoClient:
    """Get or create MongoDB client (singleton pattern)"""
    global _client
    if _client is None:
        _client = MongoClient(get_settings().mongodb_uri, tz_aware=True)
    return _client


def get_mongo_db() -> Database:
    """Get the portal database"""
    global _db
    if _db is None:
        client = get_mongo_client()
        _db = client[get_settings().mongodb_db]
    return _db


def get_collection(name: str) -> Collection:
    """Get a specific collection by its COLLECTIONS name."""
    db = get_mongo_db()
    return db[name]


def close_mongo_client() -> None:
    global _client, _db
    if _client is not None:
        _client.close()
    _client = None
    _db = None


def test_mongo_connection() -> bool:
    """
    Test if MongoDB is reachable.
    Returns True if connection successful, False otherwise.
    """
    try:
        client = get_mongo_client()
        # ping command checks connection
        client.admin.command('ping')
        return True
    except Exception as e:
        logger.warning("MongoDB connection failed: %s", e)
        return False


# Collection name constants (avoid typos)
COLLECTIONS = {
    "students": "students",
    "approved_rolls": "approved_rolls",
    "jobs": "jobs",
    "applications": "applications",
    "admins": "admins",
}


def init_mongo_indexes(db: Database = None):
    """
    Create indexes, including the unique ones the portal relies on.
    Call this once during app startup.
    """
    db = db if db is not None else get_mongo_db()

    students = db[COLLECTIONS["students"]]
    students.create_index("email", unique=True)
    students.create_index("rollNumber", unique=True)
    students.create_index([("approved", ASCENDING), ("registered", ASCENDING)])

    db[COLLECTIONS["approved_rolls"]].create_index("rollNumber", unique=True)
    db[COLLECTIONS["admins"]].create_index("email", unique=True)

    # Prevent duplicate applications
    applications = db[COLLECTIONS["applications"]]
    applications.create_index([("studentId", ASCENDING), ("jobId", ASCENDING)], unique=True)
    applications.create_index("jobId")

    db[COLLECTIONS["jobs"]].create_index([("createdAt", -1)])

    logger.info("MongoDB indexes created successfully")
