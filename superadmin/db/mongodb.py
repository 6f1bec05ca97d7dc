"""
MongoDB Connection Utility

MongoDB stores every dashboard document:
- faculty, students, internships, applications
- tests and test assignments
- admin accounts and their sessions

Realtime subscriptions use change streams, so the server must run as a
replica set (a single-node replica set is enough for development).
"""
import logging

from pymongo import MongoClient
from pymongo.database import Database
from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from superadmin.core.config import get_settings

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
    """Get the dashboard database"""
    global _db
    if _db is None:
        client = get_mongo_client()
        _db = client[get_settings().mongodb_db]
    return _db


def get_collection(name: str) -> Collection:
    """Get a specific collection by its store name (see COLLECTIONS)."""
    db = get_mongo_db()
    return db[name]


def close_mongo_client() -> None:
    """Drop the cached client (on shutdown)."""
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
    except PyMongoError as e:
        logger.error("MongoDB connection failed: %s", e)
        return False


# Collection name constants (avoid typos)
COLLECTIONS = {
    "faculty": "faculty",
    "students": "students",
    "internships": "internships",
    "applications": "applications",
    "tests": "tests",
    "test_assignments": "testsAssigned",
    "users": "users",
    "sessions": "sessions",
}


def init_mongo_indexes():
    """
    Create indexes for better query performance.
    Call this once during app startup.
    """
    db = get_mongo_db()

    # Faculty counter recomputation queries internships by facultyId
    db[COLLECTIONS["internships"]].create_index("facultyId")

    # Test assignment creation looks up the (student, internship) application
    db[COLLECTIONS["applications"]].create_index([
        ("studentId", 1),
        ("internshipId", 1)
    ])
    db[COLLECTIONS["test_assignments"]].create_index("testId")

    # Active user analytics
    db[COLLECTIONS["students"]].create_index("lastActive")
    db[COLLECTIONS["faculty"]].create_index("lastActive")

    # Accounts
    db[COLLECTIONS["users"]].create_index("email", unique=True)
    db[COLLECTIONS["sessions"]].create_index("userId")

    logger.info("MongoDB indexes created successfully")
