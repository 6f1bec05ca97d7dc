#!/usr/bin/env python3
"""
Connection Test Script

Run this to verify MongoDB is reachable and can serve change streams.
Usage: python scripts/test_connections.py
"""
import sys
sys.path.insert(0, '.')

from pymongo.errors import PyMongoError

from superadmin.db.mongodb import test_mongo_connection, get_collection, COLLECTIONS
from superadmin.core.config import get_settings


def main():
    settings = get_settings()
    print("=" * 50)
    print("SUPER ADMIN DASHBOARD - CONNECTION TEST")
    print("=" * 50)

    # Test MongoDB
    print("\n[1] Testing MongoDB...")
    print(f"    URI: {settings.mongodb_uri}")
    print(f"    Database: {settings.mongodb_db}")
    if test_mongo_connection():
        print("    ✅ MongoDB: CONNECTED")
    else:
        print("    ❌ MongoDB: FAILED")
        return

    # Change streams need a replica set
    print("\n[2] Testing change streams (realtime subscriptions)...")
    try:
        with get_collection(COLLECTIONS["faculty"]).watch(max_await_time_ms=100) as stream:
            stream.try_next()
        print("    ✅ Change streams: AVAILABLE")
    except PyMongoError as e:
        print(f"    ❌ Change streams: UNAVAILABLE ({e})")
        print("       Start mongod with --replSet and run rs.initiate()")

    print("\n" + "=" * 50)
    print("Connection test complete!")
    print("=" * 50)


if __name__ == "__main__":
    main()
