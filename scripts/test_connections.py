#!/usr/bin/env python3
"""
Connection Test Script

Run this to verify all backing services are reachable.
Usage: python scripts/test_connections.py
"""
import sys
sys.path.insert(0, '.')

from campuslink.core.config import get_settings
from campuslink.core.logging import configure_logging
from campuslink.db.postgres import test_postgres_connection
from campuslink.db.mongodb import test_mongo_connection
from campuslink.services.gemini_client import get_gemini_client


def main():
    configure_logging()
    settings = get_settings()
    print("=" * 50)
    print("CAMPUSLINK - CONNECTION TEST")
    print("=" * 50)

    print("\n[1] Testing SQL accounts store...")
    if settings.database_url:
        print(f"    URL: {settings.database_url.split('@')[-1]}")
    else:
        print(f"    URL: postgresql://{settings.postgres_user}:****@{settings.postgres_host}:{settings.postgres_port}/{settings.postgres_db}")
    if test_postgres_connection():
        print("    ✅ SQL: CONNECTED")
    else:
        print("    ❌ SQL: FAILED")

    print("\n[2] Testing MongoDB...")
    print(f"    URI: {settings.mongodb_uri}")
    print(f"    Database: {settings.mongodb_db}")
    if test_mongo_connection():
        print("    ✅ MongoDB: CONNECTED")
    else:
        print("    ❌ MongoDB: FAILED")

    print("\n[3] Testing Gemini API...")
    if settings.gemini_api_key:
        print(f"    Base URL: {settings.gemini_base_url}")
        print(f"    Model: {settings.gemini_model}")
        if get_gemini_client().test_connection():
            print("    ✅ Gemini: CONNECTED")
        else:
            print("    ❌ Gemini: FAILED (moderation fails open, triage and matching use fallbacks)")
    else:
        print("    ⚠️  Gemini: API key not configured (fallbacks will be used)")

    print("\n" + "=" * 50)
    print("Connection test complete!")
    print("=" * 50)


if __name__ == "__main__":
    main()
