#!/usr/bin/env python3
"""
Mentor Request Diagnostic Script

Shows how a user's mentor requests are stored: how many use the current
sender_id/receiver_id fields and how many still use the legacy
from_user_id/to_user_id fields. Run migrate_fields.py if legacy ones show up.

Usage: python scripts/diagnose_mentor_requests.py --user-id 42
"""
import argparse
import sys
sys.path.insert(0, '.')

from campuslink.core.logging import configure_logging
from campuslink.db.mongodb import test_mongo_connection
from campuslink.services.migration_service import diagnose_requests


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Inspect a user's mentor requests.")
    parser.add_argument("--user-id", type=int, required=True, help="Account user_id")
    parser.add_argument("--sample", type=int, default=10, help="How many documents to show")
    args = parser.parse_args(argv)

    configure_logging()
    print("=" * 50)
    print("MENTOR REQUESTS DIAGNOSTIC")
    print("=" * 50)

    if not test_mongo_connection():
        print("❌ MongoDB not reachable")
        return 1

    report = diagnose_requests(args.user_id, sample_size=args.sample)

    print(f"\n[1] Sent by user {report['user_id']}")
    print(f"    sender_id:            {report['sent']['sender_id']}")
    print(f"    from_user_id (OLD):   {report['sent']['from_user_id']}")
    print(f"\n[2] Received by user {report['user_id']}")
    print(f"    receiver_id:          {report['received']['receiver_id']}")
    print(f"    to_user_id (OLD):     {report['received']['to_user_id']}")

    print(f"\n[3] All requests in collection: {report['total_requests']}")
    if not report["sample"]:
        print("    ⚠️  No requests found in mentor_requests collection!")
    for doc in report["sample"]:
        print(f"    {doc['id']}: {', '.join(doc['fields'])}")

    legacy = report["sent"]["from_user_id"] + report["received"]["to_user_id"]
    if legacy:
        print(f"\n⚠️  {legacy} request(s) use legacy field names. Run: python scripts/migrate_fields.py mentor_requests")
    return 0


if __name__ == "__main__":
    sys.exit(main())
