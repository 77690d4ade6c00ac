#!/usr/bin/env python3
"""
Field Migration Script

Renames legacy document fields in place:
- mentor_requests: from_user_id/to_user_id -> sender_id/receiver_id
- profiles:        skills_offered/skills_wanted -> skills_have/skills_to_learn

Old fields are kept unless --drop-old is given.

Usage:
    python scripts/migrate_fields.py --dry-run
    python scripts/migrate_fields.py mentor_requests
    python scripts/migrate_fields.py profiles --drop-old
"""
import argparse
import sys
sys.path.insert(0, '.')

from campuslink.core.logging import configure_logging
from campuslink.services.migration_service import MIGRATIONS, run_migration


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Rename legacy fields in CampusLink collections.")
    parser.add_argument(
        "migrations", nargs="*", metavar="MIGRATION",
        help=f"Which collections to migrate (default: all of {', '.join(sorted(MIGRATIONS))})"
    )
    parser.add_argument("--dry-run", action="store_true", help="Report what would change, write nothing")
    parser.add_argument("--drop-old", action="store_true", help="Remove the legacy fields after copying")
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    args = parser.parse_args(argv)

    configure_logging(args.log_level)
    names = args.migrations or sorted(MIGRATIONS)
    unknown = [n for n in names if n not in MIGRATIONS]
    if unknown:
        parser.error(f"unknown migration(s): {', '.join(unknown)}")

    print("=" * 50)
    print(f"FIELD MIGRATION{' (DRY RUN)' if args.dry_run else ''}")
    print("=" * 50)

    for name in names:
        report = run_migration(name, keep_old=not args.drop_old, dry_run=args.dry_run)
        print(f"\n[{name}]")
        print(f"    Checked:    {report['checked']}")
        print(f"    ✅ Migrated: {report['migrated']}")
        print(f"    ⏭️  Skipped:  {report['skipped']} (already correct)")
        if report["unexpected"]:
            print(f"    ⚠️  Unexpected format: {report['unexpected']} (see log)")

    if not args.drop_old:
        print("\nNOTE: Old fields are kept for backward compatibility. Re-run with --drop-old to remove them.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
