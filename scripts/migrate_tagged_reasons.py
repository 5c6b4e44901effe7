"""
One-off: move legacy [LEAVETYPE:..] / [STATUS:..] tags out of leave request
reasons into real columns.

    python -m scripts.migrate_tagged_reasons [--dry-run]
"""
import argparse

from app.core.logging import setup_logging
from app.database import SessionLocal, init_db
from app.services.reason_tags import migrate_tagged_reasons


def main():
    parser = argparse.ArgumentParser(description=__doc__.strip().splitlines()[0])
    parser.add_argument("--dry-run", action="store_true", help="report what would change, write nothing")
    args = parser.parse_args()

    setup_logging()
    init_db()
    db = SessionLocal()
    try:
        stats = migrate_tagged_reasons(db, dry_run=args.dry_run)
    finally:
        db.close()

    print(f"Scanned {stats['scanned']} request(s), migrated {stats['migrated']}, "
          f"{stats['unresolved_type']} with an unknown leave type")


if __name__ == "__main__":
    main()
