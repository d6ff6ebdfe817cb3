#!/usr/bin/env python3
import sys
import os

# Adds the project root to the path so we can import 'hrm'
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from hrm.database import SessionLocal
from hrm.legacy.backfill import backfill_relations


def main():
    db = SessionLocal()
    try:
        counts = backfill_relations(db)
        for target, updated in counts.items():
            print(f"  {target:<28} {updated} rows")
        print("\n✅ Backfill completed")
    finally:
        db.close()


if __name__ == "__main__":
    main()
