#!/usr/bin/env python3
import sys
import os

# Adds the project root to the path so we can import 'hrm'
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from hrm.database import SessionLocal
from hrm.legacy.client import open_source
from hrm.legacy.importers import import_master_data


def main():
    db = SessionLocal()
    try:
        with open_source(db) as source:
            results = import_master_data(db, source)
        print("\n📦 Master data import")
        for name, stats in results.items():
            print(f"  {name:<14} total={stats['total']:<5} baru={stats['imported']:<5} "
                  f"update={stats['updated']:<5} error={stats['errors']}")
            for sample in stats["errorSample"][:3]:
                print(f"    ! {sample['key']}: {sample['error']}")
        print("\n✅ Done")
    finally:
        db.close()


if __name__ == "__main__":
    main()
