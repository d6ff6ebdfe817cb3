#!/usr/bin/env python3
import sys
import os

# Adds the project root to the path so we can import 'hrm'
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from hrm.database import SessionLocal
from hrm.legacy.client import open_source
from hrm.legacy.importers import import_employees


def main():
    # --skip-master: masters were already imported
    with_master = "--skip-master" not in sys.argv[1:]
    db = SessionLocal()
    try:
        with open_source(db) as source:
            result = import_employees(db, source, with_master=with_master)
        stats = result["employees"]
        print(f"\n👥 Karyawan: total={stats['total']} baru={stats['imported']} update={stats['updated']} "
              f"error={stats['errors']} nik_conflicts={stats.get('nik_conflicts', 0)}")
        for code, count in sorted(stats.items()):
            if code.endswith("_missing"):
                print(f"  {code}: {count}")
        for sample in stats["errorSample"]:
            print(f"  ! {sample['key']}: {sample['error']}")
    finally:
        db.close()


if __name__ == "__main__":
    main()
