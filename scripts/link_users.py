#!/usr/bin/env python3
import sys
import os

# Adds the project root to the path so we can import 'hrm'
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from hrm.database import SessionLocal
from hrm.services.user_sync import link_users_by_email


def main():
    db = SessionLocal()
    try:
        linked = link_users_by_email(db)
        print(f"\n🔗 {linked} users linked to their employee record")
    finally:
        db.close()


if __name__ == "__main__":
    main()
