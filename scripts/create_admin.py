#!/usr/bin/env python3
"""Usage: python scripts/create_admin.py <email> <password> [role]"""
import sys
import os

# Adds the project root to the path so we can import 'hrm'
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from hrm.core.permissions import ALL_ROLES, ROLE_SUPER_ADMIN
from hrm.core.security import get_password_hash
from hrm.database import SessionLocal
from hrm.models.models import Users


def create_admin(email: str, password: str, role: str = ROLE_SUPER_ADMIN):
    if role not in ALL_ROLES:
        raise SystemExit(f"Unknown role {role}, expected one of {', '.join(ALL_ROLES)}")
    db = SessionLocal()
    try:
        user = db.query(Users).filter(Users.email == email.lower()).first()
        if user:
            user.password = get_password_hash(password)
            user.role = role
            user.is_active = True
            print(f"Updated {email} ({role})")
        else:
            db.add(Users(email=email.lower(), name=email.split('@')[0], password=get_password_hash(password), role=role))
            print(f"Created {email} ({role})")
        db.commit()
    except Exception as e:
        db.rollback()
        print(f"Error creating user: {e}")
        raise
    finally:
        db.close()


if __name__ == "__main__":
    if len(sys.argv) < 3:
        raise SystemExit(__doc__)
    create_admin(*sys.argv[1:4])
