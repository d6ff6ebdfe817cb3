import logging
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from hrm.models.models import Karyawan, Users

logger = logging.getLogger("user_sync")


def link_user_to_employee(db: Session, user: Users) -> Optional[Karyawan]:
    """Attach the employee whose email matches (case-insensitive). Caller commits."""
    if not user.email:
        return None
    employee = db.query(Karyawan).filter(
        func.lower(Karyawan.email) == user.email.strip().lower(),
        Karyawan.deleted_at.is_(None)
    ).first()
    if employee is None:
        return None
    employee.user_id = user.id
    return employee


def link_users_by_email(db: Session) -> int:
    linked = 0
    for user in db.query(Users).all():
        employee = link_user_to_employee(db, user)
        if employee:
            linked += 1
            logger.info(f"[UserSync] Linked {user.email} -> {employee.empl_id}")
    db.commit()
    return linked
