"""
In-app notifications (sys_notification).

Recipients are users; an employee id is resolved through karyawan.user_id.
create_notification only adds the row, the caller commits.
"""
import logging
from typing import Optional

from sqlalchemy.orm import Session

from hrm.models.models import Karyawan, Notification

logger = logging.getLogger("notifications")


def create_notification(
    db: Session,
    subject: str,
    note: str,
    user_id: Optional[str] = None,
    empl_id: Optional[str] = None,
    url: str = '',
    type: int = 0,
    creator_user_id: Optional[str] = None,
) -> Optional[Notification]:
    recipient = user_id
    if not recipient and empl_id:
        karyawan = db.query(Karyawan.user_id).filter(Karyawan.empl_id == empl_id).first()
        recipient = karyawan.user_id if karyawan else None

    if not recipient:
        logger.warning(f"[Notification] No user account for employee {empl_id}, '{subject}' not sent")
        return None

    notification = Notification(
        recipient_user_id=recipient,
        creator_user_id=creator_user_id,
        type=type,
        subject=subject,
        note=note,
        url=url,
    )
    db.add(notification)
    return notification
