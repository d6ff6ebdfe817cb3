from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from hrm.database import get_db
from hrm.models.models import Notification
from hrm.core.permissions import CurrentUser, get_current_user

router = APIRouter(
    prefix="/api/notifications",
    tags=["Notifications"],
    responses={404: {"description": "Not found"}},
)


def notification_to_dict(n: Notification) -> dict:
    return {
        "id": n.id,
        "type": n.type,
        "subject": n.subject,
        "note": n.note,
        "url": n.url,
        "is_read": n.is_read,
        "created_at": n.created_at.isoformat() if n.created_at else None,
    }


@router.get("")
def get_notifications(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    query = db.query(Notification).filter(
        Notification.recipient_user_id == current_user.id,
        Notification.status == True
    )
    total = query.count()
    unread = query.filter(Notification.is_read == False).count()
    rows = query.order_by(Notification.created_at.desc()).offset((page - 1) * limit).limit(limit).all()
    return {
        "success": True,
        "data": [notification_to_dict(n) for n in rows],
        "unread": unread,
        "pagination": {
            "total": total,
            "page": page,
            "limit": limit,
            "totalPages": (total + limit - 1) // limit
        }
    }


@router.put("/read-all")
def mark_all_as_read(db: Session = Depends(get_db), current_user: CurrentUser = Depends(get_current_user)):
    try:
        updated = db.query(Notification).filter(
            Notification.recipient_user_id == current_user.id,
            Notification.is_read == False
        ).update({Notification.is_read: True}, synchronize_session=False)
        db.commit()
        return {"success": True, "message": "All notifications marked as read", "updated": updated}
    except Exception as e:
        db.rollback()
        raise HTTPException(status_code=500, detail=str(e))


@router.put("/{id}/read")
def mark_as_read(id: str, db: Session = Depends(get_db), current_user: CurrentUser = Depends(get_current_user)):
    notification = db.query(Notification).filter(
        Notification.id == id,
        Notification.recipient_user_id == current_user.id
    ).first()
    if not notification:
        raise HTTPException(status_code=404, detail="Data not found")
    try:
        notification.is_read = True
        db.commit()
        return {"success": True, "message": "Notification marked as read"}
    except Exception as e:
        db.rollback()
        raise HTTPException(status_code=500, detail=str(e))
