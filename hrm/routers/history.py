from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session
from sqlalchemy import or_
from pydantic import BaseModel
from typing import Any, Optional

from hrm.database import get_db
from hrm.models.models import SysEventHistory, Users
from hrm.core.permissions import CurrentUser, get_current_user, require_management
from hrm.services.audit import record_event

router = APIRouter(
    prefix="/api/history",
    tags=["History"]
)


class CreateLogDTO(BaseModel):
    modul: str
    action: str
    data: Optional[Any] = None


def event_to_dict(e: SysEventHistory, user: Optional[Users] = None) -> dict:
    return {
        "id": e.id,
        "log_user": e.log_user,
        "log_date": e.log_date.isoformat() if e.log_date else None,
        "modul": e.modul,
        "action": e.action,
        "data": e.data,
        "ip_address": e.ip_address,
        "user_agent": e.user_agent,
        "user": {"name": user.name, "role": user.role} if user else {"name": e.log_user, "role": None},
    }


@router.get("")
async def get_access_history(
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    search: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_management)
):
    query = db.query(SysEventHistory)
    if search:
        pattern = f"%{search}%"
        query = query.filter(or_(
            SysEventHistory.log_user.ilike(pattern),
            SysEventHistory.modul.ilike(pattern),
            SysEventHistory.action.ilike(pattern),
            SysEventHistory.data.ilike(pattern)
        ))

    total = query.count()
    events = query.order_by(SysEventHistory.log_date.desc()).offset(offset).limit(limit).all()

    emails = {e.log_user for e in events if e.log_user}
    users = {u.email: u for u in db.query(Users).filter(Users.email.in_(emails)).all()} if emails else {}

    return {
        "success": True,
        "history": [event_to_dict(e, users.get(e.log_user)) for e in events],
        "pagination": {"total": total, "limit": limit, "offset": offset}
    }


@router.post("", status_code=201)
async def create_log(
    payload: CreateLogDTO,
    request: Request,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    try:
        event = record_event(
            db,
            log_user=current_user.email or 'system',
            modul=payload.modul,
            action=payload.action,
            data=payload.data,
            ip_address=request.client.host if request.client else None,
            user_agent=request.headers.get("user-agent"),
        )
        return {"success": True, "log": event_to_dict(event)}
    except Exception as e:
        db.rollback()
        raise HTTPException(status_code=500, detail=str(e))
