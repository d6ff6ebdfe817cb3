from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from sqlalchemy import or_
from pydantic import BaseModel
from typing import Optional
import logging

from hrm.database import get_db
from hrm.models.models import Karyawan, Users
from hrm.core.permissions import ALL_ROLES, CurrentUser, require_admin
from hrm.core.security import get_password_hash
from hrm.services.user_sync import link_user_to_employee, link_users_by_email

logger = logging.getLogger("users")

router = APIRouter(
    prefix="/api/users",
    tags=["Users"]
)


class CreateUserDTO(BaseModel):
    email: str
    name: Optional[str] = None
    password: str
    role: str = "EMPLOYEE"


class UpdateUserDTO(BaseModel):
    name: Optional[str] = None
    role: Optional[str] = None
    is_active: Optional[bool] = None
    password: Optional[str] = None


def user_to_dict(user: Users, employee: Optional[Karyawan] = None) -> dict:
    return {
        "id": user.id,
        "email": user.email,
        "name": user.name,
        "role": user.role,
        "is_active": user.is_active,
        "last_login": user.last_login.isoformat() if user.last_login else None,
        "empl_id": employee.empl_id if employee else None,
    }


def _check_role(role: Optional[str]):
    if role is not None and role not in ALL_ROLES:
        raise HTTPException(status_code=400, detail=f"Role tidak valid: {role}")


@router.get("")
async def get_users(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=200),
    search: Optional[str] = None,
    role: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin)
):
    query = db.query(Users, Karyawan).outerjoin(Karyawan, Karyawan.user_id == Users.id)
    if search:
        pattern = f"%{search}%"
        query = query.filter(or_(Users.email.ilike(pattern), Users.name.ilike(pattern)))
    if role:
        query = query.filter(Users.role == role)

    total = query.count()
    rows = query.order_by(Users.email).offset((page - 1) * limit).limit(limit).all()
    return {
        "success": True,
        "data": [user_to_dict(u, emp) for u, emp in rows],
        "pagination": {"page": page, "limit": limit, "total": total, "totalPages": (total + limit - 1) // limit}
    }


@router.post("", status_code=201)
async def create_user(
    payload: CreateUserDTO,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin)
):
    _check_role(payload.role)
    email = payload.email.strip().lower()
    if db.query(Users).filter(Users.email == email).first():
        raise HTTPException(status_code=400, detail="Email sudah terdaftar")
    try:
        user = Users(
            email=email,
            name=payload.name,
            password=get_password_hash(payload.password),
            role=payload.role,
            is_active=True,
        )
        db.add(user)
        db.flush()
        employee = link_user_to_employee(db, user)
        db.commit()
        db.refresh(user)
        return {"success": True, "message": "Data berhasil disimpan", "data": user_to_dict(user, employee)}
    except Exception as e:
        db.rollback()
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/link-employees")
async def link_employees(db: Session = Depends(get_db), current_user: CurrentUser = Depends(require_admin)):
    try:
        linked = link_users_by_email(db)
        return {"success": True, "message": f"{linked} user terhubung dengan data karyawan", "linked": linked}
    except Exception as e:
        db.rollback()
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/{id}")
async def get_user(id: str, db: Session = Depends(get_db), current_user: CurrentUser = Depends(require_admin)):
    user = db.query(Users).filter(Users.id == id).first()
    if not user:
        raise HTTPException(status_code=404, detail="Data not found")
    employee = db.query(Karyawan).filter(Karyawan.user_id == user.id).first()
    return {"success": True, "data": user_to_dict(user, employee)}


@router.put("/{id}")
async def update_user(
    id: str,
    payload: UpdateUserDTO,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin)
):
    user = db.query(Users).filter(Users.id == id).first()
    if not user:
        raise HTTPException(status_code=404, detail="Data not found")
    _check_role(payload.role)
    if user.id == current_user.id and payload.role and payload.role != user.role:
        raise HTTPException(status_code=400, detail="Tidak dapat mengubah role akun sendiri")

    try:
        if payload.name is not None:
            user.name = payload.name
        if payload.role is not None:
            logger.info(f"[Users] {current_user.email} changed role of {user.email}: {user.role} -> {payload.role}")
            user.role = payload.role
        if payload.is_active is not None:
            user.is_active = payload.is_active
        if payload.password:
            user.password = get_password_hash(payload.password)
        db.commit()
        db.refresh(user)
        employee = db.query(Karyawan).filter(Karyawan.user_id == user.id).first()
        return {"success": True, "message": "Data berhasil diupdate", "data": user_to_dict(user, employee)}
    except Exception as e:
        db.rollback()
        raise HTTPException(status_code=500, detail=str(e))
