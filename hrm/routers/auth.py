import logging
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, status
from jose import JWTError
from sqlalchemy.orm import Session

from hrm.core.permissions import CurrentUser, get_current_user
from hrm.core.security import (
    create_access_token, create_refresh_token, decode_refresh_token, verify_password,
)
from hrm.database import get_db
from hrm.models.models import Karyawan, Users
from hrm.schemas.auth import LoginRequest, LoginResponse, RefreshRequest, TokenResponse, UserData
from hrm.services.user_sync import link_user_to_employee

logger = logging.getLogger("auth")

router = APIRouter(
    prefix="/api/auth",
    tags=["Auth"]
)


def _token_pair(user: Users):
    claims = {"sub": user.id, "email": user.email, "role": user.role}
    return create_access_token(claims), create_refresh_token({"sub": user.id})


@router.post("/login", response_model=LoginResponse)
async def login(request: LoginRequest, db: Session = Depends(get_db)):
    try:
        user = db.query(Users).filter(Users.email == request.email.strip().lower()).first()
        if not user or not verify_password(request.password, user.password):
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Login gagal, email atau password salah",
            )
        if not user.is_active:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Akun tidak aktif",
            )

        user.last_login = datetime.now()
        employee = db.query(Karyawan).filter(Karyawan.user_id == user.id).first() or link_user_to_employee(db, user)
        db.commit()

        access_token, refresh_token = _token_pair(user)
        logger.info(f"[Auth] Login {user.email} ({user.role})")

        return LoginResponse(
            message="Login berhasil",
            token=access_token,
            refresh_token=refresh_token,
            data=UserData(
                id=user.id,
                email=user.email,
                name=user.name,
                role=user.role,
                empl_id=employee.empl_id if employee else None
            )
        )
    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.error(f"[Auth] Login error: {e}")
        raise HTTPException(status_code=500, detail="Internal Server Error")


@router.post("/refresh", response_model=TokenResponse)
async def refresh(request: RefreshRequest, db: Session = Depends(get_db)):
    try:
        payload = decode_refresh_token(request.refresh_token)
    except JWTError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Refresh token tidak valid")
    if payload.get("type") != "refresh":
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Refresh token tidak valid")

    user = db.query(Users).filter(Users.id == payload.get("sub")).first()
    if not user or not user.is_active:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")

    access_token, refresh_token = _token_pair(user)
    return TokenResponse(token=access_token, refresh_token=refresh_token)


@router.get("/me")
async def get_me(current_user: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    """Current user with the linked employee (linked by email on the fly when missing)"""
    user = db.query(Users).filter(Users.id == current_user.id).first()
    employee = db.query(Karyawan).filter(Karyawan.user_id == user.id).first()
    if employee is None:
        employee = link_user_to_employee(db, user)
        if employee:
            db.commit()
            logger.info(f"[Auth] Auto-linked {user.email} to {employee.empl_id}")

    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "role": user.role,
        "employee": {
            "empl_id": employee.empl_id,
            "nik": employee.nik,
            "nama": employee.nama,
            "kd_dept": employee.kd_dept,
            "nm_dept": employee.departemen.nm_dept if employee.departemen else None,
            "kd_jab": employee.kd_jab,
            "nm_jab": employee.jabatan.nm_jab if employee.jabatan else None,
            "kd_sts": employee.kd_sts,
        } if employee else None
    }


@router.post("/logout")
async def logout():
    # Tokens are stateless; the client drops them
    return {"success": True, "message": "Logged out successfully"}
