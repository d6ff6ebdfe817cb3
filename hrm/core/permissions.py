"""
Role checking utilities. Roles live on users.role:
EMPLOYEE, HR_MANAGER, ADMIN, SUPER_ADMIN (bypasses every check).
"""
from fastapi import HTTPException, status, Depends, Header
from sqlalchemy.orm import Session
from typing import List, Optional
from jose import JWTError

from hrm.database import get_db
from hrm.core.security import decode_access_token
from hrm.models.models import Users, Karyawan

ROLE_EMPLOYEE = "EMPLOYEE"
ROLE_HR_MANAGER = "HR_MANAGER"
ROLE_ADMIN = "ADMIN"
ROLE_SUPER_ADMIN = "SUPER_ADMIN"

ALL_ROLES = [ROLE_EMPLOYEE, ROLE_HR_MANAGER, ROLE_ADMIN, ROLE_SUPER_ADMIN]
MANAGEMENT_ROLES = [ROLE_HR_MANAGER, ROLE_ADMIN]


class CurrentUser:
    """Current authenticated user with the employee record it is linked to"""
    def __init__(self, id: str, email: str, name: Optional[str], role: str, empl_id: Optional[str] = None):
        self.id = id
        self.email = email
        self.name = name
        self.role = role
        self.empl_id = empl_id

    @property
    def is_super_admin(self) -> bool:
        return self.role == ROLE_SUPER_ADMIN

    @property
    def is_employee(self) -> bool:
        return self.role == ROLE_EMPLOYEE

    def has_role(self, role: str) -> bool:
        if self.is_super_admin:
            return True
        return self.role == role

    def has_any_role(self, roles: List[str]) -> bool:
        if self.is_super_admin:
            return True
        return self.role in roles


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    db: Session = Depends(get_db),
    authorization: Optional[str] = Header(None)
) -> CurrentUser:
    """
    Dependency to get the current authenticated user

    Usage:
        @router.get("/resource")
        async def get_resource(current_user: CurrentUser = Depends(get_current_user)):
            ...
    """
    if not authorization:
        raise _unauthorized("Authorization header missing")

    try:
        scheme, token = authorization.split()
    except ValueError:
        raise _unauthorized("Invalid authorization header format")
    if scheme.lower() != 'bearer':
        raise _unauthorized("Invalid authentication scheme")

    try:
        payload = decode_access_token(token)
    except JWTError:
        raise _unauthorized("Could not validate credentials")

    user_id = payload.get("sub")
    if user_id is None or payload.get("type") != "access":
        raise _unauthorized("Invalid token payload")

    user = db.query(Users).filter(Users.id == str(user_id)).first()
    if user is None or not user.is_active:
        raise _unauthorized("User not found")

    karyawan = db.query(Karyawan.empl_id).filter(
        Karyawan.user_id == user.id,
        Karyawan.deleted_at.is_(None)
    ).first()

    return CurrentUser(
        id=user.id,
        email=user.email,
        name=user.name,
        role=user.role,
        empl_id=karyawan.empl_id if karyawan else None
    )


def require_roles_dependency(roles: List[str]):
    """
    Dependency factory to require one of the given roles

    Usage:
        @router.post("/resource")
        async def create_resource(
            current_user: CurrentUser = Depends(require_roles_dependency(["HR_MANAGER"]))
        ):
            ...
    """
    async def role_checker(
        current_user: CurrentUser = Depends(get_current_user)
    ) -> CurrentUser:
        if not current_user.has_any_role(roles):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Akses ditolak. Role yang dibutuhkan: {', '.join(roles)}"
            )
        return current_user

    return role_checker


require_management = require_roles_dependency(MANAGEMENT_ROLES)
require_admin = require_roles_dependency([ROLE_ADMIN])
require_super_admin = require_roles_dependency([ROLE_SUPER_ADMIN])
