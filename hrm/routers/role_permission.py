from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session, joinedload
from typing import List
import logging

from hrm.database import get_db
from hrm.models.models import Menu, RoleMenu
from hrm.core.permissions import ALL_ROLES, CurrentUser, get_current_user, require_super_admin
from hrm.schemas.role_permission import (
    MenuGroup, MenuItem, MenuResponse, RolePermissionResponse, UpdateRolePermissionsRequest,
)

logger = logging.getLogger("role_permission")

router = APIRouter(
    prefix="/api/rbac",
    tags=["Role & Menu Permission"],
    dependencies=[Depends(require_super_admin)]
)

menu_router = APIRouter(
    prefix="/api/menus",
    tags=["Role & Menu Permission"]
)


def _check_role(role: str):
    if role not in ALL_ROLES:
        raise HTTPException(status_code=400, detail=f"Role tidak valid: {role}")


# ==================== ROLES & MENUS ====================

@router.get("/roles")
async def get_all_roles():
    return {"success": True, "roles": ALL_ROLES}


@router.get("/menus", response_model=List[MenuResponse])
async def get_all_menus(db: Session = Depends(get_db)):
    return db.query(Menu).order_by(Menu.order, Menu.label).all()


# ==================== PERMISSIONS ====================

@router.get("/permissions/{role}", response_model=List[RolePermissionResponse])
async def get_role_permissions(role: str, db: Session = Depends(get_db)):
    _check_role(role)
    return db.query(RoleMenu).options(joinedload(RoleMenu.menu)).join(Menu, RoleMenu.menu_id == Menu.id).filter(
        RoleMenu.role == role
    ).order_by(Menu.order).all()


@router.put("/permissions/{role}")
async def update_role_permissions(
    role: str,
    payload: UpdateRolePermissionsRequest,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_super_admin)
):
    """Replace the menus granted to a role"""
    _check_role(role)
    menu_ids = list(dict.fromkeys(payload.menu_ids))
    if menu_ids:
        known = {m.id for m in db.query(Menu.id).filter(Menu.id.in_(menu_ids)).all()}
        unknown = [m for m in menu_ids if m not in known]
        if unknown:
            raise HTTPException(status_code=400, detail=f"Menu tidak ditemukan: {', '.join(unknown)}")

    try:
        db.query(RoleMenu).filter(RoleMenu.role == role).delete(synchronize_session=False)
        for menu_id in menu_ids:
            db.add(RoleMenu(role=role, menu_id=menu_id))
        db.commit()
        logger.info(f"[RBAC] {current_user.email} set {len(menu_ids)} menus for {role}")
        return {"success": True, "message": "Permissions updated successfully"}
    except Exception as e:
        db.rollback()
        raise HTTPException(status_code=500, detail=str(e))


# ==================== SIDEBAR ====================

@menu_router.get("/my-menus", response_model=List[MenuGroup])
async def get_my_menus(db: Session = Depends(get_db), current_user: CurrentUser = Depends(get_current_user)):
    """Active menus granted to the caller's role, grouped by group_label"""
    menus = db.query(Menu).join(RoleMenu, RoleMenu.menu_id == Menu.id).filter(
        RoleMenu.role == current_user.role,
        Menu.is_active == True
    ).order_by(Menu.order, Menu.label).all()

    groups = {}
    for menu in menus:
        groups.setdefault(menu.group_label or 'Other', []).append(
            MenuItem(href=menu.href, label=menu.label, icon=menu.icon)
        )
    return [MenuGroup(group_label=label, menus=items) for label, items in groups.items()]
