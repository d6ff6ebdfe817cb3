from pydantic import BaseModel
from typing import List, Optional


class MenuResponse(BaseModel):
    id: str
    label: str
    href: str
    icon: Optional[str] = None
    order: int = 0
    group_label: Optional[str] = None
    is_active: bool = True

    class Config:
        from_attributes = True


class RolePermissionResponse(BaseModel):
    id: str
    role: str
    menu_id: str
    menu: MenuResponse

    class Config:
        from_attributes = True


class UpdateRolePermissionsRequest(BaseModel):
    menu_ids: List[str] = []


class MenuItem(BaseModel):
    href: str
    label: str
    icon: Optional[str] = None


class MenuGroup(BaseModel):
    group_label: str
    menus: List[MenuItem]
