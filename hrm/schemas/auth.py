from pydantic import BaseModel
from typing import Optional


class LoginRequest(BaseModel):
    email: str
    password: str


class RefreshRequest(BaseModel):
    refresh_token: str


class UserData(BaseModel):
    id: str
    email: str
    name: Optional[str]
    role: str
    empl_id: Optional[str] = None


class LoginResponse(BaseModel):
    success: bool = True
    message: str
    token: str
    refresh_token: str
    data: UserData


class TokenResponse(BaseModel):
    success: bool = True
    token: str
    refresh_token: str
