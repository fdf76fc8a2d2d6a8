from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from app.models.user import UserRole


class RegisterRequest(BaseModel):
    # 空入力・形式のメッセージはサービス層で返す
    email: str = Field("", max_length=255)
    password: str = Field("", max_length=128)
    name: str = Field("", max_length=255)
    role: str = ""


class LoginRequest(BaseModel):
    # 空入力のメッセージはサービス層で返す
    email: str = ""
    password: str = ""


class AuthResponse(BaseModel):
    message: str
    user_id: Optional[int] = None
    role: Optional[UserRole] = None
    csrf_token: Optional[str] = None


class UserInfo(BaseModel):
    id: int
    email: str
    name: str
    role: UserRole
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class ProfileUpdate(BaseModel):
    name: str = ""
    email: str = ""
    current_password: Optional[str] = None
    new_password: Optional[str] = None
    confirm_password: Optional[str] = None
