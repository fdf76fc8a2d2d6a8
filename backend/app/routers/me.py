"""プロフィールAPI"""
from typing import Optional

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.rate_limit import limiter, PROFILE_RATE_LIMIT
from app.core.session import invalidate_user_sessions
from app.models.user import User
from app.schemas.auth import ProfileUpdate, UserInfo
from app.services import auth_service
from app.routers.deps import get_session_token, require_login

router = APIRouter(prefix="/api/me", tags=["me"])


@router.get("/profile", response_model=UserInfo)
async def get_profile(user: User = Depends(require_login)):
    """プロフィール取得"""
    return UserInfo.model_validate(user)


@router.put("/profile")
@limiter.limit(PROFILE_RATE_LIMIT)
async def update_profile(
    request: Request,
    data: ProfileUpdate,
    user: User = Depends(require_login),
    token: Optional[str] = Depends(get_session_token),
    db: Session = Depends(get_db),
):
    """プロフィール更新 (名前・メール・任意でパスワード)"""
    password_changed = auth_service.update_profile(
        db,
        user,
        name=data.name,
        email=data.email,
        current_password=data.current_password,
        new_password=data.new_password,
        confirm_password=data.confirm_password,
    )

    # パスワード変更時は他のセッションを無効化（現在のセッションは維持）
    if password_changed:
        invalidate_user_sessions(db, user.id, exclude_token=token)

    return {
        "message": "Profil berhasil diperbarui",
        "user": UserInfo.model_validate(user),
    }
