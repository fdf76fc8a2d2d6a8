"""共通依存関数: 認証・ロール制御"""
from typing import Optional

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.database import get_db
from app.core.session import get_session
from app.models.user import User, UserRole
from app.services.access_guard import (
    ANSWER_ROLES,
    EDIT_QUESTION_ROLES,
    SUBMIT_QUESTION_ROLES,
    require_role,
)


def get_session_token(request: Request) -> Optional[str]:
    return request.cookies.get(settings.SESSION_COOKIE_NAME)


async def get_current_user(
    token: Optional[str] = Depends(get_session_token),
    db: Session = Depends(get_db),
) -> Optional[User]:
    """Cookie → sessions → users でユーザー取得。未ログイン・期限切れならNone"""
    resolved = get_session(db, token)
    if resolved is None:
        return None
    user, _ = resolved
    return user


async def require_login(
    user: Optional[User] = Depends(get_current_user),
) -> User:
    """ログイン必須。未ログインなら401"""
    return require_role(user, tuple(UserRole))


async def require_question_submitter(user: Optional[User] = Depends(get_current_user)) -> User:
    return require_role(user, SUBMIT_QUESTION_ROLES)


async def require_penanya(user: Optional[User] = Depends(get_current_user)) -> User:
    """質問の編集・削除はpenanyaのみ"""
    return require_role(user, EDIT_QUESTION_ROLES)


async def require_penjawab(user: Optional[User] = Depends(get_current_user)) -> User:
    """回答・回答編集はpenjawabのみ"""
    return require_role(user, ANSWER_ROLES)
