"""認証ルーター: 登録、ログイン、ログアウト"""
from typing import Optional

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.csrf import CSRF_HEADER
from app.core.database import get_db
from app.core.rate_limit import limiter, LOGIN_RATE_LIMIT, REGISTER_RATE_LIMIT
from app.core.session import create_session, destroy_session
from app.models.user import User
from app.models.user_session import UserSession
from app.schemas.auth import RegisterRequest, LoginRequest, AuthResponse, UserInfo
from app.services import auth_service
from app.routers.deps import get_session_token, require_login

router = APIRouter(prefix="/api/auth", tags=["auth"])


def set_session_cookie(response: Response, session: UserSession) -> None:
    """セッションCookie (httponly, samesite=lax, 全パス) とCSRFヘッダーを設定"""
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=session.session_token,
        httponly=True,
        secure=not settings.DEBUG,  # 本番(DEBUG=False)ではTrue
        samesite="lax",
        max_age=settings.SESSION_EXPIRE_DAYS * 24 * 60 * 60,
        path="/",
    )
    response.headers[CSRF_HEADER] = session.csrf_token


def _login_response(response: Response, db: Session, user: User, message: str) -> AuthResponse:
    # セッション固定化対策: ログインごとに新規発行
    session = create_session(db, user.id)
    set_session_cookie(response, session)
    return AuthResponse(
        message=message,
        user_id=user.id,
        role=user.role,
        csrf_token=session.csrf_token,
    )


@router.post("/register", response_model=AuthResponse)
@limiter.limit(REGISTER_RATE_LIMIT)
async def register(
    request: Request,
    req: RegisterRequest,
    response: Response,
    db: Session = Depends(get_db),
):
    """会員登録 (登録後そのままログイン)"""
    user = auth_service.register_user(
        db=db,
        email=req.email,
        password=req.password,
        name=req.name,
        role=req.role,
    )
    return _login_response(response, db, user, "Registrasi berhasil")


@router.post("/login", response_model=AuthResponse)
@limiter.limit(LOGIN_RATE_LIMIT)
async def login(
    request: Request,
    req: LoginRequest,
    response: Response,
    db: Session = Depends(get_db),
):
    """ログイン"""
    user = auth_service.authenticate(db, req.email, req.password)
    return _login_response(response, db, user, "Login berhasil")


@router.post("/logout")
async def logout(
    response: Response,
    token: Optional[str] = Depends(get_session_token),
    db: Session = Depends(get_db),
):
    """ログアウト (DB行を削除してからCookieを消す)"""
    destroy_session(db, token)
    response.delete_cookie(settings.SESSION_COOKIE_NAME, path="/")
    return {"message": "Logout berhasil"}


@router.get("/me", response_model=UserInfo)
async def get_me(user: User = Depends(require_login)):
    """現在のログインユーザー情報"""
    return UserInfo.model_validate(user)
