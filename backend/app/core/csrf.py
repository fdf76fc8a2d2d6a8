import secrets
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from app.core.config import settings
from app.core.database import SessionLocal
from app.core.session import get_session

# CSRF検証を免除するパス (セッション確立前 / 破棄のみ)
CSRF_EXEMPT_PATHS = {
    "/api/auth/login",
    "/api/auth/register",
    "/api/auth/logout",
}

# CSRF検証対象メソッド
CSRF_METHODS = {"POST", "PUT", "DELETE", "PATCH"}

CSRF_HEADER = "X-CSRF-Token"


def lookup_csrf_token(session_token: str) -> Optional[str]:
    """セッション行に保存したCSRFトークンを取得。無効セッションはNone"""
    db = SessionLocal()
    try:
        resolved = get_session(db, session_token)
    finally:
        db.close()
    if resolved is None:
        return None
    _, session = resolved
    return session.csrf_token


class CSRFMiddleware(BaseHTTPMiddleware):
    """CSRF保護ミドルウェア"""

    async def dispatch(self, request: Request, call_next):
        if not settings.CSRF_ENABLED or request.method not in CSRF_METHODS:
            return await call_next(request)

        # 免除パスチェック
        if request.url.path in CSRF_EXEMPT_PATHS:
            return await call_next(request)

        # 未ログイン・期限切れはCSRFではなく認可側で401にする
        session_token = request.cookies.get(settings.SESSION_COOKIE_NAME)
        expected = lookup_csrf_token(session_token) if session_token else None
        if expected is None:
            return await call_next(request)

        csrf_token = request.headers.get(CSRF_HEADER, "")
        if not secrets.compare_digest(expected.encode(), csrf_token.encode()):
            return JSONResponse(status_code=403, content={"error": "Token CSRF tidak valid"})

        return await call_next(request)
