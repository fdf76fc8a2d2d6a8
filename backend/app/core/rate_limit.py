"""レート制限設定（slowapi使用）"""
from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from starlette.requests import Request
from starlette.responses import JSONResponse

from app.core.config import settings


def get_client_ip(request: Request) -> str:
    """
    クライアントIPアドレスを取得
    プロキシ経由の場合はX-Forwarded-Forヘッダーを参照
    """
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return get_remote_address(request)


# Limiterインスタンス（アプリケーション全体で共有）
limiter = Limiter(
    key_func=get_client_ip,
    default_limits=["100/minute"],
    storage_uri="memory://",
    enabled=settings.RATE_LIMIT_ENABLED,
)


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """レート制限超過時のエラーハンドラ"""
    return JSONResponse(
        status_code=429,
        content={
            "error": "Terlalu banyak percobaan. Silakan coba lagi nanti.",
            "retry_after": exc.detail,
        },
    )


LOGIN_RATE_LIMIT = "5/minute"       # ログイン: 5回/分
REGISTER_RATE_LIMIT = "3/minute"    # 登録: 3回/分
PROFILE_RATE_LIMIT = "10/minute"    # プロフィール/パスワード変更: 10回/分
