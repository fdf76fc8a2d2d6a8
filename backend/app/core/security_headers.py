"""セキュリティヘッダーミドルウェア"""
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from app.core.config import settings

# JSON APIのみ配信するため、スクリプト・フレーム類は一切許可しない
API_CSP = "default-src 'none'; frame-ancestors 'none'; base-uri 'none'"


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """APIレスポンス共通のセキュリティヘッダー"""

    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)

        response.headers["X-Frame-Options"] = "DENY"
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["Referrer-Policy"] = "same-origin"
        response.headers.setdefault("Content-Security-Policy", API_CSP)
        # 認証付きレスポンスはキャッシュさせない (更新後は再取得で鮮度を保つ)
        response.headers.setdefault("Cache-Control", "no-store")

        if not settings.DEBUG:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"

        return response
