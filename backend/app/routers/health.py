from fastapi import APIRouter
from app.core.database import check_db_connection

router = APIRouter()


@router.get("/health")
@router.get("/api/health")
async def health_check():
    """ヘルスチェックエンドポイント"""
    db_ok = check_db_connection()
    return {
        "status": "ok" if db_ok else "degraded",
        "db": "connected" if db_ok else "disconnected",
    }
