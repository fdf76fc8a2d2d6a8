from fastapi import APIRouter

from app.core.advisory import ADVISORY_TYPES

router = APIRouter(prefix="/api/advisory-types", tags=["advisory-types"])


@router.get("")
async def list_advisory_types():
    """アドバイザリー種別一覧 (フォームの選択肢用)"""
    return [{"id": code, "label": label} for code, label in ADVISORY_TYPES.items()]
