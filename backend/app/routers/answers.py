"""回答API: ノート編集、編集履歴"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.models.user import User
from app.schemas.answer import AnswerHistoryOut, AnswerNoteUpdate
from app.schemas.question import AnswerSummary
from app.services import answer_service, question_service
from app.routers.deps import require_login, require_penjawab

router = APIRouter(prefix="/api/answers", tags=["answers"])


@router.put("/{answer_id}", response_model=AnswerSummary)
async def edit_answer_note(
    answer_id: int,
    data: AnswerNoteUpdate,
    user: User = Depends(require_penjawab),
    db: Session = Depends(get_db),
):
    """回答ノート編集 (変更時のみ履歴を記録)"""
    answer = answer_service.update_answer_note(db, answer_id, user, data.technical_advisory_note)
    return AnswerSummary.model_validate(answer)


@router.get("/{answer_id}/history", response_model=list[AnswerHistoryOut])
async def answer_history(
    answer_id: int,
    user: User = Depends(require_login),
    db: Session = Depends(get_db),
):
    """回答ノートの編集履歴 (新しい順)"""
    answer = answer_service.get_answer(db, answer_id)
    # penanyaは自分の質問への回答のみ参照可
    question_service.get_question(db, answer.question_id, user)
    rows = answer_service.get_answer_history(db, answer_id)
    return [
        AnswerHistoryOut(
            id=h.id,
            answer_id=h.answer_id,
            user_id=h.user_id,
            user_name=user_name,
            old_note=h.old_note,
            new_note=h.new_note,
            created_at=h.created_at,
        )
        for h, user_name in rows
    ]
