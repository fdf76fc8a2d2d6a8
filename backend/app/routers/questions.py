"""質問API: 投稿、一覧、詳細、編集、削除、回答"""
from datetime import date
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.advisory import is_valid_advisory_code
from app.core.database import get_db
from app.core.exceptions import ValidationError
from app.models.user import User
from app.schemas.answer import AnswerCreate, RegistrationNumberOut
from app.schemas.question import (
    AnswerSummary,
    QuestionHistoryOut,
    QuestionListResponse,
    QuestionOut,
    QuestionPayload,
)
from app.services import answer_service, question_service, registration_service
from app.services.question_query import QuestionFilter
from app.routers.deps import (
    require_login,
    require_penanya,
    require_penjawab,
    require_question_submitter,
)

router = APIRouter(prefix="/api/questions", tags=["questions"])


@router.post("", response_model=QuestionOut)
async def submit_question(
    data: QuestionPayload,
    user: User = Depends(require_question_submitter),
    db: Session = Depends(get_db),
):
    """質問投稿 (penanya / penjawabの代理入力)"""
    fields = question_service.validate_question_fields(data.model_dump())
    question = question_service.create_question(db, user, fields)
    return QuestionOut.from_question(question)


@router.get("", response_model=QuestionListResponse)
async def list_questions(
    status: Literal["all", "belum_dijawab", "dijawab"] = Query("all"),
    sort_by: Literal["newest", "oldest"] = Query("newest"),
    search: Optional[str] = Query(None, max_length=255),
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    page: int = Query(1, ge=1),
    user: User = Depends(require_login),
    db: Session = Depends(get_db),
):
    """質問一覧 (penanyaは自分の質問のみ)"""
    flt = QuestionFilter(
        status=status,
        sort_by=sort_by,
        search=search,
        date_from=date_from,
        date_to=date_to,
        page=page,
    )
    result = question_service.list_questions(db, user, flt)
    return QuestionListResponse(
        items=[QuestionOut.from_question(q) for q in result.items],
        total_count=result.total_count,
        total_pages=result.total_pages,
        page=result.page,
        per_page=result.per_page,
    )


@router.get("/{question_id}", response_model=QuestionOut)
async def get_question(
    question_id: int,
    user: User = Depends(require_login),
    db: Session = Depends(get_db),
):
    """質問詳細"""
    question = question_service.get_question(db, question_id, user)
    return QuestionOut.from_question(question)


@router.put("/{question_id}", response_model=QuestionOut)
async def edit_question(
    question_id: int,
    data: QuestionPayload,
    user: User = Depends(require_penanya),
    db: Session = Depends(get_db),
):
    """質問編集 (自分の未回答の質問のみ)"""
    fields = question_service.validate_question_fields(data.model_dump())
    question = question_service.update_question(db, question_id, user, fields)
    return QuestionOut.from_question(question)


@router.delete("/{question_id}")
async def delete_question(
    question_id: int,
    user: User = Depends(require_penanya),
    db: Session = Depends(get_db),
):
    """質問削除 (自分の未回答の質問のみ)"""
    question_service.delete_question(db, question_id, user)
    return {"message": "Pertanyaan berhasil dihapus"}


@router.get("/{question_id}/history", response_model=list[QuestionHistoryOut])
async def question_history(
    question_id: int,
    user: User = Depends(require_login),
    db: Session = Depends(get_db),
):
    """質問の編集履歴 (新しい順)"""
    # 参照権限チェックを兼ねる
    question_service.get_question(db, question_id, user)
    rows = question_service.get_question_history(db, question_id)
    return [
        QuestionHistoryOut(
            id=h.id,
            question_id=h.question_id,
            user_id=h.user_id,
            user_name=user_name,
            field_changed=h.field_changed,
            old_value=h.old_value,
            new_value=h.new_value,
            created_at=h.created_at,
        )
        for h, user_name in rows
    ]


@router.get("/{question_id}/registration-number", response_model=RegistrationNumberOut)
async def peek_registration_number(
    question_id: int,
    jenis_advisory: Optional[str] = Query(None),
    user: User = Depends(require_penjawab),
    db: Session = Depends(get_db),
):
    """次の登録番号のプレビュー (予約はしない)"""
    question = question_service.get_question(db, question_id, user)
    code = jenis_advisory or (question.jenis_advisory or [None])[0]
    if not code or not is_valid_advisory_code(code):
        raise ValidationError("Jenis advisory tidak valid")
    if code not in (question.jenis_advisory or []):
        raise ValidationError("Jenis advisory tidak sesuai dengan pertanyaan")
    return RegistrationNumberOut(
        question_id=question_id,
        jenis_advisory=code,
        no_registrasi=registration_service.peek_next_number(db, code),
    )


@router.post("/{question_id}/answer", response_model=AnswerSummary)
async def submit_answer(
    question_id: int,
    data: AnswerCreate,
    user: User = Depends(require_penjawab),
    db: Session = Depends(get_db),
):
    """回答投稿 (質問はdijawabに遷移)"""
    answer = answer_service.answer_question(
        db,
        question_id,
        user,
        no_registrasi=data.no_registrasi,
        technical_advisory_note=data.technical_advisory_note,
    )
    return AnswerSummary.model_validate(answer)
