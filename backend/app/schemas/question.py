from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from app.models.question import QuestionStatus


class QuestionPayload(BaseModel):
    """作成・更新共通。必須チェックとtrimはサービス層で行う"""

    divisi_instansi: Optional[str] = None
    nama_pemohon: Optional[str] = None
    unit_bisnis: Optional[str] = None
    data_informasi: Optional[str] = None
    advisory_diinginkan: Optional[str] = None
    jenis_advisory: list[str] = Field(default_factory=list)


class AnswerSummary(BaseModel):
    id: int
    question_id: int
    user_id: int
    no_registrasi: str
    technical_advisory_note: str
    tanggal_jawaban: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class QuestionOut(BaseModel):
    id: int
    user_id: int
    divisi_instansi: str
    nama_pemohon: str
    unit_bisnis: str
    data_informasi: str
    advisory_diinginkan: str
    jenis_advisory: list[str]
    status: QuestionStatus
    tanggal_permohonan: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    answer: Optional[AnswerSummary] = None
    answerer_name: Optional[str] = None

    model_config = {"from_attributes": True}

    @classmethod
    def from_question(cls, question) -> "QuestionOut":
        out = cls.model_validate(question)
        if question.answer is not None and question.answer.answerer is not None:
            out.answerer_name = question.answer.answerer.name
        return out


class QuestionListResponse(BaseModel):
    items: list[QuestionOut]
    total_count: int
    total_pages: int
    page: int
    per_page: int


class QuestionHistoryOut(BaseModel):
    id: int
    question_id: int
    user_id: Optional[int] = None
    user_name: Optional[str] = None
    field_changed: str
    old_value: Optional[str] = None
    new_value: Optional[str] = None
    created_at: Optional[datetime] = None
