from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class AnswerCreate(BaseModel):
    no_registrasi: Optional[str] = None
    technical_advisory_note: Optional[str] = None


class AnswerNoteUpdate(BaseModel):
    technical_advisory_note: Optional[str] = None


class AnswerHistoryOut(BaseModel):
    id: int
    answer_id: int
    user_id: Optional[int] = None
    user_name: Optional[str] = None
    old_note: Optional[str] = None
    new_note: Optional[str] = None
    created_at: Optional[datetime] = None


class RegistrationNumberOut(BaseModel):
    question_id: int
    jenis_advisory: str
    no_registrasi: str
