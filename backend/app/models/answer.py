from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, UniqueConstraint, func
from sqlalchemy.orm import relationship
from app.core.database import Base


class Answer(Base):
    __tablename__ = "answers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    question_id = Column(Integer, ForeignKey("questions.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    no_registrasi = Column(String(32), nullable=False, comment="NNN/カテゴリ/年")
    technical_advisory_note = Column(Text, nullable=False)
    tanggal_jawaban = Column(DateTime, nullable=False, server_default=func.now())
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=False, server_default=func.now(), onupdate=func.now())

    # 1質問1回答、登録番号の重複なし
    __table_args__ = (
        UniqueConstraint("question_id", name="uq_answers_question"),
        UniqueConstraint("no_registrasi", name="uq_answers_no_registrasi"),
    )

    question = relationship("Question", back_populates="answer")
    answerer = relationship("User", foreign_keys=[user_id])
