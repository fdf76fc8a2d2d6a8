import enum

from sqlalchemy import Column, Integer, String, Text, DateTime, JSON, ForeignKey, Enum as SAEnum, func
from sqlalchemy.orm import relationship
from app.core.database import Base


class QuestionStatus(str, enum.Enum):
    belum_dijawab = "belum_dijawab"
    dijawab = "dijawab"


class Question(Base):
    __tablename__ = "questions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    divisi_instansi = Column(String(255), nullable=False)
    nama_pemohon = Column(String(255), nullable=False)
    unit_bisnis = Column(String(255), nullable=False)
    data_informasi = Column(Text, nullable=False)
    advisory_diinginkan = Column(Text, nullable=False)
    jenis_advisory = Column(JSON, nullable=False, comment="カテゴリコード配列 (例: [\"01\", \"05\"])")
    status = Column(
        SAEnum(QuestionStatus, name="question_status"),
        nullable=False,
        default=QuestionStatus.belum_dijawab,
        index=True,
    )
    tanggal_permohonan = Column(DateTime, nullable=False, server_default=func.now(), index=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=False, server_default=func.now(), onupdate=func.now())

    owner = relationship("User", foreign_keys=[user_id])
    answer = relationship("Answer", back_populates="question", uselist=False, passive_deletes=True)
