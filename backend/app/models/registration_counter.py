from sqlalchemy import Column, Integer, String, DateTime, UniqueConstraint, func
from app.core.database import Base


class RegistrationCounter(Base):
    """登録番号カウンター (カテゴリ×年ごとに1行、FOR UPDATEで採番)"""

    __tablename__ = "registration_counters"

    id = Column(Integer, primary_key=True, autoincrement=True)
    jenis_advisory = Column(String(2), nullable=False)
    year = Column(Integer, nullable=False)
    last_number = Column(Integer, nullable=False, default=0, comment="最後に払い出した連番")
    updated_at = Column(DateTime, nullable=False, server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        UniqueConstraint("jenis_advisory", "year", name="uq_registration_counter_scope"),
    )
