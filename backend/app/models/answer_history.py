from sqlalchemy import Column, Integer, Text, DateTime, ForeignKey, func
from app.core.database import Base


class AnswerHistory(Base):
    """回答ノート編集履歴 (追記のみ)"""

    __tablename__ = "answer_history"

    id = Column(Integer, primary_key=True, autoincrement=True)
    answer_id = Column(Integer, ForeignKey("answers.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    old_note = Column(Text, nullable=True)
    new_note = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now(), index=True)
