# 全モデルをインポート (Alembic autogenerate用)
from app.models.user import User, UserRole
from app.models.user_session import UserSession
from app.models.question import Question, QuestionStatus
from app.models.answer import Answer
from app.models.question_history import QuestionHistory
from app.models.answer_history import AnswerHistory
from app.models.registration_counter import RegistrationCounter

__all__ = [
    "User",
    "UserRole",
    "UserSession",
    "Question",
    "QuestionStatus",
    "Answer",
    "QuestionHistory",
    "AnswerHistory",
    "RegistrationCounter",
]
