"""DBセッション管理

セッションは sessions テーブルに保存し、固定期限 (SESSION_EXPIRE_DAYS) で失効する。
期限切れ行は削除せず、参照時に無効扱いとする (遅延失効)。
"""
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.logging import get_logger
from app.models.user import User
from app.models.user_session import UserSession

logger = get_logger(__name__)

SESSION_TTL = timedelta(days=settings.SESSION_EXPIRE_DAYS)


def utcnow() -> datetime:
    """naive UTC (DBのDateTime列と比較する用)"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def create_session(db: Session, user_id: int) -> UserSession:
    """新しいセッションを作成 (256bitトークン)"""
    session = UserSession(
        user_id=user_id,
        session_token=secrets.token_hex(32),
        csrf_token=secrets.token_hex(32),
        expires_at=utcnow() + SESSION_TTL,
    )
    db.add(session)
    db.commit()
    db.refresh(session)
    return session


def get_session(db: Session, token: Optional[str]) -> Optional[tuple[User, UserSession]]:
    """トークンから (ユーザー, セッション) を取得。無効・期限切れ・障害時はNone"""
    if not token:
        return None
    try:
        row = (
            db.query(User, UserSession)
            .join(UserSession, UserSession.user_id == User.id)
            .filter(
                UserSession.session_token == token,
                UserSession.expires_at > utcnow(),
            )
            .first()
        )
    except SQLAlchemyError:
        logger.exception("セッション取得失敗")
        db.rollback()
        return None
    if row is None:
        return None
    user, session = row
    return user, session


def destroy_session(db: Session, token: Optional[str]) -> None:
    """セッションを破棄 (存在しなくても成功)"""
    if not token:
        return
    db.query(UserSession).filter(UserSession.session_token == token).delete(
        synchronize_session=False
    )
    db.commit()


def invalidate_user_sessions(
    db: Session,
    user_id: int,
    exclude_token: Optional[str] = None,
) -> int:
    """
    指定ユーザーの全セッションを無効化する。

    Args:
        db: DBセッション
        user_id: 無効化対象のユーザーID
        exclude_token: 除外するトークン（現在のセッションを維持する場合）

    Returns:
        削除したセッション数
    """
    q = db.query(UserSession).filter(UserSession.user_id == user_id)
    if exclude_token:
        q = q.filter(UserSession.session_token != exclude_token)
    deleted_count = q.delete(synchronize_session=False)
    db.commit()
    return deleted_count
