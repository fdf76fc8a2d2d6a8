"""ロール制御

サービス層・ルーター層共通の認可チェック。呼び出し元ユーザーは必ず引数で渡す。
所有者チェックは各リポジトリのクエリ条件 (user_id == 呼び出し元) で行う。
"""
from typing import Optional

from app.core.exceptions import Unauthenticated, Unauthorized
from app.models.user import User, UserRole

# 操作ごとの許可ロール
SUBMIT_QUESTION_ROLES = (UserRole.penanya, UserRole.penjawab)
EDIT_QUESTION_ROLES = (UserRole.penanya,)
ANSWER_ROLES = (UserRole.penjawab,)


def require_role(user: Optional[User], roles: tuple[UserRole, ...]) -> User:
    """未ログインならUnauthenticated、ロール不一致ならUnauthorized"""
    if user is None:
        raise Unauthenticated()
    if user.role not in roles:
        raise Unauthorized()
    return user


def sees_all_questions(user: User) -> bool:
    """penjawabは全質問、penanyaは自分の質問のみ"""
    return user.role == UserRole.penjawab
