"""認証ビジネスロジック"""
from typing import Optional

import bcrypt
from email_validator import EmailNotValidError, validate_email
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import (
    AuthenticationFailed,
    Conflict,
    OperationFailed,
    ValidationError,
)
from app.core.logging import get_logger
from app.models.user import User, UserRole

logger = get_logger(__name__)

MIN_PASSWORD_LENGTH = 6
# bcryptは72バイトまでしか扱えない
BCRYPT_MAX_BYTES = 72


def _pwd_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(password: str) -> str:
    """パスワードをbcryptでハッシュ化"""
    return bcrypt.hashpw(_pwd_bytes(password), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    """パスワードを検証 (不正なハッシュはFalse)"""
    try:
        return bcrypt.checkpw(_pwd_bytes(password), hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


def _parse_role(role) -> UserRole:
    try:
        return UserRole(role)
    except ValueError:
        raise ValidationError("Role tidak valid")


def _check_email_format(email: str) -> None:
    try:
        validate_email(email, check_deliverability=False)
    except EmailNotValidError:
        raise ValidationError("Format email tidak valid")


def register_user(
    db: Session,
    email: str,
    password: str,
    name: str,
    role,
) -> User:
    """新規ユーザー作成"""
    email = (email or "").strip()
    name = (name or "").strip()
    if not email or not password or not name or not role:
        raise ValidationError("Semua field harus diisi")
    _check_email_format(email)
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password minimal {MIN_PASSWORD_LENGTH} karakter")
    user_role = _parse_role(role)

    try:
        if get_user_by_email(db, email):
            raise Conflict("Email sudah terdaftar")

        user = User(
            email=email,
            password_hash=hash_password(password),
            name=name,
            role=user_role,
        )
        db.add(user)
        db.commit()
    except IntegrityError:
        # 同時登録でunique制約に当たった場合
        db.rollback()
        raise Conflict("Email sudah terdaftar")
    except SQLAlchemyError:
        db.rollback()
        logger.exception("ユーザー登録失敗")
        raise OperationFailed("Terjadi kesalahan saat registrasi")

    db.refresh(user)
    logger.info(f"ユーザー作成: id={user.id}, role={user.role.value}")
    return user


def authenticate(db: Session, email: str, password: str) -> User:
    """メールアドレスとパスワードで認証"""
    email = (email or "").strip()
    if not email or not password:
        raise ValidationError("Email dan password harus diisi")

    try:
        user = get_user_by_email(db, email)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("ログイン処理失敗")
        raise OperationFailed("Terjadi kesalahan saat login")

    if not user or not verify_password(password, user.password_hash):
        raise AuthenticationFailed()
    return user


def update_profile(
    db: Session,
    user: User,
    name: str,
    email: str,
    current_password: Optional[str] = None,
    new_password: Optional[str] = None,
    confirm_password: Optional[str] = None,
) -> bool:
    """プロフィール更新。パスワードを変更した場合Trueを返す"""
    name = (name or "").strip()
    email = (email or "").strip()
    if not name or not email:
        raise ValidationError("Nama dan email harus diisi")
    _check_email_format(email)

    # 新パスワード未入力ならパスワードは変更しない
    password_changed = False
    if new_password:
        if not current_password:
            raise ValidationError("Password saat ini harus diisi untuk mengubah password")
        if new_password != confirm_password:
            raise ValidationError("Password baru dan konfirmasi tidak sesuai")
        if len(new_password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(f"Password baru minimal {MIN_PASSWORD_LENGTH} karakter")
        if not verify_password(current_password, user.password_hash):
            raise ValidationError("Password saat ini tidak sesuai")
        password_changed = True

    try:
        if email != user.email:
            existing = get_user_by_email(db, email)
            if existing and existing.id != user.id:
                raise Conflict("Email sudah digunakan")
            user.email = email
        user.name = name
        if password_changed:
            user.password_hash = hash_password(new_password)
        db.commit()
    except IntegrityError:
        db.rollback()
        raise Conflict("Email sudah digunakan")
    except SQLAlchemyError:
        db.rollback()
        logger.exception("プロフィール更新失敗")
        raise OperationFailed("Gagal memperbarui profil")

    logger.info(f"プロフィール更新: user_id={user.id}, password_changed={password_changed}")
    return password_changed


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == email).first()


def get_user_by_id(db: Session, user_id: int) -> Optional[User]:
    return db.query(User).filter(User.id == user_id).first()
