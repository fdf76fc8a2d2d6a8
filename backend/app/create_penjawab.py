"""初期penjawabアカウント作成スクリプト

    python -m app.create_penjawab
"""
from app.core.database import SessionLocal
from app.models.user import User, UserRole
from app.services.auth_service import hash_password

PENJAWAB_EMAIL = "admin@advisory.com"
PENJAWAB_PASSWORD = "admin123"
PENJAWAB_NAME = "Admin Penjawab"


def ensure_default_penjawab(db) -> tuple[User, bool]:
    """既定のpenjawabを作成。(ユーザー, 新規作成したか) を返す"""
    existing = db.query(User).filter(User.email == PENJAWAB_EMAIL).first()
    if existing:
        return existing, False

    user = User(
        email=PENJAWAB_EMAIL,
        password_hash=hash_password(PENJAWAB_PASSWORD),
        name=PENJAWAB_NAME,
        role=UserRole.penjawab,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user, True


def main():
    db = SessionLocal()
    try:
        _, created = ensure_default_penjawab(db)
        if not created:
            print(f"既に存在します: {PENJAWAB_EMAIL}")
            return
        print(f"penjawab作成完了: email={PENJAWAB_EMAIL}, password={PENJAWAB_PASSWORD}")
    finally:
        db.close()


if __name__ == "__main__":
    main()
