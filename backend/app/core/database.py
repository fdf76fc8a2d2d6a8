from sqlalchemy import create_engine, event, text
from sqlalchemy.orm import sessionmaker, DeclarativeBase
from app.core.config import settings


def _engine_kwargs(url: str) -> dict:
    # SQLite (テスト/ローカル) はコネクションプール設定を受け付けない
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False, "timeout": 30}}
    return {
        "pool_size": 10,
        "max_overflow": 20,
        "pool_recycle": 3600,
        "pool_pre_ping": True,
    }


engine = create_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG and settings.ENV == "development",
    **_engine_kwargs(settings.DATABASE_URL),
)

if engine.dialect.name == "sqlite":
    @event.listens_for(engine, "connect")
    def _sqlite_connect(dbapi_conn, _record):
        # SQLiteは既定で外部キー制約 (ON DELETE CASCADE) を無視する
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class Base(DeclarativeBase):
    pass


def get_db():
    """FastAPI依存関数: DBセッション取得"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def check_db_connection() -> bool:
    """DB接続チェック"""
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception:
        return False
