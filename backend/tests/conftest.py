import os
import tempfile

# アプリのimport前にテスト用設定を注入する
_DB_PATH = os.path.join(tempfile.gettempdir(), f"advisory_test_{os.getpid()}.db")
os.environ["DATABASE_URL"] = f"sqlite:///{_DB_PATH}"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["DEBUG"] = "false"
os.environ["ENV"] = "test"

import pytest
from fastapi.testclient import TestClient

from app import models  # noqa: F401  全テーブルをmetadataに登録
from app.core.database import Base, SessionLocal, engine
from app.main import app
from app.models.user import UserRole

from tests.factories import make_user


@pytest.fixture(autouse=True)
def _schema():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def penanya(db):
    return make_user(db, "penanya@example.com", UserRole.penanya, name="Siti Penanya")


@pytest.fixture
def penjawab(db):
    return make_user(db, "penjawab@example.com", UserRole.penjawab, name="Agus Penjawab")


@pytest.fixture
def make_client():
    # DEBUG=false ではCookieがsecureになるためhttpsで接続する
    def _make():
        return TestClient(app, base_url="https://testserver")
    return _make


@pytest.fixture
def client(make_client):
    return make_client()
