import json
import logging

from app.core.advisory import ADVISORY_TYPES, advisory_label, is_valid_advisory_code
from app.core.logging import JSONFormatter, get_logger, log_event
from app.create_penjawab import PENJAWAB_EMAIL, ensure_default_penjawab
from app.models.user import UserRole
from app.services.auth_service import verify_password


def test_health(client):
    res = client.get("/health")

    assert res.status_code == 200
    assert res.json() == {"status": "ok", "db": "connected"}
    assert res.headers["X-Content-Type-Options"] == "nosniff"
    assert res.headers["X-Frame-Options"] == "DENY"
    assert "Strict-Transport-Security" in res.headers


def test_advisory_types(client):
    res = client.get("/api/advisory-types")

    assert res.status_code == 200
    body = res.json()
    assert len(body) == 19
    assert [item["id"] for item in body] == [f"{i:02d}" for i in range(1, 20)]
    assert body[0]["label"] == ADVISORY_TYPES["01"]


def test_advisory_code_helpers():
    assert is_valid_advisory_code("19")
    assert not is_valid_advisory_code("20")
    assert not is_valid_advisory_code("1")
    assert advisory_label("02") == ADVISORY_TYPES["02"]


def test_seed_penjawab_is_idempotent(db):
    user, created = ensure_default_penjawab(db)
    assert created
    assert user.email == PENJAWAB_EMAIL
    assert user.role == UserRole.penjawab
    assert verify_password("admin123", user.password_hash)

    again, created = ensure_default_penjawab(db)
    assert not created
    assert again.id == user.id


def test_log_event_renders_structured_data(caplog):
    logger = get_logger("app.test")

    with caplog.at_level(logging.INFO, logger="app.test"):
        log_event(logger, "回答作成", question_id=3, no_registrasi="001/02/2025")

    record = caplog.records[-1]
    entry = json.loads(JSONFormatter().format(record))
    assert entry["message"] == "回答作成"
    assert entry["level"] == "INFO"
    assert entry["data"] == {"question_id": 3, "no_registrasi": "001/02/2025"}
