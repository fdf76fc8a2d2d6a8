from datetime import timedelta

from app.core.csrf import CSRF_HEADER
from app.core.session import (
    create_session,
    destroy_session,
    get_session,
    invalidate_user_sessions,
    utcnow,
)
from app.models.user_session import UserSession

from tests.factories import login, question_payload


def test_create_and_resolve_session(db, penanya):
    session = create_session(db, penanya.id)

    assert len(session.session_token) == 64
    assert session.csrf_token != session.session_token
    user, resolved = get_session(db, session.session_token)
    assert user.id == penanya.id
    assert user.role == penanya.role
    assert resolved.id == session.id


def test_unknown_or_empty_token_resolves_to_none(db, penanya):
    create_session(db, penanya.id)

    assert get_session(db, None) is None
    assert get_session(db, "") is None
    assert get_session(db, "0" * 64) is None


def test_destroy_session_is_idempotent(db, penanya):
    session = create_session(db, penanya.id)
    token = session.session_token

    destroy_session(db, token)
    destroy_session(db, token)
    destroy_session(db, None)

    assert get_session(db, token) is None


def test_expired_session_is_not_resolved(db, penanya):
    session = create_session(db, penanya.id)
    session.expires_at = utcnow() - timedelta(seconds=1)
    db.commit()

    assert get_session(db, session.session_token) is None
    # 期限切れ行は参照時に削除しない
    assert db.query(UserSession).count() == 1


def test_session_expiry_is_fixed_seven_days(db, penanya):
    before = utcnow()
    session = create_session(db, penanya.id)

    assert timedelta(days=7) <= session.expires_at - before < timedelta(days=7, minutes=1)
    # 参照しても延長されない
    expires_at = session.expires_at
    get_session(db, session.session_token)
    db.refresh(session)
    assert session.expires_at == expires_at


def test_invalidate_user_sessions_keeps_current(db, penanya):
    keep = create_session(db, penanya.id)
    create_session(db, penanya.id)
    create_session(db, penanya.id)

    deleted = invalidate_user_sessions(db, penanya.id, exclude_token=keep.session_token)

    assert deleted == 2
    assert get_session(db, keep.session_token) is not None


def test_login_me_logout_roundtrip(client, penanya):
    res = client.post("/api/auth/login", json={"email": penanya.email, "password": "rahasia123"})
    assert res.status_code == 200
    body = res.json()
    assert body["message"] == "Login berhasil"
    assert body["role"] == "penanya"
    assert res.headers[CSRF_HEADER] == body["csrf_token"]
    set_cookie = res.headers["set-cookie"].lower()
    assert "session=" in set_cookie
    assert "httponly" in set_cookie
    assert "samesite=lax" in set_cookie
    assert "path=/" in set_cookie
    assert "secure" in set_cookie

    me = client.get("/api/auth/me")
    assert me.status_code == 200
    assert me.json()["email"] == penanya.email

    out = client.post("/api/auth/logout")
    assert out.status_code == 200
    assert out.json() == {"message": "Logout berhasil"}

    me = client.get("/api/auth/me")
    assert me.status_code == 401
    assert me.json() == {"error": "Unauthorized"}

    # 2回目のログアウトも成功する
    assert client.post("/api/auth/logout").status_code == 200


def test_each_login_issues_new_session(make_client, penanya):
    first, second = make_client(), make_client()
    login(first, penanya.email)
    login(second, penanya.email)

    assert first.cookies.get("session") != second.cookies.get("session")
    first.post("/api/auth/logout")
    assert second.get("/api/auth/me").status_code == 200


def test_mutation_without_csrf_header_is_rejected(client, penanya):
    headers = login(client, penanya.email)

    res = client.post("/api/questions", json=question_payload())
    assert res.status_code == 403
    assert res.json() == {"error": "Token CSRF tidak valid"}

    res = client.post("/api/questions", json=question_payload(), headers={CSRF_HEADER: "salah"})
    assert res.status_code == 403

    res = client.post("/api/questions", json=question_payload(), headers=headers)
    assert res.status_code == 200


def test_unauthenticated_mutation_gets_401(client):
    res = client.post("/api/questions", json=question_payload())
    assert res.status_code == 401
    assert res.json() == {"error": "Unauthorized"}
