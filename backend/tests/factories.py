"""テストデータ作成ヘルパー"""
from app.core.csrf import CSRF_HEADER
from app.models.question import Question, QuestionStatus
from app.models.user import User
from app.services.auth_service import hash_password

PASSWORD = "rahasia123"


def make_user(db, email, role, name=None) -> User:
    user = User(
        email=email,
        password_hash=hash_password(PASSWORD),
        name=name or email.split("@")[0],
        role=role,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def make_question(db, owner, tanggal=None, jenis_advisory=None, **overrides) -> Question:
    values = dict(
        divisi_instansi="Divisi Hukum",
        nama_pemohon="Budi",
        unit_bisnis="Proyek Tol",
        data_informasi="Kontrak kerja sama",
        advisory_diinginkan="Review klausul",
    )
    values.update(overrides)
    question = Question(
        user_id=owner.id,
        jenis_advisory=jenis_advisory or ["02"],
        status=QuestionStatus.belum_dijawab,
        **values,
    )
    if tanggal is not None:
        question.tanggal_permohonan = tanggal
    db.add(question)
    db.commit()
    db.refresh(question)
    return question


def question_payload(**overrides) -> dict:
    payload = {
        "divisi_instansi": "Divisi Keuangan",
        "nama_pemohon": "Rina",
        "unit_bisnis": "Anak Usaha A",
        "data_informasi": "Laporan audit 2024",
        "advisory_diinginkan": "Analisis risiko pajak",
        "jenis_advisory": ["02", "05"],
    }
    payload.update(overrides)
    return payload


def login(client, email, password=PASSWORD) -> dict:
    """ログインしてCSRFヘッダーを返す"""
    res = client.post("/api/auth/login", json={"email": email, "password": password})
    assert res.status_code == 200, res.text
    return {CSRF_HEADER: res.json()["csrf_token"]}
