import threading

import pytest
from sqlalchemy.exc import IntegrityError

from app.core.database import SessionLocal
from app.core.exceptions import Conflict, NotFound, OperationFailed, ValidationError
from app.models.answer import Answer
from app.models.answer_history import AnswerHistory
from app.models.question import Question, QuestionStatus
from app.models.registration_counter import RegistrationCounter
from app.models.user import User
from app.services import answer_service, registration_service
from app.services.registration_service import current_year

from tests.factories import login, make_question


def _number(seq, code="02"):
    return f"{seq:03d}/{code}/{current_year()}"


def test_answer_flips_status_and_allocates_number(db, penanya, penjawab):
    question = make_question(db, penanya, jenis_advisory=["02", "05"])

    answer = answer_service.answer_question(db, question.id, penjawab, _number(1), "<p>Catatan</p>")

    assert answer.no_registrasi == _number(1)
    assert answer.user_id == penjawab.id
    assert answer.technical_advisory_note == "<p>Catatan</p>"
    db.refresh(question)
    assert question.status == QuestionStatus.dijawab
    assert question.answer.id == answer.id


def test_client_number_only_selects_category(db, penanya, penjawab):
    first = make_question(db, penanya, jenis_advisory=["02"])
    second = make_question(db, penanya, jenis_advisory=["02"])
    answer_service.answer_question(db, first.id, penjawab, _number(1), "a")

    # 古いプレビュー番号のまま送っても次の番号が払い出される
    answer = answer_service.answer_question(db, second.id, penjawab, _number(1), "b")

    assert answer.no_registrasi == _number(2)


def test_second_answer_is_rejected(db, penanya, penjawab):
    question = make_question(db, penanya)
    answer_service.answer_question(db, question.id, penjawab, _number(1), "pertama")

    with pytest.raises(Conflict, match="Pertanyaan sudah dijawab"):
        answer_service.answer_question(db, question.id, penjawab, _number(2), "kedua")
    assert db.query(Answer).filter(Answer.question_id == question.id).count() == 1


def test_answer_validation(db, penanya, penjawab):
    question = make_question(db, penanya, jenis_advisory=["02"])

    with pytest.raises(ValidationError, match="Semua field harus diisi"):
        answer_service.answer_question(db, question.id, penjawab, "", "catatan")
    with pytest.raises(ValidationError, match="Semua field harus diisi"):
        answer_service.answer_question(db, question.id, penjawab, _number(1), "   ")
    with pytest.raises(NotFound, match="Pertanyaan tidak ditemukan"):
        answer_service.answer_question(db, 9999, penjawab, _number(1), "catatan")
    with pytest.raises(ValidationError, match="Format nomor registrasi tidak valid"):
        answer_service.answer_question(db, question.id, penjawab, "1/02/2025", "catatan")
    with pytest.raises(ValidationError, match="Jenis advisory tidak sesuai dengan pertanyaan"):
        answer_service.answer_question(db, question.id, penjawab, _number(1, "05"), "catatan")

    db.refresh(question)
    assert question.status == QuestionStatus.belum_dijawab
    assert db.query(Answer).count() == 0


def test_lost_race_rolls_back_everything(db, penanya, penjawab, monkeypatch):
    question = make_question(db, penanya)
    real_parse = registration_service.parse_registration_number

    def parse_while_other_answers(value):
        # 状態確認の後、条件付き更新の前に別の回答が確定した状況
        other = SessionLocal()
        try:
            other.query(Question).filter(Question.id == question.id).update(
                {Question.status: QuestionStatus.dijawab}, synchronize_session=False
            )
            other.commit()
        finally:
            other.close()
        return real_parse(value)

    monkeypatch.setattr(registration_service, "parse_registration_number", parse_while_other_answers)

    with pytest.raises(Conflict, match="Pertanyaan sudah dijawab"):
        answer_service.answer_question(db, question.id, penjawab, _number(1), "catatan")

    assert db.query(Answer).count() == 0
    assert registration_service.peek_next_number(db, "02") == _number(1)


def test_concurrent_answers_only_one_wins(db, penanya, penjawab):
    question = make_question(db, penanya)
    question_id, penjawab_id = question.id, penjawab.id
    workers = 5
    barrier = threading.Barrier(workers)
    results = []
    lock = threading.Lock()

    def attempt(i):
        session = SessionLocal()
        try:
            user = session.get(User, penjawab_id)
            barrier.wait()
            answer_service.answer_question(session, question_id, user, _number(1), f"catatan {i}")
            outcome = "ok"
        except Conflict:
            outcome = "conflict"
        except OperationFailed:
            # SQLiteのロック競合で即時失敗した場合
            outcome = "failed"
        finally:
            session.close()
        with lock:
            results.append(outcome)

    threads = [threading.Thread(target=attempt, args=(i,)) for i in range(workers)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=60)

    assert len(results) == workers
    assert results.count("ok") == 1
    db.expire_all()
    assert db.query(Answer).filter(Answer.question_id == question_id).count() == 1
    assert db.get(Question, question_id).status == QuestionStatus.dijawab
    assert db.query(Answer).one().no_registrasi == _number(1)


def test_unique_constraints_back_up_single_answer(db, penanya, penjawab):
    question = make_question(db, penanya)
    db.add(Answer(question_id=question.id, user_id=penjawab.id, no_registrasi=_number(1), technical_advisory_note="a"))
    db.commit()

    db.add(Answer(question_id=question.id, user_id=penjawab.id, no_registrasi=_number(2), technical_advisory_note="b"))
    with pytest.raises(IntegrityError):
        db.commit()
    db.rollback()

    other = make_question(db, penanya)
    db.add(Answer(question_id=other.id, user_id=penjawab.id, no_registrasi=_number(1), technical_advisory_note="c"))
    with pytest.raises(IntegrityError):
        db.commit()
    db.rollback()


def test_note_update_records_history_only_on_change(db, penanya, penjawab):
    question = make_question(db, penanya)
    answer = answer_service.answer_question(db, question.id, penjawab, _number(1), "awal")

    answer_service.update_answer_note(db, answer.id, penjawab, "awal")
    assert db.query(AnswerHistory).count() == 0

    answer_service.update_answer_note(db, answer.id, penjawab, "revisi")
    rows = answer_service.get_answer_history(db, answer.id)
    assert [(h.old_note, h.new_note, name) for h, name in rows] == [("awal", "revisi", "Agus Penjawab")]

    with pytest.raises(ValidationError, match="Technical Advisory Note harus diisi"):
        answer_service.update_answer_note(db, answer.id, penjawab, "  ")
    with pytest.raises(NotFound, match="Jawaban tidak ditemukan"):
        answer_service.update_answer_note(db, 9999, penjawab, "x")


def test_answer_flow_over_http(make_client, db, penanya, penjawab):
    question = make_question(db, penanya, jenis_advisory=["05", "02"])
    answerer = make_client()
    headers = login(answerer, penjawab.email)

    peek = answerer.get(f"/api/questions/{question.id}/registration-number")
    assert peek.status_code == 200
    assert peek.json()["jenis_advisory"] == "05"
    assert peek.json()["no_registrasi"] == _number(1, "05")
    # プレビューは予約しない
    again = answerer.get(f"/api/questions/{question.id}/registration-number", params={"jenis_advisory": "02"})
    assert again.json()["no_registrasi"] == _number(1, "02")

    res = answerer.post(
        f"/api/questions/{question.id}/answer",
        json={"no_registrasi": peek.json()["no_registrasi"], "technical_advisory_note": "<b>Saran</b>"},
        headers=headers,
    )
    assert res.status_code == 200
    answer_id = res.json()["id"]
    assert res.json()["no_registrasi"] == _number(1, "05")

    res = answerer.post(
        f"/api/questions/{question.id}/answer",
        json={"no_registrasi": _number(2, "05"), "technical_advisory_note": "lagi"},
        headers=headers,
    )
    assert res.status_code == 409
    assert res.json() == {"error": "Pertanyaan sudah dijawab"}

    res = answerer.put(f"/api/answers/{answer_id}", json={"technical_advisory_note": "<b>Saran baru</b>"}, headers=headers)
    assert res.status_code == 200
    assert res.json()["technical_advisory_note"] == "<b>Saran baru</b>"

    asker = make_client()
    login(asker, penanya.email)
    detail = asker.get(f"/api/questions/{question.id}").json()
    assert detail["status"] == "dijawab"
    assert detail["answer"]["no_registrasi"] == _number(1, "05")
    assert detail["answerer_name"] == "Agus Penjawab"
    history = asker.get(f"/api/answers/{answer_id}/history").json()
    assert [h["new_note"] for h in history] == ["<b>Saran baru</b>"]


def test_penanya_cannot_answer(client, db, penanya):
    question = make_question(db, penanya)
    headers = login(client, penanya.email)

    res = client.post(
        f"/api/questions/{question.id}/answer",
        json={"no_registrasi": _number(1), "technical_advisory_note": "x"},
        headers=headers,
    )

    assert res.status_code == 403
    assert client.get(f"/api/questions/{question.id}/registration-number").status_code == 403


def test_peek_rejects_unknown_category(client, db, penanya, penjawab):
    question = make_question(db, penanya)
    login(client, penjawab.email)

    res = client.get(f"/api/questions/{question.id}/registration-number", params={"jenis_advisory": "77"})

    assert res.status_code == 400
    assert res.json() == {"error": "Jenis advisory tidak valid"}


def test_peek_rejects_category_outside_question(client, db, penanya, penjawab):
    question = make_question(db, penanya, jenis_advisory=["02"])
    login(client, penjawab.email)

    res = client.get(f"/api/questions/{question.id}/registration-number", params={"jenis_advisory": "05"})

    assert res.status_code == 400
    assert res.json() == {"error": "Jenis advisory tidak sesuai dengan pertanyaan"}


def test_number_collision_reports_its_own_conflict(db, penanya, penjawab):
    taken = make_question(db, penanya)
    db.add(Answer(question_id=taken.id, user_id=penjawab.id, no_registrasi=_number(1), technical_advisory_note="a"))
    # カウンターが既存番号より遅れている状態
    db.add(RegistrationCounter(jenis_advisory="02", year=current_year(), last_number=0))
    db.commit()
    question = make_question(db, penanya)
    question_id = question.id

    with pytest.raises(Conflict, match="Nomor registrasi sudah digunakan"):
        answer_service.answer_question(db, question_id, penjawab, _number(1), "catatan")

    db.expire_all()
    assert db.get(Question, question_id).status == QuestionStatus.belum_dijawab
    assert db.query(RegistrationCounter).one().last_number == 0
