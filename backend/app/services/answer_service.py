"""回答 (jawaban) ビジネスロジック

回答作成は1トランザクションで
  1. 質問ステータスを条件付き更新 (belum_dijawab → dijawab)
  2. 登録番号を採番
  3. 回答を挿入
を行う。1で0行なら既に回答済みとして失敗させる。
"""
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import Conflict, NotFound, OperationFailed, ValidationError
from app.core.logging import get_logger, log_event
from app.models.answer import Answer
from app.models.answer_history import AnswerHistory
from app.models.question import Question, QuestionStatus
from app.models.user import User
from app.services import registration_service

logger = get_logger(__name__)

ALREADY_ANSWERED = "Pertanyaan sudah dijawab"
NUMBER_TAKEN = "Nomor registrasi sudah digunakan, silakan coba lagi"


def _is_number_collision(exc: IntegrityError) -> bool:
    """uq_answers_no_registrasi 違反か (SQLite/MySQLのメッセージで判定)"""
    return "no_registrasi" in str(exc.orig)


def answer_question(
    db: Session,
    question_id: int,
    answerer: User,
    no_registrasi: str,
    technical_advisory_note: str,
) -> Answer:
    """
    質問に回答する。

    Args:
        db: DBセッション
        question_id: 対象質問ID
        answerer: 回答者 (penjawab)
        no_registrasi: 画面で提示した登録番号。カテゴリの指定にのみ使い、
            実際の番号は採番時に確定する
        technical_advisory_note: 回答本文 (HTML可)

    Returns:
        作成された Answer
    """
    no_registrasi = (no_registrasi or "").strip()
    if not no_registrasi or not (technical_advisory_note or "").strip():
        raise ValidationError("Semua field harus diisi")

    try:
        question = db.query(Question).filter(Question.id == question_id).first()
    except SQLAlchemyError:
        db.rollback()
        logger.exception(f"回答前の質問取得失敗: question_id={question_id}")
        raise OperationFailed("Gagal menjawab pertanyaan")
    if question is None:
        raise NotFound("Pertanyaan tidak ditemukan")
    if question.status == QuestionStatus.dijawab:
        raise Conflict(ALREADY_ANSWERED)

    try:
        _, code, _ = registration_service.parse_registration_number(no_registrasi)
    except ValueError:
        raise ValidationError("Format nomor registrasi tidak valid")
    if code not in (question.jenis_advisory or []):
        raise ValidationError("Jenis advisory tidak sesuai dengan pertanyaan")

    try:
        flipped = (
            db.query(Question)
            .filter(
                Question.id == question_id,
                Question.status == QuestionStatus.belum_dijawab,
            )
            .update({Question.status: QuestionStatus.dijawab}, synchronize_session=False)
        )
        if flipped == 0:
            # 同時に別の回答が先に確定した
            db.rollback()
            raise Conflict(ALREADY_ANSWERED)

        number = registration_service.allocate_number(db, code)
        answer = Answer(
            question_id=question_id,
            user_id=answerer.id,
            no_registrasi=number,
            technical_advisory_note=technical_advisory_note,
        )
        db.add(answer)
        db.commit()
    except IntegrityError as e:
        db.rollback()
        if _is_number_collision(e):
            logger.warning(f"登録番号の重複: question_id={question_id}, jenis_advisory={code}")
            raise Conflict(NUMBER_TAKEN)
        logger.warning(f"回答の一意制約違反: question_id={question_id}")
        raise Conflict(ALREADY_ANSWERED)
    except SQLAlchemyError:
        db.rollback()
        logger.exception(f"回答作成失敗: question_id={question_id}")
        raise OperationFailed("Gagal menjawab pertanyaan")

    db.refresh(answer)
    log_event(logger, "回答作成", question_id=question_id, answer_id=answer.id,
              user_id=answerer.id, no_registrasi=answer.no_registrasi)
    return answer


def _save_history(db: Session, answer_id: int, user_id: int, old_note: str, new_note: str) -> None:
    """履歴1行を書き込む。失敗してもログのみで親の更新は継続"""
    try:
        with db.begin_nested():
            db.add(AnswerHistory(
                answer_id=answer_id,
                user_id=user_id,
                old_note=old_note,
                new_note=new_note,
            ))
    except SQLAlchemyError:
        logger.exception(f"回答履歴の保存失敗: answer_id={answer_id}")


def update_answer_note(db: Session, answer_id: int, editor: User, technical_advisory_note: str) -> Answer:
    """回答ノートを更新。内容が変わった場合のみ履歴を残す"""
    if not (technical_advisory_note or "").strip():
        raise ValidationError("Technical Advisory Note harus diisi")

    try:
        answer = db.query(Answer).filter(Answer.id == answer_id).first()
        if answer is None:
            raise NotFound("Jawaban tidak ditemukan")

        old_note = answer.technical_advisory_note
        changed = old_note != technical_advisory_note
        answer.technical_advisory_note = technical_advisory_note
        # ノート未変更でも更新日時は更新する
        answer.updated_at = func.now()
        db.flush()

        if changed:
            _save_history(db, answer.id, editor.id, old_note, technical_advisory_note)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception(f"回答更新失敗: answer_id={answer_id}")
        raise OperationFailed("Gagal mengupdate jawaban")

    db.refresh(answer)
    log_event(logger, "回答更新", answer_id=answer_id, user_id=editor.id, changed=changed)
    return answer


def get_answer(db: Session, answer_id: int) -> Answer:
    answer = db.query(Answer).filter(Answer.id == answer_id).first()
    if answer is None:
        raise NotFound("Jawaban tidak ditemukan")
    return answer


def get_answer_history(db: Session, answer_id: int) -> list[tuple[AnswerHistory, str | None]]:
    """ノート編集履歴 (新しい順)。編集者名は参照時点の名前"""
    try:
        return (
            db.query(AnswerHistory, User.name)
            .outerjoin(User, AnswerHistory.user_id == User.id)
            .filter(AnswerHistory.answer_id == answer_id)
            .order_by(AnswerHistory.created_at.desc(), AnswerHistory.id.desc())
            .all()
        )
    except SQLAlchemyError:
        db.rollback()
        logger.exception(f"回答履歴取得失敗: answer_id={answer_id}")
        return []
