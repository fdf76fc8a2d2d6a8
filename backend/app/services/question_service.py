"""質問 (permohonan advisory) ビジネスロジック

編集・削除は「自分の質問」かつ「未回答 (belum_dijawab)」の場合のみ。
条件に合わない場合は存在しない/他人/回答済みを区別せず同じエラーを返す。
"""
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from app.core.advisory import is_valid_advisory_code
from app.core.exceptions import (
    NotFound,
    NotFoundOrAlreadyAnswered,
    OperationFailed,
    ValidationError,
)
from app.core.logging import get_logger, log_event
from app.models.answer import Answer
from app.models.question import Question, QuestionStatus
from app.models.question_history import QuestionHistory
from app.models.user import User
from app.services.access_guard import sees_all_questions
from app.services.question_query import QuestionFilter, QuestionPage, fetch_question_page

logger = get_logger(__name__)

# (列名, 未入力時メッセージ) 検証はこの順で行う
TEXT_FIELDS = (
    ("divisi_instansi", "Divisi/Instansi Pemohon harus diisi"),
    ("nama_pemohon", "Nama Pemohon harus diisi"),
    ("unit_bisnis", "Unit Bisnis/Proyek/Anak Usaha harus diisi"),
    ("data_informasi", "Data/Informasi Yang Diberikan harus diisi"),
    ("advisory_diinginkan", "Advisory Yang Diinginkan harus diisi"),
)

# 変更履歴を記録する列 (jenis_advisory は対象外)
TRACKED_FIELDS = tuple(name for name, _ in TEXT_FIELDS)


@dataclass
class QuestionFields:
    divisi_instansi: str
    nama_pemohon: str
    unit_bisnis: str
    data_informasi: str
    advisory_diinginkan: str
    jenis_advisory: list[str]


def validate_question_fields(data: dict) -> QuestionFields:
    """入力値をtrimして検証。最初に失敗した項目のメッセージでValidationError"""
    values = {}
    for name, message in TEXT_FIELDS:
        value = (data.get(name) or "").strip()
        if not value:
            raise ValidationError(message)
        values[name] = value

    codes = []
    for code in data.get("jenis_advisory") or []:
        code = (code or "").strip()
        if code and code not in codes:
            codes.append(code)
    if not codes:
        raise ValidationError("Pilih minimal 1 jenis advisory")
    for code in codes:
        if not is_valid_advisory_code(code):
            raise ValidationError(f"Jenis advisory tidak valid: {code}")

    return QuestionFields(jenis_advisory=codes, **values)


def create_question(db: Session, owner: User, fields: QuestionFields) -> Question:
    """質問作成 (status=belum_dijawab, tanggal_permohonan=サーバー時刻)"""
    question = Question(
        user_id=owner.id,
        divisi_instansi=fields.divisi_instansi,
        nama_pemohon=fields.nama_pemohon,
        unit_bisnis=fields.unit_bisnis,
        data_informasi=fields.data_informasi,
        advisory_diinginkan=fields.advisory_diinginkan,
        jenis_advisory=fields.jenis_advisory,
        status=QuestionStatus.belum_dijawab,
    )
    try:
        db.add(question)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("質問作成失敗")
        raise OperationFailed("Gagal membuat pertanyaan")

    db.refresh(question)
    log_event(logger, "質問作成", question_id=question.id, user_id=owner.id, role=owner.role.value)
    return question


def _save_history(db: Session, question_id: int, user_id: int, field: str, old: str, new: str) -> None:
    """履歴1行を書き込む。失敗してもログのみで親の更新は継続"""
    try:
        with db.begin_nested():
            db.add(QuestionHistory(
                question_id=question_id,
                user_id=user_id,
                field_changed=field,
                old_value=old,
                new_value=new,
            ))
    except SQLAlchemyError:
        logger.exception(f"質問履歴の保存失敗: question_id={question_id}, field={field}")


def update_question(db: Session, question_id: int, editor: User, fields: QuestionFields) -> Question:
    """自分の未回答の質問を更新し、変更された項目ごとに履歴を残す"""
    try:
        question = (
            db.query(Question)
            .filter(
                Question.id == question_id,
                Question.user_id == editor.id,
                Question.status == QuestionStatus.belum_dijawab,
            )
            .first()
        )
        if question is None:
            raise NotFoundOrAlreadyAnswered()

        changes = [
            (name, getattr(question, name), getattr(fields, name))
            for name in TRACKED_FIELDS
            if getattr(question, name) != getattr(fields, name)
        ]
        for name in TRACKED_FIELDS:
            setattr(question, name, getattr(fields, name))
        question.jenis_advisory = fields.jenis_advisory
        db.flush()

        for name, old, new in changes:
            _save_history(db, question.id, editor.id, name, old, new)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception(f"質問更新失敗: question_id={question_id}")
        raise OperationFailed("Gagal mengupdate pertanyaan")

    log_event(logger, "質問更新", question_id=question_id, user_id=editor.id,
              changed=[name for name, _, _ in changes])
    return question


def delete_question(db: Session, question_id: int, owner: User) -> None:
    """自分の未回答の質問を削除"""
    try:
        deleted = (
            db.query(Question)
            .filter(
                Question.id == question_id,
                Question.user_id == owner.id,
                Question.status == QuestionStatus.belum_dijawab,
            )
            .delete(synchronize_session=False)
        )
        if deleted == 0:
            db.rollback()
            raise NotFoundOrAlreadyAnswered()
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception(f"質問削除失敗: question_id={question_id}")
        raise OperationFailed("Gagal menghapus pertanyaan")

    log_event(logger, "質問削除", question_id=question_id, user_id=owner.id)


def list_questions(db: Session, caller: User, flt: QuestionFilter) -> QuestionPage:
    """ロールに応じた範囲で質問一覧を取得"""
    owner_id = None if sees_all_questions(caller) else caller.id
    try:
        return fetch_question_page(db, flt, owner_id=owner_id)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("質問一覧取得失敗")
        raise OperationFailed("Gagal memuat pertanyaan")


def get_question(db: Session, question_id: int, caller: User) -> Question:
    """質問詳細 (回答・回答者付き)。penanyaは自分の質問のみ参照可"""
    try:
        q = (
            db.query(Question)
            .options(joinedload(Question.answer).joinedload(Answer.answerer))
            .filter(Question.id == question_id)
        )
        if not sees_all_questions(caller):
            q = q.filter(Question.user_id == caller.id)
        question = q.first()
    except SQLAlchemyError:
        db.rollback()
        logger.exception(f"質問取得失敗: question_id={question_id}")
        raise OperationFailed("Gagal memuat pertanyaan")

    if question is None:
        raise NotFound("Pertanyaan tidak ditemukan")
    return question


def get_question_history(db: Session, question_id: int) -> list[tuple[QuestionHistory, str | None]]:
    """編集履歴 (新しい順)。編集者名は参照時点の名前"""
    try:
        return (
            db.query(QuestionHistory, User.name)
            .outerjoin(User, QuestionHistory.user_id == User.id)
            .filter(QuestionHistory.question_id == question_id)
            .order_by(QuestionHistory.created_at.desc(), QuestionHistory.id.desc())
            .all()
        )
    except SQLAlchemyError:
        db.rollback()
        logger.exception(f"質問履歴取得失敗: question_id={question_id}")
        return []
