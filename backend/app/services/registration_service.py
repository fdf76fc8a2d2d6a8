"""登録番号 (no_registrasi) 採番

形式: "{連番3桁}/{カテゴリ}/{年}" 例: 001/02/2025
連番はカテゴリ×年ごとに registration_counters の1行で管理し、FOR UPDATEで払い出す。
カウンター行が無い場合は既存回答の番号 (末尾一致) 件数から初期化する。
"""
import re
from datetime import datetime
from typing import Optional
from zoneinfo import ZoneInfo

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.logging import get_logger
from app.models.answer import Answer
from app.models.registration_counter import RegistrationCounter

logger = get_logger(__name__)

WIB = ZoneInfo("Asia/Jakarta")

REGISTRATION_PATTERN = re.compile(r"^(\d{3,})/(\d{2})/(\d{4})$")


def current_year() -> int:
    """採番の年はWIB基準"""
    return datetime.now(WIB).year


def format_registration_number(seq: int, code: str, year: int) -> str:
    return f"{seq:03d}/{code}/{year}"


def parse_registration_number(value: str) -> tuple[int, str, int]:
    """"NNN/CC/YYYY" を (連番, カテゴリ, 年) に分解。不正な形式はValueError"""
    m = REGISTRATION_PATTERN.match((value or "").strip())
    if not m:
        raise ValueError(f"invalid registration number: {value!r}")
    return int(m.group(1)), m.group(2), int(m.group(3))


def _count_existing(db: Session, code: str, year: int) -> int:
    """既存回答のうち "*/CC/YYYY" に一致する件数"""
    suffix = f"/{code}/{year}"
    return (
        db.query(func.count(Answer.id))
        .filter(Answer.no_registrasi.endswith(suffix, autoescape=True))
        .scalar()
    ) or 0


def _get_counter(db: Session, code: str, year: int, lock: bool = False) -> Optional[RegistrationCounter]:
    q = db.query(RegistrationCounter).filter(
        RegistrationCounter.jenis_advisory == code,
        RegistrationCounter.year == year,
    )
    if lock:
        q = q.with_for_update()
    return q.first()


def peek_next_number(db: Session, code: str, year: Optional[int] = None) -> str:
    """次の登録番号をプレビュー (予約しない)。DB障害時は001を返す"""
    year = year or current_year()
    try:
        counter = _get_counter(db, code, year)
        if counter is not None:
            last = counter.last_number
        else:
            last = _count_existing(db, code, year)
    except SQLAlchemyError:
        logger.exception(f"登録番号プレビュー失敗: jenis_advisory={code}, year={year}")
        db.rollback()
        return format_registration_number(1, code, year)
    return format_registration_number(last + 1, code, year)


def allocate_number(db: Session, code: str, year: Optional[int] = None) -> str:
    """
    登録番号を払い出す。呼び出し側のトランザクション内で実行し、コミットは呼び出し側が行う。

    カウンター行を FOR UPDATE で確保してからインクリメントするため、
    同時実行でも同じ番号は払い出されない。
    """
    year = year or current_year()
    counter = _get_counter(db, code, year, lock=True)
    if counter is None:
        seed = _count_existing(db, code, year)
        try:
            with db.begin_nested():
                counter = RegistrationCounter(jenis_advisory=code, year=year, last_number=seed)
                db.add(counter)
        except IntegrityError:
            # 別リクエストが先に行を作成した
            counter = _get_counter(db, code, year, lock=True)
            if counter is None:
                raise

    counter.last_number += 1
    db.flush()
    return format_registration_number(counter.last_number, code, year)
