"""質問一覧の絞り込み・ページング

すべての条件はSQLAlchemy式で組み立てる (文字列連結のSQLは使わない)。
"""
import math
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Query, Session, joinedload

from app.models.answer import Answer
from app.models.question import Question, QuestionStatus

PAGE_SIZE = 5

STATUS_ALL = "all"
SORT_NEWEST = "newest"
SORT_OLDEST = "oldest"

# 部分一致検索の対象列
SEARCH_COLUMNS = (
    Question.divisi_instansi,
    Question.nama_pemohon,
    Question.unit_bisnis,
    Question.data_informasi,
)


@dataclass
class QuestionFilter:
    status: str = STATUS_ALL
    sort_by: str = SORT_NEWEST
    search: Optional[str] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    page: int = 1


@dataclass
class QuestionPage:
    items: list[Question] = field(default_factory=list)
    total_count: int = 0
    total_pages: int = 0
    page: int = 1
    per_page: int = PAGE_SIZE


def apply_filter(q: Query, flt: QuestionFilter) -> Query:
    """ステータス・検索語・期間の条件を付与"""
    if flt.status and flt.status != STATUS_ALL:
        q = q.filter(Question.status == QuestionStatus(flt.status))

    search = (flt.search or "").strip()
    if search:
        q = q.filter(or_(*(col.icontains(search, autoescape=True) for col in SEARCH_COLUMNS)))

    # 期間は日付単位で両端を含む
    if flt.date_from:
        q = q.filter(Question.tanggal_permohonan >= datetime.combine(flt.date_from, time.min))
    if flt.date_to:
        q = q.filter(Question.tanggal_permohonan < datetime.combine(flt.date_to + timedelta(days=1), time.min))
    return q


def apply_order(q: Query, sort_by: str) -> Query:
    # 同一日時はidで順序を固定
    if sort_by == SORT_OLDEST:
        return q.order_by(Question.tanggal_permohonan.asc(), Question.id.asc())
    return q.order_by(Question.tanggal_permohonan.desc(), Question.id.desc())


def fetch_question_page(
    db: Session,
    flt: QuestionFilter,
    owner_id: Optional[int] = None,
) -> QuestionPage:
    """
    質問一覧を1ページ分取得する。

    Args:
        db: DBセッション
        flt: 絞り込み条件
        owner_id: 指定時はその所有者の質問のみ (penanya用)

    Returns:
        回答・回答者をロード済みの QuestionPage
    """
    page = max(flt.page or 1, 1)

    q = db.query(Question)
    if owner_id is not None:
        q = q.filter(Question.user_id == owner_id)
    q = apply_filter(q, flt)

    total_count = q.count()
    items = (
        apply_order(q, flt.sort_by)
        .options(joinedload(Question.answer).joinedload(Answer.answerer))
        .offset((page - 1) * PAGE_SIZE)
        .limit(PAGE_SIZE)
        .all()
    )
    return QuestionPage(
        items=items,
        total_count=total_count,
        total_pages=math.ceil(total_count / PAGE_SIZE),
        page=page,
    )
