# -*- coding: utf-8 -*-
"""Database access for the report scripts (runs inside an app context)."""
import logging
from typing import List, Optional, Tuple

from sqlalchemy import func, text
from sqlalchemy.exc import SQLAlchemyError

from ..errors import DatabaseConnectionFailure, DatabaseQueryFailure
from ..extensions import db
from ..models import SurveyResponse

logger = logging.getLogger(__name__)


def check_connection():
    try:
        db.session.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        db.session.rollback()
        raise DatabaseConnectionFailure(f"Não foi possível conectar ao banco: {e}") from e


def _column(attr: str):
    column = getattr(SurveyResponse, attr, None)
    if column is None:
        raise DatabaseQueryFailure(f"unknown column: {attr}")
    return column


def _query(description, fn):
    try:
        return fn()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Query failed ({description}): {e}")
        raise DatabaseQueryFailure(f"{description}: {e}") from e


def load_records(with_cep_only: bool = False) -> List[dict]:
    def run():
        q = SurveyResponse.query
        if with_cep_only:
            q = q.filter(SurveyResponse.cep.isnot(None))
        return [r.to_record() for r in q.order_by(SurveyResponse.created_at.asc()).all()]
    return _query("load records", run)


def count_responses() -> int:
    return _query("count responses", lambda: db.session.query(func.count(SurveyResponse.id)).scalar() or 0)


def count_not_null(attr: str) -> int:
    column = _column(attr)
    return _query(
        f"count {attr}",
        lambda: db.session.query(func.count(SurveyResponse.id)).filter(column.isnot(None)).scalar() or 0,
    )


def grouped_counts(attr: str, include_null: bool = False) -> List[Tuple[Optional[str], int]]:
    """SELECT attr, count(*) ... GROUP BY attr."""
    column = _column(attr)

    def run():
        q = db.session.query(column, func.count(SurveyResponse.id))
        if not include_null:
            q = q.filter(column.isnot(None))
        return [(value, int(count)) for value, count in q.group_by(column).all()]
    return _query(f"group by {attr}", run)


def response_date_range():
    def run():
        first = db.session.query(func.min(SurveyResponse.created_at)).scalar()
        last = db.session.query(func.max(SurveyResponse.created_at)).scalar()
        return first, last
    return _query("date range", run)
