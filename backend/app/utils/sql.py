"""
Query-result helpers.

COUNT(*) comes back as a bare int from session.exec(select(func.count()))
but as a 1-tuple/Row from session.execute(); scalar_int() accepts both.
"""
from typing import Any

from sqlmodel import Session, func, select


def scalar_int(x: Any) -> int:
    """Convert COUNT/aggregate result to int. Handles int or 1-tuple/Row."""
    try:
        return int(x[0])
    except (TypeError, IndexError, KeyError):
        return int(x)


def count_rows(session: Session, statement) -> int:
    """Row count of an arbitrary select, without loading the rows."""
    return scalar_int(session.exec(select(func.count()).select_from(statement.subquery())).one())
