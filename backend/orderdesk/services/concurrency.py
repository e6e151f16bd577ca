# Overview: Row-locking and atomic counter helpers for stock and payment writes.

from __future__ import annotations

from sqlalchemy import update

from ..extensions import db


def lock_for_update(query):
    """
    Apply row-level locking for critical operations.

    NOTE: SQLite ignores SELECT ... FOR UPDATE, but other DBs will honor it.
    """
    return query.with_for_update()


def conditional_decrement(model, pk: int, column, amount: int) -> bool:
    """
    Atomically run `column = column - amount WHERE id = pk AND column >= amount`.

    Returns True if the row was decremented, False if it does not exist or
    holds less than `amount`. The check and the write are one statement, so
    two concurrent callers can never both succeed against the same units.
    Does not commit; the caller owns the transaction and must expire any
    loaded instance of the row before reading the column again.
    """
    stmt = (
        update(model)
        .where(model.id == pk, column >= amount)
        .values({column: column - amount})
        .execution_options(synchronize_session=False)
    )
    result = db.session.execute(stmt)
    return result.rowcount == 1
