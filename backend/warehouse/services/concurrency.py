# Overview: Transaction boundary and storage-conflict helpers shared by write paths.

from __future__ import annotations

import time

from sqlalchemy import text
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm.exc import StaleDataError

from ..extensions import db


class UnitOfWork:
    """
    Explicit transactional boundary around a SQLAlchemy session.

    begin() opens the write transaction, commit() makes every write visible
    together, rollback() discards them. Used as a context manager it rolls
    back when the block raises and leaves committing to the caller.

    On SQLite, begin() issues BEGIN IMMEDIATE so the database write lock is
    taken before the first read; other backends rely on SELECT ... FOR UPDATE.
    """

    def __init__(self, session=None):
        self.session = session if session is not None else db.session

    @property
    def dialect_name(self) -> str:
        return self.session.get_bind().dialect.name

    def begin(self) -> None:
        if self.dialect_name == "sqlite":
            self.session.execute(text("BEGIN IMMEDIATE"))

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()

    def __enter__(self) -> "UnitOfWork":
        self.begin()
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if exc_type is not None:
            self.rollback()
        return False


def lock_for_update(query):
    """
    Apply row-level locking for critical operations.

    NOTE: SQLite ignores SELECT ... FOR UPDATE, but other DBs will honor it.
    """
    return query.with_for_update()


def run_with_retry(func, *, attempts: int = 3, backoff_base: float = 0.1, session=None):
    """
    Execute a DB operation with retry on concurrency-related failures.

    Retries on OperationalError (deadlocks, locks) and StaleDataError
    (optimistic locking conflicts). func must be safe to re-run from the top:
    every attempt re-reads and re-validates.
    """
    session = session if session is not None else db.session
    last_exc = None
    for attempt in range(attempts):
        try:
            return func()
        except (OperationalError, StaleDataError) as exc:
            session.rollback()
            last_exc = exc
            if attempt >= attempts - 1:
                raise
            time.sleep(backoff_base * (2 ** attempt))
    if last_exc:
        raise last_exc
