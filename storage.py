"""Atomic unit-of-work helper for balance-affecting operations.

Session rows carry a version column (SQLAlchemy `version_id_col`), so a
concurrent write to the same row surfaces as StaleDataError at flush time.
SQLite lock contention surfaces as OperationalError. Both roll back and retry
the whole unit from a fresh read.
"""

from __future__ import annotations

import os
import time

from flask import current_app
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm.exc import StaleDataError

from errors import RewardError, TransactionConflict

TXN_MAX_ATTEMPTS = int(os.getenv("TXN_MAX_ATTEMPTS", "5"))
TXN_BACKOFF_SECONDS = 0.02


def run_atomic(db_session, work, retry_on=(), attempts: int | None = None):
    """Run `work()` and commit; retry on write conflicts.

    RewardError aborts immediately after rolling back, so rejections never
    leave partial writes. Extra exception types to retry (e.g. IntegrityError
    for generated unique values) can be passed in `retry_on`.
    """
    attempts = attempts or TXN_MAX_ATTEMPTS
    retryable = (StaleDataError, OperationalError) + tuple(retry_on)

    for attempt in range(1, attempts + 1):
        try:
            result = work()
            db_session.commit()
            return result
        except RewardError:
            db_session.rollback()
            raise
        except retryable as exc:
            db_session.rollback()
            current_app.logger.warning(
                "Transaction conflict (attempt %s/%s): %s", attempt, attempts, exc.__class__.__name__
            )
            time.sleep(TXN_BACKOFF_SECONDS * attempt)

    raise TransactionConflict()
