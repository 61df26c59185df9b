# Overview: Retry helper for store operations that can lose a lock race.

from __future__ import annotations

import time

from flask import current_app
from sqlalchemy.exc import OperationalError

from ..extensions import db


def run_with_retry(func, *, attempts: int = 3, backoff_base: float = 0.1):
    """
    Execute a DB unit of work, retrying when the database reports a lock
    conflict (OperationalError: "database is locked", deadlock, serialization).

    The session is rolled back before every retry so the next attempt starts
    from a clean transaction. Domain errors raised by `func` are not retried.
    """
    for attempt in range(attempts):
        try:
            return func()
        except OperationalError:
            db.session.rollback()
            if attempt >= attempts - 1:
                raise
            current_app.logger.warning(
                "Store operation hit a lock conflict, retrying (attempt %d of %d)",
                attempt + 2, attempts,
            )
            time.sleep(backoff_base * (2 ** attempt))
