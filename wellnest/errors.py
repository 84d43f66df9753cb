"""
errors.py — Ledger error taxonomy.

Every service raises one of these; the HTTP layer maps them to status codes.
"""

from contextlib import contextmanager

from sqlalchemy.exc import InterfaceError, OperationalError


class LedgerError(Exception):
    """Base exception for ledger errors."""
    pass


class NotFoundOrForbidden(LedgerError):
    """
    The entity does not exist or belongs to another user.

    Both cases share one error so that non-owners cannot probe for existence.
    """
    pass


class ValidationError(LedgerError):
    """Raised for malformed input (negative minutes, unknown kind, bad day key)."""
    pass


class StoreUnavailable(LedgerError):
    """The backing store failed; the original driver error is the __cause__."""
    pass


@contextmanager
def store_guard(db):
    """Roll back and re-raise connectivity failures as StoreUnavailable."""
    try:
        yield
    except (OperationalError, InterfaceError) as e:
        db.rollback()
        raise StoreUnavailable(f"Backing store unavailable: {e.orig or e}") from e
