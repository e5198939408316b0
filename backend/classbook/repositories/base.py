"""Shared helpers for the SQLAlchemy-backed repositories."""
import functools
import logging

from sqlalchemy.exc import OperationalError

from classbook.errors import CollaboratorUnavailableError

logger = logging.getLogger(__name__)


def translate_store_errors(method):
    """Turn a lost/unreachable database into CollaboratorUnavailableError."""

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        try:
            return method(self, *args, **kwargs)
        except OperationalError as exc:
            logger.error("Store unavailable in %s: %s", method.__qualname__, exc)
            self.session.rollback()
            raise CollaboratorUnavailableError("Booking store is unavailable, please retry") from exc

    return wrapper
