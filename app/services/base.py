import logging
from contextlib import contextmanager

from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from app.core.exceptions import ConcurrencyConflictError


class BaseService:
    """
    Common plumbing for services that own a unit of work on a Session.
    Services commit; routers never do.
    """

    def __init__(self, db: Session):
        self.db = db
        self._logger = logging.getLogger(self.__class__.__module__)

    @contextmanager
    def transaction(self):
        """
        Commit everything staged inside the block as one unit, or nothing.
        A version mismatch on any row becomes a ConcurrencyConflictError.
        """
        try:
            yield
            self.db.commit()
        except StaleDataError as e:
            self.db.rollback()
            self._logger.warning(f"Optimistic lock failed: {e}")
            raise ConcurrencyConflictError() from e
        except Exception:
            self.db.rollback()
            raise
