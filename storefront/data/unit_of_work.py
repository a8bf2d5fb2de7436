# storefront/data/unit_of_work.py
from sqlalchemy.orm import Session

from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class UnitOfWork:
    """
    One database transaction around a use case.

    Commits when the block exits cleanly and rolls back on any exception,
    so no partially applied state escapes a failed step. Repositories used
    inside the block only flush.
    """

    def __init__(self, db: Session):
        self.db = db

    def __enter__(self) -> Session:
        return self.db

    def __exit__(self, exc_type, exc, tb):
        if exc_type is None:
            self.db.commit()
            return False

        logger.warning(f"Rolling back transaction after {exc_type.__name__}: {exc}")
        self.db.rollback()
        return False
