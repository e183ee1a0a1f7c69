# storefront/data/unit_of_work.py
from sqlalchemy.orm import Session

from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class UnitOfWork:
    """
    Jedna transakcja na caly use case.

    Repozytoria tylko robia flush, commit robi UnitOfWork na wyjsciu
    z bloku with. Kazdy wyjatek wewnatrz bloku = rollback wszystkich
    krokow (stock, punkty, zamowienie, koszyk).
    """

    def __init__(self, db: Session):
        self.db = db

    def __enter__(self) -> "UnitOfWork":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if exc_type is None:
            self.db.commit()
        else:
            logger.warning(f"Rolling back unit of work: {exc_type.__name__}: {exc}")
            self.db.rollback()
        return False
