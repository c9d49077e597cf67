from fastapi import Depends
from sqlalchemy.orm import Session

from mfgops.core.database import SessionLocal
from mfgops.core.store import Store


def get_db():
    """Dependency to get database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_store(db: Session = Depends(get_db)) -> Store:
    """Dependency wrapping the request's session in a Store."""
    return Store(db)
