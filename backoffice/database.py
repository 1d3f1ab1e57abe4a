# backoffice/database.py
import logging

from sqlalchemy import create_engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from backoffice.config import settings
from backoffice.errors import ConflictError, ServiceError, TransactionFailure

logger = logging.getLogger(__name__)

# 1. Address from the environment (.env / hosting) or the local SQLite default
SQLALCHEMY_DATABASE_URL = settings.DATABASE_URL

# 2. Hosted Postgres URLs still use the old scheme; SQLAlchemy needs postgresql://
if SQLALCHEMY_DATABASE_URL and SQLALCHEMY_DATABASE_URL.startswith("postgres://"):
    SQLALCHEMY_DATABASE_URL = SQLALCHEMY_DATABASE_URL.replace("postgres://", "postgresql://", 1)

# 3. Driver specific options
if "sqlite" in SQLALCHEMY_DATABASE_URL:
    connect_args = {"check_same_thread": False}  # SQLite only
else:
    connect_args = {}

engine = create_engine(
    SQLALCHEMY_DATABASE_URL, connect_args=connect_args
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db():
    # Register every model on Base.metadata before creating tables
    import backoffice.models  # noqa: F401

    Base.metadata.create_all(bind=engine)


class UnitOfWork:
    """One atomic unit around a document mutation.

    ``with UnitOfWork(db, "create adjustment") as tx:`` yields the session;
    a clean exit commits, any exception rolls back. Service errors pass
    through untouched, unique-constraint violations surface as
    ``ConflictError`` and everything else as ``TransactionFailure`` so that
    callers never observe a half-applied ledger.
    """

    def __init__(self, db: Session, label: str = "save changes"):
        self.db = db
        self.label = label

    def __enter__(self) -> Session:
        return self.db

    def __exit__(self, exc_type, exc, tb):
        if exc_type is None:
            try:
                self.db.commit()
            except Exception as commit_exc:
                self.db.rollback()
                raise self._translate(commit_exc) from commit_exc
            return False

        self.db.rollback()
        if not issubclass(exc_type, Exception) or isinstance(exc, ServiceError):
            return False
        raise self._translate(exc) from exc

    def _translate(self, exc: Exception) -> ServiceError:
        if isinstance(exc, ServiceError):
            return exc
        if isinstance(exc, IntegrityError):
            logger.info("Integrity error during %s: %s", self.label, exc.orig)
            return ConflictError("Record violates a uniqueness constraint")
        logger.exception("Unexpected error during %s", self.label)
        return TransactionFailure(f"Failed to {self.label}")
