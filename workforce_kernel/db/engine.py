"""
Module: workforce_kernel.db.engine
Responsibility: SQLAlchemy engine construction, session factory and
    transactional scope for the blob database.
Architecture position: Kernel > DB.  May import from db/base.py.  MUST NOT
    import from services/, domain/, or outer layers (create_tables imports
    models so Base.metadata is populated).

Invariants enforced:
    - No module-level engine: each ``Database`` owns its engine and is
      constructed and disposed by the composition root.
    - SQLite connections may be used from the flush timer thread
      (check_same_thread=False).  ``sqlite:///:memory:`` uses StaticPool so
      every session sees the same in-memory database.

Failure modes:
    - RuntimeError if ``session()`` is called after ``dispose()``.
    - SQLAlchemy OperationalError on an unreachable database; callers in
      the persistence service log and recover.
"""

from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from workforce_kernel.logging_config import get_logger

logger = get_logger("db.engine")


def _is_sqlite(url: str) -> bool:
    return url.startswith("sqlite")


def _is_in_memory(url: str) -> bool:
    return url in ("sqlite://", "sqlite:///:memory:")


class Database:
    """
    Owns one SQLAlchemy engine and its session factory.

    Usage:
        db = Database("sqlite:///workforce.db")
        db.create_tables()
        with db.session_scope() as session:
            session.add(row)
        db.dispose()
    """

    def __init__(self, database_url: str, echo: bool = False):
        self.database_url = database_url
        kwargs: dict = {"echo": echo}
        if _is_sqlite(database_url):
            kwargs["connect_args"] = {"check_same_thread": False}
            if _is_in_memory(database_url):
                kwargs["poolclass"] = StaticPool
        else:
            kwargs["pool_pre_ping"] = True

        self._engine: Engine | None = create_engine(database_url, **kwargs)
        self._session_factory = sessionmaker(bind=self._engine, expire_on_commit=False)
        logger.info(
            "engine_initialized",
            extra={
                "dialect": self._engine.dialect.name,
                "in_memory": _is_in_memory(database_url),
                "echo": echo,
            },
        )

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            raise RuntimeError("Database has been disposed.")
        return self._engine

    def session(self) -> Session:
        if self._engine is None:
            raise RuntimeError("Database has been disposed.")
        return self._session_factory()

    @contextmanager
    def session_scope(self) -> Generator[Session, None, None]:
        """
        Provide a transactional scope around a series of operations.

        Commits on normal exit.  On exception the session is rolled back
        and the exception re-raised.
        """
        session = self.session()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            logger.warning("transaction_rolled_back", exc_info=True)
            raise
        finally:
            session.close()

    def create_tables(self) -> None:
        """Create the blob table if it does not exist."""
        from workforce_kernel.db.base import Base
        import workforce_kernel.models  # noqa: F401

        Base.metadata.create_all(self.engine)
        logger.info("tables_created", extra={"tables": sorted(Base.metadata.tables)})

    def dispose(self) -> None:
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None
            logger.info("engine_disposed")
