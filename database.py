import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from alembic import command
from alembic.config import Config
from alembic.runtime.migration import MigrationContext
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool

from config import get_settings
from exceptions import MigrationError


logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).resolve().parent / "migrations"


class Base(DeclarativeBase):
    pass


def _enable_sqlite_pragmas(dbapi_conn, _record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL;")
    cursor.execute("PRAGMA foreign_keys=ON;")
    cursor.close()


def _is_memory_url(url: str) -> bool:
    return url.startswith("sqlite") and (":memory:" in url or url.endswith("://"))


class Store:
    """Owns the engine and session factory for one database.

    Nothing is connected until ``open()``; ``migrate()`` must run before the
    store is handed to services.
    """

    def __init__(self, database_url: Optional[str] = None) -> None:
        self.database_url = database_url or get_settings().database_url
        self.engine: Optional[Engine] = None
        self._session_factory: Optional[sessionmaker[Session]] = None

    def open(self) -> "Store":
        if self.engine is not None:
            return self
        connect_args: dict[str, object] = {}
        engine_args: dict[str, object] = {}
        if self.database_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
            if _is_memory_url(self.database_url):
                engine_args["poolclass"] = StaticPool

        eng = create_engine(
            self.database_url, connect_args=connect_args, **engine_args
        )
        if self.database_url.startswith("sqlite"):
            event.listen(eng, "connect", _enable_sqlite_pragmas)
        self.engine = eng
        self._session_factory = sessionmaker(
            bind=eng, autoflush=False, expire_on_commit=False
        )
        logger.info(f"store_open: url={eng.url!r}")
        return self

    def _alembic_config(self) -> Config:
        cfg = Config()
        cfg.set_main_option("script_location", str(MIGRATIONS_DIR))
        cfg.set_main_option("sqlalchemy.url", self.database_url)
        return cfg

    def migrate(self) -> None:
        if self.engine is None:
            self.open()
        cfg = self._alembic_config()
        try:
            with self.engine.begin() as connection:
                cfg.attributes["connection"] = connection
                command.upgrade(cfg, "head")
        except Exception as exc:
            logger.error(f"migrate_failed: url={self.engine.url!r} error={exc}")
            self.close()
            raise MigrationError(f"Database migration failed: {exc}") from exc
        logger.info(f"migrate: revision={self.schema_version()}")

    def schema_version(self) -> Optional[str]:
        with self._require_engine().connect() as connection:
            return MigrationContext.configure(connection).get_current_revision()

    def session(self) -> Session:
        if self._session_factory is None:
            raise MigrationError("Store is not open")
        return self._session_factory()

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        session = self.session()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def close(self) -> None:
        if self.engine is not None:
            self.engine.dispose()
            logger.info(f"store_close: url={self.engine.url!r}")
        self.engine = None
        self._session_factory = None

    def _require_engine(self) -> Engine:
        if self.engine is None:
            raise MigrationError("Store is not open")
        return self.engine

    def __enter__(self) -> "Store":
        self.open()
        self.migrate()
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
