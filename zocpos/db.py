import logging
from contextlib import contextmanager
from typing import Iterator

from fastapi import Request
from sqlalchemy import create_engine, event, func, select, text
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool

from zocpos.config import Settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


class Database:
    """Owns the pooled engine and the session factory.

    Built once per application, opened on startup and disposed on shutdown.
    Request handlers get sessions through the ``get_db`` dependency.
    """

    def __init__(self, settings: Settings):
        self.url = settings.DB_URL
        engine_kwargs = {"echo": settings.DB_ECHO, "pool_pre_ping": True}

        if self.url.startswith("sqlite"):
            engine_kwargs["connect_args"] = {"check_same_thread": False, "timeout": 30}
            if self.url in {"sqlite://", "sqlite:///:memory:"}:
                engine_kwargs["poolclass"] = StaticPool
        else:
            engine_kwargs["pool_size"] = settings.DB_POOL_SIZE
            engine_kwargs["max_overflow"] = settings.DB_MAX_OVERFLOW

        self.engine = create_engine(self.url, **engine_kwargs)
        if self.engine.dialect.name == "sqlite":
            _serialize_sqlite_writers(self.engine)
        self.SessionLocal = sessionmaker(bind=self.engine, autocommit=False, autoflush=False,
                                         expire_on_commit=False)

    def open(self) -> None:
        # Importing the module registers tables with Base for create_all()
        from zocpos import models  # noqa: F401
        from zocpos.models.core import Counter, Order

        Base.metadata.create_all(bind=self.engine)
        with self.session() as db:
            if db.get(Counter, Counter.ORDERS) is None:
                # start after any orders already on disk
                existing = db.scalar(select(func.count(Order.id))) or 0
                db.add(Counter(name=Counter.ORDERS, value=existing))
                db.commit()
        logger.info("database ready (%s)", self.engine.dialect.name)

    def close(self) -> None:
        self.engine.dispose()
        logger.info("database connections closed")

    @contextmanager
    def session(self) -> Iterator[Session]:
        db = self.SessionLocal()
        try:
            yield db
        finally:
            db.close()

    def ping(self) -> None:
        with self.engine.connect() as conn:
            conn.execute(text("SELECT 1"))


def _serialize_sqlite_writers(engine) -> None:
    # pysqlite defers BEGIN until the first write; take the write lock up front
    # so concurrent counter increments queue on the busy timeout instead of failing.
    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_conn, _record):
        dbapi_conn.isolation_level = None

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def get_db(request: Request) -> Iterator[Session]:
    with request.app.state.db.session() as db:
        yield db
