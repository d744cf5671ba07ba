"""Engine lifecycle and the per-record unit of work for the catalog store."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, Any, Literal, Self

from sqlalchemy import create_engine, event
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from catalogsync.adapters.sqlalchemy.mappings import start_mappers
from catalogsync.adapters.sqlalchemy.migrations import upgrade_head
from catalogsync.adapters.sqlalchemy.repositories import (
    SqlAlchemyCategoryRepository,
    SqlAlchemyMediaAssetRepository,
    SqlAlchemyProductRepository,
)
from catalogsync.config.storage import get_database_uri
from catalogsync.domain.errors import PersistenceError
from catalogsync.domain.ports.unit_of_work import CatalogRepositories

if TYPE_CHECKING:
    from types import TracebackType

    from sqlalchemy.engine import Connection, Engine

log = getLogger(__name__)


class StartupError(RuntimeError):
    """Raised when the catalog store is used before ``startup()`` or misused."""


class _StoreState:
    """The engine shared by every unit of work in this process."""

    def __init__(self) -> None:
        self.engine: Engine | None = None
        self._sessions: sessionmaker[Session] | None = None

    def bind(self, engine: Engine | None) -> None:
        self.engine = engine
        self._sessions = None if engine is None else sessionmaker(
            bind=engine, expire_on_commit=False
        )

    def sessions(self) -> sessionmaker[Session]:
        if self._sessions is None:
            raise StartupError(
                "Catalog store not initialised; call "
                "catalogsync.adapters.sqlalchemy.unit_of_work.startup() first."
            )
        return self._sessions


_STATE = _StoreState()


def _sqlite_on_connect(dbapi_connection: Any, connection_record: Any) -> None:  # noqa: ANN401
    _ = connection_record
    # hand transaction control to SQLAlchemy so SAVEPOINT behaves
    dbapi_connection.isolation_level = None


def _sqlite_on_begin(connection: Connection) -> None:
    connection.exec_driver_sql("BEGIN")


def enable_sqlite_savepoints(engine: Engine) -> None:
    """Apply the pysqlite transaction workaround needed for ``begin_nested``."""

    if engine.dialect.name != "sqlite":
        return
    if not event.contains(engine, "connect", _sqlite_on_connect):
        event.listen(engine, "connect", _sqlite_on_connect)
    if not event.contains(engine, "begin", _sqlite_on_begin):
        event.listen(engine, "begin", _sqlite_on_begin)


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    force: bool = False,
) -> None:
    """Create (or adopt) the engine, map the model and migrate the schema to head."""

    if _STATE.engine is not None and not force:
        raise StartupError("Catalog store already initialised; pass force=True to rebind.")

    resolved_engine = engine or create_engine(database_uri or get_database_uri(), future=True)
    enable_sqlite_savepoints(resolved_engine)
    start_mappers()
    upgrade_head(engine=resolved_engine)
    _STATE.bind(resolved_engine)
    log.debug("Catalog store ready on %s", resolved_engine.url.render_as_string(hide_password=True))


def configured_engine() -> Engine | None:
    return _STATE.engine


def is_started() -> bool:
    return _STATE.engine is not None


def shutdown() -> None:
    """Dispose the engine and forget it; tests call this between cases."""

    if _STATE.engine is not None:
        _STATE.engine.dispose()
    _STATE.bind(None)


class SqlAlchemyCatalogUnitOfWork:
    """One session per reconciled record.

    Leaving the block without committing discards pending changes. ``commit``
    rolls back and raises :class:`PersistenceError` when the database rejects
    the flush, so the session stays usable for the caller's next step.
    """

    def __init__(self, session_factory: sessionmaker[Session] | None = None) -> None:
        self._session_factory = session_factory or _STATE.sessions()
        self._session: Session | None = None
        self._repositories: CatalogRepositories | None = None

    def __enter__(self) -> Self:
        if self._session is not None:
            raise StartupError("Unit of work is already open")
        session = self._session_factory()
        self._session = session
        self._repositories = CatalogRepositories(
            products=SqlAlchemyProductRepository(session),
            categories=SqlAlchemyCategoryRepository(session),
            media_assets=SqlAlchemyMediaAssetRepository(session),
        )
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        session = self.session
        try:
            if exc_type is not None:
                session.rollback()
        finally:
            session.close()
            self._session = None
            self._repositories = None
        return False

    @property
    def session(self) -> Session:
        if self._session is None:
            raise StartupError("Unit of work is not open")
        return self._session

    @property
    def repositories(self) -> CatalogRepositories:
        if self._repositories is None:
            raise StartupError("Unit of work is not open")
        return self._repositories

    def commit(self) -> None:
        session = self.session
        try:
            session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            raise PersistenceError(f"commit failed: {exc}") from exc

    def rollback(self) -> None:
        self.session.rollback()


if TYPE_CHECKING:
    from catalogsync.domain.ports.unit_of_work import CatalogUnitOfWork

    _uow_check: CatalogUnitOfWork = SqlAlchemyCatalogUnitOfWork()
