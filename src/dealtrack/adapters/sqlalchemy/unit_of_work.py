"""SQLAlchemy-backed unit of work for deal tracking."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Literal

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from dealtrack.adapters.sqlalchemy.mappings import create_all_tables, start_mappers
from dealtrack.adapters.sqlalchemy.repositories import (
    SqlAlchemyDealStateRepository,
    SqlAlchemyWatchListRepository,
)
from dealtrack.config.storage import get_database_config
from dealtrack.domain.ports.unit_of_work import DealTrackingRepositories

if TYPE_CHECKING:
    from types import TracebackType

    from sqlalchemy.engine import Engine

log = getLogger(__name__)


class StartupError(RuntimeError):
    """Raised when the deal store is used before ``startup()`` or reconfigured twice."""


@dataclass(slots=True)
class _DealStore:
    engine: Engine | None = None
    sessions: sessionmaker[Session] | None = None

    def bind(self, engine: Engine | None) -> None:
        self.engine = engine
        self.sessions = (
            sessionmaker(bind=engine, expire_on_commit=False) if engine is not None else None
        )

    def open_session(self) -> Session:
        if self.sessions is None:
            raise StartupError(
                "Deal store not initialised; call "
                "dealtrack.adapters.sqlalchemy.unit_of_work.startup() first."
            )
        return self.sessions()


_STORE = _DealStore()


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    force: bool = False,
) -> None:
    """Bind the deal store to an engine and make sure both tables exist.

    Without ``engine`` or ``database_uri`` the location comes from
    ``DATABASE_URI`` or the data directory.
    """

    if _STORE.engine is not None and not force:
        raise StartupError("Deal store already initialised. Pass force=True to rebind it.")

    resolved_engine = engine or create_engine(
        database_uri or get_database_config().uri, future=True
    )
    start_mappers()
    create_all_tables(resolved_engine)
    log.debug("Deal store bound to %s", resolved_engine.url)
    _STORE.bind(resolved_engine)


def is_started() -> bool:
    return _STORE.engine is not None


def shutdown() -> None:
    """Dispose the engine and unbind the store (primarily for tests)."""

    if _STORE.engine is not None:
        _STORE.engine.dispose()
    _STORE.bind(None)


class SqlAlchemyDealTrackingUnitOfWork:
    """One session over the deal and watch-list tables.

    Nothing is committed implicitly: callers commit after each write they want
    to keep, and leaving the block discards the rest.
    """

    def __init__(self) -> None:
        self._session: Session | None = None
        self._repositories: DealTrackingRepositories | None = None

    def __enter__(self) -> SqlAlchemyDealTrackingUnitOfWork:
        if self._session is not None:
            raise StartupError("Unit of work is already open")
        session = _STORE.open_session()
        self._session = session
        self._repositories = DealTrackingRepositories(
            deals=SqlAlchemyDealStateRepository(session),
            watch_list=SqlAlchemyWatchListRepository(session),
        )
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        session = self.session
        if exc_type is not None:
            session.rollback()
        session.close()
        self._session = None
        self._repositories = None
        return False

    @property
    def session(self) -> Session:
        if self._session is None:
            raise StartupError("Unit of work used outside its with-block")
        return self._session

    @property
    def repositories(self) -> DealTrackingRepositories:
        if self._repositories is None:
            raise StartupError("Unit of work used outside its with-block")
        return self._repositories

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


if TYPE_CHECKING:
    from dealtrack.domain.ports.unit_of_work import DealTrackingUnitOfWork

    _uow_check: DealTrackingUnitOfWork = SqlAlchemyDealTrackingUnitOfWork()
