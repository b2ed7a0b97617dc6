from contextlib import contextmanager
from typing import Any, Dict, Generator, Optional, Union

from sqlalchemy import create_engine
from sqlalchemy.engine import URL, Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

# Base class for all SQLAlchemy models
Base: Any = declarative_base()


def describe_db_error(e: Exception) -> str:
    """
    Log-safe description of a database error.

    Uses the driver exception when there is one, so the failing statement
    (which may carry passwords for administrative SQL) is left out.
    """
    orig = getattr(e, "orig", None)
    return f"{type(e).__name__}: {orig if orig is not None else e}"


class DatabaseManager:
    """
    Engine and session owner for one credential store database.

    Hosted engines are pooled; the SQLite engine allows use from worker
    threads so lookups can run off the event loop.
    """

    def __init__(
        self,
        url: Union[str, URL],
        pool_size: int = 5,
        max_overflow: int = 10,
        pool_timeout: int = 30,
        echo: bool = False,
    ):
        self.url = url
        self.pool_size = pool_size
        self.max_overflow = max_overflow
        self.pool_timeout = pool_timeout
        self.echo = echo
        self.engine: Engine = self._create_engine()
        self.session_factory = sessionmaker(bind=self.engine, expire_on_commit=False)

    @property
    def backend_name(self) -> str:
        if isinstance(self.url, URL):
            return self.url.get_backend_name()
        return str(self.url).split(":", 1)[0].split("+", 1)[0]

    def _create_engine(self) -> Engine:
        if self.backend_name == "sqlite":
            connect_args: Dict[str, Any] = {"check_same_thread": False}
            return create_engine(
                self.url, echo=self.echo, hide_parameters=True, connect_args=connect_args
            )
        return create_engine(
            self.url,
            echo=self.echo,
            hide_parameters=True,
            pool_size=self.pool_size,
            max_overflow=self.max_overflow,
            pool_timeout=self.pool_timeout,
            pool_pre_ping=True,
        )

    def create_tables(self, tables: Optional[list] = None) -> None:
        Base.metadata.create_all(self.engine, tables=tables, checkfirst=True)

    def get_session(self) -> Session:
        return self.session_factory()

    @contextmanager
    def session_scope(self) -> Generator[Session, None, None]:
        """Session that commits on success and rolls back on error."""
        session = self.get_session()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def close(self) -> None:
        self.engine.dispose()
