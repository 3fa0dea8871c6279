"""Connection handling for the LiteBans database."""

import logging
import ssl
import threading
from contextlib import contextmanager
from typing import Iterator, Optional, Union

from fastapi import Request
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.engine.url import URL

from app.core import config

logger = logging.getLogger(__name__)


def get_connection_url() -> Union[str, URL]:
    """Build the database URL from env; DB_URL wins when set."""
    if config.DB_URL:
        return config.DB_URL

    return URL.create(
        drivername="mysql+pymysql",
        username=config.DB_USER,
        password=config.DB_PASS,
        host=config.DB_HOST,
        port=config.DB_PORT,
        database=config.DB_NAME,
    )


class Database:
    """Owns the connection pool. The engine is created on first use and reused."""

    def __init__(self, url: Optional[Union[str, URL]] = None, pool_size: int = config.DB_POOL_SIZE):
        self._url = url
        self._pool_size = pool_size
        self._engine: Optional[Engine] = None
        self._lock = threading.Lock()

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            with self._lock:
                if self._engine is None:
                    self._engine = self._create_engine()
        return self._engine

    def _create_engine(self) -> Engine:
        url = self._url if self._url is not None else get_connection_url()
        is_sqlite = str(url).startswith("sqlite")

        kwargs = {"future": True}
        if is_sqlite:
            kwargs["connect_args"] = {"check_same_thread": False}
        else:
            # Requests past pool_size wait for a free connection.
            kwargs["pool_size"] = self._pool_size
            kwargs["max_overflow"] = 0
            kwargs["pool_pre_ping"] = True
            kwargs["pool_recycle"] = 3600
            if config.DB_SSL:
                # Managed MySQL hosts often present self-signed certificates.
                ssl_context = ssl.create_default_context()
                ssl_context.check_hostname = False
                ssl_context.verify_mode = ssl.CERT_NONE
                kwargs["connect_args"] = {"ssl": ssl_context}

        engine = create_engine(url, **kwargs)
        logger.info(f"[Database] Engine created for {engine.url.render_as_string(hide_password=True)}")
        return engine

    @contextmanager
    def connect(self) -> Iterator[Connection]:
        with self.engine.connect() as conn:
            yield conn

    def ping(self) -> None:
        with self.connect() as conn:
            conn.execute(text("SELECT 1"))

    def dispose(self) -> None:
        with self._lock:
            if self._engine is not None:
                self._engine.dispose()
                self._engine = None


def get_database(request: Request) -> Database:
    """FastAPI dependency returning the app-owned database handle."""
    return request.app.state.db
