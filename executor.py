"""
Query executors: run one SQL statement and return its rows in projection order.
"""
from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from typing import Any

import pymssql

from errors import DataSourceError
from models import Row
from utils import get_logger

logger = get_logger(__name__)


class QueryExecutor(ABC):
    """Runs queries for the orchestrator. No retries and no caching."""

    @abstractmethod
    def execute(self, query: str) -> list[Row]:
        """Run query and return its rows. Raises DataSourceError on any failure."""
        ...

    def close(self) -> None:
        pass


class MssqlExecutor(QueryExecutor):
    """
    SQL Server executor over a single pymssql connection.

    The connection is opened on first use and dropped after a connection-level
    error, so the next call reconnects. query_timeout bounds every statement.
    """

    def __init__(
        self,
        server: str = "localhost",
        port: int = 1433,
        user: str = "sa",
        password: str = "",
        database: str = "master",
        login_timeout: int = 15,
        query_timeout: int = 10,
        appname: str = "mssql_exporter",
    ) -> None:
        self.server = server
        self.port = port
        self.user = user
        self.password = password
        self.database = database
        self.login_timeout = login_timeout
        self.query_timeout = query_timeout
        self.appname = appname
        self._conn: Any = None
        self._lock = threading.Lock()

    @property
    def connected(self) -> bool:
        return self._conn is not None

    def _connect(self) -> Any:
        logger.info("Connecting to %s:%s database=%s user=%s", self.server, self.port, self.database, self.user)
        try:
            conn = pymssql.connect(
                server=self.server,
                port=str(self.port),
                user=self.user,
                password=self.password,
                database=self.database,
                login_timeout=self.login_timeout,
                timeout=self.query_timeout,
                appname=self.appname,
                autocommit=True,
            )
        except pymssql.Error as e:
            raise DataSourceError(f"Connection to {self.server}:{self.port} failed: {e}") from e
        logger.info("Connected to %s:%s", self.server, self.port)
        return conn

    def execute(self, query: str) -> list[Row]:
        with self._lock:
            if self._conn is None:
                self._conn = self._connect()
            try:
                with self._conn.cursor() as cursor:
                    cursor.execute(query)
                    return [Row(r) for r in cursor.fetchall()]
            except (pymssql.OperationalError, pymssql.InterfaceError) as e:
                self._drop_connection()
                raise DataSourceError(f"Query failed, connection reset: {e}", query=query) from e
            except pymssql.Error as e:
                raise DataSourceError(f"Query failed: {e}", query=query) from e

    def _drop_connection(self) -> None:
        conn, self._conn = self._conn, None
        if conn is None:
            return
        try:
            conn.close()
        except pymssql.Error as e:
            logger.debug("Ignoring error while closing connection: %s", e)

    def close(self) -> None:
        with self._lock:
            self._drop_connection()
