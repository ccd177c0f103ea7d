from __future__ import annotations

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor
from .dispatcher import DeadLetterSink


class MySQLDeadLetterRepository(DeadLetterSink):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def record(self, *, description: str, error: str) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO dead_letters(description, error) VALUES(%s,%s)",
                (description[:255], error),
            )
