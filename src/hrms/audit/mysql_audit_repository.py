from __future__ import annotations

from typing import Any, Mapping, Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json
from .sink import AuditSink


class MySQLAuditRepository(AuditSink):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def record(
        self,
        *,
        actor_id: Optional[str],
        action: str,
        resource: str,
        resource_id: Optional[str] = None,
        before_data: Optional[Mapping[str, Any]] = None,
        after_data: Optional[Mapping[str, Any]] = None,
    ) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO audit_logs(actor_id, action, resource, resource_id, before_data, after_data)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (
                    actor_id,
                    action,
                    resource,
                    resource_id,
                    dump_json(dict(before_data)) if before_data is not None else None,
                    dump_json(dict(after_data)) if after_data is not None else None,
                ),
            )
