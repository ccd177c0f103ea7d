from __future__ import annotations

from typing import Any, Mapping, Optional, Protocol


class AuditSink(Protocol):
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
        raise NotImplementedError
