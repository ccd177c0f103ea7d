from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import LocationType
from .model import Location
from .strategies.base import CheckInStrategy
from .strategies.onsite_strategy import OnSiteStrategy
from .strategies.remote_strategy import RemoteStrategy


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose appropriate strategy based on rules."""

    def for_checkin(self, *, location: Optional[Location]) -> CheckInStrategy:
        if location is not None and location.type == LocationType.REMOTE:
            return RemoteStrategy()
        return OnSiteStrategy()
