from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from ...core.enums import AttendanceStatus
from ..model import Location


@dataclass(frozen=True)
class StatusDecision:
    status: AttendanceStatus
    note: Optional[str] = None


class CheckInStrategy(ABC):
    """Strategy Pattern: encapsulate how we decide the status of a new attendance record."""

    @abstractmethod
    def decide_checkin(self, *, location: Optional[Location]) -> StatusDecision:
        raise NotImplementedError
