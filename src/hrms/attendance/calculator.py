from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from ..core.constants import STANDARD_WORK_HOURS


class WorkHoursCalculator(ABC):
    """Calculator interface (Strategy Pattern for work-hour rules)."""

    @abstractmethod
    def worked_hours(self, clock_in: datetime, clock_out: datetime, break_minutes: int = 0) -> float:
        raise NotImplementedError

    @abstractmethod
    def overtime_hours(self, total_hours: float) -> float:
        raise NotImplementedError


class StandardHoursCalculator(WorkHoursCalculator):
    """Standard rule: (out - in) - break, not below 0; overtime beyond an 8 hour day."""

    def __init__(self, standard_hours: float = STANDARD_WORK_HOURS):
        self._standard_hours = float(standard_hours)

    def worked_hours(self, clock_in: datetime, clock_out: datetime, break_minutes: int = 0) -> float:
        hours = (clock_out - clock_in).total_seconds() / 3600
        hours -= int(break_minutes or 0) / 60
        return max(hours, 0.0)

    def overtime_hours(self, total_hours: float) -> float:
        return max(total_hours - self._standard_hours, 0.0)
