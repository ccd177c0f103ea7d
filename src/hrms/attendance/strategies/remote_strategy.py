from __future__ import annotations

from typing import Optional

from ...core.enums import AttendanceStatus
from ..model import Location
from .base import CheckInStrategy, StatusDecision


class RemoteStrategy(CheckInStrategy):
    """Remote check-in counts as work from home."""

    def decide_checkin(self, *, location: Optional[Location]) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.WORK_FROM_HOME)
