from __future__ import annotations

from typing import Optional

from ...core.enums import AttendanceStatus
from ..model import Location
from .base import CheckInStrategy, StatusDecision


class OnSiteStrategy(CheckInStrategy):
    """Office or client-site check-in."""

    def decide_checkin(self, *, location: Optional[Location]) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.PRESENT)
