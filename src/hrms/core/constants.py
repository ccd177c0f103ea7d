"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from decimal import Decimal

STANDARD_WORK_HOURS = 8.0

DEFAULT_TOKEN_MAX_AGE_SECONDS = 7 * 24 * 60 * 60
DEFAULT_PAGE_LIMIT = 10
DEFAULT_ATTENDANCE_PAGE_LIMIT = 31
MAX_PAGE_LIMIT = 100
DEFAULT_LEAVE_LOCK_TIMEOUT_SECONDS = 10

MIN_REASON_LENGTH = 10
MAX_REASON_LENGTH = 500

MIN_PAY_YEAR = 2020
MAX_PAY_YEAR = 2100

ZERO = Decimal("0")

# Annual allotment per leave type. UNPAID is untracked.
LEAVE_POLICY = {
    "EARNED": 21,
    "SICK": 12,
    "CASUAL": 7,
    "MATERNITY": 182,
    "PATERNITY": 15,
    "BEREAVEMENT": 5,
    "COMPENSATORY": 10,
}
