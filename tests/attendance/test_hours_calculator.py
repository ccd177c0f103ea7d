from datetime import datetime

import pytest

from hrms.attendance.calculator import StandardHoursCalculator


@pytest.mark.parametrize(
    "clock_in,clock_out,break_minutes,expected",
    [
        (datetime(2025, 3, 10, 9, 0), datetime(2025, 3, 10, 17, 0), 0, 8.0),
        (datetime(2025, 3, 10, 9, 0), datetime(2025, 3, 10, 17, 0), 45, 7.25),
        (datetime(2025, 3, 10, 22, 0), datetime(2025, 3, 11, 6, 0), 0, 8.0),
        (datetime(2025, 3, 10, 9, 0), datetime(2025, 3, 10, 9, 30), 60, 0.0),
        (datetime(2025, 3, 10, 9, 0), datetime(2025, 3, 10, 7, 0), 0, 0.0),
    ],
)
def test_worked_hours_never_negative(clock_in, clock_out, break_minutes, expected):
    calc = StandardHoursCalculator()

    hours = calc.worked_hours(clock_in, clock_out, break_minutes)

    assert hours >= 0
    assert hours == pytest.approx(expected)


@pytest.mark.parametrize("total,expected", [(0.0, 0.0), (7.5, 0.0), (8.0, 0.0), (8.5, 0.5), (12.0, 4.0)])
def test_overtime_beyond_standard_day(total, expected):
    assert StandardHoursCalculator().overtime_hours(total) == pytest.approx(expected)


def test_custom_standard_day():
    assert StandardHoursCalculator(standard_hours=7.5).overtime_hours(9.0) == pytest.approx(1.5)
