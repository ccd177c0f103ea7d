import pytest

from hrms.common.validators import parse_bool, require_int_range, require_non_negative_int
from hrms.core.exceptions import ValidationError


@pytest.mark.parametrize("value, expected", [(True, True), (False, False), ("true", True), ("False", False), (" TRUE ", True)])
def test_parse_bool_accepts_booleans_and_words(value, expected):
    assert parse_bool(value, "isHalfDay") is expected


@pytest.mark.parametrize("value", ["0", "1", "yes", "", 1, 0, None])
def test_parse_bool_rejects_everything_else(value):
    with pytest.raises(ValidationError, match="isHalfDay must be true or false"):
        parse_bool(value, "isHalfDay")


def test_non_negative_int_accepts_whole_numbers():
    assert require_non_negative_int(30, "breakDuration") == 30
    assert require_non_negative_int(30.0, "breakDuration") == 30
    assert require_non_negative_int("45", "breakDuration") == 45


@pytest.mark.parametrize("value", [30.5, True, "30.5", "abc"])
def test_non_negative_int_rejects_fractions_and_bools(value):
    with pytest.raises(ValidationError, match="must be an integer"):
        require_non_negative_int(value, "breakDuration")


def test_int_range_rejects_bool():
    with pytest.raises(ValidationError):
        require_int_range(True, "month", 1, 12)
