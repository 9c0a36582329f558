# tests/unit/test_coercion.py
import re
from datetime import date, datetime, time, timedelta

import pytest
from openpyxl.utils.datetime import MAC_EPOCH

from services.coercion import cell_text, format_date_part, format_time_part, to_bool, to_num
from test_helpers import SERIAL_14_05


class TestCellText:
    def test_empty_and_none(self):
        assert cell_text(None) == ""
        assert cell_text("") == ""

    def test_integral_float_drops_decimal(self):
        assert cell_text(10.0) == "10"
        assert cell_text(10.5) == "10.5"

    def test_bools_are_lowercase(self):
        assert cell_text(True) == "true"
        assert cell_text(False) == "false"

    def test_datetime_uses_iso_like_form(self):
        assert cell_text(datetime(2024, 3, 1, 14, 5)) == "2024-03-01 14:05:00"


class TestFormatDatePart:
    def test_native_datetime(self):
        assert format_date_part(datetime(2024, 3, 1, 23, 59)) == "2024-03-01"

    def test_native_date(self):
        assert format_date_part(date(2024, 12, 9)) == "2024-12-09"

    @pytest.mark.parametrize("serial, expected", [
        (45352, "2024-03-01"),
        (45352.75, "2024-03-01"),
        (1, "1900-01-01"),
        (61, "1900-03-01"),
        (36526, "2000-01-01"),
    ])
    def test_serials_decode_zero_padded(self, serial, expected):
        out = format_date_part(serial)
        assert out == expected
        assert re.match(r"^\d{4}-\d{2}-\d{2}$", out)

    def test_mac_epoch(self):
        # 1904 date system is 1462 days behind the 1900 one
        assert format_date_part(45352 - 1462, epoch=MAC_EPOCH) == "2024-03-01"

    def test_text_is_trimmed_not_reformatted(self):
        assert format_date_part("  01/03/2024 ") == "01/03/2024"
        assert format_date_part("2024-03-01") == "2024-03-01"

    def test_pure_time_serial_has_no_date(self):
        assert format_date_part(0.5) == "0.5"

    @pytest.mark.parametrize("value", [-3, 1e12, float("nan"), float("inf")])
    def test_undecodable_serials_fall_through(self, value):
        assert format_date_part(value) == cell_text(value)

    def test_empty(self):
        assert format_date_part(None) == ""
        assert format_date_part("") == ""


class TestFormatTimePart:
    def test_native_datetime(self):
        assert format_time_part(datetime(2024, 3, 1, 7, 3, 9)) == "07:03:09"

    def test_native_time_drops_microseconds(self):
        assert format_time_part(time(14, 5, 0, 999999)) == "14:05:00"

    def test_date_only_is_midnight(self):
        assert format_time_part(date(2024, 3, 1)) == "00:00:00"

    def test_timedelta(self):
        assert format_time_part(timedelta(hours=26, minutes=1)) == "02:01:00"

    def test_serial_fraction(self):
        assert format_time_part(SERIAL_14_05) == "14:05:00"
        assert format_time_part(45352 + SERIAL_14_05) == "14:05:00"

    def test_whole_number_serial_is_midnight(self):
        assert format_time_part(45352) == "00:00:00"

    def test_sub_second_remainder_rounds_to_nearest(self):
        one_second = 1 / 86400
        assert format_time_part(SERIAL_14_05 + 0.4 * one_second) == "14:05:00"
        assert format_time_part(SERIAL_14_05 + 0.6 * one_second) == "14:05:01"

    def test_rounding_up_to_midnight_wraps(self):
        assert format_time_part(0.9999999999) == "00:00:00"

    @pytest.mark.parametrize("text, expected", [
        ("9:30", "9:30:00"),
        ("14:05", "14:05:00"),
        (" 14:05 ", "14:05:00"),
        ("14:05:30", "14:05:30"),
        ("2pm", "2pm"),
        ("123:45", "123:45"),
    ])
    def test_text(self, text, expected):
        assert format_time_part(text) == expected

    def test_empty(self):
        assert format_time_part(None) == ""
        assert format_time_part("") == ""


class TestToNum:
    @pytest.mark.parametrize("value, expected", [
        ("1,234", 1234),
        ("abc", 0),
        ("", 0),
        (None, 0),
        ("  42 ", 42),
        ("3.5", 3.5),
        ("1,234,567.25", 1234567.25),
        (7, 7),
        (7.0, 7),
        ("1_000", 0),
        ("nan", 0),
        ("Infinity", 0),
        (float("inf"), 0),
        (True, 0),
        (datetime(2024, 3, 1), 0),
    ])
    def test_never_raises(self, value, expected):
        assert to_num(value) == expected

    def test_integral_results_are_ints(self):
        assert isinstance(to_num("10"), int)
        assert isinstance(to_num(10.0), int)


class TestToBool:
    @pytest.mark.parametrize("value", ["SoldOut", "yes", " Y ", "TRUE", "t", "sold", "1", True, 1, -2, 0.5])
    def test_truthy(self, value):
        assert to_bool(value) is True

    @pytest.mark.parametrize("value", ["no", "", None, "0", "false", "sold out", False, 0, 0.0, date(2024, 1, 1)])
    def test_falsy(self, value):
        assert to_bool(value) is False


class TestOversizedIntegers:
    """openpyxl reads any all-digit cell as an int, however long."""

    huge = 10 ** 400

    def test_to_num_is_zero(self):
        assert to_num(self.huge) == 0

    def test_date_part_falls_through_to_text(self):
        assert format_date_part(self.huge) == str(self.huge)

    def test_time_part_falls_through_to_text(self):
        assert format_time_part(self.huge) == str(self.huge)

    def test_to_bool(self):
        assert to_bool(self.huge) is True
