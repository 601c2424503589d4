"""
Tests for shift input validation.
"""

import unittest
from datetime import datetime
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from core.segments import AutoRest, CountdownRest, RestWindow
from core.validation import validate_shift
from core.wage_calculator import CATEGORY_POLICIES
from utils.error_handler import (
    InvalidDayType,
    InvalidInterval,
    InvalidRestSpec,
    MissingRestTiming,
    ValidationError,
)


def shift(**overrides):
    fields = {
        "person": "Ana",
        "start": "2024-02-05T08:00",
        "end": "2024-02-05T16:00",
        "rest_mode": "countdown",
    }
    fields.update(overrides)
    return validate_shift(**fields)


class TestIntervalValidation(unittest.TestCase):

    def test_valid_request(self):
        request = shift()
        self.assertEqual(request.person, "Ana")
        self.assertEqual(request.start, datetime(2024, 2, 5, 8, 0))
        self.assertEqual(request.total_minutes, 480)
        self.assertIsNone(request.rest)
        self.assertEqual(request.policy, CATEGORY_POLICIES["standard"])

    def test_person_required(self):
        with self.assertRaises(InvalidInterval) as ctx:
            shift(person="   ")
        self.assertIn("persona", ctx.exception.user_message)

    def test_dates_required(self):
        with self.assertRaises(InvalidInterval):
            shift(end="")

    def test_unparsable_date(self):
        with self.assertRaises(InvalidInterval):
            shift(start="mañana")

    def test_end_must_follow_start(self):
        with self.assertRaises(InvalidInterval):
            shift(end="2024-02-05T08:00")

    def test_seconds_are_truncated(self):
        request = shift(start="2024-02-05T08:00:45")
        self.assertEqual(request.start, datetime(2024, 2, 5, 8, 0))

    def test_unknown_day_type(self):
        with self.assertRaises(InvalidDayType):
            shift(day_type="sabado")

    def test_known_day_types(self):
        for day_type in ("auto", "ordinario", "dominical", "festivo"):
            with self.subTest(day_type=day_type):
                self.assertEqual(shift(day_type=day_type).day_type, day_type)

    def test_week_key_blank_means_iso_week(self):
        self.assertIsNone(shift(week_key="  ").week_key)
        self.assertEqual(shift(week_key="2024-W10").week_key, "2024-W10")

    def test_unknown_policy(self):
        with self.assertRaises(ValidationError):
            shift(policy="generous")

    def test_non_text_fields_rejected(self):
        cases = (
            ({"person": 5}, InvalidInterval),
            ({"day_type": ["x"]}, InvalidDayType),
            ({"rest_mode": 1}, ValidationError),
            ({"auto_rest_preset": ["short"], "rest_mode": "auto"}, ValidationError),
            ({"week_key": 7}, ValidationError),
            ({"policy": {"name": "standard"}}, ValidationError),
        )
        for overrides, error_cls in cases:
            with self.subTest(overrides=overrides):
                with self.assertRaises(error_cls):
                    shift(**overrides)


class TestRestValidation(unittest.TestCase):

    def test_countdown_rest(self):
        self.assertEqual(shift(rest_minutes="30").rest, CountdownRest(30))

    def test_negative_rest(self):
        with self.assertRaises(InvalidRestSpec):
            shift(rest_minutes="-5")

    def test_non_numeric_rest(self):
        with self.assertRaises(InvalidRestSpec):
            shift(rest_minutes="media hora")

    def test_rest_not_shorter_than_shift(self):
        with self.assertRaises(InvalidRestSpec):
            shift(end="2024-02-05T09:00", rest_minutes=60)

    def test_rest_above_cap(self):
        with self.assertRaises(InvalidRestSpec):
            shift(rest_minutes=241)

    def test_rest_at_cap_is_allowed(self):
        self.assertEqual(shift(rest_minutes=240).rest, CountdownRest(240))

    def test_unknown_rest_mode(self):
        with self.assertRaises(ValidationError):
            shift(rest_mode="siesta")

    def test_no_rest_mode_ignores_minutes(self):
        self.assertIsNone(shift(rest_mode="none", rest_minutes=30).rest)

    def test_auto_rest_presets(self):
        self.assertEqual(shift(rest_mode="auto").rest, AutoRest(480, 60))
        self.assertEqual(shift(rest_mode="auto", auto_rest_preset="short").rest, AutoRest(60, 60))
        with self.assertRaises(ValidationError):
            shift(rest_mode="auto", auto_rest_preset="long")

    def test_auto_rest_covering_whole_shift(self):
        with self.assertRaises(InvalidRestSpec):
            shift(end="2024-02-05T09:00", rest_mode="auto", auto_rest_preset="short")

    def test_auto_rest_below_threshold_is_kept(self):
        request = shift(end="2024-02-05T08:30", rest_mode="auto", auto_rest_preset="short")
        self.assertEqual(request.rest, AutoRest(60, 60))

    def test_window_rest(self):
        request = shift(
            rest_mode="window", rest_minutes=60,
            rest_start="2024-02-05T12:00", rest_end="2024-02-05T13:00",
        )
        self.assertEqual(request.rest, RestWindow(datetime(2024, 2, 5, 12), datetime(2024, 2, 5, 13)))

    def test_window_requires_timing(self):
        with self.assertRaises(MissingRestTiming):
            shift(rest_mode="window", rest_minutes=60, rest_start="2024-02-05T12:00")

    def test_window_start_outside_shift(self):
        with self.assertRaises(InvalidRestSpec):
            shift(
                rest_mode="window", rest_minutes=60,
                rest_start="2024-02-05T07:30", rest_end="2024-02-05T08:30",
            )

    def test_window_start_at_shift_end(self):
        with self.assertRaises(InvalidRestSpec):
            shift(
                end="2024-02-05T18:00", rest_mode="window", rest_minutes=60,
                rest_start="2024-02-05T18:00", rest_end="2024-02-05T19:00",
            )

    def test_window_end_after_shift(self):
        with self.assertRaises(InvalidRestSpec):
            shift(
                rest_mode="window", rest_minutes=60,
                rest_start="2024-02-05T15:30", rest_end="2024-02-05T16:30",
            )

    def test_window_end_before_start(self):
        with self.assertRaises(InvalidRestSpec):
            shift(
                rest_mode="window", rest_minutes=60,
                rest_start="2024-02-05T13:00", rest_end="2024-02-05T12:00",
            )

    def test_window_duration_mismatch(self):
        with self.assertRaises(InvalidRestSpec):
            shift(
                rest_mode="window", rest_minutes=45,
                rest_start="2024-02-05T12:00", rest_end="2024-02-05T13:00",
            )

    def test_unparsable_rest_time(self):
        with self.assertRaises(InvalidRestSpec):
            shift(rest_mode="window", rest_minutes=60, rest_start="doce", rest_end="2024-02-05T13:00")


if __name__ == '__main__':
    unittest.main()
