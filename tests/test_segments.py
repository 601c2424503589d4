"""
Unit tests for segments module - boundary splitting and rest removal.
"""

import unittest
from datetime import datetime
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from core.segments import (
    AutoRest,
    CountdownRest,
    RestWindow,
    Segment,
    apply_rest,
    apply_rest_countdown,
    apply_rest_window,
    compute_auto_rest_window,
    split_into_segments,
    total_minutes,
)
from core.time_utils import minute_of_day


def dt(day, hour, minute=0):
    """February 2024 helper: 5 is a Monday, 4 a Sunday."""
    return datetime(2024, 2, day, hour, minute)


class TestBoundarySegmenter(unittest.TestCase):
    """Splitting at 06:00, 21:00 and midnight."""

    def test_multi_day_interval_splits_at_every_boundary(self):
        segments = list(split_into_segments(dt(5, 5), dt(6, 7)))
        self.assertEqual(segments, [
            Segment(dt(5, 5), dt(5, 6)),
            Segment(dt(5, 6), dt(5, 21)),
            Segment(dt(5, 21), dt(6, 0)),
            Segment(dt(6, 0), dt(6, 6)),
            Segment(dt(6, 6), dt(6, 7)),
        ])

    def test_duration_is_conserved(self):
        intervals = [
            (dt(5, 8), dt(5, 16)),
            (dt(4, 19), dt(5, 5)),
            (dt(5, 5, 17), dt(7, 22, 43)),
            (dt(5, 20, 59), dt(5, 21, 1)),
        ]
        for start, end in intervals:
            with self.subTest(start=start, end=end):
                segments = list(split_into_segments(start, end))
                self.assertEqual(total_minutes(segments), (end - start).total_seconds() / 60)

    def test_segments_are_gapless_and_never_cross_boundaries(self):
        start, end = dt(3, 2, 30), dt(8, 23, 15)
        segments = list(split_into_segments(start, end))

        self.assertEqual(segments[0].start, start)
        self.assertEqual(segments[-1].end, end)
        for prev, nxt in zip(segments, segments[1:]):
            self.assertEqual(prev.end, nxt.start)

        for seg in segments:
            with self.subTest(segment=seg):
                start_min = minute_of_day(seg.start)
                # Minutes since midnight of the segment's own day (midnight end counts as 1440)
                end_min = start_min + int(seg.minutes)
                for boundary in (360, 1260):
                    self.assertFalse(start_min < boundary < end_min)
                self.assertLessEqual(end_min, 1440)

    def test_interval_inside_one_window_is_one_segment(self):
        self.assertEqual(list(split_into_segments(dt(5, 8), dt(5, 12))), [Segment(dt(5, 8), dt(5, 12))])
        self.assertEqual(list(split_into_segments(dt(5, 21), dt(5, 23))), [Segment(dt(5, 21), dt(5, 23))])
        self.assertEqual(list(split_into_segments(dt(5, 1), dt(5, 6))), [Segment(dt(5, 1), dt(5, 6))])

    def test_segmenter_is_restartable(self):
        first = list(split_into_segments(dt(4, 19), dt(5, 5)))
        second = list(split_into_segments(dt(4, 19), dt(5, 5)))
        self.assertEqual(first, second)
        self.assertEqual(len(first), 3)


class TestCountdownRest(unittest.TestCase):
    """Rest discounted from the end of the shift backwards."""

    def test_rest_shrinks_and_drops_trailing_segments(self):
        segments = list(split_into_segments(dt(5, 18), dt(5, 22)))
        result = apply_rest_countdown(segments, 90)
        self.assertEqual(result, [Segment(dt(5, 18), dt(5, 20, 30))])

    def test_rest_within_last_segment(self):
        segments = list(split_into_segments(dt(5, 18), dt(5, 22)))
        result = apply_rest_countdown(segments, 30)
        self.assertEqual(result, [Segment(dt(5, 18), dt(5, 21)), Segment(dt(5, 21), dt(5, 21, 30))])

    def test_input_is_not_modified(self):
        segments = list(split_into_segments(dt(5, 18), dt(5, 22)))
        original = list(segments)
        apply_rest_countdown(segments, 120)
        self.assertEqual(segments, original)

    def test_removed_minutes_match_rest(self):
        segments = list(split_into_segments(dt(4, 19), dt(5, 5)))
        result = apply_rest_countdown(segments, 45)
        self.assertEqual(total_minutes(segments) - total_minutes(result), 45)


class TestRestWindow(unittest.TestCase):
    """Explicit rest window removal."""

    def test_window_inside_segment_splits_it(self):
        segments = [Segment(dt(5, 8), dt(5, 16))]
        result = apply_rest_window(segments, RestWindow(dt(5, 12), dt(5, 13)))
        self.assertEqual(result, [Segment(dt(5, 8), dt(5, 12)), Segment(dt(5, 13), dt(5, 16))])

    def test_partial_overlap_trims_and_full_cover_drops(self):
        segments = list(split_into_segments(dt(5, 18), dt(5, 22)))
        result = apply_rest_window(segments, RestWindow(dt(5, 20), dt(5, 22)))
        self.assertEqual(result, [Segment(dt(5, 18), dt(5, 20))])

    def test_window_trims_segment_start(self):
        segments = list(split_into_segments(dt(5, 19), dt(5, 23)))
        result = apply_rest_window(segments, RestWindow(dt(5, 19), dt(5, 19, 30)))
        self.assertEqual(result, [Segment(dt(5, 19, 30), dt(5, 21)), Segment(dt(5, 21), dt(5, 23))])

    def test_removed_minutes_equal_overlap(self):
        segments = list(split_into_segments(dt(5, 18), dt(6, 2)))
        window = RestWindow(dt(5, 20, 30), dt(5, 21, 45))
        result = apply_rest_window(segments, window)
        self.assertEqual(total_minutes(segments) - total_minutes(result), 75)


class TestAutoRest(unittest.TestCase):
    """Automatic midpoint rest window."""

    def test_window_centred_on_midpoint(self):
        window = compute_auto_rest_window(dt(5, 8), dt(5, 16), 480, 60)
        self.assertEqual(window, RestWindow(dt(5, 11, 30), dt(5, 12, 30)))

    def test_shift_below_threshold_has_no_rest(self):
        self.assertIsNone(compute_auto_rest_window(dt(5, 8), dt(5, 15), 480, 60))

    def test_short_preset_window_covers_whole_short_shift(self):
        window = compute_auto_rest_window(dt(5, 8), dt(5, 9), 60, 60)
        self.assertEqual(window, RestWindow(dt(5, 8), dt(5, 9)))

    def test_window_stays_within_shift(self):
        start, end = dt(5, 8), dt(5, 8, 45)
        window = compute_auto_rest_window(start, end, 30, 60)
        self.assertGreaterEqual(window.start, start)
        self.assertLessEqual(window.end, end)


class TestApplyRest(unittest.TestCase):
    """Dispatch on the rest spec."""

    def setUp(self):
        self.start, self.end = dt(5, 8), dt(5, 16)
        self.segments = list(split_into_segments(self.start, self.end))

    def test_no_rest(self):
        self.assertEqual(apply_rest(self.segments, None, self.start, self.end), self.segments)

    def test_countdown(self):
        result = apply_rest(self.segments, CountdownRest(60), self.start, self.end)
        self.assertEqual(result, [Segment(dt(5, 8), dt(5, 15))])

    def test_auto(self):
        result = apply_rest(self.segments, AutoRest(480, 60), self.start, self.end)
        self.assertEqual(result, [Segment(dt(5, 8), dt(5, 11, 30)), Segment(dt(5, 12, 30), dt(5, 16))])

    def test_window(self):
        result = apply_rest(self.segments, RestWindow(dt(5, 15), dt(5, 16)), self.start, self.end)
        self.assertEqual(result, [Segment(dt(5, 8), dt(5, 15))])

    def test_unknown_spec_raises(self):
        with self.assertRaises(TypeError):
            apply_rest(self.segments, 30, self.start, self.end)


if __name__ == '__main__':
    unittest.main()
