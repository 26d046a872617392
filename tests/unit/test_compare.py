"""
Unit Tests for Constant-Time Comparison

Functional checks plus a statistical timing check that equal inputs,
inputs differing at the first unit and inputs differing at the last
unit take the same time to compare.
"""

import statistics
import time

import pytest

from credential.compare import constant_time_compare


class TestConstantTimeCompare:
    """Functional behaviour of constant_time_compare."""

    @pytest.mark.parametrize("a, b", [
        ("abc", "abc"),
        ("", ""),
        ("a", "a"),
        ("ab", "ab"),
        (b"\x00\xff", b"\x00\xff"),
        (bytearray(b"key"), b"key"),
    ])
    def test_equal(self, a, b):
        assert constant_time_compare(a, b) is True

    @pytest.mark.parametrize("a, b", [
        ("a", ""),
        ("ab", "ac"),
        ("abc", "abC"),
        ("abc", "abcD"),
        ("abc", "ab"),
        (b"\x00", b""),
        (b"abc", b"abd"),
    ])
    def test_unequal(self, a, b):
        assert constant_time_compare(a, b) is False

    def test_prefix_repetition_is_not_equal(self):
        """Wrapping indices must not make a repeated string match its prefix."""
        assert constant_time_compare("ab", "abab") is False
        assert constant_time_compare(b"a" * 10, b"a" * 11) is False

    def test_operands_longer_than_floor(self):
        long_a = b"x" * 4096
        assert constant_time_compare(long_a, b"x" * 4096)
        assert not constant_time_compare(long_a, b"x" * 4095 + b"y")

    def test_non_ascii_text(self):
        assert constant_time_compare("pässwörd", "pässwörd")
        assert not constant_time_compare("pässwörd", "passwörd")


@pytest.mark.timing
class TestComparisonTiming:
    """Timing must not reveal where or whether inputs differ."""

    TRIALS = 1000
    # Share of samples dropped from each end before averaging.
    TRIM = 0.05
    # Relative tolerance between mean timings.
    TOLERANCE = 0.25

    @staticmethod
    def _timed(a, b):
        start = time.perf_counter_ns()
        constant_time_compare(a, b)
        return time.perf_counter_ns() - start

    @classmethod
    def _trimmed_mean(cls, samples):
        # Scheduler and GC pauses land in the tails.
        cut = int(len(samples) * cls.TRIM)
        kept = sorted(samples)[cut:len(samples) - cut]
        return statistics.mean(kept)

    def test_mismatch_position_does_not_change_timing(self):
        base = "abcdefghijklmnopqrstuvwxyz"
        first = "Xbcdefghijklmnopqrstuvwxyz"
        last = "abcdefghijklmnopqrstuvwxyX"

        equal_times, first_times, last_times = [], [], []
        # Interleave so machine load drifts affect every case alike.
        for _ in range(self.TRIALS):
            equal_times.append(self._timed(base, base))
            first_times.append(self._timed(base, first))
            last_times.append(self._timed(base, last))

        equal = self._trimmed_mean(equal_times)
        for other in (self._trimmed_mean(first_times), self._trimmed_mean(last_times)):
            assert abs(equal - other) / equal < self.TOLERANCE

    def test_length_difference_does_not_change_timing(self):
        full = "abcdefghijklmnopqrstuvwxyz"
        short = "abcd"

        equal_times, difflen_times = [], []
        for _ in range(self.TRIALS):
            equal_times.append(self._timed(full, full))
            difflen_times.append(self._timed(short, full))

        equal = self._trimmed_mean(equal_times)
        difflen = self._trimmed_mean(difflen_times)
        assert abs(equal - difflen) / equal < self.TOLERANCE
