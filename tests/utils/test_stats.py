"""Tests for numeric reductions"""

import pytest

from zentra_app.utils.stats import clamp, coefficient_of_variation_pct, mean, median, pstdev, round_half_up


class TestReductions:

    def test_mean(self):
        assert mean([]) is None
        assert mean([1, 2, 3]) == 2

    def test_median(self):
        assert median([]) == 0.0
        assert median([3, 1, 2]) == 2
        assert median([4, 1, 3, 2]) == 2.5

    def test_pstdev(self):
        assert pstdev([5]) == 0.0
        assert pstdev([1, 3]) == 1.0

    def test_coefficient_of_variation(self):
        assert coefficient_of_variation_pct([1, 3]) == 50.0
        assert coefficient_of_variation_pct([]) == 0.0
        assert coefficient_of_variation_pct([0, 0]) == 0.0


class TestRounding:

    @pytest.mark.parametrize("value,expected", [(72.5, 73), (72.4, 72), (0.5, 1), (-0.5, 0)])
    def test_half_up(self, value, expected):
        assert round_half_up(value) == expected

    def test_two_decimals(self):
        assert round_half_up(66.6666, 2) == pytest.approx(66.67)

    def test_clamp(self):
        assert clamp(120) == 100
        assert clamp(-3) == 0
        assert clamp(5, 0, 4) == 4
