"""Tests for crossover, zone and divergence detection."""

import numpy as np

from stockterm.services.indicators.signals import (
    CrossoverKind,
    DivergenceKind,
    ZoneKind,
    detect_crossovers,
    detect_divergence,
    detect_overbought_oversold,
)

NAN = float("nan")


class TestCrossovers:
    def test_single_bullish_cross(self):
        rising = np.array([1.0, 2.0, 3.0, 4.0, 5.0])
        flat = np.full(5, 3.0)

        assert detect_crossovers(rising, flat) == [3]
        assert detect_crossovers(rising, flat, CrossoverKind.BULLISH) == [3]
        assert detect_crossovers(rising, flat, CrossoverKind.BEARISH) == []

    def test_single_bearish_cross(self):
        falling = np.array([5.0, 4.0, 3.0, 2.0, 1.0])
        flat = np.full(5, 3.0)

        assert detect_crossovers(falling, flat) == [3]
        assert detect_crossovers(falling, flat, "bearish") == [3]
        assert detect_crossovers(falling, flat, "bullish") == []

    def test_both_directions(self):
        a = [0.0, 2.0, 2.0, 0.0, 2.0]
        b = [1.0, 1.0, 1.0, 1.0, 1.0]
        assert detect_crossovers(a, b) == [1, 3, 4]

    def test_nan_neighbours_skipped(self):
        a = [1.0, NAN, 5.0, 6.0]
        b = [3.0, 3.0, 3.0, 3.0]
        assert detect_crossovers(a, b) == []

    def test_reaching_equality_is_not_a_cross(self):
        assert detect_crossovers([1.0, 3.0, 3.0], [3.0, 3.0, 3.0]) == []


class TestOverboughtOversold:
    def test_zones(self):
        signals = detect_overbought_oversold([80.0, 50.0, 20.0, NAN, 70.0, 30.0], 70, 30)

        assert [(s.index, s.kind) for s in signals] == [
            (0, ZoneKind.OVERBOUGHT),
            (2, ZoneKind.OVERSOLD),
            (4, ZoneKind.OVERBOUGHT),
            (5, ZoneKind.OVERSOLD),
        ]


class TestDivergence:
    def test_bullish(self):
        prices = [10.0, 9.0, 8.0, 7.0, 6.0, 5.0]
        indicator = [1.0, 2.0, 3.0, 4.0, 5.0, 6.0]

        signals = detect_divergence(prices, indicator, lookback=5)
        assert [(s.index, s.kind) for s in signals] == [(5, DivergenceKind.BULLISH)]

    def test_bearish(self):
        prices = [5.0, 6.0, 7.0, 8.0, 9.0, 10.0]
        indicator = [6.0, 5.0, 4.0, 3.0, 2.0, 1.0]

        signals = detect_divergence(prices, indicator, lookback=5)
        assert [(s.index, s.kind) for s in signals] == [(5, DivergenceKind.BEARISH)]

    def test_confirmation_is_not_divergence(self):
        prices = [10.0, 9.0, 8.0, 7.0, 6.0, 5.0]
        assert detect_divergence(prices, prices, lookback=5) == []

    def test_nan_window_skipped(self):
        prices = [10.0, 9.0, 8.0, 7.0, 6.0, 5.0]
        indicator = [NAN, 2.0, 3.0, 4.0, 5.0, 6.0]
        assert detect_divergence(prices, indicator, lookback=5) == []
