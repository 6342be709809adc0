"""
Signal Detection

Pure functions over already-computed series. No indicator knowledge:
callers pass whichever lines they want compared.
"""

from dataclasses import dataclass
from enum import Enum

import numpy as np


class CrossoverKind(str, Enum):
    BULLISH = "bullish"
    BEARISH = "bearish"
    ALL = "all"


class ZoneKind(str, Enum):
    OVERBOUGHT = "overbought"
    OVERSOLD = "oversold"


class DivergenceKind(str, Enum):
    BULLISH = "bullish"
    BEARISH = "bearish"


@dataclass(frozen=True)
class ZoneSignal:
    """Index at or beyond an overbought/oversold threshold."""
    index: int
    kind: ZoneKind


@dataclass(frozen=True)
class DivergenceSignal:
    """Index where price and indicator extremes disagree."""
    index: int
    kind: DivergenceKind


def detect_crossovers(
    line1: np.ndarray,
    line2: np.ndarray,
    kind: CrossoverKind = CrossoverKind.ALL,
) -> list[int]:
    """
    Indices where line1 crosses line2.

    Bullish: line1 goes from <= line2 to > line2.
    Bearish: line1 goes from >= line2 to < line2.
    A bar is skipped when it or the previous bar has NaN in either line.
    """
    a = np.asarray(line1, dtype=float)
    b = np.asarray(line2, dtype=float)
    kind = CrossoverKind(kind)
    signals = []

    for i in range(1, min(len(a), len(b))):
        if np.isnan(a[i]) or np.isnan(b[i]) or np.isnan(a[i - 1]) or np.isnan(b[i - 1]):
            continue

        if a[i - 1] <= b[i - 1] and a[i] > b[i]:
            if kind in (CrossoverKind.BULLISH, CrossoverKind.ALL):
                signals.append(i)
        elif a[i - 1] >= b[i - 1] and a[i] < b[i]:
            if kind in (CrossoverKind.BEARISH, CrossoverKind.ALL):
                signals.append(i)

    return signals


def detect_overbought_oversold(
    values: np.ndarray, overbought: float, oversold: float
) -> list[ZoneSignal]:
    """Every index at/above `overbought` or at/below `oversold`; NaN skipped."""
    signals = []
    for i, value in enumerate(np.asarray(values, dtype=float)):
        if np.isnan(value):
            continue
        if value >= overbought:
            signals.append(ZoneSignal(index=i, kind=ZoneKind.OVERBOUGHT))
        elif value <= oversold:
            signals.append(ZoneSignal(index=i, kind=ZoneKind.OVERSOLD))
    return signals


def detect_divergence(
    prices: np.ndarray, indicator: np.ndarray, lookback: int = 5
) -> list[DivergenceSignal]:
    """
    Detect bullish or bearish divergence over a sliding window of lookback+1 bars.

    Bullish: price sets the window low while the indicator stays above its low.
    Bearish: price sets the window high while the indicator stays below its high.
    Windows containing NaN are skipped.
    """
    prices = np.asarray(prices, dtype=float)
    indicator = np.asarray(indicator, dtype=float)
    signals = []

    for i in range(lookback, min(len(prices), len(indicator))):
        price_window = prices[i - lookback : i + 1]
        ind_window = indicator[i - lookback : i + 1]
        if np.isnan(price_window).any() or np.isnan(ind_window).any():
            continue

        # Bullish divergence: price making lower lows, indicator making higher lows
        if prices[i] == price_window.min() and indicator[i] > ind_window.min():
            signals.append(DivergenceSignal(index=i, kind=DivergenceKind.BULLISH))
        # Bearish divergence: price making higher highs, indicator making lower highs
        elif prices[i] == price_window.max() and indicator[i] < ind_window.max():
            signals.append(DivergenceSignal(index=i, kind=DivergenceKind.BEARISH))

    return signals
