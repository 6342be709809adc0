"""Pytest configuration and shared candle fixtures."""

import math
from typing import Optional, Sequence

import pytest

from stockterm.schemas.market import Candle

# 2024-01-02 09:00 UTC
BASE_TIME = 1704186000


def make_candles(
    closes: Sequence[float],
    volumes: Optional[Sequence[float]] = None,
    spread: float = 1.0,
    start: int = BASE_TIME,
    step: int = 60,
) -> list[Candle]:
    """Build candles around a close series.

    Open is the previous close; high/low extend `spread` beyond the body.
    """
    candles = []
    prev_close = closes[0] if closes else 0.0
    for i, close in enumerate(closes):
        open_price = prev_close
        candles.append(
            Candle(
                time=start + i * step,
                open=open_price,
                high=max(open_price, close) + spread,
                low=min(open_price, close) - spread,
                close=close,
                volume=volumes[i] if volumes is not None else 1000.0 + 10 * i,
            )
        )
        prev_close = close
    return candles


def oscillating_closes(count: int = 120, base_price: float = 100.0) -> list[float]:
    """Sine wave on a gentle uptrend, so there are rallies, pullbacks and crossovers."""
    return [base_price + 10 * math.sin(i / 6) + 0.1 * i for i in range(count)]


@pytest.fixture
def linear_candles() -> list[Candle]:
    """30 candles with close rising 100 -> 129."""
    return make_candles([100.0 + i for i in range(30)])


@pytest.fixture
def falling_candles() -> list[Candle]:
    """30 candles with close falling 129 -> 100."""
    return make_candles([129.0 - i for i in range(30)])


@pytest.fixture
def flat_candles() -> list[Candle]:
    """40 candles with open = high = low = close = 50."""
    return make_candles([50.0] * 40, spread=0.0)


@pytest.fixture
def oscillating_candles() -> list[Candle]:
    return make_candles(oscillating_closes())
