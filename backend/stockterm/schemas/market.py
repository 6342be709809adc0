"""
CONTRACT 1: Market Data

Input consumed by the indicator engine.

The engine never fetches data. Whatever acquisition layer sits upstream
normalizes its candles into this shape; the engine borrows them for the
duration of a calculation and never mutates them.
"""

import math
from datetime import date, datetime, timezone
from typing import Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class BusinessDay(BaseModel):
    """Calendar date without a time component (daily and weekly charts)."""

    model_config = ConfigDict(frozen=True)

    year: int = Field(..., ge=1970)
    month: int = Field(..., ge=1, le=12)
    day: int = Field(..., ge=1, le=31)

    @model_validator(mode="after")
    def _check_date(self) -> "BusinessDay":
        # Raises on dates such as Feb 30
        date(self.year, self.month, self.day)
        return self

    def to_seconds(self) -> int:
        """Midnight UTC of this date as epoch seconds."""
        dt = datetime(self.year, self.month, self.day, tzinfo=timezone.utc)
        return int(dt.timestamp())


CandleTime = Union[int, float, BusinessDay, str]


def _time_to_seconds(value: CandleTime) -> float:
    if isinstance(value, BusinessDay):
        return value.to_seconds()
    if isinstance(value, (int, float)):
        return value
    # ISO string: a bare date or a full datetime
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.timestamp()


class Candle(BaseModel):
    """
    Single OHLCV candle.

    Consistency checks (high/low envelope, non-negative volume) only run when
    every value is finite. A candle carrying NaN is accepted so that bad ticks
    surface as NaN in indicator output instead of failing the whole series.
    """

    model_config = ConfigDict(frozen=True)

    time: CandleTime
    open: float
    high: float
    low: float
    close: float
    volume: float = 0.0

    @field_validator("time")
    @classmethod
    def _check_time(cls, v: CandleTime) -> CandleTime:
        if isinstance(v, str):
            try:
                datetime.fromisoformat(v)
            except ValueError:
                raise ValueError(f"time must be an ISO date or datetime, got {v!r}")
        return v

    @model_validator(mode="after")
    def _check_envelope(self) -> "Candle":
        values = (self.open, self.high, self.low, self.close, self.volume)
        if not all(math.isfinite(v) for v in values):
            return self

        if self.high < self.low:
            raise ValueError(f"high ({self.high}) must be >= low ({self.low})")
        if self.high < max(self.open, self.close):
            raise ValueError("high must be >= open and close")
        if self.low > min(self.open, self.close):
            raise ValueError("low must be <= open and close")
        if self.volume < 0:
            raise ValueError("volume must be non-negative")
        return self

    def timestamp_seconds(self) -> float:
        """Candle time as epoch seconds."""
        return _time_to_seconds(self.time)

    @property
    def typical_price(self) -> float:
        return (self.high + self.low + self.close) / 3
