"""Tests for candle and result contracts."""

import math

import pytest
from pydantic import ValidationError

from stockterm.schemas.indicators import IndicatorResult, ResultMetadata, SignalEvent, SignalType
from stockterm.schemas.market import BusinessDay, Candle

JAN_2_2024 = 1704153600


def candle(**overrides) -> Candle:
    fields = dict(time=JAN_2_2024, open=10.0, high=12.0, low=9.0, close=11.0, volume=100.0)
    fields.update(overrides)
    return Candle(**fields)


class TestCandle:
    def test_valid(self):
        c = candle()
        assert c.typical_price == pytest.approx((12.0 + 9.0 + 11.0) / 3)

    @pytest.mark.parametrize(
        "overrides",
        [
            {"high": 8.0},
            {"high": 10.5},
            {"low": 10.5},
            {"volume": -1.0},
        ],
    )
    def test_inconsistent_values_rejected(self, overrides):
        with pytest.raises(ValidationError):
            candle(**overrides)

    def test_nan_candle_accepted(self):
        c = candle(close=math.nan, high=math.nan)
        assert math.isnan(c.close)

    def test_frozen(self):
        with pytest.raises(ValidationError):
            candle().close = 5.0

    def test_time_forms(self):
        assert candle(time=JAN_2_2024).timestamp_seconds() == JAN_2_2024
        assert candle(time=BusinessDay(year=2024, month=1, day=2)).timestamp_seconds() == JAN_2_2024
        assert candle(time="2024-01-02").timestamp_seconds() == JAN_2_2024
        assert candle(time="2024-01-02T01:00:00+00:00").timestamp_seconds() == JAN_2_2024 + 3600

    def test_impossible_business_day_rejected(self):
        with pytest.raises(ValidationError):
            BusinessDay(year=2024, month=2, day=30)
        with pytest.raises(ValidationError):
            Candle.model_validate(
                {"time": {"year": 2023, "month": 2, "day": 29}, "open": 1, "high": 1, "low": 1, "close": 1}
            )

        assert BusinessDay(year=2024, month=2, day=29).to_seconds() > 0

    @pytest.mark.parametrize("value", ["yesterday", "2024-13-01", "02/01/2024", ""])
    def test_malformed_time_string_rejected(self, value):
        with pytest.raises(ValidationError):
            candle(time=value)

    def test_business_day_from_dict(self):
        c = Candle.model_validate(
            {"time": {"year": 2024, "month": 1, "day": 2}, "open": 1, "high": 1, "low": 1, "close": 1}
        )
        assert c.timestamp_seconds() == JAN_2_2024
        assert c.volume == 0.0


class TestIndicatorResult:
    def test_line_length_must_match_timestamps(self):
        with pytest.raises(ValidationError):
            IndicatorResult(values=[[1.0, 2.0], [1.0]], timestamps=[1.0, 2.0])

    def test_helpers(self):
        result = IndicatorResult(
            values=[[math.nan, 1.0, 2.0], [math.nan, math.nan, math.nan]],
            timestamps=[1.0, 2.0, 3.0],
        )

        assert result.length == 3
        assert result.line(0)[1:] == [1.0, 2.0]
        assert result.last_valid(0) == 2.0
        assert result.last_valid(1) is None
        assert [len(a) for a in result.as_arrays()] == [3, 3]

    def test_metadata_shapes(self):
        metadata = ResultMetadata(
            overbought=70,
            oversold=30,
            signals=[SignalEvent(timestamp=1.0, type="buy", price=10.0)],
        )
        assert metadata.signals[0].type == SignalType.BUY
        assert metadata.profile is None
        assert metadata.extra == {}
