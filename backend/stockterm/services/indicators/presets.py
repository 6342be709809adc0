"""
Indicator Groups and Presets

Named bundles of indicator requests for common trading styles.
"""

from typing import Optional, Sequence

from pydantic import BaseModel, ConfigDict

from stockterm.schemas.indicators import IndicatorRequest, IndicatorResult
from stockterm.schemas.market import Candle
from stockterm.services.base import UnknownPresetError
from stockterm.services.indicators.registry import IndicatorRegistry
from stockterm.services.indicators.service import calculate_indicators

INDICATOR_GROUPS: dict[str, list[str]] = {
    "moving_averages": ["SMA", "EMA", "WMA"],
    "momentum": ["RSI", "Stochastic", "CCI", "Williams%R"],
    "trend": ["MACD", "ADX", "ParabolicSAR", "Ichimoku"],
    "volatility": ["BollingerBands", "ATR", "KeltnerChannels"],
    "volume": ["OBV", "VWAP", "VolumeProfile", "MFI"],
    # Popular combinations
    "day_trading": ["EMA", "RSI", "MACD", "ATR"],
    "swing_trading": ["SMA", "BollingerBands", "RSI", "MACD"],
    "scalping": ["EMA", "Stochastic", "ATR"],
    "trending": ["ADX", "ParabolicSAR", "EMA"],
}


class IndicatorPreset(BaseModel):
    """Named list of indicator requests."""

    model_config = ConfigDict(frozen=True)

    name: str
    indicators: list[IndicatorRequest]


def _req(indicator_type: str, label: Optional[str] = None, **params) -> IndicatorRequest:
    return IndicatorRequest(type=indicator_type, params=params, label=label)


INDICATOR_PRESETS: dict[str, IndicatorPreset] = {
    "day_trading": IndicatorPreset(
        name="Day Trading",
        indicators=[
            _req("EMA", "EMA 9", period=9),
            _req("EMA", "EMA 21", period=21),
            _req("RSI", period=14),
            _req("MACD"),
            _req("ATR", period=14),
        ],
    ),
    "swing_trading": IndicatorPreset(
        name="Swing Trading",
        indicators=[
            _req("SMA", "SMA 50", period=50),
            _req("SMA", "SMA 200", period=200),
            _req("BollingerBands", period=20, stdDev=2),
            _req("RSI", period=14),
            _req("MACD"),
        ],
    ),
    "scalping": IndicatorPreset(
        name="Scalping",
        indicators=[
            _req("EMA", "EMA 5", period=5),
            _req("EMA", "EMA 13", period=13),
            _req("Stochastic", kPeriod=5, dPeriod=3),
            _req("ATR", period=14),
        ],
    ),
    "trending": IndicatorPreset(
        name="Trend Following",
        indicators=[
            _req("ADX", period=14),
            _req("ParabolicSAR"),
            _req("EMA", "EMA 50", period=50),
            _req("ATR", period=14),
        ],
    ),
    "volume_analysis": IndicatorPreset(
        name="Volume Analysis",
        indicators=[
            _req("OBV"),
            _req("VWAP"),
            _req("MFI", period=14),
            _req("VolumeProfile", bins=24),
        ],
    ),
    "ichimoku_full": IndicatorPreset(
        name="Ichimoku Complete",
        indicators=[
            _req("Ichimoku"),
            _req("ATR", period=14),
        ],
    ),
}


def get_preset(name: str) -> IndicatorPreset:
    """Look up a preset by key (e.g. "day_trading")."""
    preset = INDICATOR_PRESETS.get(name)
    if preset is None:
        raise UnknownPresetError(name, sorted(INDICATOR_PRESETS))
    return preset


def calculate_preset(
    candles: Sequence[Candle],
    name: str,
    registry: Optional[IndicatorRegistry] = None,
) -> dict[str, IndicatorResult]:
    """Run every indicator of a preset over one candle series."""
    return calculate_indicators(candles, get_preset(name).indicators, registry=registry)
