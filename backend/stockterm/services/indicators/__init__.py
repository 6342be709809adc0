"""
Indicator Engine Service

CONTRACT:
    Input:  Candle series + indicator type + parameters
    Output: IndicatorResult (one full-length line per declared output)

RESPONSIBILITIES:
    - Describe every indicator (IndicatorConfig) and validate its parameters
    - Calculate moving averages, oscillators, volatility, volume and trend indicators
    - Cache results per indicator instance
    - Resolve indicator types through a runtime-extensible registry
    - Detect crossovers, overbought/oversold zones and divergences
    - Run batches and named presets

PURE PYTHON - No I/O.
Uses NumPy for calculations.
All math is deterministic and reproducible.
"""

from stockterm.services.indicators.interface import Indicator, IndicatorServiceInterface
from stockterm.services.indicators.cache import IndicatorCache, make_fingerprint
from stockterm.services.indicators.moving_averages import SMA, EMA, WMA, DEMA
from stockterm.services.indicators.momentum import RSI, Stochastic, CCI, WilliamsR
from stockterm.services.indicators.macd import MACD, MACDHistogram
from stockterm.services.indicators.volatility import (
    BollingerBands,
    ATR,
    KeltnerChannels,
    StandardDeviation,
)
from stockterm.services.indicators.volume import OBV, VWAP, VolumeProfile, MFI, AD
from stockterm.services.indicators.trend import ADX, ParabolicSAR, Ichimoku
from stockterm.services.indicators.registry import INDICATOR_REGISTRY, IndicatorRegistry
from stockterm.services.indicators.signals import (
    CrossoverKind,
    detect_crossovers,
    detect_divergence,
    detect_overbought_oversold,
)
from stockterm.services.indicators.service import (
    IndicatorService,
    calculate_indicators,
    create_indicator,
    get_indicator_config,
    get_indicator_service,
    validate_indicator_params,
)
from stockterm.services.indicators.presets import (
    INDICATOR_GROUPS,
    INDICATOR_PRESETS,
    IndicatorPreset,
    calculate_preset,
    get_preset,
)

__all__ = [
    "Indicator",
    "IndicatorServiceInterface",
    "IndicatorCache",
    "make_fingerprint",
    "SMA",
    "EMA",
    "WMA",
    "DEMA",
    "RSI",
    "Stochastic",
    "CCI",
    "WilliamsR",
    "MACD",
    "MACDHistogram",
    "BollingerBands",
    "ATR",
    "KeltnerChannels",
    "StandardDeviation",
    "OBV",
    "VWAP",
    "VolumeProfile",
    "MFI",
    "AD",
    "ADX",
    "ParabolicSAR",
    "Ichimoku",
    "INDICATOR_REGISTRY",
    "IndicatorRegistry",
    "CrossoverKind",
    "detect_crossovers",
    "detect_divergence",
    "detect_overbought_oversold",
    "IndicatorService",
    "calculate_indicators",
    "create_indicator",
    "get_indicator_config",
    "get_indicator_service",
    "validate_indicator_params",
    "INDICATOR_GROUPS",
    "INDICATOR_PRESETS",
    "IndicatorPreset",
    "calculate_preset",
    "get_preset",
]
