"""
StockTerm Schema Contracts

This module defines the JSON contracts between the engine and its callers.
These are the authoritative interfaces - all modules must conform to these schemas.
"""

from stockterm.schemas.market import (
    BusinessDay,
    Candle,
    CandleTime,
)
from stockterm.schemas.indicators import (
    BatchErrorKind,
    BatchItemError,
    BatchRequest,
    BatchResponse,
    IndicatorCategory,
    IndicatorConfig,
    IndicatorRequest,
    IndicatorResult,
    LineStyle,
    OutputSpec,
    PanelOptions,
    ParamOption,
    ParamSpec,
    ParamType,
    PriceSource,
    ReferenceLine,
    ResultMetadata,
    SignalEvent,
    SignalType,
    ValidationResult,
    VolumeProfileLevel,
)

__all__ = [
    # Market
    "BusinessDay",
    "Candle",
    "CandleTime",
    # Indicators
    "BatchErrorKind",
    "BatchItemError",
    "BatchRequest",
    "BatchResponse",
    "IndicatorCategory",
    "IndicatorConfig",
    "IndicatorRequest",
    "IndicatorResult",
    "LineStyle",
    "OutputSpec",
    "PanelOptions",
    "ParamOption",
    "ParamSpec",
    "ParamType",
    "PriceSource",
    "ReferenceLine",
    "ResultMetadata",
    "SignalEvent",
    "SignalType",
    "ValidationResult",
    "VolumeProfileLevel",
]
