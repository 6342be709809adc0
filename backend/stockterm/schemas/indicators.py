"""
CONTRACT 2: Indicator Engine

Input: Candle series + indicator type + parameters
Output: IndicatorResult

Descriptors (IndicatorConfig) drive both UI generation downstream and
parameter validation inside the engine. Results carry one value line per
declared output, each exactly as long as the input series.
"""

import math
from enum import Enum
from typing import Any, Optional

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, model_validator

from stockterm.schemas.market import Candle


# =============================================================================
# ENUMS
# =============================================================================


class IndicatorCategory(str, Enum):
    OVERLAY = "overlay"
    OSCILLATOR = "oscillator"
    VOLUME = "volume"


class ParamType(str, Enum):
    NUMBER = "number"
    ENUM = "enum"
    BOOLEAN = "boolean"


class LineStyle(str, Enum):
    SOLID = "solid"
    DASHED = "dashed"
    DOTTED = "dotted"


class SignalType(str, Enum):
    BUY = "buy"
    SELL = "sell"


class PriceSource(str, Enum):
    OPEN = "open"
    HIGH = "high"
    LOW = "low"
    CLOSE = "close"
    HLC3 = "hlc3"
    OHLC4 = "ohlc4"


# =============================================================================
# DESCRIPTORS
# =============================================================================


class ParamOption(BaseModel):
    """One allowed value of an enum parameter."""

    model_config = ConfigDict(frozen=True)

    label: str
    value: Any


class ParamSpec(BaseModel):
    """Declared input parameter of an indicator."""

    model_config = ConfigDict(frozen=True)

    name: str
    type: ParamType
    default: Any
    min: Optional[float] = None
    max: Optional[float] = None
    step: Optional[float] = None
    options: Optional[list[ParamOption]] = None
    description: Optional[str] = None

    def allowed_values(self) -> list[Any]:
        return [opt.value for opt in self.options or []]


class OutputSpec(BaseModel):
    """Rendering hints for one output line."""

    model_config = ConfigDict(frozen=True)

    name: str
    color: str
    line_width: int = 2
    line_style: Optional[LineStyle] = None


class ReferenceLine(BaseModel):
    """Horizontal guide drawn in an indicator panel."""

    model_config = ConfigDict(frozen=True)

    value: float
    color: str
    style: LineStyle = LineStyle.SOLID


class PanelOptions(BaseModel):
    """Separate-panel layout hints for oscillators."""

    model_config = ConfigDict(frozen=True)

    height: Optional[int] = None
    reference_lines: list[ReferenceLine] = Field(default_factory=list)
    min_value: Optional[float] = None
    max_value: Optional[float] = None


class IndicatorConfig(BaseModel):
    """Immutable descriptor, built once per indicator type."""

    model_config = ConfigDict(frozen=True)

    name: str
    short_name: str
    category: IndicatorCategory
    description: str
    params: list[ParamSpec] = Field(default_factory=list)
    outputs: list[OutputSpec]
    panel: Optional[PanelOptions] = None

    def param(self, name: str) -> Optional[ParamSpec]:
        for spec in self.params:
            if spec.name == name:
                return spec
        return None


# =============================================================================
# RESULTS
# =============================================================================


class SignalEvent(BaseModel):
    """Buy/sell event detected while calculating an indicator."""

    timestamp: float
    type: SignalType
    price: float


class VolumeProfileLevel(BaseModel):
    """Single price bin of a volume profile."""

    price_low: float
    price_high: float
    price: float = Field(..., description="Bin midpoint")
    volume: float = Field(..., ge=0)
    is_poc: bool = Field(..., description="Is Point of Control")
    is_value_area: bool


class ResultMetadata(BaseModel):
    """
    Known metadata shapes attached to a result.

    - threshold pair: overbought / oversold
    - detected events: signals
    - volume profile: min_price, max_price, bin_size, poc_price, poc_volume, profile

    `extra` is the only open field, reserved for custom indicators.
    """

    overbought: Optional[float] = None
    oversold: Optional[float] = None
    signals: Optional[list[SignalEvent]] = None
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    bin_size: Optional[float] = None
    poc_price: Optional[float] = None
    poc_volume: Optional[float] = None
    profile: Optional[list[VolumeProfileLevel]] = None
    extra: dict[str, Any] = Field(default_factory=dict)


class IndicatorResult(BaseModel):
    """
    Output of one indicator calculation.

    values[i] pairs with config.outputs[i]; every line indexes identically to
    timestamps. NaN marks "undefined for this index" (warm-up, bad input).
    """

    values: list[list[float]]
    timestamps: list[float]
    metadata: ResultMetadata = Field(default_factory=ResultMetadata)

    @model_validator(mode="after")
    def _check_shape(self) -> "IndicatorResult":
        n = len(self.timestamps)
        for i, line in enumerate(self.values):
            if len(line) != n:
                raise ValueError(
                    f"values[{i}] has {len(line)} points, expected {n} (one per timestamp)"
                )
        return self

    @property
    def length(self) -> int:
        return len(self.timestamps)

    def line(self, index: int = 0) -> list[float]:
        return self.values[index]

    def as_arrays(self) -> list[np.ndarray]:
        """Value lines as float64 arrays."""
        return [np.asarray(line, dtype=float) for line in self.values]

    def last_valid(self, index: int = 0) -> Optional[float]:
        """Last non-NaN value of a line."""
        for value in reversed(self.values[index]):
            if not math.isnan(value):
                return value
        return None


class ValidationResult(BaseModel):
    """Aggregated parameter validation outcome."""

    valid: bool
    errors: list[str] = Field(default_factory=list)


# =============================================================================
# BATCH REQUESTS
# =============================================================================


class IndicatorRequest(BaseModel):
    """One (type, params) pair in a batch."""

    type: str
    params: dict[str, Any] = Field(default_factory=dict)
    label: Optional[str] = Field(
        default=None, description="Result key; defaults to the type name"
    )


class BatchRequest(BaseModel):
    """Batch calculation over a single candle series."""

    candles: list[Candle]
    indicators: list[IndicatorRequest]


class BatchErrorKind(str, Enum):
    UNKNOWN_TYPE = "unknown_type"
    VALIDATION = "validation"
    CALCULATION = "calculation"


class BatchItemError(BaseModel):
    """Why one batch item produced no result."""

    key: str
    type: str
    kind: BatchErrorKind
    errors: list[str]


class BatchResponse(BaseModel):
    """Results of a batch, keyed like calculate_indicators()."""

    results: dict[str, IndicatorResult] = Field(default_factory=dict)
    errors: list[BatchItemError] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors
