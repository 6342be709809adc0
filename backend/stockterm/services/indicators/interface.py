"""
Indicator Engine Interfaces

Defines the contract every indicator implements and the contract of the
batch calculation service.
"""

import logging
import math
from abc import ABC, abstractmethod
from numbers import Real
from typing import Any, Callable, Optional, Sequence

import numpy as np

from stockterm.core.config import settings
from stockterm.schemas.indicators import (
    BatchRequest,
    BatchResponse,
    IndicatorConfig,
    IndicatorResult,
    ParamOption,
    ParamSpec,
    ParamType,
    ResultMetadata,
    SignalEvent,
    SignalType,
    ValidationResult,
)
from stockterm.schemas.market import Candle
from stockterm.services.base import BaseService
from stockterm.services.indicators.cache import IndicatorCache, make_fingerprint
from stockterm.services.indicators.calculations import OHLCVData, extract_prices, to_arrays

logger = logging.getLogger(__name__)

ParamMap = dict[str, Any]


def source_param(default: str = "close") -> ParamSpec:
    """Price source selector shared by single-series indicators."""
    return ParamSpec(
        name="source",
        type=ParamType.ENUM,
        default=default,
        options=[
            ParamOption(label="Close", value="close"),
            ParamOption(label="Open", value="open"),
            ParamOption(label="High", value="high"),
            ParamOption(label="Low", value="low"),
            ParamOption(label="HLC3", value="hlc3"),
            ParamOption(label="OHLC4", value="ohlc4"),
        ],
        description="Price source for calculation",
    )


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, Real):
        return False
    return not math.isnan(value)


class Indicator(ABC):
    """
    Base class for all technical indicators.

    Each indicator:
    - Owns an immutable IndicatorConfig describing params and outputs
    - Validates parameters against that config (reported, never raised)
    - Calculates full-length series, NaN during warm-up
    - Optionally caches results per instance
    """

    def __init__(
        self,
        config: IndicatorConfig,
        enable_cache: Optional[bool] = None,
        cache_max_size: Optional[int] = None,
        cache_max_age: Optional[float] = None,
        clock: Optional[Callable[[], float]] = None,
    ):
        self._config = config
        if enable_cache is None:
            enable_cache = settings.indicator_cache_enabled
        self._cache: Optional[IndicatorCache] = (
            IndicatorCache(max_size=cache_max_size, max_age=cache_max_age, clock=clock)
            if enable_cache
            else None
        )

    @property
    def config(self) -> IndicatorConfig:
        return self._config

    @property
    def cache(self) -> Optional[IndicatorCache]:
        return self._cache

    def get_config(self) -> IndicatorConfig:
        """Get indicator configuration."""
        return self._config

    def default_params(self) -> ParamMap:
        """Default value of every declared parameter."""
        return {spec.name: spec.default for spec in self._config.params}

    def resolve_params(self, params: Optional[ParamMap] = None) -> ParamMap:
        """Merge caller params over the defaults."""
        merged = self.default_params()
        if params:
            merged.update(params)
        return merged

    def validate(self, params: Optional[ParamMap]) -> ValidationResult:
        """
        Check every declared parameter for presence, type, range and
        membership. All violations are collected.
        """
        params = params or {}
        errors: list[str] = []

        for spec in self._config.params:
            value = params.get(spec.name)

            if value is None:
                errors.append(f"Missing required parameter: {spec.name}")
                continue

            if spec.type == ParamType.NUMBER:
                if not _is_number(value):
                    errors.append(f"Parameter {spec.name} must be a valid number")
                    continue
                if spec.min is not None and value < spec.min:
                    errors.append(f"Parameter {spec.name} must be >= {spec.min:g}")
                if spec.max is not None and value > spec.max:
                    errors.append(f"Parameter {spec.name} must be <= {spec.max:g}")

            elif spec.type == ParamType.ENUM:
                allowed = spec.allowed_values()
                if allowed and value not in allowed:
                    errors.append(
                        f"Parameter {spec.name} must be one of: "
                        f"{', '.join(str(v) for v in allowed)}"
                    )

            elif spec.type == ParamType.BOOLEAN:
                if not isinstance(value, bool):
                    errors.append(f"Parameter {spec.name} must be a boolean")

        return ValidationResult(valid=not errors, errors=errors)

    @abstractmethod
    def calculate(
        self, candles: Sequence[Candle], params: Optional[ParamMap] = None
    ) -> IndicatorResult:
        """
        Calculate the indicator over the full series.

        Params are merged over the defaults but not validated. Input shorter
        than the warm-up yields all-NaN lines of the input's length.
        """
        pass

    def calculate_cached(
        self, candles: Sequence[Candle], params: Optional[ParamMap] = None
    ) -> IndicatorResult:
        """Calculate through the per-instance cache."""
        merged = self.resolve_params(params)
        if self._cache is None:
            return self.calculate(candles, merged)

        key = make_fingerprint(self._config.short_name, candles, merged)
        cached = self._cache.get(key)
        if cached is not None:
            logger.debug(f"Cache hit: {key}")
            return cached

        logger.debug(f"Cache miss: {key}")
        result = self.calculate(candles, merged)
        self._cache.put(key, result)
        return result

    def clear_cache(self) -> None:
        if self._cache is not None:
            self._cache.clear()

    # ------------------------------------------------------------------
    # Helpers for subclasses
    # ------------------------------------------------------------------

    @staticmethod
    def _arrays(candles: Sequence[Candle]) -> OHLCVData:
        return to_arrays(candles)

    @staticmethod
    def _source(data: OHLCVData, params: ParamMap) -> np.ndarray:
        return extract_prices(data, params.get("source", "close"))

    @staticmethod
    def _int(params: ParamMap, name: str) -> int:
        return int(params[name])

    @staticmethod
    def _signals(data: OHLCVData, events: Sequence[tuple[int, str]]) -> list[SignalEvent]:
        """(index, "buy"|"sell") pairs to SignalEvents priced at the bar's close."""
        return [
            SignalEvent(
                timestamp=float(data.timestamps[i]),
                type=SignalType(kind),
                price=float(data.closes[i]),
            )
            for i, kind in events
        ]

    @staticmethod
    def _result(
        data: OHLCVData,
        lines: Sequence[np.ndarray],
        metadata: Optional[ResultMetadata] = None,
    ) -> IndicatorResult:
        return IndicatorResult(
            values=[np.asarray(line, dtype=float).tolist() for line in lines],
            timestamps=data.timestamps.tolist(),
            metadata=metadata or ResultMetadata(),
        )

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self._config.short_name}>"


class IndicatorServiceInterface(BaseService[BatchRequest, BatchResponse]):
    """
    Indicator Engine Service Contract.

    INPUT: BatchRequest
        - candles: one OHLCV series
        - indicators: (type, params, label) requests

    OUTPUT: BatchResponse
        - results: keyed by label, else type name
        - errors: per-item failures; other items still complete
    """

    @property
    def name(self) -> str:
        return "IndicatorService"

    @abstractmethod
    async def execute(self, input_data: BatchRequest) -> BatchResponse:
        """Calculate every requested indicator over the candle series."""
        pass

    @abstractmethod
    def calculate(
        self,
        indicator_type: str,
        candles: Sequence[Candle],
        params: Optional[ParamMap] = None,
        strict: bool = False,
    ) -> IndicatorResult:
        """
        Calculate a single indicator.

        Args:
            indicator_type: Registered type name
            candles: OHLCV series
            params: Overrides merged over the defaults
            strict: Raise ParameterValidationError on invalid params

        Returns:
            Indicator result
        """
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """Indicator service is always healthy (pure computation)."""
        pass
