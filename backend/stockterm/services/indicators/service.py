"""
Indicator Engine Service Implementation

Batch calculation of registered indicators over one candle series.
NO I/O - Pure Python/NumPy calculations.
"""

import logging
import threading
from typing import Any, Optional, Sequence, Union

from stockterm.schemas.indicators import (
    BatchErrorKind,
    BatchItemError,
    BatchRequest,
    BatchResponse,
    IndicatorConfig,
    IndicatorRequest,
    IndicatorResult,
    ValidationResult,
)
from stockterm.schemas.market import Candle
from stockterm.services.base import ParameterValidationError, UnknownIndicatorTypeError
from stockterm.services.indicators.interface import (
    Indicator,
    IndicatorServiceInterface,
    ParamMap,
)
from stockterm.services.indicators.registry import INDICATOR_REGISTRY, IndicatorRegistry

logger = logging.getLogger(__name__)

RequestLike = Union[IndicatorRequest, tuple[str, Optional[ParamMap]], dict[str, Any]]


def _as_request(item: RequestLike) -> IndicatorRequest:
    if isinstance(item, IndicatorRequest):
        return item
    if isinstance(item, tuple):
        indicator_type, params = item
        return IndicatorRequest(type=indicator_type, params=params or {})
    return IndicatorRequest.model_validate(item)


def result_keys(requests: Sequence[IndicatorRequest]) -> list[str]:
    """
    Result key per request: the label, else the type name.

    Repeated keys get "#2", "#3"... so no result overwrites another.
    """
    keys = []
    seen: dict[str, int] = {}
    for request in requests:
        base = request.label or request.type
        count = seen.get(base, 0) + 1
        seen[base] = count
        keys.append(base if count == 1 else f"{base}#{count}")
    return keys


def calculate_indicators(
    candles: Sequence[Candle],
    requests: Sequence[RequestLike],
    registry: Optional[IndicatorRegistry] = None,
) -> dict[str, IndicatorResult]:
    """
    Calculate multiple indicators at once.

    Example:
        results = calculate_indicators(candles, [
            ("SMA", {"period": 20}),
            IndicatorRequest(type="RSI", params={"period": 14}),
        ])

    Raises:
        UnknownIndicatorTypeError: If any requested type is not registered
    """
    registry = registry or INDICATOR_REGISTRY
    normalized = [_as_request(item) for item in requests]

    # One instance per type for the whole batch
    instances: dict[str, Indicator] = {}
    results: dict[str, IndicatorResult] = {}

    for key, request in zip(result_keys(normalized), normalized):
        indicator = instances.get(request.type)
        if indicator is None:
            indicator = registry.create(request.type)
            instances[request.type] = indicator
        results[key] = indicator.calculate_cached(candles, request.params)

    return results


class IndicatorService(IndicatorServiceInterface):
    """
    Indicator Engine Service.

    Keeps one cached indicator instance per type. A failing batch item is
    reported in the response and never stops the others.
    """

    def __init__(self, registry: Optional[IndicatorRegistry] = None):
        self._registry = registry or INDICATOR_REGISTRY
        self._instances: dict[str, Indicator] = {}
        self._lock = threading.Lock()

    @property
    def registry(self) -> IndicatorRegistry:
        return self._registry

    def get_indicator(self, indicator_type: str) -> Indicator:
        """Shared instance for a type, created on first use."""
        with self._lock:
            indicator = self._instances.get(indicator_type)
            if indicator is None:
                indicator = self._registry.create(indicator_type)
                self._instances[indicator_type] = indicator
            return indicator

    def calculate(
        self,
        indicator_type: str,
        candles: Sequence[Candle],
        params: Optional[ParamMap] = None,
        strict: bool = False,
    ) -> IndicatorResult:
        """Calculate a single indicator through its cached instance."""
        indicator = self.get_indicator(indicator_type)

        if strict:
            validation = indicator.validate(indicator.resolve_params(params))
            if not validation.valid:
                raise ParameterValidationError(indicator_type, validation.errors)

        return indicator.calculate_cached(candles, params)

    async def execute(self, input_data: BatchRequest) -> BatchResponse:
        """Calculate every requested indicator, collecting per-item failures."""
        input_data = await self.validate_input(input_data)
        response = BatchResponse()
        requests = input_data.indicators

        for key, request in zip(result_keys(requests), requests):
            try:
                response.results[key] = self.calculate(
                    request.type, input_data.candles, request.params, strict=True
                )
            except UnknownIndicatorTypeError as e:
                logger.warning(f"Skipping {key}: {e}")
                response.errors.append(
                    BatchItemError(
                        key=key, type=request.type, kind=BatchErrorKind.UNKNOWN_TYPE, errors=[str(e)]
                    )
                )
            except ParameterValidationError as e:
                logger.warning(f"Invalid parameters for {key} ({request.type}): {e.errors}")
                response.errors.append(
                    BatchItemError(
                        key=key, type=request.type, kind=BatchErrorKind.VALIDATION, errors=e.errors
                    )
                )
            except Exception as e:
                # Log error but continue with other indicators
                logger.warning(f"Error calculating {key} ({request.type}): {e}")
                response.errors.append(
                    BatchItemError(
                        key=key, type=request.type, kind=BatchErrorKind.CALCULATION, errors=[str(e)]
                    )
                )

        return response

    def clear_caches(self) -> None:
        """Drop cached results of every instance."""
        with self._lock:
            for indicator in self._instances.values():
                indicator.clear_cache()

    async def health_check(self) -> bool:
        """Indicator service is always healthy (pure computation)."""
        return True


# Singleton instance
_service_instance: Optional[IndicatorService] = None


def get_indicator_service() -> IndicatorService:
    """Get or create indicator service instance."""
    global _service_instance
    if _service_instance is None:
        _service_instance = IndicatorService()
    return _service_instance


# =============================================================================
# QUICK ACCESS HELPERS
# =============================================================================


def create_indicator(indicator_type: str, **kwargs) -> Indicator:
    """Create indicator by registered type name."""
    return INDICATOR_REGISTRY.create(indicator_type, **kwargs)


def get_indicator_config(indicator_type: str) -> IndicatorConfig:
    """Get indicator configuration by type."""
    return INDICATOR_REGISTRY.get_config(indicator_type)


def validate_indicator_params(indicator_type: str, params: Optional[ParamMap]) -> ValidationResult:
    """Validate parameters exactly as given (defaults are not filled in)."""
    return INDICATOR_REGISTRY.create(indicator_type, enable_cache=False).validate(params)
