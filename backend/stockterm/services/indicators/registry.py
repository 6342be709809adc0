"""Indicator registry and factory."""

import logging
import threading
from typing import Callable, Optional

from stockterm.schemas.indicators import IndicatorCategory, IndicatorConfig
from stockterm.services.base import UnknownIndicatorTypeError
from stockterm.services.indicators.interface import Indicator
from stockterm.services.indicators.macd import MACD, MACDHistogram
from stockterm.services.indicators.momentum import CCI, RSI, Stochastic, WilliamsR
from stockterm.services.indicators.moving_averages import DEMA, EMA, SMA, WMA
from stockterm.services.indicators.trend import ADX, Ichimoku, ParabolicSAR
from stockterm.services.indicators.volatility import (
    ATR,
    BollingerBands,
    KeltnerChannels,
    StandardDeviation,
)
from stockterm.services.indicators.volume import AD, MFI, OBV, VWAP, VolumeProfile

logger = logging.getLogger(__name__)

# Anything callable with cache keyword arguments that returns an Indicator
IndicatorFactory = Callable[..., Indicator]

BUILTIN_INDICATORS: dict[str, IndicatorFactory] = {
    # Moving averages
    "SMA": SMA,
    "EMA": EMA,
    "WMA": WMA,
    "DEMA": DEMA,
    # Momentum
    "RSI": RSI,
    "Stochastic": Stochastic,
    "CCI": CCI,
    "Williams%R": WilliamsR,
    # MACD
    "MACD": MACD,
    "MACDHistogram": MACDHistogram,
    # Volatility
    "BollingerBands": BollingerBands,
    "ATR": ATR,
    "KeltnerChannels": KeltnerChannels,
    "StandardDeviation": StandardDeviation,
    # Volume
    "OBV": OBV,
    "VWAP": VWAP,
    "VolumeProfile": VolumeProfile,
    "MFI": MFI,
    "AD": AD,
    # Trend
    "ADX": ADX,
    "ParabolicSAR": ParabolicSAR,
    "Ichimoku": Ichimoku,
}


class IndicatorRegistry:
    """Central registry of indicator types.

    Maps a type name to a factory. Registration is guarded by a lock so
    callers may extend the registry at runtime from any thread.
    """

    def __init__(self, factories: Optional[dict[str, IndicatorFactory]] = None):
        self._factories: dict[str, IndicatorFactory] = dict(factories or {})
        self._configs: dict[str, IndicatorConfig] = {}
        self._lock = threading.RLock()

    def register(self, indicator_type: str, factory: IndicatorFactory) -> None:
        """Register (or replace) an indicator type."""
        with self._lock:
            if indicator_type in self._factories:
                logger.warning(f"Overwriting existing indicator: {indicator_type}")
            self._factories[indicator_type] = factory
            self._configs.pop(indicator_type, None)
        logger.debug(f"Registered indicator: {indicator_type}")

    def unregister(self, indicator_type: str) -> bool:
        """Remove a type. Returns False if it was not registered."""
        with self._lock:
            removed = self._factories.pop(indicator_type, None) is not None
            self._configs.pop(indicator_type, None)
        if removed:
            logger.debug(f"Unregistered indicator: {indicator_type}")
        return removed

    def create(self, indicator_type: str, **kwargs) -> Indicator:
        """Create a new indicator instance.

        Args:
            indicator_type: Registered type name (e.g. "SMA", "Williams%R")
            **kwargs: Passed to the factory (enable_cache, cache_max_size, ...)

        Raises:
            UnknownIndicatorTypeError: If the type is not registered
        """
        with self._lock:
            factory = self._factories.get(indicator_type)
        if factory is None:
            raise UnknownIndicatorTypeError(indicator_type, self.list_types())
        return factory(**kwargs)

    def has(self, indicator_type: str) -> bool:
        with self._lock:
            return indicator_type in self._factories

    def list_types(self) -> list[str]:
        """Registered type names, in registration order."""
        with self._lock:
            return list(self._factories)

    def get_config(self, indicator_type: str) -> IndicatorConfig:
        """Descriptor of a type, built once and reused."""
        with self._lock:
            config = self._configs.get(indicator_type)
            if config is None:
                config = self.create(indicator_type).get_config()
                self._configs[indicator_type] = config
            return config

    def list_all(self) -> list[tuple[str, IndicatorConfig]]:
        """(type, config) pairs for every registered type."""
        with self._lock:
            return [(t, self.get_config(t)) for t in list(self._factories)]

    def list_by_category(self, category: IndicatorCategory) -> list[str]:
        category = IndicatorCategory(category)
        return [t for t, config in self.list_all() if config.category == category]

    def __contains__(self, indicator_type: str) -> bool:
        return self.has(indicator_type)

    def __len__(self) -> int:
        with self._lock:
            return len(self._factories)


# Global registry instance
INDICATOR_REGISTRY = IndicatorRegistry(BUILTIN_INDICATORS)
