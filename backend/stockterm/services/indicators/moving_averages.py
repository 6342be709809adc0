"""
Moving Average Indicators

SMA, EMA, WMA and DEMA overlays on a selectable price source.
"""

from typing import Callable, Optional, Sequence

import numpy as np

from stockterm.schemas.indicators import (
    IndicatorCategory,
    IndicatorConfig,
    IndicatorResult,
    OutputSpec,
    ParamSpec,
    ParamType,
)
from stockterm.schemas.market import Candle
from stockterm.services.indicators.calculations import dema, ema, sma, wma
from stockterm.services.indicators.interface import Indicator, ParamMap, source_param


def _period_param(description: str) -> ParamSpec:
    return ParamSpec(
        name="period",
        type=ParamType.NUMBER,
        default=20,
        min=1,
        max=500,
        step=1,
        description=description,
    )


def _ma_config(name: str, short_name: str, description: str, color: str, period_description: str) -> IndicatorConfig:
    return IndicatorConfig(
        name=name,
        short_name=short_name,
        category=IndicatorCategory.OVERLAY,
        description=description,
        params=[_period_param(period_description), source_param()],
        outputs=[OutputSpec(name=short_name, color=color, line_width=2)],
    )


class _MovingAverage(Indicator):
    """Single-line average of the source series."""

    _func: Callable[[np.ndarray, int], np.ndarray]

    def calculate(
        self, candles: Sequence[Candle], params: Optional[ParamMap] = None
    ) -> IndicatorResult:
        p = self.resolve_params(params)
        data = self._arrays(candles)
        values = self._func(self._source(data, p), self._int(p, "period"))
        return self._result(data, [values])


class SMA(_MovingAverage):
    _func = staticmethod(sma)

    def __init__(self, **kwargs):
        super().__init__(
            _ma_config(
                "Simple Moving Average",
                "SMA",
                "Average price over a specified number of periods",
                "#2962FF",
                "Number of periods to average",
            ),
            **kwargs,
        )


class EMA(_MovingAverage):
    _func = staticmethod(ema)

    def __init__(self, **kwargs):
        super().__init__(
            _ma_config(
                "Exponential Moving Average",
                "EMA",
                "Moving average that gives more weight to recent prices",
                "#FF6D00",
                "Number of periods",
            ),
            **kwargs,
        )


class WMA(_MovingAverage):
    _func = staticmethod(wma)

    def __init__(self, **kwargs):
        super().__init__(
            _ma_config(
                "Weighted Moving Average",
                "WMA",
                "Moving average with linear weights favoring recent data",
                "#00BCD4",
                "Number of periods",
            ),
            **kwargs,
        )


class DEMA(_MovingAverage):
    _func = staticmethod(dema)

    def __init__(self, **kwargs):
        super().__init__(
            _ma_config(
                "Double Exponential Moving Average",
                "DEMA",
                "Faster EMA with reduced lag",
                "#9C27B0",
                "Number of periods",
            ),
            **kwargs,
        )
