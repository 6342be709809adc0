"""
MACD Indicators

Full MACD (line, signal, histogram) and a histogram-only variant. Both report
MACD/signal crossovers as buy/sell signals.
"""

from typing import Optional, Sequence

import numpy as np

from stockterm.schemas.indicators import (
    IndicatorCategory,
    IndicatorConfig,
    IndicatorResult,
    LineStyle,
    OutputSpec,
    PanelOptions,
    ParamSpec,
    ParamType,
    ReferenceLine,
    ResultMetadata,
)
from stockterm.schemas.market import Candle
from stockterm.services.indicators.calculations import OHLCVData, macd
from stockterm.services.indicators.interface import Indicator, ParamMap, source_param
from stockterm.services.indicators.signals import CrossoverKind, detect_crossovers


def _macd_params() -> list[ParamSpec]:
    return [
        ParamSpec(
            name="fastPeriod", type=ParamType.NUMBER, default=12, min=2, max=100,
            step=1, description="Fast EMA period",
        ),
        ParamSpec(
            name="slowPeriod", type=ParamType.NUMBER, default=26, min=2, max=200,
            step=1, description="Slow EMA period",
        ),
        ParamSpec(
            name="signalPeriod", type=ParamType.NUMBER, default=9, min=2, max=100,
            step=1, description="Signal line EMA period",
        ),
        source_param(),
    ]


def _zero_line_panel(height: int) -> PanelOptions:
    return PanelOptions(
        height=height,
        reference_lines=[ReferenceLine(value=0, color="#9E9E9E", style=LineStyle.SOLID)],
    )


class _MACDBase(Indicator):
    def _compute(
        self, candles: Sequence[Candle], params: Optional[ParamMap]
    ) -> tuple[OHLCVData, tuple[np.ndarray, np.ndarray, np.ndarray], ResultMetadata]:
        p = self.resolve_params(params)
        data = self._arrays(candles)
        lines = macd(
            self._source(data, p),
            fast_period=self._int(p, "fastPeriod"),
            slow_period=self._int(p, "slowPeriod"),
            signal_period=self._int(p, "signalPeriod"),
        )
        macd_line, signal_line, _ = lines

        # Crossovers of MACD over its signal line
        events = [(i, "buy") for i in detect_crossovers(macd_line, signal_line, CrossoverKind.BULLISH)]
        events += [(i, "sell") for i in detect_crossovers(macd_line, signal_line, CrossoverKind.BEARISH)]
        events.sort()

        return data, lines, ResultMetadata(signals=self._signals(data, events))


class MACD(_MACDBase):
    """Moving Average Convergence Divergence."""

    def __init__(self, **kwargs):
        super().__init__(
            IndicatorConfig(
                name="Moving Average Convergence Divergence",
                short_name="MACD",
                category=IndicatorCategory.OSCILLATOR,
                description="Trend-following momentum indicator showing relationship between two EMAs",
                params=_macd_params(),
                outputs=[
                    OutputSpec(name="MACD", color="#2196F3", line_width=2),
                    OutputSpec(name="Signal", color="#FF5722", line_width=2, line_style=LineStyle.DASHED),
                    OutputSpec(name="Histogram", color="#9E9E9E", line_width=1),
                ],
                panel=_zero_line_panel(150),
            ),
            **kwargs,
        )

    def calculate(
        self, candles: Sequence[Candle], params: Optional[ParamMap] = None
    ) -> IndicatorResult:
        data, lines, metadata = self._compute(candles, params)
        return self._result(data, lines, metadata)


class MACDHistogram(_MACDBase):
    """MACD histogram only, for a cleaner momentum panel."""

    def __init__(self, **kwargs):
        super().__init__(
            IndicatorConfig(
                name="MACD Histogram",
                short_name="MACD Hist",
                category=IndicatorCategory.OSCILLATOR,
                description="MACD histogram showing momentum strength",
                params=_macd_params(),
                outputs=[OutputSpec(name="Histogram", color="#4CAF50", line_width=3)],
                panel=_zero_line_panel(100),
            ),
            **kwargs,
        )

    def calculate(
        self, candles: Sequence[Candle], params: Optional[ParamMap] = None
    ) -> IndicatorResult:
        data, (_, _, histogram), metadata = self._compute(candles, params)
        return self._result(data, [histogram], metadata)
