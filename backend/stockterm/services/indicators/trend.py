"""
Trend Indicators

ADX, Parabolic SAR and the Ichimoku Cloud.
"""

from typing import Optional, Sequence

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
from stockterm.services.indicators.calculations import adx, ichimoku, parabolic_sar
from stockterm.services.indicators.interface import Indicator, ParamMap


class ADX(Indicator):
    """Average Directional Index with +DI / -DI."""

    def __init__(self, **kwargs):
        super().__init__(
            IndicatorConfig(
                name="Average Directional Index",
                short_name="ADX",
                category=IndicatorCategory.OSCILLATOR,
                description="Measures trend strength regardless of direction",
                params=[
                    ParamSpec(
                        name="period", type=ParamType.NUMBER, default=14, min=2, max=100,
                        step=1, description="Smoothing period",
                    ),
                ],
                outputs=[
                    OutputSpec(name="ADX", color="#000000", line_width=2),
                    OutputSpec(name="+DI", color="#4CAF50", line_width=1, line_style=LineStyle.DASHED),
                    OutputSpec(name="-DI", color="#F44336", line_width=1, line_style=LineStyle.DASHED),
                ],
                panel=PanelOptions(
                    height=150,
                    reference_lines=[
                        # Trend strength levels
                        ReferenceLine(value=25, color="#4CAF50", style=LineStyle.DASHED),
                        ReferenceLine(value=20, color="#FFC107", style=LineStyle.DOTTED),
                    ],
                    min_value=0,
                    max_value=100,
                ),
            ),
            **kwargs,
        )

    def calculate(
        self, candles: Sequence[Candle], params: Optional[ParamMap] = None
    ) -> IndicatorResult:
        p = self.resolve_params(params)
        data = self._arrays(candles)
        adx_line, plus_di, minus_di = adx(
            data.highs, data.lows, data.closes, self._int(p, "period")
        )
        return self._result(data, [adx_line, plus_di, minus_di])


class ParabolicSAR(Indicator):
    """Parabolic stop-and-reverse; each trend flip is reported as a signal."""

    def __init__(self, **kwargs):
        super().__init__(
            IndicatorConfig(
                name="Parabolic SAR",
                short_name="PSAR",
                category=IndicatorCategory.OVERLAY,
                description="Trend-following indicator showing potential reversal points",
                params=[
                    ParamSpec(
                        name="acceleration", type=ParamType.NUMBER, default=0.02, min=0.001,
                        max=0.2, step=0.001, description="Acceleration factor",
                    ),
                    ParamSpec(
                        name="maximum", type=ParamType.NUMBER, default=0.2, min=0.01,
                        max=1, step=0.01, description="Maximum acceleration",
                    ),
                ],
                outputs=[OutputSpec(name="SAR", color="#FF5722", line_width=1)],
            ),
            **kwargs,
        )

    def calculate(
        self, candles: Sequence[Candle], params: Optional[ParamMap] = None
    ) -> IndicatorResult:
        p = self.resolve_params(params)
        data = self._arrays(candles)
        sar, flips = parabolic_sar(
            data.highs,
            data.lows,
            acceleration=float(p["acceleration"]),
            maximum=float(p["maximum"]),
        )
        return self._result(data, [sar], ResultMetadata(signals=self._signals(data, flips)))


class Ichimoku(Indicator):
    """
    Ichimoku Cloud.

    Senkou spans are projected `displacement` bars forward and the chikou
    span is the close shifted the same distance back, all within the input
    length: positions with nothing projected onto them are NaN.
    """

    def __init__(self, **kwargs):
        super().__init__(
            IndicatorConfig(
                name="Ichimoku Cloud",
                short_name="Ichimoku",
                category=IndicatorCategory.OVERLAY,
                description="Comprehensive trend indicator with support/resistance levels",
                params=[
                    ParamSpec(
                        name="conversionPeriod", type=ParamType.NUMBER, default=9, min=1,
                        max=100, step=1, description="Tenkan-sen (Conversion Line) period",
                    ),
                    ParamSpec(
                        name="basePeriod", type=ParamType.NUMBER, default=26, min=1,
                        max=100, step=1, description="Kijun-sen (Base Line) period",
                    ),
                    ParamSpec(
                        name="laggingSpan2Period", type=ParamType.NUMBER, default=52, min=1,
                        max=200, step=1, description="Senkou Span B period",
                    ),
                    ParamSpec(
                        name="displacement", type=ParamType.NUMBER, default=26, min=1,
                        max=100, step=1, description="Cloud displacement",
                    ),
                ],
                outputs=[
                    OutputSpec(name="Tenkan-sen", color="#F44336", line_width=1),
                    OutputSpec(name="Kijun-sen", color="#2196F3", line_width=1),
                    OutputSpec(name="Senkou Span A", color="#4CAF50", line_width=1, line_style=LineStyle.DASHED),
                    OutputSpec(name="Senkou Span B", color="#FF5722", line_width=1, line_style=LineStyle.DASHED),
                    OutputSpec(name="Chikou Span", color="#9C27B0", line_width=1, line_style=LineStyle.DOTTED),
                ],
            ),
            **kwargs,
        )

    def calculate(
        self, candles: Sequence[Candle], params: Optional[ParamMap] = None
    ) -> IndicatorResult:
        p = self.resolve_params(params)
        data = self._arrays(candles)
        lines = ichimoku(
            data.highs,
            data.lows,
            data.closes,
            conversion_period=self._int(p, "conversionPeriod"),
            base_period=self._int(p, "basePeriod"),
            span_b_period=self._int(p, "laggingSpan2Period"),
            displacement=self._int(p, "displacement"),
        )
        return self._result(data, lines)
