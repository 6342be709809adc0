"""
Momentum Oscillators

RSI, Stochastic, CCI and Williams %R. Each reports its overbought/oversold
thresholds in the result metadata.
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
from stockterm.services.indicators.calculations import cci, rsi, stochastic, williams_r
from stockterm.services.indicators.interface import Indicator, ParamMap, source_param

OVERBOUGHT_COLOR = "#EF5350"
NEUTRAL_COLOR = "#9E9E9E"
OVERSOLD_COLOR = "#66BB6A"


def threshold_panel(
    upper: float,
    middle: float,
    lower: float,
    min_value: Optional[float] = None,
    max_value: Optional[float] = None,
    middle_style: LineStyle = LineStyle.DOTTED,
) -> PanelOptions:
    """Oscillator panel with overbought / midline / oversold guides."""
    return PanelOptions(
        height=150,
        reference_lines=[
            ReferenceLine(value=upper, color=OVERBOUGHT_COLOR, style=LineStyle.DASHED),
            ReferenceLine(value=middle, color=NEUTRAL_COLOR, style=middle_style),
            ReferenceLine(value=lower, color=OVERSOLD_COLOR, style=LineStyle.DASHED),
        ],
        min_value=min_value,
        max_value=max_value,
    )


def _period(default: int, min_value: int, max_value: int, description: Optional[str] = None) -> ParamSpec:
    return ParamSpec(
        name="period",
        type=ParamType.NUMBER,
        default=default,
        min=min_value,
        max=max_value,
        step=1,
        description=description,
    )


class RSI(Indicator):
    """Relative Strength Index."""

    def __init__(self, **kwargs):
        super().__init__(
            IndicatorConfig(
                name="Relative Strength Index",
                short_name="RSI",
                category=IndicatorCategory.OSCILLATOR,
                description="Momentum oscillator measuring overbought/oversold conditions",
                params=[
                    _period(14, 2, 100, "Number of periods for RSI calculation"),
                    ParamSpec(
                        name="overbought",
                        type=ParamType.NUMBER,
                        default=70,
                        min=50,
                        max=90,
                        step=1,
                        description="Overbought threshold",
                    ),
                    ParamSpec(
                        name="oversold",
                        type=ParamType.NUMBER,
                        default=30,
                        min=10,
                        max=50,
                        step=1,
                        description="Oversold threshold",
                    ),
                    source_param(),
                ],
                outputs=[OutputSpec(name="RSI", color="#7E57C2", line_width=2)],
                panel=threshold_panel(70, 50, 30, 0, 100),
            ),
            **kwargs,
        )

    def calculate(
        self, candles: Sequence[Candle], params: Optional[ParamMap] = None
    ) -> IndicatorResult:
        p = self.resolve_params(params)
        data = self._arrays(candles)
        values = rsi(self._source(data, p), self._int(p, "period"))
        return self._result(
            data,
            [values],
            ResultMetadata(overbought=float(p["overbought"]), oversold=float(p["oversold"])),
        )


class Stochastic(Indicator):
    """Stochastic Oscillator (%K smoothed, %D signal)."""

    def __init__(self, **kwargs):
        super().__init__(
            IndicatorConfig(
                name="Stochastic Oscillator",
                short_name="Stoch",
                category=IndicatorCategory.OSCILLATOR,
                description="Momentum indicator comparing close to price range",
                params=[
                    ParamSpec(
                        name="kPeriod", type=ParamType.NUMBER, default=14, min=1, max=100,
                        step=1, description="%K period (fast stochastic)",
                    ),
                    ParamSpec(
                        name="dPeriod", type=ParamType.NUMBER, default=3, min=1, max=100,
                        step=1, description="%D period (signal line)",
                    ),
                    ParamSpec(
                        name="smooth", type=ParamType.NUMBER, default=3, min=1, max=100,
                        step=1, description="Smoothing period",
                    ),
                ],
                outputs=[
                    OutputSpec(name="%K", color="#2196F3", line_width=2),
                    OutputSpec(name="%D", color="#FF5722", line_width=2),
                ],
                panel=threshold_panel(80, 50, 20, 0, 100),
            ),
            **kwargs,
        )

    def calculate(
        self, candles: Sequence[Candle], params: Optional[ParamMap] = None
    ) -> IndicatorResult:
        p = self.resolve_params(params)
        data = self._arrays(candles)
        k, d = stochastic(
            data.highs,
            data.lows,
            data.closes,
            k_period=self._int(p, "kPeriod"),
            d_period=self._int(p, "dPeriod"),
            smooth=self._int(p, "smooth"),
        )
        return self._result(data, [k, d], ResultMetadata(overbought=80, oversold=20))


class CCI(Indicator):
    """Commodity Channel Index."""

    def __init__(self, **kwargs):
        super().__init__(
            IndicatorConfig(
                name="Commodity Channel Index",
                short_name="CCI",
                category=IndicatorCategory.OSCILLATOR,
                description="Identifies cyclical trends in price",
                params=[_period(20, 1, 200)],
                outputs=[OutputSpec(name="CCI", color="#FF9800", line_width=2)],
                panel=threshold_panel(100, 0, -100, middle_style=LineStyle.SOLID),
            ),
            **kwargs,
        )

    def calculate(
        self, candles: Sequence[Candle], params: Optional[ParamMap] = None
    ) -> IndicatorResult:
        p = self.resolve_params(params)
        data = self._arrays(candles)
        values = cci(data.highs, data.lows, data.closes, self._int(p, "period"))
        return self._result(data, [values], ResultMetadata(overbought=100, oversold=-100))


class WilliamsR(Indicator):
    """Williams %R, ranging from -100 to 0."""

    def __init__(self, **kwargs):
        super().__init__(
            IndicatorConfig(
                name="Williams %R",
                short_name="%R",
                category=IndicatorCategory.OSCILLATOR,
                description="Momentum oscillator measuring overbought/oversold levels",
                params=[_period(14, 1, 100)],
                outputs=[OutputSpec(name="%R", color="#4CAF50", line_width=2)],
                panel=threshold_panel(-20, -50, -80, -100, 0),
            ),
            **kwargs,
        )

    def calculate(
        self, candles: Sequence[Candle], params: Optional[ParamMap] = None
    ) -> IndicatorResult:
        p = self.resolve_params(params)
        data = self._arrays(candles)
        values = williams_r(data.highs, data.lows, data.closes, self._int(p, "period"))
        return self._result(data, [values], ResultMetadata(overbought=-20, oversold=-80))
