"""
Volatility Indicators

Bollinger Bands, ATR, Keltner Channels and rolling standard deviation.
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
)
from stockterm.schemas.market import Candle
from stockterm.services.indicators.calculations import (
    atr,
    bollinger_bands,
    keltner_channels,
    rolling_std,
)
from stockterm.services.indicators.interface import Indicator, ParamMap, source_param


def _band_outputs(band_color: str) -> list[OutputSpec]:
    return [
        OutputSpec(name="Upper", color=band_color, line_width=1, line_style=LineStyle.DASHED),
        OutputSpec(name="Middle", color="#FF9800", line_width=2),
        OutputSpec(name="Lower", color=band_color, line_width=1, line_style=LineStyle.DASHED),
    ]


class BollingerBands(Indicator):
    """SMA middle band with population standard deviation envelopes."""

    def __init__(self, **kwargs):
        super().__init__(
            IndicatorConfig(
                name="Bollinger Bands",
                short_name="BB",
                category=IndicatorCategory.OVERLAY,
                description="Volatility bands showing standard deviation from moving average",
                params=[
                    ParamSpec(
                        name="period", type=ParamType.NUMBER, default=20, min=2, max=200,
                        step=1, description="Moving average period",
                    ),
                    ParamSpec(
                        name="stdDev", type=ParamType.NUMBER, default=2, min=0.5, max=5,
                        step=0.1, description="Number of standard deviations",
                    ),
                    source_param(),
                ],
                outputs=_band_outputs("#2196F3"),
            ),
            **kwargs,
        )

    def calculate(
        self, candles: Sequence[Candle], params: Optional[ParamMap] = None
    ) -> IndicatorResult:
        p = self.resolve_params(params)
        data = self._arrays(candles)
        upper, middle, lower = bollinger_bands(
            self._source(data, p), self._int(p, "period"), float(p["stdDev"])
        )
        return self._result(data, [upper, middle, lower])


class ATR(Indicator):
    """Average True Range."""

    def __init__(self, **kwargs):
        super().__init__(
            IndicatorConfig(
                name="Average True Range",
                short_name="ATR",
                category=IndicatorCategory.OSCILLATOR,
                description="Volatility indicator measuring average true range",
                params=[
                    ParamSpec(
                        name="period", type=ParamType.NUMBER, default=14, min=1, max=200,
                        step=1, description="Smoothing period",
                    ),
                ],
                outputs=[OutputSpec(name="ATR", color="#FF5722", line_width=2)],
                panel=PanelOptions(height=100, min_value=0),
            ),
            **kwargs,
        )

    def calculate(
        self, candles: Sequence[Candle], params: Optional[ParamMap] = None
    ) -> IndicatorResult:
        p = self.resolve_params(params)
        data = self._arrays(candles)
        values = atr(data.highs, data.lows, data.closes, self._int(p, "period"))
        return self._result(data, [values])


class KeltnerChannels(Indicator):
    """EMA middle line with ATR-width channels."""

    def __init__(self, **kwargs):
        super().__init__(
            IndicatorConfig(
                name="Keltner Channels",
                short_name="KC",
                category=IndicatorCategory.OVERLAY,
                description="Volatility channels using EMA and ATR",
                params=[
                    ParamSpec(
                        name="period", type=ParamType.NUMBER, default=20, min=2, max=200,
                        step=1, description="EMA period",
                    ),
                    ParamSpec(
                        name="atrPeriod", type=ParamType.NUMBER, default=10, min=1, max=200,
                        step=1, description="ATR period",
                    ),
                    ParamSpec(
                        name="multiplier", type=ParamType.NUMBER, default=2, min=0.5, max=5,
                        step=0.1, description="ATR multiplier",
                    ),
                ],
                outputs=_band_outputs("#4CAF50"),
            ),
            **kwargs,
        )

    def calculate(
        self, candles: Sequence[Candle], params: Optional[ParamMap] = None
    ) -> IndicatorResult:
        p = self.resolve_params(params)
        data = self._arrays(candles)
        upper, middle, lower = keltner_channels(
            data.highs,
            data.lows,
            data.closes,
            period=self._int(p, "period"),
            atr_period=self._int(p, "atrPeriod"),
            multiplier=float(p["multiplier"]),
        )
        return self._result(data, [upper, middle, lower])


class StandardDeviation(Indicator):
    """Rolling population standard deviation."""

    def __init__(self, **kwargs):
        super().__init__(
            IndicatorConfig(
                name="Standard Deviation",
                short_name="StdDev",
                category=IndicatorCategory.OSCILLATOR,
                description="Statistical measure of volatility",
                params=[
                    ParamSpec(
                        name="period", type=ParamType.NUMBER, default=20, min=2, max=200, step=1,
                    ),
                    source_param(),
                ],
                outputs=[OutputSpec(name="StdDev", color="#9C27B0", line_width=2)],
                panel=PanelOptions(height=100, min_value=0),
            ),
            **kwargs,
        )

    def calculate(
        self, candles: Sequence[Candle], params: Optional[ParamMap] = None
    ) -> IndicatorResult:
        p = self.resolve_params(params)
        data = self._arrays(candles)
        values = rolling_std(self._source(data, p), self._int(p, "period"))
        return self._result(data, [values])
