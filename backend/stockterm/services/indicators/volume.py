"""
Volume Indicators

OBV, VWAP, Volume Profile, MFI and Accumulation/Distribution.
"""

from typing import Optional, Sequence

import numpy as np

from stockterm.core.periods import AnchorPeriod, get_market_tz
from stockterm.schemas.indicators import (
    IndicatorCategory,
    IndicatorConfig,
    IndicatorResult,
    OutputSpec,
    PanelOptions,
    ParamOption,
    ParamSpec,
    ParamType,
    ResultMetadata,
    VolumeProfileLevel,
)
from stockterm.schemas.market import Candle
from stockterm.services.indicators.calculations import (
    accumulation_distribution,
    mfi,
    obv,
    volume_profile,
    vwap,
)
from stockterm.services.indicators.interface import Indicator, ParamMap
from stockterm.services.indicators.momentum import threshold_panel


class OBV(Indicator):
    """On-Balance Volume."""

    def __init__(self, **kwargs):
        super().__init__(
            IndicatorConfig(
                name="On-Balance Volume",
                short_name="OBV",
                category=IndicatorCategory.OSCILLATOR,
                description="Cumulative volume indicator measuring buying and selling pressure",
                outputs=[OutputSpec(name="OBV", color="#3F51B5", line_width=2)],
                panel=PanelOptions(height=120),
            ),
            **kwargs,
        )

    def calculate(
        self, candles: Sequence[Candle], params: Optional[ParamMap] = None
    ) -> IndicatorResult:
        data = self._arrays(candles)
        return self._result(data, [obv(data.closes, data.volumes)])


class VWAP(Indicator):
    """Volume Weighted Average Price, reset per anchor period in the market timezone."""

    def __init__(self, **kwargs):
        super().__init__(
            IndicatorConfig(
                name="Volume Weighted Average Price",
                short_name="VWAP",
                category=IndicatorCategory.OVERLAY,
                description="Average price weighted by volume throughout the day",
                params=[
                    ParamSpec(
                        name="anchor",
                        type=ParamType.ENUM,
                        default=AnchorPeriod.DAY.value,
                        options=[
                            ParamOption(label="Day", value=AnchorPeriod.DAY.value),
                            ParamOption(label="Week", value=AnchorPeriod.WEEK.value),
                            ParamOption(label="Month", value=AnchorPeriod.MONTH.value),
                            ParamOption(label="Session", value=AnchorPeriod.SESSION.value),
                        ],
                        description="Reset period for VWAP calculation",
                    ),
                ],
                outputs=[OutputSpec(name="VWAP", color="#FF9800", line_width=2)],
            ),
            **kwargs,
        )

    def calculate(
        self, candles: Sequence[Candle], params: Optional[ParamMap] = None
    ) -> IndicatorResult:
        p = self.resolve_params(params)
        data = self._arrays(candles)
        values = vwap(
            data.highs,
            data.lows,
            data.closes,
            data.volumes,
            data.timestamps,
            anchor=AnchorPeriod(p["anchor"]),
            tz=get_market_tz(),
        )
        return self._result(data, [values])


class VolumeProfile(Indicator):
    """
    Volume distribution across price levels.

    values[0][i] is the volume of the bin holding bar i's close; the full
    histogram is in metadata.profile.
    """

    def __init__(self, **kwargs):
        super().__init__(
            IndicatorConfig(
                name="Volume Profile",
                short_name="VP",
                category=IndicatorCategory.VOLUME,
                description="Volume distribution across price levels",
                params=[
                    ParamSpec(
                        name="bins", type=ParamType.NUMBER, default=24, min=10, max=100,
                        step=1, description="Number of price levels",
                    ),
                    ParamSpec(
                        name="showPOC", type=ParamType.BOOLEAN, default=True,
                        description="Show Point of Control (highest volume price)",
                    ),
                ],
                outputs=[OutputSpec(name="Volume Profile", color="#2196F3", line_width=1)],
            ),
            **kwargs,
        )

    def calculate(
        self, candles: Sequence[Candle], params: Optional[ParamMap] = None
    ) -> IndicatorResult:
        p = self.resolve_params(params)
        data = self._arrays(candles)
        profile = volume_profile(
            data.highs, data.lows, data.closes, data.volumes, bins=self._int(p, "bins")
        )

        values = np.full(len(data), np.nan)
        if profile is None:
            return self._result(data, [values])

        assigned = profile.bar_bins >= 0
        values[assigned] = profile.bin_volumes[profile.bar_bins[assigned]]

        show_poc = bool(p["showPOC"])
        va_low, va_high = profile.value_area
        levels = []
        for i, volume in enumerate(profile.bin_volumes):
            price_low, price_high = profile.bin_bounds(i)
            levels.append(
                VolumeProfileLevel(
                    price_low=price_low,
                    price_high=price_high,
                    price=(price_low + price_high) / 2,
                    volume=float(volume),
                    is_poc=show_poc and i == profile.poc_index,
                    is_value_area=va_low <= i <= va_high,
                )
            )

        metadata = ResultMetadata(
            min_price=profile.min_price,
            max_price=profile.max_price,
            bin_size=profile.bin_size,
            poc_price=profile.poc_price if show_poc else None,
            poc_volume=profile.poc_volume if show_poc else None,
            profile=levels,
        )
        return self._result(data, [values], metadata)


class MFI(Indicator):
    """Money Flow Index (volume-weighted RSI)."""

    def __init__(self, **kwargs):
        super().__init__(
            IndicatorConfig(
                name="Money Flow Index",
                short_name="MFI",
                category=IndicatorCategory.OSCILLATOR,
                description="Volume-weighted momentum indicator (RSI with volume)",
                params=[
                    ParamSpec(
                        name="period", type=ParamType.NUMBER, default=14, min=2, max=100, step=1,
                    ),
                ],
                outputs=[OutputSpec(name="MFI", color="#00BCD4", line_width=2)],
                panel=threshold_panel(80, 50, 20, 0, 100),
            ),
            **kwargs,
        )

    def calculate(
        self, candles: Sequence[Candle], params: Optional[ParamMap] = None
    ) -> IndicatorResult:
        p = self.resolve_params(params)
        data = self._arrays(candles)
        values = mfi(data.highs, data.lows, data.closes, data.volumes, self._int(p, "period"))
        return self._result(data, [values], ResultMetadata(overbought=80, oversold=20))


class AD(Indicator):
    """Accumulation/Distribution line."""

    def __init__(self, **kwargs):
        super().__init__(
            IndicatorConfig(
                name="Accumulation/Distribution",
                short_name="A/D",
                category=IndicatorCategory.OSCILLATOR,
                description="Cumulative indicator measuring money flow",
                outputs=[OutputSpec(name="A/D", color="#673AB7", line_width=2)],
                panel=PanelOptions(height=120),
            ),
            **kwargs,
        )

    def calculate(
        self, candles: Sequence[Candle], params: Optional[ParamMap] = None
    ) -> IndicatorResult:
        data = self._arrays(candles)
        values = accumulation_distribution(data.highs, data.lows, data.closes, data.volumes)
        return self._result(data, [values])
