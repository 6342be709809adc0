"""
Technical Indicator Calculations

Pure NumPy implementations of technical indicators over full series.
All math is deterministic: identical inputs give bit-identical outputs.

Conventions shared by every function here:
- output arrays are exactly as long as the input
- undefined positions (warm-up, short input) are NaN, never omitted
- NaN in the input propagates as NaN, nothing raises on bad numbers
"""

from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view

from stockterm.core.periods import AnchorPeriod, is_new_period
from stockterm.schemas.market import Candle


@dataclass
class OHLCVData:
    """OHLCV data arrays for calculations."""

    timestamps: np.ndarray
    opens: np.ndarray
    highs: np.ndarray
    lows: np.ndarray
    closes: np.ndarray
    volumes: np.ndarray

    def __len__(self) -> int:
        return len(self.closes)


def to_arrays(candles: Sequence[Candle]) -> OHLCVData:
    """Convert a candle list to float64 column arrays."""
    return OHLCVData(
        timestamps=np.array([c.timestamp_seconds() for c in candles], dtype=float),
        opens=np.array([c.open for c in candles], dtype=float),
        highs=np.array([c.high for c in candles], dtype=float),
        lows=np.array([c.low for c in candles], dtype=float),
        closes=np.array([c.close for c in candles], dtype=float),
        volumes=np.array([c.volume for c in candles], dtype=float),
    )


def extract_prices(data: OHLCVData, source: str = "close") -> np.ndarray:
    """Select a price series: open/high/low/close/hlc3/ohlc4."""
    if source == "open":
        return data.opens
    if source == "high":
        return data.highs
    if source == "low":
        return data.lows
    if source == "close":
        return data.closes
    if source == "hlc3":
        return (data.highs + data.lows + data.closes) / 3
    if source == "ohlc4":
        return (data.opens + data.highs + data.lows + data.closes) / 4
    raise ValueError(f"Unknown price source: {source}")


def typical_price(highs: np.ndarray, lows: np.ndarray, closes: np.ndarray) -> np.ndarray:
    return (highs + lows + closes) / 3


def _nan_array(n: int) -> np.ndarray:
    return np.full(n, np.nan)


def _first_valid_index(data: np.ndarray) -> Optional[int]:
    valid = np.flatnonzero(~np.isnan(data))
    return int(valid[0]) if len(valid) > 0 else None


def _windows(data: np.ndarray, period: int) -> Optional[np.ndarray]:
    """Trailing windows ending at indices period-1..n-1, or None if too short."""
    if period < 1 or len(data) < period:
        return None
    return sliding_window_view(data, period)


def rolling_max(data: np.ndarray, period: int) -> np.ndarray:
    result = _nan_array(len(data))
    windows = _windows(data, period)
    if windows is not None:
        result[period - 1 :] = windows.max(axis=1)
    return result


def rolling_min(data: np.ndarray, period: int) -> np.ndarray:
    result = _nan_array(len(data))
    windows = _windows(data, period)
    if windows is not None:
        result[period - 1 :] = windows.min(axis=1)
    return result


def rolling_std(data: np.ndarray, period: int) -> np.ndarray:
    """Population standard deviation over a trailing window."""
    result = _nan_array(len(data))
    windows = _windows(data, period)
    if windows is not None:
        means = windows.mean(axis=1)
        result[period - 1 :] = np.sqrt(np.mean((windows - means[:, None]) ** 2, axis=1))
    return result


def wilder_smooth(values: np.ndarray, period: int, start: int = 0) -> np.ndarray:
    """
    Wilder's smoothed average.

    Seed is the plain mean of values[start:start+period], placed at
    start+period-1; afterwards avg[i] = (avg[i-1]*(period-1) + values[i]) / period.
    """
    n = len(values)
    result = _nan_array(n)
    seed_end = start + period
    if period < 1 or n < seed_end:
        return result

    result[seed_end - 1] = np.mean(values[start:seed_end])
    for i in range(seed_end, n):
        result[i] = (result[i - 1] * (period - 1) + values[i]) / period
    return result


def wilder_sum(values: np.ndarray, period: int, start: int = 0) -> np.ndarray:
    """Wilder's running sum: s[i] = s[i-1] - s[i-1]/period + values[i]."""
    n = len(values)
    result = _nan_array(n)
    seed_end = start + period
    if period < 1 or n < seed_end:
        return result

    result[seed_end - 1] = np.sum(values[start:seed_end])
    for i in range(seed_end, n):
        result[i] = result[i - 1] - result[i - 1] / period + values[i]
    return result


def get_last_valid(arr: np.ndarray) -> Optional[float]:
    """Get last non-NaN value from array."""
    valid = arr[~np.isnan(arr)]
    return float(valid[-1]) if len(valid) > 0 else None


def true_range(highs: np.ndarray, lows: np.ndarray, closes: np.ndarray) -> np.ndarray:
    """TR = max(high-low, |high-prevClose|, |low-prevClose|); TR[0] = high-low."""
    tr = highs - lows
    if len(tr) > 1:
        prev_close = closes[:-1]
        tr[1:] = np.maximum.reduce(
            [
                highs[1:] - lows[1:],
                np.abs(highs[1:] - prev_close),
                np.abs(lows[1:] - prev_close),
            ]
        )
    return tr


# =============================================================================
# MOVING AVERAGES
# =============================================================================


def sma(data: np.ndarray, period: int) -> np.ndarray:
    """Simple Moving Average."""
    result = _nan_array(len(data))
    windows = _windows(data, period)
    if windows is not None:
        result[period - 1 :] = windows.mean(axis=1)
    return result


def ema(data: np.ndarray, period: int) -> np.ndarray:
    """
    Exponential Moving Average.

    Seeded with the SMA of the first `period` defined values, so an input
    with a NaN warm-up (e.g. a MACD line) yields its own warm-up plus
    period-1.
    """
    n = len(data)
    result = _nan_array(n)
    if period < 1:
        return result

    start = _first_valid_index(data)
    if start is None or n - start < period:
        return result

    multiplier = 2 / (period + 1)
    seed_end = start + period

    # Start with SMA
    result[seed_end - 1] = np.mean(data[start:seed_end])

    for i in range(seed_end, n):
        result[i] = (data[i] - result[i - 1]) * multiplier + result[i - 1]

    return result


def wma(data: np.ndarray, period: int) -> np.ndarray:
    """Weighted Moving Average (most recent bar weight = period)."""
    result = _nan_array(len(data))
    windows = _windows(data, period)
    if windows is not None:
        weights = np.arange(1, period + 1, dtype=float)
        result[period - 1 :] = windows @ weights / np.sum(weights)
    return result


def dema(data: np.ndarray, period: int) -> np.ndarray:
    """Double Exponential Moving Average: 2*EMA - EMA(EMA)."""
    ema1 = ema(data, period)
    ema2 = ema(ema1, period)
    return 2 * ema1 - ema2


# =============================================================================
# MOMENTUM INDICATORS
# =============================================================================


def rsi(closes: np.ndarray, period: int = 14) -> np.ndarray:
    """Relative Strength Index with Wilder smoothing."""
    n = len(closes)
    if period < 1 or n < period + 1:
        return _nan_array(n)

    # Calculate price changes; index 0 has no change
    deltas = np.zeros(n)
    deltas[1:] = np.diff(closes)

    # Separate gains and losses, keeping NaN where the change is undefined
    gains = np.where(deltas > 0, deltas, 0.0)
    losses = np.where(deltas < 0, -deltas, 0.0)
    undefined = np.isnan(deltas)
    gains[undefined] = np.nan
    losses[undefined] = np.nan

    avg_gain = wilder_smooth(gains, period, start=1)
    avg_loss = wilder_smooth(losses, period, start=1)

    with np.errstate(divide="ignore", invalid="ignore"):
        rs = avg_gain / avg_loss
        result = np.where(avg_loss == 0, 100.0, 100 - (100 / (1 + rs)))

    return result


def stochastic(
    highs: np.ndarray,
    lows: np.ndarray,
    closes: np.ndarray,
    k_period: int = 14,
    d_period: int = 3,
    smooth: int = 3,
) -> tuple[np.ndarray, np.ndarray]:
    """
    Stochastic Oscillator.

    Returns: (k, d) where k is the smoothed %K and d = SMA(k, d_period).
    A flat high/low range maps to 50.
    """
    highest_high = rolling_max(highs, k_period)
    lowest_low = rolling_min(lows, k_period)
    price_range = highest_high - lowest_low

    with np.errstate(divide="ignore", invalid="ignore"):
        raw_k = np.where(
            price_range == 0, 50.0, ((closes - lowest_low) / price_range) * 100
        )

    k = sma(raw_k, smooth)
    d = sma(k, d_period)

    return k, d


def cci(
    highs: np.ndarray, lows: np.ndarray, closes: np.ndarray, period: int = 20
) -> np.ndarray:
    """Commodity Channel Index. Zero mean deviation maps to 0."""
    tp = typical_price(highs, lows, closes)
    result = _nan_array(len(tp))
    windows = _windows(tp, period)
    if windows is None:
        return result

    tp_sma = windows.mean(axis=1)
    mean_dev = np.mean(np.abs(windows - tp_sma[:, None]), axis=1)

    with np.errstate(divide="ignore", invalid="ignore"):
        result[period - 1 :] = np.where(
            mean_dev == 0, 0.0, (tp[period - 1 :] - tp_sma) / (0.015 * mean_dev)
        )
    return result


def williams_r(
    highs: np.ndarray, lows: np.ndarray, closes: np.ndarray, period: int = 14
) -> np.ndarray:
    """Williams %R. A flat range maps to -50."""
    highest_high = rolling_max(highs, period)
    lowest_low = rolling_min(lows, period)
    price_range = highest_high - lowest_low

    with np.errstate(divide="ignore", invalid="ignore"):
        return np.where(
            price_range == 0, -50.0, ((highest_high - closes) / price_range) * -100
        )


def mfi(
    highs: np.ndarray,
    lows: np.ndarray,
    closes: np.ndarray,
    volumes: np.ndarray,
    period: int = 14,
) -> np.ndarray:
    """
    Money Flow Index.

    No negative flow in the window maps to 100, no flow at all maps to 50.
    """
    n = len(closes)
    result = _nan_array(n)
    if period < 1 or n < period + 1:
        return result

    tp = typical_price(highs, lows, closes)
    raw_money_flow = tp * volumes

    # Positive and negative money flow; index 0 has no previous bar
    pos_flow = np.zeros(n)
    neg_flow = np.zeros(n)
    pos_flow[1:] = np.where(tp[1:] > tp[:-1], raw_money_flow[1:], 0.0)
    neg_flow[1:] = np.where(tp[1:] < tp[:-1], raw_money_flow[1:], 0.0)
    undefined = np.zeros(n, dtype=bool)
    undefined[1:] = np.isnan(tp[1:]) | np.isnan(tp[:-1]) | np.isnan(raw_money_flow[1:])
    pos_flow[undefined] = np.nan
    neg_flow[undefined] = np.nan

    pos_sum = sliding_window_view(pos_flow[1:], period).sum(axis=1)
    neg_sum = sliding_window_view(neg_flow[1:], period).sum(axis=1)

    with np.errstate(divide="ignore", invalid="ignore"):
        money_ratio = pos_sum / neg_sum
        values = np.where(
            neg_sum == 0,
            np.where(pos_sum == 0, 50.0, 100.0),
            100 - (100 / (1 + money_ratio)),
        )

    result[period:] = values
    return result


# =============================================================================
# MACD
# =============================================================================


def macd(
    closes: np.ndarray,
    fast_period: int = 12,
    slow_period: int = 26,
    signal_period: int = 9,
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    MACD (Moving Average Convergence Divergence).

    Returns: (macd_line, signal_line, histogram)
    """
    fast_ema = ema(closes, fast_period)
    slow_ema = ema(closes, slow_period)

    macd_line = fast_ema - slow_ema

    # Signal line is EMA of MACD line, seeded once the MACD line is defined
    signal_line = ema(macd_line, signal_period)

    histogram = macd_line - signal_line

    return macd_line, signal_line, histogram


# =============================================================================
# VOLATILITY INDICATORS
# =============================================================================


def atr(
    highs: np.ndarray, lows: np.ndarray, closes: np.ndarray, period: int = 14
) -> np.ndarray:
    """Average True Range (Wilder-smoothed)."""
    if len(closes) == 0:
        return _nan_array(0)
    return wilder_smooth(true_range(highs, lows, closes), period)


def bollinger_bands(
    closes: np.ndarray, period: int = 20, std_dev: float = 2.0
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Bollinger Bands.

    Returns: (upper, middle, lower)
    """
    middle = sma(closes, period)
    std = _nan_array(len(closes))
    windows = _windows(closes, period)
    if windows is not None:
        std[period - 1 :] = np.sqrt(
            np.mean((windows - middle[period - 1 :, None]) ** 2, axis=1)
        )

    upper = middle + (std_dev * std)
    lower = middle - (std_dev * std)

    return upper, middle, lower


def keltner_channels(
    highs: np.ndarray,
    lows: np.ndarray,
    closes: np.ndarray,
    period: int = 20,
    atr_period: int = 10,
    multiplier: float = 2.0,
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Keltner Channels: EMA middle line, bands at +/- multiplier * ATR.

    Returns: (upper, middle, lower)
    """
    middle = ema(closes, period)
    atr_values = atr(highs, lows, closes, atr_period)

    upper = middle + multiplier * atr_values
    lower = middle - multiplier * atr_values

    return upper, middle, lower


# =============================================================================
# TREND INDICATORS
# =============================================================================


def adx(
    highs: np.ndarray, lows: np.ndarray, closes: np.ndarray, period: int = 14
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Average Directional Index.

    +DI/-DI are defined from index `period`, ADX from 2*period-1.

    Returns: (adx, plus_di, minus_di)
    """
    n = len(closes)
    if period < 1 or n < period + 1:
        return _nan_array(n), _nan_array(n), _nan_array(n)

    # Calculate +DM and -DM
    plus_dm = np.zeros(n)
    minus_dm = np.zeros(n)
    up_move = highs[1:] - highs[:-1]
    down_move = lows[:-1] - lows[1:]
    plus_dm[1:] = np.where((up_move > down_move) & (up_move > 0), up_move, 0.0)
    minus_dm[1:] = np.where((down_move > up_move) & (down_move > 0), down_move, 0.0)
    undefined = np.zeros(n, dtype=bool)
    undefined[1:] = np.isnan(up_move) | np.isnan(down_move)
    plus_dm[undefined] = np.nan
    minus_dm[undefined] = np.nan

    tr = true_range(highs, lows, closes)

    # Smooth the values; bar 0 has no directional movement
    smoothed_plus_dm = wilder_sum(plus_dm, period, start=1)
    smoothed_minus_dm = wilder_sum(minus_dm, period, start=1)
    smoothed_tr = wilder_sum(tr, period, start=1)

    # +DI and -DI
    with np.errstate(divide="ignore", invalid="ignore"):
        plus_di = np.where(smoothed_tr > 0, 100 * smoothed_plus_dm / smoothed_tr, 0.0)
        minus_di = np.where(smoothed_tr > 0, 100 * smoothed_minus_dm / smoothed_tr, 0.0)
    plus_di[np.isnan(smoothed_tr)] = np.nan
    minus_di[np.isnan(smoothed_tr)] = np.nan

    # DX
    di_sum = plus_di + minus_di
    with np.errstate(divide="ignore", invalid="ignore"):
        dx = np.where(di_sum > 0, 100 * np.abs(plus_di - minus_di) / di_sum, 0.0)
    dx[np.isnan(di_sum)] = np.nan

    # ADX is Wilder-smoothed DX
    adx_result = wilder_smooth(dx, period, start=period)

    return adx_result, plus_di, minus_di


def parabolic_sar(
    highs: np.ndarray,
    lows: np.ndarray,
    acceleration: float = 0.02,
    maximum: float = 0.2,
) -> tuple[np.ndarray, list[tuple[int, str]]]:
    """
    Parabolic SAR.

    Returns: (sar, flips) where flips lists (index, "buy" | "sell") for every
    trend reversal. Bar 0 only seeds the state and is NaN.
    A bar with a non-finite high or low is NaN and leaves the trend state
    untouched, so the SAR resumes from the last good bar.
    """
    n = len(highs)
    result = _nan_array(n)
    flips: list[tuple[int, str]] = []
    if n < 2:
        return result, flips

    is_long = highs[1] > highs[0]
    sar = lows[0] if is_long else highs[0]
    ep = highs[0] if is_long else lows[0]  # extreme point
    af = acceleration

    for i in range(1, n):
        if not (np.isfinite(highs[i]) and np.isfinite(lows[i])):
            continue

        sar = sar + af * (ep - sar)

        if is_long:
            if lows[i] < sar:
                # Reverse to short: SAR jumps to the prior extreme
                is_long = False
                sar = ep
                ep = lows[i]
                af = acceleration
                flips.append((i, "sell"))
            else:
                if highs[i] > ep:
                    ep = highs[i]
                    af = min(af + acceleration, maximum)
                # SAR may not rise above the last two lows
                sar = min(sar, lows[i - 1])
                if i > 1:
                    sar = min(sar, lows[i - 2])
        else:
            if highs[i] > sar:
                is_long = True
                sar = ep
                ep = highs[i]
                af = acceleration
                flips.append((i, "buy"))
            else:
                if lows[i] < ep:
                    ep = lows[i]
                    af = min(af + acceleration, maximum)
                # SAR may not fall below the last two highs
                sar = max(sar, highs[i - 1])
                if i > 1:
                    sar = max(sar, highs[i - 2])

        result[i] = sar

    return result, flips


def _midpoint(highs: np.ndarray, lows: np.ndarray, period: int) -> np.ndarray:
    return (rolling_max(highs, period) + rolling_min(lows, period)) / 2


def _shift(data: np.ndarray, offset: int) -> np.ndarray:
    """Shift forward (offset > 0) or backward (offset < 0), padding with NaN."""
    n = len(data)
    result = _nan_array(n)
    if offset >= n or -offset >= n:
        return result
    if offset >= 0:
        result[offset:] = data[: n - offset]
    else:
        result[: n + offset] = data[-offset:]
    return result


def ichimoku(
    highs: np.ndarray,
    lows: np.ndarray,
    closes: np.ndarray,
    conversion_period: int = 9,
    base_period: int = 26,
    span_b_period: int = 52,
    displacement: int = 26,
) -> tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
    """
    Ichimoku Cloud.

    Returns: (tenkan, kijun, senkou_a, senkou_b, chikou). Both senkou spans
    are projected forward by `displacement`; chikou is the close shifted
    back by `displacement`.
    """
    tenkan = _midpoint(highs, lows, conversion_period)
    kijun = _midpoint(highs, lows, base_period)
    senkou_a = _shift((tenkan + kijun) / 2, displacement)
    senkou_b = _shift(_midpoint(highs, lows, span_b_period), displacement)
    chikou = _shift(closes, -displacement)

    return tenkan, kijun, senkou_a, senkou_b, chikou


# =============================================================================
# VOLUME INDICATORS
# =============================================================================


def obv(closes: np.ndarray, volumes: np.ndarray) -> np.ndarray:
    """On-Balance Volume, starting from the first bar's volume."""
    n = len(closes)
    if n == 0:
        return _nan_array(0)

    # +volume on up-close, -volume on down-close, 0 on flat
    direction = np.sign(np.diff(closes))
    flow = np.empty(n)
    flow[0] = volumes[0]
    flow[1:] = direction * volumes[1:]

    return np.cumsum(flow)


def vwap(
    highs: np.ndarray,
    lows: np.ndarray,
    closes: np.ndarray,
    volumes: np.ndarray,
    timestamps: np.ndarray,
    anchor: AnchorPeriod = AnchorPeriod.DAY,
    tz=None,
) -> np.ndarray:
    """
    Volume Weighted Average Price, reset at each new anchor period.

    A bar with no accumulated volume reports its typical price.
    """
    n = len(closes)
    tp = typical_price(highs, lows, closes)
    result = _nan_array(n)
    anchor = AnchorPeriod(anchor)

    cumulative_tpv = 0.0
    cumulative_volume = 0.0
    for i in range(n):
        if i > 0 and anchor != AnchorPeriod.SESSION:
            if is_new_period(timestamps[i - 1], timestamps[i], anchor, tz):
                cumulative_tpv = 0.0
                cumulative_volume = 0.0

        cumulative_tpv += tp[i] * volumes[i]
        cumulative_volume += volumes[i]

        if cumulative_volume > 0:
            result[i] = cumulative_tpv / cumulative_volume
        elif cumulative_volume == 0:
            result[i] = tp[i]
        # NaN volume leaves NaN

    return result


@dataclass
class VolumeProfileData:
    """Histogram of traded volume by close price."""

    bin_volumes: np.ndarray
    bar_bins: np.ndarray  # bin index per bar, -1 where undefined
    min_price: float
    max_price: float
    bin_size: float
    poc_index: int
    value_area: tuple[int, int]  # inclusive bin range

    def bin_bounds(self, index: int) -> tuple[float, float]:
        low = self.min_price + index * self.bin_size
        return low, low + self.bin_size

    @property
    def poc_price(self) -> float:
        return self.min_price + (self.poc_index + 0.5) * self.bin_size

    @property
    def poc_volume(self) -> float:
        return float(self.bin_volumes[self.poc_index])


def _value_area(bin_volumes: np.ndarray, poc_index: int, share: float) -> tuple[int, int]:
    """Grow outward from the POC, taking the heavier neighbour, until `share` of volume."""
    total = float(np.sum(bin_volumes))
    low = high = poc_index
    if total <= 0:
        return low, high

    covered = float(bin_volumes[poc_index])
    while covered / total < share and (low > 0 or high < len(bin_volumes) - 1):
        below = bin_volumes[low - 1] if low > 0 else -1.0
        above = bin_volumes[high + 1] if high < len(bin_volumes) - 1 else -1.0
        if above >= below:
            high += 1
            covered += float(above)
        else:
            low -= 1
            covered += float(below)
    return low, high


def volume_profile(
    highs: np.ndarray,
    lows: np.ndarray,
    closes: np.ndarray,
    volumes: np.ndarray,
    bins: int = 24,
    value_area_share: float = 0.7,
) -> Optional[VolumeProfileData]:
    """
    Distribute each bar's volume into a price bin chosen by its close.

    Price range spans the lowest low to the highest high. Returns None when
    there is no finite price range to bin over.
    """
    if len(closes) == 0 or bins < 1:
        return None

    finite_lows = lows[np.isfinite(lows)]
    finite_highs = highs[np.isfinite(highs)]
    if len(finite_lows) == 0 or len(finite_highs) == 0:
        return None

    min_price = float(np.min(finite_lows))
    max_price = float(np.max(finite_highs))
    bin_size = (max_price - min_price) / bins

    bin_volumes = np.zeros(bins)
    bar_bins = np.full(len(closes), -1, dtype=int)

    for i in range(len(closes)):
        price = closes[i]
        if not np.isfinite(price) or not np.isfinite(volumes[i]):
            continue
        if bin_size > 0:
            index = int(np.floor((price - min_price) / bin_size))
            index = min(max(index, 0), bins - 1)
        else:
            index = 0
        bin_volumes[index] += volumes[i]
        bar_bins[i] = index

    # Point of control: first bin holding the maximum volume
    poc_index = int(np.argmax(bin_volumes))

    return VolumeProfileData(
        bin_volumes=bin_volumes,
        bar_bins=bar_bins,
        min_price=min_price,
        max_price=max_price,
        bin_size=bin_size,
        poc_index=poc_index,
        value_area=_value_area(bin_volumes, poc_index, value_area_share),
    )


def accumulation_distribution(
    highs: np.ndarray, lows: np.ndarray, closes: np.ndarray, volumes: np.ndarray
) -> np.ndarray:
    """Accumulation/Distribution line. A zero range contributes nothing."""
    price_range = highs - lows
    with np.errstate(divide="ignore", invalid="ignore"):
        multiplier = np.where(
            price_range == 0, 0.0, ((closes - lows) - (highs - closes)) / price_range
        )
    return np.cumsum(multiplier * volumes)
