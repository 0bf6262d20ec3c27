"""
SAR Engine
----------
Single forward scan over a high/low series producing the Parabolic SAR.

State (signal, extreme point, acceleration, previous SAR) is seeded from the
first fully observed bar and folded through the remaining bars. Each bar
depends on the one before it, so nothing here can be vectorised or reordered.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Sequence, Union

import numpy as np
import pandas as pd

from .config import AccelerationConfig
from .errors import InvalidInput

logger = logging.getLogger(__name__)

PriceInput = Union[Sequence[float], np.ndarray, pd.Series]

STATE_COLS = ["sar", "signal", "extreme_point", "acceleration", "reversal"]


class Signal(Enum):
    """Trend direction. Values match the +1/-1 direction columns in frames."""

    LONG = 1
    SHORT = -1


@dataclass
class EngineState:
    """Running state carried from one bar to the next."""

    signal: Signal
    extreme_point: float
    acceleration: float
    sar: float


def _to_float_array(x: PriceInput, name: str) -> np.ndarray:
    """Normalizes list/array/Series input to float64, with NaN for missing."""
    if isinstance(x, pd.DataFrame):
        raise InvalidInput(f"{name} must be one-dimensional, got a DataFrame")
    if isinstance(x, pd.Series):
        s = x
    else:
        arr = np.asarray(x)
        if arr.ndim != 1:
            raise InvalidInput(
                f"{name} must be one-dimensional, got shape {arr.shape}"
            )
        s = pd.Series(arr)

    try:
        num = pd.to_numeric(s, errors="raise")
    except (TypeError, ValueError) as exc:
        raise InvalidInput(f"{name} contains non-numeric values") from exc

    return num.to_numpy(dtype="float64", na_value=np.nan)


def _first_observed(h: np.ndarray, lo: np.ndarray) -> int | None:
    """
    Index of the first bar with both high and low present.
    Missing values are only allowed before that bar.
    """
    missing = np.isnan(h) | np.isnan(lo)
    observed = np.flatnonzero(~missing)
    if observed.size == 0:
        return None

    beg = int(observed[0])
    gaps = np.flatnonzero(missing[beg:])
    if gaps.size:
        raise InvalidInput(
            f"high/low missing at index {beg + int(gaps[0])} after first observed "
            f"bar {beg}; only leading missing values are supported"
        )
    return beg


def _seed(hi: float, lo: float, accel: AccelerationConfig) -> EngineState:
    # no prior bar, so the spread of high/low around their midpoint is the gap
    mid = (hi + lo) / 2.0
    gap = math.sqrt((hi - mid) ** 2 + (lo - mid) ** 2)
    return EngineState(
        signal=Signal.LONG,
        extreme_point=hi,
        acceleration=accel.step,
        sar=lo - gap,
    )


def _advance(
    state: EngineState,
    accel: AccelerationConfig,
    hi_prev: float,
    lo_prev: float,
    hi: float,
    lo: float,
) -> tuple[EngineState, bool]:
    """Applies one bar of the recurrence. Returns the new state and a reversal flag."""
    local_min = min(lo_prev, lo)
    local_max = max(hi_prev, hi)
    prev_sar = state.sar
    xp = state.extreme_point
    af = state.acceleration

    # extreme point follows the previous signal, even on a reversal bar
    if state.signal is Signal.LONG:
        signal = Signal.LONG if lo > prev_sar else Signal.SHORT
        extreme = max(local_max, xp)
    else:
        signal = Signal.SHORT if hi < prev_sar else Signal.LONG
        extreme = min(local_min, xp)

    if signal is not state.signal:
        return EngineState(signal, extreme, accel.step, extreme), True

    value = prev_sar + (xp - prev_sar) * af
    bumped = min(af + accel.step, accel.max)

    if signal is Signal.LONG:
        if extreme > xp:
            af = bumped
        value = min(value, local_min)
    else:
        if extreme < xp:
            af = bumped
        value = max(value, local_max)

    return EngineState(signal, extreme, af, value), False


def sar_states(
    high: PriceInput,
    low: PriceInput,
    step: float = 0.02,
    max: float = 0.2,
) -> pd.DataFrame:
    """
    Runs the SAR scan and returns the per-bar state trace.

    Columns:
        sar, extreme_point, acceleration: floats, NaN on leading missing bars.
        signal: +1 (long) / -1 (short), 0 on leading missing bars.
        reversal: True on bars where the signal flipped.

    The frame uses the index of `high` when it is a Series, else a RangeIndex.
    `high` and `low` are aligned by position.

    Raises:
        InvalidConfig: step <= 0 or max <= step.
        InvalidInput: length mismatch, empty or non-numeric input, or a
            missing value after the first observed bar.
    """
    accel = AccelerationConfig(step=step, max=max)

    h = _to_float_array(high, "high")
    lo = _to_float_array(low, "low")
    if len(h) != len(lo):
        raise InvalidInput(
            f"high and low must have equal length, got {len(h)} and {len(lo)}"
        )
    n = len(h)
    if n == 0:
        raise InvalidInput("high/low must contain at least one bar")

    index = high.index if isinstance(high, pd.Series) else pd.RangeIndex(n)

    out_sar = np.full(n, np.nan)
    out_xp = np.full(n, np.nan)
    out_af = np.full(n, np.nan)
    out_sig = np.zeros(n, dtype="int8")
    out_rev = np.zeros(n, dtype=bool)

    beg = _first_observed(h, lo)
    if beg is None:
        logger.debug("SAR: all %d bars missing high/low, output is all NaN", n)
    else:
        if beg:
            logger.debug("SAR: skipped %d leading bars with missing high/low", beg)

        hs = h.tolist()
        ls = lo.tolist()

        state = _seed(hs[beg], ls[beg], accel)
        out_sar[beg] = state.sar
        out_xp[beg] = state.extreme_point
        out_af[beg] = state.acceleration
        out_sig[beg] = state.signal.value

        for i in range(beg + 1, n):
            state, flipped = _advance(state, accel, hs[i - 1], ls[i - 1], hs[i], ls[i])
            out_sar[i] = state.sar
            out_xp[i] = state.extreme_point
            out_af[i] = state.acceleration
            out_sig[i] = state.signal.value
            out_rev[i] = flipped

    return pd.DataFrame(
        {
            "sar": out_sar,
            "signal": out_sig,
            "extreme_point": out_xp,
            "acceleration": out_af,
            "reversal": out_rev,
        },
        index=index,
        columns=STATE_COLS,
    )


def sar(
    high: PriceInput,
    low: PriceInput,
    step: float = 0.02,
    max: float = 0.2,
) -> np.ndarray | pd.Series:
    """
    Parabolic SAR, one value per input bar.

    Returns a Series named "sar" on the `high` index when `high` is a Series,
    otherwise a float64 numpy array. Leading bars with missing high or low map
    to NaN. Infinite values in the interior are not guarded against and give
    unspecified results.
    """
    states = sar_states(high, low, step=step, max=max)
    if isinstance(high, pd.Series):
        return states["sar"]
    return states["sar"].to_numpy()
