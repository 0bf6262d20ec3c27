"""
Data IO Layer
-------------
Loading and normalization of price bars for the SAR scan.
Supports CSV/Parquet formats, timezone localization, date slicing and resampling.
"""

from __future__ import annotations
import logging
from typing import cast, Any
from pandas.api.types import DatetimeTZDtype
import pandas as pd

logger = logging.getLogger(__name__)

DT_COLS = ("ts_event", "datetime", "timestamp", "time", "date")
OHLCV_AGG = {
    "open": "first",
    "high": "max",
    "low": "min",
    "close": "last",
    "volume": "sum",
}


def load_price_df(
    path: str,
    tz: str = "America/New_York",
    high_col: str = "high",
    low_col: str = "low",
) -> pd.DataFrame:
    """Loads a price file, ensuring a tz-aware sorted index and high/low columns."""
    if path.lower().endswith(".parquet"):
        df = pd.read_parquet(path)
    else:
        df = pd.read_csv(path)

    df.columns = [str(c).strip().lower() for c in df.columns]
    high_col = high_col.lower()
    low_col = low_col.lower()

    if isinstance(df.index, pd.DatetimeIndex):
        idx = df.index
    else:
        dt_col = next((c for c in DT_COLS if c in df.columns), None)
        if dt_col is None:
            raise ValueError(
                f"load_price_df: could not find datetime column in {path!r}; "
                f"got columns={list(df.columns)}"
            )

        s = df[dt_col]

        if isinstance(s.dtype, DatetimeTZDtype):
            idx = pd.DatetimeIndex(s)
        else:
            s_str = s.astype(str)
            looks_tz = (
                s_str.str.endswith("Z").any()
                or s_str.str.contains(r"[+-]\d{2}:\d{2}$", regex=True).any()
            )
            if looks_tz:
                idx = pd.DatetimeIndex(pd.to_datetime(s, errors="coerce", utc=True))
            else:
                idx = pd.DatetimeIndex(pd.to_datetime(s, errors="coerce"))

        if bool(pd.isna(idx).any()):
            raise ValueError(
                f"load_price_df: datetime parse failed for {dt_col!r} in {path!r}"
            )

        df = df.drop(columns=[dt_col])

    if idx.tz is None:
        idx = idx.tz_localize(tz)
    else:
        idx = idx.tz_convert(tz)

    df.index = idx

    missing = {high_col, low_col} - set(df.columns)
    if missing:
        raise ValueError(
            f"load_price_df: missing required price columns {sorted(missing)} in {path!r}; "
            f"got columns={list(df.columns)}"
        )

    n_dupes = int(df.index.duplicated(keep="last").sum())
    if n_dupes:
        logger.info("load_price_df: dropped %d duplicate timestamps in %s", n_dupes, path)

    df = df[~df.index.duplicated(keep="last")].sort_index()
    return df


def slice_dates(
    df: pd.DataFrame,
    date_from: str | None,
    date_to: str | None,
    *,
    tz: str,
) -> pd.DataFrame:
    """
    Slice df by calendar date range [date_from, date_to] inclusive.
    date_from/date_to: YYYY-MM-DD or any pandas-parseable datetime strings.
    """
    if df.empty or (date_from is None and date_to is None):
        return df
    if not isinstance(df.index, pd.DatetimeIndex):
        raise TypeError("date slicing requires a DatetimeIndex")

    def _ts(s: str) -> pd.Timestamp:
        ts = pd.Timestamp(s)
        return ts.tz_localize(tz) if ts.tzinfo is None else ts.tz_convert(tz)

    start = _ts(date_from).normalize() if date_from else df.index.min()
    end = (
        _ts(date_to).normalize() + pd.Timedelta(days=1) - pd.Timedelta(nanoseconds=1)
        if date_to
        else df.index.max()
    )

    return df.loc[(df.index >= start) & (df.index <= end)]


def resample(
    df: pd.DataFrame, rule: str = "5min", extra_agg: dict[str, str] | None = None
) -> pd.DataFrame:
    """Resamples bars to a higher timeframe with 'right' labeling.

    Only the OHLCV columns present in `df` (plus any in `extra_agg`) are
    aggregated; others are dropped.
    """
    agg = {c: how for c, how in OHLCV_AGG.items() if c in df.columns}
    agg.update({c: how for c, how in (extra_agg or {}).items() if c in df.columns})
    if not agg:
        raise ValueError(
            f"resample: no OHLCV columns to aggregate; got columns={list(df.columns)}"
        )
    return cast(
        pd.DataFrame,
        df.resample(rule, label="right", closed="right")
        .agg(cast(Any, agg))
        .dropna(how="all"),
    )


def check_price_integrity(
    df: pd.DataFrame, high_col: str = "high", low_col: str = "low"
) -> int:
    """
    Logs a warning for bars where high < low and returns how many there are.
    The SAR scan assumes high >= low; this does not reject such data.
    """
    bad = df[high_col] < df[low_col]
    n_bad = int(bad.sum())
    if n_bad:
        first = df.index[bad.to_numpy()][0]
        logger.warning(
            "Data Integrity Warning: %d bars with %s < %s (first at %s)",
            n_bad,
            high_col,
            low_col,
            first,
        )
    return n_bad
