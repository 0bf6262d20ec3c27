"""
Script: Synthetic Price Generator
Purpose: Creates deterministic high/low bar files for trying the SAR CLI.

Description:
    Random walk whose drift flips sign every `--regime-bars` bars, so the SAR
    sees sustained trends as well as reversals. Optionally blanks the first
    `--lead-missing` bars to exercise leading-missing handling.

Usage:
    python scripts/make_synth_parquet.py --out data/sample/synth.parquet --bars 2000
"""

from __future__ import annotations
import argparse
from pathlib import Path
import numpy as np
import pandas as pd


def make_synth_bars(
    start: str,
    n_bars: int,
    tz: str,
    seed: int,
    regime_bars: int = 120,
    lead_missing: int = 0,
) -> pd.DataFrame:
    rng = np.random.default_rng(seed)
    idx = pd.date_range(pd.Timestamp(start, tz=tz), periods=n_bars, freq="1min")

    sign = np.where((np.arange(n_bars) // regime_bars) % 2 == 0, 1.0, -1.0)
    close = 100.0 + np.cumsum(sign * 0.02 + rng.normal(0, 0.05, size=n_bars))
    open_ = np.r_[close[0], close[:-1]]
    high = np.maximum(open_, close) + rng.uniform(0.01, 0.05, size=n_bars)
    low = np.minimum(open_, close) - rng.uniform(0.01, 0.05, size=n_bars)

    high[:lead_missing] = np.nan
    low[:lead_missing] = np.nan

    return pd.DataFrame(
        {
            "timestamp": idx.tz_convert("UTC"),
            "open": open_,
            "high": high,
            "low": low,
            "close": close,
            "volume": rng.integers(50, 200, size=n_bars),
        }
    )


def main() -> None:
    ap = argparse.ArgumentParser()
    ap.add_argument("--out", required=True, help="Output parquet path")
    ap.add_argument("--start", default="2025-01-06 09:30")
    ap.add_argument("--bars", type=int, default=2000)
    ap.add_argument("--regime-bars", type=int, default=120)
    ap.add_argument("--lead-missing", type=int, default=0)
    ap.add_argument("--tz", default="America/New_York")
    ap.add_argument("--seed", type=int, default=123)
    args = ap.parse_args()

    out = Path(args.out).expanduser().resolve()
    out.parent.mkdir(parents=True, exist_ok=True)

    df = make_synth_bars(
        args.start,
        args.bars,
        args.tz,
        args.seed,
        regime_bars=args.regime_bars,
        lead_missing=args.lead_missing,
    )
    df.to_parquet(out, index=False)
    print(str(out))


if __name__ == "__main__":
    main()
