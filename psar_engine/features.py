"""
Frame Features
--------------
Attaches the SAR state trace to a price DataFrame using the configured
columns, acceleration settings and output naming.
"""

from __future__ import annotations
import pandas as pd

from .config import Config
from .engine import sar_states


def compute_sar_frame(df: pd.DataFrame, cfg: Config | None = None) -> pd.DataFrame:
    """Returns a copy of `df` with SAR (and optionally state) columns joined on."""
    cfg = cfg or Config()
    high_col, low_col = cfg.data.high_col, cfg.data.low_col

    missing = {high_col, low_col} - set(df.columns)
    if missing:
        raise KeyError(f"Missing columns for SAR calc: {sorted(missing)}")

    states = sar_states(
        df[high_col],
        df[low_col],
        step=cfg.acceleration.step,
        max=cfg.acceleration.max,
    )
    states = states.rename(columns={"sar": cfg.output.column})
    if not cfg.output.include_state:
        states = states[[cfg.output.column]]

    out = df.copy()
    for col in states.columns:
        out[col] = states[col].to_numpy()
    return out
