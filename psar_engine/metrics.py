"""
SAR Summary Metrics
-------------------
Condenses a SAR state trace into run-level counts and the latest stop level.
"""

from __future__ import annotations

from typing import Any

import numpy as np
import pandas as pd


def reversal_points(states: pd.DataFrame) -> pd.DataFrame:
    """Rows where the signal flipped."""
    if states is None or states.empty or "reversal" not in states.columns:
        return pd.DataFrame(columns=getattr(states, "columns", []))
    return states[states["reversal"].astype(bool)]


def compute_summary(states: pd.DataFrame, sar_col: str = "sar") -> dict[str, Any]:
    """Summarizes a state trace from `sar_states` / `compute_sar_frame`."""
    if states is None or len(states) == 0:
        return {
            "bars": 0,
            "missing": 0,
            "long_bars": 0,
            "short_bars": 0,
            "reversals": 0,
            "longest_run": 0,
            "last_signal": 0,
            "last_sar": None,
            "last_acceleration": None,
        }

    values = pd.to_numeric(states[sar_col], errors="coerce")
    signal = (
        states["signal"].astype(int)
        if "signal" in states.columns
        else pd.Series(0, index=states.index)
    )
    observed = values.notna()
    runs = signal_runs(states)

    def _last(col: str) -> float | None:
        if col not in states.columns or not observed.any():
            return None
        v = states.loc[observed, col].iloc[-1]
        return None if pd.isna(v) else float(v)

    return {
        "bars": int(len(states)),
        "missing": int((~observed).sum()),
        "long_bars": int((signal == 1).sum()),
        "short_bars": int((signal == -1).sum()),
        "reversals": int(len(reversal_points(states))),
        "longest_run": int(runs.max()) if len(runs) else 0,
        "last_signal": int(signal[observed.to_numpy()].iloc[-1]) if observed.any() else 0,
        "last_sar": _last(sar_col),
        "last_acceleration": _last("acceleration"),
    }


def signal_runs(states: pd.DataFrame) -> pd.Series:
    """Length in bars of each uninterrupted signal run, in order."""
    if states is None or states.empty or "signal" not in states.columns:
        return pd.Series(dtype="int64")
    sig = states["signal"].astype(int).to_numpy()
    sig = sig[sig != 0]
    if sig.size == 0:
        return pd.Series(dtype="int64")
    breaks = np.flatnonzero(np.diff(sig) != 0) + 1
    bounds = np.concatenate(([0], breaks, [sig.size]))
    return pd.Series(np.diff(bounds), dtype="int64", name="run_length")
