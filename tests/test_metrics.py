"""
Tests for psar_engine.metrics
-----------------------------
Coverage:
- Summary counts on a hand-worked trace.
- Reversal extraction and run lengths.
- Empty / all-missing traces.
"""

import numpy as np
import pandas as pd
import pytest
from psar_engine.engine import sar_states
from psar_engine.metrics import compute_summary, reversal_points, signal_runs


@pytest.fixture
def flip_states():
    high = [10.0, 11.0, 9.0, 8.0, 7.0]
    low = [9.0, 10.0, 7.0, 6.0, 5.0]
    return sar_states(high, low)


def test_compute_summary(flip_states):
    s = compute_summary(flip_states)

    assert s["bars"] == 5
    assert s["missing"] == 0
    assert s["long_bars"] == 2
    assert s["short_bars"] == 3
    assert s["reversals"] == 1
    assert s["longest_run"] == 3
    assert s["last_signal"] == -1
    assert s["last_sar"] == pytest.approx(10.8)
    assert s["last_acceleration"] == pytest.approx(0.06)


def test_reversal_points(flip_states):
    rp = reversal_points(flip_states)
    assert list(rp.index) == [2]
    assert rp["sar"].iloc[0] == 11.0


def test_signal_runs(flip_states):
    assert signal_runs(flip_states).tolist() == [2, 3]


def test_summary_with_leading_missing():
    st = sar_states([np.nan, 10.0, 11.0], [np.nan, 9.0, 10.0])
    s = compute_summary(st)
    assert s["bars"] == 3
    assert s["missing"] == 1
    assert s["long_bars"] == 2


def test_summary_all_missing():
    st = sar_states([np.nan, np.nan], [np.nan, np.nan])
    s = compute_summary(st)
    assert s["missing"] == 2
    assert s["last_sar"] is None
    assert s["last_signal"] == 0
    assert s["longest_run"] == 0


def test_summary_empty():
    s = compute_summary(pd.DataFrame(columns=["sar"]))
    assert s["bars"] == 0
    assert s["last_sar"] is None


def test_summary_without_state_columns():
    df = pd.DataFrame({"psar": [1.0, 2.0, np.nan]})
    s = compute_summary(df, sar_col="psar")
    assert s["bars"] == 3
    assert s["missing"] == 1
    assert s["reversals"] == 0
    assert s["last_acceleration"] is None
