import numpy as np
import pandas as pd


def make_bars(n=390, seed=42, start="2024-01-02 09:30", tz="America/New_York"):
    """Random-walk bars with high >= low, noisy enough to trigger reversals."""
    idx = pd.date_range(start, periods=n, freq="1min", tz=tz)
    rng = np.random.default_rng(seed)
    close = 100 + rng.standard_normal(n).cumsum() / 5.0
    high = close + rng.uniform(0.02, 0.25, n)
    low = close - rng.uniform(0.02, 0.25, n)
    return pd.DataFrame(
        {
            "open": close,
            "high": high,
            "low": low,
            "close": close,
            "volume": rng.integers(50, 200, n),
        },
        index=idx,
    )
