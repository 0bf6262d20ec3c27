"""
Pytest Fixtures
---------------
Shared resources for testing.
- sample_bars: deterministic random-walk high/low bars on a minute index.
- price_csv: the same bars written to CSV with a UTC datetime column.
- config_yaml: a minimal valid config file.
"""

from __future__ import annotations
from pathlib import Path
import pandas as pd
import pytest

from tests.utils import make_bars


@pytest.fixture
def sample_bars() -> pd.DataFrame:
    return make_bars()


@pytest.fixture
def price_csv(tmp_path: Path, sample_bars: pd.DataFrame) -> Path:
    csv = sample_bars.copy()
    csv.insert(0, "datetime", csv.index.tz_convert("UTC"))
    p = tmp_path / "bars.csv"
    csv.to_csv(p, index=False)
    return p


@pytest.fixture
def config_yaml(tmp_path: Path) -> Path:
    p = tmp_path / "base.yaml"
    p.write_text(
        """
acceleration:
  step: 0.02
  max: 0.2
data:
  tz: America/New_York
output:
  column: sar
""",
        encoding="utf-8",
    )
    return p
