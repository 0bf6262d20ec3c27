# Script to verify the determinism of the SAR pipeline
from __future__ import annotations

import argparse
import json
from pathlib import Path

import pandas as pd

from psar_engine.cli import main as cli_main


def read_json(p: Path) -> dict:
    return json.loads(p.read_text(encoding="utf-8"))


def df_fingerprint(df: pd.DataFrame) -> str:
    # Stable fingerprint based on values+index
    h = pd.util.hash_pandas_object(df, index=True).values
    return str(int(h.sum()))


def main() -> None:
    ap = argparse.ArgumentParser(description="Run compute twice and diff outputs")
    ap.add_argument("--config", default="configs/base.yaml")
    ap.add_argument("--data", required=True)
    ap.add_argument("--out-dir", default="outputs/determinism")
    args = ap.parse_args()

    runs = ["det_a", "det_b"]
    for run_id in runs:
        cli_main(
            [
                "compute",
                "--config",
                args.config,
                "--data",
                args.data,
                "--out-dir",
                args.out_dir,
                "--run-id",
                run_id,
                "--no-write-csv",
            ]
        )

    p1, p2 = (Path(args.out_dir) / r for r in runs)

    if read_json(p1 / "summary.json") != read_json(p2 / "summary.json"):
        raise SystemExit("FAIL: summary.json differs across identical runs")

    f1 = df_fingerprint(pd.read_parquet(p1 / "sar.parquet"))
    f2 = df_fingerprint(pd.read_parquet(p2 / "sar.parquet"))
    if f1 != f2:
        raise SystemExit("FAIL: sar.parquet differs across identical runs")

    print("PASS: deterministic", f1)


if __name__ == "__main__":
    main()
