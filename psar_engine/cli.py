"""
PSAR CLI

Glue layer: config -> data -> SAR scan -> outputs.
"""

from __future__ import annotations

import argparse
import json
import logging
import pandas as pd

from dataclasses import asdict, is_dataclass
from datetime import datetime
from pathlib import Path
from typing import Any
from .config import AccelerationConfig, Config, load_config
from .data_io import check_price_integrity, load_price_df, resample, slice_dates
from .features import compute_sar_frame
from .metrics import compute_summary
from .run_meta import build_run_meta, write_run_meta

logger = logging.getLogger(__name__)


# -----------------------------
# Helpers
# -----------------------------
def _now_run_id() -> str:
    return datetime.now().strftime("%Y%m%d_%H%M%S")


def _json_default(x: Any) -> Any:
    if is_dataclass(x) and not isinstance(x, type):
        return asdict(x)
    return str(x)


def _write_json(path: Path, obj: Any) -> None:
    path.write_text(json.dumps(obj, indent=2, default=_json_default), encoding="utf-8")


def _print_compact_json(obj: Any) -> None:
    print(json.dumps(obj, default=_json_default, separators=(",", ":")))


def _apply_overrides(
    cfg: Config,
    *,
    step: float | None,
    max_af: float | None,
    rule: str | None,
) -> Config:
    """Command-line values win over the config file."""
    if step is not None or max_af is not None:
        cfg.acceleration = AccelerationConfig(
            step=cfg.acceleration.step if step is None else step,
            max=cfg.acceleration.max if max_af is None else max_af,
        )
    if rule is not None:
        cfg.data.resample = rule
    return cfg


# -----------------------------
# Pipeline
# -----------------------------
def build_sar_frame(
    cfg: Config,
    data_path: str,
    *,
    date_from: str | None = None,
    date_to: str | None = None,
) -> pd.DataFrame:
    # 1) Load + date slice (loader lower-cases column names)
    cfg.data.high_col = cfg.data.high_col.lower()
    cfg.data.low_col = cfg.data.low_col.lower()
    df = load_price_df(
        data_path,
        tz=cfg.data.tz,
        high_col=cfg.data.high_col,
        low_col=cfg.data.low_col,
    )
    df = slice_dates(df, date_from, date_to, tz=cfg.data.tz)

    # 2) Optional higher timeframe
    if cfg.data.resample:
        df = resample(
            df,
            rule=cfg.data.resample,
            extra_agg={cfg.data.high_col: "max", cfg.data.low_col: "min"},
        )
        # empty buckets (e.g. overnight) still carry volume=0
        df = df.dropna(subset=[cfg.data.high_col, cfg.data.low_col])
        logger.info("resampled to %s: %d bars", cfg.data.resample, len(df))

    check_price_integrity(df, cfg.data.high_col, cfg.data.low_col)

    # 3) SAR scan
    return compute_sar_frame(df, cfg)


# -----------------------------
# Commands
# -----------------------------
def cmd_compute(
    config_path: str,
    data_path: str,
    *,
    out_dir: str = "outputs/sar",
    run_id: str | None = None,
    date_from: str | None = None,
    date_to: str | None = None,
    step: float | None = None,
    max_af: float | None = None,
    rule: str | None = None,
    write_csv: bool = True,
    hash_data: bool = False,
    argv: list[str] | None = None,
) -> dict[str, Any]:
    cfg = load_config(config_path)
    cfg = _apply_overrides(cfg, step=step, max_af=max_af, rule=rule)

    frame = build_sar_frame(cfg, data_path, date_from=date_from, date_to=date_to)
    summary = compute_summary(frame, sar_col=cfg.output.column)

    run_id = run_id or _now_run_id()
    root = Path(out_dir) / run_id
    root.mkdir(parents=True, exist_ok=True)

    # artifacts
    artifacts: dict[str, Path] = {}
    _write_json(root / "summary.json", summary)
    artifacts["summary.json"] = root / "summary.json"

    frame.to_parquet(root / "sar.parquet", index=True)
    artifacts["sar.parquet"] = root / "sar.parquet"

    if write_csv:
        frame.to_csv(root / "sar.csv", index=True, index_label="datetime")
        artifacts["sar.csv"] = root / "sar.csv"

    meta = build_run_meta(
        cmd="compute",
        argv=argv or [],
        run_id=run_id,
        outputs_dir=root,
        config_path=config_path,
        config_obj=cfg,
        data_path=data_path,
        hash_data=hash_data,
        artifacts=artifacts,
    )
    meta.update(
        {
            "date_from": date_from,
            "date_to": date_to,
            "write_csv": write_csv,
        }
    )
    write_run_meta(root, meta)

    result = {"run_id": run_id, "artifacts_dir": str(root), **summary}
    _print_compact_json(result)
    return result


def _add_compute_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--config", required=True)
    p.add_argument("--data", required=True)
    p.add_argument("--from", dest="date_from", default=None)
    p.add_argument("--to", dest="date_to", default=None)
    p.add_argument("--out-dir", default="outputs/sar")
    p.add_argument("--run-id", default=None)
    p.add_argument("--step", type=float, default=None, help="Override acceleration step.")
    p.add_argument(
        "--max", dest="max_af", type=float, default=None, help="Override acceleration max."
    )
    p.add_argument(
        "--resample",
        dest="rule",
        default=None,
        help="Resample bars before the scan (pandas offset alias, e.g. 5min).",
    )
    p.add_argument("--write-csv", action=argparse.BooleanOptionalAction, default=True)
    p.add_argument(
        "--hash-data",
        action="store_true",
        help="Compute SHA256 of data file (can be slow for large files).",
    )


def main(argv: list[str] | None = None) -> None:
    p = argparse.ArgumentParser(description="Parabolic SAR CLI")
    p.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    sub = p.add_subparsers(dest="cmd", required=True)

    _add_compute_args(sub.add_parser("compute", help="Compute SAR for a price file"))
    _add_compute_args(sub.add_parser("run-sar", help="Alias for compute"))

    args = p.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    argv_list = list(argv) if argv is not None else []

    if args.cmd in ("compute", "run-sar"):
        cmd_compute(
            args.config,
            args.data,
            out_dir=args.out_dir,
            run_id=args.run_id,
            date_from=args.date_from,
            date_to=args.date_to,
            step=args.step,
            max_af=args.max_af,
            rule=args.rule,
            write_csv=bool(args.write_csv),
            hash_data=bool(args.hash_data),
            argv=argv_list,
        )


if __name__ == "__main__":
    main()
