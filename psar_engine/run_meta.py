"""
Run Metadata
------------
Records where a SAR run came from: git revision, environment, config and data
fingerprints, and hashes of the written artifacts.
"""

from __future__ import annotations

import datetime
import hashlib
import json
import platform
import subprocess
import sys
from dataclasses import asdict, is_dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional


def stable_json_dumps(obj: Any) -> str:
    """Sorted, compact JSON used for hashing."""
    return json.dumps(obj, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def sha256_text(text: str) -> str:
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def sha256_file(path: str | Path, *, chunk_size: int = 1024 * 1024) -> str:
    """SHA256 of a file, read in chunks."""
    h = hashlib.sha256()
    with Path(path).open("rb") as f:
        for chunk in iter(lambda: f.read(chunk_size), b""):
            h.update(chunk)
    return h.hexdigest()


def _git(*args: str) -> Optional[str]:
    try:
        out = subprocess.check_output(["git", *args], stderr=subprocess.DEVNULL)
    except (OSError, subprocess.CalledProcessError):
        return None
    return out.decode("utf-8").strip()


def _file_info(path: Path, *, with_hash: bool) -> Dict[str, Any]:
    stat = path.stat()
    info: Dict[str, Any] = {
        "bytes": stat.st_size,
        "mtime_utc": datetime.datetime.fromtimestamp(
            stat.st_mtime, tz=datetime.timezone.utc
        ).isoformat(),
    }
    if with_hash:
        info["sha256"] = sha256_file(path)
    return info


def build_run_meta(
    *,
    cmd: str,
    argv: list[str],
    run_id: str,
    outputs_dir: str | Path,
    config_path: Optional[str] = None,
    config_obj: Optional[Any] = None,
    data_path: Optional[str] = None,
    hash_data: bool = False,
    artifacts: Optional[Mapping[str, str | Path]] = None,
) -> Dict[str, Any]:
    """Constructs a metadata dictionary for the current execution context."""
    meta: Dict[str, Any] = {
        "cmd": cmd,
        "run_id": run_id,
        "argv": argv,
        "outputs_dir": str(Path(outputs_dir)),
        "timestamp_utc": datetime.datetime.now(datetime.timezone.utc).isoformat(
            timespec="seconds"
        ),
        "git_sha": _git("rev-parse", "HEAD"),
        "git_describe": _git("describe", "--tags", "--always"),
        "env": {
            "python": sys.version.split()[0],
            "platform": platform.platform(),
        },
    }

    if config_path:
        meta["config_path"] = config_path
        meta["config_sha256"] = sha256_file(config_path)

    if config_obj is not None:
        if not is_dataclass(config_obj) or isinstance(config_obj, type):
            raise TypeError("config_obj must be a dataclass instance")
        cfg_dict = asdict(config_obj)
        meta["config_dump"] = cfg_dict
        meta["config_dump_sha256"] = sha256_text(stable_json_dumps(cfg_dict))

    if data_path:
        meta["data_path"] = data_path
        p = Path(data_path)
        if p.is_file():
            info = _file_info(p, with_hash=hash_data)
            meta["data_size_bytes"] = info["bytes"]
            meta["data_mtime_utc"] = info["mtime_utc"]
            if hash_data:
                meta["data_sha256"] = info["sha256"]
        else:
            meta["data_size_bytes"] = None
            meta["data_mtime_utc"] = None

    if artifacts:
        meta["artifacts"] = {
            name: {
                "bytes": Path(p).stat().st_size,
                "sha256": sha256_file(p),
            }
            for name, p in sorted(artifacts.items())
        }

    return meta


def write_run_meta(outputs_dir: str | Path, meta: Dict[str, Any]) -> Path:
    """Writes the metadata dictionary to run_meta.json in the output directory."""
    out_dir = Path(outputs_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    path = out_dir / "run_meta.json"
    path.write_text(json.dumps(meta, indent=2), encoding="utf-8")
    return path
