"""Run-folder protocol and file naming for exported snowflakes."""

from __future__ import annotations

import json
import os
import re
import shutil
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict

LATEST_NAME = "latest"
LATEST_MARKER = "latest_run.txt"


@dataclass
class RunPaths:
    """Locations inside one run folder; only ``artifacts_dir`` exists up front."""

    run_id: str
    run_dir: Path
    artifacts_dir: Path
    manifest_path: Path
    summary_path: Path


def slugify(value: str) -> str:
    """Lower-case ``-``-joined slug used in run ids; ``run`` when nothing is left."""
    words = re.findall(r"[a-z0-9]+", (value or "").lower())
    return "-".join(words) or "run"


def sanitize_name_part(value: str) -> str:
    """Lower-case, collapse non-alphanumerics to '_', 'anon' when empty."""
    safe = re.sub(r"[^a-z0-9]+", "_", (value or "").strip().lower())
    return safe.strip("_") or "anon"


def format_number(value: float) -> str:
    """Integral values print without a decimal point."""
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return repr(value)


def export_basename(first: str, last: str, complexity: int, thickness: float) -> str:
    """e.g. ``snowflake_ada_lovelace_c6_t10``."""
    return (
        f"snowflake_{sanitize_name_part(first)}_{sanitize_name_part(last)}"
        f"_c{int(complexity)}_t{format_number(thickness)}"
    )


def create_run_id(base_name: str) -> str:
    """UTC timestamp down to microseconds followed by the slug of *base_name*."""
    stamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S_%f")
    return f"{stamp}_{slugify(base_name)}"


def prepare_run_dir(runs_root: str, base_name: str) -> RunPaths:
    """Create ``<runs_root>/<run_id>/artifacts`` and return the run's paths.

    A run id that already exists on disk gets a numeric suffix, so two
    runs never share a folder.
    """
    root = Path(runs_root)
    run_id = create_run_id(base_name)
    run_dir = root / run_id
    suffix = 1
    while run_dir.exists():
        run_dir = root / f"{run_id}_{suffix}"
        suffix += 1

    artifacts_dir = run_dir / "artifacts"
    artifacts_dir.mkdir(parents=True)
    return RunPaths(
        run_id=run_dir.name,
        run_dir=run_dir,
        artifacts_dir=artifacts_dir,
        manifest_path=run_dir / "manifest.json",
        summary_path=run_dir / "summary.md",
    )


def write_json(path: Path, payload: Dict[str, Any]) -> None:
    """Pretty-printed UTF-8 JSON with a trailing newline."""
    write_text(path, json.dumps(payload, indent=2) + "\n")


def write_text(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def update_latest_pointer(runs_root: str, run_dir: Path) -> None:
    """Point ``<runs_root>/latest`` at *run_dir*.

    A relative symlink where the filesystem allows one, otherwise a
    ``latest`` folder holding the run folder's name in ``latest_run.txt``.
    """
    root = Path(runs_root)
    latest = root / LATEST_NAME

    if latest.is_symlink() or latest.is_file():
        latest.unlink()
    elif latest.is_dir():
        shutil.rmtree(latest)

    try:
        latest.symlink_to(os.path.relpath(run_dir, root))
    except OSError:
        latest.mkdir(parents=True, exist_ok=True)
        (latest / LATEST_MARKER).write_text(Path(run_dir).name, encoding="utf-8")
