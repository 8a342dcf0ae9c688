from __future__ import annotations

import json
import subprocess
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parent.parent
SCRIPT = REPO_ROOT / "scripts" / "generate_snowflake.py"


def test_cli_names_run(tmp_path: Path):
    cmd = [
        sys.executable,
        str(SCRIPT),
        "--first", "Ada",
        "--last", "Lovelace",
        "--complexity", "6",
        "--thickness", "10",
        "--runs-dir", str(tmp_path),
        "--no-dxf",
    ]
    proc = subprocess.run(cmd, capture_output=True, text=True)
    assert proc.returncode == 0, proc.stderr
    assert "Run ID:" in proc.stdout
    assert "Seed: Ada|Lovelace|6|10" in proc.stdout
    assert "snowflake_ada_lovelace_c6_t10.stl" in proc.stdout


def test_cli_explicit_seed_strokes(tmp_path: Path):
    cmd = [
        sys.executable,
        str(SCRIPT),
        "--seed", "winter",
        "--mode", "strokes",
        "--size-inches", "3",
        "--runs-dir", str(tmp_path),
        "--no-svg",
        "--no-dxf",
    ]
    proc = subprocess.run(cmd, capture_output=True, text=True)
    assert proc.returncode == 0, proc.stderr
    manifests = [p for p in tmp_path.glob("*/manifest.json") if p.parent.name != "latest"]
    assert len(manifests) == 1
    manifest = json.loads(manifests[0].read_text(encoding="utf-8"))
    assert manifest["info"]["mesh_mode"] == "strokes"
    assert manifest["info"]["diameter_mm"] == 76.2


def test_cli_rejects_unknown_mode(tmp_path: Path):
    cmd = [
        sys.executable,
        str(SCRIPT),
        "--mode", "voxels",
        "--runs-dir", str(tmp_path),
    ]
    proc = subprocess.run(cmd, capture_output=True, text=True)
    assert proc.returncode != 0
