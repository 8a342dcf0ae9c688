#!/usr/bin/env python3
"""
Generate a printable snowflake from a name or seed text.

Usage:
    # Seed text built from names: "Ada|Lovelace|6|10"
    python scripts/generate_snowflake.py --first Ada --last Lovelace --complexity 6 --thickness 10

    # Explicit seed text, stroke-prism mesh, 3 inch diameter
    python scripts/generate_snowflake.py --seed "winter" --mode strokes --size-inches 3

Artifacts (STL, SVG preview, DXF outline, manifest.json, summary.md) are
written to a fresh folder under --runs-dir.
"""
import sys
import argparse
import logging
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from geometry_primitives import DEFAULT_SIZE_INCHES, SnowflakeParams
from pipeline import (
    MESH_MODES,
    PipelineConfig,
    SnowflakeConfig,
    compose_seed_text,
    run_pipeline,
)
from run_protocol import export_basename


def main():
    parser = argparse.ArgumentParser(
        description="Generate a deterministic six-fold snowflake mesh"
    )

    parser.add_argument("--first", type=str, default="Ada", help="First name (default: Ada)")
    parser.add_argument("--last", type=str, default="Lovelace", help="Last name (default: Lovelace)")
    parser.add_argument(
        "--seed", type=str, default=None,
        help="Explicit seed text; overrides the name-based seed",
    )
    parser.add_argument(
        "--complexity", type=int, default=6, help="Detail level 1-10 (default: 6)"
    )
    parser.add_argument(
        "--thickness", type=float, default=10.0, help="Stroke thickness 2-20 (default: 10)"
    )
    parser.add_argument(
        "--size-inches", type=float, default=DEFAULT_SIZE_INCHES,
        help=f"Target diameter in inches (default: {DEFAULT_SIZE_INCHES:.3f})",
    )
    parser.add_argument(
        "--mode", type=str, default="outline", choices=list(MESH_MODES),
        help="Mesh construction (default: outline)",
    )
    parser.add_argument(
        "--mirror-wedge", action="store_true",
        help="Mirror the wedge across its axis before replication",
    )
    parser.add_argument("--runs-dir", type=str, default="runs", help="Output root (default: runs)")
    parser.add_argument("--no-svg", action="store_true", help="Skip the SVG preview")
    parser.add_argument("--no-dxf", action="store_true", help="Skip the DXF outline")
    parser.add_argument("-v", "--verbose", action="store_true")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.seed is not None:
        seed_text = args.seed
    else:
        seed_text = compose_seed_text(args.first, args.last, args.complexity, args.thickness)

    params = SnowflakeParams(
        seed=seed_text,
        complexity=args.complexity,
        thickness=args.thickness,
        size_inches=args.size_inches,
    )
    safe = params.clamped()
    name = None
    if args.seed is None:
        name = export_basename(args.first, args.last, safe.complexity, safe.thickness)

    config = PipelineConfig(
        runs_dir=args.runs_dir,
        export_svg=not args.no_svg,
        export_dxf=not args.no_dxf,
        snowflake=SnowflakeConfig(mesh_mode=args.mode, mirror_wedge=args.mirror_wedge),
    )
    result = run_pipeline(params, name=name, config=config)
    info = result.snowflake.info()

    print(f"Run ID: {result.run_id}")
    print(f"Seed: {info['seed_text']}")
    print(f"Estimated diameter: {info['diameter_mm']:.1f} mm")
    print(f"Estimated depth: {info['depth_mm']:.1f} mm")
    print(f"Triangle count: {info['triangle_count']}")
    if info["outline_fallback"]:
        print("Warning: outline extraction fell back to a circle")
    print(f"STL: {result.stl_path}")


if __name__ == "__main__":
    main()
