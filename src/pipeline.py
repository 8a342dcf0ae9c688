"""Snowflake pipeline: parameters -> skeleton -> outline -> mesh -> run artifacts."""

from __future__ import annotations

import logging
import time
from dataclasses import asdict, dataclass, field, replace
from typing import Any, Dict, List, Optional

import numpy as np
import trimesh

from contour_extraction import OutlineConfig, OutlineResult, extract_outline
from dxf_exporter import DXFExportConfig, outline_to_dxf
from extrusion import ReliefConfig, build_outline_mesh
from geometry_primitives import (
    Point2,
    Segment,
    SnowflakeParams,
    clamp_complexity,
    clamp_thickness,
)
from normalize import NormalizeConfig, normalize_mesh, planar_diameter
from run_protocol import (
    format_number,
    prepare_run_dir,
    sanitize_name_part,
    update_latest_pointer,
    write_json,
    write_text,
)
from sdf_field import stroke_radius_mm
from seeded_rng import SeededRandom, seed_from_string
from skeleton import SkeletonConfig, build_wedge
from stl_exporter import export_stl
from stroke_mesh import StrokeConfig, build_stroke_mesh
from svg_exporter import segments_to_svg
from symmetry import replicate_wedge

logger = logging.getLogger(__name__)

MESH_MODES = ("outline", "strokes")


@dataclass
class SnowflakeConfig:
    skeleton: SkeletonConfig = field(default_factory=SkeletonConfig)
    outline: OutlineConfig = field(default_factory=OutlineConfig)
    relief: ReliefConfig = field(default_factory=ReliefConfig)
    strokes: StrokeConfig = field(default_factory=StrokeConfig)
    normalize: NormalizeConfig = field(default_factory=NormalizeConfig)
    mirror_wedge: bool = False
    mesh_mode: str = "outline"


@dataclass
class SnowflakeResult:
    """Everything one pipeline run produces; owned by the caller."""

    params: SnowflakeParams
    seed: int
    segments: List[Segment]
    outline: OutlineResult
    mesh: trimesh.Trimesh
    mesh_mode: str = "outline"
    timings_s: Dict[str, float] = field(default_factory=dict)

    @property
    def diameter_mm(self) -> float:
        return planar_diameter(self.mesh)

    @property
    def depth_mm(self) -> float:
        return float(self.mesh.bounds[1][2] - self.mesh.bounds[0][2])

    def outline_scale(self) -> float:
        """Local-unit to millimetre factor for the outline's planar extent."""
        pts = np.asarray(self.outline.points, dtype=float)
        extent = pts.max(axis=0) - pts.min(axis=0)
        return self.params.diameter_mm / max(float(extent.max()), 1e-6)

    def outline_center(self) -> Point2:
        pts = np.asarray(self.outline.points, dtype=float)
        center = (pts.max(axis=0) + pts.min(axis=0)) * 0.5
        return (float(center[0]), float(center[1]))

    def info(self) -> Dict[str, Any]:
        return {
            "seed_text": self.params.seed,
            "seed": self.seed,
            "complexity": self.params.complexity,
            "thickness": self.params.thickness,
            "size_inches": self.params.size_inches,
            "mesh_mode": self.mesh_mode,
            "diameter_mm": round(self.diameter_mm, 4),
            "depth_mm": round(self.depth_mm, 4),
            "triangle_count": int(len(self.mesh.faces)),
            "vertex_count": int(len(self.mesh.vertices)),
            "segment_count": len(self.segments),
            "outline_points": len(self.outline.points),
            "outline_fallback": self.outline.is_fallback,
            "watertight": bool(self.mesh.is_watertight),
        }


def compose_seed_text(first: str, last: str, complexity, thickness) -> str:
    """Seed text in the ``first|last|complexity|thickness`` convention."""
    return "|".join([
        (first or "").strip(),
        (last or "").strip(),
        str(clamp_complexity(complexity)),
        format_number(clamp_thickness(thickness)),
    ])


def build_segments(
    params: SnowflakeParams,
    config: Optional[SnowflakeConfig] = None,
) -> List[Segment]:
    """Full six-fold skeleton for *params* (clamped internally)."""
    if config is None:
        config = SnowflakeConfig()
    safe = params.clamped()
    rand = SeededRandom(seed_from_string(safe.seed))
    wedge = build_wedge(rand, safe.complexity, safe.thickness, config.skeleton)
    return replicate_wedge(wedge, mirror=config.mirror_wedge)


def generate_snowflake(
    params: SnowflakeParams,
    config: Optional[SnowflakeConfig] = None,
) -> SnowflakeResult:
    """Compute the snowflake for one parameter tuple.

    Pure function of (params, config): identical inputs give identical
    segments and meshes. Out-of-range parameters are clamped.
    """
    if config is None:
        config = SnowflakeConfig()
    if config.mesh_mode not in MESH_MODES:
        raise ValueError(
            f"Unknown mesh mode '{config.mesh_mode}', expected one of {MESH_MODES}"
        )

    safe = params.clamped()
    seed = seed_from_string(safe.seed)
    timings: Dict[str, float] = {}

    started = time.perf_counter()
    segments = build_segments(safe, config)
    timings["skeleton"] = time.perf_counter() - started

    started = time.perf_counter()
    outline_config = replace(config.outline, radius_mm=stroke_radius_mm(safe.thickness))
    outline = extract_outline(segments, outline_config)
    timings["outline"] = time.perf_counter() - started

    started = time.perf_counter()
    if config.mesh_mode == "strokes":
        raw_mesh = build_stroke_mesh(segments, seed, safe.thickness, config.strokes)
    else:
        raw_mesh = build_outline_mesh(outline.points, segments, safe.thickness, config.relief)
    mesh = normalize_mesh(raw_mesh, safe.size_inches, config.normalize)
    timings["mesh"] = time.perf_counter() - started

    logger.info(
        "Generated snowflake seed=%r (%d): %d segments, %d outline points%s, %d triangles",
        safe.seed, seed, len(segments), len(outline.points),
        " (fallback)" if outline.is_fallback else "", len(mesh.faces),
    )
    return SnowflakeResult(
        params=safe,
        seed=seed,
        segments=segments,
        outline=outline,
        mesh=mesh,
        mesh_mode=config.mesh_mode,
        timings_s=timings,
    )


# ─── Run artifacts ───────────────────────────────────────────────────────────


@dataclass
class PipelineConfig:
    runs_dir: str = "runs"
    export_stl: bool = True
    export_svg: bool = True
    export_dxf: bool = True
    snowflake: Optional[SnowflakeConfig] = None
    dxf: Optional[DXFExportConfig] = None


@dataclass
class PipelineResult:
    run_id: str
    run_dir: str
    manifest_path: str
    summary_path: str
    stl_path: Optional[str] = None
    svg_path: Optional[str] = None
    dxf_path: Optional[str] = None
    snowflake: Optional[SnowflakeResult] = None


def run_pipeline(
    params: SnowflakeParams,
    name: Optional[str] = None,
    config: Optional[PipelineConfig] = None,
) -> PipelineResult:
    """Generate a snowflake and write its artifacts into a fresh run folder.

    Args:
        params: Input tuple; clamped before use.
        name: Base file name for artifacts; defaults to a slug of the seed.
        config: Export toggles and generation config.
    """
    if config is None:
        config = PipelineConfig()

    result = generate_snowflake(params, config.snowflake)
    safe = result.params
    base = name or (
        f"snowflake_{sanitize_name_part(safe.seed)}"
        f"_c{safe.complexity}_t{format_number(safe.thickness)}"
    )
    paths = prepare_run_dir(config.runs_dir, base)

    stl_path = svg_path = dxf_path = None
    if config.export_stl:
        stl_path = export_stl(result.mesh, str(paths.artifacts_dir / f"{base}.stl"))
    if config.export_svg:
        svg_path = segments_to_svg(
            result.segments,
            str(paths.artifacts_dir / f"{base}.svg"),
            outline=result.outline.closed_points(),
            size_mm=safe.diameter_mm,
            label=safe.seed,
        )
    if config.export_dxf:
        dxf_path = outline_to_dxf(
            result.outline.points,
            str(paths.artifacts_dir / f"{base}.dxf"),
            scale=result.outline_scale(),
            center=result.outline_center(),
            segments=result.segments,
            label=safe.seed,
            config=config.dxf,
        )

    info = result.info()
    write_json(
        paths.manifest_path,
        {
            "run_id": paths.run_id,
            "parameters": asdict(safe),
            "info": info,
            "timings_s": {k: round(v, 4) for k, v in result.timings_s.items()},
            "artifacts": {"stl": stl_path, "svg": svg_path, "dxf": dxf_path},
        },
    )
    write_text(paths.summary_path, _summary_markdown(paths.run_id, info))
    update_latest_pointer(config.runs_dir, paths.run_dir)

    logger.info("Run %s written to %s", paths.run_id, paths.run_dir)
    return PipelineResult(
        run_id=paths.run_id,
        run_dir=str(paths.run_dir),
        manifest_path=str(paths.manifest_path),
        summary_path=str(paths.summary_path),
        stl_path=stl_path,
        svg_path=svg_path,
        dxf_path=dxf_path,
        snowflake=result,
    )


def _summary_markdown(run_id: str, info: Dict[str, Any]) -> str:
    lines = [
        f"# Snowflake run `{run_id}`",
        "",
        f"- Seed: `{info['seed_text']}` ({info['seed']})",
        f"- Estimated diameter: {info['diameter_mm']:.1f} mm",
        f"- Estimated depth: {info['depth_mm']:.1f} mm",
        f"- Thickness: {format_number(info['thickness'])}",
        f"- Triangle count: {info['triangle_count']}",
    ]
    if info["outline_fallback"]:
        lines.append("- Outline: fallback circle")
    return "\n".join(lines) + "\n"

