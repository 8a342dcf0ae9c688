"""
SVG preview of a snowflake skeleton and its outline.

Skeleton segments are drawn as thin engrave lines, the outline as a red
cut line. Coordinates are scaled so the drawing fits the requested
canvas size; SVG's y axis points down, so y is flipped.
"""

import logging
import os
from typing import Optional, Sequence

import svgwrite

from geometry_primitives import Point2, Segment, close_loop, segment_bounds

logger = logging.getLogger(__name__)

STYLES = """
    .cut { stroke: #ff0000; stroke-width: 0.5; fill: none; }
    .engrave { stroke: #0000ff; stroke-width: 0.25; fill: none; }
    .label { font-size: 4px; font-family: Arial, sans-serif; fill: #333; }
"""


def segments_to_svg(
    segments: Sequence[Segment],
    filepath: str,
    outline: Optional[Sequence[Point2]] = None,
    size_mm: float = 110.0,
    margin: float = 5.0,  # mm
    label: Optional[str] = None,
) -> str:
    """
    Export a skeleton (and optional outline loop) to SVG.

    Args:
        segments: Skeleton segments in local units
        filepath: Output SVG file path
        outline: Closed outline loop in the same local units
        size_mm: Width of the drawing area (mm)
        margin: Margin around the drawing (mm)
        label: Optional caption, e.g. the seed text

    Returns:
        Path to created SVG file
    """
    bounds = segment_bounds(segments)
    if outline:
        xs = [p[0] for p in outline]
        ys = [p[1] for p in outline]
        min_x = min(bounds.min_x, min(xs))
        max_x = max(bounds.max_x, max(xs))
        min_y = min(bounds.min_y, min(ys))
        max_y = max(bounds.max_y, max(ys))
    else:
        min_x, max_x, min_y, max_y = bounds.min_x, bounds.max_x, bounds.min_y, bounds.max_y

    span = max(max_x - min_x, max_y - min_y, 1e-6)
    scale = size_mm / span
    canvas = size_mm + 2 * margin

    def to_svg(p: Point2):
        return (margin + (p[0] - min_x) * scale, margin + (max_y - p[1]) * scale)

    dwg = svgwrite.Drawing(
        filepath,
        size=(f"{canvas}mm", f"{canvas}mm"),
        viewBox=f"0 0 {canvas} {canvas}",
    )
    dwg.defs.add(dwg.style(STYLES))

    for seg in segments:
        dwg.add(dwg.line(start=to_svg(seg.start), end=to_svg(seg.end), class_="engrave"))

    if outline and len(outline) >= 3:
        closed = close_loop(outline, tolerance=span * 1e-6)
        dwg.add(dwg.polyline([to_svg(p) for p in closed], class_="cut"))

    if label:
        dwg.add(dwg.text(label, insert=(margin, canvas - margin * 0.3), class_="label"))

    os.makedirs(os.path.dirname(filepath) or ".", exist_ok=True)
    dwg.save()
    logger.info("Exported SVG: %s", filepath)
    return filepath
