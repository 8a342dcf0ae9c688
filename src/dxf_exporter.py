"""
DXF export of the snowflake outline for laser or CNC cutting.

Uses ezdxf to produce DXF files with proper layers:
  - CUT (red, ACI 1): the closed outline
  - ENGRAVE (blue, ACI 5): optional skeleton lines and label

Units: millimeters. Format: R2010.
"""
import logging
import os
from dataclasses import dataclass
from typing import Optional, Sequence

import ezdxf
from ezdxf.enums import TextEntityAlignment

from geometry_primitives import Point2, Segment

logger = logging.getLogger(__name__)


@dataclass
class DXFExportConfig:
    """Configuration for DXF export."""
    cut_layer: str = "CUT"
    engrave_layer: str = "ENGRAVE"
    cut_color: int = 1       # ACI red
    engrave_color: int = 5   # ACI blue
    include_skeleton: bool = False
    add_label: bool = True
    label_height_mm: float = 3.0


def outline_to_dxf(
    outline: Sequence[Point2],
    filepath: str,
    scale: float = 1.0,
    center: Point2 = (0.0, 0.0),
    segments: Optional[Sequence[Segment]] = None,
    label: Optional[str] = None,
    config: Optional[DXFExportConfig] = None,
) -> str:
    """Export an outline loop to a DXF file.

    Args:
        outline: Outline loop in local units (implicit closure).
        filepath: Output DXF file path.
        scale: Local-unit to millimetre factor.
        center: Local point mapped to the drawing origin.
        segments: Skeleton to engrave when ``include_skeleton`` is set.
        label: Text placed at the origin on the engrave layer.
        config: DXF export settings.

    Returns:
        Path to created DXF file.
    """
    if config is None:
        config = DXFExportConfig()
    if len(outline) < 3:
        raise ValueError("Outline needs at least 3 points for DXF export")

    def to_mm(p: Point2):
        return ((p[0] - center[0]) * scale, (p[1] - center[1]) * scale)

    doc = ezdxf.new("R2010")
    doc.units = ezdxf.units.MM
    msp = doc.modelspace()
    doc.layers.add(config.cut_layer, color=config.cut_color)
    doc.layers.add(config.engrave_layer, color=config.engrave_color)

    # ezdxf closes the polyline itself; drop an explicit closing duplicate
    loop = [tuple(p) for p in outline]
    if len(loop) > 3 and loop[0] == loop[-1]:
        loop = loop[:-1]
    msp.add_lwpolyline(
        [to_mm(p) for p in loop],
        close=True,
        dxfattribs={"layer": config.cut_layer},
    )

    if config.include_skeleton and segments:
        for seg in segments:
            msp.add_line(
                to_mm(seg.start), to_mm(seg.end),
                dxfattribs={"layer": config.engrave_layer},
            )

    if config.add_label and label:
        msp.add_text(
            label,
            height=config.label_height_mm,
            dxfattribs={"layer": config.engrave_layer},
        ).set_placement((0.0, 0.0), align=TextEntityAlignment.MIDDLE_CENTER)

    os.makedirs(os.path.dirname(filepath) or ".", exist_ok=True)
    doc.saveas(filepath)
    logger.info("Exported DXF: %s", filepath)
    return filepath
