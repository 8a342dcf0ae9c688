"""
Branching skeleton for one 60-degree wedge of the snowflake.

The wedge is built along the +X axis: a spine of jittered nodes, two
parallel rails that stiffen it, mirrored branch pairs with twigs and
plates, and a splayed tip. Random draws happen in this order, so the
shape is fully determined by (seed, complexity, thickness):

1. one step jitter per spine node after the origin;
2. per eligible interior node, in order of distance from the centre:
   branch trial, branch angle jitter, branch length jitter, twig trial,
   second-twig trial (only if the twig trial passed), three draws per
   twig (direction, length, position), plate trial, second-plate trial
   (only if the plate trial passed and levels > 6), one draw per plate.

Mirrored sides reuse the same draws, so both sides of a branch match.
"""
import logging
import math
from dataclasses import dataclass, field
from typing import Callable, List

from geometry_primitives import (
    Point2,
    Segment,
    clamp_complexity,
    clamp_thickness,
    lerp_point,
    polar_point,
)

logger = logging.getLogger(__name__)


@dataclass
class SkeletonConfig:
    """Tunable constants for wedge generation."""

    extra_nodes: int = 8
    base_length: float = 3.0
    length_per_level: float = 0.42
    step_jitter_min: float = 0.9
    step_jitter_span: float = 0.2
    min_feature: float = 0.06

    reinforce_rails: bool = True
    rail_offset_base: float = 0.07
    rail_offset_thickness: float = 0.06

    # Branches are only attached between these fractions of the spine
    inner_exclusion: float = 0.28
    outer_exclusion: float = 0.97
    branch_probability_base: float = 0.58
    branch_probability_per_level: float = 0.024
    branch_probability_max: float = 0.95
    branch_angle_base: float = math.pi / 3
    branch_angle_inner_boost: float = 0.42
    branch_angle_jitter: float = math.pi / 15
    branch_length_base: float = 0.54
    branch_length_per_level: float = 0.118
    branch_length_jitter_min: float = 0.95
    branch_length_jitter_span: float = 0.42
    branch_falloff_center: float = 0.64
    branch_falloff_rate: float = 1.06
    branch_falloff_min: float = 0.32
    branch_thickness_boost: float = 0.14
    inner_branch_cutoff: float = 0.45
    inner_branch_scale: float = 0.62

    twig_probability: float = 0.86
    second_twig_probability: float = 0.48
    twig_dir_min: float = 0.42
    twig_dir_span: float = 0.25
    twig_length_min: float = 0.2
    twig_length_span: float = 0.18
    twig_length_decay: float = 0.14
    twig_along_min: float = 0.38
    twig_along_span: float = 0.5

    plate_probability: float = 0.75
    second_plate_probability: float = 0.42
    second_plate_min_levels: int = 6
    plate_along_base: float = 0.52
    plate_along_step: float = 0.18
    plate_length_min: float = 0.18
    plate_length_span: float = 0.14

    tip_length_base: float = 0.32
    tip_length_per_level: float = 0.022
    tip_splay_angle: float = math.pi * 0.74
    tip_center_scale: float = 0.44


@dataclass
class _TwigParams:
    dir_scale: float
    len_scale: float
    along: float


@dataclass
class _PlateParams:
    along: float
    len_scale: float


@dataclass
class _BranchPlan:
    node: Point2
    angle: float
    length: float
    twigs: List[_TwigParams] = field(default_factory=list)
    plates: List[_PlateParams] = field(default_factory=list)


class _WedgeBuilder:
    """Accumulates segments, skipping anything shorter than the feature size."""

    def __init__(self, min_feature: float):
        self.min_feature = min_feature
        self.segments: List[Segment] = []
        self.skipped = 0

    def add(self, a: Point2, b: Point2) -> None:
        if math.hypot(b[0] - a[0], b[1] - a[1]) < self.min_feature:
            self.skipped += 1
            return
        self.segments.append(Segment(a, b))

    def add_polar(self, start: Point2, angle: float, length: float) -> Point2:
        length = max(self.min_feature, length)
        end = polar_point(start, angle, length)
        self.segments.append(Segment(start, end))
        return end


def build_wedge(
    rand: Callable[[], float],
    complexity=5,
    thickness=10.0,
    config: SkeletonConfig = None,
) -> List[Segment]:
    """Generate the segments of one wedge.

    Args:
        rand: Seeded generator; consumed in the documented order.
        complexity: Detail level, rounded and clamped to [1, 10].
        thickness: Stroke thickness, clamped to [2, 20].
        config: Generation constants.

    Returns:
        Wedge segments in generation order.
    """
    if config is None:
        config = SkeletonConfig()

    levels = clamp_complexity(complexity)
    thickness_norm = clamp_thickness(thickness) / 20.0
    builder = _WedgeBuilder(config.min_feature)

    nodes = _build_spine(builder, rand, levels, config)
    if config.reinforce_rails:
        _add_rails(builder, nodes, thickness_norm, config)

    node_count = len(nodes)
    for i in range(1, node_count - 1):
        t = i / (node_count - 1)
        if t < config.inner_exclusion or t > config.outer_exclusion:
            continue
        plan = _plan_branch(rand, nodes[i], t, levels, thickness_norm, config)
        if plan is None:
            continue
        _emit_branch_side(builder, plan, 1.0)
        _emit_branch_side(builder, plan, -1.0)

    _add_tip(builder, nodes[-1], levels, config)

    if builder.skipped:
        logger.debug("Skipped %d sub-feature segments", builder.skipped)
    logger.debug(
        "Wedge: levels=%d nodes=%d segments=%d",
        levels, node_count, len(builder.segments),
    )
    return builder.segments


def _build_spine(
    builder: _WedgeBuilder,
    rand: Callable[[], float],
    levels: int,
    config: SkeletonConfig,
) -> List[Point2]:
    node_count = levels + config.extra_nodes
    main_length = config.base_length + levels * config.length_per_level
    step_base = main_length / (node_count - 1)

    nodes: List[Point2] = [(0.0, 0.0)]
    for _ in range(1, node_count):
        prev = nodes[-1]
        step = step_base * (config.step_jitter_min + rand() * config.step_jitter_span)
        curr = (prev[0] + step, 0.0)
        builder.add(prev, curr)
        nodes.append(curr)
    return nodes


def _add_rails(
    builder: _WedgeBuilder,
    nodes: List[Point2],
    thickness_norm: float,
    config: SkeletonConfig,
) -> None:
    offset = config.rail_offset_base + thickness_norm * config.rail_offset_thickness
    for a, b in zip(nodes, nodes[1:]):
        builder.add((a[0], offset), (b[0], offset))
        builder.add((a[0], -offset), (b[0], -offset))


def _plan_branch(
    rand: Callable[[], float],
    node: Point2,
    t: float,
    levels: int,
    thickness_norm: float,
    config: SkeletonConfig,
):
    """Draw every random value for one branch pair, or None to skip the node."""
    probability = min(
        config.branch_probability_max,
        config.branch_probability_base + levels * config.branch_probability_per_level,
    )
    if rand() > probability:
        return None

    angle_base = config.branch_angle_base + (0.5 - min(t, 0.5)) * config.branch_angle_inner_boost
    angle = angle_base + rand() * config.branch_angle_jitter
    falloff = max(
        config.branch_falloff_min,
        1.0 - abs(t - config.branch_falloff_center) * config.branch_falloff_rate,
    )
    scale = falloff * (1.0 + thickness_norm * config.branch_thickness_boost)
    inner_boost = config.inner_branch_scale if t < config.inner_branch_cutoff else 1.0
    length = max(
        config.min_feature,
        (config.branch_length_base + levels * config.branch_length_per_level)
        * scale
        * (config.branch_length_jitter_min + rand() * config.branch_length_jitter_span)
        * inner_boost,
    )
    plan = _BranchPlan(node=node, angle=angle, length=length)

    if rand() < config.twig_probability:
        twig_count = 2 if rand() < config.second_twig_probability else 1
        for k in range(twig_count):
            dir_scale = config.twig_dir_min + rand() * config.twig_dir_span
            len_scale = (config.twig_length_min + rand() * config.twig_length_span) * (
                1.0 - k * config.twig_length_decay
            )
            along = config.twig_along_min + config.twig_along_span * rand()
            plan.twigs.append(_TwigParams(dir_scale, len_scale, along))

    if rand() < config.plate_probability:
        plate_count = 1
        if levels > config.second_plate_min_levels and rand() < config.second_plate_probability:
            plate_count = 2
        for n in range(plate_count):
            plan.plates.append(
                _PlateParams(
                    along=config.plate_along_base + n * config.plate_along_step,
                    len_scale=config.plate_length_min + rand() * config.plate_length_span,
                )
            )
    return plan


def _emit_branch_side(builder: _WedgeBuilder, plan: _BranchPlan, side: float) -> None:
    branch_angle = side * plan.angle
    start = plan.node
    end = builder.add_polar(start, branch_angle, plan.length)

    for twig in plan.twigs:
        direction = branch_angle + side * (math.pi / 2) * twig.dir_scale
        base = lerp_point(start, end, twig.along)
        builder.add_polar(base, direction, plan.length * twig.len_scale)

    ridge_angle = branch_angle + side * (math.pi / 2)
    for plate in plan.plates:
        base = lerp_point(start, end, plate.along)
        builder.add_polar(base, ridge_angle, plan.length * plate.len_scale)


def _add_tip(
    builder: _WedgeBuilder,
    tip: Point2,
    levels: int,
    config: SkeletonConfig,
) -> None:
    length = max(config.min_feature, config.tip_length_base + levels * config.tip_length_per_level)
    builder.add_polar(tip, config.tip_splay_angle, length)
    builder.add_polar(tip, -config.tip_splay_angle, length)
    builder.add_polar(tip, math.pi, length * config.tip_center_scale)
