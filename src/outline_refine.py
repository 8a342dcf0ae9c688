"""
Smoothing and simplification of a closed outline loop.

Loops are lists of (x, y) tuples with implicit closure (first != last).
"""
import math
from typing import List, Sequence

from geometry_primitives import Point2, polygon_area

MIN_SIMPLIFIED_POINTS = 6


def chaikin(points: Sequence[Point2], iterations: int, cut: float = 0.15) -> List[Point2]:
    """Corner-cutting subdivision; each pass doubles the vertex count."""
    loop = [tuple(p) for p in points]
    for _ in range(iterations):
        n = len(loop)
        smoothed: List[Point2] = []
        for i in range(n):
            x0, y0 = loop[i]
            x1, y1 = loop[(i + 1) % n]
            smoothed.append(((1 - cut) * x0 + cut * x1, (1 - cut) * y0 + cut * y1))
            smoothed.append((cut * x0 + (1 - cut) * x1, cut * y0 + (1 - cut) * y1))
        loop = smoothed
    return loop


def _is_removable(prev: Point2, curr: Point2, nxt: Point2, min_edge: float, collinear_eps: float) -> bool:
    vx0 = curr[0] - prev[0]
    vy0 = curr[1] - prev[1]
    vx1 = nxt[0] - curr[0]
    vy1 = nxt[1] - curr[1]
    l0 = math.hypot(vx0, vy0)
    l1 = math.hypot(vx1, vy1)
    if l0 < min_edge or l1 < min_edge:
        return True
    cross = abs(vx0 * vy1 - vy0 * vx1)
    return cross < collinear_eps * l0 * l1


def simplify_loop(
    points: Sequence[Point2],
    min_edge: float,
    collinear_eps: float,
) -> List[Point2]:
    """Drop vertices with a too-short adjacent edge or a near-straight turn.

    Always removes the first removable vertex in loop order and never
    goes below six points.
    """
    loop = [tuple(p) for p in points]
    if len(loop) < MIN_SIMPLIFIED_POINTS:
        return loop

    i = 0
    while len(loop) > MIN_SIMPLIFIED_POINTS and i < len(loop):
        n = len(loop)
        if _is_removable(loop[i - 1], loop[i], loop[(i + 1) % n], min_edge, collinear_eps):
            del loop[i]
            # Only the neighbours of the removed vertex changed; vertex 0
            # changes too when the last vertex was removed.
            i = 0 if i >= len(loop) else max(i - 1, 0)
            continue
        i += 1
    return loop


def ensure_ccw(points: Sequence[Point2]) -> List[Point2]:
    loop = [tuple(p) for p in points]
    if polygon_area(loop) < 0:
        loop.reverse()
    return loop


def refine_loop(
    points: Sequence[Point2],
    smoothing_iterations: int = 2,
    cut: float = 0.12,
    min_edge: float = 0.0,
    collinear_eps: float = 0.012,
) -> List[Point2]:
    """Smooth, simplify and orient a raw contour loop counter-clockwise."""
    loop = chaikin(points, smoothing_iterations, cut)
    loop = simplify_loop(loop, min_edge, collinear_eps)
    return ensure_ccw(loop)
