"""Radial layout of related nodes around the focal node.

Offsets use screen coordinates: x grows to the right and y grows downward, so
"above" is a negative y and increasing angles move clockwise.
"""

import math
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pipeline_graph.graph import EgoGraph

BASE_RADIUS = 250.0
MIN_SPACING = 180.0


@dataclass(frozen=True)
class Offset:
    """A 2D position, relative to the focal node unless stated otherwise."""

    x: float
    y: float

    def to_dict(self) -> dict[str, float]:
        return {"x": self.x, "y": self.y}


def effective_radius(n: int, base_radius: float = BASE_RADIUS, min_spacing: float = MIN_SPACING) -> float:
    """Radius of the ring for ``n > 3`` related nodes.

    Grows with ``n`` so that neighbouring nodes stay at least ``min_spacing``
    apart, measured both along the arc and along the chord.
    """
    arc_radius = n * min_spacing / (2 * math.pi)
    chord_radius = min_spacing / (2 * math.sin(math.pi / n))
    return max(base_radius, arc_radius, chord_radius)


def positions(n: int, base_radius: float = BASE_RADIUS, min_spacing: float = MIN_SPACING) -> list[Offset]:
    """Compute offsets from the focal node for ``n`` related nodes.

    Small counts use fixed arrangements; larger counts are spread evenly on a
    circle starting at 12 o'clock and proceeding clockwise.

    Args:
        n: Number of related nodes
        base_radius: Preferred distance from the focal node
        min_spacing: Minimum distance between neighbouring nodes on the ring

    Returns:
        One offset per related node, in node order
    """
    if n < 0:
        raise ValueError(f"Node count must be non-negative, got {n}")
    if base_radius <= 0:
        raise ValueError(f"base_radius must be positive, got {base_radius}")

    if n == 0:
        return []
    if n == 1:
        return [Offset(base_radius, 0.0)]
    if n == 2:
        return [Offset(-0.8 * base_radius, 0.0), Offset(0.8 * base_radius, 0.0)]
    if n == 3:
        return [
            Offset(0.0, -0.7 * base_radius),
            Offset(-0.6 * base_radius, 0.4 * base_radius),
            Offset(0.6 * base_radius, 0.4 * base_radius),
        ]

    radius = effective_radius(n, base_radius, min_spacing)
    step = 2 * math.pi / n
    offsets = []
    for i in range(n):
        angle = -math.pi / 2 + i * step
        offsets.append(Offset(radius * math.cos(angle), radius * math.sin(angle)))
    return offsets


def apply_layout(
    graph: "EgoGraph",
    center: Offset = Offset(0.0, 0.0),
    base_radius: float = BASE_RADIUS,
    min_spacing: float = MIN_SPACING,
) -> "EgoGraph":
    """Return a copy of ``graph`` with absolute node positions.

    The first node (focal, or the idle prompt) sits at ``center``; the rest are
    placed at ``center`` plus their offset.
    """
    if not graph.nodes:
        return graph

    head, *rest = graph.nodes
    offsets = positions(len(rest), base_radius, min_spacing)
    placed = [replace(head, position=center)]
    for node, offset in zip(rest, offsets):
        placed.append(replace(node, position=Offset(center.x + offset.x, center.y + offset.y)))
    return replace(graph, nodes=tuple(placed))
