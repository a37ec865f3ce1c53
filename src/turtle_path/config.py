"""Numeric tolerances of the turtle path engine."""

from typing import NamedTuple


class WalkConfig(NamedTuple):
    """Tolerances and offsets used while walking a path.

    Use DEFAULT_WALK_CONFIG._replace(...) to adjust individual values.

    Attributes:
        point_offset: Distance emitted points are lifted along the face normal
        edge_nudge: Step into the new face after crossing an edge
        vertex_threshold: Closest-approach distance that counts as a vertex hit
        neighbor_tolerance: Vertex matching distance when looking up neighbours
        max_iterations: Upper bound on face-to-face steps per motion command
        distance_epsilon: Remaining distance treated as zero
        min_denominator: Smallest heading component across an edge normal
        hit_tolerance: Slack below zero accepted for an edge hit parameter
        flat_height: Height of the flat comparison path above the floor
    """
    point_offset: float = 0.015
    edge_nudge: float = 0.001
    vertex_threshold: float = 0.05
    neighbor_tolerance: float = 0.01
    max_iterations: int = 100
    distance_epsilon: float = 1e-4
    min_denominator: float = 1e-4
    hit_tolerance: float = 1e-4
    flat_height: float = 0.02


DEFAULT_WALK_CONFIG = WalkConfig()
