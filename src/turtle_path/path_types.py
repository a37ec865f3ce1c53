"""Records produced and consumed by the turtle path engine."""

import jax.numpy as jnp
from typing import NamedTuple, List, Optional, Tuple, Union


class TurtleCommand(NamedTuple):
    """One parsed command line.

    Attributes:
        kind: 'start', 'fd', 'bk', 'lt' or 'rt'
        value: (x, y) for 'start', a float otherwise
        line_number: 1-based source line
    """
    kind: str
    value: Union[float, Tuple[float, float]]
    line_number: int


class TurtleState(NamedTuple):
    """Turtle pose on the surface, in object space of the solid."""
    face_index: int
    pos: jnp.ndarray
    heading: jnp.ndarray


class PathSegment(NamedTuple):
    """A pen-down polyline, (n, 3) points."""
    points: jnp.ndarray

    @property
    def point_count(self) -> int:
        return int(self.points.shape[0])


class PathError(NamedTuple):
    """A user-facing path error attributed to a command line."""
    message: str
    line_number: int


class EdgeCrossing(NamedTuple):
    """The path leaving one face across an edge into its neighbour.

    Attributes:
        from_face_index: Face the path leaves
        to_face_index: Face the path enters
        edge_index: Edge of the from-face that is crossed
        edge_vertices: (2, 3) object-space endpoints of that edge
        crossing_point: (3,) point where the crossing is placed
        segment_index: Segment containing the crossing
        point_index: Index of the first point on the to-face side within
            the segment
    """
    from_face_index: int
    to_face_index: int
    edge_index: int
    edge_vertices: jnp.ndarray
    crossing_point: jnp.ndarray
    segment_index: int
    point_index: int


# Crossings recorded while walking are also the edges the solid rolls over
EdgeRoll = EdgeCrossing


class PathResult(NamedTuple):
    """Output of a surface walk.

    Attributes:
        segments: Pen-down polylines with at least two points each
        edge_rolls: Crossings in walk order
        error: Set when the walk stopped on a user-facing error
    """
    segments: List[PathSegment]
    edge_rolls: List[EdgeCrossing]
    error: Optional[PathError] = None
