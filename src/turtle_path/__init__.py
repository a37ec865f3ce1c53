"""Turtle programs walked across the faces of a polyhedron."""

from .path_types import (
    TurtleCommand,
    TurtleState,
    PathSegment,
    PathError,
    PathResult,
    EdgeCrossing,
    EdgeRoll
)

from .config import (
    WalkConfig,
    DEFAULT_WALK_CONFIG
)

from .commands import (
    parse_number,
    parse_commands
)

from .surface_walk import (
    VERTEX_ERROR,
    initial_heading,
    find_edge_hit,
    find_vertex_hit,
    cross_edge,
    generate_path
)

from .flat_path import generate_flat_path

from .edge_crossings import (
    segments_intersect_2d,
    find_closest_face,
    find_shared_edge,
    extract_edge_crossings
)

__all__ = [
    'TurtleCommand',
    'TurtleState',
    'PathSegment',
    'PathError',
    'PathResult',
    'EdgeCrossing',
    'EdgeRoll',
    'WalkConfig',
    'DEFAULT_WALK_CONFIG',
    'parse_number',
    'parse_commands',
    'VERTEX_ERROR',
    'initial_heading',
    'find_edge_hit',
    'find_vertex_hit',
    'cross_edge',
    'generate_path',
    'generate_flat_path',
    'segments_intersect_2d',
    'find_closest_face',
    'find_shared_edge',
    'extract_edge_crossings'
]
