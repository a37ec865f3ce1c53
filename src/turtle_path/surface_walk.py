"""
Turtle walks on the surface of a polyhedron.

The turtle lives in the object space of a solid: a face index, a position on
that face and a unit heading in the face plane. Moving forward walks in a
straight line; when the line leaves the face across an edge the turtle
continues on the neighbouring face with its heading folded over the edge, so
a path of a given length keeps that length on the surface. Heading into a
vertex is not well defined and ends the walk with a user-facing error.
"""

import jax
import jax.numpy as jnp
import structlog
from typing import List, Optional, Sequence, Tuple

from polyhedra_core import (
    Face,
    PolyhedronDefinition,
    get_polyhedron,
    normalize,
    angle_between,
    rotate_about_axis,
    find_adjacent_face,
)

from .config import WalkConfig, DEFAULT_WALK_CONFIG
from .path_types import (
    TurtleCommand,
    TurtleState,
    PathSegment,
    PathError,
    PathResult,
    EdgeCrossing,
)

logger = structlog.get_logger(__name__)

VERTEX_ERROR = "Path reached a vertex"


@jax.jit
def edge_hit_distances(vertices: jnp.ndarray,
                       normal: jnp.ndarray,
                       pos: jnp.ndarray,
                       heading: jnp.ndarray,
                       min_denominator: float,
                       hit_tolerance: float) -> jnp.ndarray:
    """Ray parameter at which the ray (pos, heading) meets each edge line.

    Each edge is treated as the plane through it with the in-plane outward
    edge normal; only edges the heading points out of are hit.

    Args:
        vertices: (n, 3) face boundary, CCW about `normal`
        normal: (3,) face normal
        pos: (3,) ray origin inside the face
        heading: (3,) unit ray direction
        min_denominator: Smallest accepted heading . edge-normal
        hit_tolerance: Slack below zero accepted for the parameter

    Returns:
        (n,) parameters, inf for edges that are not hit
    """
    v1 = vertices
    v2 = jnp.roll(vertices, -1, axis=0)
    edge_dir = normalize(v2 - v1)
    out_normals = normalize(jnp.cross(edge_dir, normal))

    denominator = out_normals @ heading
    outward = denominator > min_denominator
    dist_to_plane = jnp.sum((pos[None, :] - v1) * out_normals, axis=-1)
    t = -dist_to_plane / jnp.where(outward, denominator, 1.0)
    return jnp.where(outward & (t > -hit_tolerance), t, jnp.inf)


@jax.jit
def vertex_hit_distances(vertices: jnp.ndarray,
                         pos: jnp.ndarray,
                         heading: jnp.ndarray,
                         threshold: float) -> jnp.ndarray:
    """Ray parameter of the closest approach to each vertex within `threshold`.

    Returns:
        (n,) parameters, inf for vertices behind the ray or too far from it
    """
    projection = (vertices - pos[None, :]) @ heading
    closest = pos[None, :] + projection[:, None] * heading[None, :]
    miss = jnp.linalg.norm(closest - vertices, axis=-1)
    return jnp.where((projection > 0) & (miss < threshold), projection, jnp.inf)


def find_edge_hit(face: Face,
                  pos: jnp.ndarray,
                  heading: jnp.ndarray,
                  config: WalkConfig = DEFAULT_WALK_CONFIG) -> Optional[Tuple[float, int]]:
    """Nearest edge crossed by the ray, as (t, edge_index), or None."""
    ts = edge_hit_distances(face.vertices, face.normal, pos, heading,
                            config.min_denominator, config.hit_tolerance)
    index = int(jnp.argmin(ts))
    t = float(ts[index])
    if t == float('inf'):
        return None
    return t, index


def find_vertex_hit(face: Face,
                    pos: jnp.ndarray,
                    heading: jnp.ndarray,
                    config: WalkConfig = DEFAULT_WALK_CONFIG) -> Optional[Tuple[float, int]]:
    """Nearest vertex the ray passes within the threshold of, as (t, vertex_index)."""
    ts = vertex_hit_distances(face.vertices, pos, heading, config.vertex_threshold)
    index = int(jnp.argmin(ts))
    t = float(ts[index])
    if t == float('inf'):
        return None
    return t, index


def initial_heading(face: Face) -> jnp.ndarray:
    """Unit vector from the face centre to the midpoint of its first edge."""
    v0, v1 = face.edge(0)
    return normalize((v0 + v1) / 2 - face.center)


def offset_point(pos: jnp.ndarray, face: Face, config: WalkConfig = DEFAULT_WALK_CONFIG) -> jnp.ndarray:
    return pos + config.point_offset * face.normal


def cross_edge(state: TurtleState,
               from_face: Face,
               to_face: Face,
               edge_v1: jnp.ndarray,
               edge_v2: jnp.ndarray,
               config: WalkConfig = DEFAULT_WALK_CONFIG) -> TurtleState:
    """Carry the turtle over an edge onto the neighbouring face.

    The heading is rotated about the edge by the angle between the two face
    normals, and the position is nudged into the new face so the same edge
    is not detected again.
    """
    edge_axis = normalize(edge_v2 - edge_v1)
    angle = angle_between(from_face.normal, to_face.normal)
    turn = jnp.dot(jnp.cross(from_face.normal, to_face.normal), edge_axis)
    sign = 1.0 if float(turn) > 0 else -1.0
    heading = rotate_about_axis(state.heading, edge_axis, sign * angle)

    inwards = normalize(jnp.cross(to_face.normal, edge_axis))
    if float(jnp.dot(inwards, to_face.center - state.pos)) < 0:
        inwards = -inwards

    return TurtleState(
        face_index=to_face.index,
        pos=state.pos + config.edge_nudge * inwards,
        heading=heading,
    )


class _Walk:
    """Mutable bookkeeping of one generate_path call."""

    def __init__(self, definition: PolyhedronDefinition, config: WalkConfig):
        self.definition = definition
        self.faces = definition.get_faces()
        self.config = config
        self.segments: List[PathSegment] = []
        self.crossings: List[EdgeCrossing] = []
        self.current: List[jnp.ndarray] = []

    def emit(self, pos: jnp.ndarray, face: Face):
        self.current.append(offset_point(pos, face, self.config))

    def close_segment(self):
        if len(self.current) > 1:
            self.segments.append(PathSegment(points=jnp.stack(self.current)))

    def move(self, state: TurtleState, distance: float) -> Tuple[TurtleState, Optional[str]]:
        """Walk a signed distance, crossing edges as needed.

        Returns:
            Final state and an error message, or None
        """
        config = self.config
        remaining = abs(distance)
        sign = 1.0 if distance > 0 else -1.0

        iterations = 0
        while remaining > config.distance_epsilon and iterations < config.max_iterations:
            iterations += 1
            face = self.definition.get_face(state.face_index)
            if face is None:
                logger.warning("walk_face_missing", shape=self.definition.id,
                               face=state.face_index)
                break

            direction = sign * state.heading
            vertex_hit = find_vertex_hit(face, state.pos, direction, config)
            edge_hit = find_edge_hit(face, state.pos, direction, config)
            edge_t = edge_hit[0] if edge_hit is not None else float('inf')

            if vertex_hit is not None and vertex_hit[0] <= edge_t and vertex_hit[0] < remaining:
                state = state._replace(pos=state.pos + vertex_hit[0] * direction)
                self.emit(state.pos, face)
                return state, VERTEX_ERROR

            if edge_hit is not None and edge_t < remaining:
                state = state._replace(pos=state.pos + edge_t * direction)
                self.emit(state.pos, face)
                remaining -= edge_t

                edge_index = edge_hit[1]
                v1, v2 = face.edge(edge_index)
                neighbor = find_adjacent_face(self.faces, face, v1, v2,
                                              tolerance=config.neighbor_tolerance)
                if neighbor is None:
                    logger.warning("walk_no_neighbor", shape=self.definition.id,
                                   face=face.index, edge=edge_index)
                    return state, None

                crossing_point = state.pos
                state = cross_edge(state, face, neighbor, v1, v2, config)
                self.emit(state.pos, neighbor)
                self.crossings.append(EdgeCrossing(
                    from_face_index=face.index,
                    to_face_index=neighbor.index,
                    edge_index=edge_index,
                    edge_vertices=jnp.stack([v1, v2]),
                    crossing_point=crossing_point,
                    segment_index=len(self.segments),
                    point_index=len(self.current) - 1,
                ))
                continue

            state = state._replace(pos=state.pos + remaining * direction)
            self.emit(state.pos, face)
            remaining = 0.0

        if remaining > config.distance_epsilon:
            logger.debug("walk_iteration_cap", shape=self.definition.id,
                         remaining=remaining, iterations=iterations)
        return state, None


def generate_path(shape_id: str,
                  commands: Sequence[TurtleCommand],
                  config: WalkConfig = DEFAULT_WALK_CONFIG) -> PathResult:
    """Run a command program on the surface of a shape.

    The turtle starts at the centre of face 1 heading towards the midpoint
    of its first edge. Command processing stops at the first vertex hit;
    everything walked before it is returned with the error.

    Args:
        shape_id: Registry id of the shape
        commands: Parsed program
        config: Walk tolerances

    Returns:
        PathResult with segments of at least two points, the edge crossings
        in walk order and an optional PathError
    """
    definition = get_polyhedron(shape_id)
    start_face = definition.get_face(1)
    if start_face is None:
        return PathResult(segments=[], edge_rolls=[])

    h0 = initial_heading(start_face)
    right = normalize(jnp.cross(h0, start_face.normal))

    walk = _Walk(definition, config)
    state = TurtleState(face_index=start_face.index, pos=start_face.center, heading=h0)
    walk.emit(state.pos, start_face)
    error = None

    for command in commands:
        if command.kind == 'start':
            x, y = command.value
            state = TurtleState(
                face_index=start_face.index,
                pos=start_face.center + x * h0 + y * right,
                heading=h0,
            )
            walk.close_segment()
            walk.current = []
            walk.emit(state.pos, start_face)

        elif command.kind in ('lt', 'rt'):
            angle = jnp.deg2rad(command.value)
            face = definition.get_face(state.face_index)
            if face is not None:
                turn = angle if command.kind == 'lt' else -angle
                state = state._replace(
                    heading=rotate_about_axis(state.heading, face.normal, turn))

        elif command.kind in ('fd', 'bk'):
            distance = command.value if command.kind == 'fd' else -command.value
            state, message = walk.move(state, distance)
            if message is not None:
                error = PathError(message=message, line_number=command.line_number)
                break

    walk.close_segment()
    logger.debug("path_generated", shape=shape_id, segments=len(walk.segments),
                 crossings=len(walk.crossings), error=error is not None)
    return PathResult(segments=walk.segments, edge_rolls=walk.crossings, error=error)
