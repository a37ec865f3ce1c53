"""
Roll-target solver and roll kinematics.

A solid resting on a face can tip over any edge of that face. For each such
edge this module computes the roll axis (horizontal, through the edge
midpoint), the floor cell the solid lands on and the world direction of the
move. Executing a roll is a single rigid rotation about the pivot:

    q' = q_rot * q
    p' = pivot + q_rot (p - pivot)

The same formula evaluated at an eased fraction of the roll angle gives the
intermediate poses of an animated roll; callers own the clock.
"""

import jax.numpy as jnp
import structlog
from typing import NamedTuple, List, Optional

from polyhedra_core import (
    PolyhedronDefinition,
    Face,
    UP,
    normalize,
    quat_from_axis_angle,
    quat_multiply,
    quat_rotate,
    rotate_about_axis,
    transform_points,
    find_adjacent_face,
)
from polyhedra_core.vector_math import quat_normalize

logger = structlog.get_logger(__name__)

# Matching tolerance for coincident vertices in world space
WORLD_VERTEX_TOLERANCE = 1e-3


class Pose(NamedTuple):
    """World placement of a solid: body origin and orientation (w, x, y, z)."""
    position: jnp.ndarray
    quaternion: jnp.ndarray


class RollTarget(NamedTuple):
    """One edge the solid can currently tip over.

    Attributes:
        axis: (3,) unit roll axis, horizontal
        point: (3,) pivot, the midpoint of the ground edge
        target_center: (3,) floor-projected body centre after the roll
        direction_angle: atan2 of the horizontal roll displacement (z, x)
        zone_vertices: (n, 3) footprint of the landing face on y = 0
        from_face_index: Face currently on the ground
        to_face_index: Face that will be on the ground after the roll
    """
    axis: jnp.ndarray
    point: jnp.ndarray
    target_center: jnp.ndarray
    direction_angle: float
    zone_vertices: jnp.ndarray
    from_face_index: int
    to_face_index: int


def initial_pose(definition: PolyhedronDefinition) -> Pose:
    """Resting pose with face 1 on the ground at the origin cell."""
    return Pose(position=definition.initial_position,
                quaternion=definition.initial_quaternion)


def world_faces(definition: PolyhedronDefinition, pose: Pose) -> List[Face]:
    """All faces of the definition transformed into world space."""
    return [
        Face(
            index=face.index,
            center=transform_points(face.center[None, :], pose.position, pose.quaternion)[0],
            normal=quat_rotate(pose.quaternion, face.normal),
            vertices=transform_points(face.vertices, pose.position, pose.quaternion),
        )
        for face in definition.faces
    ]


def resting_face_index(definition: PolyhedronDefinition, quaternion: jnp.ndarray) -> int:
    """Index of the face whose world normal points most nearly straight down.

    Recomputed from the orientation on every call rather than tracked
    incrementally, so accumulated drift never picks the wrong face.
    """
    normals = jnp.stack([face.normal for face in definition.faces])
    world_normals = quat_rotate(quaternion, normals)
    return int(jnp.argmin(world_normals @ UP)) + 1


def bottom_face(definition: PolyhedronDefinition, pose: Pose) -> Face:
    """The resting face, in world space."""
    index = resting_face_index(definition, pose.quaternion)
    return world_faces(definition, pose)[index - 1]


def lowest_vertices(definition: PolyhedronDefinition, pose: Pose) -> jnp.ndarray:
    """The get_bottom_vertex_count() world vertices with the smallest y.

    Returned in ascending y order, which is not the boundary order of the
    ground polygon.
    """
    world = transform_points(definition.vertices, pose.position, pose.quaternion)
    order = jnp.argsort(world[:, 1])
    return world[order[:definition.get_bottom_vertex_count()]]


def floor_center(pose: Pose) -> jnp.ndarray:
    return pose.position.at[1].set(0.0)


def roll_target_from_edge(definition: PolyhedronDefinition,
                          pose: Pose,
                          edge_v1: jnp.ndarray,
                          edge_v2: jnp.ndarray,
                          faces: Optional[List[Face]] = None) -> RollTarget:
    """Build the roll target for tipping over the world-space edge (v1, v2).

    Args:
        definition: Shape being rolled
        pose: Current pose
        edge_v1, edge_v2: Ground edge endpoints in world space
        faces: World faces for `pose`, computed when omitted

    Returns:
        RollTarget; zone_vertices is empty and to_face_index is 0 when no
        face other than the resting face contains the edge
    """
    if faces is None:
        faces = world_faces(definition, pose)
    resting = faces[resting_face_index(definition, pose.quaternion) - 1]

    pivot = (edge_v1 + edge_v2) / 2
    center = floor_center(pose)
    to_pivot = (pivot - center).at[1].set(0.0)
    axis = normalize(jnp.cross(UP, normalize(to_pivot)))
    direction_angle = float(jnp.arctan2(to_pivot[2], to_pivot[0]))

    adjacent = find_adjacent_face(faces, resting, edge_v1, edge_v2,
                                  tolerance=WORLD_VERTEX_TOLERANCE)
    if adjacent is None:
        zone = jnp.zeros((0, 3))
        to_face = 0
    else:
        zone = jnp.stack([
            pivot + rotate_about_axis(v - pivot, axis, definition.roll_angle)
            for v in adjacent.vertices
        ]).at[:, 1].set(0.0)
        to_face = adjacent.index

    return RollTarget(
        axis=axis,
        point=pivot,
        target_center=center + 2.0 * to_pivot,
        direction_angle=direction_angle,
        zone_vertices=zone,
        from_face_index=resting.index,
        to_face_index=to_face,
    )


def compute_roll_targets(definition: PolyhedronDefinition, pose: Pose) -> List[RollTarget]:
    """Every edge of the resting face the solid can tip over.

    The ground polygon is walked along the resting face's own edge list, so
    targets come out in boundary order, one per ground edge that has a
    neighbouring face.
    """
    faces = world_faces(definition, pose)
    resting = faces[resting_face_index(definition, pose.quaternion) - 1]

    targets = []
    for i in range(resting.edge_count):
        v1, v2 = resting.edge(i)
        target = roll_target_from_edge(definition, pose, v1, v2, faces=faces)
        if target.to_face_index == 0:
            logger.warning("roll_edge_without_neighbor",
                           shape=definition.id, face=resting.index, edge=i)
            continue
        targets.append(target)

    logger.debug("roll_targets_computed", shape=definition.id,
                 resting_face=resting.index, count=len(targets))
    return targets


def ease_out(progress: float) -> float:
    """Quadratic ease-out t(2 - t) of a progress fraction clamped to [0, 1]."""
    t = min(max(float(progress), 0.0), 1.0)
    return t * (2.0 - t)


def interpolate_roll(start: Pose,
                     axis: jnp.ndarray,
                     pivot: jnp.ndarray,
                     angle: float,
                     progress: float) -> Pose:
    """Pose part-way through a roll.

    Args:
        start: Pose before the roll
        axis: Roll axis
        pivot: Point on the axis
        angle: Full roll angle in radians
        progress: Animation progress in [0, 1]; values outside are clamped

    Returns:
        Pose rotated by the eased fraction of `angle` about the pivot
    """
    q_rot = quat_from_axis_angle(axis, ease_out(progress) * angle)
    return Pose(
        position=pivot + quat_rotate(q_rot, start.position - pivot),
        quaternion=quat_normalize(quat_multiply(q_rot, start.quaternion)),
    )


def apply_roll(definition: PolyhedronDefinition, pose: Pose, target: RollTarget) -> Pose:
    """Complete a roll over `target`."""
    return interpolate_roll(pose, target.axis, target.point, definition.roll_angle, 1.0)
