"""Replay of a surface path as a sequence of rolls.

Each edge crossing of a turtle path names an edge of the face the turtle is
leaving. If the solid rests on that face, the edge lies on the ground and
rolling over it puts the next face of the path down, so the whole path can
be traced on the floor lattice one roll at a time.
"""

import jax.numpy as jnp
import structlog
from typing import NamedTuple, List, Optional, Sequence

from polyhedra_core import PolyhedronDefinition, MoveData, transform_points
from turtle_path.path_types import EdgeCrossing

from .roll_targets import (
    Pose,
    RollTarget,
    initial_pose,
    lowest_vertices,
    roll_target_from_edge,
    apply_roll,
    resting_face_index,
)

logger = structlog.get_logger(__name__)


class RollStep(NamedTuple):
    """One replayed roll.

    Attributes:
        crossing: Edge crossing that triggered the roll
        target: Roll target that was executed
        move: Lattice move label and (u, v) delta of the roll
        pose: Pose after the roll
        resting_face_index: Face on the ground after the roll
    """
    crossing: EdgeCrossing
    target: RollTarget
    move: MoveData
    pose: Pose
    resting_face_index: int


def roll_target_for_crossing(definition: PolyhedronDefinition,
                             pose: Pose,
                             crossing: EdgeCrossing,
                             tolerance: float = 0.01) -> Optional[RollTarget]:
    """Roll target for the ground edge matching a crossing's edge, if any.

    The crossing's object-space edge is placed with `pose` and compared with
    the lowest vertices; the first two ground vertices that coincide with an
    edge endpoint define the pivot edge.
    """
    edge = transform_points(jnp.asarray(crossing.edge_vertices), pose.position, pose.quaternion)
    matches = []
    for vertex in lowest_vertices(definition, pose):
        distances = jnp.linalg.norm(edge - vertex[None, :], axis=-1)
        if bool(jnp.any(distances < tolerance)):
            matches.append(vertex)
        if len(matches) == 2:
            break

    if len(matches) < 2:
        return None
    return roll_target_from_edge(definition, pose, matches[0], matches[1])


def plan_roll_sequence(definition: PolyhedronDefinition,
                       crossings: Sequence[EdgeCrossing],
                       start_pose: Optional[Pose] = None) -> List[RollStep]:
    """Roll the solid across every crossing in order.

    Args:
        definition: Shape to roll
        crossings: Edge crossings of a path, in path order
        start_pose: Pose to start from; the initial resting pose by default

    Returns:
        One RollStep per crossing whose edge was on the ground. Crossings
        whose edge is not on the ground are skipped and logged.
    """
    pose = start_pose if start_pose is not None else initial_pose(definition)
    steps = []

    for crossing in crossings:
        target = roll_target_for_crossing(definition, pose, crossing)
        if target is None:
            logger.warning("replay_edge_unmatched", shape=definition.id,
                           from_face=crossing.from_face_index,
                           to_face=crossing.to_face_index,
                           resting_face=resting_face_index(definition, pose.quaternion))
            continue

        pose = apply_roll(definition, pose, target)
        steps.append(RollStep(
            crossing=crossing,
            target=target,
            move=definition.get_move_data(target.direction_angle),
            pose=pose,
            resting_face_index=resting_face_index(definition, pose.quaternion),
        ))

    logger.debug("roll_sequence_planned", shape=definition.id,
                 crossings=len(crossings), rolls=len(steps))
    return steps
