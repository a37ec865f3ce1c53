"""Roll targets, roll kinematics and path replay for rolling polyhedra."""

from .roll_targets import (
    Pose,
    RollTarget,
    initial_pose,
    world_faces,
    resting_face_index,
    bottom_face,
    lowest_vertices,
    roll_target_from_edge,
    compute_roll_targets,
    ease_out,
    interpolate_roll,
    apply_roll
)

from .roll_sequence import (
    RollStep,
    roll_target_for_crossing,
    plan_roll_sequence
)

__all__ = [
    'Pose',
    'RollTarget',
    'initial_pose',
    'world_faces',
    'resting_face_index',
    'bottom_face',
    'lowest_vertices',
    'roll_target_from_edge',
    'compute_roll_targets',
    'ease_out',
    'interpolate_roll',
    'apply_roll',
    'RollStep',
    'roll_target_for_crossing',
    'plan_roll_sequence'
]
