"""The unrolled comparison path: the same program drawn on the floor plane."""

import jax.numpy as jnp
from typing import List, Sequence

from polyhedra_core import (
    DOWN,
    get_polyhedron,
    normalize,
    quat_rotate,
    rotate_about_axis,
    vec3,
)

from .config import WalkConfig, DEFAULT_WALK_CONFIG
from .path_types import TurtleCommand, PathSegment
from .surface_walk import initial_heading


def generate_flat_path(shape_id: str,
                       commands: Sequence[TurtleCommand],
                       config: WalkConfig = DEFAULT_WALK_CONFIG) -> List[PathSegment]:
    """Interpret a program on the world XZ plane, never leaving it.

    The starting heading is the surface walk's initial heading placed in the
    world by the shape's initial orientation, and turns are taken about the
    world down axis, which is where face 1 points when the solid rests. Step
    lengths and turn angles therefore match the surface walk exactly.

    Args:
        shape_id: Registry id of the shape
        commands: Parsed program
        config: Supplies the height of the plane above the floor

    Returns:
        Segments of at least two points
    """
    definition = get_polyhedron(shape_id)
    start_face = definition.get_face(1)
    if start_face is None:
        return []

    world_heading = normalize(quat_rotate(definition.initial_quaternion,
                                          initial_heading(start_face)))
    origin = vec3(0.0, config.flat_height, 0.0)

    pos = origin
    heading = world_heading
    segments = []
    current = [pos]

    for command in commands:
        if command.kind == 'start':
            x, y = command.value
            heading = world_heading
            right = normalize(jnp.cross(heading, DOWN))
            pos = origin + x * heading + y * right
            if len(current) > 1:
                segments.append(PathSegment(points=jnp.stack(current)))
            current = [pos]

        elif command.kind in ('lt', 'rt'):
            angle = jnp.deg2rad(command.value)
            heading = rotate_about_axis(heading, DOWN, angle if command.kind == 'lt' else -angle)

        elif command.kind in ('fd', 'bk'):
            distance = command.value if command.kind == 'fd' else -command.value
            pos = pos + distance * heading
            current.append(pos)

    if len(current) > 1:
        segments.append(PathSegment(points=jnp.stack(current)))
    return segments
