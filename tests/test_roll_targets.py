"""Tests for the roll-target solver and roll kinematics."""

import math

import jax.numpy as jnp
import pytest

from polyhedra_core import SHAPE_IDS, get_polyhedron, transform_points
from rolling import (
    Pose,
    apply_roll,
    bottom_face,
    compute_roll_targets,
    ease_out,
    initial_pose,
    interpolate_roll,
    lowest_vertices,
    resting_face_index,
)


def _target_by_label(definition, pose, label):
    for target in compute_roll_targets(definition, pose):
        if definition.get_move_data(target.direction_angle).label == label:
            return target
    raise AssertionError(f"no roll target labelled {label}")


class TestInitialPose:
    @pytest.mark.parametrize('shape_id', SHAPE_IDS)
    def test_rests_on_face_one(self, shape_id):
        definition = get_polyhedron(shape_id)
        pose = initial_pose(definition)
        assert resting_face_index(definition, pose.quaternion) == 1
        assert bottom_face(definition, pose).index == 1

    def test_lowest_vertices_on_floor(self):
        definition = get_polyhedron('icosahedron')
        lowest = lowest_vertices(definition, initial_pose(definition))
        assert lowest.shape == (3, 3)
        assert jnp.allclose(lowest[:, 1], 0.0, atol=1e-9)


class TestComputeRollTargets:
    @pytest.mark.parametrize('shape_id', SHAPE_IDS)
    def test_one_target_per_ground_edge(self, shape_id):
        definition = get_polyhedron(shape_id)
        targets = compute_roll_targets(definition, initial_pose(definition))
        assert len(targets) == definition.get_bottom_vertex_count()

    @pytest.mark.parametrize('shape_id', SHAPE_IDS)
    def test_axes_are_horizontal_units(self, shape_id):
        definition = get_polyhedron(shape_id)
        for target in compute_roll_targets(definition, initial_pose(definition)):
            assert float(target.axis[1]) == pytest.approx(0.0, abs=1e-9)
            assert float(jnp.linalg.norm(target.axis)) == pytest.approx(1.0)
            assert float(target.point[1]) == pytest.approx(0.0, abs=1e-9)

    @pytest.mark.parametrize('shape_id', SHAPE_IDS)
    def test_roll_lands_adjacent_face(self, shape_id):
        definition = get_polyhedron(shape_id)
        pose = initial_pose(definition)
        for target in compute_roll_targets(definition, pose):
            rolled = apply_roll(definition, pose, target)
            assert resting_face_index(definition, rolled.quaternion) == target.to_face_index
            assert target.from_face_index == 1

            landed = definition.get_face(target.to_face_index)
            world = transform_points(landed.vertices, rolled.position, rolled.quaternion)
            assert jnp.allclose(world[:, 1], 0.0, atol=1e-6)

    @pytest.mark.parametrize('shape_id', SHAPE_IDS)
    def test_zone_matches_landing_footprint(self, shape_id):
        definition = get_polyhedron(shape_id)
        pose = initial_pose(definition)
        for target in compute_roll_targets(definition, pose):
            rolled = apply_roll(definition, pose, target)
            landed = definition.get_face(target.to_face_index)
            world = transform_points(landed.vertices, rolled.position, rolled.quaternion)
            assert target.zone_vertices.shape == world.shape
            assert jnp.allclose(target.zone_vertices, world.at[:, 1].set(0.0), atol=1e-6)

    def test_cube_targets(self):
        cube = get_polyhedron('cube')
        targets = compute_roll_targets(cube, initial_pose(cube))
        labels = [cube.get_move_data(t.direction_angle).label for t in targets]
        assert labels == ['+X', '+Z', '-X', '-Z']
        assert [t.to_face_index for t in targets] == [4, 2, 3, 5]
        assert jnp.allclose(targets[0].point, jnp.array([0.5, 0.0, 0.0]))
        assert jnp.allclose(targets[0].target_center, jnp.array([1.0, 0.0, 0.0]))
        assert jnp.allclose(targets[0].axis, jnp.array([0.0, 0.0, -1.0]))
        assert targets[1].direction_angle == pytest.approx(math.pi / 2)

    def test_doubly_covered_flips_to_other_face(self):
        definition = get_polyhedron('dc_square')
        targets = compute_roll_targets(definition, initial_pose(definition))
        assert {t.to_face_index for t in targets} == {2}

    def test_hexagon_moves_distinct_in_every_pose(self):
        hexagon = get_polyhedron('dc_hexagon')
        start = initial_pose(hexagon)
        poses = [start] + [apply_roll(hexagon, start, t)
                           for t in compute_roll_targets(hexagon, start)]
        for pose in poses:
            labels = {hexagon.get_move_data(t.direction_angle).label
                      for t in compute_roll_targets(hexagon, pose)}
            assert len(labels) == 6


class TestRollExecution:
    def test_cube_roll_east(self):
        cube = get_polyhedron('cube')
        pose = initial_pose(cube)
        rolled = apply_roll(cube, pose, _target_by_label(cube, pose, '+X'))
        assert jnp.allclose(rolled.position, jnp.array([1.0, 0.5, 0.0]))
        assert float(jnp.linalg.norm(rolled.quaternion)) == pytest.approx(1.0)

    def test_cube_loop_returns_home(self):
        cube = get_polyhedron('cube')
        pose = initial_pose(cube)
        total = [0, 0]
        for label in ('+X', '+Z', '-X', '-Z'):
            target = _target_by_label(cube, pose, label)
            du, dv = cube.get_move_data(target.direction_angle).delta
            total[0] += du
            total[1] += dv
            pose = apply_roll(cube, pose, target)
        assert total == [0, 0]
        assert jnp.allclose(pose.position, initial_pose(cube).position, atol=1e-9)

    def test_doubly_covered_double_flip_restores_face(self):
        definition = get_polyhedron('dc_triangle')
        pose = initial_pose(definition)
        first = compute_roll_targets(definition, pose)[0]
        pose = apply_roll(definition, pose, first)
        assert resting_face_index(definition, pose.quaternion) == 2

        back = min(compute_roll_targets(definition, pose),
                   key=lambda t: float(jnp.linalg.norm(t.point - first.point)))
        pose = apply_roll(definition, pose, back)
        assert resting_face_index(definition, pose.quaternion) == 1
        assert jnp.allclose(pose.position, initial_pose(definition).position, atol=1e-9)


# Footprints around a ground vertex close up after 360 / corner-angle rolls;
# pentagons need 10 since 10 * 108 is a whole number of turns
VERTEX_LOOP_ROLLS = {
    'cube': 4,
    'octahedron': 6,
    'tetrahedron': 6,
    'icosahedron': 6,
    'dodecahedron': 10,
    'dc_triangle': 6,
    'dc_square': 4,
    'dc_hexagon': 3,
}


class TestVertexLoops:
    @pytest.mark.parametrize('shape_id', SHAPE_IDS)
    def test_rolling_around_a_vertex_returns_home(self, shape_id):
        definition = get_polyhedron(shape_id)
        pose = initial_pose(definition)
        # flat shapes mirror their height on each flip, so compare on the floor
        home = pose.position[::2]
        # the pivot vertex stays on the axis of every roll, so it never moves
        vertex = lowest_vertices(definition, pose)[0]

        total = [0, 0]
        previous = None
        rolls = 0
        while rolls < 12:
            nearest = sorted(compute_roll_targets(definition, pose),
                             key=lambda t: float(jnp.linalg.norm(t.point - vertex)))[:2]
            # keep turning the same way: never tip back over the edge just used
            target = next(t for t in nearest
                          if previous is None or float(jnp.linalg.norm(t.point - previous)) > 1e-6)
            du, dv = definition.get_move_data(target.direction_angle).delta
            total[0] += du
            total[1] += dv
            pose = apply_roll(definition, pose, target)
            previous = target.point
            rolls += 1
            if jnp.allclose(pose.position[::2], home, atol=1e-6):
                break

        assert rolls == VERTEX_LOOP_ROLLS[shape_id]
        assert jnp.allclose(pose.position[::2], home, atol=1e-6)
        assert total == [0, 0]

    def test_every_shape_has_a_loop_length(self):
        assert set(VERTEX_LOOP_ROLLS) == set(SHAPE_IDS)


class TestInterpolation:
    def test_ease_out(self):
        assert ease_out(0.0) == 0.0
        assert ease_out(0.5) == pytest.approx(0.75)
        assert ease_out(1.0) == 1.0
        assert ease_out(-1.0) == 0.0
        assert ease_out(3.0) == 1.0

    def test_endpoints(self):
        cube = get_polyhedron('cube')
        pose = initial_pose(cube)
        target = compute_roll_targets(cube, pose)[0]

        start = interpolate_roll(pose, target.axis, target.point, cube.roll_angle, 0.0)
        assert jnp.allclose(start.position, pose.position)
        assert jnp.allclose(start.quaternion, pose.quaternion)

        end = interpolate_roll(pose, target.axis, target.point, cube.roll_angle, 1.0)
        assert jnp.allclose(end.position, apply_roll(cube, pose, target).position)

    def test_progress_is_clamped(self):
        cube = get_polyhedron('cube')
        pose = initial_pose(cube)
        target = compute_roll_targets(cube, pose)[0]
        late = interpolate_roll(pose, target.axis, target.point, cube.roll_angle, 2.0)
        end = interpolate_roll(pose, target.axis, target.point, cube.roll_angle, 1.0)
        assert jnp.allclose(late.position, end.position)

    def test_midway_keeps_distance_to_pivot(self):
        cube = get_polyhedron('cube')
        pose = initial_pose(cube)
        target = compute_roll_targets(cube, pose)[0]
        mid = interpolate_roll(pose, target.axis, target.point, cube.roll_angle, 0.5)
        radius = float(jnp.linalg.norm(pose.position - target.point))
        assert float(jnp.linalg.norm(mid.position - target.point)) == pytest.approx(radius)
        # eased to three quarters of the way, so the centre is past its highest point
        assert float(mid.position[1]) == pytest.approx(radius * math.sin(math.radians(67.5)))

    def test_pose_is_value(self):
        pose = Pose(position=jnp.zeros(3), quaternion=jnp.array([1.0, 0.0, 0.0, 0.0]))
        moved = interpolate_roll(pose, jnp.array([0.0, 0.0, 1.0]), jnp.array([1.0, 0.0, 0.0]),
                                 math.pi / 2, 1.0)
        assert jnp.allclose(pose.position, jnp.zeros(3))
        assert not jnp.allclose(moved.position, pose.position)
