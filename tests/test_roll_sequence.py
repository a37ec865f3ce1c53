"""Tests for replaying a surface path as rolls."""

import jax.numpy as jnp
import pytest

from polyhedra_core import get_polyhedron
from rolling import (
    initial_pose,
    plan_roll_sequence,
    resting_face_index,
    roll_target_for_crossing,
)
from turtle_path import EdgeCrossing, generate_path, parse_commands


def _replay(shape_id, program):
    definition = get_polyhedron(shape_id)
    result = generate_path(shape_id, parse_commands(program))
    return definition, result, plan_roll_sequence(definition, result.edge_rolls)


class TestRollTargetForCrossing:
    def test_ground_edge(self):
        definition, result, _ = _replay('cube', "fd 1")
        target = roll_target_for_crossing(definition, initial_pose(definition),
                                          result.edge_rolls[0])
        assert target is not None
        assert target.to_face_index == 4
        assert jnp.allclose(target.point, jnp.array([0.5, 0.0, 0.0]))

    def test_edge_off_the_ground(self):
        cube = get_polyhedron('cube')
        top = cube.get_face(6)
        v1, v2 = top.edge(0)
        crossing = EdgeCrossing(
            from_face_index=6, to_face_index=4, edge_index=0,
            edge_vertices=jnp.stack([v1, v2]), crossing_point=(v1 + v2) / 2,
            segment_index=0, point_index=1,
        )
        assert roll_target_for_crossing(cube, initial_pose(cube), crossing) is None


class TestPlanRollSequence:
    def test_each_roll_lands_next_face(self):
        _, result, steps = _replay('cube', "fd 4\nrt 90\nfd 1")
        assert len(steps) == len(result.edge_rolls)
        for step in steps:
            assert step.resting_face_index == step.crossing.to_face_index

    def test_straight_line_moves(self):
        _, _, steps = _replay('cube', "fd 3")
        assert [step.move.label for step in steps] == ['+X', '+X', '+X']
        assert jnp.allclose(steps[-1].pose.position, jnp.array([3.0, 0.5, 0.0]))

    def test_square_loop_returns_to_origin(self):
        program = "start -0.25 0.25\nfd 1\nrt 90\nfd 1\nrt 90\nfd 1\nrt 90\nfd 1"
        _, result, steps = _replay('cube', program)
        assert result.error is None
        total = tuple(map(sum, zip(*(step.move.delta for step in steps))))
        assert total == (0, 0)

    @pytest.mark.parametrize('shape_id', ['octahedron', 'tetrahedron', 'icosahedron',
                                          'dodecahedron', 'dc_triangle', 'dc_square', 'dc_hexagon'])
    def test_final_face_matches_path(self, shape_id):
        definition, result, steps = _replay(shape_id, "start 0.03 0.02\nlt 11\nfd 2")
        assert result.error is None
        assert len(steps) == len(result.edge_rolls)
        assert steps
        last = result.edge_rolls[-1].to_face_index
        assert resting_face_index(definition, steps[-1].pose.quaternion) == last

    def test_unmatched_crossing_is_skipped(self):
        cube = get_polyhedron('cube')
        top = cube.get_face(6)
        v1, v2 = top.edge(0)
        stray = EdgeCrossing(
            from_face_index=6, to_face_index=4, edge_index=0,
            edge_vertices=jnp.stack([v1, v2]), crossing_point=(v1 + v2) / 2,
            segment_index=0, point_index=1,
        )
        assert plan_roll_sequence(cube, [stray]) == []

    def test_no_crossings(self):
        cube = get_polyhedron('cube')
        assert plan_roll_sequence(cube, []) == []
