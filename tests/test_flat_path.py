"""Tests for the flat comparison path."""

import math

import jax.numpy as jnp
import pytest

from polyhedra_core import SHAPE_IDS
from turtle_path import generate_flat_path, generate_path, parse_commands


def _directions(points):
    steps = points[1:] - points[:-1]
    return steps / jnp.linalg.norm(steps, axis=-1, keepdims=True)


def _turn(a, b):
    return math.degrees(math.acos(max(-1.0, min(1.0, float(jnp.dot(a, b))))))


class TestFlatPath:
    def test_starts_above_origin(self):
        segments = generate_flat_path('cube', parse_commands("fd 1"))
        assert jnp.allclose(segments[0].points[0], jnp.array([0.0, 0.02, 0.0]))
        assert jnp.allclose(segments[0].points[1], jnp.array([1.0, 0.02, 0.0]))

    def test_stays_on_plane(self):
        program = "start 0.2 0.1\nfd 1\nlt 60\nfd 2\nrt 135\nbk 0.5"
        for shape_id in SHAPE_IDS:
            segments = generate_flat_path(shape_id, parse_commands(program))
            for segment in segments:
                assert jnp.allclose(segment.points[:, 1], 0.02)

    def test_step_lengths(self):
        segments = generate_flat_path('octahedron', parse_commands("fd 1\nrt 90\nfd 0.5\nbk 0.25"))
        points = segments[0].points
        lengths = jnp.linalg.norm(points[1:] - points[:-1], axis=-1)
        assert jnp.allclose(lengths, jnp.array([1.0, 0.5, 0.25]))

    def test_start_splits_segments(self):
        segments = generate_flat_path('cube', parse_commands("fd 1\nstart 0 0\nfd 1\nstart 1 1"))
        assert len(segments) == 2

    def test_empty_program(self):
        assert generate_flat_path('cube', []) == []

    def test_start_position(self):
        segments = generate_flat_path('cube', parse_commands("start 0.5 0.25\nfd 0.1"))
        # cube heading is +X and right is -Z
        assert jnp.allclose(segments[0].points[0], jnp.array([0.5, 0.02, -0.25]))


class TestMatchesSurfacePath:
    def test_same_motion_inside_face_one(self):
        program = parse_commands("start 0 0\nrt 90\nfd 0.3\nlt 45\nfd 0.1")
        surface = generate_path('cube', program).segments[0].points
        flat = generate_flat_path('cube', program)[0].points
        assert jnp.allclose(surface[:, [0, 2]], flat[:, [0, 2]])

    @pytest.mark.parametrize('shape_id', SHAPE_IDS)
    def test_turn_angles_match(self, shape_id):
        program = parse_commands("start 0 0\nfd 0.1\nlt 50\nfd 0.1\nrt 80\nfd 0.05")
        result = generate_path(shape_id, program)
        assert result.error is None
        assert result.edge_rolls == []

        surface = _directions(result.segments[0].points)
        flat = _directions(generate_flat_path(shape_id, program)[0].points)
        for i in range(2):
            assert _turn(surface[i], surface[i + 1]) == pytest.approx(
                _turn(flat[i], flat[i + 1]), abs=1e-6)

    def test_step_lengths_match_across_an_edge(self):
        program = parse_commands("fd 0.75\nrt 90\nfd 0.2")
        result = generate_path('cube', program)
        surface = result.segments[0].points
        crossing = result.edge_rolls[0].point_index
        surface_lengths = jnp.linalg.norm(surface[1:] - surface[:-1], axis=-1)
        first_move = float(surface_lengths[0] + surface_lengths[crossing])

        flat = generate_flat_path('cube', program)[0].points
        flat_lengths = jnp.linalg.norm(flat[1:] - flat[:-1], axis=-1)
        assert first_move == pytest.approx(float(flat_lengths[0]))
        assert float(surface_lengths[-1]) == pytest.approx(float(flat_lengths[1]))
