"""Tests for the turtle_path command line."""

import io
import json

import jax.numpy as jnp
import pytest
import structlog

from polyhedra_core import get_polyhedron
from rolling import plan_roll_sequence
from turtle_path import EdgeCrossing
from turtle_path.__main__ import main


@pytest.fixture
def program(tmp_path):
    path = tmp_path / "square.turtle"
    path.write_text("start 0 0\nfd 1\nrt 90\nfd 0.3\n")
    return path


class TestShapes:
    def test_lists_every_shape(self, capsys):
        assert main(['shapes']) == 0
        out = capsys.readouterr().out
        for shape_id in ('cube', 'dodecahedron', 'dc_hexagon'):
            assert shape_id in out


class TestRun:
    def test_json_output(self, program, capsys):
        assert main(['run', str(program), '--shape', 'cube']) == 0
        document = json.loads(capsys.readouterr().out)
        assert document['shape'] == 'cube'
        assert document['error'] is None
        assert len(document['segments']) == 1
        assert document['edge_rolls'][0]['from_face'] == 1
        assert document['edge_rolls'][0]['to_face'] == 4
        assert 'flat_segments' not in document

    def test_optional_sections(self, program, capsys):
        assert main(['run', str(program), '--flat', '--crossings', '--rolls']) == 0
        document = json.loads(capsys.readouterr().out)
        assert len(document['flat_segments'][0]) == 3
        assert len(document['crossings']) == len(document['edge_rolls'])
        assert document['rolls'][0]['move'] == '+X'
        assert document['rolls'][0]['delta'] == [1, 0]
        assert document['rolls'][0]['resting_face'] == 4

    def test_stdin(self, monkeypatch, capsys):
        monkeypatch.setattr('sys.stdin', io.StringIO("fd 0.2\n"))
        assert main(['run', '-', '--shape', 'tetrahedron']) == 0
        document = json.loads(capsys.readouterr().out)
        assert document['shape'] == 'tetrahedron'
        assert len(document['segments'][0]) == 2

    def test_vertex_error_exit_status(self, tmp_path, capsys):
        path = tmp_path / "corner.turtle"
        path.write_text("start 0 0.48\nlt 2\nfd 1\n")
        assert main(['run', str(path)]) == 1
        document = json.loads(capsys.readouterr().out)
        assert document['error'] == {'message': 'Path reached a vertex', 'line_number': 3}

    def test_missing_file(self, tmp_path, capsys):
        assert main(['run', str(tmp_path / 'nope.turtle')]) == 1
        assert 'File not found' in capsys.readouterr().err

    def test_unknown_shape_rejected(self, program):
        with pytest.raises(SystemExit):
            main(['run', str(program), '--shape', 'sphere'])


class TestLoggingAfterRun:
    # runs after the TestRun cases, whose captured stderr is closed by now
    def test_warnings_still_log(self):
        cube = get_polyhedron('cube')
        v1, v2 = cube.get_face(6).edge(0)
        stray = EdgeCrossing(
            from_face_index=6, to_face_index=4, edge_index=0,
            edge_vertices=jnp.stack([v1, v2]), crossing_point=(v1 + v2) / 2,
            segment_index=0, point_index=1,
        )
        assert plan_roll_sequence(cube, [stray]) == []
        assert not structlog.is_configured()
