#!/usr/bin/env python3
"""
CLI for running turtle programs on rolling polyhedra.

Usage:
    python -m turtle_path shapes
    python -m turtle_path run PROGRAM [--shape ID] [--flat] [--crossings] [--rolls] [--verbose]

PROGRAM is a file with one command per line, or '-' to read stdin. The run
command prints a JSON document with the surface path and, on request, the
flat comparison path, the reconstructed edge crossings and the roll replay.

Examples:
    # List the shape ids
    python -m turtle_path shapes

    # Walk a square on the cube and replay it as rolls
    python -m turtle_path run square.turtle --shape cube --rolls
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import numpy as np
import structlog

from polyhedra_core import POLYHEDRA, SHAPE_IDS, get_polyhedron
from rolling import plan_roll_sequence

from .commands import parse_commands
from .edge_crossings import extract_edge_crossings
from .flat_path import generate_flat_path
from .path_types import EdgeCrossing, PathSegment
from .surface_walk import generate_path


def configure_logging(verbose: bool = False):
    """Console logging on stderr, so stdout carries only the JSON output."""
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.DEBUG if verbose else logging.WARNING),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )


def _points(array) -> List[List[float]]:
    return np.asarray(array).tolist()


def segments_to_json(segments: List[PathSegment]) -> List[List[List[float]]]:
    return [_points(segment.points) for segment in segments]


def crossing_to_json(crossing: EdgeCrossing) -> Dict[str, Any]:
    return {
        'from_face': crossing.from_face_index,
        'to_face': crossing.to_face_index,
        'edge_index': crossing.edge_index,
        'edge_vertices': _points(crossing.edge_vertices),
        'crossing_point': _points(crossing.crossing_point),
        'segment_index': crossing.segment_index,
        'point_index': crossing.point_index,
    }


def cmd_shapes(args):
    """List the registered shapes."""
    for shape_id in SHAPE_IDS:
        definition = POLYHEDRA[shape_id]
        print(f"{shape_id:14s} {definition.name:14s} faces={definition.face_count} "
              f"lattice={definition.lattice_type}")
    return 0


def cmd_run(args):
    """Run a turtle program and print the result as JSON."""
    if args.program == '-':
        source = sys.stdin.read()
    else:
        source_path = Path(args.program)
        if not source_path.exists():
            print(f"Error: File not found: {source_path}", file=sys.stderr)
            return 1
        source = source_path.read_text()

    try:
        definition = get_polyhedron(args.shape)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    commands = parse_commands(source)
    result = generate_path(definition.id, commands)

    output: Dict[str, Any] = {
        'shape': definition.id,
        'segments': segments_to_json(result.segments),
        'edge_rolls': [crossing_to_json(c) for c in result.edge_rolls],
        'error': None,
    }
    if result.error is not None:
        output['error'] = {
            'message': result.error.message,
            'line_number': result.error.line_number,
        }

    if args.flat:
        output['flat_segments'] = segments_to_json(generate_flat_path(definition.id, commands))

    if args.crossings:
        crossings = extract_edge_crossings(definition.id, result.segments)
        output['crossings'] = [crossing_to_json(c) for c in crossings]

    if args.rolls:
        steps = plan_roll_sequence(definition, result.edge_rolls)
        output['rolls'] = [
            {
                'move': step.move.label,
                'delta': list(step.move.delta),
                'from_face': step.target.from_face_index,
                'to_face': step.target.to_face_index,
                'resting_face': step.resting_face_index,
                'position': _points(step.pose.position),
                'quaternion': _points(step.pose.quaternion),
            }
            for step in steps
        ]

    print(json.dumps(output, indent=2))
    return 1 if result.error is not None else 0


def main(argv: Optional[List[str]] = None):
    parser = argparse.ArgumentParser(
        prog='python -m turtle_path',
        description='Turtle paths on the surface of rolling polyhedra',
    )

    subparsers = parser.add_subparsers(dest='action', required=True)

    subparsers.add_parser('shapes', help='List available shapes')

    run_parser = subparsers.add_parser('run', help='Run a turtle program')
    run_parser.add_argument('program', help="Program file, or '-' for stdin")
    run_parser.add_argument('-s', '--shape', default='cube', choices=SHAPE_IDS,
                            help='Shape to walk on (default: cube)')
    run_parser.add_argument('--flat', action='store_true',
                            help='Include the unrolled comparison path')
    run_parser.add_argument('--crossings', action='store_true',
                            help='Include crossings reconstructed from the path geometry')
    run_parser.add_argument('--rolls', action='store_true',
                            help='Include the roll replay of the path')
    run_parser.add_argument('-v', '--verbose', action='store_true',
                            help='Log debug events to stderr')

    args = parser.parse_args(argv)
    configure_logging(getattr(args, 'verbose', False))

    if args.action == 'shapes':
        return cmd_shapes(args)
    elif args.action == 'run':
        return cmd_run(args)
    else:
        parser.print_help()
        return 1


if __name__ == '__main__':
    sys.exit(main())
