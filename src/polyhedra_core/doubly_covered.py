"""
Doubly covered regular k-gons: flat, two-faced degenerate polyhedra.

A doubly covered polygon is a regular k-gon whose two sides are both faces.
The faces share one centre and one vertex set but have opposite normals, so
the dihedral angle between them is 0 and a roll is a 180 degree flip over
one edge. Each polygon is placed so its vertices coincide with the vertices
of the matching floor lattice:

- k = 3 on the triangular lattice
- k = 4 on the square lattice
- k = 6 on the hexagonal lattice

Geometry is exact (no visual offset between the two faces); renderers that
need to separate them do so on their side.
"""

import jax.numpy as jnp
from typing import NamedTuple, Tuple, Callable

from .definition import (
    PolyhedronDefinition, Face, MoveTable, OrientationTable,
    make_face, validate_definition,
    VERTEX_COLORS, GRID_COLOR_1, GRID_COLOR_2,
)
from .vector_math import vec3, IDENTITY_QUATERNION

EDGE_LENGTH = 1.0
TRIANGLE_HEIGHT = EDGE_LENGTH * float(jnp.sqrt(3.0)) / 2
TRIANGLE_INRADIUS = TRIANGLE_HEIGHT / 3
SQUARE_INRADIUS = EDGE_LENGTH / 2
HEX_INRADIUS = EDGE_LENGTH * float(jnp.sqrt(3.0)) / 2
HEX_CIRCUMRADIUS = EDGE_LENGTH

# Face 1 looks down, face 2 looks up
DC_FACE_CENTERS = jnp.array([[0, -1, 0], [0, 1, 0]], dtype=jnp.float64)

DC_FACE_PALETTE = (GRID_COLOR_1, GRID_COLOR_2)

# Flat shapes have a single twist class
DC_ORIENTATIONS = OrientationTable(sector_degrees=360.0, labels=('X',))


class KGonConfig(NamedTuple):
    """Per-polygon data for the doubly covered k-gon factory.

    Attributes:
        k: Number of polygon vertices
        id: Registry key
        name: Display name
        lattice_type: Floor lattice the polygon tiles
        vertices: (k, 3) vertices at y = -inradius, CCW seen from below
        inradius: Height of the body origin above the polygon plane
        vertex_palette: Palette for vertices and lattice vertices
        vertex_color_indices: Palette index per polygon vertex
        lattice_coloring: (i, j) -> palette index of a lattice vertex
        move_table: Direction-to-flip quantisation
    """
    k: int
    id: str
    name: str
    lattice_type: str
    vertices: jnp.ndarray
    inradius: float
    vertex_palette: Tuple[str, ...]
    vertex_color_indices: Tuple[int, ...]
    lattice_coloring: Callable[[int, int], int]
    move_table: MoveTable


def _doubly_covered_faces(vertices: jnp.ndarray, inradius: float) -> Tuple[Face, ...]:
    center = vec3(0.0, -inradius, 0.0)
    bottom = make_face(1, center, vec3(0.0, -1.0, 0.0), list(vertices))
    top = make_face(2, center, vec3(0.0, 1.0, 0.0), list(vertices[::-1]))
    return bottom, top


def create_doubly_covered_kgon(config: KGonConfig) -> PolyhedronDefinition:
    """Build the two-faced definition of a flat regular k-gon."""
    palette = config.vertex_palette

    return validate_definition(PolyhedronDefinition(
        id=config.id,
        name=config.name,
        face_count=2,
        vertex_count=config.k,
        vertices=config.vertices,
        faces=_doubly_covered_faces(config.vertices, config.inradius),
        face_centers=DC_FACE_CENTERS,
        inradius=config.inradius,
        dihedral_angle=0.0,
        roll_angle=float(jnp.pi),
        edge_length=EDGE_LENGTH,
        face_palette=DC_FACE_PALETTE,
        face_colors=DC_FACE_PALETTE,
        vertex_colors=tuple(palette[i] for i in config.vertex_color_indices),
        face_label_size=0.25,
        vertex_sphere_radius=0.08,
        initial_position=vec3(0.0, config.inradius, 0.0),
        initial_quaternion=IDENTITY_QUATERNION,
        lattice_type=config.lattice_type,
        movement_sectors=len(config.move_table.entries),
        sector_angle=config.move_table.sector_angle,
        bottom_vertex_count=config.k,
        move_table=config.move_table,
        orientation_table=DC_ORIENTATIONS,
        lattice_coloring=lambda i, j: palette[config.lattice_coloring(i, j)],
    ))


# ---------------------------------------------------------------------------
# Doubly covered triangle (k = 3)
# ---------------------------------------------------------------------------

# Matches an upward-pointing cell of the triangular floor lattice
DC_TRIANGLE_VERTICES = jnp.array([
    [0, -TRIANGLE_INRADIUS, -TRIANGLE_HEIGHT * 2 / 3],
    [EDGE_LENGTH / 2, -TRIANGLE_INRADIUS, TRIANGLE_HEIGHT / 3],
    [-EDGE_LENGTH / 2, -TRIANGLE_INRADIUS, TRIANGLE_HEIGHT / 3],
], dtype=jnp.float64)

# A flip alternates the triangle between its two orientations, so six
# directions occur across consecutive moves
DC_TRIANGLE_MOVES = MoveTable(
    offset=float(jnp.pi) / 6,
    sector_angle=float(jnp.pi) / 3,
    entries=(
        ('FLIP-0', (1, 1)),
        ('FLIP-1', (0, 1)),
        ('FLIP-2', (-1, 0)),
        ('FLIP-3', (-1, -1)),
        ('FLIP-4', (0, -1)),
        ('FLIP-5', (1, 0)),
    ),
)

DC_TRIANGLE = KGonConfig(
    k=3,
    id='dc_triangle',
    name='DC Triangle',
    lattice_type='triangular',
    vertices=DC_TRIANGLE_VERTICES,
    inradius=TRIANGLE_INRADIUS,
    vertex_palette=(VERTEX_COLORS[0], VERTEX_COLORS[1], VERTEX_COLORS[2]),
    vertex_color_indices=(2, 0, 1),
    lattice_coloring=lambda i, j: (2 + 2 * i + j) % 3,
    move_table=DC_TRIANGLE_MOVES,
)


# ---------------------------------------------------------------------------
# Doubly covered square (k = 4)
# ---------------------------------------------------------------------------

DC_SQUARE_VERTICES = jnp.array([
    [-EDGE_LENGTH / 2, -SQUARE_INRADIUS, -EDGE_LENGTH / 2],
    [EDGE_LENGTH / 2, -SQUARE_INRADIUS, -EDGE_LENGTH / 2],
    [EDGE_LENGTH / 2, -SQUARE_INRADIUS, EDGE_LENGTH / 2],
    [-EDGE_LENGTH / 2, -SQUARE_INRADIUS, EDGE_LENGTH / 2],
], dtype=jnp.float64)

DC_SQUARE_MOVES = MoveTable(
    offset=0.0,
    sector_angle=float(jnp.pi) / 2,
    entries=(
        ('FLIP-E', (1, 0)),
        ('FLIP-N', (0, 1)),
        ('FLIP-W', (-1, 0)),
        ('FLIP-S', (0, -1)),
    ),
)

DC_SQUARE = KGonConfig(
    k=4,
    id='dc_square',
    name='DC Square',
    lattice_type='square',
    vertices=DC_SQUARE_VERTICES,
    inradius=SQUARE_INRADIUS,
    vertex_palette=(VERTEX_COLORS[0], VERTEX_COLORS[1], VERTEX_COLORS[2], VERTEX_COLORS[4]),
    vertex_color_indices=(0, 2, 3, 1),
    lattice_coloring=lambda i, j: 2 * (i % 2) + (j % 2),
    move_table=DC_SQUARE_MOVES,
)


# ---------------------------------------------------------------------------
# Doubly covered hexagon (k = 6)
# ---------------------------------------------------------------------------

def _hexagon_vertices() -> jnp.ndarray:
    # Corners at 30, 90, ..., 330 degrees, matching the hexagonal lattice
    angles = jnp.pi / 6 + (jnp.pi / 3) * jnp.arange(6)
    return jnp.stack([
        HEX_CIRCUMRADIUS * jnp.cos(angles),
        jnp.full(6, -HEX_INRADIUS),
        HEX_CIRCUMRADIUS * jnp.sin(angles),
    ], axis=-1)


# Edge midpoints lie at multiples of 60 degrees, so every roll direction is
# a sector centre rather than a boundary between two sectors
DC_HEXAGON_MOVES = MoveTable(
    offset=0.0,
    sector_angle=float(jnp.pi) / 3,
    entries=(
        ('FLIP-E', (1, 0)),
        ('FLIP-NE', (1, -1)),
        ('FLIP-NW', (0, -1)),
        ('FLIP-W', (-1, 0)),
        ('FLIP-SW', (-1, 1)),
        ('FLIP-SE', (0, 1)),
    ),
)

DC_HEXAGON = KGonConfig(
    k=6,
    id='dc_hexagon',
    name='DC Hexagon',
    lattice_type='hexagonal',
    vertices=_hexagon_vertices(),
    inradius=HEX_INRADIUS,
    vertex_palette=(VERTEX_COLORS[0], VERTEX_COLORS[1]),
    vertex_color_indices=(0, 1, 0, 1, 0, 1),
    lattice_coloring=lambda i, j: i % 2,
    move_table=DC_HEXAGON_MOVES,
)


def create_all_doubly_covered() -> dict:
    """Create the doubly covered triangle, square and hexagon."""
    return {
        config.id: create_doubly_covered_kgon(config)
        for config in (DC_TRIANGLE, DC_SQUARE, DC_HEXAGON)
    }
