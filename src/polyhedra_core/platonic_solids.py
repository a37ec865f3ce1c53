"""
The five Platonic solids as rollable shape definitions.

Every solid is built with unit edge length, centred on the origin, and comes
with the pose that rests face 1 on the floor plane y = 0. Face numbering is
fixed per solid and is the externally visible "face number":

- Cube: casino-die numbering, opposite faces sum to 7, face 1 down
- Octahedron: faces listed by the sign pattern of their normals
- Tetrahedron: face i is opposite vertex i
- Icosahedron: the standard 20-triangle index list
- Dodecahedron: faces discovered from the vertex coordinates

Lattice behaviour:
- The cube rolls on a square lattice (4 directions, 90 degree rolls)
- Octahedron, tetrahedron and icosahedron roll on a triangular lattice
- The dodecahedron's five roll directions do not tile; it has no lattice
"""

import jax
import jax.numpy as jnp
from typing import Tuple

from .definition import (
    PolyhedronDefinition, Face, MoveTable, OrientationTable, ShapeDefinitionError,
    make_face, validate_definition,
    SQUARE_MOVES, TRIANGULAR_MOVES, SQUARE_ORIENTATIONS, TRIANGULAR_ORIENTATIONS,
    VERTEX_COLORS, GRID_COLOR_1, GRID_COLOR_2, GRID_COLOR_3, GRID_COLOR_4,
    NEUTRAL_LATTICE_COLOR,
)
from .face_discovery import discover_faces, color_faces
from .vector_math import PHI, normalize, vec3, basis_change_quaternion

EDGE_LENGTH = 1.0

# World frame the initial orientations are expressed in
WORLD_RIGHT = vec3(1.0, 0.0, 0.0)
WORLD_DOWN = vec3(0.0, -1.0, 0.0)
WORLD_FORWARD = vec3(0.0, 0.0, 1.0)
WORLD_BACK = vec3(0.0, 0.0, -1.0)


def _down_right_quaternion(down: jnp.ndarray, right: jnp.ndarray) -> jnp.ndarray:
    """Orientation taking object-space `down` to world -Y and `right` to world +X."""
    down = normalize(down)
    right = normalize(right)
    forward = normalize(jnp.cross(down, right))
    return basis_change_quaternion((right, down, forward),
                                   (WORLD_RIGHT, WORLD_DOWN, WORLD_FORWARD))


def _down_back_quaternion(down: jnp.ndarray, back: jnp.ndarray) -> jnp.ndarray:
    """Orientation taking object-space `down` to world -Y and `back` to world -Z."""
    down = normalize(down)
    back = normalize(back)
    right = normalize(jnp.cross(down, back))
    world_right = normalize(jnp.cross(WORLD_DOWN, WORLD_BACK))
    return basis_change_quaternion((right, down, back),
                                   (world_right, WORLD_DOWN, WORLD_BACK))


def _face_centered_quaternion(face: Face) -> jnp.ndarray:
    """Rest `face` on the floor with its first vertex pointing to world -Z."""
    return _down_back_quaternion(face.normal, face.vertices[0] - face.center)


# ---------------------------------------------------------------------------
# Cube
# ---------------------------------------------------------------------------

CUBE_INRADIUS = EDGE_LENGTH / 2

# Right-handed casino die: 1 down, 2 forward, 3 left, opposite faces sum to 7
CUBE_FACE_CENTERS = jnp.array([
    [0, -1, 0],   # 1 down
    [0, 0, 1],    # 2 forward
    [-1, 0, 0],   # 3 left
    [1, 0, 0],    # 4 right
    [0, 0, -1],   # 5 back
    [0, 1, 0],    # 6 up
], dtype=jnp.float64)

CUBE_FACE_PALETTE = ('#f87171', '#60a5fa', '#34d399', '#fbbf24', '#a78bfa', '#f472b6')

CUBE_EDGES = (
    (0, 1), (1, 2), (2, 3), (3, 0),
    (4, 5), (5, 6), (6, 7), (7, 4),
    (0, 4), (1, 5), (2, 6), (3, 7),
)


@jax.jit
def cube_vertices() -> jnp.ndarray:
    """Generate the 8 vertices of a unit-edge cube centred at origin.

    Returns:
        (8, 3) array of vertex coordinates
    """
    vertices = jnp.array([
        [-1, -1, -1], [1, -1, -1], [1, 1, -1], [-1, 1, -1],
        [-1, -1, 1], [1, -1, 1], [1, 1, 1], [-1, 1, 1],
    ], dtype=jnp.float64)
    return vertices * (EDGE_LENGTH / 2)


def cube_vertex_parity(vertex: jnp.ndarray) -> int:
    """Checkerboard class (0 or 1) of a cube vertex from its coordinate signs."""
    signs = jnp.sign(vertex)
    return int((float(jnp.sum(signs)) + 3) // 2) % 2


def _cube_faces(vertices: jnp.ndarray) -> Tuple[Face, ...]:
    faces = []
    for i, direction in enumerate(CUBE_FACE_CENTERS):
        normal = normalize(direction)
        center = direction * CUBE_INRADIUS
        face_verts = vertices[vertices @ normal > 0.1]

        # In-plane frame; (tangent, bitangent, normal) is right-handed so
        # ascending atan2 runs counter-clockwise about the normal
        up = vec3(1.0, 0.0, 0.0) if abs(float(normal[1])) > 0.9 else vec3(0.0, 1.0, 0.0)
        tangent = normalize(jnp.cross(normal, up))
        bitangent = normalize(jnp.cross(normal, tangent))
        offsets = face_verts - center
        angles = jnp.arctan2(offsets @ bitangent, offsets @ tangent)
        ordered = face_verts[jnp.argsort(angles)]

        faces.append(make_face(i + 1, center, normal, list(ordered)))
    return tuple(faces)


def _cube_marker_points(vertices: jnp.ndarray) -> jnp.ndarray:
    """Points marking each face's parity-1 to parity-0 edges, CCW about the face."""
    points = []
    for direction in CUBE_FACE_CENTERS:
        normal = normalize(direction)
        face_pos = direction * CUBE_INRADIUS
        on_face = {idx for idx in range(len(vertices))
                   if float(jnp.dot(vertices[idx], normal)) > 0.1}

        for i, j in CUBE_EDGES:
            if i not in on_face or j not in on_face:
                continue
            for start_idx, end_idx in ((i, j), (j, i)):
                start = vertices[start_idx]
                end = vertices[end_idx]
                if cube_vertex_parity(start) != 1 or cube_vertex_parity(end) != 0:
                    continue
                turn = jnp.cross(start - face_pos, end - face_pos)
                if float(jnp.dot(turn, normal)) > 0:
                    mid = 0.5 * (start + end)
                    points.append(mid + 0.5 * (face_pos - mid))
    return jnp.stack(points) if points else jnp.zeros((0, 3))


def create_cube() -> PolyhedronDefinition:
    """Create the die-numbered unit cube."""
    vertices = cube_vertices()

    return validate_definition(PolyhedronDefinition(
        id='cube',
        name='Cube',
        face_count=6,
        vertex_count=8,
        vertices=vertices,
        faces=_cube_faces(vertices),
        face_centers=CUBE_FACE_CENTERS,
        inradius=CUBE_INRADIUS,
        dihedral_angle=float(jnp.pi) / 2,
        roll_angle=float(jnp.pi) / 2,
        edge_length=EDGE_LENGTH,
        face_palette=CUBE_FACE_PALETTE,
        face_colors=CUBE_FACE_PALETTE,
        vertex_colors=tuple(VERTEX_COLORS[cube_vertex_parity(v)] for v in vertices),
        face_label_size=0.3,
        vertex_sphere_radius=0.07,
        initial_position=vec3(0.0, CUBE_INRADIUS, 0.0),
        initial_quaternion=jnp.array([1.0, 0.0, 0.0, 0.0]),
        lattice_type='square',
        movement_sectors=4,
        sector_angle=float(jnp.pi) / 2,
        bottom_vertex_count=4,
        move_table=SQUARE_MOVES,
        orientation_table=SQUARE_ORIENTATIONS,
        lattice_coloring=lambda i, j: VERTEX_COLORS[abs(i + j) % 2],
        markers=_cube_marker_points(vertices),
    ))


# ---------------------------------------------------------------------------
# Octahedron
# ---------------------------------------------------------------------------

OCTAHEDRON_RADIUS = EDGE_LENGTH / float(jnp.sqrt(2.0))
OCT_INRADIUS = EDGE_LENGTH / float(jnp.sqrt(6.0))
OCT_DIHEDRAL_ANGLE = float(jnp.arccos(-1.0 / 3.0))

OCT_FACE_CENTERS = jnp.array([
    [1, 1, 1], [-1, 1, 1], [1, -1, 1], [1, 1, -1],
    [-1, -1, 1], [-1, 1, -1], [1, -1, -1], [-1, -1, -1],
], dtype=jnp.float64)

OCT_FACE_PALETTE = (GRID_COLOR_1, GRID_COLOR_2)


@jax.jit
def octahedron_vertices() -> jnp.ndarray:
    """Generate the 6 vertices of a unit-edge octahedron on the coordinate axes.

    Returns:
        (6, 3) array ordered +X, -X, +Y, -Y, +Z, -Z
    """
    return jnp.array([
        [1, 0, 0], [-1, 0, 0],
        [0, 1, 0], [0, -1, 0],
        [0, 0, 1], [0, 0, -1],
    ], dtype=jnp.float64) * OCTAHEDRON_RADIUS


def _octahedron_faces() -> Tuple[Face, ...]:
    faces = []
    for i, direction in enumerate(OCT_FACE_CENTERS):
        normal = normalize(direction)
        signs = jnp.sign(direction) * OCTAHEDRON_RADIUS
        corner_x = vec3(float(signs[0]), 0.0, 0.0)
        corner_y = vec3(0.0, float(signs[1]), 0.0)
        corner_z = vec3(0.0, 0.0, float(signs[2]))
        faces.append(make_face(i + 1, normal * OCT_INRADIUS, normal,
                               [corner_x, corner_y, corner_z]))
    return tuple(faces)


def _octahedron_face_color(direction: jnp.ndarray) -> str:
    negatives = int(jnp.sum(direction < 0))
    return OCT_FACE_PALETTE[negatives % 2]


def create_octahedron() -> PolyhedronDefinition:
    """Create a regular octahedron resting on face 1."""
    quaternion = _down_right_quaternion(vec3(1.0, 1.0, 1.0), vec3(1.0, -1.0, 0.0))

    return validate_definition(PolyhedronDefinition(
        id='octahedron',
        name='Octahedron',
        face_count=8,
        vertex_count=6,
        vertices=octahedron_vertices(),
        faces=_octahedron_faces(),
        face_centers=OCT_FACE_CENTERS,
        inradius=OCT_INRADIUS,
        circumradius=OCTAHEDRON_RADIUS,
        dihedral_angle=OCT_DIHEDRAL_ANGLE,
        roll_angle=float(jnp.pi) - OCT_DIHEDRAL_ANGLE,
        edge_length=EDGE_LENGTH,
        face_palette=OCT_FACE_PALETTE,
        face_colors=tuple(_octahedron_face_color(d) for d in OCT_FACE_CENTERS),
        # Opposite vertices share the colour of their axis
        vertex_colors=tuple(VERTEX_COLORS[axis] for axis in (0, 0, 1, 1, 2, 2)),
        face_label_size=0.3,
        vertex_sphere_radius=0.08,
        initial_position=vec3(0.0, OCT_INRADIUS, 0.0),
        initial_quaternion=quaternion,
        lattice_type='triangular',
        movement_sectors=6,
        sector_angle=float(jnp.pi) / 3,
        bottom_vertex_count=3,
        move_table=TRIANGULAR_MOVES,
        orientation_table=TRIANGULAR_ORIENTATIONS,
        lattice_coloring=lambda i, j: VERTEX_COLORS[(2 + 2 * i + j) % 3],
    ))


# ---------------------------------------------------------------------------
# Tetrahedron
# ---------------------------------------------------------------------------

# Alternate cube corners (+-a, +-a, +-a) have edge length 2a*sqrt(2)
TET_A = EDGE_LENGTH / (2 * float(jnp.sqrt(2.0)))
TET_CIRCUMRADIUS = TET_A * float(jnp.sqrt(3.0))
TET_INRADIUS = TET_A / float(jnp.sqrt(3.0))
TET_DIHEDRAL_ANGLE = float(jnp.arccos(1.0 / 3.0))

# Face i is opposite vertex i
TET_FACE_CENTERS = normalize(jnp.array([
    [-1, -1, -1], [1, 1, -1], [1, -1, 1], [-1, 1, 1],
], dtype=jnp.float64))

TET_FACE_VERTICES = ((1, 2, 3), (0, 3, 2), (0, 1, 3), (0, 2, 1))

# Blue, yellow, red, green: the order the floor lattice cycles through
TET_FACE_PALETTE = (VERTEX_COLORS[2], VERTEX_COLORS[4], VERTEX_COLORS[0], VERTEX_COLORS[1])
TET_VERTEX_PALETTE = (VERTEX_COLORS[1], VERTEX_COLORS[0], VERTEX_COLORS[2], VERTEX_COLORS[4])


@jax.jit
def tetrahedron_vertices() -> jnp.ndarray:
    """Generate the 4 vertices of a unit-edge tetrahedron at alternate cube corners.

    Returns:
        (4, 3) array; vertex 0 is the apex when face 1 rests on the floor
    """
    return jnp.array([
        [1, 1, 1],
        [-1, -1, 1],
        [-1, 1, -1],
        [1, -1, -1],
    ], dtype=jnp.float64) * TET_A


def _tetrahedron_lattice_color(i: int, j: int) -> str:
    # Every triangle gets three colours, every adjacent pair all four
    return TET_FACE_PALETTE[2 * (i % 2) + (i + j) % 2]


def create_tetrahedron() -> PolyhedronDefinition:
    """Create a regular tetrahedron resting on face 1."""
    vertices = tetrahedron_vertices()
    faces = tuple(
        make_face(i + 1, TET_FACE_CENTERS[i] * TET_INRADIUS, TET_FACE_CENTERS[i],
                  [vertices[k] for k in corners])
        for i, corners in enumerate(TET_FACE_VERTICES)
    )

    return validate_definition(PolyhedronDefinition(
        id='tetrahedron',
        name='Tetrahedron',
        face_count=4,
        vertex_count=4,
        vertices=vertices,
        faces=faces,
        face_centers=TET_FACE_CENTERS,
        face_indices=TET_FACE_VERTICES,
        inradius=TET_INRADIUS,
        circumradius=TET_CIRCUMRADIUS,
        dihedral_angle=TET_DIHEDRAL_ANGLE,
        roll_angle=float(jnp.pi) - TET_DIHEDRAL_ANGLE,
        edge_length=EDGE_LENGTH,
        face_palette=TET_FACE_PALETTE,
        face_colors=TET_FACE_PALETTE,
        vertex_colors=TET_VERTEX_PALETTE,
        face_label_size=0.25,
        vertex_sphere_radius=0.08,
        initial_position=vec3(0.0, TET_INRADIUS, 0.0),
        initial_quaternion=_down_right_quaternion(TET_FACE_CENTERS[0], vec3(1.0, 0.0, -1.0)),
        lattice_type='triangular',
        movement_sectors=6,
        sector_angle=float(jnp.pi) / 3,
        bottom_vertex_count=3,
        move_table=TRIANGULAR_MOVES,
        orientation_table=TRIANGULAR_ORIENTATIONS,
        lattice_coloring=_tetrahedron_lattice_color,
    ))


# ---------------------------------------------------------------------------
# Icosahedron
# ---------------------------------------------------------------------------

ICO_INRADIUS = float(PHI) ** 2 * EDGE_LENGTH / (2 * float(jnp.sqrt(3.0)))
ICO_DIHEDRAL_ANGLE = float(jnp.arccos(-jnp.sqrt(5.0) / 3))

ICO_FACE_INDICES = (
    (0, 11, 5), (0, 5, 1), (0, 1, 7), (0, 7, 10), (0, 10, 11),
    (1, 5, 9), (5, 11, 4), (11, 10, 2), (10, 7, 6), (7, 1, 8),
    (3, 9, 4), (3, 4, 2), (3, 2, 6), (3, 6, 8), (3, 8, 9),
    (4, 9, 5), (2, 4, 11), (6, 2, 10), (8, 6, 7), (9, 8, 1),
)

ICO_FACE_PALETTE = (GRID_COLOR_1, GRID_COLOR_2, GRID_COLOR_3, GRID_COLOR_4)
ICO_FACE_COLOR_INDICES = (0, 1, 2, 3) * 5
ICO_VERTEX_COLOR_INDICES = (0, 1, 2, 3, 4, 5) * 2


@jax.jit
def icosahedron_vertices() -> jnp.ndarray:
    """Generate the 12 vertices of a unit-edge icosahedron.

    The vertices lie on three orthogonal golden rectangles; the raw
    coordinates (0, +-1, +-phi) have edge length 2 and are halved.

    Returns:
        (12, 3) array of vertex coordinates
    """
    vertices = jnp.array([
        [-1, PHI, 0], [1, PHI, 0], [-1, -PHI, 0], [1, -PHI, 0],
        [0, -1, PHI], [0, 1, PHI], [0, -1, -PHI], [0, 1, -PHI],
        [PHI, 0, -1], [PHI, 0, 1], [-PHI, 0, -1], [-PHI, 0, 1],
    ], dtype=jnp.float64)
    return vertices * (EDGE_LENGTH / 2)


def _indexed_faces(vertices: jnp.ndarray,
                   face_indices: Tuple[Tuple[int, ...], ...]) -> Tuple[Face, ...]:
    """Faces of a centrally symmetric solid from an index list; normal = centre direction."""
    faces = []
    for i, corners in enumerate(face_indices):
        corner_points = vertices[jnp.array(corners)]
        center = jnp.mean(corner_points, axis=0)
        faces.append(make_face(i + 1, center, normalize(center), list(corner_points)))
    return tuple(faces)


def create_icosahedron() -> PolyhedronDefinition:
    """Create a regular icosahedron resting on face 1."""
    vertices = icosahedron_vertices()
    faces = _indexed_faces(vertices, ICO_FACE_INDICES)

    return validate_definition(PolyhedronDefinition(
        id='icosahedron',
        name='Icosahedron',
        face_count=20,
        vertex_count=12,
        vertices=vertices,
        faces=faces,
        face_centers=jnp.stack([f.center for f in faces]),
        face_indices=ICO_FACE_INDICES,
        inradius=ICO_INRADIUS,
        dihedral_angle=ICO_DIHEDRAL_ANGLE,
        roll_angle=float(jnp.pi) - ICO_DIHEDRAL_ANGLE,
        edge_length=EDGE_LENGTH,
        face_palette=ICO_FACE_PALETTE,
        face_colors=tuple(ICO_FACE_PALETTE[c] for c in ICO_FACE_COLOR_INDICES),
        vertex_colors=tuple(VERTEX_COLORS[c] for c in ICO_VERTEX_COLOR_INDICES),
        face_label_size=0.2,
        vertex_sphere_radius=0.07,
        initial_position=vec3(0.0, ICO_INRADIUS, 0.0),
        initial_quaternion=_face_centered_quaternion(faces[0]),
        lattice_type='triangular',
        movement_sectors=6,
        sector_angle=float(jnp.pi) / 3,
        bottom_vertex_count=3,
        move_table=TRIANGULAR_MOVES,
        orientation_table=TRIANGULAR_ORIENTATIONS,
        lattice_coloring=lambda i, j: NEUTRAL_LATTICE_COLOR,
    ))


# ---------------------------------------------------------------------------
# Dodecahedron
# ---------------------------------------------------------------------------

DOD_DIHEDRAL_ANGLE = 2 * float(jnp.arctan(PHI))
DOD_INRADIUS = (EDGE_LENGTH / 2) * float(jnp.sqrt((25 + 11 * jnp.sqrt(5.0)) / 10))
DOD_FACE_PALETTE = ('#c084fc', '#fef08a', '#f472b6', '#86efac')

DOD_MOVES = MoveTable(
    offset=0.0,
    sector_angle=2 * float(jnp.pi) / 5,
    entries=tuple((f'E{k + 1}', (0, 0)) for k in range(5)),
)
DOD_ORIENTATIONS = OrientationTable(sector_degrees=72.0, labels=('A', 'B', 'C', 'D', 'E'))


@jax.jit
def dodecahedron_vertices() -> jnp.ndarray:
    """Generate the 20 vertices of a unit-edge dodecahedron.

    Eight cube corners plus three golden rectangles; the raw coordinates
    have edge length 2/phi and are scaled by phi/2.

    Returns:
        (20, 3) array of vertex coordinates
    """
    inv_phi = 1 / PHI
    cube_verts = jnp.array([
        [1, 1, 1], [1, 1, -1], [1, -1, 1], [1, -1, -1],
        [-1, 1, 1], [-1, 1, -1], [-1, -1, 1], [-1, -1, -1],
    ], dtype=jnp.float64)
    rectangle_verts = jnp.array([
        [0, PHI, inv_phi], [0, PHI, -inv_phi], [0, -PHI, inv_phi], [0, -PHI, -inv_phi],
        [inv_phi, 0, PHI], [-inv_phi, 0, PHI], [inv_phi, 0, -PHI], [-inv_phi, 0, -PHI],
        [PHI, inv_phi, 0], [PHI, -inv_phi, 0], [-PHI, inv_phi, 0], [-PHI, -inv_phi, 0],
    ], dtype=jnp.float64)
    return jnp.concatenate([cube_verts, rectangle_verts]) * (PHI / 2)


def create_dodecahedron() -> PolyhedronDefinition:
    """Create a regular dodecahedron with faces discovered from its vertices.

    Raises:
        ShapeDefinitionError: If discovery does not yield exactly 12 pentagons
            or the faces cannot be 4-coloured
    """
    vertices = dodecahedron_vertices()
    face_lists = discover_faces(vertices, EDGE_LENGTH, face_size=5)
    if len(face_lists) != 12:
        raise ShapeDefinitionError(
            f"Dodecahedron face discovery found {len(face_lists)} faces, expected 12")

    face_indices = tuple(tuple(f) for f in face_lists)
    faces = _indexed_faces(vertices, face_indices)
    color_indices = color_faces(face_lists, n_colors=4)

    return validate_definition(PolyhedronDefinition(
        id='dodecahedron',
        name='Dodecahedron',
        face_count=12,
        vertex_count=20,
        vertices=vertices,
        faces=faces,
        face_centers=jnp.stack([f.center for f in faces]),
        face_indices=face_indices,
        inradius=DOD_INRADIUS,
        dihedral_angle=DOD_DIHEDRAL_ANGLE,
        roll_angle=float(jnp.pi) - DOD_DIHEDRAL_ANGLE,
        edge_length=EDGE_LENGTH,
        face_palette=DOD_FACE_PALETTE,
        face_colors=tuple(DOD_FACE_PALETTE[c] for c in color_indices),
        vertex_colors=tuple(VERTEX_COLORS[k % 4] for k in range(20)),
        face_label_size=0.2,
        vertex_sphere_radius=0.07,
        initial_position=vec3(0.0, DOD_INRADIUS, 0.0),
        initial_quaternion=_face_centered_quaternion(faces[0]),
        lattice_type='none',
        movement_sectors=5,
        sector_angle=2 * float(jnp.pi) / 5,
        bottom_vertex_count=5,
        move_table=DOD_MOVES,
        orientation_table=DOD_ORIENTATIONS,
        lattice_coloring=lambda i, j: NEUTRAL_LATTICE_COLOR,
    ))


def create_all_platonic_solids() -> dict:
    """Create all five Platonic solids.

    Returns:
        Dictionary mapping solid ids to PolyhedronDefinition instances
    """
    return {
        'tetrahedron': create_tetrahedron(),
        'cube': create_cube(),
        'octahedron': create_octahedron(),
        'icosahedron': create_icosahedron(),
        'dodecahedron': create_dodecahedron(),
    }
