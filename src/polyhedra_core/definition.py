"""
The uniform shape contract shared by every rollable solid.

A PolyhedronDefinition carries everything the roll solver and the turtle
engine need to treat a shape generically: vertex and face geometry in
object space, metrics (inradius, dihedral and roll angles), the initial
resting pose with face 1 on the ground, lattice parameters, and the
discrete move/orientation tables that translate continuous roll directions
into lattice moves.

Definitions are immutable NamedTuples built once at import time and shared
as process-wide constants.
"""

import jax.numpy as jnp
from typing import NamedTuple, Tuple, List, Optional, Callable, Sequence

from .vector_math import normalize, normalize_angle


class ShapeDefinitionError(RuntimeError):
    """Raised when a shape's fixed data cannot be turned into a valid definition."""


# Shared palettes
VERTEX_COLORS = (
    '#ef4444',  # red
    '#22c55e',  # green
    '#3b82f6',  # blue
    '#f97316',  # orange
    '#eab308',  # yellow
    '#a855f7',  # purple
)
GRID_COLOR_1 = '#c084fc'  # light purple
GRID_COLOR_2 = '#fef08a'  # pale yellow
GRID_COLOR_3 = '#f472b6'  # pink
GRID_COLOR_4 = '#bae6fd'  # sky blue
NEUTRAL_LATTICE_COLOR = '#cbd5e1'

LATTICE_TYPES = ('square', 'triangular', 'hexagonal', 'none')


class Face(NamedTuple):
    """One planar face of a polyhedron in object space.

    Attributes:
        index: 1-based face number, stable for a given shape
        center: (3,) centroid of the face
        normal: (3,) unit outward normal
        vertices: (n, 3) boundary, CCW seen from outside; row i and row
            (i + 1) % n form edge i
    """
    index: int
    center: jnp.ndarray
    normal: jnp.ndarray
    vertices: jnp.ndarray

    def edge(self, edge_index: int) -> Tuple[jnp.ndarray, jnp.ndarray]:
        n = self.vertices.shape[0]
        return self.vertices[edge_index % n], self.vertices[(edge_index + 1) % n]

    @property
    def edge_count(self) -> int:
        return int(self.vertices.shape[0])


class MoveData(NamedTuple):
    """A discrete lattice move: display label and (u, v) cell delta."""
    label: str
    delta: Tuple[int, int]


class MoveTable(NamedTuple):
    """Quantisation of a world-space roll direction into lattice moves.

    Attributes:
        offset: Angle (radians) at which sector 0 is centred
        sector_angle: Angular width of one sector
        entries: One (label, (u, v)) pair per sector, in CCW order
    """
    offset: float
    sector_angle: float
    entries: Tuple[Tuple[str, Tuple[int, int]], ...]

    def sector(self, angle: float) -> int:
        shifted = normalize_angle(normalize_angle(angle) - self.offset)
        return int(round(shifted / self.sector_angle)) % len(self.entries)

    def lookup(self, angle: float) -> MoveData:
        label, delta = self.entries[self.sector(angle)]
        return MoveData(label=label, delta=delta)


class OrientationTable(NamedTuple):
    """Bucketing of a twist angle (degrees) into a small label set."""
    sector_degrees: float
    labels: Tuple[str, ...]

    def label(self, delta: float) -> str:
        return self.labels[int(round(delta / self.sector_degrees)) % len(self.labels)]


def orient_face_vertices(vertices: jnp.ndarray, normal: jnp.ndarray) -> jnp.ndarray:
    """Return the boundary with CCW winding about `normal`.

    The winding is read from the sign of (v1 - v0) x (v2 - v0) . normal; a
    clockwise boundary keeps its first vertex and reverses the rest.
    """
    v0, v1, v2 = vertices[0], vertices[1], vertices[2]
    if float(jnp.dot(jnp.cross(v1 - v0, v2 - v0), normal)) > 0:
        return vertices
    return jnp.concatenate([vertices[:1], vertices[1:][::-1]], axis=0)


def make_face(index: int,
              center: jnp.ndarray,
              normal: jnp.ndarray,
              vertices: Sequence[jnp.ndarray]) -> Face:
    """Build a Face with a unit normal and CCW winding."""
    unit_normal = normalize(jnp.asarray(normal, dtype=jnp.float64))
    boundary = jnp.stack([jnp.asarray(v, dtype=jnp.float64) for v in vertices])
    if boundary.shape[0] < 3:
        raise ShapeDefinitionError(f"Face {index} has fewer than 3 vertices")
    return Face(
        index=index,
        center=jnp.asarray(center, dtype=jnp.float64),
        normal=unit_normal,
        vertices=orient_face_vertices(boundary, unit_normal),
    )


def find_adjacent_face(faces: Sequence[Face],
                       face: Face,
                       edge_v1: jnp.ndarray,
                       edge_v2: jnp.ndarray,
                       tolerance: float = 0.01) -> Optional[Face]:
    """The other face containing both endpoints of an edge, if any.

    Endpoints are matched by proximity, so this works equally on object-space
    faces and on faces transformed into world space.
    """
    for candidate in faces:
        if candidate.index == face.index:
            continue
        d1 = jnp.linalg.norm(candidate.vertices - edge_v1[None, :], axis=-1)
        d2 = jnp.linalg.norm(candidate.vertices - edge_v2[None, :], axis=-1)
        if bool(jnp.any(d1 < tolerance)) and bool(jnp.any(d2 < tolerance)):
            return candidate
    return None


class PolyhedronDefinition(NamedTuple):
    """Immutable description of one rollable solid.

    Attributes:
        id: Registry key, e.g. 'cube' or 'dc_square'
        name: Display name
        face_count: Number of faces
        vertex_count: Number of vertices
        vertices: (V, 3) object-space vertex coordinates
        faces: Faces in index order (face k at position k - 1)
        face_centers: (F, 3) face direction vectors used for labelling
        inradius: Distance from the body centre to the face planes
        dihedral_angle: Interior angle between adjacent faces (0 when degenerate)
        roll_angle: Rotation applied by one roll, pi - dihedral_angle
        edge_length: Common edge length
        face_palette: Palette the face colours are drawn from
        face_colors: Colour of each face, 0-based
        vertex_colors: Colour of each vertex
        face_label_size: Label font size used by renderers
        vertex_sphere_radius: Vertex marker radius used by renderers
        initial_position: Resting position with face 1 on y = 0
        initial_quaternion: Orientation putting face 1 on the ground
        lattice_type: 'square', 'triangular', 'hexagonal' or 'none'
        movement_sectors: Number of discrete roll directions
        sector_angle: Width of one direction sector in radians
        bottom_vertex_count: Vertices that touch the ground when resting
        move_table: Direction-to-move quantisation
        orientation_table: Twist-to-label quantisation
        lattice_coloring: (i, j) -> colour of the floor lattice vertex
        face_indices: Vertex-index tuples per face, for indexed shapes
        circumradius: Distance from the body centre to the vertices
        markers: (M, 3) extra surface marker points, possibly empty
    """
    id: str
    name: str
    face_count: int
    vertex_count: int
    vertices: jnp.ndarray
    faces: Tuple[Face, ...]
    face_centers: jnp.ndarray
    inradius: float
    dihedral_angle: float
    roll_angle: float
    edge_length: float
    face_palette: Tuple[str, ...]
    face_colors: Tuple[str, ...]
    vertex_colors: Tuple[str, ...]
    face_label_size: float
    vertex_sphere_radius: float
    initial_position: jnp.ndarray
    initial_quaternion: jnp.ndarray
    lattice_type: str
    movement_sectors: int
    sector_angle: float
    bottom_vertex_count: int
    move_table: MoveTable
    orientation_table: OrientationTable
    lattice_coloring: Callable[[int, int], str]
    face_indices: Optional[Tuple[Tuple[int, ...], ...]] = None
    circumradius: Optional[float] = None
    markers: Optional[jnp.ndarray] = None

    def get_vertices(self) -> jnp.ndarray:
        return self.vertices

    def get_faces(self) -> List[Face]:
        return list(self.faces)

    def get_face(self, index: int) -> Optional[Face]:
        """Face with 1-based `index`, or None when out of range."""
        if 1 <= index <= len(self.faces):
            return self.faces[index - 1]
        return None

    def get_bottom_vertex_count(self) -> int:
        return self.bottom_vertex_count

    def get_move_data(self, angle: float) -> MoveData:
        """Map a world direction angle (atan2 of a roll displacement) to a move."""
        return self.move_table.lookup(angle)

    def get_orientation_label(self, delta: float) -> str:
        """Label the current twist, given in degrees."""
        return self.orientation_table.label(delta)

    def vertex_color(self, index: int) -> str:
        return self.vertex_colors[index]

    def face_color(self, face_position: int) -> str:
        """Colour of the face at 0-based position `face_position`."""
        return self.face_colors[face_position % len(self.face_colors)]

    def lattice_vertex_color(self, i: int, j: int) -> str:
        return self.lattice_coloring(i, j)

    def marker_points(self) -> jnp.ndarray:
        if self.markers is None:
            return jnp.zeros((0, 3))
        return self.markers

    @property
    def is_doubly_covered(self) -> bool:
        """Two coincident faces with zero dihedral angle (a flat k-gon)."""
        return self.face_count == 2 and abs(self.dihedral_angle) < 0.01


def validate_definition(definition: PolyhedronDefinition) -> PolyhedronDefinition:
    """Check the invariants every definition must satisfy.

    Raises:
        ShapeDefinitionError: If counts, face numbering or the lattice
            parameters are inconsistent
    """
    if definition.lattice_type not in LATTICE_TYPES:
        raise ShapeDefinitionError(
            f"{definition.id}: unknown lattice type {definition.lattice_type!r}")
    if len(definition.faces) != definition.face_count:
        raise ShapeDefinitionError(
            f"{definition.id}: expected {definition.face_count} faces, "
            f"built {len(definition.faces)}")
    if definition.vertices.shape[0] != definition.vertex_count:
        raise ShapeDefinitionError(
            f"{definition.id}: expected {definition.vertex_count} vertices, "
            f"got {definition.vertices.shape[0]}")
    for position, face in enumerate(definition.faces):
        if face.index != position + 1:
            raise ShapeDefinitionError(
                f"{definition.id}: face at position {position} has index {face.index}")
    if definition.faces[0].edge_count != definition.bottom_vertex_count:
        raise ShapeDefinitionError(
            f"{definition.id}: face 1 has {definition.faces[0].edge_count} vertices "
            f"but {definition.bottom_vertex_count} are expected on the ground")
    if len(definition.move_table.entries) != definition.movement_sectors:
        raise ShapeDefinitionError(
            f"{definition.id}: move table has {len(definition.move_table.entries)} "
            f"sectors, expected {definition.movement_sectors}")
    return definition


# Direction tables shared by several shapes

SQUARE_MOVES = MoveTable(
    offset=0.0,
    sector_angle=float(jnp.pi) / 2,
    entries=(
        ('+X', (1, 0)),
        ('+Z', (0, 1)),
        ('-X', (-1, 0)),
        ('-Z', (0, -1)),
    ),
)

# Sector 0 sits 30 degrees off the x-axis, on the first edge normal
TRIANGULAR_MOVES = MoveTable(
    offset=float(jnp.pi) / 6,
    sector_angle=float(jnp.pi) / 3,
    entries=(
        ('-Z', (1, 1)),
        ('+Y', (0, 1)),
        ('-X', (-1, 0)),
        ('+Z', (-1, -1)),
        ('-Y', (0, -1)),
        ('+X', (1, 0)),
    ),
)

SQUARE_ORIENTATIONS = OrientationTable(sector_degrees=90.0, labels=('X', 'Z', 'X', 'Z'))
TRIANGULAR_ORIENTATIONS = OrientationTable(
    sector_degrees=60.0, labels=('X', 'Z', 'Y', 'X', 'Z', 'Y'))
