"""Polyhedron geometry: vector math, the shape contract and the shape registry."""

from .vector_math import (
    UP,
    DOWN,
    IDENTITY_QUATERNION,
    PHI,
    vec3,
    normalize,
    angle_between,
    quat_from_axis_angle,
    quat_multiply,
    quat_rotate,
    rotate_about_axis,
    quat_to_matrix,
    quat_from_matrix,
    basis_change_quaternion,
    transform_points,
    normalize_angle
)

from .definition import (
    Face,
    MoveData,
    MoveTable,
    OrientationTable,
    PolyhedronDefinition,
    ShapeDefinitionError,
    find_adjacent_face,
    make_face,
    orient_face_vertices,
    validate_definition
)

from .face_discovery import (
    edge_adjacency,
    discover_faces,
    face_adjacency,
    color_faces
)

from .platonic_solids import (
    create_tetrahedron,
    create_cube,
    create_octahedron,
    create_icosahedron,
    create_dodecahedron,
    create_all_platonic_solids
)

from .doubly_covered import (
    KGonConfig,
    create_doubly_covered_kgon,
    create_all_doubly_covered
)

from .registry import (
    POLYHEDRA,
    SHAPE_IDS,
    get_polyhedron
)

__all__ = [
    'UP',
    'DOWN',
    'IDENTITY_QUATERNION',
    'PHI',
    'vec3',
    'normalize',
    'angle_between',
    'quat_from_axis_angle',
    'quat_multiply',
    'quat_rotate',
    'rotate_about_axis',
    'quat_to_matrix',
    'quat_from_matrix',
    'basis_change_quaternion',
    'transform_points',
    'normalize_angle',
    'Face',
    'MoveData',
    'MoveTable',
    'OrientationTable',
    'PolyhedronDefinition',
    'ShapeDefinitionError',
    'find_adjacent_face',
    'make_face',
    'orient_face_vertices',
    'validate_definition',
    'edge_adjacency',
    'discover_faces',
    'face_adjacency',
    'color_faces',
    'create_tetrahedron',
    'create_cube',
    'create_octahedron',
    'create_icosahedron',
    'create_dodecahedron',
    'create_all_platonic_solids',
    'KGonConfig',
    'create_doubly_covered_kgon',
    'create_all_doubly_covered',
    'POLYHEDRA',
    'SHAPE_IDS',
    'get_polyhedron'
]
