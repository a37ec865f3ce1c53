"""Shape registry: every definition is built once, at import time."""

from typing import Dict, Tuple

from .definition import PolyhedronDefinition
from .platonic_solids import create_all_platonic_solids
from .doubly_covered import create_all_doubly_covered


POLYHEDRA: Dict[str, PolyhedronDefinition] = {
    **create_all_platonic_solids(),
    **create_all_doubly_covered(),
}

SHAPE_IDS: Tuple[str, ...] = (
    'octahedron',
    'cube',
    'icosahedron',
    'tetrahedron',
    'dodecahedron',
    'dc_triangle',
    'dc_square',
    'dc_hexagon',
)


def get_polyhedron(shape_id: str) -> PolyhedronDefinition:
    """Look up a shape definition by id.

    Raises:
        ValueError: If the id is not registered
    """
    try:
        return POLYHEDRA[shape_id]
    except KeyError:
        raise ValueError(f"Unknown shape: {shape_id}") from None
