"""
Face discovery and face colouring from raw vertex coordinates.

Some solids are easiest to specify by their vertices alone. This module
recovers their faces combinatorially:

1. Build the edge graph: vertex pairs exactly one edge length apart
2. Enumerate closed walks of the face size through that graph
3. Keep only cycles whose vertices lie in one plane
4. Drop rotations/reflections of cycles already found (sorted-vertex key)
5. Fix the winding so the face normal points away from the origin

Face colouring is a plain backtracking search over face adjacency, so that
no two faces sharing an edge get the same colour.
"""

import numpy as np
import jax.numpy as jnp
import structlog
from typing import List, Set, Tuple

from .definition import ShapeDefinitionError

logger = structlog.get_logger(__name__)


def edge_adjacency(vertices: jnp.ndarray,
                   edge_length: float,
                   tolerance: float = 0.01) -> List[List[int]]:
    """Neighbour lists of the edge graph.

    Two vertices are adjacent when their distance equals the edge length
    within `tolerance`.

    Args:
        vertices: (N, 3) vertex coordinates
        edge_length: Expected edge length
        tolerance: Absolute distance tolerance

    Returns:
        For each vertex, the ascending list of adjacent vertex indices
    """
    points = np.asarray(vertices, dtype=np.float64)
    distances = np.linalg.norm(points[:, None, :] - points[None, :, :], axis=-1)
    is_edge = np.abs(distances - edge_length) < tolerance
    np.fill_diagonal(is_edge, False)
    return [sorted(int(j) for j in np.nonzero(row)[0]) for row in is_edge]


def _is_coplanar(points: np.ndarray, face: List[int], tolerance: float) -> Tuple[bool, np.ndarray]:
    origin = points[face[0]]
    normal = np.cross(points[face[1]] - origin, points[face[2]] - origin)
    length = np.linalg.norm(normal)
    if length < 1e-12:
        return False, normal
    normal = normal / length
    offsets = np.abs((points[face] - origin) @ normal)
    return bool(np.all(offsets <= tolerance)), normal


def discover_faces(vertices: jnp.ndarray,
                   edge_length: float,
                   face_size: int = 5,
                   tolerance: float = 0.01) -> List[List[int]]:
    """Recover the planar faces of a convex polyhedron from its vertices.

    Args:
        vertices: (N, 3) vertex coordinates centred on the origin
        edge_length: Common edge length
        face_size: Number of vertices per face
        tolerance: Tolerance for both edge length and coplanarity

    Returns:
        Faces as vertex-index lists, CCW seen from outside, in discovery order
    """
    points = np.asarray(vertices, dtype=np.float64)
    adjacency = edge_adjacency(vertices, edge_length, tolerance)
    neighbours: List[Set[int]] = [set(a) for a in adjacency]

    faces: List[List[int]] = []
    seen: Set[Tuple[int, ...]] = set()

    def extend(path: List[int]) -> None:
        if len(path) == face_size:
            if path[0] in neighbours[path[-1]]:
                record(list(path))
            return
        for nxt in adjacency[path[-1]]:
            if nxt not in path:
                path.append(nxt)
                extend(path)
                path.pop()

    def record(face: List[int]) -> None:
        coplanar, normal = _is_coplanar(points, face, tolerance)
        if not coplanar:
            return
        key = tuple(sorted(face))
        if key in seen:
            return
        seen.add(key)

        outward = points[face].mean(axis=0)
        if np.dot(normal, outward) < 0:
            face.reverse()
        faces.append(face)

    for start in range(len(points)):
        extend([start])

    logger.debug("faces_discovered", face_size=face_size, faces=len(faces),
                 vertices=len(points))
    return faces


def face_adjacency(faces: List[List[int]]) -> List[Set[int]]:
    """Faces sharing at least two vertices (one edge) are adjacent."""
    adjacent: List[Set[int]] = [set() for _ in faces]
    for i in range(len(faces)):
        for j in range(i + 1, len(faces)):
            if len(set(faces[i]) & set(faces[j])) >= 2:
                adjacent[i].add(j)
                adjacent[j].add(i)
    return adjacent


def color_faces(faces: List[List[int]], n_colors: int = 4) -> List[int]:
    """Assign one of `n_colors` colours per face, adjacent faces differing.

    Backtracking in face order, trying colours in ascending order.

    Args:
        faces: Faces as vertex-index lists
        n_colors: Number of available colours

    Returns:
        Colour index per face

    Raises:
        ShapeDefinitionError: If no valid colouring exists
    """
    adjacent = face_adjacency(faces)
    colors: List[int] = [-1] * len(faces)

    def solve(f: int) -> bool:
        if f == len(faces):
            return True
        for c in range(n_colors):
            if all(colors[nb] != c for nb in adjacent[f]):
                colors[f] = c
                if solve(f + 1):
                    return True
        colors[f] = -1
        return False

    if not solve(0):
        raise ShapeDefinitionError(
            f"No valid {n_colors}-colouring exists for {len(faces)} faces")
    return colors
