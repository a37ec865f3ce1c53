"""
Post-hoc reconstruction of face transitions from path geometry.

Given only the points of a generated path, each consecutive point pair is
assigned to faces and every change of face is reported as a crossing. Face
ownership is approximated by the nearest face centre, so points very close
to an edge may be attributed to either side; the crossing point is the
first point found on the new face rather than the exact edge intersection.

Doubly covered polygons have two faces sharing one centre, so ownership is
tracked instead: the path starts on face 1 and changes face whenever a step
crosses the boundary of the face it is on, as seen from above.
"""

import jax.numpy as jnp
from typing import List, Optional, Sequence, Tuple

from polyhedra_core import Face, get_polyhedron

from .path_types import PathSegment, EdgeCrossing

# Vertex matching tolerance between faces
SHARED_VERTEX_TOLERANCE = 0.01

# Parameter slack for the 2D segment test
INTERSECTION_EPSILON = 1e-6


def segments_intersect_2d(p1: jnp.ndarray,
                          p2: jnp.ndarray,
                          v1: jnp.ndarray,
                          v2: jnp.ndarray,
                          eps: float = INTERSECTION_EPSILON) -> bool:
    """Whether path step p1-p2 crosses edge v1-v2 in the XZ plane.

    Both parameters must lie in (eps, 1 + eps]: a step ending on the edge
    crosses it, a step starting on the edge does not. Parallel lines never
    intersect.
    """
    x1, z1 = float(p1[0]), float(p1[2])
    x2, z2 = float(p2[0]), float(p2[2])
    x3, z3 = float(v1[0]), float(v1[2])
    x4, z4 = float(v2[0]), float(v2[2])

    denom = (x1 - x2) * (z3 - z4) - (z1 - z2) * (x3 - x4)
    if abs(denom) < 1e-4:
        return False

    t = ((x1 - x3) * (z3 - z4) - (z1 - z3) * (x3 - x4)) / denom
    u = -((x1 - x2) * (z1 - z3) - (z1 - z2) * (x1 - x3)) / denom
    return eps < t <= 1 + eps and eps < u <= 1 + eps


def find_closest_face(point: jnp.ndarray, faces: Sequence[Face]) -> Face:
    """Face whose centre is nearest to `point`; the first one on ties."""
    centers = jnp.stack([face.center for face in faces])
    distances = jnp.linalg.norm(centers - point[None, :], axis=-1)
    return faces[int(jnp.argmin(distances))]


def _contains(face: Face, vertex: jnp.ndarray, tolerance: float) -> bool:
    distances = jnp.linalg.norm(face.vertices - vertex[None, :], axis=-1)
    return bool(jnp.any(distances < tolerance))


def find_shared_edge(face_a: Face,
                     face_b: Face,
                     tolerance: float = SHARED_VERTEX_TOLERANCE) -> Optional[Tuple[int, jnp.ndarray]]:
    """First edge of face_a whose two endpoints are both vertices of face_b.

    Returns:
        (edge_index, (2, 3) endpoints) in face_a's boundary order, or None
    """
    for i in range(face_a.edge_count):
        v1, v2 = face_a.edge(i)
        if _contains(face_b, v1, tolerance) and _contains(face_b, v2, tolerance):
            return i, jnp.stack([v1, v2])
    return None


def _nearest_center_crossings(faces: Sequence[Face],
                              segments: Sequence[PathSegment]) -> List[EdgeCrossing]:
    crossings = []
    for segment_index, segment in enumerate(segments):
        points = segment.points
        owners = [find_closest_face(p, faces) for p in points]
        for i in range(points.shape[0] - 1):
            face_a, face_b = owners[i], owners[i + 1]
            if face_a.index == face_b.index:
                continue
            shared = find_shared_edge(face_a, face_b)
            if shared is None:
                continue
            edge_index, edge_vertices = shared
            crossings.append(EdgeCrossing(
                from_face_index=face_a.index,
                to_face_index=face_b.index,
                edge_index=edge_index,
                edge_vertices=edge_vertices,
                crossing_point=points[i + 1],
                segment_index=segment_index,
                point_index=i + 1,
            ))
    return crossings


def _doubly_covered_crossings(faces: Sequence[Face],
                              segments: Sequence[PathSegment]) -> List[EdgeCrossing]:
    front, back = faces[0], faces[1]
    current = front
    crossings = []
    for segment_index, segment in enumerate(segments):
        points = segment.points
        for i in range(points.shape[0] - 1):
            p1, p2 = points[i], points[i + 1]
            for edge_index in range(current.edge_count):
                v1, v2 = current.edge(edge_index)
                if not segments_intersect_2d(p1, p2, v1, v2):
                    continue
                other = back if current.index == front.index else front
                crossings.append(EdgeCrossing(
                    from_face_index=current.index,
                    to_face_index=other.index,
                    edge_index=edge_index,
                    edge_vertices=jnp.stack([v1, v2]),
                    crossing_point=p2,
                    segment_index=segment_index,
                    point_index=i + 1,
                ))
                current = other
                # at most one crossing per step
                break
    return crossings


def extract_edge_crossings(shape_id: str, segments: Sequence[PathSegment]) -> List[EdgeCrossing]:
    """Reconstruct the ordered face transitions of a generated path.

    Args:
        shape_id: Registry id of the shape the path was generated on
        segments: Path segments in object space

    Returns:
        Crossings in path order
    """
    definition = get_polyhedron(shape_id)
    faces = definition.get_faces()
    if definition.is_doubly_covered:
        return _doubly_covered_crossings(faces, segments)
    return _nearest_center_crossings(faces, segments)
