"""
Pure vector and quaternion operations used by every other module.

Vectors are (3,) arrays, quaternions are (4,) arrays in (w, x, y, z) order.
Nothing here mutates its inputs: every operation returns a new array, so
shape definitions can be shared freely as process-wide constants.

Conventions:
- Rotations follow the right-hand rule about their axis
- Quaternion products compose right-to-left: (q2 * q1) applies q1 first
- Basis matrices hold their basis vectors as columns
"""

import jax
import jax.numpy as jnp
from typing import Sequence

jax.config.update("jax_enable_x64", True)


UP = jnp.array([0.0, 1.0, 0.0])
DOWN = jnp.array([0.0, -1.0, 0.0])
IDENTITY_QUATERNION = jnp.array([1.0, 0.0, 0.0, 0.0])

# Golden ratio
PHI = (1 + jnp.sqrt(5.0)) / 2


def vec3(x: float, y: float, z: float) -> jnp.ndarray:
    """Build a float64 3-vector."""
    return jnp.array([x, y, z], dtype=jnp.float64)


@jax.jit
def normalize(v: jnp.ndarray) -> jnp.ndarray:
    """Scale a vector (or each row of a stack of vectors) to unit length.

    Zero vectors are returned unchanged instead of producing NaNs.
    """
    norms = jnp.linalg.norm(v, axis=-1, keepdims=True)
    return jnp.where(norms > 1e-12, v / jnp.where(norms > 1e-12, norms, 1.0), v)


@jax.jit
def angle_between(a: jnp.ndarray, b: jnp.ndarray) -> jnp.ndarray:
    """Unsigned angle between two vectors, in radians."""
    denominator = jnp.linalg.norm(a) * jnp.linalg.norm(b)
    cos_theta = jnp.dot(a, b) / jnp.where(denominator > 1e-12, denominator, 1.0)
    return jnp.arccos(jnp.clip(cos_theta, -1.0, 1.0))


@jax.jit
def quat_from_axis_angle(axis: jnp.ndarray, angle: float) -> jnp.ndarray:
    """Unit quaternion rotating by `angle` radians about `axis`.

    Args:
        axis: (3,) rotation axis, need not be normalised
        angle: Rotation angle in radians

    Returns:
        (4,) quaternion (w, x, y, z)
    """
    unit_axis = normalize(axis)
    half = 0.5 * angle
    return jnp.concatenate([jnp.array([jnp.cos(half)]), jnp.sin(half) * unit_axis])


@jax.jit
def quat_multiply(q2: jnp.ndarray, q1: jnp.ndarray) -> jnp.ndarray:
    """Hamilton product q2 * q1 (rotation q1 followed by q2)."""
    w2, x2, y2, z2 = q2[0], q2[1], q2[2], q2[3]
    w1, x1, y1, z1 = q1[0], q1[1], q1[2], q1[3]
    return jnp.array([
        w2 * w1 - x2 * x1 - y2 * y1 - z2 * z1,
        w2 * x1 + x2 * w1 + y2 * z1 - z2 * y1,
        w2 * y1 - x2 * z1 + y2 * w1 + z2 * x1,
        w2 * z1 + x2 * y1 - y2 * x1 + z2 * w1,
    ])


@jax.jit
def quat_normalize(q: jnp.ndarray) -> jnp.ndarray:
    return q / jnp.linalg.norm(q)


@jax.jit
def quat_rotate(q: jnp.ndarray, v: jnp.ndarray) -> jnp.ndarray:
    """Rotate a vector, or every row of an (N, 3) array, by a unit quaternion.

    Uses v' = v + 2w(u x v) + 2u x (u x v) with u the vector part of q.
    """
    w = q[0]
    u = jnp.broadcast_to(q[1:], v.shape)
    uv = jnp.cross(u, v)
    return v + 2.0 * w * uv + 2.0 * jnp.cross(u, uv)


@jax.jit
def rotate_about_axis(v: jnp.ndarray, axis: jnp.ndarray, angle: float) -> jnp.ndarray:
    """Rodrigues rotation of `v` about `axis` by `angle` radians."""
    k = normalize(axis)
    cos_a = jnp.cos(angle)
    sin_a = jnp.sin(angle)
    return v * cos_a + jnp.cross(k, v) * sin_a + k * jnp.dot(k, v) * (1.0 - cos_a)


@jax.jit
def quat_to_matrix(q: jnp.ndarray) -> jnp.ndarray:
    """3x3 rotation matrix of a unit quaternion."""
    w, x, y, z = q[0], q[1], q[2], q[3]
    return jnp.array([
        [1 - 2 * (y * y + z * z), 2 * (x * y - w * z), 2 * (x * z + w * y)],
        [2 * (x * y + w * z), 1 - 2 * (x * x + z * z), 2 * (y * z - w * x)],
        [2 * (x * z - w * y), 2 * (y * z + w * x), 1 - 2 * (x * x + y * y)],
    ])


def quat_from_matrix(m: jnp.ndarray) -> jnp.ndarray:
    """Unit quaternion of a 3x3 rotation matrix.

    Branches on the largest diagonal term for numerical stability, so this
    runs eagerly on concrete matrices rather than under jit.

    Args:
        m: (3, 3) proper rotation matrix

    Returns:
        (4,) quaternion (w, x, y, z) with non-negative w
    """
    m = jnp.asarray(m, dtype=jnp.float64)
    trace = float(m[0, 0] + m[1, 1] + m[2, 2])

    if trace > 0:
        s = 0.5 / jnp.sqrt(trace + 1.0)
        q = jnp.array([
            0.25 / s,
            (m[2, 1] - m[1, 2]) * s,
            (m[0, 2] - m[2, 0]) * s,
            (m[1, 0] - m[0, 1]) * s,
        ])
    elif m[0, 0] > m[1, 1] and m[0, 0] > m[2, 2]:
        s = 2.0 * jnp.sqrt(1.0 + m[0, 0] - m[1, 1] - m[2, 2])
        q = jnp.array([
            (m[2, 1] - m[1, 2]) / s,
            0.25 * s,
            (m[0, 1] + m[1, 0]) / s,
            (m[0, 2] + m[2, 0]) / s,
        ])
    elif m[1, 1] > m[2, 2]:
        s = 2.0 * jnp.sqrt(1.0 + m[1, 1] - m[0, 0] - m[2, 2])
        q = jnp.array([
            (m[0, 2] - m[2, 0]) / s,
            (m[0, 1] + m[1, 0]) / s,
            0.25 * s,
            (m[1, 2] + m[2, 1]) / s,
        ])
    else:
        s = 2.0 * jnp.sqrt(1.0 + m[2, 2] - m[0, 0] - m[1, 1])
        q = jnp.array([
            (m[1, 0] - m[0, 1]) / s,
            (m[0, 2] + m[2, 0]) / s,
            (m[1, 2] + m[2, 1]) / s,
            0.25 * s,
        ])

    q = quat_normalize(q)
    return jnp.where(q[0] < 0, -q, q)


def basis_matrix(columns: Sequence[jnp.ndarray]) -> jnp.ndarray:
    """Stack three basis vectors as the columns of a 3x3 matrix."""
    return jnp.stack([jnp.asarray(c, dtype=jnp.float64) for c in columns], axis=1)


def basis_change_quaternion(source: Sequence[jnp.ndarray],
                            target: Sequence[jnp.ndarray]) -> jnp.ndarray:
    """Rotation carrying an orthonormal source frame onto a target frame.

    Each frame is given as three unit vectors (right, down, forward) or any
    other consistent ordering; the i-th source vector lands on the i-th
    target vector.

    Args:
        source: Three orthonormal vectors in object space
        target: Three orthonormal vectors in world space

    Returns:
        (4,) quaternion R with R * source[i] == target[i]
    """
    rotation = basis_matrix(target) @ basis_matrix(source).T
    return quat_from_matrix(rotation)


@jax.jit
def transform_points(points: jnp.ndarray,
                     position: jnp.ndarray,
                     quaternion: jnp.ndarray) -> jnp.ndarray:
    """Map (N, 3) object-space points into world space for a pose."""
    return quat_rotate(quaternion, points) + position[None, :]


def normalize_angle(angle: float) -> float:
    """Wrap an angle in radians into [0, 2*pi)."""
    two_pi = 2.0 * float(jnp.pi)
    a = float(angle) % two_pi
    return 0.0 if a >= two_pi else a
