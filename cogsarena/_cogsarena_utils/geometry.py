"""Geometry helpers shared by the arena core.

Coordinate frame:
    - 3D world coordinates, y-up, left-handed (x right, z forward at yaw 0)
    - Yaw ψ is measured in degrees about +y; positive yaw turns an agent
      toward its right
    - forward(ψ) = (sin ψ, 0, cos ψ), right(ψ) = (cos ψ, 0, -sin ψ)

Agent-local coordinates of a world vector v are (v·right, v·up, v·forward).
The yaw rotation is built with scipy's Rotation so that world→local is a
single inverse application.
"""
import numpy as np
from scipy.spatial.transform import Rotation

UP = np.array([0.0, 1.0, 0.0])

# Below this length a direction is treated as undefined
EPSILON = 1e-9


def yaw_rotation(yaw_deg):
    """Rotation that maps agent-local axes to world axes for a given yaw."""
    return Rotation.from_euler("y", float(yaw_deg), degrees=True)


def forward_axis(yaw_deg) -> np.ndarray:
    """World-space forward unit vector for a yaw angle in degrees."""
    return yaw_rotation(yaw_deg).apply([0.0, 0.0, 1.0])


def right_axis(yaw_deg) -> np.ndarray:
    """World-space right unit vector for a yaw angle in degrees."""
    return yaw_rotation(yaw_deg).apply([1.0, 0.0, 0.0])


def to_local(vector, yaw_deg) -> np.ndarray:
    """Express a world-space direction in the agent's local frame.

    Args:
        vector: World-space 3-vector.
        yaw_deg: Agent yaw in degrees.

    Returns:
        np.ndarray: [right, up, forward] components, shape (3,).
    """
    # Rotation.apply rejects read-only buffers such as snapshot arrays
    return yaw_rotation(yaw_deg).apply(np.array(vector, dtype=np.float64), inverse=True)


def safe_normalize(vector) -> np.ndarray:
    """Unit vector in the direction of `vector`, or zeros if it has no length."""
    vector = np.asarray(vector, dtype=np.float64)
    norm = np.linalg.norm(vector)
    if norm < EPSILON:
        return np.zeros_like(vector)
    return vector / norm


def heading_degrees(yaw_deg) -> float:
    """Wrap a yaw angle into [0, 360)."""
    heading = float(yaw_deg) % 360.0
    # -1e-17 % 360.0 == 360.0 in floating point
    return 0.0 if heading >= 360.0 else heading


def signed_angle(from_vec, to_vec, axis=UP) -> float:
    """Signed angle in degrees from `from_vec` to `to_vec` around `axis`.

    The magnitude is the unsigned angle between the two vectors; the sign is
    the sign of axis·(from × to), with zero counting as positive. Result
    range is (-180, 180]. If either vector has no length the angle is 0.
    """
    from_vec = np.asarray(from_vec, dtype=np.float64)
    to_vec = np.asarray(to_vec, dtype=np.float64)
    denom = np.linalg.norm(from_vec) * np.linalg.norm(to_vec)
    if denom < EPSILON:
        return 0.0
    cos_angle = np.clip(np.dot(from_vec, to_vec) / denom, -1.0, 1.0)
    unsigned = float(np.degrees(np.arccos(cos_angle)))
    sign = 1.0 if np.dot(axis, np.cross(from_vec, to_vec)) >= 0.0 else -1.0
    return sign * unsigned


def horizontal(vector) -> np.ndarray:
    """Project a world vector onto the ground (x-z) plane."""
    flat = np.array(vector, dtype=np.float64)
    flat[1] = 0.0
    return flat
