"""Vector and orientation helpers.

Global frame convention used throughout the package:
    X = East/right, Y = Up, Z = North/forward (0 deg azimuth).

Orientations are unit quaternions held as ``scipy.spatial.transform.Rotation``
instances. ``rotation.apply(v)`` maps a local/body vector into the global
frame; ``rotation.inv().apply(v)`` maps a global vector into the body frame.
"""

import math

import numpy as np
from scipy.spatial.transform import Rotation

SPEED_OF_LIGHT: float = 299792458.0
BOLTZMANN: float = 1.380649e-23
GRAVITY: float = 9.81

WORLD_UP = np.array([0.0, 1.0, 0.0])
WORLD_NORTH = np.array([0.0, 0.0, 1.0])


def vec3(x=0.0, y=0.0, z=0.0) -> np.ndarray:
    return np.array([float(x), float(y), float(z)])


def as_vec3(v) -> np.ndarray:
    """Coerce a 3-sequence to a float ndarray, rejecting other shapes."""
    arr = np.asarray(v, dtype=float).reshape(-1)
    if arr.shape != (3,):
        raise ValueError(f"Expected a 3-vector, got shape {arr.shape}")
    return arr.copy()


def normalize(v: np.ndarray) -> np.ndarray:
    """Unit vector along v, or the zero vector when |v| is zero."""
    n = float(np.linalg.norm(v))
    if n == 0.0:
        return np.zeros(3)
    return np.asarray(v, dtype=float) / n


def clamped_acos(x: float) -> float:
    return math.acos(max(-1.0, min(1.0, float(x))))


def angle_between(a: np.ndarray, b: np.ndarray) -> float:
    """Angle in radians between two (not necessarily unit) vectors."""
    return clamped_acos(float(np.dot(normalize(a), normalize(b))))


def spherical_to_cartesian(magnitude: float, azimuth_deg: float,
                           elevation_deg: float) -> np.ndarray:
    """Speed/azimuth/elevation to a global vector.

    Azimuth is measured from +Z (North) toward +X (East); elevation is
    positive toward +Y (Up).
    """
    az = math.radians(azimuth_deg)
    el = math.radians(elevation_deg)
    horizontal = magnitude * math.cos(el)
    return vec3(horizontal * math.sin(az),
                magnitude * math.sin(el),
                horizontal * math.cos(az))


def identity() -> Rotation:
    return Rotation.identity()


def from_yaw_pitch_roll(yaw: float, pitch: float, roll: float) -> Rotation:
    """Attitude from yaw (about Y), pitch (about X) and roll (about Z), radians.

    Roll is applied first, then pitch, then yaw.
    """
    return Rotation.from_euler("YXZ", [yaw, pitch, roll])


def look_along(direction: np.ndarray, up: np.ndarray = WORLD_UP) -> Rotation:
    """Orientation whose body +X axis points along ``direction``.

    Body +Y is the component of ``up`` orthogonal to the direction and body
    +Z completes the right-handed frame. A direction parallel to ``up``
    uses world North as the reference instead.
    """
    x_axis = normalize(direction)
    z_axis = np.cross(x_axis, up)
    if np.dot(z_axis, z_axis) < 1e-12:
        z_axis = np.cross(x_axis, WORLD_NORTH)
    z_axis = normalize(z_axis)
    y_axis = np.cross(z_axis, x_axis)
    return Rotation.from_matrix(np.column_stack([x_axis, y_axis, z_axis]))


def to_global(orientation: Rotation, v: np.ndarray) -> np.ndarray:
    return orientation.apply(np.asarray(v, dtype=float))


def to_local(orientation: Rotation, v: np.ndarray) -> np.ndarray:
    return orientation.inv().apply(np.asarray(v, dtype=float))
