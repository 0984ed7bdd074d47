"""
Ballistic projectile trajectory with aspect-dependent RCS and spin micro-Doppler.

References:
- McCoy, R.L. "Modern Exterior Ballistics"
- Chen, V.C. "The Micro-Doppler Effect in Radar"
"""

import math
from dataclasses import dataclass
from typing import Sequence, Tuple

import numpy as np

from .base import KinematicState, TrajectoryModel, require_parameters
from ..core.errors import ConfigurationError
from ..core.frames import (
    GRAVITY,
    SPEED_OF_LIGHT,
    as_vec3,
    clamped_acos,
    identity,
    look_along,
    normalize,
    spherical_to_cartesian,
)
from ..scene.config import BallisticParameters

SEA_LEVEL_AIR_DENSITY: float = 1.225  # kg/m^3
ATMOSPHERE_SCALE_HEIGHT: float = 8500.0  # m

# Below this |v|^2 the look-at frame is undefined and the previous
# orientation is kept.
MIN_ORIENTATION_SPEED_SQ: float = 1e-4

NOSE_AXIS = np.array([1.0, 0.0, 0.0])


def air_density(altitude_m: float) -> float:
    """Exponential atmosphere: rho(h) = rho0 * exp(-h / H)."""
    return SEA_LEVEL_AIR_DENSITY * math.exp(-altitude_m / ATMOSPHERE_SCALE_HEIGHT)


@dataclass(frozen=True)
class RCSTable:
    """Aspect-angle RCS lookup, linearly interpolated with flat extrapolation.

    Attributes:
        angles_deg: Strictly increasing aspect angles in degrees
        rcs_m2: RCS values in m^2, one per angle
    """
    angles_deg: np.ndarray
    rcs_m2: np.ndarray

    @classmethod
    def from_points(cls, points: Sequence[Tuple[float, float]]) -> 'RCSTable':
        if len(points) == 0:
            raise ConfigurationError("RCS table needs at least one entry")
        angles = np.array([float(a) for a, _ in points])
        values = np.array([float(s) for _, s in points])
        if np.any(np.diff(angles) <= 0):
            raise ConfigurationError("RCS table angles must be strictly increasing")
        return cls(angles, values)

    def __call__(self, angle_deg: float) -> float:
        # np.interp holds the end values outside the table domain.
        return float(np.interp(angle_deg, self.angles_deg, self.rcs_m2))


class BallisticTrajectory(TrajectoryModel):
    """
    Point-mass projectile under gravity and altitude-dependent drag.

    Integrates with explicit Euler (velocity first, then position). The
    body +X axis is the nose and is kept aligned with the velocity vector.
    The target goes inactive, permanently, once its height reaches 0.
    """

    def __init__(self):
        self.drag_coefficient = 0.0
        self.mass = 1.0
        self.cross_sectional_area = 0.0
        self.spin_rate_hz = 0.0
        self.radius_m = 0.0
        self.max_micro_velocity = 0.0
        self.rcs_table = None
        self._state = KinematicState(np.zeros(3), np.zeros(3))
        self._active = False

    def initialize(self, parameters) -> None:
        p = require_parameters(parameters, BallisticParameters, "BallisticTrajectory")
        if p.mass <= 0:
            raise ConfigurationError(f"Projectile mass must be positive, got {p.mass}")

        self.drag_coefficient = p.drag_coefficient
        self.mass = p.mass
        self.cross_sectional_area = p.cross_sectional_area
        self.rcs_table = RCSTable.from_points(p.rcs_table)

        # Spin sets the tangential speed of the body skin.
        self.spin_rate_hz = p.spin_rate_hz
        self.radius_m = math.sqrt(max(p.cross_sectional_area, 0.0) / math.pi)
        self.max_micro_velocity = 2.0 * math.pi * self.radius_m * self.spin_rate_hz

        velocity = spherical_to_cartesian(p.initial_speed, p.launch_azimuth, p.launch_elevation)
        if velocity.dot(velocity) >= MIN_ORIENTATION_SPEED_SQ:
            orientation = look_along(velocity)
        else:
            orientation = identity()
        self._state = KinematicState(as_vec3(p.initial_position), velocity, orientation)
        self._active = True

    @property
    def state(self) -> KinematicState:
        return self._state

    @property
    def is_active(self) -> bool:
        return self._active

    def drag_force(self, position: np.ndarray, velocity: np.ndarray) -> np.ndarray:
        speed = float(np.linalg.norm(velocity))
        if speed == 0.0:
            return np.zeros(3)
        rho = air_density(position[1])
        magnitude = 0.5 * rho * speed * speed * self.drag_coefficient * self.cross_sectional_area
        return -normalize(velocity) * magnitude

    def update(self, dt: float) -> None:
        if not self._active:
            return

        s = self._state
        gravity = np.array([0.0, -GRAVITY * self.mass, 0.0])
        acceleration = (self.drag_force(s.position, s.velocity) + gravity) / self.mass

        velocity = s.velocity + acceleration * dt
        position = s.position + velocity * dt

        if velocity.dot(velocity) < MIN_ORIENTATION_SPEED_SQ:
            orientation = s.orientation
        else:
            orientation = look_along(velocity)

        self._state = KinematicState(position, velocity, orientation)

        if position[1] <= 0:
            self._active = False

    def get_rcs(self, aspect_local: np.ndarray) -> float:
        """RCS from the angle between the nose (+X) and the aspect vector."""
        cos_angle = float(np.dot(NOSE_AXIS, normalize(aspect_local)))
        angle_deg = math.degrees(clamped_acos(cos_angle))
        return self.rcs_table(angle_deg)

    def get_micro_doppler_phase_noise(self, num_samples: int, sample_interval: float,
                                      carrier_hz: float,
                                      rng: np.random.RandomState) -> np.ndarray:
        """
        Bounded random-walk phase modelling spin-induced micro-Doppler.

        Each sample adds a uniform step in [-max_step, +max_step] where
        max_step = 2*pi * (2 * v_tan * f_c / c) * dt_sample.

        Args:
            num_samples: Length of the sequence
            sample_interval: ADC sample spacing in seconds
            carrier_hz: Carrier frequency of the receiving channel
            rng: Random stream owned by the caller

        Returns:
            Cumulative phase in radians, shape (num_samples,)
        """
        max_doppler_hz = 2.0 * self.max_micro_velocity * carrier_hz / SPEED_OF_LIGHT
        max_phase_step = 2.0 * math.pi * max_doppler_hz * sample_interval
        steps = rng.uniform(-1.0, 1.0, num_samples) * max_phase_step
        return np.cumsum(steps)
