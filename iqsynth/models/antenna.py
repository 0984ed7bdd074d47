"""
Stabilized gimbal antenna carrying the 8-element receive array.

The gimbal points the mount at the target in the global frame and reports
that direction in platform coordinates, i.e. with platform sway removed.
"""

import math
from typing import Optional, Tuple

import numpy as np
from scipy.spatial.transform import Rotation

from .base import AntennaModel, AntennaState, as_index_tuple, require_parameters
from ..core.errors import ConfigurationError
from ..core.frames import WORLD_NORTH, as_vec3, clamped_acos, normalize
from ..scene.config import AntennaParameters

LN2: float = math.log(2.0)


def rotate_towards(current: np.ndarray, target: np.ndarray, max_angle: float) -> np.ndarray:
    """Rotate unit vector ``current`` toward ``target`` by at most ``max_angle`` rad."""
    angle = clamped_acos(float(np.dot(current, target)))
    if angle <= max_angle:
        return target.copy()
    axis = np.cross(current, target)
    if np.dot(axis, axis) == 0.0:
        # Antiparallel: any perpendicular axis will do.
        axis = np.cross(current, WORLD_NORTH)
        if np.dot(axis, axis) == 0.0:
            axis = np.array([1.0, 0.0, 0.0])
    return Rotation.from_rotvec(normalize(axis) * max_angle).apply(current)


class GimbalAntenna(AntennaModel):
    """
    Gimbal tracker with a Gaussian (or sinc) beam pattern.

    The Gaussian constant k = ln(2) / (beamwidth / 2)^2 puts the half-power
    point at half the beamwidth.

    Servo limits (max slew rate and tracking jitter) are configuration
    values that only act when ``apply_servo_limits`` is set; otherwise the
    gimbal points exactly at the target every tick.
    """

    def __init__(self):
        self.parameters: Optional[AntennaParameters] = None
        self._mount_offset = np.zeros(3)
        self._beamwidth_rad = 0.0
        self.gain_constant_k = 0.0
        self.use_sidelobe = False
        self._elements: Tuple[np.ndarray, ...] = ()
        self._cw: Tuple[int, ...] = ()
        self._fmcw: Tuple[int, ...] = ()
        self.max_slew_rate_rad_s = 0.0
        self.tracking_noise_std_rad = 0.0
        self.apply_servo_limits = False
        self.rng = np.random.RandomState()

        self._state = AntennaState(WORLD_NORTH.copy(), np.zeros(3))
        self._previous_direction_global = WORLD_NORTH.copy()

    def initialize(self, parameters) -> None:
        p = require_parameters(parameters, AntennaParameters, "GimbalAntenna")

        elements = tuple(as_vec3(e) for e in p.element_positions)
        cw = as_index_tuple(p.cw_channel_indices)
        fmcw = as_index_tuple(p.fmcw_channel_indices)
        if set(cw) & set(fmcw):
            raise ConfigurationError("CW and FMCW channel sets overlap")
        if sorted(cw + fmcw) != list(range(len(elements))):
            raise ConfigurationError(
                f"CW/FMCW indices {cw + fmcw} must partition {len(elements)} elements"
            )

        self.parameters = p
        self._mount_offset = as_vec3(p.mount_offset)
        self._elements = elements
        self._cw = cw
        self._fmcw = fmcw

        self._beamwidth_rad = math.radians(p.beamwidth)
        if self._beamwidth_rad > 0:
            self.gain_constant_k = LN2 / (self._beamwidth_rad / 2.0) ** 2
        else:
            self.gain_constant_k = 0.0
        self.use_sidelobe = p.use_sidelobe

        self.max_slew_rate_rad_s = math.radians(p.max_slew_rate)
        self.tracking_noise_std_rad = math.radians(p.tracking_noise_std)
        self.apply_servo_limits = p.apply_servo_limits

        self._state = AntennaState(WORLD_NORTH.copy(), np.zeros(3))
        self._previous_direction_global = WORLD_NORTH.copy()

    def set_random_state(self, rng: np.random.RandomState) -> None:
        """Stream used for tracking jitter when servo limits are applied."""
        self.rng = rng

    @property
    def state(self) -> AntennaState:
        return self._state

    @property
    def mount_offset(self) -> np.ndarray:
        return self._mount_offset

    @property
    def beamwidth_rad(self) -> float:
        return self._beamwidth_rad

    @property
    def element_positions(self) -> Tuple[np.ndarray, ...]:
        return self._elements

    @property
    def cw_channels(self) -> Tuple[int, ...]:
        return self._cw

    @property
    def fmcw_channels(self) -> Tuple[int, ...]:
        return self._fmcw

    def _servo(self, direction: np.ndarray, dt: float) -> np.ndarray:
        pointing = rotate_towards(self._previous_direction_global, direction,
                                  self.max_slew_rate_rad_s * dt)
        if self.tracking_noise_std_rad > 0:
            jitter = self.rng.normal(0.0, self.tracking_noise_std_rad, 3)
            jitter -= np.dot(jitter, pointing) * pointing
            pointing = normalize(Rotation.from_rotvec(jitter).apply(pointing))
        return pointing

    def update(self, dt: float, platform_attitude: Rotation,
               target_position: np.ndarray, platform_position: np.ndarray) -> None:
        mount_global = self.mount_position_global(platform_attitude, platform_position)
        direction = normalize(np.asarray(target_position, dtype=float) - mount_global)
        if not direction.any():
            direction = self._previous_direction_global

        if self.apply_servo_limits and dt > 0:
            direction = self._servo(direction, dt)

        boresight_platform = platform_attitude.inv().apply(direction)

        angular_rate = np.zeros(3)
        if dt > 0:
            previous = self._previous_direction_global
            axis = np.cross(previous, direction)
            angle = clamped_acos(float(np.dot(previous, direction)))
            if np.dot(axis, axis) > 0:
                angular_rate = normalize(axis) * angle / dt
            self._previous_direction_global = direction

        self._state = AntennaState(boresight_platform, angular_rate)

    def get_gain(self, off_boresight_rad: float) -> float:
        """One-way pattern gain (linear, 1.0 on boresight)."""
        if self.use_sidelobe:
            x = self.gain_constant_k * off_boresight_rad
            if x == 0.0:
                return 1.0
            return abs(math.sin(x) / x)

        if self.gain_constant_k == 0:
            return 1.0
        return math.exp(-self.gain_constant_k * off_boresight_rad * off_boresight_rad)
