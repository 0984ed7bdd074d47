"""Ship platform: constant course plus sinusoidal pitch and roll."""

import math

import numpy as np

from .base import KinematicState, PlatformModel, require_parameters
from ..core.frames import as_vec3, from_yaw_pitch_roll, spherical_to_cartesian
from ..scene.config import ShipParameters


class ShipPlatform(PlatformModel):
    """
    Ship moving at constant velocity along its course.

    Attitude is yaw = course (fixed), pitch = A_p * sin(w_p * t) and
    roll = A_r * cos(w_r * t), the cosine giving roll a quarter-period
    offset from pitch.
    """

    def __init__(self):
        self.simulation_time = 0.0
        self.pitch_amplitude_rad = 0.0
        self.pitch_frequency_rad_s = 0.0
        self.roll_amplitude_rad = 0.0
        self.roll_frequency_rad_s = 0.0
        self.yaw_rad = 0.0
        self._state = KinematicState(np.zeros(3), np.zeros(3))

    def initialize(self, parameters) -> None:
        p = require_parameters(parameters, ShipParameters, "ShipPlatform")

        velocity = spherical_to_cartesian(p.course_speed, p.course_direction, 0.0)

        self.pitch_amplitude_rad = math.radians(p.pitch_amplitude)
        self.pitch_frequency_rad_s = 2.0 * math.pi / p.pitch_period if p.pitch_period > 0 else 0.0
        self.roll_amplitude_rad = math.radians(p.roll_amplitude)
        self.roll_frequency_rad_s = 2.0 * math.pi / p.roll_period if p.roll_period > 0 else 0.0

        self.yaw_rad = math.radians(p.course_direction)
        self.simulation_time = 0.0
        self._state = KinematicState(as_vec3(p.initial_position), velocity,
                                     from_yaw_pitch_roll(self.yaw_rad, 0.0, 0.0))

    @property
    def state(self) -> KinematicState:
        return self._state

    def attitude_at(self, t: float):
        pitch = self.pitch_amplitude_rad * math.sin(self.pitch_frequency_rad_s * t)
        roll = self.roll_amplitude_rad * math.cos(self.roll_frequency_rad_s * t)
        return from_yaw_pitch_roll(self.yaw_rad, pitch, roll)

    def update(self, dt: float) -> None:
        self.simulation_time += dt
        s = self._state
        position = s.position + s.velocity * dt
        self._state = KinematicState(position, s.velocity.copy(),
                                     self.attitude_at(self.simulation_time))
