"""
Provider models

- base: provider contracts, snapshots, clutter context and power scaling
- targets: ballistic projectile trajectory with aspect RCS and micro-Doppler
- platform: ship with sinusoidal pitch/roll
- antenna: stabilized gimbal with Gaussian/sinc beam pattern
- clutter: sea (grazing-angle sigma-zero) and rain (Marshall-Palmer volume) clutter
"""

from .base import (
    KinematicState,
    TrajectorySnapshot,
    PlatformSnapshot,
    AntennaState,
    AntennaSnapshot,
    TrajectoryModel,
    PlatformModel,
    AntennaModel,
    ClutterModel,
    CalibrationReference,
    RadarContext,
    scaled_clutter_power,
    complex_gaussian,
)
from .targets import BallisticTrajectory, RCSTable, air_density
from .platform import ShipPlatform
from .antenna import GimbalAntenna
from .clutter import SeaClutterModel, RainClutterModel, EFFECTIVE_EARTH_RADIUS_M

__all__ = [
    # Contracts
    'KinematicState',
    'TrajectorySnapshot',
    'PlatformSnapshot',
    'AntennaState',
    'AntennaSnapshot',
    'TrajectoryModel',
    'PlatformModel',
    'AntennaModel',
    'ClutterModel',
    'CalibrationReference',
    'RadarContext',
    'scaled_clutter_power',
    'complex_gaussian',
    # Targets
    'BallisticTrajectory',
    'RCSTable',
    'air_density',
    # Platform / antenna
    'ShipPlatform',
    'GimbalAntenna',
    # Clutter
    'SeaClutterModel',
    'RainClutterModel',
    'EFFECTIVE_EARTH_RADIUS_M',
]
