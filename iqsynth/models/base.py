"""
Provider contracts and the immutable state records they publish.

A run has exactly one trajectory, one platform and one antenna provider,
plus zero or more clutter providers. Providers are constructed empty and
configured through ``initialize(parameters)``; handing a provider the
wrong parameter class raises ``ConfigurationError``.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional, Sequence, Tuple

import numpy as np
from scipy.spatial.transform import Rotation

from ..core.errors import ConfigurationError
from ..core.frames import identity


def require_parameters(parameters, expected: type, model_name: str):
    """Return ``parameters`` if it is an ``expected`` instance, else raise."""
    if not isinstance(parameters, expected):
        raise ConfigurationError(
            f"Invalid parameter type for {model_name}: expected "
            f"{expected.__name__}, got {type(parameters).__name__}"
        )
    return parameters


@dataclass(frozen=True)
class KinematicState:
    """Position/velocity/orientation of a body, replaced wholesale each tick."""
    position: np.ndarray
    velocity: np.ndarray
    orientation: Rotation = field(default_factory=identity)


@dataclass(frozen=True)
class TrajectorySnapshot:
    position: np.ndarray
    velocity: np.ndarray
    orientation: Rotation
    is_active: bool


@dataclass(frozen=True)
class PlatformSnapshot:
    position: np.ndarray
    velocity: np.ndarray
    attitude: Rotation
    is_active: bool = True


@dataclass(frozen=True)
class AntennaState:
    """Stabilized boresight (platform frame) and global angular rate."""
    boresight_platform: np.ndarray
    angular_rate_global: np.ndarray


@dataclass(frozen=True)
class AntennaSnapshot:
    boresight_platform: np.ndarray
    angular_rate_global: np.ndarray
    is_active: bool = True


class TrajectoryModel(ABC):
    """Target kinematics, RCS lookup and micro-Doppler generation."""

    @abstractmethod
    def initialize(self, parameters) -> None:
        pass

    @abstractmethod
    def update(self, dt: float) -> None:
        pass

    @property
    @abstractmethod
    def state(self) -> KinematicState:
        pass

    @property
    @abstractmethod
    def is_active(self) -> bool:
        pass

    @abstractmethod
    def get_rcs(self, aspect_local: np.ndarray) -> float:
        """RCS in m^2 for an aspect vector expressed in the target body frame."""

    @abstractmethod
    def get_micro_doppler_phase_noise(self, num_samples: int, sample_interval: float,
                                      carrier_hz: float,
                                      rng: np.random.RandomState) -> np.ndarray:
        pass

    def snapshot(self) -> TrajectorySnapshot:
        s = self.state
        return TrajectorySnapshot(s.position.copy(), s.velocity.copy(),
                                  s.orientation, self.is_active)


class PlatformModel(ABC):
    """Radar-carrying platform kinematics."""

    @abstractmethod
    def initialize(self, parameters) -> None:
        pass

    @abstractmethod
    def update(self, dt: float) -> None:
        pass

    @property
    @abstractmethod
    def state(self) -> KinematicState:
        pass

    def snapshot(self) -> PlatformSnapshot:
        s = self.state
        return PlatformSnapshot(s.position.copy(), s.velocity.copy(), s.orientation)


class AntennaModel(ABC):
    """Pointing, gain pattern and static receive-array geometry."""

    @abstractmethod
    def initialize(self, parameters) -> None:
        pass

    @abstractmethod
    def update(self, dt: float, platform_attitude: Rotation,
               target_position: np.ndarray, platform_position: np.ndarray) -> None:
        pass

    @property
    @abstractmethod
    def state(self) -> AntennaState:
        pass

    @abstractmethod
    def get_gain(self, off_boresight_rad: float) -> float:
        pass

    @property
    @abstractmethod
    def mount_offset(self) -> np.ndarray:
        pass

    @property
    @abstractmethod
    def beamwidth_rad(self) -> float:
        pass

    @property
    @abstractmethod
    def element_positions(self) -> Tuple[np.ndarray, ...]:
        pass

    @property
    @abstractmethod
    def cw_channels(self) -> Tuple[int, ...]:
        pass

    @property
    @abstractmethod
    def fmcw_channels(self) -> Tuple[int, ...]:
        pass

    @property
    def num_channels(self) -> int:
        return len(self.element_positions)

    def is_cw_channel(self, channel: int) -> bool:
        return channel in self.cw_channels

    def mount_position_global(self, platform_attitude: Rotation,
                              platform_position: np.ndarray) -> np.ndarray:
        return np.asarray(platform_position, dtype=float) + platform_attitude.apply(self.mount_offset)

    def boresight_global(self, platform_attitude: Rotation) -> np.ndarray:
        return platform_attitude.apply(self.state.boresight_platform)

    def snapshot(self) -> AntennaSnapshot:
        s = self.state
        return AntennaSnapshot(s.boresight_platform.copy(), s.angular_rate_global.copy())


@dataclass(frozen=True)
class CalibrationReference:
    """Reference point tying clutter power to the target radar equation.

    ``power_w`` is the received power of a ``rcs_m2`` scatterer at
    ``range_m`` seen with one-way pattern gain ``gain``.
    """
    power_w: float = 0.0
    range_m: float = 0.0
    rcs_m2: float = 0.0
    gain: float = 0.0


@dataclass(frozen=True)
class RadarContext:
    """Read-only view handed to clutter providers for one channel and chirp."""
    platform: PlatformSnapshot
    antenna_height_m: float
    boresight_global: np.ndarray
    beamwidth_rad: float
    carrier_hz: float
    bandwidth_hz: float
    chirp_duration_s: float
    sample_rate_hz: float
    reference: CalibrationReference
    channel: int = 0

    @property
    def num_samples(self) -> int:
        return int(round(self.chirp_duration_s * self.sample_rate_hz))

    @property
    def altitude_m(self) -> float:
        return float(self.platform.position[1])


class ClutterModel(ABC):
    """One clutter source; several may be summed per channel."""

    @abstractmethod
    def initialize(self, parameters) -> None:
        pass

    @abstractmethod
    def generate_clutter_signal(self, context: RadarContext,
                                rng: np.random.RandomState) -> np.ndarray:
        """Complex samples for one chirp, length ``context.num_samples``."""


def scaled_clutter_power(clutter_rcs_m2: float, clutter_range_m: float,
                         reference: CalibrationReference) -> float:
    """Clutter power by range^4 / RCS-linear scaling against the reference.

    The clutter patch is assumed to sit on boresight (gain 1). Zero-valued
    reference or range terms contribute a unit factor.
    """
    if reference.range_m == 0 or clutter_range_m == 0:
        scale_range = 1.0
    else:
        scale_range = (reference.range_m / clutter_range_m) ** 4

    scale_rcs = 1.0 if reference.rcs_m2 == 0 else clutter_rcs_m2 / reference.rcs_m2
    scale_gain = 1.0 if reference.gain == 0 else (1.0 / reference.gain) ** 2

    return reference.power_w * scale_range * scale_rcs * scale_gain


def complex_gaussian(num_samples: int, std: float,
                     rng: np.random.RandomState) -> np.ndarray:
    """Zero-mean circular Gaussian samples with per-rail standard deviation ``std``."""
    i = rng.normal(0.0, 1.0, num_samples)
    q = rng.normal(0.0, 1.0, num_samples)
    return (i + 1j * q) * std


def as_index_tuple(indices: Optional[Sequence[int]]) -> Tuple[int, ...]:
    return tuple(int(i) for i in (indices or ()))
