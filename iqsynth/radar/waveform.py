"""
Radar waveforms.

Defines the CW tone and the linear FMCW sweep, and the alternating-bandwidth
chirp plan that selects which FMCW sweep is on air for a given chirp.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from ..core.frames import SPEED_OF_LIGHT


def doppler_shift(radial_velocity: float, carrier_hz: float) -> float:
    """Two-way Doppler f_d = 2 v_r f / c (positive for an opening target)."""
    return 2.0 * radial_velocity * carrier_hz / SPEED_OF_LIGHT


@dataclass(frozen=True)
class Waveform(ABC):
    """Base class for radar waveforms."""

    @property
    @abstractmethod
    def carrier(self) -> float:
        """Effective carrier frequency in Hz."""

    @property
    @abstractmethod
    def bandwidth(self) -> float:
        pass

    @abstractmethod
    def beat_frequency(self, range_m: float, radial_velocity: float) -> float:
        """Baseband frequency of a point target after dechirp/mixing."""

    def doppler(self, radial_velocity: float) -> float:
        return doppler_shift(radial_velocity, self.carrier)


@dataclass(frozen=True)
class CWTone(Waveform):
    """Unmodulated continuous wave; the beat is the Doppler shift."""
    frequency: float

    @property
    def carrier(self) -> float:
        return self.frequency

    @property
    def bandwidth(self) -> float:
        return 0.0

    def beat_frequency(self, range_m: float, radial_velocity: float) -> float:
        return self.doppler(radial_velocity)


@dataclass(frozen=True)
class FMCWChirp(Waveform):
    """Linear up-sweep from ``start_frequency`` over ``bw`` in ``duration``."""
    start_frequency: float
    bw: float
    duration: float

    @property
    def carrier(self) -> float:
        return self.start_frequency + self.bw / 2.0

    @property
    def bandwidth(self) -> float:
        return self.bw

    def range_frequency(self, range_m: float) -> float:
        """f_r = 2 R B / (c T)."""
        return 2.0 * range_m * self.bw / (SPEED_OF_LIGHT * self.duration)

    def beat_frequency(self, range_m: float, radial_velocity: float) -> float:
        return self.range_frequency(range_m) - self.doppler(radial_velocity)


@dataclass(frozen=True)
class AlternatingChirpPlan:
    """Two FMCW sweeps sharing a start frequency, alternated chirp by chirp.

    Even chirp counters use sweep 1, odd counters sweep 2.
    """
    start_frequency: float
    bandwidth_1: float
    bandwidth_2: float
    duration: float

    @property
    def chirp_1(self) -> FMCWChirp:
        return FMCWChirp(self.start_frequency, self.bandwidth_1, self.duration)

    @property
    def chirp_2(self) -> FMCWChirp:
        return FMCWChirp(self.start_frequency, self.bandwidth_2, self.duration)

    def chirp_for(self, chirp_counter: int) -> FMCWChirp:
        return self.chirp_1 if chirp_counter % 2 == 0 else self.chirp_2

    def bandwidth_for(self, chirp_counter: int) -> float:
        return self.chirp_for(chirp_counter).bandwidth
