"""
Per-channel I/Q synthesis and 16-bit quantization.

Each receive element gets target + summed clutter + thermal noise, built
independently so the eight channels can run on a thread pool. Every
channel owns its random streams; nothing mutable is shared between
workers.
"""

import math
import warnings
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np

from .config import INT16_MAX, INT16_MIN, RadarConfig
from .physics import RadarPhysicsSnapshot
from ..core.frames import SPEED_OF_LIGHT
from ..models.base import (
    AntennaModel,
    CalibrationReference,
    ClutterModel,
    PlatformSnapshot,
    RadarContext,
    TrajectoryModel,
    complex_gaussian,
)

NOISE_STREAM: int = 0
CLUTTER_STREAM: int = 1


@dataclass(frozen=True)
class ChannelStreams:
    """Independent random streams owned by one channel."""
    noise: np.random.RandomState
    clutter: np.random.RandomState


def channel_random_streams(base_seed: int, channel: int) -> ChannelStreams:
    """Deterministic per-channel streams derived from the run seed."""
    seed = int(base_seed) & 0xFFFFFFFF
    return ChannelStreams(
        noise=np.random.RandomState([seed, channel, NOISE_STREAM]),
        clutter=np.random.RandomState([seed, channel, CLUTTER_STREAM]),
    )


@dataclass(frozen=True)
class ChannelSamples:
    """One chirp of quantized samples for one receive element."""
    channel: int
    is_cw: bool
    i: np.ndarray
    q: np.ndarray


def quantize(signal: np.ndarray, full_scale: float) -> Tuple[np.ndarray, np.ndarray]:
    """
    Scale complex samples so ``full_scale`` maps to 32767 and clip to int16.

    Values are truncated toward zero after clipping. A non-positive full
    scale has no meaningful mapping and yields all-zero output.
    """
    n = len(signal)
    if full_scale <= 0:
        warnings.warn("Quantization full scale is zero; emitting all-zero samples")
        return np.zeros(n, dtype=np.int16), np.zeros(n, dtype=np.int16)

    scaled = np.asarray(signal, dtype=complex) / full_scale * INT16_MAX
    i = np.clip(scaled.real, INT16_MIN, INT16_MAX).astype(np.int16)
    q = np.clip(scaled.imag, INT16_MIN, INT16_MAX).astype(np.int16)
    return i, q


class IQSynthesizer:
    """
    Combines the physics snapshot, clutter providers and receiver noise
    into quantized per-channel sample blocks.

    Clutter power is referenced to the radar equation evaluated for a
    ``radar.reference_rcs`` scatterer at ``radar.reference_range`` on
    boresight, at the channel's carrier. The reference does not depend on
    the target, so clutter keeps its level after the target goes down.
    """

    def __init__(self, radar: RadarConfig, trajectory: TrajectoryModel,
                 antenna: AntennaModel, clutter_models: Sequence[ClutterModel] = (),
                 max_workers: Optional[int] = None):
        self.radar = radar
        self.trajectory = trajectory
        self.antenna = antenna
        self.clutter_models = list(clutter_models)
        self.max_workers = max_workers

    def calibration_reference(self, carrier_hz: float) -> CalibrationReference:
        r = self.radar
        power = r.radar_equation(r.reference_range, r.reference_rcs, 1.0, carrier_hz)
        return CalibrationReference(power_w=power, range_m=r.reference_range,
                                    rcs_m2=r.reference_rcs, gain=1.0)

    def clutter_context(self, channel: int, carrier_hz: float, bandwidth_hz: float,
                        platform: PlatformSnapshot) -> RadarContext:
        mount = self.antenna.mount_position_global(platform.attitude, platform.position)
        return RadarContext(
            platform=platform,
            antenna_height_m=float(mount[1]),
            boresight_global=self.antenna.boresight_global(platform.attitude),
            beamwidth_rad=self.antenna.beamwidth_rad,
            carrier_hz=carrier_hz,
            bandwidth_hz=bandwidth_hz,
            chirp_duration_s=self.radar.chirp_duration,
            sample_rate_hz=self.radar.adc_sample_rate,
            reference=self.calibration_reference(carrier_hz),
            channel=channel,
        )

    def initial_phase(self, channel: int, physics: RadarPhysicsSnapshot,
                      carrier_hz: float, platform: PlatformSnapshot) -> float:
        """Round-trip phase to the mount plus the element's array offset."""
        base_phase = -4.0 * math.pi * physics.range_m * carrier_hz / SPEED_OF_LIGHT

        element_global = platform.attitude.apply(self.antenna.element_positions[channel])
        path_difference = float(np.dot(element_global, physics.los_unit))
        array_phase = -4.0 * math.pi * carrier_hz * path_difference / SPEED_OF_LIGHT

        return base_phase + array_phase

    def target_signal(self, channel: int, physics: RadarPhysicsSnapshot,
                      platform: PlatformSnapshot, rng: np.random.RandomState) -> np.ndarray:
        r = self.radar
        n = r.num_samples
        beat, carrier = physics.channel_waveform(self.antenna.is_cw_channel(channel))

        power = r.radar_equation(physics.range_m, physics.rcs_m2, physics.gain, carrier)
        amplitude = math.sqrt(2.0 * power)

        micro_doppler = self.trajectory.get_micro_doppler_phase_noise(
            n, r.sample_interval, carrier, rng)

        t = np.arange(n) * r.sample_interval
        phase = (2.0 * np.pi * beat * t
                 + self.initial_phase(channel, physics, carrier, platform)
                 + micro_doppler)
        return amplitude * np.exp(1j * phase)

    def synthesize_channel(self, channel: int, physics: RadarPhysicsSnapshot,
                           platform: PlatformSnapshot,
                           streams: ChannelStreams) -> ChannelSamples:
        r = self.radar
        n = r.num_samples
        is_cw = self.antenna.is_cw_channel(channel)
        _, carrier = physics.channel_waveform(is_cw)

        total = np.zeros(n, dtype=complex)

        if self.clutter_models:
            context = self.clutter_context(channel, carrier, physics.bandwidth, platform)
            for model in self.clutter_models:
                total += model.generate_clutter_signal(context, streams.clutter)

        if physics.target_active:
            total += self.target_signal(channel, physics, platform, streams.noise)

        total += complex_gaussian(n, r.thermal_noise_std, streams.noise)

        i, q = quantize(total, r.full_scale)
        return ChannelSamples(channel, is_cw, i, q)

    def synthesize(self, physics: RadarPhysicsSnapshot, platform: PlatformSnapshot,
                   streams: Sequence[ChannelStreams]) -> List[ChannelSamples]:
        """Run every channel on a worker pool; returns results in channel order."""
        if len(streams) != self.antenna.num_channels:
            raise ValueError(
                f"Need {self.antenna.num_channels} channel streams, got {len(streams)}")

        def work(channel: int) -> ChannelSamples:
            return self.synthesize_channel(channel, physics, platform, streams[channel])

        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            return list(pool.map(work, range(self.antenna.num_channels)))
