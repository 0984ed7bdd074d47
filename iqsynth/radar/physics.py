"""
Radar physics calculator.

Turns the current trajectory, platform and antenna states into the
per-chirp quantities every channel needs: range, radial velocity, line of
sight, RCS, pattern gain and the CW/FMCW beat frequencies.
"""

from dataclasses import dataclass
from typing import Tuple

import numpy as np

from .config import RadarConfig
from .waveform import AlternatingChirpPlan, CWTone
from ..core.frames import WORLD_NORTH, angle_between, normalize
from ..models.base import AntennaModel, PlatformModel, TrajectoryModel


@dataclass(frozen=True)
class RadarPhysicsSnapshot:
    """Target-relative physical state for one chirp.

    Attributes:
        range_m: Antenna-to-target distance
        radial_velocity: (v_target - v_platform) . LOS, positive opening
        los_unit: Global unit vector from antenna to target
        rcs_m2: Aspect-dependent target RCS
        gain: One-way antenna pattern gain toward the target
        doppler_cw: CW Doppler shift (also the CW beat)
        doppler_fmcw: Doppler of the FMCW sweep on air this chirp
        fmcw_beat_1: Beat frequency of sweep 1
        fmcw_beat_2: Beat frequency of sweep 2
        bandwidth: Bandwidth of the FMCW sweep on air this chirp
        fmcw_carrier: Effective carrier of the FMCW sweep on air this chirp
        cw_carrier: CW carrier frequency
        chirp_counter: Chirp sequence number the snapshot was built for
        target_active: False once the target has hit the surface
    """
    range_m: float
    radial_velocity: float
    los_unit: np.ndarray
    rcs_m2: float
    gain: float
    doppler_cw: float
    doppler_fmcw: float
    fmcw_beat_1: float
    fmcw_beat_2: float
    bandwidth: float
    fmcw_carrier: float
    cw_carrier: float
    chirp_counter: int
    target_active: bool

    @property
    def fmcw_beat(self) -> float:
        """Beat of the sweep on air; same parity rule as ``bandwidth``."""
        return self.fmcw_beat_1 if self.chirp_counter % 2 == 0 else self.fmcw_beat_2

    def channel_waveform(self, is_cw: bool) -> Tuple[float, float]:
        """(beat_hz, carrier_hz) for a CW or FMCW channel."""
        if is_cw:
            return self.doppler_cw, self.cw_carrier
        return self.fmcw_beat, self.fmcw_carrier


def _chirp_plan(radar: RadarConfig) -> AlternatingChirpPlan:
    return AlternatingChirpPlan(radar.fmcw_start_frequency, radar.bandwidth_1,
                                radar.bandwidth_2, radar.chirp_duration)


def antenna_position(platform: PlatformModel, antenna: AntennaModel) -> np.ndarray:
    """Global position of the gimbal mount."""
    s = platform.state
    return antenna.mount_position_global(s.orientation, s.position)


def inactive_snapshot(radar: RadarConfig, chirp_counter: int) -> RadarPhysicsSnapshot:
    """
    Snapshot for a chirp with no live target.

    Target-derived fields are zero. The waveform fields (on-air bandwidth
    and carriers) are still filled in since noise and clutter need them.
    """
    chirp = _chirp_plan(radar).chirp_for(chirp_counter)
    return RadarPhysicsSnapshot(
        range_m=0.0,
        radial_velocity=0.0,
        los_unit=WORLD_NORTH.copy(),
        rcs_m2=0.0,
        gain=0.0,
        doppler_cw=0.0,
        doppler_fmcw=0.0,
        fmcw_beat_1=0.0,
        fmcw_beat_2=0.0,
        bandwidth=chirp.bandwidth,
        fmcw_carrier=chirp.carrier,
        cw_carrier=radar.cw_frequency,
        chirp_counter=chirp_counter,
        target_active=False,
    )


def compute_physics(trajectory: TrajectoryModel, platform: PlatformModel,
                    antenna: AntennaModel, radar: RadarConfig,
                    chirp_counter: int) -> RadarPhysicsSnapshot:
    """
    Build the physics snapshot for the current chirp.

    Args:
        trajectory: Target provider (already advanced to this tick)
        platform: Platform provider
        antenna: Antenna provider, updated against the two above
        radar: Waveform and radar-equation parameters
        chirp_counter: Chirp sequence number; its parity picks the sweep

    Returns:
        RadarPhysicsSnapshot; an inactive snapshot if the target is down
    """
    if not trajectory.is_active:
        return inactive_snapshot(radar, chirp_counter)

    target = trajectory.state
    plat = platform.state

    relative_position = target.position - antenna_position(platform, antenna)
    range_m = float(np.linalg.norm(relative_position))
    los_unit = normalize(relative_position)

    radial_velocity = float(np.dot(target.velocity - plat.velocity, los_unit))

    # Aspect seen from the target: direction back to the radar, body frame
    aspect_local = target.orientation.inv().apply(-relative_position)
    rcs = trajectory.get_rcs(aspect_local)

    boresight_global = antenna.boresight_global(plat.orientation)
    gain = antenna.get_gain(angle_between(boresight_global, los_unit))

    cw = CWTone(radar.cw_frequency)
    plan = _chirp_plan(radar)
    sweep_1, sweep_2 = plan.chirp_1, plan.chirp_2
    on_air = plan.chirp_for(chirp_counter)

    return RadarPhysicsSnapshot(
        range_m=range_m,
        radial_velocity=radial_velocity,
        los_unit=los_unit,
        rcs_m2=rcs,
        gain=gain,
        doppler_cw=cw.beat_frequency(range_m, radial_velocity),
        doppler_fmcw=on_air.doppler(radial_velocity),
        fmcw_beat_1=sweep_1.beat_frequency(range_m, radial_velocity),
        fmcw_beat_2=sweep_2.beat_frequency(range_m, radial_velocity),
        bandwidth=on_air.bandwidth,
        fmcw_carrier=on_air.carrier,
        cw_carrier=cw.carrier,
        chirp_counter=chirp_counter,
        target_active=True,
    )
