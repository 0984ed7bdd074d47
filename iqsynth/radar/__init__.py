"""
Radar configuration, waveforms, physics and I/Q synthesis.
"""

from .config import RadarConfig
from .waveform import Waveform, CWTone, FMCWChirp, AlternatingChirpPlan, doppler_shift
from .physics import RadarPhysicsSnapshot, compute_physics, inactive_snapshot, antenna_position
from .synthesis import (
    ChannelSamples,
    ChannelStreams,
    IQSynthesizer,
    channel_random_streams,
    quantize,
)

__all__ = [
    'RadarConfig',
    'Waveform', 'CWTone', 'FMCWChirp', 'AlternatingChirpPlan', 'doppler_shift',
    'RadarPhysicsSnapshot', 'compute_physics', 'inactive_snapshot', 'antenna_position',
    'ChannelSamples', 'ChannelStreams', 'IQSynthesizer', 'channel_random_streams', 'quantize',
]
