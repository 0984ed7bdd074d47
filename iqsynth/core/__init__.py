"""
Core building blocks: errors, frame math, header codec, registry, records.
"""

from .errors import ConfigurationError
from .frames import (
    SPEED_OF_LIGHT,
    BOLTZMANN,
    GRAVITY,
    WORLD_UP,
    WORLD_NORTH,
    vec3,
    as_vec3,
    normalize,
    angle_between,
    spherical_to_cartesian,
    from_yaw_pitch_roll,
    look_along,
    to_global,
    to_local,
)
from .header import (
    HEADER_SIZE,
    DEFAULT_STX,
    MODE_CW,
    MODE_FMCW,
    IQ_I,
    IQ_Q,
    HeaderParameters,
    HeaderArgs,
    HeaderSnapshot,
    DopplerSensorHeader,
)
from .records import GroundTruthRecord, extract_field, extract_series
from .registry import CAPABILITIES, ModuleRegistry, default_registry

__all__ = [
    # errors
    'ConfigurationError',
    # frames
    'SPEED_OF_LIGHT', 'BOLTZMANN', 'GRAVITY', 'WORLD_UP', 'WORLD_NORTH',
    'vec3', 'as_vec3', 'normalize', 'angle_between', 'spherical_to_cartesian',
    'from_yaw_pitch_roll', 'look_along', 'to_global', 'to_local',
    # header
    'HEADER_SIZE', 'DEFAULT_STX', 'MODE_CW', 'MODE_FMCW', 'IQ_I', 'IQ_Q',
    'HeaderParameters', 'HeaderArgs', 'HeaderSnapshot', 'DopplerSensorHeader',
    # records
    'GroundTruthRecord', 'extract_field', 'extract_series',
    # registry
    'CAPABILITIES', 'ModuleRegistry', 'default_registry',
]
