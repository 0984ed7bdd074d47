"""
Scene profiles: provider parameter dataclasses and the YAML loader.
"""

from .config import (
    SceneConfig,
    BallisticParameters,
    ShipParameters,
    AntennaParameters,
    SeaClutterParameters,
    RainClutterParameters,
    ClutterParameters,
    HeaderParameters,
    DEFAULT_ELEMENT_POSITIONS,
    DEFAULT_RCS_TABLE,
    parse_scene,
    load_scene,
)

__all__ = [
    'SceneConfig', 'BallisticParameters', 'ShipParameters', 'AntennaParameters',
    'SeaClutterParameters', 'RainClutterParameters', 'ClutterParameters',
    'HeaderParameters', 'DEFAULT_ELEMENT_POSITIONS', 'DEFAULT_RCS_TABLE',
    'parse_scene', 'load_scene',
]
