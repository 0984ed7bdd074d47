"""
iqsynth: Multi-Channel CW/FMCW Radar I/Q Synthesizer

Physically modelled baseband I/Q generation for an 8-element receive array:
- Ballistic target with aspect RCS and spin micro-Doppler
- Rolling/pitching ship platform and stabilized gimbal antenna
- Sea and rain clutter, thermal noise, 16-bit quantization

Usage:
    from iqsynth import Simulator, SimulationConfig

    config = SimulationConfig.from_yaml("scenes/ballistic_sea.yaml")
    simulator = Simulator.from_config(config)
    simulator.run(save_to_files=True, emit_headers=True)

CLI:
    python -m iqsynth.pipeline --scene scenes/ballistic_sea.yaml --save --headers
"""

from .pipeline import Simulator, SimulationConfig, progress_printer
from .models import BallisticTrajectory, ShipPlatform, GimbalAntenna, SeaClutterModel, RainClutterModel
from .radar import RadarConfig, RadarPhysicsSnapshot, compute_physics, IQSynthesizer
from .core import ConfigurationError, DopplerSensorHeader, GroundTruthRecord, extract_series, default_registry
from .scene import SceneConfig, load_scene

__all__ = [
    'Simulator',
    'SimulationConfig',
    'progress_printer',
    'BallisticTrajectory',
    'ShipPlatform',
    'GimbalAntenna',
    'SeaClutterModel',
    'RainClutterModel',
    'RadarConfig',
    'RadarPhysicsSnapshot',
    'compute_physics',
    'IQSynthesizer',
    'ConfigurationError',
    'DopplerSensorHeader',
    'GroundTruthRecord',
    'extract_series',
    'default_registry',
    'SceneConfig',
    'load_scene',
]
