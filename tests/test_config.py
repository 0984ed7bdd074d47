import math
from datetime import datetime
from pathlib import Path

import pytest

from iqsynth.core.errors import ConfigurationError
from iqsynth.core.frames import BOLTZMANN
from iqsynth.core.header import DEFAULT_STX, HeaderParameters
from iqsynth.core.registry import CAPABILITIES, ModuleRegistry, default_registry
from iqsynth.models import GimbalAntenna, RainClutterModel, SeaClutterModel, ShipPlatform
from iqsynth.pipeline import SimulationConfig, Simulator
from iqsynth.radar.config import RadarConfig
from iqsynth.scene.config import (
    BallisticParameters,
    RainClutterParameters,
    SeaClutterParameters,
    ShipParameters,
    load_scene,
    parse_scene,
)

EXAMPLE_SCENE = Path(__file__).resolve().parent.parent / "scenes" / "ballistic_sea.yaml"


# Radar configuration

def test_radar_defaults_and_derived_values():
    radar = RadarConfig()
    assert radar.num_samples == 40000
    assert radar.sample_interval == pytest.approx(1e-6)
    assert radar.thermal_noise_power == pytest.approx(BOLTZMANN * 290.0 * 1e6 * 1.58)
    assert radar.full_scale == pytest.approx(3.0 * math.sqrt(radar.thermal_noise_power))
    radar.validate()


def test_radar_equation():
    radar = RadarConfig()
    wavelength = RadarConfig.wavelength(10e9)
    expected = 1.0 * 100.0 * 100.0 * 2.0 * 0.25 * wavelength ** 2 / ((4 * math.pi) ** 3 * 1000.0 ** 4)
    assert radar.radar_equation(1000.0, 2.0, 0.5, 10e9) == pytest.approx(expected)
    assert radar.radar_equation(0.0, 2.0, 1.0, 10e9) == 0.0


def test_radar_from_dict():
    radar = RadarConfig.from_dict({"chirp_duration": "0.02", "adc_sample_rate": 2e5})
    assert radar.chirp_duration == 0.02
    assert radar.num_samples == 4000
    with pytest.raises(ConfigurationError):
        RadarConfig.from_dict({"chirp_length": 0.02})


def test_radar_validate_rejects_fractional_samples():
    with pytest.raises(ConfigurationError):
        RadarConfig(adc_sample_rate=1000.5).validate()
    with pytest.raises(ConfigurationError):
        RadarConfig(chirp_duration=0.0).validate()
    with pytest.raises(ConfigurationError):
        RadarConfig(noise_figure=-1.0).validate()


def test_simulation_config_validation():
    with pytest.raises(ConfigurationError):
        SimulationConfig(time_step=0.0).validate()
    with pytest.raises(ConfigurationError):
        Simulator(SimulationConfig(time_step=-0.1))
    with pytest.raises(ConfigurationError):
        Simulator(SimulationConfig(total_duration=-1.0))


# Scene profiles

def test_parse_empty_scene_uses_defaults():
    scene = parse_scene(None)
    assert scene.seed is None
    assert scene.target == BallisticParameters()
    assert scene.platform == ShipParameters()
    assert scene.clutter == []
    assert scene.header.stx == DEFAULT_STX


def test_parse_scene_sections():
    scene = parse_scene({
        "seed": 5,
        "target": {"initial_speed": 300, "rcs_table": [[0, 1], [180, 2]]},
        "antenna": {"element_positions": [[0, 0, 0], [1, 0, 0]],
                    "cw_channel_indices": [0], "fmcw_channel_indices": [1]},
        "clutter": [{"type": "Sea", "sea_state": 4}, {"type": "rain", "cloud_top_m": 2000}],
        "header": {"stx": 0x1122, "base_time": "2024-06-01T08:30:00", "collection_mode": 7},
    })
    assert scene.seed == 5
    assert scene.target.initial_speed == 300.0
    assert scene.target.rcs_table == [(0.0, 1.0), (180.0, 2.0)]
    assert scene.antenna.element_positions == [(0.0, 0.0, 0.0), (1.0, 0.0, 0.0)]
    assert scene.clutter == [SeaClutterParameters(sea_state=4),
                             RainClutterParameters(cloud_top_m=2000.0)]
    assert scene.header.stx == bytes([0x22, 0x11, 0, 0, 0, 0, 0, 0])
    assert scene.header.base_time == datetime(2024, 6, 1, 8, 30)
    assert scene.header.collection_mode == 7


def test_parse_scene_errors():
    with pytest.raises(ConfigurationError):
        parse_scene({"clutter": [{"type": "land"}]})
    with pytest.raises(ConfigurationError):
        parse_scene({"platform": {"initial_position": [1.0, 2.0]}})


def test_load_scene_from_file(tmp_path):
    path = tmp_path / "scene.yaml"
    path.write_text("seed: 3\nplatform:\n  course_speed: 4.5\nclutter:\n  - type: sea\n")
    scene = load_scene(str(path))
    assert scene.seed == 3
    assert scene.platform.course_speed == 4.5
    assert scene.clutter == [SeaClutterParameters()]


def test_example_scene_loads():
    config = SimulationConfig.from_yaml(EXAMPLE_SCENE)
    assert config.seed == 42
    assert config.total_duration == 2.0
    assert config.save_to_files and config.emit_headers
    assert config.radar.cw_frequency == 10.45e9
    assert config.radar.num_samples == 40000
    assert config.scene.header.stx == DEFAULT_STX
    assert config.scene.header.base_time == datetime(2025, 1, 1, 12, 0, 0)
    assert len(config.scene.clutter) == 2
    config.validate()


# Registry

def test_default_registry_builds_providers():
    registry = default_registry()
    assert isinstance(registry.create("platform", ShipParameters()), ShipPlatform)
    assert isinstance(registry.create("clutter", SeaClutterParameters()), SeaClutterModel)
    assert isinstance(registry.create("clutter", RainClutterParameters()), RainClutterModel)
    antenna = registry.create("antenna", default_antenna_parameters())
    assert isinstance(antenna, GimbalAntenna)
    assert antenna.num_channels == 8
    assert set(registry.variants("clutter")) == {SeaClutterParameters, RainClutterParameters}


def default_antenna_parameters():
    return parse_scene({}).antenna


def test_registry_errors():
    registry = ModuleRegistry()
    assert all(registry.variants(c) == [] for c in CAPABILITIES)
    with pytest.raises(ConfigurationError):
        registry.register("radar", ShipParameters, ShipPlatform)
    with pytest.raises(ConfigurationError):
        registry.create("radar", ShipParameters())
    with pytest.raises(ConfigurationError):
        registry.create("platform", ShipParameters())
    with pytest.raises(ConfigurationError):
        default_registry().create("platform", BallisticParameters())


def test_simulator_requires_providers():
    sim = Simulator(SimulationConfig(seed=1))
    with pytest.raises(ConfigurationError):
        sim.run(total_duration=0.1)

    sim.load_trajectory(BallisticParameters())
    sim.load_platform(ShipParameters())
    sim.load_antenna(default_antenna_parameters())
    with pytest.raises(ConfigurationError):
        sim.run(total_duration=0.1, save_to_files=True, emit_headers=True)


def test_custom_registry_is_used():
    class CountingPlatform(ShipPlatform):
        created = 0

        def __init__(self):
            super().__init__()
            CountingPlatform.created += 1

    registry = default_registry()
    registry.register("platform", ShipParameters, CountingPlatform)
    sim = Simulator(SimulationConfig(seed=1), registry)
    assert isinstance(sim.load_platform(ShipParameters()), CountingPlatform)
    assert CountingPlatform.created == 1
    assert isinstance(sim.load_header(HeaderParameters()).parameters, HeaderParameters)


def test_sea_state_lives_on_sea_clutter_only():
    scene = parse_scene({"platform": {"sea_state": 6}, "clutter": [{"type": "sea", "sea_state": 6}]})
    assert not hasattr(scene.platform, "sea_state")
    assert scene.clutter[0].sea_state == 6
