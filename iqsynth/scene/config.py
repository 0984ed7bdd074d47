"""Scene configuration: YAML loader and dataclasses for provider parameters."""

import yaml
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple, Union

from ..core.errors import ConfigurationError
from ..core.header import HeaderParameters

Vector = Tuple[float, float, float]

# Default 2x4 receive array, platform frame (X right, Y up, Z forward).
# Top four elements are CW, bottom four FMCW; 0.15 m pitch around (1, 0, 0).
DEFAULT_ELEMENT_POSITIONS: List[Vector] = [
    (0.925, 0.225, 0.0),
    (1.075, 0.225, 0.0),
    (0.925, 0.075, 0.0),
    (1.075, 0.075, 0.0),
    (0.925, -0.075, 0.0),
    (1.075, -0.075, 0.0),
    (0.925, -0.225, 0.0),
    (1.075, -0.225, 0.0),
]

DEFAULT_RCS_TABLE: List[Tuple[float, float]] = [
    (0.0, 0.01),     # nose-on
    (30.0, 0.05),
    (60.0, 0.5),
    (90.0, 1.0),     # broadside
    (120.0, 0.5),
    (150.0, 0.05),
    (180.0, 0.02),   # tail-on
]


@dataclass
class BallisticParameters:
    """Projectile launch and airframe parameters (155 mm shell defaults)."""
    initial_position: Vector = (5000.0, 20.0, 1000.0)
    initial_speed: float = 900.0          # m/s
    launch_azimuth: float = 0.0           # degrees from +Z
    launch_elevation: float = 45.0        # degrees
    drag_coefficient: float = 0.25
    mass: float = 45.0                    # kg
    cross_sectional_area: float = 0.01887  # m^2
    spin_rate_hz: float = 50.0
    rcs_table: List[Tuple[float, float]] = field(
        default_factory=lambda: list(DEFAULT_RCS_TABLE))


@dataclass
class ShipParameters:
    """Ship course and sinusoidal sea-state motion."""
    initial_position: Vector = (0.0, 0.0, 0.0)
    course_speed: float = 10.0            # m/s
    course_direction: float = 0.0         # degrees from +Z
    pitch_amplitude: float = 3.0          # degrees
    pitch_period: float = 2.0             # seconds
    roll_amplitude: float = 3.0           # degrees
    roll_period: float = 3.0              # seconds


@dataclass
class AntennaParameters:
    """Gimbal mount, beam pattern and receive-array layout."""
    mount_offset: Vector = (0.0, 10.0, 0.0)
    beamwidth: float = 10.0               # degrees, full 3 dB width
    use_sidelobe: bool = False
    element_positions: List[Vector] = field(
        default_factory=lambda: list(DEFAULT_ELEMENT_POSITIONS))
    cw_channel_indices: List[int] = field(default_factory=lambda: [0, 1, 2, 3])
    fmcw_channel_indices: List[int] = field(default_factory=lambda: [4, 5, 6, 7])
    max_slew_rate: float = 60.0           # deg/s
    tracking_noise_std: float = 1.1       # degrees
    apply_servo_limits: bool = False


@dataclass
class SeaClutterParameters:
    sea_state: int = 3


@dataclass
class RainClutterParameters:
    rain_rate_mmhr: float = 5.0
    cloud_base_m: float = 500.0
    cloud_top_m: float = 3000.0
    wind_vector: Vector = (15.0, 0.0, 0.0)
    fall_speed_mps: float = -6.0


ClutterParameters = Union[SeaClutterParameters, RainClutterParameters]


@dataclass
class SceneConfig:
    seed: Optional[int] = None
    simulation: Dict[str, Any] = field(default_factory=dict)
    radar: Dict[str, Any] = field(default_factory=dict)
    target: BallisticParameters = field(default_factory=BallisticParameters)
    platform: ShipParameters = field(default_factory=ShipParameters)
    antenna: AntennaParameters = field(default_factory=AntennaParameters)
    clutter: List[ClutterParameters] = field(default_factory=list)
    header: HeaderParameters = field(default_factory=HeaderParameters)


def _vector(value, default: Vector) -> Vector:
    if value is None:
        return default
    if not isinstance(value, (list, tuple)) or len(value) != 3:
        raise ConfigurationError(f"Expected a 3-element vector, got {value!r}")
    return (float(value[0]), float(value[1]), float(value[2]))


def _parse_target(d: Optional[Dict]) -> BallisticParameters:
    if d is None:
        return BallisticParameters()
    defaults = BallisticParameters()
    table = d.get("rcs_table")
    return BallisticParameters(
        initial_position=_vector(d.get("initial_position"), defaults.initial_position),
        initial_speed=float(d.get("initial_speed", defaults.initial_speed)),
        launch_azimuth=float(d.get("launch_azimuth", defaults.launch_azimuth)),
        launch_elevation=float(d.get("launch_elevation", defaults.launch_elevation)),
        drag_coefficient=float(d.get("drag_coefficient", defaults.drag_coefficient)),
        mass=float(d.get("mass", defaults.mass)),
        cross_sectional_area=float(d.get("cross_sectional_area", defaults.cross_sectional_area)),
        spin_rate_hz=float(d.get("spin_rate_hz", defaults.spin_rate_hz)),
        rcs_table=([(float(a), float(s)) for a, s in table]
                   if table is not None else defaults.rcs_table),
    )


def _parse_platform(d: Optional[Dict]) -> ShipParameters:
    if d is None:
        return ShipParameters()
    defaults = ShipParameters()
    return ShipParameters(
        initial_position=_vector(d.get("initial_position"), defaults.initial_position),
        course_speed=float(d.get("course_speed", defaults.course_speed)),
        course_direction=float(d.get("course_direction", defaults.course_direction)),
        pitch_amplitude=float(d.get("pitch_amplitude", defaults.pitch_amplitude)),
        pitch_period=float(d.get("pitch_period", defaults.pitch_period)),
        roll_amplitude=float(d.get("roll_amplitude", defaults.roll_amplitude)),
        roll_period=float(d.get("roll_period", defaults.roll_period)),
    )


def _parse_antenna(d: Optional[Dict]) -> AntennaParameters:
    if d is None:
        return AntennaParameters()
    defaults = AntennaParameters()
    elements = d.get("element_positions")
    return AntennaParameters(
        mount_offset=_vector(d.get("mount_offset"), defaults.mount_offset),
        beamwidth=float(d.get("beamwidth", defaults.beamwidth)),
        use_sidelobe=bool(d.get("use_sidelobe", defaults.use_sidelobe)),
        element_positions=([_vector(e, None) for e in elements]
                           if elements is not None else defaults.element_positions),
        cw_channel_indices=list(d.get("cw_channel_indices", defaults.cw_channel_indices)),
        fmcw_channel_indices=list(d.get("fmcw_channel_indices", defaults.fmcw_channel_indices)),
        max_slew_rate=float(d.get("max_slew_rate", defaults.max_slew_rate)),
        tracking_noise_std=float(d.get("tracking_noise_std", defaults.tracking_noise_std)),
        apply_servo_limits=bool(d.get("apply_servo_limits", defaults.apply_servo_limits)),
    )


def _parse_clutter_entry(d: Dict) -> ClutterParameters:
    kind = str(d.get("type", "")).lower()
    if kind == "sea":
        return SeaClutterParameters(sea_state=int(d.get("sea_state", 3)))
    if kind == "rain":
        defaults = RainClutterParameters()
        return RainClutterParameters(
            rain_rate_mmhr=float(d.get("rain_rate_mmhr", defaults.rain_rate_mmhr)),
            cloud_base_m=float(d.get("cloud_base_m", defaults.cloud_base_m)),
            cloud_top_m=float(d.get("cloud_top_m", defaults.cloud_top_m)),
            wind_vector=_vector(d.get("wind_vector"), defaults.wind_vector),
            fall_speed_mps=float(d.get("fall_speed_mps", defaults.fall_speed_mps)),
        )
    raise ConfigurationError(f"Unknown clutter type: {d.get('type')!r}")


def _parse_header(d: Optional[Dict]) -> HeaderParameters:
    if d is None:
        return HeaderParameters()
    defaults = HeaderParameters()
    stx = d.get("stx")
    if isinstance(stx, int):
        stx = stx.to_bytes(8, "little")
    elif isinstance(stx, str):
        stx = bytes.fromhex(stx)
    base_time = d.get("base_time")
    if isinstance(base_time, str):
        base_time = datetime.fromisoformat(base_time)
    return HeaderParameters(
        stx=stx if stx is not None else defaults.stx,
        base_time=base_time if base_time is not None else defaults.base_time,
        collection_mode=int(d.get("collection_mode", defaults.collection_mode)),
        waveform_profile=int(d.get("waveform_profile", defaults.waveform_profile)),
    )


def parse_scene(raw: Optional[Dict]) -> SceneConfig:
    """Build a SceneConfig from an already-loaded mapping."""
    if raw is None:
        raw = {}
    return SceneConfig(
        seed=raw.get("seed"),
        simulation=dict(raw.get("simulation") or {}),
        radar=dict(raw.get("radar") or {}),
        target=_parse_target(raw.get("target")),
        platform=_parse_platform(raw.get("platform")),
        antenna=_parse_antenna(raw.get("antenna")),
        clutter=[_parse_clutter_entry(c) for c in raw.get("clutter") or []],
        header=_parse_header(raw.get("header")),
    )


def load_scene(path: str) -> SceneConfig:
    """Load a scene profile from a YAML file."""
    with open(path, "r") as f:
        raw = yaml.safe_load(f)
    return parse_scene(raw)
