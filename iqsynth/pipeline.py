"""
Multi-Channel CW/FMCW I/Q Synthesis Pipeline

Fixed-timestep ground-truth simulation driving quantized I/Q generation:
- Ballistic target, rolling ship platform, stabilized gimbal antenna
- Sea and rain clutter scaled against the radar range equation
- 8 receive channels (4 CW, 4 alternating-bandwidth FMCW) on a worker pool
"""

import warnings
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional

import numpy as np

# Radar system configuration, physics and synthesis
from .radar import (
    RadarConfig,
    ChannelSamples,
    IQSynthesizer,
    channel_random_streams,
    compute_physics,
)

# Core data structures
from .core import (
    ConfigurationError,
    DopplerSensorHeader,
    GroundTruthRecord,
    IQ_I,
    IQ_Q,
    ModuleRegistry,
    default_registry,
)

# Provider contracts
from .models import AntennaModel, ClutterModel, PlatformModel, TrajectoryModel

# Scene system
from .scene import SceneConfig, load_scene

# Output
from .output import ChannelFileSet

# Chirp boundary tolerance for accumulated floating-point time
CHIRP_EPSILON: float = 1e-12

SERVO_STREAM: int = 2

ProgressCallback = Callable[[float, float], None]


def progress_printer(interval_s: float = 1.0) -> ProgressCallback:
    """Progress callback printing roughly every ``interval_s`` simulated seconds."""
    state = {"next": interval_s}

    def report(elapsed: float, total: float) -> None:
        if elapsed >= state["next"] or elapsed >= total:
            print(f"  t = {elapsed:.2f}/{total:.2f} s")
            while state["next"] <= elapsed:
                state["next"] += interval_s

    return report


@dataclass
class SimulationConfig:
    """Configuration for one synthesis run."""
    total_duration: float = 10.0      # seconds
    time_step: float = 0.04           # seconds
    save_to_files: bool = False
    emit_headers: bool = False
    seed: Optional[int] = None
    record_history: bool = True
    max_workers: Optional[int] = None

    # Output
    output_dir: Path = Path("output")

    radar: RadarConfig = field(default_factory=RadarConfig)
    scene: SceneConfig = field(default_factory=SceneConfig)

    @classmethod
    def from_yaml(cls, path: Path) -> 'SimulationConfig':
        """Load configuration from a scene YAML file."""
        return cls.from_scene(load_scene(str(path)))

    @classmethod
    def from_scene(cls, scene: SceneConfig) -> 'SimulationConfig':
        """Build SimulationConfig from a scene's simulation/radar blocks."""
        sim = scene.simulation
        defaults = cls()
        max_workers = sim.get('max_workers')
        return cls(
            total_duration=float(sim.get('total_duration', defaults.total_duration)),
            time_step=float(sim.get('time_step', defaults.time_step)),
            save_to_files=bool(sim.get('save_to_files', defaults.save_to_files)),
            emit_headers=bool(sim.get('emit_headers', defaults.emit_headers)),
            seed=scene.seed,
            record_history=bool(sim.get('record_history', defaults.record_history)),
            max_workers=int(max_workers) if max_workers is not None else None,
            output_dir=Path(sim.get('output_dir', defaults.output_dir)),
            radar=RadarConfig.from_dict(scene.radar),
            scene=scene,
        )

    def validate(self) -> None:
        if self.time_step <= 0:
            raise ConfigurationError(f"time_step must be positive, got {self.time_step}")
        if self.total_duration < 0:
            raise ConfigurationError(
                f"total_duration must be non-negative, got {self.total_duration}")
        self.radar.validate()


class Simulator:
    """
    Ground-truth driver and chirp scheduler.

    Each tick advances trajectory, platform and antenna in that order. When
    a chirp's worth of time has accumulated the physics snapshot is taken,
    all channels are synthesized in parallel and, if enabled, headers and
    samples are appended to the channel files before the next tick.
    """

    def __init__(self, config: SimulationConfig,
                 registry: Optional[ModuleRegistry] = None):
        config.validate()
        self.config = config
        self.radar = config.radar
        self.registry = registry or default_registry()

        self.trajectory: Optional[TrajectoryModel] = None
        self.platform: Optional[PlatformModel] = None
        self.antenna: Optional[AntennaModel] = None
        self.clutter_models: List[ClutterModel] = []
        self.header: Optional[DopplerSensorHeader] = None
        self._loaded = []

        if config.seed is not None:
            self.base_seed = int(config.seed)
        else:
            self.base_seed = int(np.random.SeedSequence().entropy)

        self.history: List[GroundTruthRecord] = []
        self.simulation_time = 0.0
        self.time_since_last_chirp = 0.0
        self.chirp_counter = 0
        self._streams = []
        self._synthesizer: Optional[IQSynthesizer] = None
        self.output_directory: Optional[Path] = None

    @classmethod
    def from_config(cls, config: SimulationConfig,
                    registry: Optional[ModuleRegistry] = None) -> 'Simulator':
        """Simulator with every provider named by ``config.scene`` loaded."""
        sim = cls(config, registry)
        sim.load_scene(config.scene)
        return sim

    # Provider loading

    def _create(self, capability: str, parameters):
        provider = self.registry.create(capability, parameters)
        self._loaded.append((provider, parameters))
        return provider

    def load_trajectory(self, parameters) -> TrajectoryModel:
        self.trajectory = self._create("trajectory", parameters)
        return self.trajectory

    def load_platform(self, parameters) -> PlatformModel:
        self.platform = self._create("platform", parameters)
        return self.platform

    def load_antenna(self, parameters) -> AntennaModel:
        self.antenna = self._create("antenna", parameters)
        return self.antenna

    def add_clutter(self, parameters) -> ClutterModel:
        model = self._create("clutter", parameters)
        self.clutter_models.append(model)
        return model

    def load_header(self, parameters) -> DopplerSensorHeader:
        self.header = self._create("header", parameters)
        return self.header

    def load_scene(self, scene: SceneConfig) -> None:
        self.load_trajectory(scene.target)
        self.load_platform(scene.platform)
        self.load_antenna(scene.antenna)
        for clutter in scene.clutter:
            self.add_clutter(clutter)
        self.load_header(scene.header)

    # Run control

    def _check_ready(self, emit_headers: bool) -> None:
        missing = [name for name in ("trajectory", "platform", "antenna")
                   if getattr(self, name) is None]
        if missing:
            raise ConfigurationError(f"Providers not loaded: {', '.join(missing)}")
        if emit_headers and self.header is None:
            raise ConfigurationError("Header emission requested but no header provider is loaded")

    def reset(self) -> None:
        """Reinitialize providers, zero the clock and reseed every random stream."""
        for provider, parameters in self._loaded:
            provider.initialize(parameters)

        self.simulation_time = 0.0
        self.time_since_last_chirp = 0.0
        self.chirp_counter = 0
        self.history = []

        self._streams = [channel_random_streams(self.base_seed, ch)
                         for ch in range(self.antenna.num_channels)]
        set_random_state = getattr(self.antenna, "set_random_state", None)
        if set_random_state is not None:
            set_random_state(np.random.RandomState(
                [self.base_seed & 0xFFFFFFFF, 0, SERVO_STREAM]))

        self._synthesizer = IQSynthesizer(self.radar, self.trajectory, self.antenna,
                                          self.clutter_models, self.config.max_workers)

    def _write_headers(self, files: ChannelFileSet) -> None:
        d_time = self.radar.chirp_duration
        for ch in range(self.antenna.num_channels):
            is_cw = self.antenna.is_cw_channel(ch)
            for iq in (IQ_I, IQ_Q):
                args = self.header.args_for(ch, is_cw, iq)
                files.write_header(ch, iq, self.header.encode(d_time, self.chirp_counter, args))

    def _chirp(self, files: Optional[ChannelFileSet], emit_headers: bool,
               synthesize: bool) -> Optional[List[ChannelSamples]]:
        samples = None
        if synthesize:
            physics = compute_physics(self.trajectory, self.platform, self.antenna,
                                      self.radar, self.chirp_counter)
            if files is not None and emit_headers:
                self._write_headers(files)
            samples = self._synthesizer.synthesize(physics, self.platform.snapshot(),
                                                   self._streams)
            if files is not None:
                for s in samples:
                    files.write_samples(s)

        self.time_since_last_chirp -= self.radar.chirp_duration
        self.chirp_counter += 1
        return samples

    def step(self, dt: float, files: Optional[ChannelFileSet] = None,
             emit_headers: bool = False,
             synthesize: bool = True) -> Optional[List[ChannelSamples]]:
        """
        Advance one tick.

        Returns:
            The chirp's channel samples if a chirp fired this tick, else None
        """
        self.trajectory.update(dt)
        self.platform.update(dt)
        plat = self.platform.state
        self.antenna.update(dt, plat.orientation, self.trajectory.state.position, plat.position)

        samples = None
        if self.time_since_last_chirp >= self.radar.chirp_duration - CHIRP_EPSILON:
            samples = self._chirp(files, emit_headers, synthesize)

        self.simulation_time += dt
        self.time_since_last_chirp += dt

        if self.config.record_history:
            self.history.append(GroundTruthRecord(
                time=self.simulation_time,
                trajectory=self.trajectory.snapshot(),
                platform=self.platform.snapshot(),
                antenna=self.antenna.snapshot(),
                header=self.header.snapshot() if self.header is not None else None,
            ))
        return samples

    def run(self, total_duration: Optional[float] = None, dt: Optional[float] = None,
            save_to_files: Optional[bool] = None, emit_headers: Optional[bool] = None,
            progress: Optional[ProgressCallback] = None) -> int:
        """
        Run for a fixed duration.

        Arguments left as None fall back to the SimulationConfig values.

        Returns:
            Number of chirps generated
        """
        cfg = self.config
        total = cfg.total_duration if total_duration is None else total_duration
        dt = cfg.time_step if dt is None else dt
        save = cfg.save_to_files if save_to_files is None else save_to_files
        headers = cfg.emit_headers if emit_headers is None else emit_headers

        if dt <= 0:
            raise ConfigurationError(f"dt must be positive, got {dt}")
        if total < 0:
            raise ConfigurationError(f"total_duration must be non-negative, got {total}")
        self._check_ready(headers)
        if headers and not save:
            warnings.warn("Headers requested with file saving disabled; no headers will be written")

        self.reset()

        if save:
            with ChannelFileSet(cfg.output_dir, self.antenna.num_channels) as files:
                self.output_directory = files.directory
                self._loop(total, dt, files, headers, progress)
        else:
            self._loop(total, dt, None, False, progress)

        return self.chirp_counter

    def _loop(self, total: float, dt: float, files: Optional[ChannelFileSet],
              headers: bool, progress: Optional[ProgressCallback]) -> None:
        while self.simulation_time <= total:
            self.step(dt, files, headers)
            if progress is not None:
                progress(self.simulation_time, total)

    def run_flight_time(self, dt: Optional[float] = None, synthesize: bool = True) -> float:
        """
        Run until the target reaches the surface, without persistence.

        Returns:
            Elapsed simulation time in seconds
        """
        dt = self.config.time_step if dt is None else dt
        if dt <= 0:
            raise ConfigurationError(f"dt must be positive, got {dt}")
        self._check_ready(False)
        self.reset()

        while True:
            self.step(dt, synthesize=synthesize)
            if self.trajectory.state.position[1] <= 0:
                break
        return self.simulation_time


def main():
    """Command-line interface."""
    import argparse

    parser = argparse.ArgumentParser(description='Multi-channel CW/FMCW radar I/Q synthesizer')
    parser.add_argument('--scene', type=Path, help='Scene YAML file')
    parser.add_argument('--duration', '-d', type=float, help='Total simulated time (s)')
    parser.add_argument('--dt', type=float, help='Ground-truth time step (s)')
    parser.add_argument('--seed', type=int, help='Random seed')
    parser.add_argument('--output', '-o', type=Path, help='Output directory')
    parser.add_argument('--save', action='store_true', help='Write per-channel I/Q files')
    parser.add_argument('--headers', action='store_true', help='Prefix each chirp with a header')
    parser.add_argument('--flight-time', action='store_true',
                        help='Run until target impact and report the flight time')

    args = parser.parse_args()

    if args.scene:
        config = SimulationConfig.from_yaml(args.scene)
    else:
        config = SimulationConfig()

    if args.duration is not None:
        config.total_duration = args.duration
    if args.dt is not None:
        config.time_step = args.dt
    if args.seed is not None:
        config.seed = args.seed
    if args.output is not None:
        config.output_dir = args.output
    if args.save:
        config.save_to_files = True
    if args.headers:
        config.emit_headers = True

    simulator = Simulator.from_config(config)

    if args.flight_time:
        print(f"Running to impact (dt={config.time_step} s)")
        flight_time = simulator.run_flight_time()
        print(f"Flight time: {flight_time:.3f} s ({simulator.chirp_counter} chirps)")
        return

    print(f"Simulating {config.total_duration} s at dt={config.time_step} s "
          f"({simulator.antenna.num_channels} channels, {config.radar.num_samples} samples/chirp)")
    chirps = simulator.run(progress=progress_printer())
    print(f"Generated {chirps} chirps")
    if config.save_to_files:
        print(f"Output: {simulator.output_directory}")
    print("Done!")


if __name__ == '__main__':
    main()
