import copy
import struct
import sys
from datetime import datetime
from pathlib import Path

import numpy as np
import pytest

from iqsynth import extract_series, pipeline
from iqsynth.core.errors import ConfigurationError
from iqsynth.core.frames import GRAVITY, spherical_to_cartesian
from iqsynth.core.header import HEADER_SIZE, IQ_I, IQ_Q, MODE_CW, MODE_FMCW
from iqsynth.models.targets import air_density
from iqsynth.pipeline import SimulationConfig, Simulator, progress_printer
from iqsynth.radar.config import RadarConfig
from iqsynth.radar.physics import inactive_snapshot
from iqsynth.scene.config import parse_scene

EXAMPLE_SCENE = Path(__file__).resolve().parent.parent / "scenes" / "ballistic_sea.yaml"

# 16 samples per chirp, a chirp every second tick
SAMPLES = 16
BLOCK = HEADER_SIZE + 2 * SAMPLES


def fast_config(output_dir, seed=7, target=None, **overrides):
    scene = parse_scene({
        "target": target,
        "clutter": [{"type": "sea", "sea_state": 4}, {"type": "rain"}],
        "header": {"base_time": "2025-01-01T12:00:00"},
    })
    options = dict(total_duration=1.0, time_step=0.125, seed=seed, output_dir=output_dir,
                   radar=RadarConfig(chirp_duration=0.25, adc_sample_rate=64.0), scene=scene)
    options.update(overrides)
    return SimulationConfig(**options)


def run_files(output_dir, **overrides):
    sim = Simulator.from_config(fast_config(output_dir, **overrides))
    chirps = sim.run(save_to_files=True, emit_headers=True)
    return sim, chirps, sorted(sim.output_directory.iterdir())


def header_fields(block):
    return struct.unpack_from("<11H", block, 8)


def test_saved_run_layout(tmp_path):
    sim, chirps, files = run_files(tmp_path)

    assert chirps == 4
    assert sim.output_directory.parent == tmp_path
    assert len(files) == 16
    assert all(f.stat().st_size == chirps * BLOCK for f in files)

    ch5_i = next(f for f in files if f.name.startswith("CH5_I_")).read_bytes()
    channel, mode, _, iq, seq_hi, seq_lo, hour, minute, *_rest, parity = header_fields(ch5_i)
    assert (channel, mode, iq, seq_hi, seq_lo, parity) == (5, MODE_FMCW, IQ_I, 0, 0, 0)
    assert (hour, minute) == (12, 0)

    second = header_fields(ch5_i[BLOCK:])
    assert second[5] == 1
    assert second[-1] == 1
    # one chirp duration per sequence number
    assert second[9] == 250

    ch1_q = next(f for f in files if f.name.startswith("CH1_Q_")).read_bytes()
    fields = header_fields(ch1_q)
    assert fields[:4] == (1, MODE_CW, 0, IQ_Q)

    samples = np.frombuffer(ch1_q[HEADER_SIZE:BLOCK], dtype="<i2")
    assert samples.shape == (SAMPLES,)
    assert np.any(samples != 0)


def test_run_without_files(tmp_path):
    sim = Simulator.from_config(fast_config(tmp_path))
    assert sim.run(save_to_files=False) == 4
    assert sim.output_directory is None
    assert list(tmp_path.iterdir()) == []


def test_headers_without_files_warns(tmp_path):
    sim = Simulator.from_config(fast_config(tmp_path))
    with pytest.warns(UserWarning):
        sim.run(save_to_files=False, emit_headers=True)
    assert list(tmp_path.iterdir()) == []
    assert all(r.header is None for r in sim.history)


def test_runs_are_reproducible(tmp_path):
    _, _, first = run_files(tmp_path / "a")
    _, _, second = run_files(tmp_path / "b")
    assert [f.read_bytes() for f in first] == [f.read_bytes() for f in second]

    _, _, other = run_files(tmp_path / "c", seed=8)
    assert [f.read_bytes() for f in first] != [f.read_bytes() for f in other]


def test_rerun_resets_providers(tmp_path):
    sim = Simulator.from_config(fast_config(tmp_path / "a"))
    sim.run(save_to_files=True, emit_headers=True)
    first = [f.read_bytes() for f in sorted(sim.output_directory.iterdir())]
    first_history = extract_series(sim.history, "trajectory.position.y")

    sim.config.output_dir = tmp_path / "b"
    sim.run(save_to_files=True, emit_headers=True)
    second = [f.read_bytes() for f in sorted(sim.output_directory.iterdir())]

    assert first == second
    assert extract_series(sim.history, "trajectory.position.y") == first_history


def test_history_and_progress(tmp_path):
    calls = []
    sim = Simulator.from_config(fast_config(tmp_path))
    sim.run(save_to_files=True, emit_headers=True,
            progress=lambda elapsed, total: calls.append((elapsed, total)))

    assert len(calls) == 9
    assert calls[0] == (pytest.approx(0.125), 1.0)
    assert calls[-1][0] == pytest.approx(1.125)

    assert len(sim.history) == 9
    assert extract_series(sim.history, "time") == pytest.approx([0.125 * (k + 1) for k in range(9)])
    ys = extract_series(sim.history, "trajectory.position.y")
    assert ys == [r.trajectory.position[1] for r in sim.history]
    assert sim.history[0].header is None
    assert sim.history[-1].header.sequence == 3
    with pytest.raises(AttributeError):
        extract_series(sim.history, "trajectory.heading")


def test_progress_printer(capsys):
    report = progress_printer(0.5)
    for k in range(1, 5):
        report(0.25 * k, 1.0)
    lines = capsys.readouterr().out.strip().splitlines()
    assert len(lines) == 2
    assert "0.50/1.00" in lines[0]


def test_step_returns_chirp_samples(tmp_path):
    sim = Simulator.from_config(fast_config(tmp_path))
    sim.reset()
    results = [sim.step(0.125) for _ in range(4)]
    assert [r is not None for r in results] == [False, False, True, False]
    assert [s.channel for s in results[2]] == list(range(8))
    assert sim.chirp_counter == 1


def expected_flight_time(params, dt):
    """Plain Euler integration of the same point-mass model."""
    position = np.array(params.initial_position, dtype=float)
    velocity = spherical_to_cartesian(params.initial_speed, params.launch_azimuth,
                                      params.launch_elevation)
    steps = 0
    while True:
        speed = np.linalg.norm(velocity)
        drag = (0.5 * air_density(position[1]) * speed * speed * params.drag_coefficient
                * params.cross_sectional_area / params.mass)
        accel = np.array([0.0, -GRAVITY, 0.0]) - drag * velocity / speed
        velocity = velocity + accel * dt
        position = position + velocity * dt
        steps += 1
        if position[1] <= 0:
            return steps * dt


def test_flight_time(tmp_path):
    config = fast_config(tmp_path, time_step=0.04)
    sim = Simulator.from_config(config)
    t = sim.run_flight_time(synthesize=False)

    # 155 mm shell, 900 m/s at 45 deg, Cd 0.25, 45 kg, 0.01887 m^2
    assert len(sim.history) == 2230
    assert t == pytest.approx(89.2)
    assert abs(t - expected_flight_time(config.scene.target, 0.04)) < 0.04 + 1e-6
    assert not sim.trajectory.is_active
    assert sim.chirp_counter > 0
    assert sim.run_flight_time(synthesize=False) == t


def test_flight_time_with_synthesis(tmp_path):
    target = {"initial_position": [0.0, 50.0, 500.0], "initial_speed": 100.0,
              "launch_elevation": -10.0}
    sim = Simulator.from_config(fast_config(tmp_path, target=target))
    t = sim.run_flight_time()
    assert 0.0 < t < 5.0
    assert sim.chirp_counter >= 1
    assert list(tmp_path.iterdir()) == []


def test_impact_leaves_only_clutter_and_noise(tmp_path):
    target = {"initial_position": [0.0, 50.0, 500.0], "initial_speed": 100.0,
              "launch_elevation": -10.0}
    sim = Simulator.from_config(fast_config(tmp_path, target=target))
    sim.reset()

    checked = 0
    while checked < 2:
        streams = copy.deepcopy(sim._streams)
        samples = sim.step(0.125)
        if samples is None or sim.trajectory.is_active:
            continue

        physics = inactive_snapshot(sim.radar, sim.chirp_counter - 1)
        expected = sim._synthesizer.synthesize(physics, sim.platform.snapshot(), streams)
        for got, want in zip(samples, expected):
            assert np.array_equal(got.i, want.i)
            assert np.array_equal(got.q, want.q)
            assert np.any(got.i != 0)
        checked += 1

    assert sim.simulation_time < 5.0


def test_invalid_rain_rejected_before_files(tmp_path):
    config = fast_config(tmp_path)
    config.scene = parse_scene({"clutter": [{"type": "rain", "rain_rate_mmhr": -5}]})
    with pytest.raises(ConfigurationError):
        Simulator.from_config(config)
    assert list(tmp_path.iterdir()) == []


def test_cli_runs_example_scene(tmp_path, monkeypatch, capsys):
    monkeypatch.setattr(sys, "argv", ["iqsynth", "--scene", str(EXAMPLE_SCENE),
                                      "--duration", "0.1", "--output", str(tmp_path)])
    pipeline.main()
    out = capsys.readouterr().out
    assert "Generated" in out
    run_dirs = list(tmp_path.iterdir())
    assert len(run_dirs) == 1
    assert len(list(run_dirs[0].iterdir())) == 16


def test_base_time_drives_header_clock(tmp_path):
    sim, _, _ = run_files(tmp_path)
    assert sim.header.parameters.base_time == datetime(2025, 1, 1, 12, 0, 0)
