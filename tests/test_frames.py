import math

import numpy as np

from iqsynth.core.frames import (
    WORLD_NORTH,
    angle_between,
    from_yaw_pitch_roll,
    look_along,
    normalize,
    spherical_to_cartesian,
    to_global,
    to_local,
)


def test_spherical_to_cartesian_axes():
    # 0 deg azimuth is north (+Z)
    assert np.allclose(spherical_to_cartesian(10.0, 0.0, 0.0), [0.0, 0.0, 10.0])
    # 90 deg azimuth is east (+X)
    assert np.allclose(spherical_to_cartesian(10.0, 90.0, 0.0), [10.0, 0.0, 0.0])
    # straight up
    assert np.allclose(spherical_to_cartesian(10.0, 0.0, 90.0), [0.0, 10.0, 0.0])


def test_spherical_to_cartesian_45_deg_elevation():
    v = spherical_to_cartesian(900.0, 0.0, 45.0)
    assert abs(np.linalg.norm(v) - 900.0) < 1e-9
    assert abs(v[1] - v[2]) < 1e-9


def test_normalize_zero_vector_is_zero():
    assert np.allclose(normalize(np.zeros(3)), np.zeros(3))
    assert abs(np.linalg.norm(normalize(np.array([3.0, 4.0, 0.0]))) - 1.0) < 1e-12


def test_angle_between_clamps():
    a = np.array([1.0, 0.0, 0.0])
    assert angle_between(a, a * 2.0) < 1e-7
    assert abs(angle_between(a, -a) - math.pi) < 1e-12


def test_yaw_rotates_north_to_east():
    r = from_yaw_pitch_roll(math.radians(90.0), 0.0, 0.0)
    assert np.allclose(r.apply(WORLD_NORTH), [1.0, 0.0, 0.0])


def test_to_local_inverts_to_global():
    r = from_yaw_pitch_roll(0.3, -0.2, 0.1)
    v = np.array([1.0, 2.0, 3.0])
    assert np.allclose(to_local(r, to_global(r, v)), v)


def test_look_along_nose_follows_direction():
    d = np.array([3.0, 4.0, 12.0])
    r = look_along(d)
    assert np.allclose(r.apply([1.0, 0.0, 0.0]), d / np.linalg.norm(d))
    # body up stays in the upper half space
    assert r.apply([0.0, 1.0, 0.0])[1] > 0


def test_look_along_vertical_has_no_nan():
    r = look_along(np.array([0.0, 5.0, 0.0]))
    m = r.as_matrix()
    assert not np.any(np.isnan(m))
    assert np.allclose(r.apply([1.0, 0.0, 0.0]), [0.0, 1.0, 0.0])
    assert np.allclose(m.T @ m, np.eye(3))
