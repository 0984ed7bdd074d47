"""
Statistical sea and rain clutter models for X-band radar.

Both models size a Rayleigh (circular Gaussian) clutter process from a
clutter RCS and range, scaled against the run's calibration reference.

References:
- Nathanson, F.E. "Radar Design Principles", sea and rain reflectivity
- Marshall, J.S., Palmer, W.M. "The distribution of raindrops with size"
"""

import math
from typing import Optional, Tuple

import numpy as np

from .base import (
    ClutterModel,
    RadarContext,
    complex_gaussian,
    require_parameters,
    scaled_clutter_power,
)
from ..core.errors import ConfigurationError
from ..core.frames import SPEED_OF_LIGHT, as_vec3
from ..scene.config import RainClutterParameters, SeaClutterParameters

# 4/3 Earth radius for a standard refracting atmosphere
EFFECTIVE_EARTH_RADIUS_M: float = 8.5e6

WATER_DIELECTRIC_K_SQ: float = 0.93


class SeaClutterModel(ClutterModel):
    """
    Beam-limited sea clutter with an empirical sigma-zero model.

    sigma0(dB) = -40 + 2.5 * sea_state + 10 log10(f_GHz / 10) + 10 log10(sin(grazing))
    """

    def __init__(self):
        self.parameters: Optional[SeaClutterParameters] = None

    def initialize(self, parameters) -> None:
        self.parameters = require_parameters(parameters, SeaClutterParameters, "SeaClutterModel")

    @staticmethod
    def grazing_angle(altitude_m: float, boresight_global: np.ndarray) -> float:
        """
        Grazing angle of the boresight ray on a curved sea surface.

        Uses gamma = asin(h / R_s - R_s / (2 Re)), R_s = h / sin(depression),
        valid for h << Re.

        Returns:
            Grazing angle in radians; 0 when the beam points at or above the
            horizon, the platform sits at or below the surface, or the ray
            passes beyond the horizon.
        """
        vy = float(np.clip(boresight_global[1], -1.0, 1.0))
        depression = math.asin(-vy)
        if depression <= 0 or altitude_m <= 0:
            return 0.0

        slant_range = altitude_m / math.sin(depression)
        sin_gamma = altitude_m / slant_range - slant_range / (2.0 * EFFECTIVE_EARTH_RADIUS_M)
        if sin_gamma <= 0:
            return 0.0
        return math.asin(sin_gamma)

    def sigma_nought(self, grazing_rad: float, carrier_hz: float) -> float:
        """Normalized reflectivity (linear m^2/m^2)."""
        if grazing_rad <= 0:
            return 0.0
        sigma_db = (-40.0 + 2.5 * self.parameters.sea_state
                    + 10.0 * math.log10(carrier_hz / 1e9 / 10.0)
                    + 10.0 * math.log10(math.sin(grazing_rad)))
        return 10.0 ** (sigma_db / 10.0)

    @staticmethod
    def patch_area(slant_range_m: float, beamwidth_rad: float, grazing_rad: float) -> float:
        # Symmetric beam: azimuth and elevation widths are equal
        if grazing_rad <= 0 or slant_range_m <= 0:
            return 0.0
        return slant_range_m ** 2 * beamwidth_rad * beamwidth_rad / math.sin(grazing_rad)

    def clutter_power(self, context: RadarContext) -> float:
        """Mean clutter power for this chirp, 0 when the beam misses the sea."""
        altitude = context.altitude_m
        grazing = self.grazing_angle(altitude, context.boresight_global)
        if grazing <= 0 or altitude <= 0:
            return 0.0

        slant_range = altitude / math.sin(grazing)
        rcs = (self.sigma_nought(grazing, context.carrier_hz)
               * self.patch_area(slant_range, context.beamwidth_rad, grazing))
        return scaled_clutter_power(rcs, slant_range, context.reference)

    def generate_clutter_signal(self, context: RadarContext,
                                rng: np.random.RandomState) -> np.ndarray:
        n = context.num_samples
        power = self.clutter_power(context)
        if power <= 0:
            return np.zeros(n, dtype=complex)
        # No mean Doppler: the sea patch is treated as stationary.
        return complex_gaussian(n, math.sqrt(power), rng)


class RainClutterModel(ClutterModel):
    """
    Volumetric rain clutter from a horizontal cloud slab.

    Rain rate -> Marshall-Palmer Z -> volume reflectivity eta, integrated
    over the part of the beam cone inside [cloud_base, cloud_top].
    The process is shifted by the mean Doppler of the rain drift.
    """

    def __init__(self):
        self.parameters: Optional[RainClutterParameters] = None

    def initialize(self, parameters) -> None:
        p = require_parameters(parameters, RainClutterParameters, "RainClutterModel")
        if p.rain_rate_mmhr < 0:
            raise ConfigurationError(f"rain_rate_mmhr must be non-negative, got {p.rain_rate_mmhr}")
        if p.cloud_top_m < p.cloud_base_m:
            raise ConfigurationError(
                f"cloud_top_m ({p.cloud_top_m}) is below cloud_base_m ({p.cloud_base_m})")
        self.parameters = p

    @staticmethod
    def beam_intersection(antenna_altitude_m: float, boresight_global: np.ndarray,
                          cloud_base_m: float, cloud_top_m: float) -> Tuple[float, float]:
        """
        Range interval (R_min, R_max) the boresight ray spends inside the slab.

        A miss is reported as (0, 0). A horizontal ray never crosses the
        slab boundaries and is also a miss.
        """
        vy = float(boresight_global[1])
        if vy == 0:
            return 0.0, 0.0

        h = antenna_altitude_m
        if vy > 0:
            if h < cloud_top_m:
                r_min = (cloud_base_m - h) / vy if h < cloud_base_m else 0.0
                r_max = (cloud_top_m - h) / vy
                return r_min, r_max
            return 0.0, 0.0

        if h > cloud_base_m:
            r_min = (h - cloud_top_m) / -vy if h > cloud_top_m else 0.0
            r_max = (h - cloud_base_m) / -vy
            return r_min, r_max
        return 0.0, 0.0

    def reflectivity_factor(self) -> float:
        """Z = 200 * R^1.6 (mm^6/m^3)."""
        return 200.0 * self.parameters.rain_rate_mmhr ** 1.6

    def volume_reflectivity(self, carrier_hz: float) -> float:
        """eta = pi^5 |K|^2 Z / (lambda^4 1e18), in m^2/m^3."""
        wavelength = SPEED_OF_LIGHT / carrier_hz
        return (math.pi ** 5 * WATER_DIELECTRIC_K_SQ * self.reflectivity_factor()
                / (wavelength ** 4 * 1.0e18))

    @staticmethod
    def clutter_volume(beamwidth_rad: float, r_min: float, r_max: float) -> float:
        # Cone of solid angle (pi/4) * bw^2 between two ranges
        solid_angle = (math.pi / 4.0) * beamwidth_rad * beamwidth_rad
        return solid_angle / 3.0 * (r_max ** 3 - r_min ** 3)

    def mean_doppler(self, context: RadarContext) -> float:
        p = self.parameters
        rain_velocity = as_vec3(p.wind_vector) + np.array([0.0, p.fall_speed_mps, 0.0])
        relative = rain_velocity - context.platform.velocity
        radial = float(np.dot(relative, context.boresight_global))
        return 2.0 * radial * context.carrier_hz / SPEED_OF_LIGHT

    def generate_clutter_signal(self, context: RadarContext,
                                rng: np.random.RandomState) -> np.ndarray:
        n = context.num_samples
        p = self.parameters

        r_min, r_max = self.beam_intersection(context.antenna_height_m,
                                              context.boresight_global,
                                              p.cloud_base_m, p.cloud_top_m)
        if r_min >= r_max:
            return np.zeros(n, dtype=complex)

        rcs = (self.volume_reflectivity(context.carrier_hz)
               * self.clutter_volume(context.beamwidth_rad, r_min, r_max))
        power = scaled_clutter_power(rcs, (r_min + r_max) / 2.0, context.reference)
        samples = complex_gaussian(n, math.sqrt(max(power, 0.0)), rng)

        t = np.arange(n) / context.sample_rate_hz
        return samples * np.exp(1j * 2.0 * np.pi * self.mean_doppler(context) * t)
