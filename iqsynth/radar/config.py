"""
Radar system configuration.

Contains the dual-waveform (CW + alternating-bandwidth FMCW) parameters,
the radar range equation terms and the receiver/ADC settings shared by
every channel.
"""

import math
from dataclasses import dataclass
from typing import Any, Dict, Optional

from ..core.errors import ConfigurationError
from ..core.frames import BOLTZMANN, SPEED_OF_LIGHT

# Quantization full scale in thermal-noise standard deviations
FULL_SCALE_SIGMAS: float = 3.0

INT16_MAX: int = 32767
INT16_MIN: int = -32768


@dataclass
class RadarConfig:
    """Complete radar system configuration.

    Attributes:
        cw_frequency: CW channel carrier in Hz
        fmcw_start_frequency: FMCW sweep start frequency in Hz
        bandwidth_1: Sweep bandwidth of even-numbered chirps in Hz
        bandwidth_2: Sweep bandwidth of odd-numbered chirps in Hz
        chirp_duration: Chirp (and CW dwell) length in seconds
        adc_sample_rate: ADC sample rate in Hz, also the noise bandwidth

        tx_power: Transmitter power in Watts
        tx_gain: Transmit antenna gain (linear)
        rx_gain: Receive antenna gain (linear)

        noise_figure: Receiver noise figure (linear, 1.58 ~ 2 dB)
        system_temperature: System noise temperature in Kelvin
        cw_noise_bandwidth: CW post-detection noise bandwidth in Hz

        reference_range: Range of the 1 m^2 calibration scatterer that
            ties clutter power to the radar equation
        reference_rcs: RCS of the calibration scatterer in m^2
    """

    # Waveform
    cw_frequency: float = 10.45e9
    fmcw_start_frequency: float = 10.5e9
    bandwidth_1: float = 10e6
    bandwidth_2: float = 15e6
    chirp_duration: float = 0.040
    adc_sample_rate: float = 1e6

    # Radar range equation
    tx_power: float = 1.0
    tx_gain: float = 100.0
    rx_gain: float = 100.0

    # Receiver
    noise_figure: float = 1.58
    system_temperature: float = 290.0
    cw_noise_bandwidth: float = 1000.0

    # Clutter calibration
    reference_range: float = 1000.0
    reference_rcs: float = 1.0

    @classmethod
    def from_dict(cls, d: Optional[Dict[str, Any]]) -> 'RadarConfig':
        """Build from a YAML ``radar`` section; unknown keys are rejected."""
        d = d or {}
        known = cls.__dataclass_fields__
        unknown = sorted(set(d) - set(known))
        if unknown:
            raise ConfigurationError(f"Unknown radar parameters: {', '.join(unknown)}")
        return cls(**{k: float(v) for k, v in d.items()})

    # Derived properties
    @property
    def num_samples(self) -> int:
        """ADC samples per chirp."""
        return int(round(self.chirp_duration * self.adc_sample_rate))

    @property
    def sample_interval(self) -> float:
        """Time between ADC samples in seconds."""
        return 1.0 / self.adc_sample_rate

    @property
    def thermal_noise_power(self) -> float:
        """Thermal noise power per rail in Watts.

        N = k * T * B * F with B the ADC sample rate.
        """
        return BOLTZMANN * self.system_temperature * self.adc_sample_rate * self.noise_figure

    @property
    def thermal_noise_std(self) -> float:
        return math.sqrt(max(self.thermal_noise_power, 0.0))

    @property
    def full_scale(self) -> float:
        """Signal level mapped to int16 full scale."""
        return FULL_SCALE_SIGMAS * self.thermal_noise_std

    @staticmethod
    def wavelength(frequency_hz: float) -> float:
        """Wavelength in meters."""
        return SPEED_OF_LIGHT / frequency_hz

    def radar_equation(self, range_m: float, rcs_m2: float, gain: float,
                       carrier_hz: float) -> float:
        """Calculate received power using the radar range equation.

        P_r = (P_t * G_t * G_r * sigma * g^2 * lambda^2) / ((4 pi)^3 * R^4)

        where g is the one-way pattern gain toward the scatterer.

        Args:
            range_m: Range to target in meters
            rcs_m2: Radar cross section in m^2
            gain: Linear pattern gain (1.0 on boresight)
            carrier_hz: Carrier frequency of the receiving channel

        Returns:
            Received power in Watts
        """
        if range_m <= 0:
            return 0.0

        wavelength = self.wavelength(carrier_hz)
        numerator = (self.tx_power * self.tx_gain * self.rx_gain * rcs_m2
                     * gain * gain * wavelength * wavelength)
        denominator = ((4.0 * math.pi) ** 3) * (range_m ** 4)
        return numerator / denominator

    def validate(self) -> None:
        """Reject configurations that cannot produce whole chirps."""
        for name in ("cw_frequency", "fmcw_start_frequency", "chirp_duration", "adc_sample_rate"):
            if getattr(self, name) <= 0:
                raise ConfigurationError(f"{name} must be positive, got {getattr(self, name)}")
        for name in ("bandwidth_1", "bandwidth_2", "tx_power", "tx_gain", "rx_gain",
                     "noise_figure", "system_temperature", "reference_range", "reference_rcs"):
            if getattr(self, name) < 0:
                raise ConfigurationError(f"{name} must be non-negative, got {getattr(self, name)}")

        product = self.chirp_duration * self.adc_sample_rate
        if abs(product - round(product)) > 1e-6 * max(1.0, product):
            raise ConfigurationError(
                f"chirp_duration * adc_sample_rate = {product} is not a whole number of samples"
            )
