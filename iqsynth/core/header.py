"""Doppler Sensor File Header

Encodes the fixed 128-byte little-endian header that precedes every
chirp's sample block in each channel file:

    STX (configured, normally 8 bytes)
    uint16 channel, mode, waveform profile, I/Q id,
           sequence high word, sequence low word,
           hour, minute, second, millisecond, even/odd flag
    4 reserved zero bytes
    uint16 collection mode
    zero padding to 128 bytes
"""

import struct
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Optional

from .errors import ConfigurationError

HEADER_SIZE: int = 128
DEFAULT_STX: bytes = (0xDEF09ABC56781234).to_bytes(8, "little")

MODE_CW: int = 1
MODE_FMCW: int = 4
IQ_I: int = 0
IQ_Q: int = 1

_FIELDS = struct.Struct("<11H")
_RESERVED = b"\x00" * 4
_TAIL = struct.Struct("<H")


@dataclass
class HeaderParameters:
    """Per-chirp file header settings."""
    stx: bytes = DEFAULT_STX
    base_time: datetime = field(default_factory=datetime.now)
    collection_mode: int = 2
    waveform_profile: int = 0


@dataclass(frozen=True)
class HeaderArgs:
    channel: int           # 1-based
    mode: int              # MODE_CW / MODE_FMCW
    iq: int                # IQ_I / IQ_Q
    waveform_profile: int = 0
    collection_mode: int = 2


@dataclass(frozen=True)
class HeaderSnapshot:
    """The most recently encoded header and what went into it."""
    d_time: float
    sequence: int
    timestamp: datetime
    args: HeaderArgs
    payload: bytes


class DopplerSensorHeader:
    """Header encoder; one instance serves every channel of a run."""

    def __init__(self):
        self.parameters: Optional[HeaderParameters] = None
        self._snapshot: Optional[HeaderSnapshot] = None

    def initialize(self, parameters) -> None:
        if not isinstance(parameters, HeaderParameters):
            raise ConfigurationError(
                f"Invalid parameter type for DopplerSensorHeader: expected "
                f"HeaderParameters, got {type(parameters).__name__}"
            )
        if len(parameters.stx) + _FIELDS.size + len(_RESERVED) + _TAIL.size > HEADER_SIZE:
            raise ConfigurationError(f"STX of {len(parameters.stx)} bytes does not fit the header")
        self.parameters = parameters
        self._snapshot = None

    def args_for(self, channel_index: int, is_cw: bool, iq: int) -> HeaderArgs:
        p = self.parameters
        return HeaderArgs(
            channel=channel_index + 1,
            mode=MODE_CW if is_cw else MODE_FMCW,
            iq=iq,
            waveform_profile=p.waveform_profile,
            collection_mode=p.collection_mode,
        )

    def timestamp(self, d_time: float, sequence: int) -> datetime:
        return self.parameters.base_time + timedelta(seconds=d_time * sequence)

    def encode(self, d_time: float, sequence: int, args: HeaderArgs) -> bytes:
        """
        Build one header.

        Args:
            d_time: Seconds between consecutive sequence numbers
            sequence: Chirp counter (the low 32 bits are written)
            args: Channel/mode/I-Q fields

        Returns:
            HEADER_SIZE bytes
        """
        if self.parameters is None:
            raise ConfigurationError("DopplerSensorHeader used before initialize()")

        ts = self.timestamp(d_time, sequence)
        seq = sequence & 0xFFFFFFFF
        fields = _FIELDS.pack(
            args.channel & 0xFFFF,
            args.mode & 0xFFFF,
            args.waveform_profile & 0xFFFF,
            args.iq & 0xFFFF,
            seq >> 16,
            seq & 0xFFFF,
            ts.hour,
            ts.minute,
            ts.second,
            ts.microsecond // 1000,
            sequence % 2,
        )
        payload = self.parameters.stx + fields + _RESERVED + _TAIL.pack(args.collection_mode & 0xFFFF)
        payload = payload.ljust(HEADER_SIZE, b"\x00")

        self._snapshot = HeaderSnapshot(d_time, sequence, ts, args, payload)
        return payload

    def snapshot(self) -> Optional[HeaderSnapshot]:
        return self._snapshot
