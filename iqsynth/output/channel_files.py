"""Per-channel binary I/Q file set.

Layout on disk, one run per timestamped directory:

    <output_dir>/<YYYYmmddHHMMSS>/CH<n>_I_<YYYYmmdd_HHMMSS>_00001.bin
    <output_dir>/<YYYYmmddHHMMSS>/CH<n>_Q_<YYYYmmdd_HHMMSS>_00001.bin

Each file is an append-only sequence of [optional 128-byte header]
[num_samples little-endian int16] blocks, one per chirp.
"""

from contextlib import ExitStack
from datetime import datetime
from pathlib import Path
from typing import BinaryIO, List, Optional, Tuple

import numpy as np

from ..core.header import IQ_I, IQ_Q
from ..radar.synthesis import ChannelSamples

SAMPLE_DTYPE = np.dtype("<i2")


def run_directory(output_dir: Path, started: datetime) -> Path:
    return Path(output_dir) / started.strftime("%Y%m%d%H%M%S")


def channel_file_name(channel_index: int, iq: int, started: datetime) -> str:
    rail = "I" if iq == IQ_I else "Q"
    return f"CH{channel_index + 1}_{rail}_{started.strftime('%Y%m%d_%H%M%S')}_00001.bin"


class ChannelFileSet:
    """
    Open I and Q files for every channel for the lifetime of a run.

    Use as a context manager; all handles are closed on exit, including
    when the run raises.
    """

    def __init__(self, output_dir: Path, num_channels: int,
                 started: Optional[datetime] = None):
        self.started = started or datetime.now()
        self.directory = run_directory(output_dir, self.started)
        self.num_channels = num_channels
        self._files: List[Tuple[BinaryIO, BinaryIO]] = []
        self._stack: Optional[ExitStack] = None

    @property
    def paths(self) -> List[Path]:
        """I and Q paths, interleaved in channel order."""
        return [self.directory / channel_file_name(ch, iq, self.started)
                for ch in range(self.num_channels) for iq in (IQ_I, IQ_Q)]

    def __enter__(self) -> 'ChannelFileSet':
        self.directory.mkdir(parents=True, exist_ok=True)
        with ExitStack() as stack:
            handles = [stack.enter_context(open(p, "wb")) for p in self.paths]
            self._files = list(zip(handles[0::2], handles[1::2]))
            self._stack = stack.pop_all()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if self._stack is not None:
            self._stack.close()
            self._stack = None
        self._files = []

    def write_header(self, channel_index: int, iq: int, payload: bytes) -> None:
        f_i, f_q = self._files[channel_index]
        (f_i if iq == IQ_I else f_q).write(payload)

    def write_samples(self, samples: ChannelSamples) -> None:
        f_i, f_q = self._files[samples.channel]
        f_i.write(np.asarray(samples.i).astype(SAMPLE_DTYPE).tobytes())
        f_q.write(np.asarray(samples.q).astype(SAMPLE_DTYPE).tobytes())
