import struct
from datetime import datetime

import numpy as np
import pytest

from iqsynth.core.errors import ConfigurationError
from iqsynth.core.header import (
    DEFAULT_STX,
    HEADER_SIZE,
    IQ_I,
    IQ_Q,
    MODE_CW,
    MODE_FMCW,
    DopplerSensorHeader,
    HeaderArgs,
    HeaderParameters,
)
from iqsynth.core.records import GroundTruthRecord, extract_series
from iqsynth.output.channel_files import ChannelFileSet, channel_file_name
from iqsynth.radar.synthesis import ChannelSamples

BASE = datetime(2025, 1, 1, 12, 0, 0)


def make_header(**overrides):
    header = DopplerSensorHeader()
    header.initialize(HeaderParameters(base_time=BASE, **overrides))
    return header


def test_default_stx_bytes():
    assert DEFAULT_STX == bytes([0x34, 0x12, 0x78, 0x56, 0xBC, 0x9A, 0xF0, 0xDE])


def test_header_layout():
    header = make_header(collection_mode=2)
    args = HeaderArgs(channel=5, mode=MODE_FMCW, iq=IQ_Q)
    payload = header.encode(0.04, 0x12345, args)

    assert len(payload) == HEADER_SIZE
    assert payload[:8] == DEFAULT_STX
    fields = struct.unpack_from("<11H", payload, 8)
    assert fields == (5, MODE_FMCW, 0, IQ_Q, 0x0001, 0x2345, 12, 49, 42, 600, 1)
    assert payload[30:34] == b"\x00" * 4
    assert struct.unpack_from("<H", payload, 34)[0] == 2
    assert payload[36:] == b"\x00" * (HEADER_SIZE - 36)


def test_sequence_keeps_low_32_bits():
    header = make_header()
    payload = header.encode(0.0, (1 << 32) + 7, HeaderArgs(1, MODE_CW, IQ_I))
    hi, lo = struct.unpack_from("<2H", payload, 16)
    assert (hi, lo) == (0, 7)


def test_snapshot_tracks_last_header():
    header = make_header()
    assert header.snapshot() is None
    args = HeaderArgs(2, MODE_CW, IQ_I)
    payload = header.encode(0.04, 10, args)
    snap = header.snapshot()
    assert snap.sequence == 10
    assert snap.args == args
    assert snap.payload == payload
    assert snap.timestamp == datetime(2025, 1, 1, 12, 0, 0, 400000)

    header.initialize(HeaderParameters(base_time=BASE))
    assert header.snapshot() is None


def test_args_for_channel():
    header = make_header(collection_mode=3, waveform_profile=1)
    args = header.args_for(4, False, IQ_I)
    assert args == HeaderArgs(channel=5, mode=MODE_FMCW, iq=IQ_I,
                              waveform_profile=1, collection_mode=3)
    assert header.args_for(0, True, IQ_Q).mode == MODE_CW


def test_header_errors():
    with pytest.raises(ConfigurationError):
        DopplerSensorHeader().encode(0.04, 0, HeaderArgs(1, MODE_CW, IQ_I))
    with pytest.raises(ConfigurationError):
        DopplerSensorHeader().initialize(HeaderParameters(stx=b"\x01" * 120))
    with pytest.raises(ConfigurationError):
        DopplerSensorHeader().initialize({"stx": DEFAULT_STX})


# Channel files

def test_channel_file_names():
    started = datetime(2025, 3, 4, 5, 6, 7)
    assert channel_file_name(0, IQ_I, started) == "CH1_I_20250304_050607_00001.bin"
    assert channel_file_name(7, IQ_Q, started) == "CH8_Q_20250304_050607_00001.bin"


def test_channel_file_set_writes_blocks(tmp_path):
    started = datetime(2025, 3, 4, 5, 6, 7)
    samples = ChannelSamples(1, True, np.array([1, -2, 3], dtype=np.int16),
                             np.array([-1, 2, -3], dtype=np.int16))
    with ChannelFileSet(tmp_path, 2, started) as files:
        files.write_header(1, IQ_Q, b"H" * HEADER_SIZE)
        files.write_samples(samples)

    run_dir = tmp_path / "20250304050607"
    assert len(list(run_dir.iterdir())) == 4
    i_data = (run_dir / "CH2_I_20250304_050607_00001.bin").read_bytes()
    q_data = (run_dir / "CH2_Q_20250304_050607_00001.bin").read_bytes()
    assert np.array_equal(np.frombuffer(i_data, dtype="<i2"), [1, -2, 3])
    assert q_data[:HEADER_SIZE] == b"H" * HEADER_SIZE
    assert np.array_equal(np.frombuffer(q_data[HEADER_SIZE:], dtype="<i2"), [-1, 2, -3])
    assert (run_dir / "CH1_I_20250304_050607_00001.bin").read_bytes() == b""


# Records

def test_extract_series():
    class Snap:
        def __init__(self, y):
            self.position = np.array([0.0, y, 0.0])

    records = [GroundTruthRecord(t, Snap(10.0 * t), None, None) for t in (0.0, 1.0, 2.0)]
    assert extract_series(records, "time") == [0.0, 1.0, 2.0]
    assert extract_series(records, "trajectory.position.y") == [0.0, 10.0, 20.0]
    with pytest.raises(AttributeError):
        extract_series(records, "trajectory.altitude")
