"""
Output: per-channel binary I/Q files.
"""

from .channel_files import ChannelFileSet, channel_file_name, run_directory, SAMPLE_DTYPE

__all__ = [
    'ChannelFileSet',
    'channel_file_name',
    'run_directory',
    'SAMPLE_DTYPE',
]
