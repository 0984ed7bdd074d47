"""Ground-truth history records and field extraction."""

from dataclasses import dataclass
from typing import Any, List, Optional, Sequence

_AXES = {"x": 0, "y": 1, "z": 2}


@dataclass(frozen=True)
class GroundTruthRecord:
    """Provider snapshots captured after one simulation tick.

    Attributes:
        time: Simulation time at the end of the tick in seconds
        trajectory: TrajectorySnapshot of the target
        platform: PlatformSnapshot of the radar platform
        antenna: AntennaSnapshot of the gimbal
        header: Last HeaderSnapshot, or None when headers are off
    """
    time: float
    trajectory: Any
    platform: Any
    antenna: Any
    header: Optional[Any] = None


def _resolve(value: Any, part: str, path: str) -> Any:
    if hasattr(value, part):
        return getattr(value, part)
    if part in _AXES and hasattr(value, "__getitem__") and not isinstance(value, (str, bytes)):
        return float(value[_AXES[part]])
    raise AttributeError(f"Cannot resolve '{part}' in path '{path}'")


def extract_field(record: Any, path: str) -> Any:
    """Walk a dotted attribute path; x/y/z index into vectors."""
    value = record
    for part in path.split("."):
        value = _resolve(value, part, path)
    return value


def extract_series(records: Sequence[Any], path: str) -> List[Any]:
    """
    Pull one field out of every record, e.g. ``"trajectory.position.y"``.

    Raises:
        AttributeError: If the path does not resolve on a record
    """
    return [extract_field(r, path) for r in records]
