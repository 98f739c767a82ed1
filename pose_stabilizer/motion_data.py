"""Data model for stabilized motion and its JSON export form."""

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import NamedTuple

import numpy as np

from .config import JOINT_NAMES


class Vector3(NamedTuple):
    """3D point in meters, Y-up, floor at Y=0."""

    x: float
    y: float
    z: float

    def as_array(self) -> np.ndarray:
        """Return as (3,) array."""
        return np.array([self.x, self.y, self.z], dtype=float)

    @classmethod
    def from_array(cls, values: np.ndarray) -> "Vector3":
        return cls(float(values[0]), float(values[1]), float(values[2]))

    def to_dict(self) -> dict[str, float]:
        return {"x": self.x, "y": self.y, "z": self.z}

    @classmethod
    def from_dict(cls, data: dict) -> "Vector3":
        return cls(float(data["x"]), float(data["y"]), float(data["z"]))


# Joint name -> position, always holding every name in JOINT_NAMES
JointPositions = dict[str, Vector3]


def distance(a: Vector3, b: Vector3) -> float:
    """Euclidean distance between two points."""
    return float(np.linalg.norm(b.as_array() - a.as_array()))


def joints_to_array(joints: JointPositions) -> np.ndarray:
    """
    Convert joint positions to a (n_joints, 3) array in JOINT_NAMES order.
    """
    return np.array([joints[name] for name in JOINT_NAMES], dtype=float)


@dataclass(frozen=True)
class Frame:
    """
    One committed output frame.

    Joints are stored as a read-only copy of the mapping passed in.
    """

    # Seconds since the start of the session
    time: float
    joints: Mapping[str, Vector3]

    def __post_init__(self):
        object.__setattr__(self, "joints", MappingProxyType(dict(self.joints)))

    def to_dict(self) -> dict:
        return {
            "time": self.time,
            "joints": {name: self.joints[name].to_dict() for name in JOINT_NAMES},
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Frame":
        raw_joints = data["joints"]
        missing = [name for name in JOINT_NAMES if name not in raw_joints]
        if missing:
            raise ValueError(f"Frame at t={data.get('time')} is missing joints: {missing}")

        return cls(
            time=float(data["time"]),
            joints={name: Vector3.from_dict(raw_joints[name]) for name in JOINT_NAMES},
        )


@dataclass
class MotionData:
    """A stabilized motion clip: the sole output artifact of a session."""

    fps: float
    frames: list[Frame] = field(default_factory=list)

    @property
    def n_frames(self) -> int:
        """Number of frames in the clip."""
        return len(self.frames)

    @property
    def is_empty(self) -> bool:
        """True when no frame ever obtained valid data ("no motion captured")."""
        return not self.frames

    def timestamps(self) -> np.ndarray:
        return np.array([frame.time for frame in self.frames], dtype=float)

    def to_array(self) -> np.ndarray:
        """Return positions as (n_frames, n_joints, 3) array."""
        if not self.frames:
            return np.zeros((0, len(JOINT_NAMES), 3))
        return np.stack([joints_to_array(frame.joints) for frame in self.frames])

    def to_dict(self) -> dict:
        return {
            "fps": self.fps,
            "frames": [frame.to_dict() for frame in self.frames],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "MotionData":
        if "fps" not in data or "frames" not in data:
            raise ValueError("Motion data requires 'fps' and 'frames' fields")

        return cls(
            fps=data["fps"],
            frames=[Frame.from_dict(frame) for frame in data["frames"]],
        )


def save_motion_json(motion: MotionData, output_path: Path | str) -> None:
    """Save motion clip as pretty-printed JSON."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(motion.to_dict(), f, indent=2)


def load_motion_json(input_path: Path | str) -> MotionData:
    """Load motion clip saved by save_motion_json."""
    with open(input_path, encoding="utf-8") as f:
        data = json.load(f)

    return MotionData.from_dict(data)
