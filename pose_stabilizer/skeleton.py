"""Bone hierarchy and per-session reference bone lengths."""

from collections.abc import Iterator, Mapping

import numpy as np

from .config import BONES, BONE_INDICES
from .motion_data import JointPositions, distance

Bone = tuple[str, str]


class ReferenceLengths(Mapping):
    """
    Read-only mapping from (parent, child) bone to its calibrated length.

    Established once per session; values never change afterwards.
    """

    def __init__(self, lengths: Mapping[Bone, float]):
        missing = [bone for bone in BONES if bone not in lengths]
        if missing:
            raise ValueError(f"Reference lengths missing bones: {missing}")
        self._lengths = {bone: float(lengths[bone]) for bone in BONES}

    def __getitem__(self, bone: Bone) -> float:
        return self._lengths[bone]

    def __iter__(self) -> Iterator[Bone]:
        return iter(self._lengths)

    def __len__(self) -> int:
        return len(self._lengths)

    def __repr__(self) -> str:
        return f"ReferenceLengths({self._lengths!r})"

    def as_array(self) -> np.ndarray:
        """Lengths in BONES order."""
        return np.array([self._lengths[bone] for bone in BONES])


def get_bone_lengths(joints: JointPositions) -> dict[Bone, float]:
    """Current length of every bone in one frame."""
    return {
        (parent, child): distance(joints[parent], joints[child])
        for parent, child in BONES
    }


def establish_reference_lengths(joints: JointPositions) -> ReferenceLengths:
    """
    Calibrate reference bone lengths from a single frame.

    Args:
        joints: First post-filter frame with valid data

    Returns:
        Immutable ReferenceLengths for the rest of the session
    """
    return ReferenceLengths(get_bone_lengths(joints))


def bone_deviation(length: float, reference: float) -> float:
    """
    Relative deviation of a bone length from its reference.

    A zero reference is treated as 1 to avoid division by zero.
    """
    return abs(length - reference) / (reference or 1.0)


def bone_length_series(positions: np.ndarray) -> np.ndarray:
    """
    Bone lengths over time.

    Args:
        positions: (n_frames, n_joints, 3) array

    Returns:
        (n_frames, n_bones) array in BONES order
    """
    parents = [p for p, _ in BONE_INDICES]
    children = [c for _, c in BONE_INDICES]
    return np.linalg.norm(positions[:, children, :] - positions[:, parents, :], axis=2)
