"""
Per-frame bone length constraint solver.

Bones are visited in hierarchy order (parents before children) and each
child is corrected relative to its possibly just-corrected parent:

- deviation <= soft threshold:    keep the filtered position
- soft < deviation <= failure:    rescale the bone to its reference length
- deviation > failure threshold:  tracking failure, reuse the previous
                                  frame's parent->child offset
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

import numpy as np

from .config import BONES, ConstraintConfig
from .motion_data import JointPositions, Vector3
from .skeleton import Bone, ReferenceLengths, bone_deviation


class CorrectionTier(str, Enum):
    """Outcome of checking one bone."""

    ACCEPTED = "accepted"
    RESCALED = "rescaled"
    CARRIED_FORWARD = "carried_forward"


@dataclass
class ConstraintReport:
    """Per-frame record of what the solver did to each bone."""

    tiers: dict[Bone, CorrectionTier] = field(default_factory=dict)

    def count(self, tier: CorrectionTier) -> int:
        return sum(1 for t in self.tiers.values() if t == tier)


def classify_deviation(deviation: float, config: ConstraintConfig) -> CorrectionTier:
    """Map a relative bone length deviation to a correction tier."""
    if deviation > config.failure_threshold:
        return CorrectionTier.CARRIED_FORWARD
    if deviation > config.soft_threshold:
        return CorrectionTier.RESCALED
    return CorrectionTier.ACCEPTED


def _normalize(v: np.ndarray) -> np.ndarray:
    length = np.linalg.norm(v)
    return v / length if length > 0 else np.zeros(3)


def solve_bone_constraints(
    joints: JointPositions,
    reference_lengths: ReferenceLengths,
    previous: Optional[JointPositions] = None,
    config: Optional[ConstraintConfig] = None,
) -> tuple[JointPositions, ConstraintReport]:
    """
    Enforce reference bone lengths on one frame.

    Args:
        joints: Filtered joint positions of the current frame
        reference_lengths: Session reference lengths
        previous: Previous committed frame; without it the carry-forward
            tier is skipped and the bone is left as observed
        config: Deviation thresholds

    Returns:
        (corrected joints, report). The input mapping is not modified.
    """
    if config is None:
        config = ConstraintConfig()

    corrected = dict(joints)
    report = ConstraintReport()

    for parent, child in BONES:
        ref_len = reference_lengths[(parent, child)]

        parent_pos = corrected[parent].as_array()
        bone_vec = corrected[child].as_array() - parent_pos
        length = float(np.linalg.norm(bone_vec))

        tier = classify_deviation(bone_deviation(length, ref_len), config)

        if tier == CorrectionTier.CARRIED_FORWARD:
            if previous is None:
                tier = CorrectionTier.ACCEPTED
            else:
                prev_offset = previous[child].as_array() - previous[parent].as_array()
                corrected[child] = Vector3.from_array(parent_pos + prev_offset)

        elif tier == CorrectionTier.RESCALED:
            corrected[child] = Vector3.from_array(
                parent_pos + _normalize(bone_vec) * ref_len
            )

        report.tiers[(parent, child)] = tier

    return corrected, report
