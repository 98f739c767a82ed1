"""
Floor contact locking (anti-slide).

A foot close to the floor that barely moved since the previous frame is
pinned to its previous position. The knee/hip chain is not adjusted here;
any leg length error this introduces is corrected by the constraint
solver on the next frame.
"""

from typing import Optional

from .config import FOOT_JOINTS, FloorLockConfig
from .motion_data import JointPositions, distance


def is_foot_planted(
    current_y: float,
    displacement: float,
    config: FloorLockConfig,
) -> bool:
    """Near the floor and nearly stationary."""
    return current_y < config.floor_height and displacement < config.max_displacement


def apply_floor_lock(
    joints: JointPositions,
    previous: JointPositions,
    config: Optional[FloorLockConfig] = None,
) -> tuple[JointPositions, list[str]]:
    """
    Pin planted feet to their previous-frame positions.

    Args:
        joints: Constrained joint positions of the current frame
        previous: Previous committed frame
        config: Floor lock thresholds

    Returns:
        (joints, names of locked feet). The input mapping is not modified.
    """
    if config is None:
        config = FloorLockConfig()

    if not config.enabled:
        return dict(joints), []

    locked = dict(joints)
    locked_feet = []

    for foot in FOOT_JOINTS:
        current = joints[foot]
        prior = previous[foot]

        if is_foot_planted(current.y, distance(prior, current), config):
            locked[foot] = prior
            locked_feet.append(foot)

    return locked, locked_feet
