"""
Detector landmarks to skeleton joints.

The pose detector reports 33 world landmarks per frame (BlazePose
topology) in meters, Y pointing down, origin at the hip center. This
module maps them onto the 19-joint skeleton in the Y-up floor frame.

Landmark indices used
---------------------
 0=NOSE
11=L_SHOULDER 12=R_SHOULDER 13=L_ELBOW 14=R_ELBOW 15=L_WRIST 16=R_WRIST
17=L_PINKY 18=R_PINKY 19=L_INDEX 20=R_INDEX 21=L_THUMB 22=R_THUMB
23=L_HIP 24=R_HIP 25=L_KNEE 26=R_KNEE 27=L_ANKLE 28=R_ANKLE
31=L_FOOT_INDEX 32=R_FOOT_INDEX
"""

from typing import NamedTuple, Optional, Sequence

import numpy as np

from .config import LandmarkConfig
from .motion_data import JointPositions, Vector3

NUM_LANDMARKS = 33

# Joints read straight from one landmark
JOINT_LANDMARKS = {
    "head": 0,
    "l_shoulder": 11,
    "r_shoulder": 12,
    "l_elbow": 13,
    "r_elbow": 14,
    "l_hand": 15,
    "r_hand": 16,
    "l_hip": 23,
    "r_hip": 24,
    "l_knee": 25,
    "r_knee": 26,
    "l_foot": 27,
    "r_foot": 28,
}

# Joints with alternates, best first (index -> pinky -> thumb for fingers)
LANDMARK_PRIORITY = {
    "l_fingers": (19, 17, 21),
    "r_fingers": (20, 18, 22),
    "l_toe": (31,),
    "r_toe": (32,),
}


class Landmark(NamedTuple):
    """Raw detector landmark."""

    x: float
    y: float
    z: float

    # Detector confidence in [0, 1]; None when not reported
    visibility: Optional[float] = None


# One frame of detector output: None when no person was detected
PoseDetection = Optional[Sequence[Landmark]]


def has_usable_landmarks(detection: PoseDetection) -> bool:
    """A detection must report the full landmark set to be used."""
    return detection is not None and len(detection) >= NUM_LANDMARKS


def landmark_to_vector(landmark: Landmark, config: LandmarkConfig) -> Vector3:
    """Convert a detector landmark to the Y-up floor frame."""
    return Vector3(
        -landmark.x * config.scale,
        -landmark.y * config.scale + config.y_offset,
        -landmark.z * config.scale,
    )


def midpoint(a: Vector3, b: Vector3) -> Vector3:
    return Vector3.from_array((a.as_array() + b.as_array()) / 2)


def select_landmark(
    detection: Sequence[Landmark],
    indices: Sequence[int],
    fallback: Optional[Vector3],
    config: LandmarkConfig,
) -> Vector3:
    """
    Pick the best visible landmark from a priority list.

    Landmarks whose reported visibility is below the threshold are
    skipped. If every candidate is skipped the fallback (previous frame
    value) is used, or the first candidate when there is no fallback.
    """
    for idx in indices:
        landmark = detection[idx]
        if landmark.visibility is not None and landmark.visibility < config.visibility_threshold:
            continue
        return landmark_to_vector(landmark, config)

    if fallback is not None:
        return fallback

    return landmark_to_vector(detection[indices[0]], config)


def extract_joints(
    detection: PoseDetection,
    previous: Optional[JointPositions] = None,
    config: Optional[LandmarkConfig] = None,
) -> Optional[JointPositions]:
    """
    Build a full set of joint positions from one detector frame.

    Args:
        detection: Detector landmarks, or None when nobody was detected
        previous: Previous committed frame, used for low-visibility joints
        config: Coordinate mapping and visibility threshold

    Returns:
        JointPositions, or None when the detection has no usable landmarks
    """
    if config is None:
        config = LandmarkConfig()

    if not has_usable_landmarks(detection):
        return None

    joints = {
        name: landmark_to_vector(detection[idx], config)
        for name, idx in JOINT_LANDMARKS.items()
    }

    for name, indices in LANDMARK_PRIORITY.items():
        fallback = previous[name] if previous is not None else None
        joints[name] = select_landmark(detection, indices, fallback, config)

    joints["neck"] = midpoint(joints["l_shoulder"], joints["r_shoulder"])
    joints["spine"] = midpoint(joints["l_hip"], joints["r_hip"])

    return joints


def landmarks_from_array(values: np.ndarray) -> list[Landmark]:
    """
    Build landmarks from a (n_landmarks, 3) or (n_landmarks, 4) array.

    A fourth column is read as visibility; NaN visibility means unreported.
    """
    landmarks = []
    for row in values:
        visibility = None
        if len(row) > 3 and not np.isnan(row[3]):
            visibility = float(row[3])
        landmarks.append(Landmark(float(row[0]), float(row[1]), float(row[2]), visibility))
    return landmarks
