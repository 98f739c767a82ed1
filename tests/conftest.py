"""Shared fixtures for pose_stabilizer tests."""

import pytest

from pose_stabilizer.config import StabilizerConfig
from pose_stabilizer.landmarks import JOINT_LANDMARKS, LANDMARK_PRIORITY, NUM_LANDMARKS, Landmark
from pose_stabilizer.motion_data import Vector3

# Standing pose, meters, Y-up, feet on the floor
REST_POSE = {
    "head": Vector3(0.0, 1.7, 0.0),
    "neck": Vector3(0.0, 1.5, 0.0),
    "spine": Vector3(0.0, 1.0, 0.0),
    "l_shoulder": Vector3(0.2, 1.4, 0.0),
    "r_shoulder": Vector3(-0.2, 1.4, 0.0),
    "l_elbow": Vector3(0.3, 1.1, 0.0),
    "r_elbow": Vector3(-0.3, 1.1, 0.0),
    "l_hand": Vector3(0.35, 0.8, 0.0),
    "r_hand": Vector3(-0.35, 0.8, 0.0),
    "l_fingers": Vector3(0.37, 0.7, 0.0),
    "r_fingers": Vector3(-0.37, 0.7, 0.0),
    "l_hip": Vector3(0.15, 0.9, 0.0),
    "r_hip": Vector3(-0.15, 0.9, 0.0),
    "l_knee": Vector3(0.15, 0.5, 0.0),
    "r_knee": Vector3(-0.15, 0.5, 0.0),
    "l_foot": Vector3(0.15, 0.0, 0.1),
    "r_foot": Vector3(-0.15, 0.0, 0.1),
    "l_toe": Vector3(0.15, 0.0, 0.25),
    "r_toe": Vector3(-0.15, 0.0, 0.25),
}


@pytest.fixture
def rest_pose():
    """Fresh copy of the standing pose."""
    return dict(REST_POSE)


@pytest.fixture
def passthrough_config():
    """Config whose filter cutoff is so high that smoothing is negligible."""
    config = StabilizerConfig()
    config.filter.min_cutoff = 1e6
    return config


def pose_to_landmarks(joints, visibility=None):
    """
    Build a detector landmark list that maps back onto the given joints
    with the default landmark config.
    """
    def to_landmark(v):
        return Landmark(-v.x, -(v.y - 0.9), -v.z, visibility)

    landmarks = [to_landmark(joints["head"])] * NUM_LANDMARKS
    for name, idx in JOINT_LANDMARKS.items():
        landmarks[idx] = to_landmark(joints[name])
    for name, indices in LANDMARK_PRIORITY.items():
        for idx in indices:
            landmarks[idx] = to_landmark(joints[name])
    return landmarks


@pytest.fixture
def make_landmarks():
    return pose_to_landmarks
