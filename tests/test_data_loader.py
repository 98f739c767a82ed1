"""Tests for pose_stabilizer.data_loader module."""

import pytest
import numpy as np
import pandas as pd
from pose_stabilizer.config import JOINT_NAMES
from pose_stabilizer.data_loader import (
    dataframe_to_detections,
    load_detections,
    motion_to_dataframe,
    save_motion_csv,
)
from pose_stabilizer.landmarks import NUM_LANDMARKS
from pose_stabilizer.motion_data import Frame, MotionData
from pose_stabilizer.stabilizer import stabilize


def detection_table(rest_pose, make_landmarks, n_frames=3, with_visibility=True):
    landmarks = make_landmarks(rest_pose, visibility=0.9)

    rows = []
    for i in range(n_frames):
        row = {"timestamp": i / 30}
        for j, lm in enumerate(landmarks):
            row[f"lm{j}_x"] = lm.x
            row[f"lm{j}_y"] = lm.y
            row[f"lm{j}_z"] = lm.z
            if with_visibility:
                row[f"lm{j}_visibility"] = lm.visibility
        rows.append(row)
    return pd.DataFrame(rows)


class TestDataframeToDetections:
    """Test conversion of recorded detector tables."""

    def test_one_sample_per_row(self, rest_pose, make_landmarks):
        df = detection_table(rest_pose, make_landmarks)

        samples = dataframe_to_detections(df)

        assert len(samples) == 3
        t, detection = samples[1]
        assert t == pytest.approx(1 / 30)
        assert len(detection) == NUM_LANDMARKS
        assert detection[0].visibility == pytest.approx(0.9)

    def test_nan_row_is_no_detection(self, rest_pose, make_landmarks):
        df = detection_table(rest_pose, make_landmarks)
        df.loc[1, [c for c in df.columns if c.startswith("lm")]] = np.nan

        samples = dataframe_to_detections(df)

        assert samples[1][1] is None
        assert samples[0][1] is not None

    def test_nan_timestamp_row_is_dropped(self, rest_pose, make_landmarks):
        """A row off the time axis must not poison the filters of the session."""
        df = detection_table(rest_pose, make_landmarks, n_frames=5)
        df.loc[2, "timestamp"] = np.nan

        samples = dataframe_to_detections(df)

        assert [t for t, _ in samples] == pytest.approx([0.0, 1 / 30, 3 / 30, 4 / 30])

        motion = stabilize(samples).motion
        assert motion.n_frames == 4
        assert np.all(np.isfinite(motion.to_array()))
        assert np.all(np.isfinite(motion.timestamps()))

    def test_visibility_is_optional(self, rest_pose, make_landmarks):
        df = detection_table(rest_pose, make_landmarks, with_visibility=False)

        samples = dataframe_to_detections(df)

        assert samples[0][1][11].visibility is None

    def test_missing_timestamp_raises(self, rest_pose, make_landmarks):
        df = detection_table(rest_pose, make_landmarks).drop(columns=["timestamp"])
        with pytest.raises(KeyError):
            dataframe_to_detections(df)

    def test_load_from_csv(self, rest_pose, make_landmarks, tmp_path):
        path = tmp_path / "detections.csv"
        detection_table(rest_pose, make_landmarks).to_csv(path, index=False)

        samples = load_detections(path)

        assert len(samples) == 3
        assert samples[2][1][13].x == pytest.approx(-0.3)


class TestMotionExport:
    """Test table export of stabilized motion."""

    def test_columns(self, rest_pose):
        motion = MotionData(fps=30, frames=[Frame(0.0, rest_pose), Frame(0.5, rest_pose)])

        df = motion_to_dataframe(motion)

        assert list(df.columns[:4]) == ["time", "head_x", "head_y", "head_z"]
        assert len(df.columns) == 1 + 3 * len(JOINT_NAMES)
        assert df["time"].tolist() == [0.0, 0.5]
        assert df.loc[0, "l_elbow_y"] == pytest.approx(1.1)

    def test_save_csv(self, rest_pose, tmp_path):
        motion = MotionData(fps=30, frames=[Frame(0.0, rest_pose)])
        path = tmp_path / "export" / "motion.csv"

        save_motion_csv(motion, path)

        df = pd.read_csv(path)
        assert len(df) == 1
        assert df.loc[0, "r_hand_x"] == pytest.approx(-0.35)
