"""Loading recorded detector output and exporting stabilized motion as tables."""

from pathlib import Path

import numpy as np
import pandas as pd

from .config import JOINT_NAMES
from .landmarks import NUM_LANDMARKS, PoseDetection, landmarks_from_array
from .motion_data import MotionData


def load_detection_table(filepath: Path | str) -> pd.DataFrame:
    """Load a recorded detector table from CSV or Excel."""
    filepath = Path(filepath)
    if filepath.suffix.lower() in (".xlsx", ".xls"):
        return pd.read_excel(filepath)
    return pd.read_csv(filepath)


def dataframe_to_detections(df: pd.DataFrame) -> list[tuple[float, PoseDetection]]:
    """
    Convert a detector table to (time, detection) samples.

    Expects a "timestamp" column plus lm{i}_x, lm{i}_y, lm{i}_z and
    optionally lm{i}_visibility for each landmark. Rows with any NaN
    landmark coordinate are treated as no usable detection; rows without
    a finite timestamp are dropped.
    """
    timestamps = df["timestamp"].to_numpy(dtype=float)

    columns = []
    for i in range(NUM_LANDMARKS):
        columns.extend([f"lm{i}_x", f"lm{i}_y", f"lm{i}_z"])
    coords = df[columns].to_numpy(dtype=float).reshape(len(df), NUM_LANDMARKS, 3)

    visibility = np.full((len(df), NUM_LANDMARKS, 1), np.nan)
    for i in range(NUM_LANDMARKS):
        column = f"lm{i}_visibility"
        if column in df.columns:
            visibility[:, i, 0] = df[column].to_numpy(dtype=float)

    values = np.concatenate([coords, visibility], axis=2)

    samples = []
    for t, frame_values in zip(timestamps, values):
        if not np.isfinite(t):
            continue

        if np.any(np.isnan(frame_values[:, :3])):
            samples.append((float(t), None))
        else:
            samples.append((float(t), landmarks_from_array(frame_values)))

    return samples


def load_detections(filepath: Path | str) -> list[tuple[float, PoseDetection]]:
    """Load detector samples from file."""
    return dataframe_to_detections(load_detection_table(filepath))


def motion_to_dataframe(motion: MotionData) -> pd.DataFrame:
    """
    Convert motion to a wide table, one row per frame.

    Columns: time, then {joint}_x, {joint}_y, {joint}_z for each joint.
    """
    positions = motion.to_array().reshape(motion.n_frames, len(JOINT_NAMES) * 3)

    columns = []
    for joint in JOINT_NAMES:
        columns.extend([f"{joint}_x", f"{joint}_y", f"{joint}_z"])

    df = pd.DataFrame(positions, columns=columns)
    df.insert(0, "time", motion.timestamps())
    return df


def save_motion_csv(motion: MotionData, output_path: Path | str) -> None:
    """Export motion positions to CSV."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    motion_to_dataframe(motion).to_csv(output_path, index=False, float_format="%.4f")
