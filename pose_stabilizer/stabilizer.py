"""
Causal stabilization pipeline.

Main entry point chaining, for each incoming frame:
1. Landmark extraction (with visibility and previous-frame fallbacks)
2. Adaptive per-axis smoothing
3. Bone length constraints (first valid frame calibrates instead)
4. Floor contact locking

Frames are processed strictly in order and committed frames are never
revisited.
"""

from collections.abc import Iterable, Sized
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional

import numpy as np

from .config import StabilizerConfig, get_preset_config
from .constraints import CorrectionTier, solve_bone_constraints
from .filters import JointFilterBank
from .floor_lock import apply_floor_lock
from .landmarks import PoseDetection, extract_joints
from .motion_data import Frame, JointPositions, MotionData
from .skeleton import ReferenceLengths, bone_length_series, establish_reference_lengths


class SessionState(str, Enum):
    UNINITIALIZED = "uninitialized"
    CALIBRATED = "calibrated"


@dataclass
class SessionStats:
    """Counters collected over one session."""

    n_samples: int = 0
    n_committed: int = 0

    # Frames repeated because the detector found nobody
    n_held: int = 0

    # Frames dropped because nothing had been committed yet
    n_skipped: int = 0

    n_locked_feet: int = 0
    tier_counts: dict[CorrectionTier, int] = field(
        default_factory=lambda: {tier: 0 for tier in CorrectionTier}
    )


class MotionStabilizer:
    """
    Stateful stabilizer for one analysis session.

    UNINITIALIZED until the first frame with valid landmarks arrives,
    which calibrates the reference bone lengths; CALIBRATED afterwards
    until reset().
    """

    def __init__(self, config: Optional[StabilizerConfig] = None):
        self.config = config if config is not None else StabilizerConfig()
        self.filters = JointFilterBank(self.config.filter)

        self._reference_lengths: Optional[ReferenceLengths] = None
        self._frames: list[Frame] = []
        self.stats = SessionStats()

    @property
    def state(self) -> SessionState:
        if self._reference_lengths is None:
            return SessionState.UNINITIALIZED
        return SessionState.CALIBRATED

    @property
    def reference_lengths(self) -> Optional[ReferenceLengths]:
        return self._reference_lengths

    @property
    def last_frame(self) -> Optional[Frame]:
        return self._frames[-1] if self._frames else None

    @property
    def motion(self) -> MotionData:
        """Frames committed so far."""
        return MotionData(fps=self.config.fps, frames=list(self._frames))

    def reset(self) -> None:
        """Start a new session: clear filter state, calibration and output."""
        self.filters.reset()
        self._reference_lengths = None
        self._frames = []
        self.stats = SessionStats()

    def process_detection(self, time: float, detection: PoseDetection) -> Optional[Frame]:
        """
        Process one raw detector frame.

        Returns:
            The committed frame, or None if nothing was emitted
        """
        previous = self.last_frame.joints if self._frames else None
        joints = extract_joints(detection, previous, self.config.landmarks)
        return self.process_joints(time, joints)

    def process_joints(self, time: float, joints: Optional[JointPositions]) -> Optional[Frame]:
        """
        Process one frame of raw joint positions.

        Args:
            time: Sample time in seconds
            joints: Full raw joint set, or None when there was no detection

        Returns:
            The committed frame, or None if nothing was emitted
        """
        self.stats.n_samples += 1

        if joints is None:
            if not self._frames:
                self.stats.n_skipped += 1
                return None

            # Hold last pose
            self.stats.n_held += 1
            return self._commit(Frame(time=time, joints=self._frames[-1].joints))

        filtered = self.filters.filter(time, joints)

        if self._reference_lengths is None:
            self._reference_lengths = establish_reference_lengths(filtered)
            if self.config.verbose:
                print(f"  Calibrated {len(self._reference_lengths)} bones at t={time:.3f}s")
            corrected = filtered
        else:
            previous = self._frames[-1].joints if self._frames else None
            corrected, report = solve_bone_constraints(
                filtered,
                self._reference_lengths,
                previous,
                self.config.constraints,
            )
            for tier in report.tiers.values():
                self.stats.tier_counts[tier] += 1

        if self._frames:
            corrected, locked_feet = apply_floor_lock(
                corrected,
                self._frames[-1].joints,
                self.config.floor_lock,
            )
            self.stats.n_locked_feet += len(locked_feet)

        return self._commit(Frame(time=time, joints=corrected))

    def _commit(self, frame: Frame) -> Frame:
        self._frames.append(frame)
        self.stats.n_committed += 1
        return frame

    def run(
        self,
        samples: Iterable[tuple[float, PoseDetection]],
        on_progress: Optional[Callable[[int], None]] = None,
    ) -> MotionData:
        """
        Process a sequence of (time, detection) samples.

        Args:
            samples: Detector output in time order
            on_progress: Called with percent complete after each sample
                (only when the number of samples is known)

        Returns:
            MotionData with every frame committed in this session
        """
        n_total = len(samples) if isinstance(samples, Sized) else None

        if self.config.verbose:
            print("=" * 50)
            print("Motion Stabilizer")
            print("=" * 50)
            if n_total is not None:
                print(f"  Samples: {n_total}")
            print(f"  Filter: min_cutoff={self.config.filter.min_cutoff}, "
                  f"beta={self.config.filter.beta}")

        for i, (time, detection) in enumerate(samples):
            self.process_detection(time, detection)

            if on_progress is not None and n_total:
                on_progress(min(100, round(100 * (i + 1) / n_total)))

        if self.config.verbose:
            self._print_summary()

        return self.motion

    def _print_summary(self) -> None:
        stats = self.stats
        print("\n[Complete]")
        print(f"  Frames committed: {stats.n_committed}/{stats.n_samples}")
        print(f"  Held (no detection): {stats.n_held}")
        print(f"  Skipped (before first detection): {stats.n_skipped}")
        print(f"  Bones rescaled: {stats.tier_counts[CorrectionTier.RESCALED]}")
        print(f"  Bones carried forward: {stats.tier_counts[CorrectionTier.CARRIED_FORWARD]}")
        print(f"  Foot locks: {stats.n_locked_feet}")
        if stats.n_committed == 0:
            print("  Warning: no motion captured")


@dataclass
class StabilizationResult:
    """Complete result of one stabilization session."""

    motion: MotionData

    # Reference bone lengths used (None when no frame was valid)
    reference_lengths: Optional[ReferenceLengths]

    stats: SessionStats


def stabilize(
    samples: Iterable[tuple[float, PoseDetection]],
    config: Optional[StabilizerConfig] = None,
    preset: Optional[str] = None,
    on_progress: Optional[Callable[[int], None]] = None,
) -> StabilizationResult:
    """
    Stabilize a full detector recording in a fresh session.

    Args:
        samples: (time, detection) pairs in time order
        config: Stabilizer configuration (optional)
        preset: Preset name ("default", "high-noise", "fast-motion")
        on_progress: Progress callback receiving percent complete

    Returns:
        StabilizationResult with motion and session metadata
    """
    if config is None:
        if preset is not None:
            config = get_preset_config(preset)
        else:
            config = StabilizerConfig()

    stabilizer = MotionStabilizer(config)
    motion = stabilizer.run(samples, on_progress=on_progress)

    return StabilizationResult(
        motion=motion,
        reference_lengths=stabilizer.reference_lengths,
        stats=stabilizer.stats,
    )


def compute_metrics(
    motion: MotionData,
    reference_lengths: Optional[ReferenceLengths],
) -> dict[str, float]:
    """
    Compute quality metrics for a stabilized clip.

    Args:
        motion: Stabilized motion
        reference_lengths: Reference lengths used for the session

    Returns:
        Dictionary of metrics
    """
    metrics = {"valid_frames": motion.n_frames}

    if motion.is_empty or reference_lengths is None:
        metrics["bone_length_std"] = float("nan")
        metrics["max_bone_deviation"] = float("nan")
        metrics["acceleration_mean"] = float("nan")
        return metrics

    positions = motion.to_array()

    # Bone length consistency (std of bone lengths over time)
    lengths = bone_length_series(positions)
    metrics["bone_length_std"] = float(np.std(lengths, axis=0).mean())

    ref = reference_lengths.as_array()
    safe_ref = np.where(ref == 0, 1.0, ref)
    metrics["max_bone_deviation"] = float(np.max(np.abs(lengths - ref) / safe_ref))

    # Smoothness (mean acceleration magnitude)
    if motion.n_frames >= 3:
        accel = positions[2:] - 2 * positions[1:-1] + positions[:-2]
        metrics["acceleration_mean"] = float(np.linalg.norm(accel, axis=2).mean())
    else:
        metrics["acceleration_mean"] = float("nan")

    return metrics
