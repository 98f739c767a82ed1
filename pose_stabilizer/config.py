"""Configuration for causal motion stabilization."""

from dataclasses import dataclass, field
from enum import Enum


class JointName(str, Enum):
    """Tracked skeleton points."""

    HEAD = "head"
    NECK = "neck"
    SPINE = "spine"
    L_SHOULDER = "l_shoulder"
    R_SHOULDER = "r_shoulder"
    L_ELBOW = "l_elbow"
    R_ELBOW = "r_elbow"
    L_HAND = "l_hand"
    R_HAND = "r_hand"
    L_FINGERS = "l_fingers"
    R_FINGERS = "r_fingers"
    L_HIP = "l_hip"
    R_HIP = "r_hip"
    L_KNEE = "l_knee"
    R_KNEE = "r_knee"
    L_FOOT = "l_foot"
    R_FOOT = "r_foot"
    L_TOE = "l_toe"
    R_TOE = "r_toe"


# Skeleton topology
JOINT_NAMES = [joint.value for joint in JointName]

# Joint name to index mapping
JOINT_INDEX = {name: i for i, name in enumerate(JOINT_NAMES)}

# Bone connections: (parent, child)
# Parents always appear before their children; the constraint solver relies on it.
BONES = [
    ("spine", "neck"),
    ("neck", "head"),
    ("neck", "l_shoulder"),
    ("l_shoulder", "l_elbow"),
    ("l_elbow", "l_hand"),
    ("l_hand", "l_fingers"),
    ("neck", "r_shoulder"),
    ("r_shoulder", "r_elbow"),
    ("r_elbow", "r_hand"),
    ("r_hand", "r_fingers"),
    ("spine", "l_hip"),
    ("l_hip", "l_knee"),
    ("l_knee", "l_foot"),
    ("l_foot", "l_toe"),
    ("spine", "r_hip"),
    ("r_hip", "r_knee"),
    ("r_knee", "r_foot"),
    ("r_foot", "r_toe"),
]

# Bone indices: (parent_idx, child_idx)
BONE_INDICES = [(JOINT_INDEX[p], JOINT_INDEX[c]) for p, c in BONES]

ROOT_JOINT = "spine"

# Joints eligible for floor locking
FOOT_JOINTS = ("l_foot", "r_foot")


@dataclass
class FilterConfig:
    """Configuration for the adaptive low-pass filter bank."""

    # Baseline cutoff (Hz): lower = smoother, more lag
    min_cutoff: float = 1.0

    # Speed coefficient: higher = less lag during fast motion
    beta: float = 0.0

    # Cutoff (Hz) for the derivative estimate
    d_cutoff: float = 1.0


@dataclass
class ConstraintConfig:
    """Relative bone length deviation thresholds."""

    # Above this, rescale the bone to its reference length
    soft_threshold: float = 0.05

    # Above this, treat as a tracking failure and carry the last pose forward
    failure_threshold: float = 0.3


@dataclass
class FloorLockConfig:
    """Anti-slide settings for the feet."""

    enabled: bool = True

    # Foot height (m) below which it counts as planted
    floor_height: float = 0.1

    # Per-frame displacement (m) below which a planted foot is pinned
    max_displacement: float = 0.05


@dataclass
class LandmarkConfig:
    """Mapping from detector world landmarks to skeleton joints."""

    # Landmarks below this visibility are skipped when alternatives exist
    visibility_threshold: float = 0.5

    scale: float = 1.0

    # Detector origin is at the hips; lift it so hips sit near 0.9 m
    y_offset: float = 0.9


@dataclass
class StabilizerConfig:
    """Complete configuration for one stabilization session."""

    filter: FilterConfig = field(default_factory=FilterConfig)
    constraints: ConstraintConfig = field(default_factory=ConstraintConfig)
    floor_lock: FloorLockConfig = field(default_factory=FloorLockConfig)
    landmarks: LandmarkConfig = field(default_factory=LandmarkConfig)

    # Nominal sampling rate
    fps: float = 30.0

    # Verbosity
    verbose: bool = False


# Preset configurations
def get_preset_config(preset: str) -> StabilizerConfig:
    """Get preset configuration."""
    config = StabilizerConfig()

    if preset == "default":
        pass  # Use defaults

    elif preset == "high-noise":
        # Heavier smoothing for shaky, low-light footage
        config.filter.min_cutoff = 0.5

    elif preset == "fast-motion":
        # Let the cutoff open up with speed to reduce lag on quick limbs
        config.filter.beta = 0.5

    return config
