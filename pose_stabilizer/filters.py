"""
Causal adaptive low-pass filtering (One Euro filter).

The cutoff frequency rises with the estimated signal speed, so slow
jitter is smoothed heavily while fast motion passes with little lag.
Filters are stateful and must be fed samples in time order.
"""

import math
from typing import Optional

from .config import FilterConfig, JOINT_NAMES, JOINT_INDEX
from .motion_data import JointPositions, Vector3


def smoothing_factor(dt: float, cutoff: float) -> float:
    """
    First-order low-pass blending factor for a given sample interval.

    Args:
        dt: Time since previous sample in seconds (> 0)
        cutoff: Cutoff frequency in Hz

    Returns:
        alpha in (0, 1]
    """
    tau = 1.0 / (2 * math.pi * cutoff)
    return 1.0 / (1.0 + tau / dt)


def low_pass(dt: float, x: float, x_prev: float, cutoff: float) -> float:
    """Blend x towards x_prev using the cutoff-dependent factor."""
    alpha = smoothing_factor(dt, cutoff)
    return x_prev + alpha * (x - x_prev)


class OneEuroFilter:
    """
    Scalar adaptive low-pass filter.

    State is unset until the first sample; the first sample passes
    through unchanged.
    """

    def __init__(
        self,
        min_cutoff: float = 1.0,
        beta: float = 0.0,
        d_cutoff: float = 1.0,
    ):
        self.min_cutoff = min_cutoff
        self.beta = beta
        self.d_cutoff = d_cutoff

        self.x_prev: Optional[float] = None
        self.dx_prev: Optional[float] = None
        self.t_prev: Optional[float] = None

    @property
    def initialized(self) -> bool:
        return self.t_prev is not None

    def reset(self) -> None:
        self.x_prev = None
        self.dx_prev = None
        self.t_prev = None

    def filter(self, t: float, x: float) -> float:
        """
        Filter one sample.

        Args:
            t: Sample time in seconds
            x: Raw value

        Returns:
            Filtered value. A timestamp that does not advance past the
            previous one returns the last filtered value and leaves the
            state untouched.
        """
        if self.t_prev is None:
            self.x_prev = x
            self.dx_prev = 0.0
            self.t_prev = t
            return x

        dt = t - self.t_prev
        if dt <= 0:
            return self.x_prev

        dx = (x - self.x_prev) / dt
        edx = low_pass(dt, dx, self.dx_prev, self.d_cutoff)

        cutoff = self.min_cutoff + self.beta * abs(edx)
        result = low_pass(dt, x, self.x_prev, cutoff)

        self.x_prev = result
        self.dx_prev = edx
        self.t_prev = t

        return result


class Vector3Filter:
    """Independent OneEuroFilter per axis; no cross-axis coupling."""

    def __init__(
        self,
        min_cutoff: float = 1.0,
        beta: float = 0.0,
        d_cutoff: float = 1.0,
    ):
        self.x_filter = OneEuroFilter(min_cutoff, beta, d_cutoff)
        self.y_filter = OneEuroFilter(min_cutoff, beta, d_cutoff)
        self.z_filter = OneEuroFilter(min_cutoff, beta, d_cutoff)

    def reset(self) -> None:
        self.x_filter.reset()
        self.y_filter.reset()
        self.z_filter.reset()

    def filter(self, t: float, v: Vector3) -> Vector3:
        return Vector3(
            self.x_filter.filter(t, v.x),
            self.y_filter.filter(t, v.y),
            self.z_filter.filter(t, v.z),
        )


class JointFilterBank:
    """
    One Vector3Filter per joint, allocated once for the session.

    Filters are stored in JOINT_NAMES order and looked up through
    JOINT_INDEX, so the bank always covers the full skeleton.
    """

    def __init__(self, config: Optional[FilterConfig] = None):
        self.config = config if config is not None else FilterConfig()
        self._filters = [
            Vector3Filter(
                self.config.min_cutoff,
                self.config.beta,
                self.config.d_cutoff,
            )
            for _ in JOINT_NAMES
        ]

    def __len__(self) -> int:
        return len(self._filters)

    def __getitem__(self, joint_name: str) -> Vector3Filter:
        return self._filters[JOINT_INDEX[joint_name]]

    def reset(self) -> None:
        for vector_filter in self._filters:
            vector_filter.reset()

    def filter(self, t: float, joints: JointPositions) -> JointPositions:
        """Filter every joint of one frame at time t."""
        return {
            name: self._filters[i].filter(t, joints[name])
            for i, name in enumerate(JOINT_NAMES)
        }
