"""
Causal Motion Stabilization for Monocular Pose Tracks

This package turns noisy per-frame 3D joint estimates from a pose
detector into a temporally stable, anatomically plausible animation.

Key features:
- One Euro adaptive smoothing per joint and axis
- Hierarchical bone length constraints with tiered failure handling
- Floor contact locking against foot sliding
- Hold-last-pose fallback when the detector loses the subject
"""
