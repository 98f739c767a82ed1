"""
Main entry point for the motion stabilization pipeline.

Usage:
    uv run python -m pose_stabilizer.main --input detections.csv --output motion.json
    uv run python -m pose_stabilizer.main --input detections.xlsx --output motion.json --preset high-noise --csv motion.csv
"""

import argparse
from pathlib import Path

from .config import get_preset_config
from .data_loader import load_detections, save_motion_csv
from .motion_data import save_motion_json
from .stabilizer import compute_metrics, stabilize


def main():
    parser = argparse.ArgumentParser(
        description="Causal smoothing, bone length constraints and floor locking for pose tracks"
    )
    parser.add_argument(
        "--input",
        type=str,
        required=True,
        help="Recorded detector output (CSV or Excel)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="output/motion.json",
        help="Path for the stabilized motion JSON",
    )
    parser.add_argument(
        "--csv",
        type=str,
        default=None,
        help="Also export joint positions as CSV",
    )
    parser.add_argument(
        "--preset",
        type=str,
        choices=["default", "high-noise", "fast-motion"],
        default="default",
        help="Configuration preset",
    )
    parser.add_argument(
        "--fps",
        type=float,
        default=None,
        help="Override nominal frame rate",
    )
    parser.add_argument(
        "--no-floor-lock",
        action="store_true",
        help="Disable foot anti-slide locking",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress verbose output",
    )

    args = parser.parse_args()

    # Load configuration
    config = get_preset_config(args.preset)
    config.verbose = not args.quiet

    if args.fps:
        config.fps = args.fps
    if args.no_floor_lock:
        config.floor_lock.enabled = False

    print(f"Using preset '{args.preset}'")

    # Load data
    print(f"Loading detections from {args.input}...")
    samples = load_detections(args.input)
    print(f"Loaded {len(samples)} samples")

    result = stabilize(samples, config=config)

    output_path = Path(args.output)
    save_motion_json(result.motion, output_path)
    print(f"Motion saved to: {output_path}")

    if result.motion.is_empty:
        print("No motion captured: no sample contained a usable detection")
        return

    if args.csv:
        save_motion_csv(result.motion, args.csv)
        print(f"CSV saved to: {args.csv}")

    metrics = compute_metrics(result.motion, result.reference_lengths)

    print(f"\n{'─'*60}")
    print("Results")
    print(f"{'─'*60}")
    print(f"  Frames: {metrics['valid_frames']}")
    print(f"  Bone length std: {metrics['bone_length_std'] * 1000:.2f} mm")
    print(f"  Max bone deviation: {metrics['max_bone_deviation'] * 100:.1f}%")
    print(f"  Mean acceleration: {metrics['acceleration_mean'] * 1000:.2f} mm/frame²")


if __name__ == "__main__":
    main()
