"""Command-line interface for offline tracking and fingertip evaluation."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

import numpy as np

from analysis.fingertip_eval import evaluate_fingertips
from exceptions import TabletopError
from record.event_log import read_event_log
from record.labels import load_labels


def evaluate_command(args):
    """Handle evaluate command.

    Args:
        args: Parsed command-line arguments
    """
    try:
        groundtruth = load_labels(Path(args.groundtruth))
        detected = read_event_log(Path(args.detected))
    except TabletopError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    result = evaluate_fingertips(groundtruth, detected)
    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    else:
        print(result.report())
    return 0


def track_command(args):
    """Handle track command: replay recorded depth frames and log finger events.

    Args:
        args: Parsed command-line arguments
    """
    from app.engine import HandTrackingEngine
    from capture.simulated_depth import SimulatedDepthDevice
    from configs.settings import AppConfig, load_config
    from record.event_log import FingerEventRecorder

    frames_path = Path(args.frames)
    if not frames_path.exists():
        print(f"Error: Frames file not found: {frames_path}", file=sys.stderr)
        return 1

    try:
        config = load_config(Path(args.config)) if args.config else AppConfig()
        frames = np.load(frames_path)
        if frames.ndim != 3:
            print(f"Error: Expected an (N, H, W) depth array, got shape {frames.shape}", file=sys.stderr)
            return 1

        device = SimulatedDepthDevice(list(frames), focal_length_px=args.focal_length)
        engine = HandTrackingEngine(device, config)
        recorder = FingerEventRecorder()
        engine.add_listener(recorder)
        processed = 0
        for _ in range(len(frames)):
            if engine.step() is not None:
                processed += 1
        engine.release()
        recorder.write(Path(args.output))
    except TabletopError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"Processed {processed} of {len(frames)} frames")
    print(f"Event log: {args.output}")
    return 0


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Tabletop hand tracking tools",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Replay recorded depth frames and log finger events
  python -m analysis.cli track --frames session.npy --output session.log

  # Compare detected fingertips against labels
  python -m analysis.cli evaluate labels.txt session.log
        """
    )

    subparsers = parser.add_subparsers(dest='command', help='Command to run')

    # evaluate command
    evaluate_parser = subparsers.add_parser(
        'evaluate',
        help='Evaluate detected fingertips against ground-truth labels'
    )
    evaluate_parser.add_argument('groundtruth', help='Label file (frame-id x y ...)')
    evaluate_parser.add_argument('detected', help='Event log (frame-id x y z ...)')
    evaluate_parser.add_argument(
        '--json',
        action='store_true',
        help='Print the result as JSON'
    )

    # track command
    track_parser = subparsers.add_parser(
        'track',
        help='Run the tracker over recorded depth frames'
    )
    track_parser.add_argument(
        '--frames',
        required=True,
        help='NumPy .npy file holding an (N, H, W) uint16 depth array in mm'
    )
    track_parser.add_argument(
        '--config',
        help='YAML configuration file (default: built-in defaults)'
    )
    track_parser.add_argument(
        '--output',
        required=True,
        help='Event log to write'
    )
    track_parser.add_argument(
        '--focal-length',
        type=float,
        default=575.8,
        help='Depth camera focal length in pixels'
    )

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    # Route to command handler
    if args.command == 'evaluate':
        return evaluate_command(args)
    elif args.command == 'track':
        return track_command(args)

    return 0


if __name__ == '__main__':
    sys.exit(main())
