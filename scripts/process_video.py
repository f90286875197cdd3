#!/usr/bin/env python3
"""CLI script to run a stored video through the analysis pipeline."""
import argparse
import logging
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from lacrosselens.database.connection import SessionLocal
from lacrosselens.database.models import VideoStatus
from lacrosselens.processing.pipeline import VideoProcessor


def main():
    parser = argparse.ArgumentParser(
        description="Analyze a stored video synchronously"
    )
    parser.add_argument(
        "video_id",
        type=int,
        help="Database id of the video to process",
    )
    parser.add_argument(
        "--standard", "-s",
        action="store_true",
        help="Skip the multi-pass analysis and run a single standard pass",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Show pipeline log output",
    )

    args = parser.parse_args()
    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING)

    print(f"Processing video: {args.video_id}")

    db = SessionLocal()
    try:
        processor = VideoProcessor(db)
        if args.standard:
            processor.settings = processor.settings.model_copy(update={"multi_pass_enabled": False})
        result = processor.process_video(args.video_id)
    finally:
        db.close()

    if result.status != VideoStatus.COMPLETED:
        print(f"\nError: {result.error}", file=sys.stderr)
        sys.exit(1)

    print(f"\nProcessing complete!")
    print(f"  Video ID: {result.video_id}")
    print(f"  Mode: {result.mode}")
    print(f"  Analyses stored: {result.analyses_stored}")


if __name__ == "__main__":
    main()
