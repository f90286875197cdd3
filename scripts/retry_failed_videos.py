#!/usr/bin/env python3
"""Re-run the pipeline for every failed video."""
import argparse
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from lacrosselens.database.connection import SessionLocal
from lacrosselens.database.models import Video, VideoStatus
from lacrosselens.processing.pipeline import VideoProcessor


def main():
    parser = argparse.ArgumentParser(description="Retry videos whose processing failed")
    parser.add_argument(
        "--user", "-u",
        help="Only retry videos owned by this user id",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="List the videos without processing them",
    )
    args = parser.parse_args()

    db = SessionLocal()
    try:
        query = db.query(Video).filter(Video.status == VideoStatus.FAILED)
        if args.user:
            query = query.filter(Video.user_id == args.user)
        videos = query.order_by(Video.id).all()

        if not videos:
            print("No failed videos found.")
            return

        print(f"Found {len(videos)} failed videos")
        completed = 0
        for video in videos:
            print(f"\n[{video.id}] {video.title}")
            if args.dry_run:
                continue

            result = VideoProcessor(db).process_video(video.id)
            if result.status == VideoStatus.COMPLETED:
                completed += 1
                print(f"  Completed ({result.mode}): {result.analyses_stored} analyses")
            else:
                print(f"  Failed again: {result.error}")

        if not args.dry_run:
            print(f"\nDone. {completed}/{len(videos)} videos completed.")
    finally:
        db.close()


if __name__ == "__main__":
    main()
