"""API endpoints for video submission, listing and retrieval."""
import logging
import uuid
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from sqlalchemy.orm import Session

from lacrosselens.api.dependencies import (
    ensure_user,
    get_current_user_id,
    get_db,
    get_owned_video,
    get_task_manager,
)
from lacrosselens.config.settings import get_settings
from lacrosselens.database.models import Analysis, Video, VideoStatus
from lacrosselens.database.schemas import AnalysisResponse, VideoResponse, YouTubeSubmission
from lacrosselens.processing.enrichment import clear_video_results
from lacrosselens.processing.pipeline import PLACEHOLDER_TITLE
from lacrosselens.processing.tasks import ProcessingTaskManager
from lacrosselens.processing.captions import extract_video_id

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/videos", tags=["videos"])


UPLOAD_CHUNK_BYTES = 1024 * 1024


def _save_upload(video: UploadFile, upload_dir: str, max_bytes: int) -> Path:
    target_dir = Path(upload_dir)
    target_dir.mkdir(parents=True, exist_ok=True)
    target = target_dir / f"{uuid.uuid4().hex}{Path(video.filename or '').suffix.lower()}"

    written = 0
    with target.open("wb") as out:
        while True:
            chunk = video.file.read(UPLOAD_CHUNK_BYTES)
            if not chunk:
                break
            written += len(chunk)
            if written > max_bytes:
                break
            out.write(chunk)

    if written > max_bytes:
        target.unlink()
        raise HTTPException(status_code=400, detail="Video file is too large")
    return target


@router.post("/upload", response_model=VideoResponse)
def upload_video(
    video: Optional[UploadFile] = File(None),
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    team_id: Optional[int] = Form(None, alias="teamId"),
    user_prompt: Optional[str] = Form(None, alias="userPrompt"),
    player_number: Optional[str] = Form(None, alias="playerNumber"),
    team_name: Optional[str] = Form(None, alias="teamName"),
    position: Optional[str] = Form(None),
    level: Optional[str] = Form(None),
    video_type: Optional[str] = Form(None, alias="videoType"),
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    tasks: ProcessingTaskManager = Depends(get_task_manager),
):
    """Upload a video file and start processing it in the background."""
    if video is None or not video.filename:
        raise HTTPException(status_code=400, detail="No video file provided")

    settings = get_settings()
    if video.content_type not in settings.allowed_video_types:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid file type. Allowed: {', '.join(settings.allowed_video_types)}",
        )

    path = _save_upload(video, settings.upload_dir, settings.max_upload_bytes)
    ensure_user(db, user_id)

    record = Video(
        title=title or video.filename,
        description=description or "",
        file_path=str(path),
        user_id=user_id,
        team_id=team_id,
        status=VideoStatus.UPLOADING,
        user_prompt=user_prompt,
        player_number=player_number,
        team_name=team_name,
        position=position,
        level=level,
        video_type=video_type,
    )
    db.add(record)
    db.commit()
    db.refresh(record)

    tasks.submit(record.id)
    return record


@router.post("/youtube", response_model=VideoResponse)
def submit_youtube_video(
    submission: YouTubeSubmission,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    tasks: ProcessingTaskManager = Depends(get_task_manager),
):
    """Register a YouTube video and start processing it in the background.

    A missing title is replaced by the video's YouTube title during processing.
    """
    if not submission.youtube_url:
        raise HTTPException(status_code=400, detail="YouTube URL is required")
    try:
        extract_video_id(submission.youtube_url)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid YouTube URL")

    ensure_user(db, user_id)
    record = Video(
        title=submission.title or PLACEHOLDER_TITLE,
        description=submission.description or "",
        youtube_url=submission.youtube_url,
        user_id=user_id,
        team_id=submission.team_id,
        status=VideoStatus.UPLOADING,
        user_prompt=submission.user_prompt,
        player_number=submission.player_number,
        team_name=submission.team_name,
        position=submission.position,
        level=submission.level,
        video_type=submission.video_type,
    )
    db.add(record)
    db.commit()
    db.refresh(record)

    tasks.submit(record.id)
    return record


@router.get("", response_model=list[VideoResponse])
def list_videos(
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """List the caller's videos, newest first."""
    return (
        db.query(Video)
        .filter(Video.user_id == user_id)
        .order_by(Video.created_at.desc(), Video.id.desc())
        .all()
    )


@router.get("/{video_id}", response_model=VideoResponse)
def get_video(video: Video = Depends(get_owned_video)):
    return video


@router.get("/{video_id}/analyses", response_model=list[AnalysisResponse])
def get_video_analyses(
    video: Video = Depends(get_owned_video),
    db: Session = Depends(get_db),
):
    """Get a video's analyses ordered by timestamp."""
    analyses = (
        db.query(Analysis)
        .filter(Analysis.video_id == video.id)
        .order_by(Analysis.timestamp, Analysis.id)
        .all()
    )
    return [AnalysisResponse.from_row(analysis) for analysis in analyses]


@router.post("/{video_id}/retry", response_model=VideoResponse)
def retry_video(
    video: Video = Depends(get_owned_video),
    db: Session = Depends(get_db),
    tasks: ProcessingTaskManager = Depends(get_task_manager),
):
    """Re-run processing for a failed or stuck video."""
    if video.status == VideoStatus.COMPLETED:
        raise HTTPException(status_code=400, detail="Video has already been analyzed")

    video.status = VideoStatus.PROCESSING
    db.commit()
    db.refresh(video)

    logger.info("Video %s: retry requested", video.id)
    tasks.submit(video.id)
    return video


@router.delete("/{video_id}")
def delete_video(
    video: Video = Depends(get_owned_video),
    db: Session = Depends(get_db),
    tasks: ProcessingTaskManager = Depends(get_task_manager),
):
    """Delete a video, everything derived from it, and its stored files."""
    tasks.cancel(video.id)

    files = [video.file_path]
    if video.thumbnail_url and video.thumbnail_url.startswith("/api/thumbnails/"):
        files.append(str(Path(get_settings().thumbnail_dir) / Path(video.thumbnail_url).name))

    clear_video_results(db, video.id)
    db.delete(video)
    db.commit()

    for path in files:
        if path:
            Path(path).unlink(missing_ok=True)

    return {"message": "Video deleted"}
