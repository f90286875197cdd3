"""Dashboard summary endpoint."""
from fastapi import APIRouter, Depends
from sqlalchemy import func
from sqlalchemy.orm import Session

from lacrosselens.api.dependencies import get_current_user_id, get_db
from lacrosselens.database.models import Analysis, Team, Video, VideoStatus
from lacrosselens.database.schemas import DashboardStats

router = APIRouter(prefix="/dashboard", tags=["dashboard"])

# Rough coaching time saved per analyzed video
HOURS_SAVED_PER_VIDEO = 0.75


@router.get("/stats", response_model=DashboardStats)
def get_dashboard_stats(
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """Counts of the caller's videos and teams plus average analysis confidence."""
    counts = dict(
        db.query(Video.status, func.count(Video.id))
        .filter(Video.user_id == user_id)
        .group_by(Video.status)
        .all()
    )
    completed = counts.get(VideoStatus.COMPLETED, 0)

    average_confidence = (
        db.query(func.avg(Analysis.confidence))
        .join(Video, Analysis.video_id == Video.id)
        .filter(Video.user_id == user_id, Analysis.confidence.isnot(None))
        .scalar()
    )

    return DashboardStats(
        videos_analyzed=completed,
        videos_processing=counts.get(VideoStatus.PROCESSING, 0) + counts.get(VideoStatus.UPLOADING, 0),
        total_videos=sum(counts.values()),
        total_teams=db.query(func.count(Team.id)).filter(Team.user_id == user_id).scalar() or 0,
        analysis_accuracy=round(average_confidence or 0),
        hours_saved=int(completed * HOURS_SAVED_PER_VIDEO),
    )
