"""Analytics endpoints: derived statistics and reports per video and player."""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from lacrosselens.analytics import reports
from lacrosselens.analytics.statistics import get_video_play_by_play, get_video_play_statistics
from lacrosselens.api.dependencies import get_current_user_id, get_db, get_owned_video
from lacrosselens.database.models import PlayerProfile, Video
from lacrosselens.database.schemas import (
    CoachingInsightsResponse,
    DetailedPlayResponse,
    FaceoffAnalyticsResponse,
    GameFlowResponse,
    PlayerPerformanceResponse,
    PlayerProfileResponse,
    PlayStatisticsResponse,
    TeamAnalyticsResponse,
)
from lacrosselens.processing.identifier import TEAM_COLORS
from lacrosselens.search.fuzzy import build_search_candidates, fuzzy_search

router = APIRouter(prefix="/analytics", tags=["analytics"])


@router.get("/video/{video_id}/statistics", response_model=PlayStatisticsResponse)
def get_statistics(
    video: Video = Depends(get_owned_video),
    db: Session = Depends(get_db),
):
    """Play counts recomputed from the video's current analyses."""
    return PlayStatisticsResponse.model_validate(get_video_play_statistics(db, video.id))


@router.get("/video/{video_id}/play-by-play", response_model=list[DetailedPlayResponse])
def get_play_by_play(
    video: Video = Depends(get_owned_video),
    db: Session = Depends(get_db),
):
    return [DetailedPlayResponse.model_validate(play) for play in get_video_play_by_play(db, video.id)]


@router.get("/video/{video_id}/players", response_model=list[PlayerProfileResponse])
def list_players(
    q: Optional[str] = Query(None, min_length=1, description="Jersey number, color or identifier"),
    limit: int = Query(10, ge=1, le=100, description="Maximum results when searching"),
    threshold: int = Query(60, ge=0, le=100, description="Minimum fuzzy score"),
    video: Video = Depends(get_owned_video),
    db: Session = Depends(get_db),
):
    """List the video's player profiles, or fuzzy-search them with ``q``."""
    profiles = (
        db.query(PlayerProfile)
        .filter(PlayerProfile.video_id == video.id)
        .order_by(PlayerProfile.player_identifier)
        .all()
    )
    if not q:
        return [PlayerProfileResponse.model_validate(profile) for profile in profiles]

    candidates = build_search_candidates(
        [
            {
                "id": profile.id,
                "player_identifier": profile.player_identifier,
                "jersey_number": profile.jersey_number,
                "team_color": profile.team_color,
                "position": profile.position,
            }
            for profile in profiles
        ]
    )
    by_id = {profile.id: profile for profile in profiles}

    results = []
    for match in fuzzy_search(q, candidates, limit=limit, threshold=threshold):
        response = PlayerProfileResponse.model_validate(by_id[match.profile_id])
        response.similarity_score = match.similarity_score
        results.append(response)
    return results


@router.get("/player/{profile_id}/performance", response_model=PlayerPerformanceResponse)
def get_player_performance(
    profile_id: int,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    profile = db.get(PlayerProfile, profile_id)
    if not profile:
        raise HTTPException(status_code=404, detail="Player not found")
    if profile.video.user_id != user_id:
        raise HTTPException(status_code=403, detail="Access denied")
    return reports.player_performance(db, profile_id)


@router.get("/video/{video_id}/team/{team_color}", response_model=TeamAnalyticsResponse)
def get_team_analytics(
    team_color: str,
    video: Video = Depends(get_owned_video),
    db: Session = Depends(get_db),
):
    if team_color.lower() not in TEAM_COLORS:
        raise HTTPException(status_code=400, detail=f"Unknown team color: {team_color}")
    return reports.team_analytics(db, video.id, team_color)


@router.get("/video/{video_id}/gameflow", response_model=GameFlowResponse)
def get_game_flow(
    video: Video = Depends(get_owned_video),
    db: Session = Depends(get_db),
):
    return reports.game_flow(db, video.id)


@router.get("/video/{video_id}/faceoffs", response_model=FaceoffAnalyticsResponse)
def get_faceoff_analytics(
    video: Video = Depends(get_owned_video),
    db: Session = Depends(get_db),
):
    return reports.faceoff_analytics(db, video.id)


@router.get("/video/{video_id}/insights", response_model=CoachingInsightsResponse)
def get_coaching_insights(
    video: Video = Depends(get_owned_video),
    db: Session = Depends(get_db),
):
    return reports.coaching_insights(db, video.id)
