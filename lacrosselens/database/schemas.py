"""Pydantic schemas for API request/response models.

Field names are snake_case in Python and camelCase on the wire.
"""
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base schema serialised with camelCase keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# --- User / Team Schemas ---


class UserResponse(CamelModel):
    id: str
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    created_at: Optional[datetime] = None


class TeamCreate(CamelModel):
    name: str


class TeamResponse(CamelModel):
    id: int
    name: str
    user_id: str
    created_at: Optional[datetime] = None


class PlayerCreate(CamelModel):
    name: str
    jersey_number: Optional[int] = None
    position: Optional[str] = None


class PlayerResponse(PlayerCreate):
    id: int
    team_id: int


# --- Video Schemas ---


class YouTubeSubmission(CamelModel):
    """JSON body for submitting a YouTube video."""

    youtube_url: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    team_id: Optional[int] = None
    user_prompt: Optional[str] = None
    player_number: Optional[str] = None
    team_name: Optional[str] = None
    position: Optional[str] = None
    level: Optional[str] = None
    video_type: Optional[str] = None


class VideoResponse(CamelModel):
    id: int
    title: str
    description: Optional[str] = None
    file_path: Optional[str] = None
    youtube_url: Optional[str] = None
    duration: Optional[int] = None
    thumbnail_url: Optional[str] = None
    user_id: str
    team_id: Optional[int] = None
    status: str
    user_prompt: Optional[str] = None
    player_number: Optional[str] = None
    team_name: Optional[str] = None
    position: Optional[str] = None
    level: Optional[str] = None
    video_type: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class AnalysisResponse(CamelModel):
    id: int
    video_id: int
    type: str
    subtype: Optional[str] = None
    title: str
    content: str
    timestamp: Optional[int] = None
    end_timestamp: Optional[int] = None
    confidence: Optional[int] = None
    metadata: Optional[dict[str, Any]] = None
    player_identifiers: list[str] = []
    tags: list[str] = []
    created_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, analysis) -> "AnalysisResponse":
        return cls(
            id=analysis.id,
            video_id=analysis.video_id,
            type=analysis.type,
            subtype=analysis.subtype,
            title=analysis.title,
            content=analysis.content,
            timestamp=analysis.timestamp,
            end_timestamp=analysis.end_timestamp,
            confidence=analysis.confidence,
            metadata=analysis.details,
            player_identifiers=analysis.player_identifiers or [],
            tags=analysis.tags or [],
            created_at=analysis.created_at,
        )


class DashboardStats(CamelModel):
    videos_analyzed: int
    videos_processing: int
    total_videos: int
    total_teams: int
    analysis_accuracy: int
    hours_saved: int


# --- Analytics Schemas ---


class PlayerProfileResponse(CamelModel):
    id: int
    video_id: int
    player_identifier: str
    jersey_number: Optional[str] = None
    team_color: Optional[str] = None
    position: Optional[str] = None
    handedness: Optional[str] = None
    estimated_height: Optional[str] = None
    athleticism: Optional[int] = None
    overall_rating: Optional[float] = None
    potential_rating: Optional[float] = None
    coachability_score: Optional[int] = None
    dodging_skill: Optional[int] = None
    shooting_skill: Optional[int] = None
    passing_skill: Optional[int] = None
    ground_ball_skill: Optional[int] = None
    defense_skill: Optional[int] = None
    off_ball_movement: Optional[int] = None
    lacrosse_iq: Optional[int] = None
    similarity_score: Optional[float] = None


class PlayStatisticsResponse(CamelModel):
    video_id: int
    goals: int
    assists: int
    hockey_assists: int
    shots: int
    shots_on_target: int
    saves: int
    turnovers: int
    caused_turnovers: int
    ground_balls: int
    checks: int
    penalties: int
    ball_touches: int
    face_off_wins: int
    face_off_total: int
    face_off_win_percentage: float
    transition_success: int
    transition_total: int
    clear_success: int
    clear_total: int
    clearing_percentage: float


class DetailedPlayResponse(CamelModel):
    type: str
    timestamp: int
    analysis_id: int
    player_number: Optional[str] = None
    team_color: Optional[str] = None
    success: bool
    description: str
    confidence: int


class PlayerPerformanceResponse(CamelModel):
    player_id: int
    player_identifier: str
    total_events: int
    goals: int
    assists: int
    shots: int
    saves: int
    caused_turnovers: int
    turnovers: int
    ground_balls: int
    faceoff_wins: int
    faceoff_losses: int
    clearing_success: int
    clearing_attempts: int
    overall_rating: float
    recent_form: str
    key_strengths: list[str]
    areas_for_improvement: list[str]


class MomentumPeriod(CamelModel):
    start: float
    end: float
    strength: str


class TeamAnalyticsResponse(CamelModel):
    video_id: int
    team_color: str
    offensive_efficiency: float
    defensive_efficiency: float
    shot_conversion_rate: float
    faceoff_win_percentage: float
    transition_success_rate: float
    formation_counts: dict[str, int]
    momentum_periods: list[MomentumPeriod]


class GameFlowMoment(CamelModel):
    timestamp: float
    event_type: str
    description: str
    impact: str
    momentum_shift: bool


class GameFlowWindow(CamelModel):
    start_timestamp: float
    end_timestamp: float
    possession_team: Optional[str] = None
    pressure_level: Optional[str] = None
    goals: int = 0
    pace: Optional[str] = None
    style: Optional[str] = None
    momentum: Optional[str] = None


class CriticalPeriod(CamelModel):
    start: float
    end: float
    description: str


class GameFlowResponse(CamelModel):
    video_id: int
    key_moments: list[GameFlowMoment]
    windows: list[GameFlowWindow]
    critical_periods: list[CriticalPeriod]


class TechniqueStats(CamelModel):
    attempts: int = 0
    wins: int = 0


class ExitStats(CamelModel):
    attempts: int = 0
    fast_breaks: int = 0


class FaceoffAnalyticsResponse(CamelModel):
    video_id: int
    total_faceoffs: int
    technique_stats: dict[str, TechniqueStats]
    exit_stats: dict[str, ExitStats]
    average_technical_score: float
    wing_support_count: int


class PlayerDevelopment(CamelModel):
    current_level: Optional[float] = None
    potential: Optional[float] = None
    key_skills: list[str]
    development_areas: list[str]
    coaching_priority: str


class CoachingPointResponse(CamelModel):
    id: int
    player_id: Optional[int] = None
    category: str
    subcategory: Optional[str] = None
    priority: str
    timeframe: Optional[str] = None
    observation: str
    recommendation: str
    drill_suggestion: Optional[str] = None
    related_timestamps: list[int] = []


class CoachingInsightsResponse(CamelModel):
    video_id: int
    player_development: dict[str, PlayerDevelopment]
    coaching_points: list[CoachingPointResponse]
    tactical_notes: list[str]
    strengths: list[str]
    weaknesses: list[str]
