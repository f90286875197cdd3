"""Database module with SQLAlchemy models and connection management."""
from .connection import engine, SessionLocal, get_db, Base
from .models import (
    User,
    Team,
    Player,
    Video,
    VideoStatus,
    Analysis,
    AnalysisType,
    PlayerProfile,
    PlayEvent,
    FaceoffDetail,
    TransitionDetail,
    ShotDetail,
    DefensiveDetail,
    TeamFormation,
    GameFlow,
    CoachingPoint,
)

__all__ = [
    "engine",
    "SessionLocal",
    "get_db",
    "Base",
    "User",
    "Team",
    "Player",
    "Video",
    "VideoStatus",
    "Analysis",
    "AnalysisType",
    "PlayerProfile",
    "PlayEvent",
    "FaceoffDetail",
    "TransitionDetail",
    "ShotDetail",
    "DefensiveDetail",
    "TeamFormation",
    "GameFlow",
    "CoachingPoint",
]
