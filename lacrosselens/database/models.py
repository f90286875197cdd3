"""SQLAlchemy ORM models for LacrosseLens."""
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import (
    Column,
    Integer,
    String,
    Float,
    Boolean,
    DateTime,
    Text,
    ForeignKey,
    JSON,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from .connection import Base


def utc_now() -> datetime:
    """Return current UTC time (timezone-aware)."""
    return datetime.now(timezone.utc)


class VideoStatus:
    """Lifecycle states of a submitted video."""

    UPLOADING = "uploading"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class AnalysisType:
    """Kinds of analysis items returned by the model."""

    OVERALL = "overall"
    PLAYER_EVALUATION = "player_evaluation"
    FACE_OFF = "face_off"
    TRANSITION = "transition"
    KEY_MOMENT = "key_moment"


class User(Base):
    """Account owning videos and teams. The id comes from the auth provider."""

    __tablename__ = "users"

    id = Column(String(255), primary_key=True)
    email = Column(String(255), unique=True, nullable=True)
    first_name = Column(String(255), nullable=True)
    last_name = Column(String(255), nullable=True)
    created_at = Column(DateTime, default=utc_now)

    videos = relationship("Video", back_populates="user", cascade="all, delete-orphan")
    teams = relationship("Team", back_populates="user", cascade="all, delete-orphan")

    def __repr__(self) -> str:
        return f"<User(id='{self.id}')>"


class Team(Base):
    __tablename__ = "teams"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    user_id = Column(String(255), ForeignKey("users.id"), nullable=False, index=True)
    created_at = Column(DateTime, default=utc_now)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now)

    user = relationship("User", back_populates="teams")
    players = relationship("Player", back_populates="team", cascade="all, delete-orphan")

    def __repr__(self) -> str:
        return f"<Team(id={self.id}, name='{self.name}')>"


class Player(Base):
    """Rostered player on a coach's team."""

    __tablename__ = "players"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    jersey_number = Column(Integer, nullable=True)
    position = Column(String(50), nullable=True)
    team_id = Column(Integer, ForeignKey("teams.id"), nullable=False, index=True)
    created_at = Column(DateTime, default=utc_now)

    team = relationship("Team", back_populates="players")


class Video(Base):
    """A submitted piece of footage, either an uploaded file or a YouTube link."""

    __tablename__ = "videos"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    file_path = Column(String(1024), nullable=True)
    youtube_url = Column(String(1024), nullable=True)
    duration = Column(Integer, nullable=True)  # seconds
    thumbnail_url = Column(String(1024), nullable=True)
    user_id = Column(String(255), ForeignKey("users.id"), nullable=False, index=True)
    team_id = Column(Integer, ForeignKey("teams.id"), nullable=True)
    status = Column(String(50), nullable=False, default=VideoStatus.UPLOADING, index=True)

    # Coach targeting hints
    user_prompt = Column(Text, nullable=True)
    player_number = Column(String(10), nullable=True)
    team_name = Column(String(100), nullable=True)
    position = Column(String(50), nullable=True)
    level = Column(String(20), nullable=True)
    video_type = Column(String(20), nullable=True)

    created_at = Column(DateTime, default=utc_now)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now)

    user = relationship("User", back_populates="videos")
    analyses = relationship(
        "Analysis", back_populates="video", cascade="all, delete-orphan"
    )
    player_profiles = relationship(
        "PlayerProfile", back_populates="video", cascade="all, delete-orphan"
    )
    play_events = relationship(
        "PlayEvent", back_populates="video", cascade="all, delete-orphan"
    )
    team_formations = relationship("TeamFormation", cascade="all, delete-orphan")
    game_flow = relationship("GameFlow", cascade="all, delete-orphan")
    coaching_points = relationship("CoachingPoint", cascade="all, delete-orphan")

    @property
    def is_youtube(self) -> bool:
        return bool(self.youtube_url)

    def __repr__(self) -> str:
        return f"<Video(id={self.id}, status='{self.status}')>"


class Analysis(Base):
    """One atomic item of model output for a video."""

    __tablename__ = "analyses"

    id = Column(Integer, primary_key=True, index=True)
    video_id = Column(Integer, ForeignKey("videos.id"), nullable=False, index=True)
    type = Column(String(100), nullable=False, index=True)
    subtype = Column(String(100), nullable=True)
    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=False)
    timestamp = Column(Integer, nullable=True, index=True)
    end_timestamp = Column(Integer, nullable=True)
    confidence = Column(Integer, nullable=True)
    # "metadata" is reserved on declarative classes
    details = Column("metadata", JSON, nullable=True)
    player_identifiers = Column(JSON, default=list)
    tags = Column(JSON, default=list)
    created_at = Column(DateTime, default=utc_now)

    video = relationship("Video", back_populates="analyses")
    play_events = relationship(
        "PlayEvent", back_populates="analysis", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<Analysis(id={self.id}, type='{self.type}', t={self.timestamp})>"


class PlayerProfile(Base):
    """Evolving skill profile for one identified player within one video."""

    __tablename__ = "player_profiles"
    __table_args__ = (
        UniqueConstraint("video_id", "player_identifier", name="uq_player_profile_video_identifier"),
    )

    id = Column(Integer, primary_key=True, index=True)
    video_id = Column(Integer, ForeignKey("videos.id"), nullable=False, index=True)
    player_identifier = Column(String(100), nullable=False)
    jersey_number = Column(String(10), nullable=True)
    team_color = Column(String(50), nullable=True)
    position = Column(String(50), nullable=True)

    handedness = Column(String(20), nullable=True)
    estimated_height = Column(String(20), nullable=True)
    athleticism = Column(Integer, nullable=True)

    overall_rating = Column(Float, nullable=True)
    potential_rating = Column(Float, nullable=True)
    coachability_score = Column(Integer, nullable=True)

    dodging_skill = Column(Integer, nullable=True)
    shooting_skill = Column(Integer, nullable=True)
    passing_skill = Column(Integer, nullable=True)
    ground_ball_skill = Column(Integer, nullable=True)
    defense_skill = Column(Integer, nullable=True)
    off_ball_movement = Column(Integer, nullable=True)
    lacrosse_iq = Column(Integer, nullable=True)

    created_at = Column(DateTime, default=utc_now)
    updated_at = Column(DateTime, default=utc_now)

    video = relationship("Video", back_populates="player_profiles")

    def skill_values(self) -> dict[str, Optional[int]]:
        """Skill columns keyed by their display name."""
        return {
            "dodging": self.dodging_skill,
            "shooting": self.shooting_skill,
            "passing": self.passing_skill,
            "ground balls": self.ground_ball_skill,
            "defense": self.defense_skill,
            "off ball": self.off_ball_movement,
            "iq": self.lacrosse_iq,
        }

    def __repr__(self) -> str:
        return f"<PlayerProfile(id={self.id}, identifier='{self.player_identifier}')>"


class PlayEvent(Base):
    """A classified, timestamped action derived from analysis text."""

    __tablename__ = "play_events"

    id = Column(Integer, primary_key=True, index=True)
    video_id = Column(Integer, ForeignKey("videos.id"), nullable=False, index=True)
    analysis_id = Column(Integer, ForeignKey("analyses.id"), nullable=True, index=True)

    start_timestamp = Column(Float, nullable=False, default=0.0)
    end_timestamp = Column(Float, nullable=True)
    quarter = Column(Integer, nullable=True)

    event_type = Column(String(50), nullable=False, index=True)
    event_subtype = Column(String(100), nullable=True)

    primary_player_id = Column(Integer, ForeignKey("player_profiles.id"), nullable=True)
    secondary_player_id = Column(Integer, ForeignKey("player_profiles.id"), nullable=True)

    field_zone = Column(String(50), nullable=True)
    field_side = Column(String(20), nullable=True)

    success = Column(Boolean, default=True)
    confidence = Column(Integer, nullable=True)
    description = Column(Text, nullable=True)
    game_context = Column(String(50), nullable=True)
    momentum = Column(String(20), nullable=True)

    created_at = Column(DateTime, default=utc_now)

    video = relationship("Video", back_populates="play_events")
    analysis = relationship("Analysis", back_populates="play_events")
    primary_player = relationship("PlayerProfile", foreign_keys=[primary_player_id])
    secondary_player = relationship("PlayerProfile", foreign_keys=[secondary_player_id])

    faceoff_detail = relationship(
        "FaceoffDetail", uselist=False, back_populates="play_event", cascade="all, delete-orphan"
    )
    transition_detail = relationship(
        "TransitionDetail", uselist=False, back_populates="play_event", cascade="all, delete-orphan"
    )
    shot_detail = relationship(
        "ShotDetail", uselist=False, back_populates="play_event", cascade="all, delete-orphan"
    )
    defensive_detail = relationship(
        "DefensiveDetail", uselist=False, back_populates="play_event", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<PlayEvent(id={self.id}, type='{self.event_type}', t={self.start_timestamp})>"


class FaceoffDetail(Base):
    __tablename__ = "faceoff_details"

    id = Column(Integer, primary_key=True, index=True)
    play_event_id = Column(Integer, ForeignKey("play_events.id"), nullable=False, unique=True)

    team1_fogo_id = Column(Integer, ForeignKey("player_profiles.id"), nullable=True)
    team2_fogo_id = Column(Integer, ForeignKey("player_profiles.id"), nullable=True)

    team1_technique = Column(String(100), nullable=True)
    team2_technique = Column(String(100), nullable=True)
    clamp_speed = Column(String(20), nullable=True)
    clamp_angle = Column(String(50), nullable=True)
    counter_move = Column(String(100), nullable=True)
    counter_timing = Column(String(50), nullable=True)
    exit_direction = Column(String(50), nullable=True)
    exit_speed = Column(String(20), nullable=True)
    wing_support = Column(Boolean, nullable=True)
    wing_play_description = Column(Text, nullable=True)
    winner = Column(String(20), nullable=True)
    possession_team = Column(String(20), nullable=True)
    fast_break_opportunity = Column(Boolean, nullable=True)
    win_probability_change = Column(Float, nullable=True)
    technical_score = Column(Integer, nullable=True)

    created_at = Column(DateTime, default=utc_now)

    play_event = relationship("PlayEvent", back_populates="faceoff_detail")


class TransitionDetail(Base):
    __tablename__ = "transition_details"

    id = Column(Integer, primary_key=True, index=True)
    play_event_id = Column(Integer, ForeignKey("play_events.id"), nullable=False, unique=True)

    transition_type = Column(String(50), nullable=False)
    originating_event = Column(String(100), nullable=True)
    clearing_team = Column(String(20), nullable=True)
    riding_team = Column(String(20), nullable=True)
    clear_formation = Column(String(100), nullable=True)
    ride_formation = Column(String(100), nullable=True)
    primary_clearer_id = Column(Integer, ForeignKey("player_profiles.id"), nullable=True)
    primary_rider_id = Column(Integer, ForeignKey("player_profiles.id"), nullable=True)
    pass_count = Column(Integer, nullable=True)
    ground_balls = Column(Integer, nullable=True)
    substitution_pattern = Column(String(100), nullable=True)
    pressure_level = Column(String(20), nullable=True)
    field_spacing = Column(String(50), nullable=True)
    successful = Column(Boolean, nullable=True)
    resulting_opportunity = Column(String(100), nullable=True)
    time_to_complete = Column(Float, nullable=True)
    expected_success_rate = Column(Float, nullable=True)
    execution_quality = Column(Integer, nullable=True)

    created_at = Column(DateTime, default=utc_now)

    play_event = relationship("PlayEvent", back_populates="transition_detail")


class ShotDetail(Base):
    __tablename__ = "shot_details"

    id = Column(Integer, primary_key=True, index=True)
    play_event_id = Column(Integer, ForeignKey("play_events.id"), nullable=False, unique=True)
    shooter_id = Column(Integer, ForeignKey("player_profiles.id"), nullable=True)
    assisted_by = Column(Integer, ForeignKey("player_profiles.id"), nullable=True)

    shot_type = Column(String(50), nullable=False)
    shot_location = Column(String(50), nullable=True)
    shot_distance = Column(String(20), nullable=True)
    shot_angle = Column(String(20), nullable=True)
    dodge_type = Column(String(50), nullable=True)
    time_and_room = Column(Boolean, nullable=True)
    on_the_run = Column(Boolean, nullable=True)
    shot_velocity = Column(String(20), nullable=True)
    result = Column(String(20), nullable=False)
    shot_quality_score = Column(Integer, nullable=True)

    created_at = Column(DateTime, default=utc_now)

    play_event = relationship("PlayEvent", back_populates="shot_detail")


class DefensiveDetail(Base):
    __tablename__ = "defensive_details"

    id = Column(Integer, primary_key=True, index=True)
    play_event_id = Column(Integer, ForeignKey("play_events.id"), nullable=False, unique=True)
    defender_id = Column(Integer, ForeignKey("player_profiles.id"), nullable=True)

    action_type = Column(String(50), nullable=False)
    technique = Column(String(100), nullable=True)
    positioning = Column(String(50), nullable=True)
    footwork = Column(String(50), nullable=True)
    successful = Column(Boolean, nullable=True)
    caused_turnover = Column(Boolean, nullable=True)
    drew_penalty = Column(Boolean, nullable=True)
    technique_score = Column(Integer, nullable=True)

    created_at = Column(DateTime, default=utc_now)

    play_event = relationship("PlayEvent", back_populates="defensive_detail")


class TeamFormation(Base):
    """Formation observed for a team at a point in the video."""

    __tablename__ = "team_formations"

    id = Column(Integer, primary_key=True, index=True)
    video_id = Column(Integer, ForeignKey("videos.id"), nullable=False, index=True)
    timestamp = Column(Float, nullable=False, default=0.0)
    team_color = Column(String(50), nullable=False)
    offensive_formation = Column(String(100), nullable=True)
    defensive_formation = Column(String(100), nullable=True)
    ball_movement = Column(String(50), nullable=True)
    spacing = Column(String(50), nullable=True)
    execution_score = Column(Integer, nullable=True)
    created_at = Column(DateTime, default=utc_now)


class GameFlow(Base):
    """Possession and pace summary for one window of the video."""

    __tablename__ = "game_flow"

    id = Column(Integer, primary_key=True, index=True)
    video_id = Column(Integer, ForeignKey("videos.id"), nullable=False, index=True)
    start_timestamp = Column(Float, nullable=False)
    end_timestamp = Column(Float, nullable=False)
    possession_team = Column(String(50), nullable=True)
    pressure_level = Column(String(20), nullable=True)
    goals = Column(Integer, default=0)
    pace = Column(String(20), nullable=True)
    style = Column(String(50), nullable=True)
    momentum = Column(String(20), nullable=True)
    created_at = Column(DateTime, default=utc_now)


class CoachingPoint(Base):
    __tablename__ = "coaching_points"

    id = Column(Integer, primary_key=True, index=True)
    video_id = Column(Integer, ForeignKey("videos.id"), nullable=False, index=True)
    player_id = Column(Integer, ForeignKey("player_profiles.id"), nullable=True, index=True)
    category = Column(String(50), nullable=False)
    subcategory = Column(String(100), nullable=True)
    priority = Column(String(20), nullable=False)
    timeframe = Column(String(50), nullable=True)
    observation = Column(Text, nullable=False)
    recommendation = Column(Text, nullable=False)
    drill_suggestion = Column(Text, nullable=True)
    related_timestamps = Column(JSON, default=list)
    created_at = Column(DateTime, default=utc_now)
