"""Player profile aggregation with a server-side atomic upsert."""
import logging
from typing import Optional

from sqlalchemy import func
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

from lacrosselens.database.models import PlayerProfile, utc_now
from .identifier import PlayerInfo
from .skill_rater import (
    SkillRatings,
    coachability_score,
    detect_handedness,
    estimate_height,
    overall_rating,
    potential_rating,
)

logger = logging.getLogger(__name__)

# SkillRatings field -> player_profiles column
SKILL_COLUMNS = {
    "dodging": "dodging_skill",
    "shooting": "shooting_skill",
    "passing": "passing_skill",
    "ground_balls": "ground_ball_skill",
    "defense": "defense_skill",
    "off_ball": "off_ball_movement",
    "iq": "lacrosse_iq",
    "athleticism": "athleticism",
}

_INSERTS = {
    "postgresql": postgresql_insert,
    "sqlite": sqlite_insert,
}


def average_skill(existing: Optional[int], observed: int) -> int:
    """Merge a new observation into a stored score: round((old + new) / 2), halves up."""
    if existing is None:
        return observed
    return (existing + observed + 1) // 2


class ProfileAggregator:
    """Maintains one profile per (video, player identifier).

    The first observation seeds every column, including the overall and
    potential ratings. Later observations average each skill with the stored
    value inside a single ``INSERT ... ON CONFLICT DO UPDATE`` statement so
    concurrent enrichment of the same player cannot lose an update. Ratings
    are left as first computed.
    """

    def upsert(
        self,
        db: Session,
        video_id: int,
        player: PlayerInfo,
        skills: SkillRatings,
        content: str,
    ) -> int:
        """Create or merge the profile for ``player`` in ``video_id``.

        Args:
            db: Database session (caller commits)
            video_id: Video the observation came from
            player: Identified player; ``player.identifier`` must be set
            skills: Scores observed in this analysis
            content: Source text, used for the seed-only attributes

        Returns:
            The profile id
        """
        if not player.identifier:
            raise ValueError("Cannot upsert a profile without a player identifier")

        values = self._seed_values(video_id, player, skills, content)
        dialect = db.get_bind().dialect.name
        insert = _INSERTS.get(dialect)

        if insert is None:
            return self._locked_upsert(db, values, skills)

        table = PlayerProfile.__table__
        stmt = insert(table).values(**values)
        merged = {
            column: (func.coalesce(table.c[column], stmt.excluded[column]) + stmt.excluded[column] + 1) // 2
            for column in SKILL_COLUMNS.values()
        }
        merged["updated_at"] = stmt.excluded.updated_at

        stmt = stmt.on_conflict_do_update(
            index_elements=[table.c.video_id, table.c.player_identifier],
            set_=merged,
        ).returning(table.c.id)

        profile_id = db.execute(stmt).scalar_one()
        logger.debug(
            "Upserted profile %s (%s) for video %s", profile_id, player.identifier, video_id
        )
        return profile_id

    def _seed_values(
        self, video_id: int, player: PlayerInfo, skills: SkillRatings, content: str
    ) -> dict:
        now = utc_now()
        values = {
            "video_id": video_id,
            "player_identifier": player.identifier,
            "jersey_number": player.jersey_number,
            "team_color": player.team_color,
            "position": player.position,
            "handedness": detect_handedness(content),
            "estimated_height": estimate_height(content),
            "overall_rating": overall_rating(skills),
            "potential_rating": potential_rating(content, skills),
            "coachability_score": coachability_score(content),
            "created_at": now,
            "updated_at": now,
        }
        for skill, column in SKILL_COLUMNS.items():
            values[column] = getattr(skills, skill)
        return values

    def _locked_upsert(self, db: Session, values: dict, skills: SkillRatings) -> int:
        """Row-locked read-modify-write for dialects without ON CONFLICT."""
        profile = (
            db.query(PlayerProfile)
            .filter_by(video_id=values["video_id"], player_identifier=values["player_identifier"])
            .with_for_update()
            .first()
        )
        if profile is None:
            profile = PlayerProfile(**values)
            db.add(profile)
        else:
            for skill, column in SKILL_COLUMNS.items():
                setattr(profile, column, average_skill(getattr(profile, column), getattr(skills, skill)))
            profile.updated_at = values["updated_at"]
        db.flush()
        return profile.id
