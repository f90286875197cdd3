"""API endpoints for a coach's teams and rosters."""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from lacrosselens.api.dependencies import ensure_user, get_current_user_id, get_db, get_owned_team
from lacrosselens.database.models import Player, Team
from lacrosselens.database.schemas import PlayerCreate, PlayerResponse, TeamCreate, TeamResponse

router = APIRouter(prefix="/teams", tags=["teams"])


@router.post("", response_model=TeamResponse)
def create_team(
    team: TeamCreate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    ensure_user(db, user_id)
    record = Team(name=team.name, user_id=user_id)
    db.add(record)
    db.commit()
    db.refresh(record)
    return record


@router.get("", response_model=list[TeamResponse])
def list_teams(
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    return db.query(Team).filter(Team.user_id == user_id).order_by(Team.name).all()


@router.post("/{team_id}/players", response_model=PlayerResponse)
def add_player(
    player: PlayerCreate,
    team: Team = Depends(get_owned_team),
    db: Session = Depends(get_db),
):
    record = Player(
        name=player.name,
        jersey_number=player.jersey_number,
        position=player.position,
        team_id=team.id,
    )
    db.add(record)
    db.commit()
    db.refresh(record)
    return record


@router.get("/{team_id}/players", response_model=list[PlayerResponse])
def list_players(
    team: Team = Depends(get_owned_team),
    db: Session = Depends(get_db),
):
    return (
        db.query(Player)
        .filter(Player.team_id == team.id)
        .order_by(Player.jersey_number, Player.name)
        .all()
    )
