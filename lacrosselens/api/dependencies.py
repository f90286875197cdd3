"""Shared dependencies for API endpoints."""
from datetime import datetime, timedelta, timezone
from typing import Generator, Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from lacrosselens.config.settings import get_settings
from lacrosselens.database.connection import SessionLocal
from lacrosselens.database.models import Team, User, Video
from lacrosselens.processing.tasks import ProcessingTaskManager

# Security scheme for OpenAPI docs
security = HTTPBearer(auto_error=False)

ALGORITHM = "HS256"


def get_db() -> Generator[Session, None, None]:
    """Dependency that provides a database session.

    Yields:
        SQLAlchemy Session that auto-closes after use
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def create_access_token(user_id: str, expires_hours: Optional[int] = None) -> str:
    """Create a signed bearer token for ``user_id``."""
    settings = get_settings()
    hours = expires_hours if expires_hours is not None else settings.access_token_expire_hours
    expire = datetime.now(timezone.utc) + timedelta(hours=hours)
    return jwt.encode({"sub": user_id, "exp": expire}, settings.secret_key, algorithm=ALGORITHM)


def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> str:
    """Extract and verify the user id from the bearer token.

    Raises 401 if the token is missing, invalid, or expired.
    """
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        payload = jwt.decode(
            credentials.credentials,
            get_settings().secret_key,
            algorithms=[ALGORITHM],
        )
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token validation failed",
        )

    user_id = payload.get("sub")
    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload",
        )
    return user_id


def ensure_user(db: Session, user_id: str) -> User:
    """Return the user row for ``user_id``, creating it on first use."""
    user = db.get(User, user_id)
    if user is None:
        user = User(id=user_id)
        db.add(user)
        db.commit()
        db.refresh(user)
    return user


def get_current_user(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> User:
    return ensure_user(db, user_id)


def get_task_manager(request: Request) -> ProcessingTaskManager:
    return request.app.state.task_manager


def get_owned_video(
    video_id: int,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
) -> Video:
    """Load a video the caller owns. 404 if unknown, 403 if someone else's."""
    video = db.get(Video, video_id)
    if not video:
        raise HTTPException(status_code=404, detail="Video not found")
    if video.user_id != user_id:
        raise HTTPException(status_code=403, detail="Access denied")
    return video


def get_owned_team(
    team_id: int,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
) -> Team:
    team = db.get(Team, team_id)
    if not team:
        raise HTTPException(status_code=404, detail="Team not found")
    if team.user_id != user_id:
        raise HTTPException(status_code=403, detail="Access denied")
    return team
