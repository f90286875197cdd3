"""Current-user endpoint."""
from fastapi import APIRouter, Depends

from lacrosselens.api.dependencies import get_current_user
from lacrosselens.database.models import User
from lacrosselens.database.schemas import UserResponse

router = APIRouter(prefix="/auth", tags=["auth"])


@router.get("/user", response_model=UserResponse)
def get_user(user: User = Depends(get_current_user)):
    """Get the authenticated user, creating the account on first call."""
    return user
