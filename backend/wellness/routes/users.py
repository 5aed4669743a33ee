from fastapi import APIRouter, Depends
from ..core.deps import current_db, current_user
from ..core.errors import AuthError
from ..models.user import UserPublic, UserRepo

router = APIRouter()

@router.get("/me", response_model=UserPublic, summary="Authenticated user")
async def me(db=Depends(current_db), user=Depends(current_user)):
    found = await UserRepo(db).get_by_id(user["sub"])
    if not found:
        # token outlived its account
        raise AuthError("Unknown user")
    return found
