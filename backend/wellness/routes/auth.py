# wellness/routes/auth.py
from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, EmailStr
from ..core.deps import current_db
from ..models.user import UserCreate, UserRepo, UserPublic
from ..services.auth_service import AuthService

router = APIRouter()


class LoginIn(BaseModel):
    email: EmailStr
    password: str


class AuthOut(BaseModel):
    token: str
    user: UserPublic


@router.post("/register", response_model=AuthOut, status_code=status.HTTP_201_CREATED, summary="Register a user")
async def register(payload: UserCreate, db=Depends(current_db)):
    """
    Creates the account and signs it in straight away.
    """
    repo = UserRepo(db)
    user = await repo.create(payload)
    return AuthOut(token=AuthService.issue(user), user=user)


@router.post("/login", response_model=AuthOut, summary="Log in and obtain a JWT")
async def login(payload: LoginIn, db=Depends(current_db)):
    svc = AuthService(UserRepo(db))
    token, user = await svc.authenticate(payload.email, payload.password)
    return AuthOut(token=token, user=user)
