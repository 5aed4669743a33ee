"""
Authentication service: check email/password and issue a JWT.
"""
from ..core.errors import AuthError
from ..core.security import create_jwt, verify_password
from ..models.user import UserPublic, UserRepo


class AuthService:
    def __init__(self, user_repo: UserRepo) -> None:
        self.user_repo = user_repo

    async def authenticate(self, email: str, password: str) -> tuple[str, UserPublic]:
        user = await self.user_repo.get_by_email(email)
        if not user or not verify_password(password, user["password_hash"]):
            raise AuthError("Invalid credentials")

        token = create_jwt(user["_id"])
        return token, UserPublic(id=user["_id"], email=user["email"])

    @staticmethod
    def issue(user: UserPublic) -> str:
        return create_jwt(user.id)
