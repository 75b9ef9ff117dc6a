"""
UsersService - account lifecycle and token issue.
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ConflictError, NotFoundError, UnauthorizedError
from app.modules.users.auth import AuthService
from app.modules.drafts.service import DraftsService
from app.modules.history.service import HistoryService
from .models import User
from .schemas import (
    AuthResponse,
    LoginRequest,
    RegisterRequest,
    TokenResponse,
    UpdatePasswordDto,
    UpdateUserDto,
    UserResponse,
)

logger = logging.getLogger(__name__)


class UsersService:
    """
    Users service. All methods take the request's AsyncSession first.
    """

    @staticmethod
    def _auth_response(user: User) -> AuthResponse:
        token = AuthService.create_access_token({"sub": user.id, "email": user.email})
        return AuthResponse(
            user=UserResponse.model_validate(user),
            token=TokenResponse(access_token=token),
        )

    @staticmethod
    async def create(db: AsyncSession, create_dto: RegisterRequest) -> AuthResponse:
        """
        Register a new user and issue an access token.

        Raises:
            ConflictError: If the email is already registered
        """
        email = create_dto.email.strip().lower()
        existing_user = await db.scalar(select(User).where(User.email == email))
        if existing_user:
            raise ConflictError("User already exists with this email")

        user = User(
            email=email,
            password=AuthService.get_password_hash(create_dto.password),
            first_name=create_dto.first_name,
            last_name=create_dto.last_name,
        )
        db.add(user)
        await db.flush()
        await db.refresh(user)
        logger.info(f"Registered user {user.id}")
        return UsersService._auth_response(user)

    @staticmethod
    async def login(db: AsyncSession, login_dto: LoginRequest) -> AuthResponse:
        """
        Login a user.

        Raises:
            UnauthorizedError: Unknown email or wrong password (same message for both)
        """
        user = await db.scalar(
            select(User).where(User.email == login_dto.email.strip().lower())
        )
        if not user or not AuthService.verify_password(login_dto.password, user.password):
            raise UnauthorizedError("Invalid email or password")
        return UsersService._auth_response(user)

    @staticmethod
    async def find_me(db: AsyncSession, user_id: str) -> User:
        """
        Find current user by id.

        Raises:
            NotFoundError: If user not found
        """
        user = await db.get(User, user_id)
        if not user:
            raise NotFoundError("User", user_id)
        return user

    @staticmethod
    async def update(db: AsyncSession, user_id: str, update_dto: UpdateUserDto) -> User:
        """Update names; only fields present in the request are written."""
        user = await UsersService.find_me(db, user_id)
        for key, value in update_dto.model_dump(exclude_unset=True).items():
            setattr(user, key, value)
        await db.flush()
        await db.refresh(user)
        return user

    @staticmethod
    async def change_password(
        db: AsyncSession, user_id: str, dto: UpdatePasswordDto
    ) -> None:
        user = await UsersService.find_me(db, user_id)
        if not AuthService.verify_password(dto.current_password, user.password):
            raise UnauthorizedError("Current password is incorrect")
        user.password = AuthService.get_password_hash(dto.new_password)
        await db.flush()

    @staticmethod
    async def remove(db: AsyncSession, user_id: str) -> None:
        """
        Hard delete the account and everything it owns:
        drafts, compliance records, saved routes and product analyses.
        """
        user = await UsersService.find_me(db, user_id)
        drafts_removed = await DraftsService.delete_all_for_owner(db, user_id)
        records_removed = await HistoryService.delete_all_for_owner(db, user_id)
        await db.delete(user)
        await db.flush()
        logger.info(
            f"Deleted user {user_id} with {drafts_removed} draft(s) "
            f"and {records_removed} history record(s)"
        )
