"""
Users Router - registration, login and account management.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db.engine import get_db_util
from .service import UsersService
from .schemas import (
    AuthResponse,
    LoginRequest,
    RegisterRequest,
    UpdatePasswordDto,
    UpdateUserDto,
    UserResponse,
)
from .auth import get_current_user, TokenData

router = APIRouter(prefix="/users", tags=["users"])


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register_user(
    register_dto: RegisterRequest, db: AsyncSession = Depends(get_db_util)
):
    """Register a new user"""
    return await UsersService.create(db, register_dto)


@router.post("/login", response_model=AuthResponse)
async def login_user(login_dto: LoginRequest, db: AsyncSession = Depends(get_db_util)):
    """Login a user and receive a JWT access token"""
    return await UsersService.login(db, login_dto)


@router.get("/me", response_model=UserResponse)
async def get_current_user_profile(
    db: AsyncSession = Depends(get_db_util),
    current_user: TokenData = Depends(get_current_user)
):
    """Get current user profile from JWT token."""
    return await UsersService.find_me(db, current_user.user_id)


@router.patch("/me", response_model=UserResponse)
async def update_current_user(
    update_dto: UpdateUserDto,
    db: AsyncSession = Depends(get_db_util),
    current_user: TokenData = Depends(get_current_user)
):
    """Update first/last name"""
    return await UsersService.update(db, current_user.user_id, update_dto)


@router.put("/me/password")
async def update_password(
    dto: UpdatePasswordDto,
    db: AsyncSession = Depends(get_db_util),
    current_user: TokenData = Depends(get_current_user)
):
    """Change password"""
    await UsersService.change_password(db, current_user.user_id, dto)
    return {"message": "Password updated successfully"}


@router.delete("/me")
async def delete_account(
    db: AsyncSession = Depends(get_db_util),
    current_user: TokenData = Depends(get_current_user)
):
    """Delete the account together with its drafts and history"""
    await UsersService.remove(db, current_user.user_id)
    return {"message": "Account deleted successfully"}
