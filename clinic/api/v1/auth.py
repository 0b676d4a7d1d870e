from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List

from ...core.database import get_db
from ...api.deps import get_current_user
from ...services.auth_service import AuthService
from ...services.demo_data import DEMO_ACCOUNTS
from ...schemas.auth import (
    UserLogin, UserRegister, TokenResponse, ProfileResponse,
    RefreshTokenRequest, ChangePassword, DemoAccount
)
from ...models.user import User

router = APIRouter(prefix="/auth", tags=["Authentication"])

@router.post("/register", response_model=ProfileResponse)
async def register(
    user_data: UserRegister,
    db: Session = Depends(get_db)
):
    """Create an account. The caller signs in afterwards."""
    auth_service = AuthService(db)
    user = auth_service.register_user(user_data)
    return ProfileResponse.from_user(user)

@router.post("/login", response_model=TokenResponse)
async def login(
    login_data: UserLogin,
    db: Session = Depends(get_db),
):
    """Authenticate user and return session tokens."""
    auth_service = AuthService(db)
    return auth_service.authenticate_user(login_data)

@router.post("/refresh", response_model=TokenResponse)
async def refresh_token(
    refresh_data: RefreshTokenRequest,
    db: Session = Depends(get_db)
):
    """Refresh access token using refresh token."""
    auth_service = AuthService(db)
    return auth_service.refresh_session(refresh_data.refresh_token)

@router.post("/logout")
async def logout(
    refresh_data: RefreshTokenRequest,
    db: Session = Depends(get_db)
):
    """End the session the refresh token belongs to."""
    auth_service = AuthService(db)
    success = auth_service.logout_user(refresh_data.refresh_token)

    return {"message": "Successfully logged out" if success else "Logout completed"}

@router.get("/me", response_model=ProfileResponse)
async def get_current_profile(
    current_user: User = Depends(get_current_user)
):
    """Get the signed-in profile."""
    return ProfileResponse.from_user(current_user)

@router.post("/change-password")
async def change_password(
    password_data: ChangePassword,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Change user password."""
    AuthService(db).change_password(current_user, password_data)
    return {"message": "Password changed successfully"}

@router.get("/demo-accounts", response_model=List[DemoAccount])
async def demo_accounts():
    """Credentials of the built-in demo accounts, shown on the sign-in page."""
    return DEMO_ACCOUNTS
