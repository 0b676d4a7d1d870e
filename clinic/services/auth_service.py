from sqlalchemy import func, or_
from sqlalchemy.orm import Session
from fastapi import HTTPException, status
from datetime import datetime, timedelta
from typing import Optional
import hashlib
import logging

from ..models.user import User, SessionToken
from ..core.config import settings
from ..core.security import (
    verify_password, get_password_hash, create_token_pair,
    verify_token, generate_session_id, AuthenticationError, Profile, UserRole
)
from ..schemas.auth import (
    UserLogin, UserRegister, TokenResponse, ProfileResponse, ChangePassword
)

logger = logging.getLogger(__name__)

def _hash_token(token: str) -> str:
    return hashlib.sha256(token.encode()).hexdigest()

def to_profile(user: Optional[User]) -> Optional[Profile]:
    if user is None:
        return None
    return Profile(
        id=user.id,
        email=user.email,
        role=user.role,
        full_name=user.display_name
    )

class AuthService:
    def __init__(self, db: Session):
        self.db = db

    def get_user_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(
            func.lower(User.email) == email.strip().lower()
        ).first()

    def register_user(self, user_data: UserRegister) -> User:
        """Register a new account. Emails are unique case-insensitively."""
        if self.get_user_by_email(user_data.email):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="An account with this email already exists"
            )

        new_user = User(
            email=user_data.email,
            password_hash=get_password_hash(user_data.password),
            role=user_data.role,
            full_name=user_data.full_name,
            is_active=True,
            is_demo=False
        )

        self.db.add(new_user)
        self.db.commit()
        self.db.refresh(new_user)

        logger.info(f"Registered {new_user.role.value} account {new_user.email}")
        return new_user

    def authenticate_user(self, login_data: UserLogin) -> TokenResponse:
        """Check credentials and open a new session for the account."""
        user = self.get_user_by_email(login_data.email)

        if not user or not verify_password(login_data.password, user.password_hash):
            logger.warning(f"Failed sign-in for {login_data.email}")
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid email or password"
            )

        if not user.is_active:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Account is deactivated"
            )

        user.last_login = datetime.utcnow()
        response = self._start_session(user)
        logger.info(f"Signed in {user.email} as {user.role.value}")
        return response

    def refresh_session(self, refresh_token: str) -> TokenResponse:
        """Exchange a refresh token for a new session, revoking the old one."""
        token_payload = verify_token(refresh_token)
        if not token_payload or token_payload.token_type != "refresh":
            raise AuthenticationError("Invalid refresh token")

        stored = self.db.query(SessionToken).filter(
            SessionToken.session_id == token_payload.sid,
            SessionToken.token_hash == _hash_token(refresh_token),
            SessionToken.is_revoked == False,  # noqa: E712
            SessionToken.expires_at > datetime.utcnow()
        ).first()

        if not stored:
            raise AuthenticationError("Invalid or expired refresh token")

        user = stored.user
        if not user or not user.is_active:
            raise AuthenticationError("User not found or inactive")

        return self._start_session(user)

    def logout_user(self, refresh_token: str) -> bool:
        """Revoke the session a refresh token belongs to."""
        stored = self.db.query(SessionToken).filter(
            SessionToken.token_hash == _hash_token(refresh_token)
        ).first()

        if not stored:
            return False

        stored.is_revoked = True
        self.db.commit()
        logger.info(f"Signed out user {stored.user_id}")
        return True

    def resolve_session_user(self, access_token: str) -> Optional[User]:
        """Return the user behind an access token, or None.

        Malformed, expired, revoked and orphaned tokens all come back as
        None; the caller treats them like a missing session.
        """
        token_payload = verify_token(access_token)
        if not token_payload or token_payload.token_type != "access":
            return None
        if not token_payload.sub or not token_payload.sid:
            return None

        try:
            user_id = int(token_payload.sub)
        except ValueError:
            return None

        stored = self.db.query(SessionToken).filter(
            SessionToken.session_id == token_payload.sid,
            SessionToken.user_id == user_id,
            SessionToken.is_revoked == False,  # noqa: E712
            SessionToken.expires_at > datetime.utcnow()
        ).first()
        if not stored:
            return None

        user = self.db.query(User).filter(User.id == user_id).first()
        if not user or not user.is_active:
            return None
        return user

    def change_password(self, user: User, password_data: ChangePassword) -> None:
        if not verify_password(password_data.current_password, user.password_hash):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Current password is incorrect"
            )

        user.password_hash = get_password_hash(password_data.new_password)
        self.db.commit()

    def set_active(self, user: User, is_active: bool, acting_user: Optional[User] = None) -> User:
        """Activate or deactivate an account.

        Admins cannot deactivate themselves, and the last active admin
        cannot be deactivated.
        """
        if not is_active:
            if acting_user is not None and acting_user.id == user.id:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="You cannot deactivate your own account"
                )
            if user.role == UserRole.ADMIN and user.is_active:
                other_admins = self.db.query(User).filter(
                    User.role == UserRole.ADMIN,
                    User.is_active == True,  # noqa: E712
                    User.id != user.id
                ).count()
                if other_admins == 0:
                    raise HTTPException(
                        status_code=status.HTTP_400_BAD_REQUEST,
                        detail="The last active admin cannot be deactivated"
                    )

        user.is_active = is_active
        if not is_active:
            self._revoke_sessions(user.id)
            logger.info(f"Deactivated account {user.email}")
        self.db.commit()
        self.db.refresh(user)
        return user

    def _start_session(self, user: User) -> TokenResponse:
        # A new sign-in replaces whatever session the account had before
        self._revoke_sessions(user.id)

        session_id = generate_session_id()
        tokens = create_token_pair(user.id, user.email, user.role, session_id)

        self.db.add(SessionToken(
            user=user,
            session_id=session_id,
            token_hash=_hash_token(tokens.refresh_token),
            expires_at=datetime.utcnow() + timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)
        ))
        self.db.commit()
        self.db.refresh(user)

        return TokenResponse(
            access_token=tokens.access_token,
            refresh_token=tokens.refresh_token,
            token_type=tokens.token_type,
            expires_in=tokens.expires_in,
            profile=ProfileResponse.from_user(user)
        )

    def _revoke_sessions(self, user_id: int):
        self.db.query(SessionToken).filter(
            SessionToken.user_id == user_id,
            SessionToken.is_revoked == False  # noqa: E712
        ).update({"is_revoked": True})

    def cleanup_expired_sessions(self) -> int:
        """Delete sessions that were revoked or whose refresh token expired."""
        removed = self.db.query(SessionToken).filter(
            or_(
                SessionToken.is_revoked == True,  # noqa: E712
                SessionToken.expires_at <= datetime.utcnow()
            )
        ).delete(synchronize_session=False)

        self.db.commit()
        if removed:
            logger.info(f"Removed {removed} stale sessions")
        return removed
