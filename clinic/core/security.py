from datetime import datetime, timedelta
from typing import Iterable, Optional
from jose import JWTError, jwt
from passlib.context import CryptContext
from fastapi import HTTPException, status
from fastapi.security import HTTPBearer
from pydantic import BaseModel
import secrets
from enum import Enum

from .config import settings

# Password hashing
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

# JWT Security; missing credentials are handled by the role gate
security = HTTPBearer(auto_error=False)

class UserRole(str, Enum):
    ADMIN = "admin"
    DOCTOR = "doctor"
    PATIENT = "patient"

class Token(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int

class TokenPayload(BaseModel):
    sub: Optional[str] = None
    email: Optional[str] = None
    role: Optional[str] = None
    exp: Optional[int] = None
    jti: Optional[str] = None
    sid: Optional[str] = None  # server-side session the token belongs to
    token_type: Optional[str] = None  # "access" or "refresh"

class Profile(BaseModel):
    """The signed-in identity a view is rendered for."""
    id: int
    email: str
    role: UserRole
    full_name: str

# Password utilities
def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain password against its hash."""
    return pwd_context.verify(plain_password, hashed_password)

def get_password_hash(password: str) -> str:
    """Generate password hash."""
    return pwd_context.hash(password)

# JWT utilities
def _encode(data: dict, expire: datetime, token_type: str) -> str:
    to_encode = data.copy()
    to_encode.update({
        "exp": expire,
        "jti": secrets.token_hex(8),
        "token_type": token_type
    })
    return jwt.encode(
        to_encode,
        settings.SECRET_KEY,
        algorithm=settings.ALGORITHM
    )

def create_access_token(
    data: dict,
    expires_delta: Optional[timedelta] = None
) -> str:
    """Create JWT access token."""
    if expires_delta:
        expire = datetime.utcnow() + expires_delta
    else:
        expire = datetime.utcnow() + timedelta(
            minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES
        )
    return _encode(data, expire, "access")

def create_refresh_token(data: dict) -> str:
    """Create JWT refresh token."""
    expire = datetime.utcnow() + timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)
    return _encode(data, expire, "refresh")

def verify_token(token: str) -> Optional[TokenPayload]:
    """Verify and decode JWT token.

    Anything that does not decode to a well-formed payload is reported as
    ``None`` so callers can treat it the same as a missing token.
    """
    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM]
        )
        return TokenPayload(**payload)
    except (JWTError, ValueError, TypeError):
        return None

def create_token_pair(
    user_id: int,
    email: str,
    role: UserRole,
    session_id: str
) -> Token:
    """Create both access and refresh tokens for one session."""
    token_data = {
        "sub": str(user_id),
        "email": email,
        "role": role.value,
        "sid": session_id
    }

    access_token = create_access_token(token_data)
    refresh_token = create_refresh_token(token_data)

    return Token(
        access_token=access_token,
        refresh_token=refresh_token,
        expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60
    )

# HTTP exceptions
class AuthenticationError(HTTPException):
    def __init__(self, detail: str = "Please sign in to continue"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )

class AuthorizationError(HTTPException):
    def __init__(self, detail: str = "Access denied"):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail,
        )

class NotFoundError(HTTPException):
    def __init__(self, resource: str, resource_id=None):
        detail = f"{resource} not found"
        if resource_id is not None:
            detail = f"{resource} {resource_id} not found"
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
        )

# Role-based access control
class GateOutcome(str, Enum):
    SIGN_IN = "sign_in"
    ACCESS_DENIED = "access_denied"
    GRANTED = "granted"

def evaluate_gate(
    profile: Optional[Profile],
    allowed_roles: Iterable[UserRole]
) -> GateOutcome:
    """Decide what a view renders for ``profile``.

    No profile means the caller has to sign in; a profile whose role is not
    in ``allowed_roles`` is denied; everything else is granted. This is a
    view filter only; it trusts whatever produced ``profile``.
    """
    if profile is None:
        return GateOutcome.SIGN_IN
    if profile.role not in set(allowed_roles):
        return GateOutcome.ACCESS_DENIED
    return GateOutcome.GRANTED

def generate_session_id() -> str:
    return secrets.token_urlsafe(16)

def default_full_name(email: str) -> str:
    """Fallback display name: the local part of the email."""
    return email.split("@")[0]
