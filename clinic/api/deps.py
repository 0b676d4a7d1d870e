from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from typing import Iterable, Optional
import logging

from ..core.database import get_db
from ..core.security import (
    security, AuthenticationError, AuthorizationError,
    GateOutcome, UserRole, evaluate_gate
)
from ..models.user import User
from ..models.doctor import Doctor
from ..models.patient import Patient
from ..services.auth_service import AuthService, to_profile
from ..services.doctor_service import DoctorService
from ..services.patient_service import PatientService

logger = logging.getLogger(__name__)

async def get_current_user_optional(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db)
) -> Optional[User]:
    """Get current user if the bearer token maps to a live session, None otherwise."""
    if credentials is None or not credentials.credentials:
        return None
    return AuthService(db).resolve_session_user(credentials.credentials)

# Role-based access control dependencies
def require_role(allowed_roles: Iterable[UserRole]):
    """Create a dependency that lets only ``allowed_roles`` through.

    Missing or unusable sessions get 401 so the client shows its sign-in
    surface; signed-in users with another role get 403.
    """
    allowed_roles = list(allowed_roles)

    async def role_checker(
        current_user: Optional[User] = Depends(get_current_user_optional)
    ) -> User:
        profile = to_profile(current_user)
        outcome = evaluate_gate(profile, allowed_roles)

        if outcome == GateOutcome.SIGN_IN:
            raise AuthenticationError()
        if outcome == GateOutcome.ACCESS_DENIED:
            logger.info(
                f"Access denied for {profile.email}: role {profile.role.value} "
                f"not in {[role.value for role in allowed_roles]}"
            )
            raise AuthorizationError(
                f"Access denied. Your role: {profile.role.value}"
            )
        return current_user

    return role_checker

get_current_user = require_role(list(UserRole))

# Specific role dependencies
async def get_admin_user(
    current_user: User = Depends(require_role([UserRole.ADMIN]))
) -> User:
    """Require admin role."""
    return current_user

async def get_doctor_user(
    current_user: User = Depends(require_role([UserRole.DOCTOR]))
) -> User:
    """Require doctor role."""
    return current_user

async def get_patient_user(
    current_user: User = Depends(require_role([UserRole.PATIENT]))
) -> User:
    """Require patient role."""
    return current_user

async def get_current_doctor(
    current_user: User = Depends(get_doctor_user),
    db: Session = Depends(get_db)
) -> Optional[Doctor]:
    """Doctor record of the signed-in doctor, if one is linked."""
    return DoctorService(db).for_user(current_user)

async def get_current_patient(
    current_user: User = Depends(get_patient_user),
    db: Session = Depends(get_db)
) -> Patient:
    return PatientService(db).for_user(current_user)
