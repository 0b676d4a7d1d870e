from fastapi import APIRouter, Depends

from ...api.deps import get_current_user
from ...models.user import User
from ...schemas.dashboard import DashboardView
from ...services.dashboard_service import dashboard_for

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])

@router.get("", response_model=DashboardView)
async def current_dashboard(
    current_user: User = Depends(get_current_user)
):
    """Which dashboard the signed-in profile lands on."""
    return dashboard_for(current_user)
