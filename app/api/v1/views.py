from fastapi import APIRouter, Depends, Query
from typing import Optional

from ...api.deps import get_current_user, get_current_user_optional
from ...core.permissions import home_view, resolve_view, views_for_role
from ...core.security import Identity
from ...schemas.auth import ViewResolution, ViewsResponse

router = APIRouter(prefix="/views", tags=["Views"])

@router.get("", response_model=ViewsResponse)
async def list_views(
    current_user: Identity = Depends(get_current_user)
):
    """List the views the current user may enter."""
    return ViewsResponse(
        role=current_user.role,
        home_view=home_view(current_user.role),
        views=sorted(views_for_role(current_user.role)),
    )

@router.get("/resolve", response_model=ViewResolution)
async def resolve(
    path: str = Query(..., min_length=1),
    current_user: Optional[Identity] = Depends(get_current_user_optional)
):
    """Decide whether the caller may enter ``path``; anyone else goes to the entry view."""
    role = current_user.role if current_user else None
    target = resolve_view(role, path)
    return ViewResolution(
        path=path,
        allowed=target == path,
        redirect_to=target,
    )
