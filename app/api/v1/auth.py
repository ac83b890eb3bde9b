from fastapi import APIRouter, Depends

from ...api.deps import get_current_user, get_current_user_token
from ...core.permissions import home_view
from ...core.security import Identity, TokenPayload
from ...schemas.auth import TokenVerification, UserResponse

router = APIRouter(prefix="/auth", tags=["Authentication"])

# Sign-in, sign-up and token refresh belong to the identity provider; this
# router only reads the identity carried by its tokens.

@router.get("/me", response_model=UserResponse)
async def get_current_user_info(
    current_user: Identity = Depends(get_current_user)
):
    """Get current user information."""
    return UserResponse(
        user_id=current_user.user_id,
        role=current_user.role,
        email=current_user.email,
        name=current_user.name,
        home_view=home_view(current_user.role),
    )

@router.post("/verify-token", response_model=TokenVerification)
async def verify_token_endpoint(
    token_payload: TokenPayload = Depends(get_current_user_token),
    current_user: Identity = Depends(get_current_user)
):
    """Verify if token is valid."""
    return TokenVerification(
        valid=True,
        user_id=current_user.user_id,
        role=current_user.role,
        expires=token_payload.exp,
    )
