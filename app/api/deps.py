from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials
from typing import Optional

from ..core.permissions import has_capability, roles_for_capability
from ..core.security import (
    security, verify_token, identity_from_payload, AuthenticationError,
    AuthorizationError, Identity, TokenPayload
)
from ..services.analytics import Analytics
from ..services.dispense_service import DispenseWorkflow
from ..services.prescription_store import PrescriptionStore

async def get_current_user_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> TokenPayload:
    """Extract and verify JWT token from Authorization header."""
    if credentials is None:
        raise AuthenticationError("Not authenticated")

    # Verify token
    token_payload = verify_token(credentials.credentials)
    if not token_payload:
        raise AuthenticationError("Invalid or expired token")

    # Check if token is access token
    if token_payload.token_type != "access":
        raise AuthenticationError("Invalid token type")

    return token_payload

async def get_current_user(
    token_payload: TokenPayload = Depends(get_current_user_token)
) -> Identity:
    """Get the caller's identity from the verified token."""
    identity = identity_from_payload(token_payload)
    if identity is None:
        raise AuthenticationError("Invalid token payload")
    return identity

# Optional authentication (for the view resolver, which redirects anonymous callers)
async def get_current_user_optional(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> Optional[Identity]:
    """Get current user if authenticated, None otherwise."""
    if credentials is None:
        return None

    token_payload = verify_token(credentials.credentials)
    if not token_payload or token_payload.token_type != "access":
        return None

    return identity_from_payload(token_payload)

# Capability-based access control dependencies
def require_capability(capability: str):
    """Create a dependency that requires a capability from the permission table."""
    async def capability_checker(
        current_user: Identity = Depends(get_current_user)
    ) -> Identity:
        if not has_capability(current_user.role, capability):
            allowed = sorted(role.value for role in roles_for_capability(capability))
            raise AuthorizationError(
                f"Access denied. Required roles: {allowed}"
            )
        return current_user

    return capability_checker

# Application services, built at startup and kept on app.state
def get_prescription_store(request: Request) -> PrescriptionStore:
    return request.app.state.prescription_store

def get_analytics(request: Request) -> Analytics:
    return request.app.state.analytics

def get_dispense_workflow(
    store: PrescriptionStore = Depends(get_prescription_store),
    analytics: Analytics = Depends(get_analytics),
) -> DispenseWorkflow:
    return DispenseWorkflow(store, analytics)
