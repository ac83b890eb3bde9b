from typing import List, Optional

from pydantic import BaseModel

from ..core.security import UserRole


class UserResponse(BaseModel):
    user_id: str
    role: UserRole
    email: Optional[str] = None
    name: Optional[str] = None
    home_view: str


class TokenVerification(BaseModel):
    valid: bool
    user_id: str
    role: UserRole
    expires: Optional[int] = None


class ViewsResponse(BaseModel):
    role: UserRole
    home_view: str
    views: List[str]


class ViewResolution(BaseModel):
    path: str
    allowed: bool
    redirect_to: str
