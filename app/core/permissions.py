"""
Role-based view and capability table.

Every role's views and capabilities are declared once in ``ROLE_PERMISSIONS``;
the per-view and per-capability role sets are derived from it so that the
API dependencies and the view resolver consult the same source.
"""

from typing import Dict, FrozenSet, Iterable, Optional, Union

from .security import UserRole

ENTRY_VIEW = "/"

# Capabilities checked by API endpoints
READ_PRESCRIPTIONS = "prescriptions:read"
FULFILL_PRESCRIPTIONS = "prescriptions:fulfill"
DISPENSE_PRESCRIPTIONS = "prescriptions:dispense"
READ_ANALYTICS = "analytics:read"

ROLE_PERMISSIONS: Dict[UserRole, Dict[str, FrozenSet[str]]] = {
    UserRole.DOCTOR: {
        "views": frozenset({
            "/doctor/dashboard",
            "/doctor/profile",
            "/doctor/patient/:patientId",
            "/report/:reportId",
        }),
        "capabilities": frozenset({READ_PRESCRIPTIONS}),
    },
    UserRole.PATIENT: {
        "views": frozenset({
            "/patient/dashboard",
            "/patient/history",
            "/patient/reports",
            "/patient/allergies",
            "/patient/profile",
            "/report/:reportId",
            "/billing/invoice/:invoiceId",
        }),
        "capabilities": frozenset(),
    },
    UserRole.HOSPITAL: {
        "views": frozenset({
            "/hospital/dashboard",
            "/registration",
            "/hospital/staff-management",
            "/hospital/add-doctor",
            "/hospital/add-staff",
            "/hospital/appointments",
            "/hospital/billing",
            "/hospital/billing/view-all",
            "/hospital/schedule-appointment",
            "/billing/invoice/:invoiceId",
        }),
        "capabilities": frozenset({READ_ANALYTICS}),
    },
    UserRole.PHARMACIST: {
        "views": frozenset({
            "/pharmacy/dashboard",
            "/billing/invoice/:invoiceId",
        }),
        "capabilities": frozenset({
            READ_PRESCRIPTIONS,
            FULFILL_PRESCRIPTIONS,
            DISPENSE_PRESCRIPTIONS,
            READ_ANALYTICS,
        }),
    },
    UserRole.LAB_TECHNICIAN: {
        "views": frozenset({"/lab/dashboard"}),
        "capabilities": frozenset(),
    },
}

# Where each role lands after signing in
HOME_VIEWS: Dict[UserRole, str] = {
    UserRole.DOCTOR: "/doctor/dashboard",
    UserRole.PATIENT: "/patient/dashboard",
    UserRole.HOSPITAL: "/hospital/dashboard",
    UserRole.PHARMACIST: "/pharmacy/dashboard",
    UserRole.LAB_TECHNICIAN: "/lab/dashboard",
}


def _invert(kind: str) -> Dict[str, FrozenSet[UserRole]]:
    table: Dict[str, set] = {}
    for role, grants in ROLE_PERMISSIONS.items():
        for name in grants[kind]:
            table.setdefault(name, set()).add(role)
    return {name: frozenset(roles) for name, roles in table.items()}


VIEW_ROLES = _invert("views")
CAPABILITY_ROLES = _invert("capabilities")


def _coerce_role(role: Union[UserRole, str, None]) -> Optional[UserRole]:
    if role is None:
        return None
    try:
        return UserRole(role)
    except ValueError:
        return None


def is_allowed(role: Union[UserRole, str, None], required_roles: Iterable[Union[UserRole, str]]) -> bool:
    """True when ``role`` is a known role and appears in ``required_roles``."""
    user_role = _coerce_role(role)
    if user_role is None:
        return False
    return any(_coerce_role(r) == user_role for r in required_roles)


def roles_for_capability(capability: str) -> FrozenSet[UserRole]:
    return CAPABILITY_ROLES.get(capability, frozenset())


def has_capability(role: Union[UserRole, str, None], capability: str) -> bool:
    return is_allowed(role, roles_for_capability(capability))


def _path_matches(pattern: str, path: str) -> bool:
    pattern_parts = pattern.strip("/").split("/")
    path_parts = path.strip("/").split("/")
    if len(pattern_parts) != len(path_parts):
        return False
    for expected, actual in zip(pattern_parts, path_parts):
        if expected.startswith(":"):
            if not actual:
                return False
        elif expected != actual:
            return False
    return True


def match_view(path: str) -> Optional[str]:
    """Return the view pattern that ``path`` belongs to, if any."""
    for pattern in VIEW_ROLES:
        if _path_matches(pattern, path):
            return pattern
    return None


def required_roles_for_view(path: str) -> FrozenSet[UserRole]:
    pattern = match_view(path)
    if pattern is None:
        return frozenset()
    return VIEW_ROLES[pattern]


def resolve_view(role: Union[UserRole, str, None], path: str) -> str:
    """Return ``path`` when ``role`` may enter it, otherwise the entry view."""
    if path == ENTRY_VIEW:
        return ENTRY_VIEW
    if is_allowed(role, required_roles_for_view(path)):
        return path
    return ENTRY_VIEW


def views_for_role(role: Union[UserRole, str, None]) -> FrozenSet[str]:
    user_role = _coerce_role(role)
    if user_role is None:
        return frozenset()
    return ROLE_PERMISSIONS[user_role]["views"]


def home_view(role: Union[UserRole, str, None]) -> str:
    user_role = _coerce_role(role)
    if user_role is None:
        return ENTRY_VIEW
    return HOME_VIEWS[user_role]
