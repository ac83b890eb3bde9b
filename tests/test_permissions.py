import pytest

from app.core.permissions import (
    DISPENSE_PRESCRIPTIONS, ENTRY_VIEW, READ_PRESCRIPTIONS, has_capability,
    home_view, is_allowed, match_view, required_roles_for_view, resolve_view,
    views_for_role
)
from app.core.security import UserRole


class TestIsAllowed:

    def test_role_in_required_roles(self):
        assert is_allowed(UserRole.PHARMACIST, [UserRole.PHARMACIST, UserRole.HOSPITAL])

    def test_role_not_in_required_roles(self):
        assert not is_allowed(UserRole.PATIENT, [UserRole.PHARMACIST])

    def test_plain_strings_are_accepted(self):
        assert is_allowed("lab_technician", ["lab_technician"])

    def test_unknown_or_missing_role_is_rejected(self):
        assert not is_allowed("admin", ["admin", "doctor"])
        assert not is_allowed(None, [UserRole.DOCTOR])

    def test_empty_requirements_allow_nobody(self):
        assert not is_allowed(UserRole.DOCTOR, [])


class TestViewResolution:

    @pytest.mark.parametrize("role,path", [
        (UserRole.PHARMACIST, "/pharmacy/dashboard"),
        (UserRole.DOCTOR, "/doctor/patient/P-1001"),
        (UserRole.PATIENT, "/report/R-1"),
        (UserRole.HOSPITAL, "/billing/invoice/INV-3001"),
        (UserRole.LAB_TECHNICIAN, "/lab/dashboard"),
    ])
    def test_permitted_views_resolve_to_themselves(self, role, path):
        assert resolve_view(role, path) == path

    def test_forbidden_view_redirects_to_entry(self):
        assert resolve_view(UserRole.PATIENT, "/pharmacy/dashboard") == ENTRY_VIEW
        assert resolve_view(UserRole.LAB_TECHNICIAN, "/billing/invoice/INV-3001") == ENTRY_VIEW

    def test_unauthenticated_redirects_to_entry(self):
        assert resolve_view(None, "/doctor/dashboard") == ENTRY_VIEW

    def test_unknown_path_redirects_to_entry(self):
        assert resolve_view(UserRole.DOCTOR, "/nowhere") == ENTRY_VIEW
        assert match_view("/nowhere") is None

    def test_path_parameters_must_be_present(self):
        assert match_view("/doctor/patient/") is None
        assert match_view("/doctor/patient/P-1") == "/doctor/patient/:patientId"

    def test_shared_view_roles_are_derived_from_table(self):
        assert required_roles_for_view("/billing/invoice/INV-1") == {
            UserRole.HOSPITAL, UserRole.PATIENT, UserRole.PHARMACIST
        }

    def test_home_views(self):
        assert home_view(UserRole.PHARMACIST) == "/pharmacy/dashboard"
        assert home_view("hospital") == "/hospital/dashboard"
        assert home_view("unknown") == ENTRY_VIEW

    def test_every_home_view_is_permitted(self):
        for role in UserRole:
            assert home_view(role) in views_for_role(role)


class TestCapabilities:

    def test_only_pharmacist_dispenses(self):
        allowed = [role for role in UserRole if has_capability(role, DISPENSE_PRESCRIPTIONS)]
        assert allowed == [UserRole.PHARMACIST]

    def test_doctor_reads_prescriptions(self):
        assert has_capability(UserRole.DOCTOR, READ_PRESCRIPTIONS)
        assert not has_capability(UserRole.PATIENT, READ_PRESCRIPTIONS)

    def test_unknown_capability(self):
        assert not has_capability(UserRole.PHARMACIST, "billing:refund")
