import pytest

from safebite.config.permissions_config import (
    ROLE_PERMISSIONS, Capability, Role, can_manage_role, get_all_roles, get_assignable_roles,
    get_permission_matrix, get_role_capabilities, get_role_description, get_role_display_name, has_permission
)


EXPECTED = {
    Capability.VIEW_ALL_COMPANIES: {Role.SUPER_USER},
    Capability.VIEW_ALL_LOCATIONS: {Role.SUPER_USER, Role.COMPANY_ADMIN, Role.OPS},
    Capability.CREATE_COMPANIES: {Role.SUPER_USER},
    Capability.MANAGE_USERS: {Role.SUPER_USER, Role.COMPANY_ADMIN},
    Capability.CREATE_CHECKLISTS: {Role.SUPER_USER, Role.COMPANY_ADMIN},
    Capability.EDIT_CHECKLISTS: {Role.SUPER_USER, Role.COMPANY_ADMIN},
    Capability.DELETE_CHECKLISTS: {Role.SUPER_USER, Role.COMPANY_ADMIN},
    Capability.RECORD_TEMPERATURES: set(Role),
    Capability.COMPLETE_CHECKLISTS: set(Role),
    Capability.VIEW_ALL_RECORDS: set(Role),
    Capability.DOWNLOAD_RECORDS: set(Role),
    Capability.GENERATE_REPORTS: {Role.SUPER_USER, Role.COMPANY_ADMIN},
    Capability.MANAGE_ROLES: {Role.SUPER_USER},
}


def test_capability_set_is_closed():
    assert len(Capability) == 13
    assert set(EXPECTED) == set(Capability)


@pytest.mark.parametrize("capability", list(Capability))
@pytest.mark.parametrize("role", list(Role))
def test_permission_table(role, capability):
    assert has_permission(role, capability) is (role in EXPECTED[capability])


@pytest.mark.parametrize("role", list(Role))
def test_unknown_capability_is_denied(role):
    assert has_permission(role, "canLaunchRockets") is False
    assert has_permission(role, None) is False
    assert has_permission(role, 42) is False


def test_unknown_role_is_denied():
    for capability in Capability:
        assert has_permission("head_chef", capability) is False
        assert has_permission(None, capability) is False


def test_plain_strings_resolve_like_enums():
    assert has_permission("company_admin", "canManageUsers") is True
    assert has_permission("ops", "canManageUsers") is False


def test_lookups_are_repeatable():
    first = [has_permission(role, capability) for role in Role for capability in Capability]
    second = [has_permission(role, capability) for role in Role for capability in Capability]
    assert first == second


def test_table_is_read_only():
    with pytest.raises(TypeError):
        ROLE_PERMISSIONS[Role.MANAGER] = {}
    with pytest.raises(TypeError):
        ROLE_PERMISSIONS[Role.MANAGER][Capability.MANAGE_USERS] = True
    assert has_permission(Role.MANAGER, Capability.MANAGE_USERS) is False


def test_role_capabilities():
    assert get_role_capabilities(Role.MANAGER) == [
        "canRecordTemperatures", "canCompleteChecklists", "canViewAllRecords", "canDownloadRecords"
    ]
    assert len(get_role_capabilities(Role.SUPER_USER)) == 13
    assert get_role_capabilities("nobody") == []


def test_assignable_roles():
    assert get_assignable_roles(Role.COMPANY_ADMIN) == [Role.OPS, Role.MANAGER]
    assert get_assignable_roles(Role.MANAGER) == []
    assert can_manage_role(Role.SUPER_USER, Role.COMPANY_ADMIN)
    assert not can_manage_role(Role.COMPANY_ADMIN, Role.COMPANY_ADMIN)
    assert not can_manage_role(Role.COMPANY_ADMIN, "head_chef")


def test_display_names():
    assert get_role_display_name(Role.OPS) == "Operations Manager"
    assert get_role_display_name("head_chef") == "head_chef"


def test_permission_matrix():
    matrix = get_permission_matrix()
    assert matrix["capabilities"][0] == "canViewAllCompanies"
    assert [role["name"] for role in matrix["roles"]] == ["super_user", "company_admin", "ops", "manager"]
    ops = matrix["roles"][2]
    assert "canViewAllLocations" in ops["permissions"]
    assert "canDeleteChecklists" not in ops["permissions"]


def test_role_listing_and_descriptions():
    assert get_all_roles() == [Role.SUPER_USER, Role.COMPANY_ADMIN, Role.OPS, Role.MANAGER]
    assert get_role_description(Role.MANAGER).startswith("Access to assigned locations only")
    assert get_role_description("head_chef") == ""
