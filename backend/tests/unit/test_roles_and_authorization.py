from unittest.mock import Mock
import pytest
from orgtasks.db.models import Department, User, UserDepartment, UserOrganization
from orgtasks.domain.enums import Role
from orgtasks.domain.roles import RoleSet, is_department_role, is_organization_role
from orgtasks.errors import ForbiddenError, NotFoundError
from orgtasks.services.authorization import CallerContext, build_caller_context, require


def test_role_set_coerces_strings_and_detects_admin():
    roles = RoleSet(["DepartmentMember", Role.ORGANIZATION_ADMIN])
    assert Role.DEPARTMENT_MEMBER in roles
    assert roles.is_admin
    assert roles.is_organization_admin
    assert roles.has_any(Role.ENTERPRISE_ADMIN, Role.ORGANIZATION_ADMIN)


def test_role_set_union_returns_role_set():
    merged = RoleSet([Role.DEPARTMENT_MEMBER]) | [Role.DEPARTMENT_ADMIN]
    assert isinstance(merged, RoleSet)
    assert merged == {Role.DEPARTMENT_MEMBER, Role.DEPARTMENT_ADMIN}
    assert merged.is_admin
    assert not merged.is_organization_admin


def test_role_set_rejects_unknown_role():
    with pytest.raises(ValueError):
        RoleSet(["SuperUser"])


def test_role_scopes():
    assert is_organization_role(Role.ENTERPRISE_ADMIN)
    assert not is_organization_role(Role.DEPARTMENT_ADMIN)
    assert is_department_role("DepartmentMember")
    assert not is_department_role(Role.ORGANIZATION_MEMBER)
    assert is_organization_role(Role.NONE) and is_department_role(Role.NONE)


def _caller(org_roles=None, dept_roles=None):
    return CallerContext(user=User(id="u1", email="u1@example.com"), organization_roles=org_roles or {}, department_roles=dept_roles or {})


def test_department_roles_are_union_of_org_and_department():
    dept = Department(id=5, organization_id=1, name="D")
    caller = _caller({1: Role.ORGANIZATION_ADMIN}, {5: Role.DEPARTMENT_MEMBER})
    assert caller.roles_for_department(dept) == {Role.ORGANIZATION_ADMIN, Role.DEPARTMENT_MEMBER}
    assert caller.can_manage_department(dept)


def test_org_admin_can_view_department_without_membership():
    dept = Department(id=6, organization_id=1, name="D")
    caller = _caller({1: Role.ENTERPRISE_ADMIN})
    assert caller.can_view_department(dept)
    assert caller.is_enterprise_admin


def test_member_of_other_department_cannot_view():
    dept = Department(id=6, organization_id=1, name="D")
    caller = _caller({1: Role.ORGANIZATION_MEMBER}, {7: Role.DEPARTMENT_MEMBER})
    assert not caller.can_view_department(dept)
    assert not caller.can_manage_department(dept)


def test_none_role_does_not_count_as_membership():
    caller = _caller({1: Role.ORGANIZATION_MEMBER}, {5: Role.NONE})
    assert not caller.belongs_to_department(5)


def test_department_admin_does_not_manage_organization():
    caller = _caller({1: Role.ORGANIZATION_MEMBER}, {5: Role.DEPARTMENT_ADMIN})
    assert not caller.can_manage_organization(1)
    assert not caller.shares_admin_organization([1])
    assert _caller({1: Role.ORGANIZATION_ADMIN}).shares_admin_organization([2, 1])


def test_build_caller_context_reads_memberships_from_repository():
    repo = Mock()
    repo.list_user_organizations.return_value = [UserOrganization(organization_id=1, role="EnterpriseAdmin")]
    repo.list_user_departments.return_value = [UserDepartment(department_id=3, role="DepartmentMember")]
    user = User(id="u1", email="u1@example.com")

    ctx = build_caller_context(Mock(), user, repository=repo)

    assert ctx.organization_roles == {1: Role.ENTERPRISE_ADMIN}
    assert ctx.department_roles == {3: Role.DEPARTMENT_MEMBER}
    repo.list_user_organizations.assert_called_once()


def test_require_raises_forbidden():
    with pytest.raises(ForbiddenError) as exc:
        require(False, _caller(), "nope")
    assert exc.value.http_status == 403
    assert exc.value.message == "nope"
    require(True, _caller(), "fine")


def test_not_found_codes_derive_from_entity_name():
    err = NotFoundError.for_entity("TaskDepartment")
    assert err.code == "TASK_DEPARTMENT_NOT_FOUND"
    assert err.http_status == 404
    assert err.detail == {"code": "TASK_DEPARTMENT_NOT_FOUND", "message": "TaskDepartment not found"}
