import pytest
from orgtasks.domain.enums import PrizeStatus, Role, TaskStatus
from orgtasks.domain.workflows import (
    PRIZE_PERMISSION_DENIED_LABEL,
    UNKNOWN_PRIZE_STATUS_LABEL,
    get_available_task_status,
    get_next_prize_status,
    is_prize_transition_allowed,
    task_status_label,
)

ALL_STATUSES = [
    ("Not Started", TaskStatus.NOT_STARTED),
    ("In Progress", TaskStatus.IN_PROGRESS),
    ("Completed", TaskStatus.COMPLETED),
    ("Verified", TaskStatus.VERIFIED_COMPLETED),
]
ADMIN_ROLES = [Role.DEPARTMENT_ADMIN, Role.ORGANIZATION_ADMIN, Role.ENTERPRISE_ADMIN]


@pytest.mark.parametrize("admin_role", ADMIN_ROLES)
@pytest.mark.parametrize("current", list(TaskStatus))
def test_any_admin_role_gets_every_status_in_order(admin_role, current):
    options = get_available_task_status(current, [admin_role], is_assigned_to_caller=False)
    assert options == ALL_STATUSES


def test_assigned_member_can_complete_but_not_verify():
    options = get_available_task_status(TaskStatus.IN_PROGRESS, [Role.DEPARTMENT_MEMBER], True)
    assert [o.status for o in options] == [TaskStatus.NOT_STARTED, TaskStatus.IN_PROGRESS, TaskStatus.COMPLETED]


def test_assigned_member_on_verified_task_keeps_current_status_last():
    options = get_available_task_status(TaskStatus.VERIFIED_COMPLETED, [Role.DEPARTMENT_MEMBER], True)
    assert options[-1] == ("Verified", TaskStatus.VERIFIED_COMPLETED)
    assert len(options) == 4


def test_unassigned_member_is_read_only():
    options = get_available_task_status(TaskStatus.IN_PROGRESS, [Role.DEPARTMENT_MEMBER], False)
    assert options == [("In Progress", TaskStatus.IN_PROGRESS)]


def test_unassigned_member_sees_completed_task_as_completed_only():
    options = get_available_task_status(TaskStatus.COMPLETED, {Role.DEPARTMENT_MEMBER}, False)
    assert options == [("Completed", TaskStatus.COMPLETED)]


def test_no_roles_on_verified_task_gives_verified_only():
    options = get_available_task_status(TaskStatus.VERIFIED_COMPLETED, set(), False)
    assert options == [("Verified", TaskStatus.VERIFIED_COMPLETED)]


@pytest.mark.parametrize("roles", [[], [Role.NONE], [Role.ORGANIZATION_MEMBER]])
def test_no_member_role_is_read_only_even_when_assigned(roles):
    options = get_available_task_status(TaskStatus.COMPLETED, roles, True)
    assert options == [("Completed", TaskStatus.COMPLETED)]


def test_admin_plus_member_roles_behave_as_admin():
    options = get_available_task_status(TaskStatus.NOT_STARTED, [Role.DEPARTMENT_MEMBER, Role.DEPARTMENT_ADMIN], True)
    assert options == ALL_STATUSES


def test_roles_accepted_as_strings():
    options = get_available_task_status(TaskStatus.NOT_STARTED, ["DepartmentAdmin"], False)
    assert len(options) == 4


def test_current_status_always_present_and_result_deterministic():
    for current in TaskStatus:
        for roles in ([], [Role.DEPARTMENT_MEMBER], [Role.DEPARTMENT_ADMIN]):
            for assigned in (True, False):
                first = get_available_task_status(current, roles, assigned)
                assert current in [o.status for o in first]
                assert first == get_available_task_status(current, roles, assigned)


def test_label_falls_back_to_string_form():
    assert task_status_label(TaskStatus.VERIFIED_COMPLETED) == "Verified"
    assert task_status_label("Archived") == "Archived"


@pytest.mark.parametrize("admin_role", ADMIN_ROLES)
def test_prize_cycle_for_admins(admin_role):
    assert get_next_prize_status(PrizeStatus.AVAILABLE, [admin_role]) == ("Request Prize", PrizeStatus.PENDING_REDEMPTION)
    assert get_next_prize_status(PrizeStatus.PENDING_REDEMPTION, [admin_role]) == ("Redeem Prize", PrizeStatus.REDEEMED)
    assert get_next_prize_status(PrizeStatus.REDEEMED, [admin_role]) == ("Make Prize Available", PrizeStatus.AVAILABLE)


def test_prize_cycle_returns_to_start_after_three_steps():
    status = PrizeStatus.AVAILABLE
    for _ in range(3):
        status = get_next_prize_status(status, [Role.DEPARTMENT_ADMIN]).next_status
    assert status == PrizeStatus.AVAILABLE


@pytest.mark.parametrize("current", list(PrizeStatus))
@pytest.mark.parametrize("roles", [[], [Role.DEPARTMENT_MEMBER], [Role.ORGANIZATION_MEMBER, Role.NONE]])
def test_non_admin_gets_permission_denied(current, roles):
    action = get_next_prize_status(current, roles)
    assert action == (PRIZE_PERMISSION_DENIED_LABEL, current)
    assert not is_prize_transition_allowed(action, current)


def test_unknown_prize_status_is_reported_for_admins():
    action = get_next_prize_status("Lost", [Role.ENTERPRISE_ADMIN])
    assert action == (UNKNOWN_PRIZE_STATUS_LABEL, "Lost")
    assert not is_prize_transition_allowed(action, "Lost")


def test_admin_transition_is_allowed():
    action = get_next_prize_status(PrizeStatus.AVAILABLE, [Role.ORGANIZATION_ADMIN])
    assert is_prize_transition_allowed(action, PrizeStatus.AVAILABLE)
