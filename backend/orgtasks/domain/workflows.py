"""Task and prize lifecycle rules.

Both functions are pure: they take a snapshot of the entity status and the
caller's roles and return advisory data. Persisting a transition (and
refusing one the advisory does not allow) is up to the caller.
"""
from __future__ import annotations
from typing import Iterable, List, NamedTuple

from .enums import PrizeStatus, Role, TaskStatus
from .roles import RoleSet


class StatusOption(NamedTuple):
    label: str
    status: TaskStatus


class PrizeAction(NamedTuple):
    label: str
    next_status: PrizeStatus


TASK_STATUS_LABELS = {
    TaskStatus.NOT_STARTED: "Not Started",
    TaskStatus.IN_PROGRESS: "In Progress",
    TaskStatus.COMPLETED: "Completed",
    TaskStatus.VERIFIED_COMPLETED: "Verified",
}

# members cannot verify their own work
_MEMBER_TASK_STATUSES = (TaskStatus.NOT_STARTED, TaskStatus.IN_PROGRESS, TaskStatus.COMPLETED)

_PRIZE_CYCLE = {
    PrizeStatus.AVAILABLE: PrizeAction("Request Prize", PrizeStatus.PENDING_REDEMPTION),
    PrizeStatus.PENDING_REDEMPTION: PrizeAction("Redeem Prize", PrizeStatus.REDEEMED),
    PrizeStatus.REDEEMED: PrizeAction("Make Prize Available", PrizeStatus.AVAILABLE),
}

UNKNOWN_PRIZE_STATUS_LABEL = "Unknown status"
PRIZE_PERMISSION_DENIED_LABEL = "You do not have permission to change the prize status"


def task_status_label(status: TaskStatus) -> str:
    return TASK_STATUS_LABELS.get(status, getattr(status, "value", str(status)))


def _as_role_set(roles: Iterable[Role | str]) -> RoleSet:
    return roles if isinstance(roles, RoleSet) else RoleSet(roles)


def get_available_task_status(
    current_status: TaskStatus,
    roles: Iterable[Role | str],
    is_assigned_to_caller: bool,
) -> List[StatusOption]:
    """Statuses the caller may move a task to, in lifecycle order.

    Admins get every status (backward moves included), an assigned
    department member gets everything short of verification, anyone else
    only sees the current status. The current status is always present so
    a selection control has a valid value.
    """
    role_set = _as_role_set(roles)
    if role_set.is_admin:
        statuses = list(TaskStatus)
    elif Role.DEPARTMENT_MEMBER in role_set and is_assigned_to_caller:
        statuses = list(_MEMBER_TASK_STATUSES)
    else:
        statuses = [current_status]

    options = [StatusOption(task_status_label(s), s) for s in statuses]
    if current_status not in statuses:
        options.append(StatusOption(task_status_label(current_status), current_status))
    return options


def get_next_prize_status(current_status: PrizeStatus, roles: Iterable[Role | str]) -> PrizeAction:
    """Next step in the prize cycle for an admin, or a denial label for anyone else."""
    if not _as_role_set(roles).is_admin:
        return PrizeAction(PRIZE_PERMISSION_DENIED_LABEL, current_status)
    return _PRIZE_CYCLE.get(current_status, PrizeAction(UNKNOWN_PRIZE_STATUS_LABEL, current_status))


def is_prize_transition_allowed(action: PrizeAction, current_status: PrizeStatus) -> bool:
    return action.label not in (PRIZE_PERMISSION_DENIED_LABEL, UNKNOWN_PRIZE_STATUS_LABEL) and (
        action.next_status != current_status
    )
