"""Domain enumerations for strong typing & validation.

Values are the member names so they round-trip unchanged through JSON and
the string status columns.
"""
from enum import Enum


class TaskStatus(str, Enum):
    NOT_STARTED = "NotStarted"
    IN_PROGRESS = "InProgress"
    COMPLETED = "Completed"
    VERIFIED_COMPLETED = "VerifiedCompleted"


class PrizeStatus(str, Enum):
    AVAILABLE = "Available"
    PENDING_REDEMPTION = "PendingRedemption"
    REDEEMED = "Redeemed"


class Role(str, Enum):
    DEPARTMENT_ADMIN = "DepartmentAdmin"
    DEPARTMENT_MEMBER = "DepartmentMember"
    ORGANIZATION_MEMBER = "OrganizationMember"
    ORGANIZATION_ADMIN = "OrganizationAdmin"
    ENTERPRISE_ADMIN = "EnterpriseAdmin"
    NONE = "None"
