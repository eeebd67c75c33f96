"""Development seed data.

Creates two users, one organization with two departments, their memberships,
a sample task and a sample prize. Does nothing once any user exists.
"""
from datetime import datetime, timedelta, timezone
import logging

from sqlalchemy.orm import Session

from ..db import models
from ..domain.enums import PrizeStatus, Role, TaskStatus
from .auth_service import hash_password

logger = logging.getLogger(__name__)

SEED_PASSWORD = "ChangeMeFast1"
FIRST_USER_EMAIL = "first.user@example.com"
SECOND_USER_EMAIL = "another.user@example.com"


def seed_database(db: Session) -> bool:
    """Populate an empty database; returns False when data already exists."""
    if db.query(models.User).first():
        return False

    first = models.User(
        email=FIRST_USER_EMAIL,
        user_name=FIRST_USER_EMAIL,
        display_name="First User",
        hashed_password=hash_password(SEED_PASSWORD),
    )
    second = models.User(
        email=SECOND_USER_EMAIL,
        user_name=SECOND_USER_EMAIL,
        display_name="Another User",
        hashed_password=hash_password(SEED_PASSWORD),
    )
    org = models.Organization(name="Organization One", is_active=True)
    db.add_all([first, second, org])
    db.flush()

    dept_one = models.Department(name="Department One", organization_id=org.id, is_active=True)
    dept_two = models.Department(name="Department Two", organization_id=org.id, is_active=True)
    db.add_all([dept_one, dept_two])
    db.flush()

    db.add_all([
        models.UserOrganization(user_id=first.id, organization_id=org.id, role=Role.ENTERPRISE_ADMIN.value),
        models.UserOrganization(user_id=second.id, organization_id=org.id, role=Role.ORGANIZATION_MEMBER.value),
        models.UserDepartment(user_id=first.id, department_id=dept_one.id, role=Role.DEPARTMENT_ADMIN.value),
        models.UserDepartment(user_id=second.id, department_id=dept_one.id, role=Role.DEPARTMENT_MEMBER.value),
    ])
    db.add(
        models.Task(
            name="Clean the club house",
            description="Sweep floors and empty the bins",
            estimated_time_minutes=60,
            due_date_utc=datetime.now(timezone.utc) + timedelta(days=7),
            department_id=dept_one.id,
            creator_user_id=first.id,
            assigned_user_id=second.id,
            points_awarded=100,
            status=TaskStatus.NOT_STARTED.value,
        )
    )
    db.add(
        models.Prize(
            name="Cinema tickets",
            description="Two tickets for any screening",
            points_cost=250,
            department_id=dept_one.id,
            creator_user_id=first.id,
            status=PrizeStatus.AVAILABLE.value,
        )
    )
    db.commit()
    logger.info("seeded database with organization %s", org.id)
    return True
