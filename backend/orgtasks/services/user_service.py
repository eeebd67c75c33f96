from dataclasses import dataclass, field
from typing import List, Optional
import logging

from sqlalchemy.orm import Session

from ..db import models
from ..errors import ConflictError
from ..repositories.membership_repository import MembershipRepository, SqlAlchemyMembershipRepository
from . import points_service

logger = logging.getLogger(__name__)


class UserNotFound(Exception):
    pass


@dataclass
class UserInfo:
    user: models.User
    organizations: List[models.UserOrganization] = field(default_factory=list)
    departments: List[models.UserDepartment] = field(default_factory=list)
    points: int = 0

    @property
    def organization_ids(self) -> List[int]:
        return [m.organization_id for m in self.organizations]


class UserService:
    def __init__(self, repository: Optional[MembershipRepository] = None):
        self.repository = repository or SqlAlchemyMembershipRepository()

    def get_user(self, db: Session, user_id: str) -> models.User:
        user = db.query(models.User).filter(models.User.id == user_id).first()
        if not user:
            raise UserNotFound()
        return user

    def get_user_info(self, db: Session, user_id: str) -> UserInfo:
        user = self.get_user(db, user_id)
        return UserInfo(
            user=user,
            organizations=self.repository.list_user_organizations(db, user_id),
            departments=self.repository.list_user_departments(db, user_id),
            points=points_service.total_points(db, user_id),
        )

    def list_in_organization(self, db: Session, organization_id: int) -> List[models.User]:
        return self.repository.list_users_in_organization(db, organization_id)

    def list_in_department(self, db: Session, department_id: int) -> List[models.User]:
        return self.repository.list_users_in_department(db, department_id)

    def update_user(
        self,
        db: Session,
        user_id: str,
        email: Optional[str] = None,
        user_name: Optional[str] = None,
        display_name: Optional[str] = None,
        member_number: Optional[str] = None,
    ) -> models.User:
        user = self.get_user(db, user_id)
        if email is not None and email != user.email:
            taken = db.query(models.User).filter(models.User.email == email, models.User.id != user_id).first()
            if taken:
                raise ConflictError("EMAIL_IN_USE", "Email already in use.")
            user.email = email
        if user_name is not None:
            user.user_name = user_name
        if display_name is not None:
            user.display_name = display_name
        if member_number is not None:
            user.member_number = member_number
        db.commit()
        db.refresh(user)
        return user

    def delete_user(self, db: Session, user_id: str) -> None:
        user = self.get_user(db, user_id)
        db.delete(user)
        db.commit()
        logger.info("deleted user %s", user_id)
