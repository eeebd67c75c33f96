from sqlalchemy import Boolean, Column, String, DateTime, Integer, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
from .session import Base
from ..domain.enums import PrizeStatus, Role, TaskStatus
import uuid


def gen_uuid():
    return str(uuid.uuid4())

def utcnow():
    return datetime.now(timezone.utc)

class User(Base):
    __tablename__ = "users"
    id = Column(String, primary_key=True, default=gen_uuid)
    email = Column(String, unique=True, nullable=False)
    user_name = Column(String, nullable=True)
    display_name = Column(String(200), nullable=True)
    member_number = Column(String, nullable=True)
    hashed_password = Column(String, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    organization_memberships = relationship("UserOrganization", back_populates="user", cascade="all, delete-orphan")
    department_memberships = relationship("UserDepartment", back_populates="user", cascade="all, delete-orphan")

class Organization(Base):
    __tablename__ = "organizations"
    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False)
    address = Column(String(500), nullable=True)
    contact_email = Column(String(100), nullable=True)
    contact_phone = Column(String(20), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=True)

    departments = relationship("Department", back_populates="organization", cascade="all, delete-orphan")
    memberships = relationship("UserOrganization", cascade="all, delete-orphan", passive_deletes=True)

class Department(Base):
    __tablename__ = "departments"
    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False)
    code = Column(String(20), nullable=True)
    description = Column(String(2000), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    organization_id = Column(Integer, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True)

    organization = relationship("Organization", back_populates="departments")
    tasks = relationship("Task", back_populates="department", cascade="all, delete-orphan", passive_deletes=True)
    prizes = relationship("Prize", cascade="all, delete-orphan", passive_deletes=True)
    task_links = relationship("TaskDepartment", cascade="all, delete-orphan", passive_deletes=True)
    memberships = relationship("UserDepartment", back_populates="department", cascade="all, delete-orphan", passive_deletes=True)

class UserOrganization(Base):
    __tablename__ = "user_organizations"
    __table_args__ = (UniqueConstraint("user_id", "organization_id"),)
    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    organization_id = Column(Integer, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True)
    role = Column(String, nullable=False, default=Role.ORGANIZATION_MEMBER.value)

    user = relationship("User", back_populates="organization_memberships")

class UserDepartment(Base):
    __tablename__ = "user_departments"
    __table_args__ = (UniqueConstraint("user_id", "department_id"),)
    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    department_id = Column(Integer, ForeignKey("departments.id", ondelete="CASCADE"), nullable=False, index=True)
    role = Column(String, nullable=False, default=Role.DEPARTMENT_MEMBER.value)

    user = relationship("User", back_populates="department_memberships")
    department = relationship("Department", back_populates="memberships")

class Task(Base):
    __tablename__ = "tasks"
    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(500), nullable=False)
    description = Column(String(2000), nullable=True)
    estimated_time_minutes = Column(Integer, nullable=False, default=0)
    due_date_utc = Column(DateTime, nullable=False, index=True)
    department_id = Column(Integer, ForeignKey("departments.id", ondelete="CASCADE"), nullable=False, index=True)
    creator_user_id = Column(String, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    assigned_user_id = Column(String, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    points_awarded = Column(Integer, nullable=False, default=0)
    status = Column(String, nullable=False, default=TaskStatus.NOT_STARTED.value, index=True)

    department = relationship("Department", back_populates="tasks")
    assigned_user = relationship("User", foreign_keys=[assigned_user_id])

class TaskDepartment(Base):
    __tablename__ = "task_departments"
    __table_args__ = (UniqueConstraint("task_id", "department_id"),)
    id = Column(Integer, primary_key=True, autoincrement=True)
    task_id = Column(Integer, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True)
    department_id = Column(Integer, ForeignKey("departments.id", ondelete="CASCADE"), nullable=False, index=True)

class Prize(Base):
    __tablename__ = "prizes"
    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(500), nullable=False)
    description = Column(String(2000), nullable=True)
    points_cost = Column(Integer, nullable=False, default=0)
    department_id = Column(Integer, ForeignKey("departments.id", ondelete="CASCADE"), nullable=False, index=True)
    creator_user_id = Column(String, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    assigned_user_id = Column(String, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    status = Column(String, nullable=False, default=PrizeStatus.AVAILABLE.value, index=True)
