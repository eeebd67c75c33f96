import os, sys
import pytest
from fastapi.testclient import TestClient
import tempfile
from types import SimpleNamespace

# backend/ first on sys.path so the local orgtasks package is imported
backend_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if backend_root not in sys.path:
    sys.path.insert(0, backend_root)

_db_dir = tempfile.mkdtemp(prefix="orgtasks-tests-")
os.environ.setdefault("DATABASE_URL", f"sqlite+pysqlite:///{os.path.join(_db_dir, 'test.db')}")

from orgtasks.main import app  # noqa: E402
from orgtasks.db.session import engine, Base, SessionLocal  # noqa: E402
from orgtasks.db import models  # noqa: E402
from orgtasks.domain.enums import Role  # noqa: E402
from orgtasks.services.auth_service import create_access_token, hash_password  # noqa: E402

PASSWORD = "Passw0rdOk"


@pytest.fixture(scope="function")  # fresh DB per test
def client():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    return TestClient(app)


@pytest.fixture
def db(client):
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


def auth_headers(user_id: str) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user_id)}"}


def add_user(db, email, org_id=None, org_role=Role.ORGANIZATION_MEMBER, dept_id=None, dept_role=None):
    user = models.User(email=email, user_name=email, display_name=email.split("@")[0], hashed_password=hash_password(PASSWORD))
    db.add(user)
    db.flush()
    if org_id is not None:
        db.add(models.UserOrganization(user_id=user.id, organization_id=org_id, role=Role(org_role).value))
    if dept_id is not None and dept_role is not None:
        db.add(models.UserDepartment(user_id=user.id, department_id=dept_id, role=Role(dept_role).value))
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def world(db):
    """Two organizations; org one has two departments.

    admin: EnterpriseAdmin of org one and DepartmentAdmin of dept one
    member: DepartmentMember of dept one
    other_member: DepartmentMember of dept two
    outsider: member of org two only
    """
    org = models.Organization(name="Org One")
    other_org = models.Organization(name="Org Two")
    db.add_all([org, other_org])
    db.flush()
    dept = models.Department(name="Dept One", organization_id=org.id)
    dept_two = models.Department(name="Dept Two", organization_id=org.id)
    db.add_all([dept, dept_two])
    db.commit()

    admin = add_user(db, "admin@example.com", org.id, Role.ENTERPRISE_ADMIN, dept.id, Role.DEPARTMENT_ADMIN)
    member = add_user(db, "member@example.com", org.id, Role.ORGANIZATION_MEMBER, dept.id, Role.DEPARTMENT_MEMBER)
    other_member = add_user(db, "other@example.com", org.id, Role.ORGANIZATION_MEMBER, dept_two.id, Role.DEPARTMENT_MEMBER)
    outsider = add_user(db, "outsider@example.com", other_org.id, Role.ORGANIZATION_MEMBER)

    return SimpleNamespace(
        org_id=org.id,
        other_org_id=other_org.id,
        dept_id=dept.id,
        dept_two_id=dept_two.id,
        admin_id=admin.id,
        member_id=member.id,
        other_member_id=other_member.id,
        outsider_id=outsider.id,
        admin=auth_headers(admin.id),
        member=auth_headers(member.id),
        other_member=auth_headers(other_member.id),
        outsider=auth_headers(outsider.id),
    )


def create_task(client, headers, department_id, **overrides):
    body = {
        "name": "Paint the fence",
        "dueDateUtc": "2030-01-01T12:00:00",
        "departmentId": department_id,
        "pointsAwarded": 10,
    }
    body.update(overrides)
    r = client.post("/v1/api/Task", json=body, headers=headers)
    assert r.status_code == 200, r.text
    return r.json()


@pytest.fixture
def make_task(client):
    def _make(headers, department_id, **overrides):
        return create_task(client, headers, department_id, **overrides)
    return _make


@pytest.fixture
def make_user(db):
    def _make(email, **kwargs):
        user = add_user(db, email, **kwargs)
        return user.id, auth_headers(user.id)
    return _make
