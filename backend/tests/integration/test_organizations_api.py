from orgtasks.db import models
from orgtasks.domain.enums import Role


def test_enterprise_admin_lists_and_creates_organizations(client, world):
    r = client.get("/v1/api/organization/all", headers=world.admin)
    assert r.status_code == 200
    assert {o["name"] for o in r.json()} == {"Org One", "Org Two"}

    r = client.put("/v1/api/organization", json={"name": "Org Three", "contactEmail": "c@example.com"}, headers=world.admin)
    assert r.status_code == 200, r.text
    org = r.json()
    assert org["isActive"] is True
    assert org["updatedAt"] is None

    # the creator can administer the new organization right away
    r = client.post("/v1/api/department", json={"name": "Ops", "organizationId": org["id"]}, headers=world.admin)
    assert r.status_code == 200, r.text

    r = client.put("/v1/api/organization", json={"id": org["id"], "name": "Org 3"}, headers=world.admin)
    assert r.json()["name"] == "Org 3"
    assert r.json()["updatedAt"] is not None


def test_members_cannot_manage_organizations(client, world):
    assert client.get("/v1/api/organization/all", headers=world.member).status_code == 403
    assert client.put("/v1/api/organization", json={"name": "Nope"}, headers=world.member).status_code == 403
    assert client.delete(f"/v1/api/organization/{world.org_id}", headers=world.member).status_code == 403


def test_get_organization_visibility(client, world):
    assert client.get(f"/v1/api/organization/{world.org_id}", headers=world.member).status_code == 200
    assert client.get(f"/v1/api/organization/{world.org_id}", headers=world.outsider).status_code == 403
    r = client.get("/v1/api/organization/9999", headers=world.admin)
    assert r.status_code == 404
    assert r.json()["detail"]["code"] == "ORGANIZATION_NOT_FOUND"


def test_department_listing_and_management(client, world):
    r = client.get(f"/v1/api/department/{world.org_id}", headers=world.member)
    assert [d["name"] for d in r.json()] == ["Dept One", "Dept Two"]
    assert client.get(f"/v1/api/department/{world.org_id}", headers=world.outsider).status_code == 403

    r = client.post("/v1/api/department", json={"name": "Kitchen", "code": "K", "organizationId": world.org_id}, headers=world.member)
    assert r.status_code == 403

    r = client.post("/v1/api/department", json={"name": "Kitchen", "code": "K", "organizationId": world.org_id}, headers=world.admin)
    assert r.status_code == 200
    dept_id = r.json()["id"]
    assert client.delete(f"/v1/api/department/{dept_id}", headers=world.admin).status_code == 204
    assert client.delete(f"/v1/api/department/{dept_id}", headers=world.admin).status_code == 404


def test_organization_membership_roles_are_scoped(client, world):
    body = {"userId": world.outsider_id, "organizationId": world.org_id, "role": "DepartmentAdmin"}
    r = client.post("/v1/api/AppUserOrganization", json=body, headers=world.admin)
    assert r.status_code == 400
    assert r.json()["detail"]["code"] == "INVALID_ROLE"

    body["role"] = "OrganizationAdmin"
    r = client.post("/v1/api/AppUserOrganization", json=body, headers=world.admin)
    assert r.status_code == 200, r.text
    membership = r.json()
    assert membership["role"] == "OrganizationAdmin"

    # outsider now administers org one
    assert client.get(f"/v1/api/users/organizations/{world.org_id}", headers=world.outsider).status_code == 200

    assert client.delete(f"/v1/api/AppUserOrganization/{membership['id']}", headers=world.member).status_code == 403
    assert client.delete(f"/v1/api/AppUserOrganization/{membership['id']}", headers=world.admin).status_code == 204


def test_membership_for_unknown_user_is_404(client, world):
    body = {"userId": "missing", "organizationId": world.org_id}
    r = client.post("/v1/api/AppUserOrganization", json=body, headers=world.admin)
    assert r.status_code == 404
    assert r.json()["detail"]["code"] == "USER_NOT_FOUND"


def test_department_membership_requires_organization_membership(client, world):
    body = {"userId": world.outsider_id, "departmentId": world.dept_id, "role": "DepartmentMember"}
    r = client.post("/v1/api/AppUserDepartment", json=body, headers=world.admin)
    assert r.status_code == 400
    assert r.json()["detail"]["code"] == "USER_NOT_IN_ORGANIZATION"


def test_department_admin_adds_member_and_role_updates_in_place(client, world, make_user):
    user_id, headers = make_user("new@example.com", org_id=world.org_id)
    body = {"userId": user_id, "departmentId": world.dept_id}
    first = client.post("/v1/api/AppUserDepartment", json=body, headers=world.admin).json()
    assert first["role"] == "DepartmentMember"
    assert client.get(f"/v1/api/Task/ByDepartment/{world.dept_id}", headers=headers).status_code == 200

    body["role"] = Role.DEPARTMENT_ADMIN.value
    second = client.post("/v1/api/AppUserDepartment", json=body, headers=world.admin).json()
    assert second["id"] == first["id"]
    assert second["role"] == "DepartmentAdmin"

    body["role"] = "EnterpriseAdmin"
    assert client.post("/v1/api/AppUserDepartment", json=body, headers=world.admin).status_code == 400

    assert client.post("/v1/api/AppUserDepartment", json=body, headers=world.member).status_code == 403
    assert client.delete(f"/v1/api/AppUserDepartment/{first['id']}", headers=world.admin).status_code == 204


def test_deleting_department_removes_its_tasks_links_and_memberships(client, world, make_task, db):
    own = make_task(world.admin, world.dept_two_id, name="Dept two chore")
    shared = make_task(world.admin, world.dept_id, name="Shared chore")
    r = client.post("/v1/api/TaskDepartment", json={"taskId": shared["id"], "departmentId": world.dept_two_id}, headers=world.admin)
    assert r.status_code == 200, r.text
    r = client.post("/v1/api/Prize", json={"name": "Pizza", "pointsCost": 5, "departmentId": world.dept_two_id}, headers=world.admin)
    assert r.status_code == 200, r.text

    assert client.delete(f"/v1/api/department/{world.dept_two_id}", headers=world.admin).status_code == 204

    assert client.get(f"/v1/api/Task/{own['id']}", headers=world.admin).status_code == 404
    r = client.get(f"/v1/api/Task/{shared['id']}", headers=world.admin)
    assert r.status_code == 200, r.text
    assert db.query(models.TaskDepartment).count() == 0
    assert db.query(models.Prize).filter(models.Prize.department_id == world.dept_two_id).count() == 0

    info = client.get("/v1/api/users/info", headers=world.other_member)
    assert info.status_code == 200, info.text
    assert info.json()["departments"] == []


def test_deleted_organization_grants_nothing_to_a_later_one(client, world, db):
    org = client.put("/v1/api/organization", json={"name": "Short lived"}, headers=world.admin).json()
    body = {"userId": world.member_id, "organizationId": org["id"], "role": "OrganizationAdmin"}
    assert client.post("/v1/api/AppUserOrganization", json=body, headers=world.admin).status_code == 200
    dept = client.post("/v1/api/department", json={"name": "Temp", "organizationId": org["id"]}, headers=world.admin).json()

    assert client.delete(f"/v1/api/organization/{org['id']}", headers=world.admin).status_code == 204
    assert client.get(f"/v1/api/organization/{org['id']}", headers=world.admin).status_code == 404
    assert db.query(models.Department).filter(models.Department.id == dept["id"]).count() == 0
    assert db.query(models.UserOrganization).filter(models.UserOrganization.organization_id == org["id"]).count() == 0

    info = client.get("/v1/api/users/info", headers=world.member).json()
    assert [o["organizationId"] for o in info["organizations"]] == [world.org_id]

    fresh = client.put("/v1/api/organization", json={"name": "Newcomer"}, headers=world.admin).json()
    assert client.get(f"/v1/api/users/organizations/{fresh['id']}", headers=world.member).status_code == 403
    assert client.get(f"/v1/api/organization/{fresh['id']}", headers=world.member).status_code == 403
