"""
User management endpoints: admin gates and self-service rules.
"""

import pytest

from app.features.access.roles import RoleName
from app.models.task import Task
from app.models.user import User


def test_admin_lists_users(client, make_user, auth_headers):
    admin = make_user(RoleName.ADMIN)
    make_user(RoleName.EMPLOYEE)

    response = client.get("/api/users", headers=auth_headers(admin))

    assert response.status_code == 200
    assert len(response.json()["data"]) == 2


@pytest.mark.parametrize("role", [RoleName.MANAGER, RoleName.EMPLOYEE])
def test_below_admin_cannot_list_users(client, make_user, auth_headers, role):
    response = client.get("/api/users", headers=auth_headers(make_user(role)))

    assert response.status_code == 403


def test_employee_reads_own_record(client, make_user, auth_headers):
    employee = make_user(RoleName.EMPLOYEE)

    response = client.get(f"/api/users/{employee.id}", headers=auth_headers(employee))

    assert response.status_code == 200
    assert response.json()["data"]["email"] == employee.email


def test_employee_cannot_read_other_record(client, make_user, auth_headers):
    employee = make_user(RoleName.EMPLOYEE)
    other = make_user(RoleName.EMPLOYEE)

    response = client.get(f"/api/users/{other.id}", headers=auth_headers(employee))

    assert response.status_code == 403
    assert response.json()["message"] == "Access denied: You can only view your own profile"


def test_employee_probe_of_missing_user_is_forbidden_not_missing(client, make_user, auth_headers):
    employee = make_user(RoleName.EMPLOYEE)

    response = client.get("/api/users/0b7e4c1a-3f43-4c55-9a0e-5b9d3f0e8a11", headers=auth_headers(employee))

    assert response.status_code == 403


def test_manager_reads_any_record(client, make_user, auth_headers):
    manager = make_user(RoleName.MANAGER)
    employee = make_user(RoleName.EMPLOYEE)

    response = client.get(f"/api/users/{employee.id}", headers=auth_headers(manager))

    assert response.status_code == 200


def test_manager_reading_missing_user_gets_404(client, make_user, auth_headers):
    manager = make_user(RoleName.MANAGER)

    response = client.get("/api/users/0b7e4c1a-3f43-4c55-9a0e-5b9d3f0e8a11", headers=auth_headers(manager))

    assert response.status_code == 404
    assert response.json()["message"] == "User not found"


def test_employee_updates_own_name(client, make_user, auth_headers):
    employee = make_user(RoleName.EMPLOYEE)

    response = client.put(f"/api/users/{employee.id}", json={"name": "Renamed"}, headers=auth_headers(employee))

    assert response.status_code == 200
    assert response.json()["data"]["name"] == "Renamed"


def test_employee_cannot_update_other_user(client, make_user, auth_headers):
    employee = make_user(RoleName.EMPLOYEE)
    other = make_user(RoleName.EMPLOYEE)

    response = client.put(f"/api/users/{other.id}", json={"name": "Hijacked"}, headers=auth_headers(employee))

    assert response.status_code == 403
    assert response.json()["message"] == "Access denied: You can only update your own profile"


def test_employee_cannot_change_own_role(client, roles, make_user, auth_headers):
    employee = make_user(RoleName.EMPLOYEE)

    response = client.put(
        f"/api/users/{employee.id}",
        json={"role_id": roles["Admin"].id},
        headers=auth_headers(employee),
    )

    assert response.status_code == 403
    assert response.json()["message"] == "Access denied: You cannot change your role"


def test_admin_changes_role(client, roles, make_user, auth_headers):
    admin = make_user(RoleName.ADMIN)
    employee = make_user(RoleName.EMPLOYEE)

    response = client.put(
        f"/api/users/{employee.id}",
        json={"role_id": roles["Manager"].id},
        headers=auth_headers(admin),
    )

    assert response.status_code == 200
    assert response.json()["data"]["role"] == "Manager"


def test_update_rejects_taken_email(client, make_user, auth_headers):
    employee = make_user(RoleName.EMPLOYEE)
    other = make_user(RoleName.EMPLOYEE)

    response = client.put(f"/api/users/{employee.id}", json={"email": other.email}, headers=auth_headers(employee))

    assert response.status_code == 400
    assert response.json()["errors"] == ["User with this email already exists"]


@pytest.mark.parametrize("role", list(RoleName))
def test_nobody_deletes_own_account(client, make_user, auth_headers, role):
    user = make_user(role)

    response = client.delete(f"/api/users/{user.id}", headers=auth_headers(user))

    assert response.status_code == 400
    assert response.json()["message"] == "Cannot delete your own account"


def test_admin_deletes_other_user_and_their_tasks(client, make_user, make_task, auth_headers, db_session):
    admin = make_user(RoleName.ADMIN)
    employee = make_user(RoleName.EMPLOYEE)
    make_task(employee)
    employee_id = employee.id

    response = client.delete(f"/api/users/{employee_id}", headers=auth_headers(admin))

    assert response.status_code == 200
    assert db_session.query(User).filter(User.id == employee_id).first() is None
    assert db_session.query(Task).filter(Task.assigned_to == employee_id).count() == 0


def test_manager_cannot_delete_users(client, make_user, auth_headers):
    manager = make_user(RoleName.MANAGER)
    employee = make_user(RoleName.EMPLOYEE)

    response = client.delete(f"/api/users/{employee.id}", headers=auth_headers(manager))

    assert response.status_code == 403


def test_delete_missing_user(client, make_user, auth_headers):
    admin = make_user(RoleName.ADMIN)

    response = client.delete("/api/users/0b7e4c1a-3f43-4c55-9a0e-5b9d3f0e8a11", headers=auth_headers(admin))

    assert response.status_code == 404
