"""Unit tests for UserService with a mocked repository."""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from modules.identity.constants import Role
from modules.identity.context import CallerContext
from modules.identity.dtos import CreateUserDTO, UpdateUserDTO
from modules.identity.exceptions import (
    LastAdministrator,
    UserAlreadyExists,
    UserManagementForbidden,
    UserNotFound,
    WeakPassword,
)
from modules.identity.services import UserService

pytestmark = pytest.mark.unit

ADMIN = CallerContext(user_id=1, role=Role.ADMIN)
EMPLOYEE = CallerContext(user_id=2, role=Role.EMPLOYEE)
PASSWORD = "Atelier-Bois-2024!"


def _stub_user(pk=7, role=Role.EMPLOYEE, is_active=True):
    return SimpleNamespace(
        pk=pk,
        email="nina@example.com",
        username="nina@example.com",
        is_active=is_active,
        is_superuser=False,
        profile=SimpleNamespace(role=role),
    )


@pytest.fixture()
def repo():
    repo = MagicMock()
    repo.email_taken.return_value = False
    repo.has_authored_records.return_value = False
    repo.count_active_admins.return_value = 1
    return repo


@pytest.fixture()
def service(repo):
    return UserService(repository=repo)


class TestAuthorisation:
    def test_employee_cannot_list(self, service, repo):
        with pytest.raises(UserManagementForbidden):
            service.list_users(EMPLOYEE)
        repo.list.assert_not_called()

    def test_employee_cannot_create(self, service, repo):
        dto = CreateUserDTO(email="nina@example.com", password=PASSWORD, role="admin")
        with pytest.raises(UserManagementForbidden):
            service.create_user(dto, EMPLOYEE)
        repo.create_user.assert_not_called()

    def test_employee_cannot_promote(self, service, repo):
        with pytest.raises(UserManagementForbidden):
            service.update_user(2, UpdateUserDTO(role="admin"), EMPLOYEE)
        repo.set_role.assert_not_called()


class TestCreateUser:
    def test_creates_login_with_role(self, service, repo):
        dto = CreateUserDTO(email=" Nina@Example.com ", password=PASSWORD, role="admin")

        service.create_user(dto, ADMIN)

        repo.create_user.assert_called_once_with("nina@example.com", PASSWORD, "admin")

    def test_duplicate_email(self, service, repo):
        repo.email_taken.return_value = True
        dto = CreateUserDTO(email="nina@example.com", password=PASSWORD)

        with pytest.raises(UserAlreadyExists) as excinfo:
            service.create_user(dto, ADMIN)

        assert excinfo.value.field == "email"
        repo.create_user.assert_not_called()

    def test_common_password_rejected(self, service, repo):
        dto = CreateUserDTO(email="nina@example.com", password="password")

        with pytest.raises(WeakPassword) as excinfo:
            service.create_user(dto, ADMIN)

        assert excinfo.value.field == "password"
        repo.create_user.assert_not_called()


class TestUpdateUser:
    def test_role_change(self, service, repo):
        repo.get_by_id.return_value = _stub_user()

        service.update_user(7, UpdateUserDTO(role="admin"), ADMIN)

        repo.set_role.assert_called_once_with(7, "admin")

    def test_email_change_renames_login(self, service, repo):
        user = _stub_user()
        repo.get_by_id.return_value = user
        repo.save.side_effect = lambda entity: entity

        service.update_user(7, UpdateUserDTO(email="nina.r@example.com"), ADMIN)

        assert user.email == user.username == "nina.r@example.com"
        repo.email_taken.assert_called_once_with("nina.r@example.com", exclude_id=7)

    def test_last_admin_cannot_be_demoted(self, service, repo):
        repo.get_by_id.return_value = _stub_user(pk=1, role=Role.ADMIN)
        repo.count_active_admins.return_value = 0

        with pytest.raises(LastAdministrator):
            service.update_user(1, UpdateUserDTO(role="employee"), ADMIN)

        repo.save.assert_not_called()
        repo.set_role.assert_not_called()

    def test_admin_may_be_demoted_when_another_remains(self, service, repo):
        repo.get_by_id.return_value = _stub_user(pk=3, role=Role.ADMIN)

        service.update_user(3, UpdateUserDTO(role="employee"), ADMIN)

        repo.count_active_admins.assert_called_once_with(exclude_id=3)
        repo.set_role.assert_called_once_with(3, "employee")

    def test_unknown_user(self, service, repo):
        repo.get_by_id.return_value = None
        with pytest.raises(UserNotFound):
            service.update_user(99, UpdateUserDTO(is_active=False), ADMIN)


class TestDeleteUser:
    def test_user_without_records_is_removed(self, service, repo):
        repo.get_by_id.return_value = _stub_user()
        repo.delete.return_value = True

        assert service.delete_user(7, ADMIN) is True
        repo.delete.assert_called_once_with(7)

    def test_author_is_deactivated_instead(self, service, repo):
        user = _stub_user()
        repo.get_by_id.return_value = user
        repo.has_authored_records.return_value = True

        assert service.delete_user(7, ADMIN) is False

        assert user.is_active is False
        repo.save.assert_called_once_with(user)
        repo.delete.assert_not_called()

    def test_last_admin_cannot_be_removed(self, service, repo):
        repo.get_by_id.return_value = _stub_user(pk=1, role=Role.ADMIN)
        repo.count_active_admins.return_value = 0

        with pytest.raises(LastAdministrator):
            service.delete_user(1, ADMIN)
        repo.delete.assert_not_called()
