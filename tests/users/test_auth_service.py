import pytest
from werkzeug.security import generate_password_hash

from src.eventflow.eventflow.core.enums import Role
from src.eventflow.eventflow.core.exceptions import AuthenticationError, AuthorizationError, ValidationError
from src.eventflow.eventflow.users.service import AuthService, UserService
from tests.fakes import InMemoryUsers


def test_signup_creates_unapproved_manager():
    users = InMemoryUsers()
    s_user = AuthService(users).sign_up("Lead@Org.test", "secret1")

    assert s_user.role == Role.MANAGER
    assert s_user.is_approved is False
    assert users.get_by_email("lead@org.test") is not None


def test_signup_rejects_duplicate_email_and_short_password():
    users = InMemoryUsers()
    auth = AuthService(users)
    auth.sign_up("lead@org.test", "secret1")

    with pytest.raises(ValidationError):
        auth.sign_up("lead@org.test", "secret2")
    with pytest.raises(ValidationError):
        auth.sign_up("other@org.test", "123")


def test_authenticate():
    users = InMemoryUsers()
    users.create_user(
        email="admin@org.test", password_hash=generate_password_hash("pw123456"), role=Role.ADMIN, is_approved=True
    )
    auth = AuthService(users)

    s_user = auth.authenticate("Admin@Org.test", "pw123456")
    assert s_user.role == Role.ADMIN and s_user.is_approved

    with pytest.raises(AuthenticationError):
        auth.authenticate("admin@org.test", "wrong")
    with pytest.raises(AuthenticationError):
        auth.authenticate("nobody@org.test", "pw123456")


def test_placeholder_hash_never_authenticates():
    users = InMemoryUsers()
    users.create_user(email="m@org.test", password_hash="CHANGE_ME", role=Role.MANAGER, is_approved=True)
    with pytest.raises(AuthenticationError):
        AuthService(users).authenticate("m@org.test", "CHANGE_ME")


def test_admin_approves_manager_and_reload_sees_it():
    users = InMemoryUsers()
    auth = AuthService(users)
    manager = auth.sign_up("lead@org.test", "secret1")

    approved = UserService(users).set_approval(current_role=Role.ADMIN, user_id=manager.user_id, is_approved=True)

    assert approved.is_approved is True
    assert auth.reload(manager.user_id).is_approved is True


def test_only_admin_may_approve():
    users = InMemoryUsers()
    manager = AuthService(users).sign_up("lead@org.test", "secret1")
    with pytest.raises(AuthorizationError):
        UserService(users).set_approval(current_role=Role.MANAGER, user_id=manager.user_id, is_approved=True)
