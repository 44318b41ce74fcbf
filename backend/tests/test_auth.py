from datetime import datetime, timedelta, timezone

import pytest

from launchlog.core.config import settings
from launchlog.core.errors import (
    DuplicateUserError,
    InvalidCredentialsError,
    InvalidTokenError,
    MissingTokenError,
    ValidationError,
)
from launchlog.core.security import create_access_token, decode_access_token
from launchlog.services.auth_service import auth_service
from launchlog.types import UserRole


def test_register_then_login_yields_matching_claims(store):
    registered = auth_service.register(store, "a@x.com", "secret1", "Ann")
    logged_in = auth_service.login(store, "a@x.com", "secret1")

    assert logged_in["user"] == registered["user"]
    identity = auth_service.verify_token(logged_in["token"])
    assert identity.user_id == registered["user"]["id"]
    assert identity.email == "a@x.com"
    assert identity.name == "Ann"


def test_password_is_stored_hashed(store):
    auth_service.register(store, "a@x.com", "secret1", "Ann")
    account = store.get_user_by_email("a@x.com").value
    assert account.hashed_password != "secret1"
    assert account.hashed_password.startswith("$2")


def test_email_is_normalized(store):
    auth_service.register(store, "  Ann@X.com ", "secret1", "Ann")
    assert auth_service.login(store, "ann@x.com", "secret1")["user"]["email"] == "ann@x.com"


def test_duplicate_registration_fails(store):
    auth_service.register(store, "a@x.com", "secret1", "Ann")
    with pytest.raises(DuplicateUserError):
        auth_service.register(store, "A@x.com", "another1", "Ann Again")


@pytest.mark.parametrize(
    "email, password, name, field",
    [
        ("not-an-email", "secret1", "Ann", "email"),
        ("a@x.com", "short", "Ann", "password"),
        ("a@x.com", "secret1", " A ", "name"),
    ],
)
def test_register_validation(store, email, password, name, field):
    with pytest.raises(ValidationError) as exc_info:
        auth_service.register(store, email, password, name)
    assert [error["field"] for error in exc_info.value.errors] == [field]


def test_wrong_password_and_unknown_email_look_the_same(store):
    auth_service.register(store, "a@x.com", "secret1", "Ann")

    with pytest.raises(InvalidCredentialsError) as wrong_password:
        auth_service.login(store, "a@x.com", "wrong-password")
    with pytest.raises(InvalidCredentialsError) as unknown_email:
        auth_service.login(store, "nobody@x.com", "secret1")

    assert wrong_password.value.message == unknown_email.value.message == "Invalid credentials"


def test_admin_emails_get_admin_role(store, monkeypatch):
    monkeypatch.setattr(settings, "ADMIN_EMAILS", "boss@x.com, other@x.com")
    auth_service.register(store, "Boss@x.com", "secret1", "Boss")
    auth_service.register(store, "a@x.com", "secret1", "Ann")

    assert store.get_user_by_email("boss@x.com").value.role == UserRole.ADMIN
    assert store.get_user_by_email("a@x.com").value.role == UserRole.USER


def test_token_carries_account_claims_and_expires_after_a_day():
    before = datetime.now(timezone.utc)
    payload = decode_access_token(create_access_token("u1", email="a@x.com", name="Ann"))

    assert set(payload) == {"sub", "userId", "email", "name", "exp"}
    assert payload["sub"] == payload["userId"] == "u1"
    assert (payload["email"], payload["name"]) == ("a@x.com", "Ann")
    assert settings.ACCESS_TOKEN_EXPIRE_MINUTES == 24 * 60
    lifetime = datetime.fromtimestamp(payload["exp"], timezone.utc) - before
    assert timedelta(hours=23, minutes=59) <= lifetime <= timedelta(hours=24, minutes=1)


def test_verify_token_errors():
    with pytest.raises(MissingTokenError):
        auth_service.verify_token(None)
    with pytest.raises(InvalidTokenError):
        auth_service.verify_token("garbage")

    expired = create_access_token("u1", expires_delta=timedelta(seconds=-1))
    with pytest.raises(InvalidTokenError):
        auth_service.verify_token(expired)


def test_token_signed_with_another_secret_is_rejected(monkeypatch):
    monkeypatch.setattr(settings, "SECRET_KEY", "someone-elses-secret")
    forged = create_access_token("u1")
    monkeypatch.undo()

    with pytest.raises(InvalidTokenError):
        auth_service.verify_token(forged)
