import logging
from typing import Any, Dict, List, Optional

from pydantic import EmailStr, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from launchlog.core.config import settings
from launchlog.core.errors import (
    DuplicateUserError,
    InvalidCredentialsError,
    InvalidTokenError,
    MissingTokenError,
    ValidationError,
)
from launchlog.core.security import create_access_token, decode_access_token, get_password_hash, verify_password
from launchlog.storage.resilient_store import ResilientStore
from launchlog.types import Identity, UserAccount, UserRole

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6
MIN_NAME_LENGTH = 2

_email_adapter = TypeAdapter(EmailStr)


def _normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def _email_errors(email: str) -> List[Dict[str, Any]]:
    try:
        _email_adapter.validate_python(email)
    except PydanticValidationError:
        return [{"field": "email", "msg": "A valid email is required"}]
    return []


class AuthService:
    """Registration, login and token checks on top of the resilient store"""

    @staticmethod
    def issue_token(user: UserAccount) -> str:
        return create_access_token(user.id, email=user.email, name=user.name)

    @staticmethod
    def register(store: ResilientStore, email: str, password: str, name: str) -> Dict[str, Any]:
        email = _normalize_email(email)
        name = (name or "").strip()

        errors = _email_errors(email)
        if len(password or "") < MIN_PASSWORD_LENGTH:
            errors.append({"field": "password", "msg": f"Password must be at least {MIN_PASSWORD_LENGTH} characters"})
        if len(name) < MIN_NAME_LENGTH:
            errors.append({"field": "name", "msg": f"Name must be at least {MIN_NAME_LENGTH} characters"})
        if errors:
            raise ValidationError("Invalid registration details", errors=errors)

        # Checked against whichever backend is serving right now
        if store.get_user_by_email(email).value is not None:
            raise DuplicateUserError()

        role = UserRole.ADMIN if email in settings.get_admin_emails() else UserRole.USER
        result = store.create_user(email, get_password_hash(password), name, role)
        user = result.value
        logger.info(f"Registered user {user.id} (role={user.role.value}, fallback={result.fallback})")

        return {"token": AuthService.issue_token(user), "user": user.public()}

    @staticmethod
    def login(store: ResilientStore, email: str, password: str) -> Dict[str, Any]:
        email = _normalize_email(email)
        errors = _email_errors(email)
        if not password:
            errors.append({"field": "password", "msg": "Password is required"})
        if errors:
            raise ValidationError("Invalid login details", errors=errors)

        user = store.get_user_by_email(email).value
        # One error for both cases so callers can't probe which emails exist
        if user is None or not verify_password(password, user.hashed_password):
            raise InvalidCredentialsError()

        return {"token": AuthService.issue_token(user), "user": user.public()}

    @staticmethod
    def verify_token(token: Optional[str]) -> Identity:
        if not token:
            raise MissingTokenError()
        payload = decode_access_token(token)
        if payload is None:
            raise InvalidTokenError()
        user_id = payload.get("userId") or payload.get("sub")
        if not user_id:
            raise InvalidTokenError()
        return Identity(user_id=str(user_id), email=payload.get("email"), name=payload.get("name"))


auth_service = AuthService()
