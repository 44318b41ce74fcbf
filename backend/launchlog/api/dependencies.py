from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from launchlog.core.config import settings
from launchlog.services.admin_service import admin_service
from launchlog.services.auth_service import auth_service
from launchlog.storage.resilient_store import ResilientStore
from launchlog.types import Identity, UserAccount

# Extracts the token from "Authorization: Bearer <token>"
# auto_error=False so missing tokens reach our own error taxonomy instead of FastAPI's
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="api/auth/login", auto_error=False)


def get_store(request: Request) -> ResilientStore:
    """The store selected at startup, shared by every request"""
    return request.app.state.store


def _default_identity() -> Identity:
    return Identity(user_id=settings.DEFAULT_USER_ID)


async def get_current_identity(token: str | None = Depends(oauth2_scheme)) -> Identity:
    """
    Identity for routes that require a bearer token.

    Missing token -> 401, bad signature or expired -> 403.
    """
    if settings.DISABLE_AUTH:
        # Dev bypass - everything belongs to the shared default owner
        return _default_identity()
    return auth_service.verify_token(token)


async def get_owner_id(token: str | None = Depends(oauth2_scheme)) -> str:
    """
    Owner for routes where the token is optional.

    No token writes to the shared default owner; a valid token scopes the
    call to that user; a token that fails verification is still rejected.
    """
    if settings.DISABLE_AUTH or not token:
        return settings.DEFAULT_USER_ID
    return auth_service.verify_token(token).user_id


async def get_admin_user(
    identity: Identity = Depends(get_current_identity),
    store: ResilientStore = Depends(get_store),
) -> UserAccount:
    return admin_service.require_admin(store, identity)
