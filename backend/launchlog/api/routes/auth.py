from fastapi import APIRouter, Depends, status
from pydantic import BaseModel
from launchlog.api.dependencies import get_current_identity, get_store
from launchlog.core.errors import NotFoundError
from launchlog.services.auth_service import auth_service
from launchlog.storage.resilient_store import ResilientStore
from launchlog.types import Identity

router = APIRouter(prefix="/auth", tags=["auth"])


# Presence and type only - the service owns the real rules
class RegisterRequest(BaseModel):
    email: str
    password: str
    name: str


class LoginRequest(BaseModel):
    email: str
    password: str


class PublicUser(BaseModel):
    id: str
    email: str
    name: str


class AuthResponse(BaseModel):
    message: str
    token: str
    user: PublicUser


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(payload: RegisterRequest, store: ResilientStore = Depends(get_store)):
    """Register a new user and sign them in"""
    result = auth_service.register(store, payload.email, payload.password, payload.name)
    return {"message": "User created successfully", **result}


@router.post("/login", response_model=AuthResponse)
def login(payload: LoginRequest, store: ResilientStore = Depends(get_store)):
    """Exchange email and password for a fresh token"""
    result = auth_service.login(store, payload.email, payload.password)
    return {"message": "Login successful", **result}


@router.get("/me", response_model=PublicUser)
def get_current_user_info(
    identity: Identity = Depends(get_current_identity),
    store: ResilientStore = Depends(get_store),
):
    """Get current user information"""
    user = store.get_user_by_id(identity.user_id).value
    if user is None:
        # Deleted after the token was issued, or the dev bypass owner
        raise NotFoundError("User not found")
    return user.public()
