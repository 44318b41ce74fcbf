from fastapi import APIRouter, Depends
from launchlog.api.dependencies import get_admin_user, get_store
from launchlog.services.admin_service import admin_service
from launchlog.storage.resilient_store import ResilientStore
from launchlog.types import UserAccount

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/users")
def list_users(
    admin: UserAccount = Depends(get_admin_user),
    store: ResilientStore = Depends(get_store),
):
    """All accounts, newest first, without password hashes"""
    return admin_service.list_users(store)


@router.get("/stats")
def get_stats(
    admin: UserAccount = Depends(get_admin_user),
    store: ResilientStore = Depends(get_store),
):
    return admin_service.get_stats(store)


@router.delete("/users/{user_id}")
def delete_user(
    user_id: str,
    admin: UserAccount = Depends(get_admin_user),
    store: ResilientStore = Depends(get_store),
):
    """Delete an account and its data. Cannot be undone."""
    return admin_service.delete_user(store, admin, user_id)
