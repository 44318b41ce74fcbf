import logging
from typing import Any, Dict, List

from launchlog.core.errors import ForbiddenError, NotFoundError
from launchlog.storage.resilient_store import ResilientStore
from launchlog.types import Identity, UserAccount, UserRole

logger = logging.getLogger(__name__)


class AdminService:
    """Account management for users with the admin role"""

    @staticmethod
    def require_admin(store: ResilientStore, identity: Identity) -> UserAccount:
        # Role lives on the account, not in the token, so demotion takes effect immediately
        user = store.get_user_by_id(identity.user_id).value
        if user is None or user.role != UserRole.ADMIN:
            raise ForbiddenError()
        return user

    @staticmethod
    def list_users(store: ResilientStore) -> List[Dict[str, Any]]:
        return [
            {
                "id": user.id,
                "email": user.email,
                "name": user.name,
                "role": user.role.value,
                "createdAt": user.created_at.isoformat() if user.created_at else None,
            }
            for user in store.list_users().value
        ]

    @staticmethod
    def get_stats(store: ResilientStore) -> Dict[str, Any]:
        users = store.list_users()
        aggregates = store.list_aggregates()
        degraded = users.fallback or aggregates.fallback
        return {
            "totalUsers": len(users.value),
            "totalSessions": sum(len(aggregate.timer_sessions) for aggregate in aggregates.value),
            "totalTasks": sum(aggregate.tasks.total() for aggregate in aggregates.value),
            "systemStatus": "Fallback mode" if degraded else "Connected",
        }

    @staticmethod
    def delete_user(store: ResilientStore, admin: UserAccount, user_id: str) -> Dict[str, Any]:
        target = store.get_user_by_id(user_id).value
        if target is None:
            raise NotFoundError("User not found")
        if target.role == UserRole.ADMIN:
            raise ForbiddenError("Admin accounts cannot be deleted")

        store.delete_user(user_id)
        # The account's data goes with it
        store.reset(user_id)
        logger.info(f"Admin {admin.id} deleted user {user_id}")
        return {"success": True, "message": "User deleted successfully"}


admin_service = AdminService()
