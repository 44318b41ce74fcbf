import logging
from typing import Any, Dict, Optional

import httpx

from launchlog.client.local_storage import LocalStorage

logger = logging.getLogger(__name__)

TOKEN_KEY = "token"
USER_KEY = "user"


class ApiError(Exception):
    """A call to the LaunchLog API did not succeed.

    status_code is None when the server was never reached.
    """

    def __init__(self, status_code: Optional[int], message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message

    @property
    def is_permanent(self) -> bool:
        """True when retrying the same request can't help (bad request, not found ...)"""
        if self.status_code is None:
            return False
        # Auth failures are fixed by signing in again, so they are worth retrying later
        return 400 <= self.status_code < 500 and self.status_code not in (401, 403)


class ApiService:
    """Thin HTTP client over the LaunchLog API, one method per endpoint"""

    def __init__(self, client: httpx.Client, storage: LocalStorage):
        self.client = client
        self.storage = storage

    def _auth_headers(self) -> Dict[str, str]:
        token = self.storage.get_item(TOKEN_KEY)
        return {"Authorization": f"Bearer {token}"} if token else {}

    def request(self, method: str, endpoint: str, json: Any = None) -> Any:
        try:
            response = self.client.request(method, endpoint, json=json, headers=self._auth_headers())
        except httpx.HTTPError as e:
            logger.error(f"API request failed: {method} {endpoint}: {e}")
            raise ApiError(None, str(e)) from e

        if response.is_error:
            try:
                message = response.json().get("error") or f"HTTP error! status: {response.status_code}"
            except ValueError:
                message = f"HTTP error! status: {response.status_code}"
            logger.error(f"API request failed: {method} {endpoint}: {response.status_code} {message}")
            raise ApiError(response.status_code, message)

        return response.json()

    # -- Auth ---------------------------------------------------------------

    def _remember(self, result: Dict[str, Any]) -> Dict[str, Any]:
        self.storage.set_item(TOKEN_KEY, result["token"])
        self.storage.set_json(USER_KEY, result["user"])
        return result

    def register(self, email: str, password: str, name: str) -> Dict[str, Any]:
        return self._remember(self.request("POST", "/api/auth/register", {"email": email, "password": password, "name": name}))

    def login(self, email: str, password: str) -> Dict[str, Any]:
        return self._remember(self.request("POST", "/api/auth/login", {"email": email, "password": password}))

    def logout(self) -> None:
        self.storage.remove_item(TOKEN_KEY)
        self.storage.remove_item(USER_KEY)

    # -- User data ----------------------------------------------------------

    def get_user_data(self) -> Dict[str, Any]:
        return self.request("GET", "/api/user-data")

    def save_timer_session(self, session: Dict[str, Any]) -> Dict[str, Any]:
        return self.request("POST", "/api/timer-sessions", {"session": session})

    def update_tasks(self, tasks: Dict[str, Any]) -> Dict[str, Any]:
        return self.request("PUT", "/api/tasks", {"tasks": tasks})

    def save_job(self, job: Dict[str, Any]) -> Dict[str, Any]:
        return self.request("POST", "/api/jobs", {"job": job})

    def update_job(self, job_id: str, updated_job: Dict[str, Any]) -> Dict[str, Any]:
        return self.request("PUT", f"/api/jobs/{job_id}", {"updatedJob": updated_job})

    def delete_job(self, job_id: str) -> Dict[str, Any]:
        return self.request("DELETE", f"/api/jobs/{job_id}")

    def update_dashboard(self, dashboard_data: Dict[str, Any]) -> Dict[str, Any]:
        return self.request("PUT", "/api/dashboard", {"dashboardData": dashboard_data})

    def get_insights(self) -> Dict[str, Any]:
        return self.request("GET", "/api/insights")

    def reset_all_data(self) -> Dict[str, Any]:
        return self.request("DELETE", "/api/reset")

    # -- Admin --------------------------------------------------------------

    def list_users(self) -> list:
        return self.request("GET", "/api/admin/users")

    def get_stats(self) -> Dict[str, Any]:
        return self.request("GET", "/api/admin/stats")

    def delete_user(self, user_id: str) -> Dict[str, Any]:
        return self.request("DELETE", f"/api/admin/users/{user_id}")
