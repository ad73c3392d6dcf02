"""Descope user management operations."""
from __future__ import annotations
from typing import Any, Dict, List, Optional

from .client import DescopeClient
from .exceptions import DescopeAPIError


class UserService:
    """Service for managing Descope users."""

    def __init__(self, client: DescopeClient):
        """Initialize user service.

        Args:
            client: Descope client for one operation
        """
        self.client = client

    def load(self, login_id: str) -> Optional[Dict[str, Any]]:
        """Return the user registered under ``login_id``, or None if not found."""
        try:
            body = self.client.get("/v1/mgmt/user", params={"loginid": login_id})
        except DescopeAPIError as exc:
            if exc.is_not_found:
                return None
            raise
        return body.get("user") or None

    def create(self, login_id: str, email: Optional[str] = None, tenant_id: Optional[str] = None) -> Dict[str, Any]:
        """Create a user, optionally associated with one tenant.

        Returns:
            User representation from the backend
        """
        payload: Dict[str, Any] = {"loginId": login_id}
        if email:
            payload["email"] = email
        if tenant_id:
            payload["userTenants"] = [{"tenantId": tenant_id}]
        body = self.client.post("/v1/mgmt/user/create", json=payload)
        return body.get("user") or {}

    def create_batch(self, users: List[Dict[str, Any]]) -> Dict[str, List[Dict[str, Any]]]:
        """Create several users in one call.

        Args:
            users: Batch user records (may carry ``hashedPassword``)

        Returns:
            ``{"createdUsers": [...], "failedUsers": [...]}``; both lists are
            always present
        """
        body = self.client.post("/v1/mgmt/user/create/batch", json={"users": users})
        return {
            "createdUsers": list(body.get("createdUsers") or []),
            "failedUsers": list(body.get("failedUsers") or []),
        }
