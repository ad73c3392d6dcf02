"""Descope role management operations."""
from __future__ import annotations
from typing import Any, Dict, List, Optional, Sequence

from authz_admin.core.models import Role

from .client import DescopeClient


def role_from_wire(payload: Dict[str, Any]) -> Role:
    return Role(
        name=payload.get("name", ""),
        description=payload.get("description") or "",
        permission_names=tuple(payload.get("permissionNames") or ()),
        tenant_id=payload.get("tenantId") or None,
    )


class RoleService:
    """Service for managing Descope roles (project-level or tenant-scoped)."""

    def __init__(self, client: DescopeClient):
        """Initialize role service.

        Args:
            client: Descope client for one operation
        """
        self.client = client

    def create(
        self,
        name: str,
        description: str = "",
        permission_names: Sequence[str] = (),
        tenant_id: Optional[str] = None,
    ) -> None:
        payload: Dict[str, Any] = {
            "name": name,
            "description": description or "",
            "permissionNames": list(permission_names),
        }
        if tenant_id:
            payload["tenantId"] = tenant_id
        self.client.post("/v1/mgmt/role/create", json=payload)

    def load_all(self) -> List[Role]:
        body = self.client.get("/v1/mgmt/role/all")
        return [role_from_wire(item) for item in body.get("roles") or []]

    def update(
        self,
        name: str,
        new_name: str,
        description: str = "",
        permission_names: Sequence[str] = (),
        tenant_id: Optional[str] = None,
    ) -> None:
        payload: Dict[str, Any] = {
            "name": name,
            "newName": new_name,
            "description": description or "",
            "permissionNames": list(permission_names),
        }
        if tenant_id:
            payload["tenantId"] = tenant_id
        self.client.post("/v1/mgmt/role/update", json=payload)

    def delete(self, name: str, tenant_id: Optional[str] = None) -> None:
        payload: Dict[str, Any] = {"name": name}
        if tenant_id:
            payload["tenantId"] = tenant_id
        self.client.post("/v1/mgmt/role/delete", json=payload)
