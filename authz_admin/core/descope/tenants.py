"""Descope tenant management operations."""
from __future__ import annotations
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from authz_admin.core.models import Tenant

from .client import DescopeClient


def _timestamp(value: Any) -> Optional[datetime]:
    """Convert a backend epoch-seconds value into an aware datetime."""
    if isinstance(value, (int, float)) and value > 0:
        return datetime.fromtimestamp(value, tz=timezone.utc)
    return None


def tenant_from_wire(payload: Dict[str, Any]) -> Tenant:
    return Tenant(
        id=payload.get("id", ""),
        name=payload.get("name", ""),
        created_at=_timestamp(payload.get("createdTime")),
    )


class TenantService:
    """Service for managing Descope tenants."""

    def __init__(self, client: DescopeClient):
        self.client = client

    def load_all(self) -> List[Tenant]:
        body = self.client.get("/v1/mgmt/tenant/all")
        return [tenant_from_wire(item) for item in body.get("tenants") or []]

    def create(self, tenant_id: str, name: str) -> str:
        """Create a tenant with a caller-chosen id.

        Returns:
            Tenant id reported by the backend (falls back to ``tenant_id``)
        """
        body = self.client.post("/v1/mgmt/tenant/create", json={"name": name, "id": tenant_id})
        return body.get("id") or tenant_id
