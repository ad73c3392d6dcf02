"""Descope application operations (inbound apps and federated SSO apps)."""
from __future__ import annotations
from typing import Any, Dict, List, Optional

from .client import DescopeClient


class ApplicationService:
    """Service for managing Descope inbound (third-party) applications."""

    def __init__(self, client: DescopeClient):
        self.client = client

    def load_all(self) -> List[Dict[str, Any]]:
        body = self.client.get("/v1/mgmt/thirdparty/apps/load")
        return list(body.get("apps") or [])

    def create(self, name: str, description: str = "") -> str:
        """Create an inbound application and return its id."""
        body = self.client.post(
            "/v1/mgmt/thirdparty/app/create",
            json={"name": name, "description": description or ""},
        )
        return body.get("id", "")


class SsoApplicationService:
    """Service for managing Descope federated (SSO) applications."""

    def __init__(self, client: DescopeClient):
        self.client = client

    def load_all(self) -> List[Dict[str, Any]]:
        body = self.client.get("/v1/mgmt/sso/idp/apps/load")
        return list(body.get("apps") or [])

    def load(self, app_id: str) -> Dict[str, Any]:
        return self.client.get("/v1/mgmt/sso/idp/app/load", params={"id": app_id})

    def create_oidc(self, name: str, description: str = "", login_page_url: str = "") -> str:
        """Create an OIDC federated application and return its id."""
        payload = {
            "name": name,
            "description": description or "",
            "loginPageUrl": login_page_url or "",
            "enabled": True,
        }
        body = self.client.post("/v1/mgmt/sso/idp/app/oidc/create", json=payload)
        return body.get("id", "")

    def create_saml(
        self,
        name: str,
        description: str = "",
        login_page_url: str = "",
        *,
        metadata_url: Optional[str] = None,
        entity_id: Optional[str] = None,
        acs_url: Optional[str] = None,
        certificate: str = "",
    ) -> str:
        """Create a SAML federated application and return its id.

        The service provider is described either by ``metadata_url`` or by the
        ``entity_id`` / ``acs_url`` pair.
        """
        payload: Dict[str, Any] = {
            "name": name,
            "description": description or "",
            "loginPageUrl": login_page_url or "",
            "enabled": True,
            "useMetadataInfo": bool(metadata_url),
        }
        if metadata_url:
            payload["metadataUrl"] = metadata_url
        else:
            payload["entityId"] = entity_id or ""
            payload["acsUrl"] = acs_url or ""
            payload["certificate"] = certificate or ""
        body = self.client.post("/v1/mgmt/sso/idp/app/saml/create", json=payload)
        return body.get("id", "")
