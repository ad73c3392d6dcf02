"""Low-level HTTP client for the Descope management API.

Handles authentication headers, base URL resolution, and HTTP operations.
"""
from __future__ import annotations
import os
from typing import Optional, Dict, Any

import requests

from authz_admin.config.settings import DescopeConfig
from .exceptions import DescopeAPIError

REQUEST_TIMEOUT = 10
DEFAULT_BASE_URL = "https://api.descope.com"


def base_url_for_project(project_id: str) -> str:
    """Resolve the API base URL for a project.

    ``DESCOPE_BASE_URL`` wins when set. Otherwise project ids of 32 characters
    or more carry their region in characters 1..4.
    """
    override = os.environ.get("DESCOPE_BASE_URL")
    if override:
        return override.rstrip("/")
    if len(project_id) >= 32:
        region = project_id[1:5]
        return f"https://api.{region}.descope.com"
    return DEFAULT_BASE_URL


class DescopeClient:
    """HTTP client for the Descope management API.

    One client is built per logical operation; it holds no session or cache.

    Usage:
        client = DescopeClient(config)
        response = client.get("/v1/mgmt/tenant/all")
    """

    def __init__(self, config: DescopeConfig, base_url: Optional[str] = None):
        """Initialize Descope client.

        Args:
            config: Project credentials
            base_url: API base URL (defaults to the project's regional endpoint)
        """
        self.config = config
        self.base_url = (base_url or base_url_for_project(config.project_id)).rstrip("/")

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.config.project_id}:{self.config.management_key}",
            "Content-Type": "application/json",
        }

    def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Execute GET request and return the decoded JSON body.

        Args:
            path: API endpoint path (e.g., "/v1/mgmt/tenant/all")
            params: Query parameters

        Returns:
            Decoded JSON body (empty dict for empty responses)

        Raises:
            DescopeAPIError: On HTTP or transport error
        """
        url = f"{self.base_url}{path}"
        try:
            resp = requests.get(url, params=params, headers=self._headers(), timeout=REQUEST_TIMEOUT)
        except requests.RequestException as exc:
            raise DescopeAPIError(0, str(exc), path) from exc
        self._handle_error(resp, path)
        return self._decode(resp)

    def post(self, path: str, json: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Execute POST request and return the decoded JSON body.

        Args:
            path: API endpoint path
            json: JSON payload

        Returns:
            Decoded JSON body (empty dict for empty responses)

        Raises:
            DescopeAPIError: On HTTP or transport error
        """
        url = f"{self.base_url}{path}"
        try:
            resp = requests.post(url, json=json or {}, headers=self._headers(), timeout=REQUEST_TIMEOUT)
        except requests.RequestException as exc:
            raise DescopeAPIError(0, str(exc), path) from exc
        self._handle_error(resp, path)
        return self._decode(resp)

    @staticmethod
    def _decode(resp: requests.Response) -> Dict[str, Any]:
        if not resp.content:
            return {}
        try:
            return resp.json() or {}
        except ValueError:
            return {}

    @staticmethod
    def _handle_error(resp: requests.Response, path: str) -> None:
        """Centralized error handling for HTTP responses.

        Raises:
            DescopeAPIError: If response status indicates error
        """
        if resp.status_code < 400:
            return
        message = resp.text
        error_code = None
        try:
            body = resp.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            error_code = body.get("errorCode")
            message = body.get("errorDescription") or body.get("errorMessage") or message
        raise DescopeAPIError(resp.status_code, message, path, error_code)


def create_client(config: DescopeConfig) -> DescopeClient:
    """Build a fresh client for a single operation."""
    return DescopeClient(config)
