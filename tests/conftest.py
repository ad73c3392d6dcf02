"""Pytest shared fixtures."""
import pathlib
import sys
from unittest.mock import MagicMock

# Add project root to Python path
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest
import requests

from authz_admin.config.settings import AppConfig, CredentialSource, DescopeConfig


# ─────────────────────────────────────────────────────────────────────────────
# Network Guard Rails
# ─────────────────────────────────────────────────────────────────────────────
@pytest.fixture(autouse=True)
def _block_network(monkeypatch):
    """Fail any test that would reach the Descope API for real."""

    def _stub_post(url, *args, **kwargs):
        raise RuntimeError(f"Unexpected HTTP POST in unit test: {url}")

    def _stub_get(url, *args, **kwargs):
        raise RuntimeError(f"Unexpected HTTP GET in unit test: {url}")

    monkeypatch.setattr(requests, "post", _stub_post)
    monkeypatch.setattr(requests, "get", _stub_get)


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch, tmp_path):
    """Keep credentials and audit output of the host out of tests."""
    for name in (
        "DESCOPE_PROJECT_ID",
        "DESCOPE_MANAGEMENT_KEY",
        "DESCOPE_CREDENTIALS_DIR",
        "DESCOPE_BASE_URL",
        "AUTHZ_ADMIN_API_TOKEN",
    ):
        monkeypatch.delenv(name, raising=False)

    monkeypatch.setenv("AUDIT_LOG_DIR", str(tmp_path / "audit"))
    monkeypatch.setenv("AUDIT_LOG_SIGNING_KEY", "test-audit-key")


# ─────────────────────────────────────────────────────────────────────────────
# Configuration and backend doubles
# ─────────────────────────────────────────────────────────────────────────────
@pytest.fixture()
def descope_config():
    return DescopeConfig("P2abc", "K2secret", CredentialSource.COMMAND_LINE)


@pytest.fixture()
def audit_dir(tmp_path):
    """Directory the CLI and the API write audit events to during a test."""
    return tmp_path / "audit"


@pytest.fixture()
def app_config(descope_config, audit_dir):
    return AppConfig(descope=descope_config, api_token="test-api-token", audit_log_dir=str(audit_dir),
                     audit_signing_key="test-audit-key")


@pytest.fixture()
def fake_client(monkeypatch):
    """MagicMock standing in for DescopeClient in every service module.

    Configure ``fake_client.get.return_value`` / ``fake_client.post.side_effect``
    per test.
    """
    from authz_admin.core import authz_service, migration_service, provisioning_service

    client = MagicMock(name="DescopeClient")
    client.get.return_value = {}
    client.post.return_value = {}
    for module in (authz_service, migration_service, provisioning_service):
        monkeypatch.setattr(module, "create_client", lambda config: client)
    return client


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests (requires a Descope project)"
    )
