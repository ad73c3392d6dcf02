"""Configuration module for the authz admin tools."""
from .settings import (
    AppConfig,
    ConfigurationError,
    CredentialSource,
    DescopeConfig,
    load_audit_log_dir,
    load_audit_signing_key,
    load_configuration,
    load_settings,
)

__all__ = [
    "AppConfig",
    "ConfigurationError",
    "CredentialSource",
    "DescopeConfig",
    "load_audit_log_dir",
    "load_audit_signing_key",
    "load_configuration",
    "load_settings",
]
