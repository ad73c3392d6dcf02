"""Settings loader with command-line, environment variable and Docker secrets integration."""
from __future__ import annotations
import enum
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

ENV_PROJECT_ID = "DESCOPE_PROJECT_ID"
ENV_MANAGEMENT_KEY = "DESCOPE_MANAGEMENT_KEY"
ENV_CREDENTIALS_DIR = "DESCOPE_CREDENTIALS_DIR"

PROJECT_ID_SECRET = "descope_project_id"
MANAGEMENT_KEY_SECRET = "descope_management_key"
AUDIT_SIGNING_KEY_SECRET = "audit_log_signing_key"

ENV_AUDIT_LOG_DIR = "AUDIT_LOG_DIR"
ENV_AUDIT_SIGNING_KEY = "AUDIT_LOG_SIGNING_KEY"
DEFAULT_AUDIT_LOG_DIR = ".runtime/audit"


class ConfigurationError(RuntimeError):
    """Credentials or settings could not be resolved."""


class CredentialSource(enum.Enum):
    """Where the project credentials were found."""
    COMMAND_LINE = "command_line"
    ENVIRONMENT = "environment"
    FILE = "file"


@dataclass(frozen=True)
class DescopeConfig:
    """Project credentials for the management API."""
    project_id: str
    management_key: str = field(repr=False)
    source: CredentialSource = CredentialSource.COMMAND_LINE

    def __post_init__(self):
        if not _is_valid_credential(self.project_id):
            raise ValueError("Project ID cannot be empty")
        if not _is_valid_credential(self.management_key):
            raise ValueError("Management key cannot be empty")

    def __repr__(self) -> str:
        return f"DescopeConfig(project_id={self.project_id!r}, management_key='***', source={self.source.name})"


def _is_valid_credential(value: Optional[str]) -> bool:
    return value is not None and bool(value.strip())


def _secret_dirs() -> list[Path]:
    dirs = [Path("/run/secrets")]
    custom = os.environ.get(ENV_CREDENTIALS_DIR)
    if custom:
        dirs.append(Path(custom).expanduser())
    return dirs


def _load_secret_from_file(secret_name: str) -> str | None:
    """
    Load secret from /run/secrets (Docker secrets pattern) or DESCOPE_CREDENTIALS_DIR.

    Args:
        secret_name: Name of the secret file

    Returns:
        Secret value or None if not found
    """
    for directory in _secret_dirs():
        secret_file = directory / secret_name
        if secret_file.exists() and secret_file.is_file():
            try:
                secret_value = secret_file.read_text().strip()
            except OSError as e:
                logger.warning("Failed to read %s: %s", secret_file, e)
                continue
            if secret_value:
                logger.debug("Loaded %s from %s", secret_name, directory)
                return secret_value
    return None


def load_configuration(cli_project_id: Optional[str] = None, cli_management_key: Optional[str] = None) -> DescopeConfig:
    """Resolve project credentials.

    Priority:
    1. Command-line arguments (both must be present)
    2. DESCOPE_PROJECT_ID / DESCOPE_MANAGEMENT_KEY environment variables
    3. Secret files in /run/secrets or DESCOPE_CREDENTIALS_DIR

    Raises:
        ConfigurationError: If no source provides both credentials
    """
    if _is_valid_credential(cli_project_id) and _is_valid_credential(cli_management_key):
        logger.info("Using Descope credentials from command-line arguments")
        return DescopeConfig(cli_project_id.strip(), cli_management_key.strip(), CredentialSource.COMMAND_LINE)

    env_project_id = os.environ.get(ENV_PROJECT_ID)
    env_management_key = os.environ.get(ENV_MANAGEMENT_KEY)
    if _is_valid_credential(env_project_id) and _is_valid_credential(env_management_key):
        logger.info("Using Descope credentials from environment variables")
        return DescopeConfig(env_project_id.strip(), env_management_key.strip(), CredentialSource.ENVIRONMENT)

    file_project_id = _load_secret_from_file(PROJECT_ID_SECRET)
    file_management_key = _load_secret_from_file(MANAGEMENT_KEY_SECRET)
    if file_project_id and file_management_key:
        logger.info("Using Descope credentials from secret files")
        return DescopeConfig(file_project_id, file_management_key, CredentialSource.FILE)

    raise ConfigurationError(
        "Could not load Descope configuration. Please provide credentials via "
        "command-line arguments, environment variables, or credential files."
    )


def load_audit_log_dir() -> str:
    return os.environ.get(ENV_AUDIT_LOG_DIR, "").strip() or DEFAULT_AUDIT_LOG_DIR


def load_audit_signing_key() -> str:
    """Audit HMAC key: AUDIT_LOG_SIGNING_KEY wins over a secret file; empty means unsigned."""
    if ENV_AUDIT_SIGNING_KEY in os.environ:
        return os.environ[ENV_AUDIT_SIGNING_KEY].strip()
    return _load_secret_from_file(AUDIT_SIGNING_KEY_SECRET) or ""


@dataclass
class AppConfig:
    """Configuration container for the HTTP admin surface."""
    descope: DescopeConfig
    api_token: str
    log_level: str = "INFO"
    audit_log_dir: str = DEFAULT_AUDIT_LOG_DIR
    audit_signing_key: str = field(default="", repr=False)


def load_settings() -> AppConfig:
    """Load HTTP surface settings from environment and /run/secrets."""
    descope = load_configuration()

    api_token = _load_secret_from_file("authz_admin_api_token") or os.environ.get("AUTHZ_ADMIN_API_TOKEN", "")
    if not api_token.strip():
        raise ConfigurationError("AUTHZ_ADMIN_API_TOKEN is required to serve the admin API.")

    log_level = os.environ.get("LOG_LEVEL", "INFO").strip().upper() or "INFO"
    audit_log_dir = load_audit_log_dir()

    logger.info("Settings loaded; project=%s; credentials=%s", descope.project_id, descope.source.name)
    return AppConfig(
        descope=descope,
        api_token=api_token.strip(),
        log_level=log_level,
        audit_log_dir=audit_log_dir,
        audit_signing_key=load_audit_signing_key(),
    )
