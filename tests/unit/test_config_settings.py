import pytest

from authz_admin.config import settings
from authz_admin.config.settings import ConfigurationError, CredentialSource, DescopeConfig


@pytest.fixture()
def secrets_dir(monkeypatch, tmp_path):
    directory = tmp_path / "secrets"
    directory.mkdir()
    monkeypatch.setenv(settings.ENV_CREDENTIALS_DIR, str(directory))
    return directory


def write_secret_files(directory, project_id="Pfile", management_key="Kfile"):
    (directory / settings.PROJECT_ID_SECRET).write_text(f"{project_id}\n")
    (directory / settings.MANAGEMENT_KEY_SECRET).write_text(f"{management_key}\n")


def test_command_line_wins_over_environment(monkeypatch):
    monkeypatch.setenv("DESCOPE_PROJECT_ID", "Penv")
    monkeypatch.setenv("DESCOPE_MANAGEMENT_KEY", "Kenv")

    cfg = settings.load_configuration(" Pcli ", "Kcli")

    assert cfg.project_id == "Pcli"
    assert cfg.management_key == "Kcli"
    assert cfg.source is CredentialSource.COMMAND_LINE


def test_partial_command_line_falls_back_to_environment(monkeypatch):
    monkeypatch.setenv("DESCOPE_PROJECT_ID", "Penv")
    monkeypatch.setenv("DESCOPE_MANAGEMENT_KEY", "Kenv")

    cfg = settings.load_configuration("Pcli", None)

    assert cfg.project_id == "Penv"
    assert cfg.source is CredentialSource.ENVIRONMENT


def test_environment_wins_over_files(monkeypatch, secrets_dir):
    write_secret_files(secrets_dir)
    monkeypatch.setenv("DESCOPE_PROJECT_ID", "Penv")
    monkeypatch.setenv("DESCOPE_MANAGEMENT_KEY", "Kenv")

    assert settings.load_configuration().source is CredentialSource.ENVIRONMENT


def test_blank_environment_is_ignored(monkeypatch, secrets_dir):
    write_secret_files(secrets_dir)
    monkeypatch.setenv("DESCOPE_PROJECT_ID", "   ")
    monkeypatch.setenv("DESCOPE_MANAGEMENT_KEY", "Kenv")

    cfg = settings.load_configuration()

    assert cfg.source is CredentialSource.FILE
    assert cfg.project_id == "Pfile"
    assert cfg.management_key == "Kfile"


def test_no_source_raises(monkeypatch, tmp_path):
    monkeypatch.setattr(settings, "_secret_dirs", lambda: [tmp_path])

    with pytest.raises(ConfigurationError, match="Could not load Descope configuration"):
        settings.load_configuration()


def test_management_key_is_masked():
    cfg = DescopeConfig("P2abc", "K2secret")

    assert "K2secret" not in repr(cfg)
    assert "***" in repr(cfg)


@pytest.mark.parametrize("project_id, management_key", [("", "K"), ("P", "  "), (None, "K")])
def test_empty_credentials_are_rejected(project_id, management_key):
    with pytest.raises(ValueError):
        DescopeConfig(project_id, management_key)


def test_load_settings_requires_api_token(monkeypatch):
    monkeypatch.setenv("DESCOPE_PROJECT_ID", "Penv")
    monkeypatch.setenv("DESCOPE_MANAGEMENT_KEY", "Kenv")
    monkeypatch.setattr(settings, "_secret_dirs", lambda: [])

    with pytest.raises(ConfigurationError, match="AUTHZ_ADMIN_API_TOKEN"):
        settings.load_settings()


def test_load_settings(monkeypatch):
    monkeypatch.setenv("DESCOPE_PROJECT_ID", "Penv")
    monkeypatch.setenv("DESCOPE_MANAGEMENT_KEY", "Kenv")
    monkeypatch.setenv("AUTHZ_ADMIN_API_TOKEN", " token ")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.setattr(settings, "_secret_dirs", lambda: [])

    cfg = settings.load_settings()

    assert cfg.api_token == "token"
    assert cfg.log_level == "DEBUG"
    assert cfg.descope.project_id == "Penv"
    assert cfg.audit_signing_key == "test-audit-key"
    assert "test-audit-key" not in repr(cfg)


def test_audit_log_dir_default(monkeypatch):
    monkeypatch.delenv(settings.ENV_AUDIT_LOG_DIR)

    assert settings.load_audit_log_dir() == settings.DEFAULT_AUDIT_LOG_DIR


def test_audit_log_dir_from_environment(monkeypatch, tmp_path):
    monkeypatch.setenv(settings.ENV_AUDIT_LOG_DIR, str(tmp_path))

    assert settings.load_audit_log_dir() == str(tmp_path)


def test_audit_signing_key_file_used_when_env_unset(monkeypatch, secrets_dir):
    monkeypatch.delenv(settings.ENV_AUDIT_SIGNING_KEY)
    (secrets_dir / settings.AUDIT_SIGNING_KEY_SECRET).write_text("file-key\n")

    assert settings.load_audit_signing_key() == "file-key"


def test_audit_signing_key_environment_wins(monkeypatch, secrets_dir):
    monkeypatch.setenv(settings.ENV_AUDIT_SIGNING_KEY, " env-key ")
    (secrets_dir / settings.AUDIT_SIGNING_KEY_SECRET).write_text("file-key\n")

    assert settings.load_audit_signing_key() == "env-key"
