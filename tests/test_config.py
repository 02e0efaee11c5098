import pytest

from workspace_admin import config as config_module
from workspace_admin.config import WorkspaceAdminConfig, load_config
from workspace_admin.errors import ConfigurationError

ENV_VARS = (
    "GOOGLE_ADMIN_EMAIL",
    "GOOGLE_CUSTOMER_ID",
    "GOOGLE_SA_KEY_FILE",
    "GOOGLE_SA_KEY_SECRET",
    "WORKSPACE_MAX_WORKERS",
    "WORKSPACE_MAX_RETRIES",
    "WORKSPACE_BACKOFF_BASE",
    "WORKSPACE_BACKOFF_MAX",
)


@pytest.fixture
def env(monkeypatch):
    monkeypatch.setattr(config_module, "load_dotenv", lambda: None)
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_domain_is_taken_from_admin_email():
    assert WorkspaceAdminConfig(admin_email="root@corp.example.org").domain == "corp.example.org"


def test_rejects_admin_without_domain():
    with pytest.raises(ConfigurationError):
        WorkspaceAdminConfig(admin_email="root")


def test_rejects_zero_workers():
    with pytest.raises(ConfigurationError):
        WorkspaceAdminConfig(admin_email="root@example.com", max_workers=0)


def test_load_config_requires_admin_email(env):
    with pytest.raises(ConfigurationError, match="GOOGLE_ADMIN_EMAIL"):
        load_config()


def test_load_config_defaults(env):
    env.setenv("GOOGLE_ADMIN_EMAIL", "admin@example.com")
    cfg = load_config()
    assert cfg.customer_id is None
    assert cfg.sa_key_file is None
    assert cfg.max_workers == 10
    assert cfg.max_retries == 5
    assert cfg.backoff_max_seconds == 60.0


def test_load_config_reads_overrides(env):
    env.setenv("GOOGLE_ADMIN_EMAIL", "admin@example.com")
    env.setenv("GOOGLE_CUSTOMER_ID", "C042")
    env.setenv("GOOGLE_SA_KEY_SECRET", "gcp-secret://workspace-sa")
    env.setenv("WORKSPACE_MAX_WORKERS", "25")
    env.setenv("WORKSPACE_BACKOFF_BASE", "0.25")
    cfg = load_config()
    assert cfg.customer_id == "C042"
    assert cfg.sa_key_secret == "gcp-secret://workspace-sa"
    assert cfg.max_workers == 25
    assert cfg.backoff_base_seconds == 0.25


def test_load_config_rejects_non_integer_workers(env):
    env.setenv("GOOGLE_ADMIN_EMAIL", "admin@example.com")
    env.setenv("WORKSPACE_MAX_WORKERS", "lots")
    with pytest.raises(ConfigurationError, match="WORKSPACE_MAX_WORKERS"):
        load_config()
