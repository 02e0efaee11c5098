"""Configuration via environment variables with cloud-native secret support.

Supports:
  - Environment variables and .env files (local dev)
  - A service-account key file (GOOGLE_SA_KEY_FILE)
  - A service-account key stored in AWS or GCP Secret Manager
    (GOOGLE_SA_KEY_SECRET=aws-secret://name#key or gcp-secret://name)
  - Application Default Credentials / Workload Identity when neither is set
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from workspace_admin.errors import ConfigurationError


@dataclass(frozen=True)
class WorkspaceAdminConfig:
    admin_email: str
    customer_id: Optional[str] = None  # None = look it up from the admin user
    sa_key_file: Optional[str] = None
    sa_key_secret: Optional[str] = None
    max_workers: int = 10
    max_retries: int = 5
    backoff_base_seconds: float = 2.0
    backoff_max_seconds: float = 60.0
    users_page_size: int = 500
    groups_page_size: int = 200
    members_page_size: int = 200
    licenses_page_size: int = 1000

    def __post_init__(self) -> None:
        if "@" not in self.admin_email:
            raise ConfigurationError(
                f"admin email {self.admin_email!r} is not an email address"
            )
        if self.max_workers < 1:
            raise ConfigurationError("max_workers must be at least 1")
        if self.max_retries < 0:
            raise ConfigurationError("max_retries cannot be negative")

    @property
    def domain(self) -> str:
        return self.admin_email.split("@", 1)[1]


def _int_env(name: str, default: int) -> int:
    raw = os.environ.get(name, "")
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from None


def _float_env(name: str, default: float) -> float:
    raw = os.environ.get(name, "")
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from None


def load_config() -> WorkspaceAdminConfig:
    """Load configuration from environment variables.

    GOOGLE_ADMIN_EMAIL is required: it is the user the service account
    impersonates and the source of the primary domain.
    """
    load_dotenv()

    admin_email = os.environ.get("GOOGLE_ADMIN_EMAIL", "")
    if not admin_email:
        raise ConfigurationError("GOOGLE_ADMIN_EMAIL environment variable is required")

    return WorkspaceAdminConfig(
        admin_email=admin_email,
        customer_id=os.environ.get("GOOGLE_CUSTOMER_ID") or None,
        sa_key_file=os.environ.get("GOOGLE_SA_KEY_FILE") or None,
        sa_key_secret=os.environ.get("GOOGLE_SA_KEY_SECRET") or None,
        max_workers=_int_env("WORKSPACE_MAX_WORKERS", 10),
        max_retries=_int_env("WORKSPACE_MAX_RETRIES", 5),
        backoff_base_seconds=_float_env("WORKSPACE_BACKOFF_BASE", 2.0),
        backoff_max_seconds=_float_env("WORKSPACE_BACKOFF_MAX", 60.0),
    )
