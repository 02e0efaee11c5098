"""Credential construction for domain-wide delegated Admin SDK access."""

from __future__ import annotations

import logging
from typing import Sequence

import google.auth
from google.oauth2 import service_account

from workspace_admin.config import WorkspaceAdminConfig
from workspace_admin.secrets import load_service_account_info

logger = logging.getLogger("workspace_admin.credentials")

DIRECTORY_SCOPES = [
    "https://www.googleapis.com/auth/admin.directory.user",
    "https://www.googleapis.com/auth/admin.directory.group",
    "https://www.googleapis.com/auth/admin.directory.group.member",
]

LICENSING_SCOPES = [
    "https://www.googleapis.com/auth/apps.licensing",
]


def build_credentials(config: WorkspaceAdminConfig, scopes: Sequence[str]):
    """Return credentials acting as ``config.admin_email``.

    Order of precedence: key file, key held in a secret manager, then
    Application Default Credentials.
    """
    if config.sa_key_file:
        # Local dev / explicit service account key file
        creds = service_account.Credentials.from_service_account_file(
            config.sa_key_file, scopes=list(scopes)
        )
    elif config.sa_key_secret:
        info = load_service_account_info(config.sa_key_secret)
        creds = service_account.Credentials.from_service_account_info(
            info, scopes=list(scopes)
        )
    else:
        # Cloud Run / Workload Identity: use Application Default Credentials
        creds, _ = google.auth.default(scopes=list(scopes))

    if hasattr(creds, "with_subject"):
        creds = creds.with_subject(config.admin_email)
    else:
        logger.warning(
            "Credentials of type %s cannot impersonate %s; "
            "calls run as the default identity",
            type(creds).__name__,
            config.admin_email,
        )
    return creds
