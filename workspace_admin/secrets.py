"""Cloud-native secret resolution for service-account keys.

A service-account key can be kept out of the filesystem by storing it in
AWS Secrets Manager or GCP Secret Manager and pointing
GOOGLE_SA_KEY_SECRET at it.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any

from workspace_admin.errors import ConfigurationError

logger = logging.getLogger("workspace_admin.secrets")

# Prefixes that indicate a cloud secret reference
_AWS_PREFIX = "aws-secret://"
_GCP_PREFIX = "gcp-secret://"


def resolve_secret(value: str) -> str:
    """Resolve a secret reference to its plaintext value.

    Supported formats:
      - "aws-secret://secret-name"         -> AWS Secrets Manager
      - "aws-secret://secret-name#key"     -> AWS Secrets Manager (JSON key)
      - "gcp-secret://NAME"                -> GCP Secret Manager, latest version
      - "gcp-secret://projects/P/secrets/NAME/versions/V"
      - anything else                      -> returned as-is
    """
    if value.startswith(_AWS_PREFIX):
        return _resolve_aws_secret(value[len(_AWS_PREFIX):])
    if value.startswith(_GCP_PREFIX):
        return _resolve_gcp_secret(value[len(_GCP_PREFIX):])
    return value


def load_service_account_info(ref: str) -> dict[str, Any]:
    """Resolve ``ref`` and parse it as a service-account key document."""
    raw = resolve_secret(ref)
    try:
        info = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ConfigurationError(
            f"service account secret is not valid JSON: {exc.msg}"
        ) from exc
    if not isinstance(info, dict) or info.get("type") != "service_account":
        raise ConfigurationError("secret does not hold a service account key")
    logger.info("Loaded service account %s from secret", info.get("client_email"))
    return info


def _resolve_aws_secret(ref: str) -> str:
    """ref format: "secret-name" or "secret-name#json_key"."""
    import boto3

    secret_name, _, json_key = ref.partition("#")
    region = os.environ.get("AWS_REGION", "us-east-1")
    client = boto3.client("secretsmanager", region_name=region)

    resp = client.get_secret_value(SecretId=secret_name)
    secret_string = resp["SecretString"]

    if json_key:
        data = json.loads(secret_string)
        value = data[json_key]
        # A key document may be nested as an object rather than a string
        return value if isinstance(value, str) else json.dumps(value)
    return secret_string


def _resolve_gcp_secret(ref: str) -> str:
    from google.cloud import secretmanager

    if ref.startswith("projects/"):
        name = ref
    else:
        project = os.environ.get("GCP_PROJECT_ID", "") or _gcp_project_from_metadata()
        name = f"projects/{project}/secrets/{ref}/versions/latest"

    client = secretmanager.SecretManagerServiceClient()
    response = client.access_secret_version(request={"name": name})
    return response.payload.data.decode("UTF-8")


def _gcp_project_from_metadata() -> str:
    """Project ID from the metadata server (Cloud Run / GCE only)."""
    import requests

    try:
        resp = requests.get(
            "http://metadata.google.internal/computeMetadata/v1/project/project-id",
            headers={"Metadata-Flavor": "Google"},
            timeout=2,
        )
        resp.raise_for_status()
    except requests.RequestException as exc:
        raise ConfigurationError(
            "Cannot determine GCP project ID. Set GCP_PROJECT_ID env var."
        ) from exc
    return resp.text
