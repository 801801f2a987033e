"""Secrets Manager access for the Google service-account credentials.

Secret format contract: the secret string is a JSON object. The service
account key is looked up in this order and the first hit wins:

1. ``service_account``
2. ``serviceAccount``
3. ``google_service_account``
4. the object itself, when it carries ``client_email`` and ``private_key``

A nested value may be either an object or a JSON-encoded string.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional

import boto3

logger = logging.getLogger(__name__)

SERVICE_ACCOUNT_KEYS = ("service_account", "serviceAccount", "google_service_account")
REQUIRED_KEY_FIELDS = ("client_email", "private_key")


class SecretFormatError(RuntimeError):
    """Raised when a secret is missing or does not follow the expected format."""


def _secrets_client(region: str):
    return boto3.client("secretsmanager", region_name=region)


def fetch_secret_json(secret_id: str, region: str, *, client: Optional[Any] = None) -> Dict[str, Any]:
    secrets = client or _secrets_client(region)
    data = secrets.get_secret_value(SecretId=secret_id)
    secret_string = data.get("SecretString")
    if not secret_string:
        raise SecretFormatError("SecretString not found in Secrets Manager response")
    try:
        parsed = json.loads(secret_string)
    except json.JSONDecodeError as exc:
        raise SecretFormatError("SecretString must be valid JSON") from exc
    if not isinstance(parsed, dict):
        raise SecretFormatError("SecretString must be a JSON object")
    logger.info("secret loaded", extra={"secret_id": secret_id, "region": region})
    return parsed


def _as_mapping(value: Any) -> Optional[Dict[str, Any]]:
    if isinstance(value, dict):
        return value
    if isinstance(value, str) and value.strip():
        try:
            decoded = json.loads(value)
        except json.JSONDecodeError as exc:
            raise SecretFormatError("Nested service account must be valid JSON") from exc
        if isinstance(decoded, dict):
            return decoded
    return None


def _looks_like_key(candidate: Dict[str, Any]) -> bool:
    return all(candidate.get(field) for field in REQUIRED_KEY_FIELDS)


def extract_service_account(secret: Dict[str, Any]) -> Dict[str, Any]:
    for key in SERVICE_ACCOUNT_KEYS:
        if key not in secret:
            continue
        candidate = _as_mapping(secret[key])
        if candidate is not None and _looks_like_key(candidate):
            return candidate
    if _looks_like_key(secret):
        return secret
    raise SecretFormatError(
        "Secret must contain a service account key with client_email and private_key"
    )


def load_service_account_info(secret_id: str, region: str, *, client: Optional[Any] = None) -> Dict[str, Any]:
    return extract_service_account(fetch_secret_json(secret_id, region, client=client))
