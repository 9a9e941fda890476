"""Load Azure service principal credentials from an auth file.

Two file formats are understood:

* the JSON document written by ``az ad sp create-for-rbac --sdk-auth``
  (``clientId``, ``clientSecret``, ``tenantId``, ``subscriptionId``)
* the legacy properties file used by the Azure management libraries
  (``client=``, ``key=``, ``tenant=``, ``subscription=``)
"""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import structlog
from azure.identity import ClientSecretCredential

from .exceptions import AuthenticationFailure

logger = structlog.get_logger()

# Canonical field -> (JSON key, properties key)
_FIELDS = {
    "client_id": ("clientId", "client"),
    "client_secret": ("clientSecret", "key"),
    "tenant_id": ("tenantId", "tenant"),
    "subscription_id": ("subscriptionId", "subscription"),
}


@dataclass
class AzureCredentials:
    """Credential object plus the subscription it is scoped to."""

    credential: Any
    subscription_id: str


def parse_auth_file(text: str) -> dict[str, str]:
    """Parse auth file contents into canonical field names.

    Raises:
        AuthenticationFailure: If a required field is missing or empty
    """
    stripped = text.strip()
    if stripped.startswith("{"):
        try:
            raw = json.loads(stripped)
        except json.JSONDecodeError as e:
            raise AuthenticationFailure(f"Credentials file is not valid JSON: {e}") from e
        if not isinstance(raw, dict):
            raise AuthenticationFailure("Credentials file must contain a JSON object")
        index = 0
    else:
        raw = _parse_properties(stripped)
        index = 1

    values = {}
    missing = []
    for field, keys in _FIELDS.items():
        value = raw.get(keys[index])
        if not value:
            missing.append(keys[index])
            continue
        values[field] = str(value).strip()

    if missing:
        raise AuthenticationFailure(
            f"Credentials file is missing required keys: {', '.join(missing)}"
        )
    return values


def _parse_properties(text: str) -> dict[str, str]:
    """Parse ``key=value`` lines, ignoring blanks and comments."""
    result = {}
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        key, sep, value = line.partition("=")
        if not sep:
            continue
        # Values may contain '='
        result[key.strip()] = value.strip()
    return result


def load_credentials(auth_location: str | None) -> AzureCredentials:
    """Build a service principal credential from the auth file at ``auth_location``.

    Raises:
        AuthenticationFailure: If the location is unset or the file is
            missing, unreadable or incomplete
    """
    logger.info("Loading Azure credentials", auth_location=auth_location)
    if not auth_location:
        raise AuthenticationFailure("AZURE_AUTH_LOCATION environment variable is not set")

    path = Path(auth_location).expanduser()
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise AuthenticationFailure(f"Credentials file not found at {path}") from e
    except OSError as e:
        raise AuthenticationFailure(f"Cannot read credentials file {path}: {e}") from e

    values = parse_auth_file(text)
    credential = ClientSecretCredential(
        tenant_id=values["tenant_id"],
        client_id=values["client_id"],
        client_secret=values["client_secret"],
    )
    logger.info(
        "Loaded Azure credentials",
        client_id=values["client_id"],
        subscription_id=values["subscription_id"],
    )
    return AzureCredentials(credential=credential, subscription_id=values["subscription_id"])
