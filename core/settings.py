"""
Runtime configuration loaded from the environment (and an optional YAML file).
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Dict, List, Mapping, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from .errors import ConfigError
from .models import MetafieldRequirement, ResourceType


logger = logging.getLogger(__name__)


DEFAULT_REQUIREMENTS: Dict[ResourceType, List[MetafieldRequirement]] = {
    ResourceType.PRODUCT: [MetafieldRequirement(namespace="custom", key="newsection")],
    ResourceType.COLLECTION: [MetafieldRequirement(namespace="custom", key="coleccion")],
    ResourceType.PAGE: [MetafieldRequirement(namespace="custom", key="familia")],
}


def _split_recipients(raw: Optional[str]) -> List[str]:
    return [part.strip() for part in (raw or "").split(",") if part.strip()]


class Settings(BaseModel):
    """All knobs the service reads at startup."""

    shop: str = ""
    admin_token: str = ""
    api_version: str = "2024-07"
    http_timeout: float = 30.0

    smtp_host: str = ""
    smtp_port: int = 587
    smtp_user: str = ""
    smtp_pass: str = ""
    report_from: str = ""
    report_to: List[str] = Field(default_factory=list)

    timezone: str = "Europe/Madrid"
    scan_cron: str = "0 9 * * 1"
    port: int = 3000
    report_dir: Path = Field(default_factory=lambda: Path(tempfile.gettempdir()))
    log_level: str = "INFO"
    metafields_config: Optional[Path] = None

    @field_validator("timezone")
    @classmethod
    def known_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"unknown timezone '{value}'") from None
        return value

    @property
    def sender(self) -> str:
        """``From`` address: ``REPORT_FROM_EMAIL``, else the SMTP login."""
        return self.report_from or self.smtp_user

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from ``env`` (defaults to ``os.environ``)."""
        env = os.environ if env is None else env

        values = {
            "shop": env.get("SHOPIFY_SHOP", ""),
            "admin_token": env.get("SHOPIFY_ADMIN_TOKEN", ""),
            "smtp_host": env.get("SMTP_HOST", ""),
            "smtp_user": env.get("SMTP_USER", ""),
            "smtp_pass": env.get("SMTP_PASS", ""),
            "report_from": env.get("REPORT_FROM_EMAIL", ""),
            "report_to": _split_recipients(env.get("REPORT_TO_EMAIL")),
        }
        optional = {
            "api_version": "SHOPIFY_API_VERSION",
            "http_timeout": "HTTP_TIMEOUT",
            "smtp_port": "SMTP_PORT",
            "timezone": "TIMEZONE",
            "scan_cron": "SCAN_CRON",
            "port": "PORT",
            "report_dir": "REPORT_DIR",
            "log_level": "LOG_LEVEL",
            "metafields_config": "METAFIELDS_CONFIG",
        }
        for field, var in optional.items():
            if env.get(var):
                values[field] = env[var]

        try:
            return cls(**values)
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration: {e}") from e


def load_requirements(
    path: Optional[Path] = None,
) -> Dict[ResourceType, List[MetafieldRequirement]]:
    """Return the required metafields per resource type.

    Without ``path`` the built-in defaults are used. A YAML file replaces the
    lists of the types it names; types it omits keep their defaults. An empty
    list disables checking for that type.
    """
    requirements = {rtype: list(reqs) for rtype, reqs in DEFAULT_REQUIREMENTS.items()}
    if path is None:
        return requirements

    path = Path(path)
    if not path.exists():
        raise ConfigError(f"Metafields config file not found: {path}")

    with path.open() as f:
        data = yaml.safe_load(f) or {}

    section = data.get("requirements")
    if not isinstance(section, dict):
        raise ConfigError(f"No 'requirements' mapping found in {path}")

    for type_name, entries in section.items():
        try:
            rtype = ResourceType(str(type_name).upper())
        except ValueError:
            raise ConfigError(f"Unknown resource type in {path}: {type_name}") from None
        try:
            requirements[rtype] = [MetafieldRequirement(**entry) for entry in entries or []]
        except (TypeError, ValidationError) as e:
            raise ConfigError(f"Invalid requirement for {rtype.value} in {path}: {e}") from e

    logger.info(
        "Loaded metafield requirements from %s: %s",
        path,
        {rtype.value: [r.label for r in reqs] for rtype, reqs in requirements.items()},
    )
    return requirements
