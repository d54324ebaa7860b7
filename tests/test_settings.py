"""Tests for core.settings."""

from pathlib import Path

import pytest

from core.errors import ConfigError
from core.models import MetafieldRequirement, ResourceType
from core.settings import DEFAULT_REQUIREMENTS, Settings, load_requirements


def test_from_env_defaults():
    settings = Settings.from_env({})
    assert settings.shop == ""
    assert settings.api_version == "2024-07"
    assert settings.smtp_port == 587
    assert settings.port == 3000
    assert settings.timezone == "Europe/Madrid"
    assert settings.scan_cron == "0 9 * * 1"
    assert settings.report_to == []
    assert settings.metafields_config is None


def test_from_env_parses_values():
    settings = Settings.from_env({
        "SHOPIFY_SHOP": "demo.myshopify.com",
        "SHOPIFY_ADMIN_TOKEN": "shpat_x",
        "SMTP_PORT": "2525",
        "PORT": "8080",
        "REPORT_TO_EMAIL": " a@example.com, ,b@example.com ",
        "REPORT_DIR": "/var/reports",
    })
    assert settings.shop == "demo.myshopify.com"
    assert settings.smtp_port == 2525
    assert settings.port == 8080
    assert settings.report_to == ["a@example.com", "b@example.com"]
    assert settings.report_dir == Path("/var/reports")


def test_from_env_invalid_number():
    with pytest.raises(ConfigError):
        Settings.from_env({"SMTP_PORT": "not-a-port"})


def test_load_requirements_defaults():
    requirements = load_requirements(None)
    assert requirements == DEFAULT_REQUIREMENTS
    assert requirements[ResourceType.PAGE][0].label == "custom.familia"


def test_load_requirements_yaml_override(tmp_path):
    config = tmp_path / "metafields.yml"
    config.write_text(
        "requirements:\n"
        "  product:\n"
        "    - {namespace: custom, key: newsection}\n"
        "    - {namespace: seo, key: hidden}\n"
        "  COLLECTION: []\n"
    )

    requirements = load_requirements(config)

    assert requirements[ResourceType.PRODUCT] == [
        MetafieldRequirement(namespace="custom", key="newsection"),
        MetafieldRequirement(namespace="seo", key="hidden"),
    ]
    assert requirements[ResourceType.COLLECTION] == []
    assert requirements[ResourceType.PAGE] == DEFAULT_REQUIREMENTS[ResourceType.PAGE]


def test_load_requirements_missing_file(tmp_path):
    with pytest.raises(ConfigError):
        load_requirements(tmp_path / "nope.yml")


def test_load_requirements_unknown_type(tmp_path):
    config = tmp_path / "metafields.yml"
    config.write_text("requirements:\n  ARTICLE: []\n")
    with pytest.raises(ConfigError, match="ARTICLE"):
        load_requirements(config)


def test_from_env_unknown_timezone():
    with pytest.raises(ConfigError, match="Mars/Base"):
        Settings.from_env({"TIMEZONE": "Mars/Base"})


def test_sender_prefers_report_from():
    settings = Settings.from_env({"SMTP_USER": "login@example.com", "REPORT_FROM_EMAIL": "audit@example.com"})
    assert settings.report_from == "audit@example.com"
    assert settings.sender == "audit@example.com"
    assert Settings(smtp_user="login@example.com").sender == "login@example.com"
