"""Configuration for the dashboard service.

Loads from YAML config file with environment variable overrides.
Pattern: CONFIG__{SECTION}__{KEY} overrides nested YAML keys.
Example: CONFIG__STORE__BACKEND=firestore

Secrets have dedicated variables:
  RESEND_API_KEY, JWT_SECRET_KEY, DATABASE_URL,
  FIRESTORE_PROJECT, FIRESTORE_CREDENTIALS
"""

import os
from pathlib import Path
from typing import Literal, Optional

import yaml
from pydantic import BaseModel, Field


class StoreConfig(BaseModel):
    backend: Literal["sql", "firestore"] = "sql"
    database_url: str = "sqlite:///data/careboard.db"
    echo: bool = False
    firestore_project: str = ""
    firestore_credentials: str = ""  # service account JSON path
    applications_collection: str = "applications"
    inquiries_collection: str = "contacts"


class MailConfig(BaseModel):
    api_url: str = "https://api.resend.com/emails"
    api_key: str = ""  # from env: RESEND_API_KEY
    sender: str = "Golden Serenity <info@goldenserenityhomecare.org>"
    timeout_s: float = Field(default=15.0, gt=0)


class AuthConfig(BaseModel):
    secret_key: str = "change-me-in-production"  # from env: JWT_SECRET_KEY
    algorithm: str = "HS256"
    token_expire_minutes: int = 60 * 24


class DashboardConfig(BaseModel):
    organisation: str = "Golden Serenity"
    log_level: str = "INFO"
    cors_origins: list[str] = ["http://localhost:3000"]
    store: StoreConfig = StoreConfig()
    mail: MailConfig = MailConfig()
    auth: AuthConfig = AuthConfig()


def _coerce(value: str):
    """Env values are strings; booleans and numbers are converted."""
    lowered = value.lower()
    if lowered in ("true", "false"):
        return lowered == "true"
    for number in (int, float):
        try:
            return number(value)
        except ValueError:
            pass
    return value


def _env_overrides(config_dict: dict, prefix: str = "CONFIG") -> dict:
    """Merge CONFIG__SECTION__KEY variables into the nested config dict."""
    marker = f"{prefix}__"
    for name in sorted(os.environ):
        if not name.startswith(marker):
            continue
        *sections, key = name[len(marker):].lower().split("__")
        node = config_dict
        for section in sections:
            node = node.setdefault(section, {})
        node[key] = _coerce(os.environ[name])
    return config_dict


SECRET_ENV = {
    ("mail", "api_key"): "RESEND_API_KEY",
    ("mail", "sender"): "MAIL_FROM",
    ("auth", "secret_key"): "JWT_SECRET_KEY",
    ("store", "database_url"): "DATABASE_URL",
    ("store", "firestore_project"): "FIRESTORE_PROJECT",
    ("store", "firestore_credentials"): "FIRESTORE_CREDENTIALS",
}


def _read_yaml(config_path: Optional[str]) -> dict:
    path = Path(config_path or os.getenv("CONFIG_PATH", "config/dashboard.yml"))
    if not path.is_file():
        return {}
    return yaml.safe_load(path.read_text()) or {}


def load_config(config_path: Optional[str] = None) -> DashboardConfig:
    """Build the config: env vars > YAML file > defaults.

    Dedicated secret variables only fill values the file and the
    CONFIG__ overrides left empty.
    """
    config_dict = _env_overrides(_read_yaml(config_path))

    for (section, key), env_name in SECRET_ENV.items():
        secret = os.getenv(env_name)
        node = config_dict.setdefault(section, {})
        if secret and not node.get(key):
            node[key] = secret

    if "log_level" not in config_dict and os.getenv("LOG_LEVEL"):
        config_dict["log_level"] = os.environ["LOG_LEVEL"]

    return DashboardConfig(**config_dict)


_config: Optional[DashboardConfig] = None


def get_config() -> DashboardConfig:
    """Process-wide config, loaded on first use."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reload_config(config_path: Optional[str] = None) -> DashboardConfig:
    global _config
    _config = load_config(config_path)
    return _config
