"""Notify Gateway — Configuration Loader.

Loads application configuration from config/settings.yaml and resolves
environment variables referenced via ${VAR_NAME} or ${VAR_NAME:-default}.
Provider credentials are optional at load time: an empty API key only
marks that provider as not configured, and dispatches that need it fail
with ProviderNotConfigured instead of crashing the process.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from notify_gateway.utils.logger import get_logger

logger = get_logger(__name__)

# ── Path Constants ────────────────────────────────────────
PROJECT_ROOT = Path(__file__).resolve().parent.parent
CONFIG_DIR = PROJECT_ROOT / "config"
SETTINGS_PATH = CONFIG_DIR / "settings.yaml"

# ── Environment Variable Pattern ─────────────────────────
# ${NAME} or ${NAME:-default}
ENV_VAR_PATTERN = re.compile(r"\$\{([^}:]+)(?::-([^}]*))?}")

_TRUE_VALUES = {"1", "true", "yes", "on"}


# ═══════════════════════════════════════════════════════════
# Configuration Dataclasses
# ═══════════════════════════════════════════════════════════


@dataclass(frozen=True)
class EmailConfig:
    """Configuration for the direct email provider (Resend)."""

    api_key: str
    from_email: str
    base_url: str = "https://api.resend.com"
    timeout_seconds: float = 15.0
    provider: str = "resend"

    @property
    def configured(self) -> bool:
        """Whether credentials are present."""
        return bool(self.api_key)


@dataclass(frozen=True)
class WorkflowIds:
    """Workflow identifiers triggered on the workflow provider."""

    email: str = "user-email-notifications"
    delayed_email: str = "delayed-email-notifications"
    push: str = "expo-push-notification"
    delayed_push: str = "expo-push-notification"


@dataclass(frozen=True)
class WorkflowConfig:
    """Configuration for the workflow-trigger provider (Novu)."""

    api_key: str
    base_url: str = "https://api.novu.co"
    timeout_seconds: float = 15.0
    push_provider_id: str = "expo"
    workflows: WorkflowIds = field(default_factory=WorkflowIds)
    provider: str = "novu"

    @property
    def configured(self) -> bool:
        """Whether credentials are present."""
        return bool(self.api_key)


@dataclass(frozen=True)
class ServerConfig:
    """HTTP listener settings."""

    host: str = "0.0.0.0"
    port: int = 3001


@dataclass(frozen=True)
class AppConfig:
    """Top-level application configuration container."""

    email: EmailConfig
    workflow: WorkflowConfig
    server: ServerConfig
    log_level: str = "INFO"
    dry_run: bool = False


# ═══════════════════════════════════════════════════════════
# YAML Loading & Environment Variable Resolution
# ═══════════════════════════════════════════════════════════


def _resolve_env_vars(value: Any) -> Any:
    """Recursively resolve ${VAR} and ${VAR:-default} references.

    Args:
        value: A string, dict, list, or primitive from parsed YAML.

    Returns:
        The same structure with every placeholder replaced.

    Raises:
        ValueError: If a placeholder without default names an unset
            environment variable.
    """
    if isinstance(value, str):
        def _replace(match: re.Match[str]) -> str:
            var_name, default = match.group(1), match.group(2)
            env_value = os.environ.get(var_name)
            if env_value is not None:
                return env_value
            if default is not None:
                return default
            raise ValueError(
                f"Environment variable '${{{var_name}}}' is required but not set. "
                f"Add it to your .env file or export it in your shell."
            )

        return ENV_VAR_PATTERN.sub(_replace, value)
    elif isinstance(value, dict):
        return {k: _resolve_env_vars(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [_resolve_env_vars(item) for item in value]
    return value


def _load_yaml(path: Path) -> dict[str, Any]:
    """Load and parse a YAML file with UTF-8 encoding.

    Raises:
        FileNotFoundError: If the YAML file does not exist.
        ValueError: If the file is empty.
    """
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if data is None:
        raise ValueError(f"Configuration file is empty: {path}")

    logger.debug("Loaded configuration from %s", path)
    return data


def _validate_keys(data: dict[str, Any], required: list[str], section: str) -> None:
    """Validate that all required keys exist in a config section.

    Raises:
        ValueError: If any required key is missing.
    """
    missing = [key for key in required if key not in data]
    if missing:
        raise ValueError(
            f"Missing required configuration keys in '{section}': {', '.join(missing)}"
        )


def _as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in _TRUE_VALUES


# ═══════════════════════════════════════════════════════════
# Dataclass Builders
# ═══════════════════════════════════════════════════════════


def _build_email_config(data: dict[str, Any]) -> EmailConfig:
    """Build an EmailConfig from the 'email' section."""
    _validate_keys(data, ["api_key", "from_email"], "email")

    return EmailConfig(
        api_key=str(data["api_key"] or ""),
        from_email=data["from_email"],
        base_url=str(data.get("base_url", "https://api.resend.com")).rstrip("/"),
        timeout_seconds=float(data.get("timeout_seconds", 15)),
        provider=data.get("provider", "resend"),
    )


def _build_workflow_config(data: dict[str, Any]) -> WorkflowConfig:
    """Build a WorkflowConfig from the 'workflow' section."""
    _validate_keys(data, ["api_key"], "workflow")

    ids = data.get("workflows") or {}
    defaults = WorkflowIds()
    return WorkflowConfig(
        api_key=str(data["api_key"] or ""),
        base_url=str(data.get("base_url", "https://api.novu.co")).rstrip("/"),
        timeout_seconds=float(data.get("timeout_seconds", 15)),
        push_provider_id=data.get("push_provider_id", "expo"),
        workflows=WorkflowIds(
            email=ids.get("email", defaults.email),
            delayed_email=ids.get("delayed_email", defaults.delayed_email),
            push=ids.get("push", defaults.push),
            delayed_push=ids.get("delayed_push", defaults.delayed_push),
        ),
        provider=data.get("provider", "novu"),
    )


def _build_server_config(data: dict[str, Any]) -> ServerConfig:
    """Build a ServerConfig from the optional 'server' section.

    Raises:
        ValueError: If the port is not an integer.
    """
    port_raw = data.get("port", 3001)
    try:
        port = int(port_raw)
    except (TypeError, ValueError):
        raise ValueError(f"server.port must be an integer, got {port_raw!r}") from None

    return ServerConfig(host=data.get("host", "0.0.0.0"), port=port)


# ═══════════════════════════════════════════════════════════
# Public API
# ═══════════════════════════════════════════════════════════


def load_config(
    settings_path: Path | None = None,
    env_path: Path | None = None,
) -> AppConfig:
    """Load the complete application configuration.

    Args:
        settings_path: Override path to settings.yaml.
        env_path: Override path to the .env file.

    Returns:
        A validated AppConfig instance.

    Raises:
        FileNotFoundError: If the settings file is missing.
        ValueError: If required keys are missing or malformed.
    """
    env_file = env_path or (PROJECT_ROOT / ".env")
    load_dotenv(env_file)
    logger.debug("Loaded environment from %s", env_file)

    raw_settings = _load_yaml(settings_path or SETTINGS_PATH)
    settings = _resolve_env_vars(raw_settings)

    _validate_keys(settings, ["email", "workflow"], "settings")

    config = AppConfig(
        email=_build_email_config(settings["email"]),
        workflow=_build_workflow_config(settings["workflow"]),
        server=_build_server_config(settings.get("server") or {}),
        log_level=(settings.get("logging") or {}).get("level", "INFO"),
        dry_run=_as_bool(settings.get("dry_run", False)),
    )

    logger.info("Configuration loaded successfully")
    if not config.email.configured:
        logger.warning("Email provider has no API key; direct email is disabled")
    if not config.workflow.configured:
        logger.warning("Workflow provider has no API key; push and workflow email are disabled")
    logger.debug("Default from address: %s", config.email.from_email)

    return config
