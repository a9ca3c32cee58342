"""Environment configuration for the Jira and agent integrations.

Values are read from (highest precedence first) environment variables,
``.claude-pm/.env`` and ``.env`` in the working directory.
"""

from __future__ import annotations

import logging
import re
from typing import Optional

from pydantic import Field, SecretStr, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigError

logger = logging.getLogger(__name__)

ENV_FILES = (".env", ".claude-pm/.env")


def sanitize_domain(domain: str) -> str:
    """Strip the protocol prefix and trailing slashes from a Jira domain."""
    domain = re.sub(r"^https?://", "", domain.strip())
    return re.sub(r"/+$", "", domain)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=ENV_FILES,
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=False,
        frozen=True,
        extra="ignore",
    )

    jira_domain: str = Field(description="Jira domain, e.g. your-org.atlassian.net")
    jira_email: str = Field(description="Jira account email for Basic Auth")
    jira_api_token: SecretStr = Field(description="Jira API token")
    jira_project_key: str = Field(description="Project key new issues are created in")
    claude_cli_path: str = Field(description="Path to the AI agent CLI executable")

    agent_max_turns: int = Field(default=100, ge=1)
    agent_timeout: Optional[float] = Field(default=None, gt=0)
    jira_timeout: float = Field(default=30.0, gt=0)

    @field_validator("jira_domain")
    @classmethod
    def _sanitize_domain(cls, value: str) -> str:
        value = sanitize_domain(value)
        if not value:
            raise ValueError("JIRA_DOMAIN must not be empty")
        return value


def load_settings(**overrides) -> Settings:
    """Build :class:`Settings`, turning validation failures into :class:`ConfigError`."""
    try:
        settings = Settings(**overrides)
    except ValidationError as exc:
        missing = [
            str(error["loc"][0]).upper()
            for error in exc.errors()
            if error["type"] == "missing" and error["loc"]
        ]
        if missing:
            raise ConfigError(
                f"Missing required environment variables: {', '.join(missing)}\n"
                "Please copy .env.example to .env and fill in the values."
            ) from exc
        raise ConfigError(f"Invalid configuration: {exc}") from exc
    logger.debug("Loaded configuration for %s (project %s)", settings.jira_domain, settings.jira_project_key)
    return settings
