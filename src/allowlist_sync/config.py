"""Configuration management for Allowlist Sync."""

import glob
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)

# https://github.com/hasura/graphql-engine/issues/4138
# The name stays fixed so repeated runs converge on one collection instead of
# piling up a new collection per run.
DEFAULT_COLLECTION_NAME = "allowed-queries"

DEFAULT_QUERY_GLOB = "**/*.gql"

# GitHub Actions exposes action inputs as INPUT_<NAME> variables.
ENV_HOST = "INPUT_HOST"
ENV_KEY = "INPUT_KEY"
ENV_PATH = "INPUT_PATH"
ENV_WORKSPACE = "GITHUB_WORKSPACE"
ENV_REPOSITORY = "GITHUB_REPOSITORY"


class ConfigurationError(Exception):
    """Raised when a required input is missing or invalid."""

    pass


class SyncConfig(BaseModel):
    """Settings for a single allowlist synchronization run."""

    host: str = Field(description="Base URL of the GraphQL engine")
    admin_secret: str = Field(description="Admin secret sent with every request")
    role: str = Field(default="admin", description="Role sent as X-Hasura-Role")
    workspace: Path = Field(description="Root directory of the checked out repo")
    path_pattern: Optional[str] = Field(
        default=None,
        description="Glob for query documents (default: <workspace>/**/*.gql)",
    )
    repository: Optional[str] = Field(
        default=None,
        description="Repository identifier appended to document names",
    )
    append_metadata: bool = Field(
        default=True,
        description="Suffix document names with repository and content hash",
    )
    collection_name: str = Field(
        default=DEFAULT_COLLECTION_NAME, description="Query collection name"
    )
    exclude_patterns: List[str] = Field(
        default_factory=lambda: ["node_modules/"],
        description="Gitignore-style patterns (relative to workspace) to skip",
    )
    timeout: float = Field(default=30.0, description="HTTP timeout in seconds")

    @field_validator("host")
    @classmethod
    def validate_host(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("host must not be empty")
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"host must be an http(s) URL, got: {v}")
        return v.rstrip("/")

    @field_validator("admin_secret")
    @classmethod
    def validate_admin_secret(cls, v: str) -> str:
        if not v:
            raise ValueError("admin secret must not be empty")
        return v

    @field_validator("timeout")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("timeout must be positive")
        return v

    def resolved_pattern(self) -> str:
        """Return the glob used to discover query documents."""
        if self.path_pattern:
            return self.path_pattern
        # Only the workspace is escaped; a user-supplied pattern is taken as glob syntax
        return os.path.join(glob.escape(str(self.workspace)), DEFAULT_QUERY_GLOB)

    @classmethod
    def from_environment(
        cls, env: Optional[Mapping[str, str]] = None, **overrides: Any
    ) -> "SyncConfig":
        """Build configuration from the CI environment.

        Explicit ``overrides`` (usually CLI options) take precedence over the
        environment. ``None`` overrides are treated as not given.

        Raises:
            ConfigurationError: If a required value is missing or invalid
        """
        if env is None:
            env = os.environ

        values: Dict[str, Any] = {
            "host": env.get(ENV_HOST) or None,
            "admin_secret": env.get(ENV_KEY) or None,
            "path_pattern": env.get(ENV_PATH) or None,
            "workspace": env.get(ENV_WORKSPACE) or None,
            "repository": env.get(ENV_REPOSITORY) or None,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})

        if not values.get("workspace"):
            raise ConfigurationError(f"{ENV_WORKSPACE} is not set")
        if not values.get("host"):
            raise ConfigurationError(f"GraphQL engine host is not set ({ENV_HOST})")
        if not values.get("admin_secret"):
            raise ConfigurationError(f"Admin secret is not set ({ENV_KEY})")

        try:
            config = cls(**values)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e

        logger.debug(
            f"Loaded configuration: host={config.host} "
            f"pattern={config.resolved_pattern()} collection={config.collection_name}"
        )
        return config
