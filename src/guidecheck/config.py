"""Application configuration: settings schema and config.yaml loader"""

import os
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, Field


CONFIG_FILE = "config.yaml"


class VersionSettings(BaseModel):
    """One guide version: where its guides live and what they link against."""
    directory:    str = Field(default="", description="Guide directory prefix; empty matches every markdown file")
    dependencies: list[str] = Field(default_factory=list, description="Cargo.toml [dependencies] lines")
    edition:      Optional[str] = Field(default=None, description="Edition override for this version")


DEFAULT_VERSIONS: dict[str, VersionSettings] = {
    "legacy": VersionSettings(
        directory="_legacy",
        dependencies=[
            'futures = "0.3"',
            'hyper = { version = "0.14", features = ["full"] }',
            'hyper-tls = "0.5"',
            'tokio = { version = "1", features = ["full"] }',
        ],
    ),
    "stable": VersionSettings(
        directory="_stable",
        dependencies=[
            'hyper = { version = "1", features = ["full"] }',
            'tokio = { version = "1", features = ["full"] }',
            'http-body-util = "0.1"',
            'hyper-util = { version = "0.1", features = ["full"] }',
            'tower = "0.4"',
        ],
    ),
}


class Settings(BaseModel):
    app_name:         str = "guidecheck"
    db_url:           str = "sqlite:///guidecheck.db"
    root:             str = Field(default=".",                description="Repository root holding the guides")
    build_dir:        str = Field(default=".guidecheck/envs", description="Parent directory of per-version build environments")
    edition:          str = Field(default="2021",             description="Default language edition passed to the doctest tool")
    doctest_tool:     str = Field(default="rustdoc",          description="Documentation test executable")
    build_tool:       str = Field(default="cargo",            description="Dependency build executable")
    discovery:        str = Field(default="git", pattern="^(git|walk)$", description="git ls-files or a directory walk")
    untagged_is_rust: bool = Field(default=False, description="Treat fences without a language tag as rust")
    record_runs:      bool = Field(default=True,  description="Store run results in the database")
    log_level:        str = Field(default="WARNING", description="Logging level name")
    versions: dict[str, VersionSettings] = Field(default_factory=lambda: dict(DEFAULT_VERSIONS))


# Nested fields cannot be expressed as a single env var.
_ENV_FIELDS = [name for name in Settings.model_fields if name != "versions"]


def load_config(overrides: dict[str, Any] = None) -> Settings:
    """Load Settings from config.yaml, then GUIDECHECK_<FIELD> env vars, then non-None CLI overrides."""
    data: dict[str, Any] = {}
    if Path(CONFIG_FILE).exists():
        try:
            data = yaml.safe_load(Path(CONFIG_FILE).read_text()) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid {CONFIG_FILE}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Invalid {CONFIG_FILE}: expected a mapping, got {type(data).__name__}")

    for name in _ENV_FIELDS:
        if val := os.getenv(f"GUIDECHECK_{name.upper()}"):
            data[name] = val

    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})
    return Settings(**data)
