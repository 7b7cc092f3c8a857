"""Configuration management using Pydantic Settings."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ProberSettings(BaseModel):
    """Per-endpoint probe configuration."""

    mode: Literal["trace", "tcp"] = Field(
        default="trace",
        description="Probe strategy: HTTP trace fetch or raw TCP connect"
    )

    use_tls: bool = Field(
        default=True,
        description="Wrap connections in TLS for the trace fetch and upgrade probe"
    )

    validate_upgrade: bool = Field(
        default=False,
        description="Require a successful protocol upgrade (101) after the trace fetch"
    )

    trace_host: str = Field(
        default="speed.cloudflare.com",
        description="Host header and TLS server name sent to each endpoint"
    )

    trace_path: str = Field(
        default="/cdn-cgi/trace",
        description="Diagnostic path echoing routing metadata"
    )

    upgrade_path: str = Field(
        default="/ws",
        description="Path requested by the upgrade probe"
    )

    connect_timeout: float = Field(
        default=1.0,
        gt=0.0,
        le=30.0,
        description="TCP/TLS connect timeout in seconds"
    )

    max_duration: float = Field(
        default=2.0,
        gt=0.0,
        le=60.0,
        description="Upper bound for a full request/response cycle in seconds"
    )

    user_agent: str = Field(
        default=(
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
            "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
        ),
        description="User-Agent header; the trace endpoint echoes it back"
    )

    @field_validator("trace_path", "upgrade_path")
    @classmethod
    def validate_path(cls, v: str) -> str:
        """Ensure request paths are absolute."""
        if not v.startswith("/"):
            return "/" + v
        return v


class SchedulerSettings(BaseModel):
    """Concurrency and early-stop configuration."""

    max_parallel: int = Field(
        default=200,
        ge=1,
        le=10000,
        description="Maximum number of endpoints probed at once"
    )

    max_accepted: int = Field(
        default=0,
        ge=0,
        description="Stop dispatching once this many endpoints are accepted (0 = unbounded)"
    )

    allowed_colos: list[str] | None = Field(
        default=None,
        description="Only accept outcomes from these data-center codes"
    )

    progress_interval: float = Field(
        default=1.0,
        gt=0.0,
        description="Seconds between progress line refreshes"
    )

    @field_validator("allowed_colos")
    @classmethod
    def normalize_colos(cls, v: list[str] | None) -> list[str] | None:
        """Upper-case codes and treat an empty list as no filter."""
        if not v:
            return None
        return [code.strip().upper() for code in v if code.strip()]


class OutputSettings(BaseModel):
    """Output configuration."""

    csv_path: Path | None = Field(
        default=None,
        description="Write accepted outcomes to this CSV file"
    )

    display_limit: int = Field(
        default=10,
        ge=0,
        description="Number of rows shown in the result table (0 = all)"
    )

    verbose: bool = Field(
        default=False,
        description="Log per-endpoint probe errors"
    )

    json_logs: bool = Field(
        default=False,
        description="Emit structured logs as JSON"
    )

    log_file: Path | None = Field(
        default=None,
        description="Also append log records to this file"
    )


class Settings(BaseSettings):
    """Main configuration container."""

    model_config = SettingsConfigDict(
        env_prefix="COLO_SCOUT_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    prober: ProberSettings = Field(default_factory=ProberSettings)
    scheduler: SchedulerSettings = Field(default_factory=SchedulerSettings)
    output: OutputSettings = Field(default_factory=OutputSettings)

    port: int = Field(
        default=443,
        ge=1,
        le=65535,
        description="Port used for targets that do not name one"
    )

    locations_file: Path | None = Field(
        default=None,
        description="JSON table mapping data-center codes to locations"
    )

    @classmethod
    def from_yaml(cls, path: Path) -> "Settings":
        """Load settings from a YAML configuration file."""
        import yaml

        if not path.exists():
            return cls()

        with open(path) as f:
            data = yaml.safe_load(f) or {}

        return cls(**data)

    @classmethod
    def from_file_or_default(cls, path: Path | None = None) -> "Settings":
        """Load from file if exists, otherwise return defaults."""
        default_paths = [
            Path("colo-scout.yaml"),
            Path("colo-scout.yml"),
            Path(".colo-scout.yaml"),
            Path.home() / ".config" / "colo-scout" / "config.yaml",
        ]

        if path and path.exists():
            return cls.from_yaml(path)

        for default_path in default_paths:
            if default_path.exists():
                return cls.from_yaml(default_path)

        return cls()
