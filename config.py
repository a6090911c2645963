"""Configuration management for the process metrics exporter"""
import re
from pathlib import Path
from typing import Annotated, List, Literal, Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


NAMESPACE_PATTERN = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")


class Config(BaseSettings):
    """Configuration class with Pydantic validation and environment-based settings"""

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=False)

    # Server settings
    metrics_port: int = Field(default=9256, ge=1, le=65535, description="Metrics server port")
    metrics_host: str = Field(default="0.0.0.0", description="Metrics server host")

    # Collection settings
    namespace: str = Field(default="node", description="Metric name prefix")
    scrape_timeout: float = Field(default=10.0, gt=0, description="Maximum duration of one scrape in seconds")
    enabled_collectors: Annotated[List[str], NoDecode] = Field(default=["process"], description="List of enabled collectors")
    expose_read_errors: bool = Field(default=False, description="Export per-read skip counts of the last scrape")
    procfs_path: Path = Field(default=Path("/proc"), description="procfs mount point")

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(default="INFO", description="Log level")
    log_file: Optional[Path] = Field(default=None, description="Log file path")

    # Service settings
    service_name: str = Field(default="process-metrics-exporter", description="Service name")
    service_version: str = Field(default="1.0.0", description="Service version")
    enable_request_logging: bool = Field(default=True, description="Enable HTTP request logging")

    @field_validator('namespace')
    @classmethod
    def validate_namespace(cls, v):
        """Namespace must be a valid metric name prefix"""
        if not NAMESPACE_PATTERN.match(v):
            raise ValueError(f"Invalid metric namespace: {v!r}")
        return v

    @field_validator('log_level', mode='before')
    @classmethod
    def normalize_log_level(cls, v):
        if isinstance(v, str):
            return v.upper()
        return v

    @field_validator('log_file')
    @classmethod
    def ensure_parent_directories(cls, v):
        """Ensure parent directories exist for file paths"""
        if isinstance(v, Path):
            v.parent.mkdir(parents=True, exist_ok=True)
        return v

    @field_validator('enabled_collectors', mode='before')
    @classmethod
    def parse_enabled_collectors(cls, v):
        """Parse comma-separated list of collectors"""
        if isinstance(v, str):
            return [item.strip() for item in v.split(',') if item.strip()]
        return v or []

    def is_collector_enabled(self, collector_name: str) -> bool:
        """Check if a specific collector is enabled"""
        return collector_name in self.enabled_collectors
