#!/usr/bin/env python3
"""
Configuration Management for Spendsight

Handles environment-based configuration with secure defaults and validation.
Supports multiple environments (development, test, production); the workbook
password is treated as sensitive and redacted from any printed configuration.
"""

import logging
import os
import tempfile
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Environment(Enum):
    """Application environment types."""

    DEVELOPMENT = "development"
    TEST = "test"
    PRODUCTION = "production"


@dataclass
class WorkbookConfig:
    """Locations and credentials for the source workbooks."""

    data_dir: Path
    remittance_file: str = "Remittance.xlsx"
    transactions_file: str = "Transactions.xlsx"
    rewards_file: str = "Rewards History.xlsx"
    travelbuddy_file: str = "TravelBuddy Trxn History.xlsx"
    password: str | None = None

    def path_for(self, filename: str) -> Path:
        """Resolve a workbook filename against the data directory."""
        return self.data_dir / filename


@dataclass
class CacheConfig:
    """Two-tier cache settings."""

    store_dir: Path
    enabled: bool = True
    memory_ttl_seconds: int = 300
    store_ttl_seconds: int = 3600


@dataclass
class TravelConfig:
    """Trip segmentation parameters."""

    home_country: str = "Bahrain"
    trip_gap_days: int = 7
    load_lookback_days: int = 7


@dataclass
class ServerConfig:
    """HTTP server settings."""

    host: str = "127.0.0.1"
    port: int = 9191


@dataclass
class Config:
    """
    Main configuration class for Spendsight.

    Loads configuration from environment variables with secure defaults
    and validation for each environment type.
    """

    environment: Environment

    # Core directories
    data_dir: Path
    cache_dir: Path

    # Component configurations
    workbooks: WorkbookConfig
    cache: CacheConfig
    travel: TravelConfig
    server: ServerConfig

    # Application settings
    debug: bool = False
    log_level: str = "INFO"

    @classmethod
    def from_environment(cls) -> "Config":
        """Create configuration from environment variables."""
        env = Environment(os.getenv("SPENDSIGHT_ENV", "development"))

        # Base directories
        if env == Environment.TEST:
            default_test_dir = Path(tempfile.gettempdir()) / "test_spendsight"
            base_dir = Path(os.getenv("SPENDSIGHT_DATA_DIR", str(default_test_dir)))
        else:
            base_dir = Path(os.getenv("SPENDSIGHT_DATA_DIR", "./data")).expanduser().resolve()

        data_dir = base_dir
        cache_dir = data_dir / "cache"

        # Ensure directories exist
        for directory in [data_dir, cache_dir]:
            directory.mkdir(parents=True, exist_ok=True)

        workbooks = WorkbookConfig(
            data_dir=data_dir,
            remittance_file=os.getenv("REMITTANCE_WORKBOOK", "Remittance.xlsx"),
            transactions_file=os.getenv("TRANSACTIONS_WORKBOOK", "Transactions.xlsx"),
            rewards_file=os.getenv("REWARDS_WORKBOOK", "Rewards History.xlsx"),
            travelbuddy_file=os.getenv("TRAVELBUDDY_WORKBOOK", "TravelBuddy Trxn History.xlsx"),
            password=os.getenv("WORKBOOK_PASSWORD"),
        )

        cache = CacheConfig(
            store_dir=cache_dir / "store",
            enabled=os.getenv("CACHE_ENABLED", "true").lower() == "true",
            memory_ttl_seconds=int(os.getenv("MEMORY_CACHE_TTL", "300")),
            store_ttl_seconds=int(os.getenv("STORE_CACHE_TTL", "3600")),
        )

        travel = TravelConfig(
            home_country=os.getenv("HOME_COUNTRY", "Bahrain"),
            trip_gap_days=int(os.getenv("TRIP_GAP_DAYS", "7")),
            load_lookback_days=int(os.getenv("LOAD_LOOKBACK_DAYS", "7")),
        )

        server = ServerConfig(
            host=os.getenv("HOST", "127.0.0.1"),
            port=int(os.getenv("PORT", "9191")),
        )

        return cls(
            environment=env,
            data_dir=data_dir,
            cache_dir=cache_dir,
            workbooks=workbooks,
            cache=cache,
            travel=travel,
            server=server,
            debug=os.getenv("DEBUG", "false").lower() == "true",
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )

    def validate(self) -> list:
        """Validate configuration and return list of errors."""
        errors = []

        # Check required directories
        for name, path in [
            ("data_dir", self.data_dir),
            ("cache_dir", self.cache_dir),
        ]:
            if not path.exists():
                errors.append(f"{name} does not exist: {path}")

        if self.environment == Environment.PRODUCTION and not self.workbooks.password:
            errors.append("WORKBOOK_PASSWORD is required in production")

        # Validate numeric values
        try:
            if self.cache.memory_ttl_seconds < 0 or self.cache.store_ttl_seconds < 0:
                errors.append("Cache TTLs must be non-negative")
            if self.travel.trip_gap_days <= 0:
                errors.append("Trip gap days must be positive")
            if self.travel.load_lookback_days < 0:
                errors.append("Load lookback days must be non-negative")
            if self.server.port <= 0 or self.server.port > 65535:
                errors.append("Server port must be 1-65535")
        except (ValueError, TypeError) as e:
            errors.append(f"Invalid numeric configuration: {e}")

        return errors

    def setup_logging(self) -> None:
        """Configure logging based on configuration."""
        level = getattr(logging, self.log_level, logging.INFO)

        # Configure format based on environment
        if self.environment == Environment.DEVELOPMENT:
            format_str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        else:
            format_str = "%(asctime)s - %(levelname)s - %(message)s"

        logging.basicConfig(level=level, format=format_str, datefmt="%Y-%m-%d %H:%M:%S")

        # Reduce noise from external libraries in production
        if self.environment == Environment.PRODUCTION:
            logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    def get_sensitive_fields(self) -> list:
        """Get list of field names that contain sensitive data."""
        return [
            "workbooks.password",
        ]

    def to_dict(self, include_sensitive: bool = False) -> dict[str, Any]:
        """Convert configuration to dictionary, optionally excluding sensitive data."""
        result: dict[str, Any] = {}

        for field_name, field_value in self.__dict__.items():
            if hasattr(field_value, "__dict__") and not isinstance(field_value, (Path, Enum)):
                # Nested dataclass
                nested_dict: dict[str, Any] = {}
                for nested_name, nested_value in field_value.__dict__.items():
                    full_field_name = f"{field_name}.{nested_name}"

                    if not include_sensitive and full_field_name in self.get_sensitive_fields():
                        nested_dict[nested_name] = "***REDACTED***"
                    elif isinstance(nested_value, Path):
                        nested_dict[nested_name] = str(nested_value)
                    else:
                        nested_dict[nested_name] = nested_value

                result[field_name] = nested_dict
            elif isinstance(field_value, Path):
                result[field_name] = str(field_value)
            elif isinstance(field_value, Enum):
                result[field_name] = field_value.value
            else:
                result[field_name] = field_value

        return result


# Global configuration instance
_config: Config | None = None


def get_config() -> Config:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = Config.from_environment()

        # Validate configuration
        errors = _config.validate()
        if errors:
            raise ValueError(f"Configuration validation failed: {'; '.join(errors)}")

        # Setup logging
        _config.setup_logging()

    return _config


def reload_config() -> Config:
    """Reload configuration from environment (useful for testing)."""
    global _config
    _config = None
    return get_config()
