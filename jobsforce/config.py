"""YAML config loading and validation."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from urllib.parse import urlparse

import yaml

DEFAULT_DATABASE_URL = "sqlite:///data/jobsforce.db"
DEFAULT_ML_SERVICE_URL = "http://localhost:5000/api"


def normalize_database_url(url: str) -> str:
    # Heroku/Railway style postgres:// is rejected by SQLAlchemy 2.x
    if url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql://", 1)
    return url


@dataclass
class DatabaseConfig:
    url: str = DEFAULT_DATABASE_URL
    echo: bool = False


@dataclass
class MlServiceConfig:
    url: str = DEFAULT_ML_SERVICE_URL
    timeout: float = 60.0
    max_skills: int = 10
    max_retries: int = 2
    backoff_factor: float = 0.5


@dataclass
class SyncConfig:
    interval_hours: float = 4.0
    scheduled_limit: int = 200
    manual_limit: int = 200
    bootstrap_min_listings: int = 20
    bootstrap_limit: int = 200
    enabled: bool = True


@dataclass
class RecommendationConfig:
    default_limit: int = 100
    low_data_threshold: int = 20
    min_sync_limit: int = 100
    sync_limit_multiplier: int = 5
    fetch_multiplier: int = 2


@dataclass
class WriterConfig:
    queue_size: int = 32


@dataclass
class AppConfig:
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    ml_service: MlServiceConfig = field(default_factory=MlServiceConfig)
    sync: SyncConfig = field(default_factory=SyncConfig)
    recommendations: RecommendationConfig = field(default_factory=RecommendationConfig)
    writer: WriterConfig = field(default_factory=WriterConfig)
    log_dir: str = "logs"


def load_config(config_path: str = "config.yaml") -> AppConfig:
    """Load configuration from YAML file. Environment variables take precedence."""
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(
            f"Config file not found: {config_path}\n"
            "Copy config.example.yaml to config.yaml and fill in your settings."
        )

    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    config = AppConfig()

    # Database
    db_raw = raw.get("database", {})
    config.database = DatabaseConfig(
        url=normalize_database_url(
            os.environ.get("DATABASE_URL", db_raw.get("url", DEFAULT_DATABASE_URL))
        ),
        echo=db_raw.get("echo", False),
    )

    # ML service
    ml_raw = raw.get("ml_service", {})
    config.ml_service = MlServiceConfig(
        url=os.environ.get("ML_SERVICE_URL", ml_raw.get("url", DEFAULT_ML_SERVICE_URL)).rstrip("/"),
        timeout=float(os.environ.get("ML_SERVICE_TIMEOUT", ml_raw.get("timeout", 60.0))),
        max_skills=ml_raw.get("max_skills", 10),
        max_retries=ml_raw.get("max_retries", 2),
        backoff_factor=ml_raw.get("backoff_factor", 0.5),
    )

    # Sync cadence
    sync_raw = raw.get("sync", {})
    config.sync = SyncConfig(
        interval_hours=sync_raw.get("interval_hours", 4.0),
        scheduled_limit=sync_raw.get("scheduled_limit", 200),
        manual_limit=sync_raw.get("manual_limit", 200),
        bootstrap_min_listings=sync_raw.get("bootstrap_min_listings", 20),
        bootstrap_limit=sync_raw.get("bootstrap_limit", 200),
        enabled=sync_raw.get("enabled", True),
    )

    # Recommendations
    rec_raw = raw.get("recommendations", {})
    config.recommendations = RecommendationConfig(
        default_limit=rec_raw.get("default_limit", 100),
        low_data_threshold=rec_raw.get("low_data_threshold", 20),
        min_sync_limit=rec_raw.get("min_sync_limit", 100),
        sync_limit_multiplier=rec_raw.get("sync_limit_multiplier", 5),
        fetch_multiplier=rec_raw.get("fetch_multiplier", 2),
    )

    writer_raw = raw.get("writer", {})
    config.writer = WriterConfig(queue_size=writer_raw.get("queue_size", 32))

    config.log_dir = raw.get("log_dir", "logs")

    return config


def validate_config(config: AppConfig) -> list[str]:
    """Return list of validation warnings (empty = OK)."""
    warnings = []

    parsed = urlparse(config.ml_service.url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        warnings.append(f"ML service URL looks invalid: {config.ml_service.url!r}")

    if config.ml_service.timeout <= 0:
        warnings.append("ML service timeout must be positive - requests could block indefinitely")

    if config.ml_service.max_skills < 1:
        warnings.append("ml_service.max_skills must be at least 1")

    if config.sync.enabled and config.sync.interval_hours <= 0:
        warnings.append("Sync interval must be positive - scheduled sync will be disabled")

    if config.sync.scheduled_limit < 1 or config.sync.bootstrap_limit < 1:
        warnings.append("Sync limits must be at least 1")

    if config.sync.bootstrap_limit < config.sync.bootstrap_min_listings:
        warnings.append(
            "Bootstrap limit is below bootstrap_min_listings - a cold store may stay under the minimum"
        )

    if config.recommendations.default_limit < 1:
        warnings.append("recommendations.default_limit must be at least 1")

    if config.writer.queue_size < 1:
        warnings.append("writer.queue_size must be at least 1 - a non-positive size makes the queue unbounded")

    return warnings
