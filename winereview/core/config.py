"""
Configuration management via environment variables.

This module loads configuration from .env file using python-dotenv.
All configuration values are accessed through the Settings class.

Secrets (JWT signing key, AWS credentials) are only ever read from the
environment, never from code.
"""
import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


# Load .env file from project root
# This must happen before accessing os.environ
env_path = Path(__file__).parent.parent.parent / ".env"
load_dotenv(env_path)


@dataclass(frozen=True)
class Settings:
    """
    Application settings loaded from environment variables.

    frozen=True makes the dataclass immutable, preventing accidental
    modification of settings at runtime.

    Attributes:
        app_name: Application identifier for logging
        app_env: Environment name (development, staging, production)
        log_level: Logging verbosity (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_dir: Directory for daily log files (None = console only)
        database_url: SQLAlchemy connection string
        jwt_secret: HMAC key used to sign session credentials
        jwt_expiration_seconds: Session credential lifetime
        google_client_id: OAuth client id expected as the ID token audience
        google_timeout_seconds: Timeout for fetching Google signing keys
        aws_region: Region of the upload bucket
        aws_s3_bucket_name: Bucket receiving uploaded images
        aws_access_key_id / aws_secret_access_key: Optional explicit credentials
        aws_s3_endpoint_url: Custom S3 endpoint (MinIO, LocalStack)
        enable_email_login: Mount the email-only login route (non-production)
    """
    # Application settings
    app_name: str
    app_env: str
    log_level: str
    log_dir: Optional[str]

    # Database settings
    database_url: str
    auto_create_tables: bool
    seed_dev_data: bool

    # Session credentials
    jwt_secret: str
    jwt_expiration_seconds: int

    # Google identity provider
    google_client_id: str
    google_timeout_seconds: int

    # File storage
    aws_region: str
    aws_s3_bucket_name: str
    aws_access_key_id: Optional[str]
    aws_secret_access_key: Optional[str]
    aws_s3_endpoint_url: Optional[str]

    # Feature switches
    enable_email_login: bool
    enable_audit_logging: bool

    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.app_env.lower() == "development"

    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.app_env.lower() == "production"


def _get_env(key: str, default: Optional[str] = None) -> str:
    """
    Get environment variable with optional default.

    Args:
        key: Environment variable name
        default: Default value if not set

    Returns:
        Environment variable value

    Raises:
        ValueError: If required variable is not set and no default provided
    """
    value = os.environ.get(key, default)
    if value is None:
        raise ValueError(
            f"Required environment variable '{key}' is not set. "
            f"Please check your .env file."
        )
    return value


def _get_optional_env(key: str) -> Optional[str]:
    """Get an environment variable, treating blank values as unset."""
    value = os.environ.get(key, "").strip()
    return value or None


def _get_bool_env(key: str, default: bool) -> bool:
    return _get_env(key, "true" if default else "false").lower() in ("1", "true", "yes")


def normalize_database_url(database_url: str) -> str:
    """
    Fix dialect prefixes that SQLAlchemy does not accept.

    Hosted PostgreSQL providers hand out 'postgres://' URLs, which
    SQLAlchemy 1.4+ rejects.
    """
    if database_url.startswith("postgres://"):
        return database_url.replace("postgres://", "postgresql://", 1)
    return database_url


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Settings are read once at startup; maxsize=1 ensures only one
    instance exists. Tests that change the environment must call
    get_settings.cache_clear().

    Returns:
        Settings instance with all configuration values

    Raises:
        ValueError: If required environment variables are missing
    """
    app_env = _get_env("APP_ENV", "development")
    is_dev = app_env.lower() == "development"

    return Settings(
        # Application
        app_name=_get_env("APP_NAME", "WineReviewerAPI"),
        app_env=app_env,
        log_level=_get_env("LOG_LEVEL", "INFO"),
        log_dir=_get_optional_env("LOG_DIR"),

        # Database
        database_url=normalize_database_url(
            _get_env("DATABASE_URL", "sqlite:///./winereview.db")
        ),
        auto_create_tables=_get_bool_env("AUTO_CREATE_TABLES", is_dev),
        seed_dev_data=_get_bool_env("SEED_DEV_DATA", is_dev),

        # Session credentials
        jwt_secret=_get_env("JWT_SECRET"),
        jwt_expiration_seconds=int(_get_env("JWT_EXPIRATION_SECONDS", "86400")),

        # Google
        google_client_id=_get_env("GOOGLE_CLIENT_ID", ""),
        google_timeout_seconds=int(_get_env("GOOGLE_TIMEOUT_SECONDS", "10")),

        # AWS S3
        aws_region=_get_env("AWS_REGION", "us-east-1"),
        aws_s3_bucket_name=_get_env("AWS_S3_BUCKET_NAME", "wine-reviewer-uploads"),
        aws_access_key_id=_get_optional_env("AWS_ACCESS_KEY_ID"),
        aws_secret_access_key=_get_optional_env("AWS_SECRET_ACCESS_KEY"),
        aws_s3_endpoint_url=_get_optional_env("AWS_S3_ENDPOINT_URL"),

        # Feature switches
        enable_email_login=_get_bool_env("ENABLE_EMAIL_LOGIN", is_dev),
        enable_audit_logging=_get_bool_env("ENABLE_AUDIT_LOGGING", True),
    )
