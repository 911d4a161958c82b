"""Configuration service for the enrollment service.
Loads configuration from environment variables, .env files and a secrets file.
"""

import logging
import os
from pathlib import Path
from typing import Any, cast

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

DEFAULT_SITE_URL = "http://localhost:8000"


def _env_flag(name: str, default: str = "False") -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "t")


class StripeSection(BaseModel):
    secret_key: str = ""
    webhook_secret: str = ""

    @property
    def is_configured(self) -> bool:
        return bool(self.secret_key)


class GmailSection(BaseModel):
    client_id: str = ""
    client_secret: str = ""
    refresh_token: str = ""
    sender_email: str = ""

    @property
    def is_configured(self) -> bool:
        """True when every credential needed for the refresh-token flow is present."""
        return bool(self.client_id and self.client_secret and self.refresh_token and self.sender_email)


class SiteSection(BaseModel):
    url: str = DEFAULT_SITE_URL

    @property
    def login_url(self) -> str:
        return f"{self.url.rstrip('/')}/login"


class AdminSection(BaseModel):
    api_token: str = ""


class DatabaseSection(BaseModel):
    url: str = ""
    echo: bool = False
    pool_size: int = 5
    max_overflow: int = 10


class ConfigService:
    """Service for loading and accessing application configuration.
    Combines environment variables and secrets from a YAML file.
    """

    stripe: StripeSection
    gmail: GmailSection
    site: SiteSection
    admin: AdminSection
    database: DatabaseSection

    def __init__(self, env: str | None = None, load_files: bool = True) -> None:
        self._config: dict[str, Any] = {}
        self._secrets: dict[str, Any] = {}

        self._env = env or os.getenv("APP_ENV", "local")

        if load_files:
            self._load_env_file()
        self._load_env_vars()
        if load_files:
            self._load_secrets()

        self.stripe = StripeSection(
            secret_key=str(self.get("stripe.secret_key") or ""),
            webhook_secret=str(self.get("stripe.webhook_secret") or ""),
        )
        self.gmail = GmailSection(
            client_id=str(self.get("gmail.client_id") or ""),
            client_secret=str(self.get("gmail.client_secret") or ""),
            refresh_token=str(self.get("gmail.refresh_token") or ""),
            sender_email=str(self.get("gmail.sender_email") or ""),
        )
        self.site = SiteSection(url=str(self.get("site.url") or DEFAULT_SITE_URL))
        self.admin = AdminSection(api_token=str(self.get("admin.api_token") or ""))
        self.database = DatabaseSection(
            url=self.get_database_url(),
            echo=bool(self.get("database.echo", False)),
            pool_size=int(self.get("database.pool_size", 5)),
            max_overflow=int(self.get("database.max_overflow", 10)),
        )

    def _load_env_file(self) -> None:
        """Load the appropriate .env file based on environment"""
        base_dir = Path(__file__).resolve().parent.parent.parent

        env_files_to_try: list[Path] = []
        if self._env == "local":
            env_files_to_try.append(base_dir / ".env.local")
        else:
            env_files_to_try.append(base_dir / f".env.{self._env}")
        env_files_to_try.append(base_dir / ".env")

        for env_file in env_files_to_try:
            if env_file.exists():
                logger.info(f"Loading environment from {env_file}")
                _ = load_dotenv(env_file)
                return

        logger.warning("No environment file found. Using default values.")

    def _load_env_vars(self) -> None:
        """Load configuration from environment variables"""
        # Only non-empty values are recorded so that secrets.yaml can fill the gaps
        optional: dict[str, str | None] = {
            "stripe.secret_key": os.getenv("STRIPE_SECRET_KEY"),
            "stripe.webhook_secret": os.getenv("STRIPE_WEBHOOK_SECRET"),
            "gmail.client_id": os.getenv("GMAIL_CLIENT_ID"),
            "gmail.client_secret": os.getenv("GMAIL_CLIENT_SECRET"),
            "gmail.refresh_token": os.getenv("GMAIL_REFRESH_TOKEN"),
            "gmail.sender_email": os.getenv("GMAIL_SENDER_EMAIL"),
            "site.url": os.getenv("SITE_URL") or os.getenv("NEXT_PUBLIC_SITE_URL"),
            "admin.api_token": os.getenv("ADMIN_API_TOKEN"),
        }

        self._config = {
            "app_env": self._env,
            "debug": _env_flag("DEBUG", "True"),
            "project_name": os.getenv("PROJECT_NAME", "Enrollment Service"),
            "cors_origins": os.getenv("CORS_ORIGINS", "http://localhost:3000,http://localhost:8000").split(","),
            "port": int(os.getenv("PORT", "8000")),
            "host": os.getenv("HOST", "0.0.0.0"),
            # Logging configuration
            "log_level": os.getenv("LOG_LEVEL", "INFO"),
            "log_json_format": _env_flag("LOG_JSON_FORMAT"),
            "log_json_pretty": _env_flag("LOG_JSON_PRETTY"),
            "log_console_output": _env_flag("LOG_CONSOLE_OUTPUT", "True"),
            "log_file_output": _env_flag("LOG_FILE_OUTPUT"),
            "log_file_path": os.getenv("LOG_FILE_PATH", "logs/app.log"),
            **{key: value for key, value in optional.items() if value},
        }

    def _load_secrets(self) -> None:
        """Load secrets from YAML file"""
        base_dir = Path(__file__).resolve().parent.parent.parent

        secrets_files_to_try: list[Path] = [base_dir / "secrets.yaml", base_dir / f"secrets.{self._env}.yaml"]

        secrets_file: Path | None = None
        for file_path in secrets_files_to_try:
            if file_path.exists():
                secrets_file = file_path
                break

        if secrets_file:
            try:
                with open(secrets_file) as f:
                    self._secrets = yaml.safe_load(f) or {}
                logger.info(f"Loaded secrets from {secrets_file}")
            except (OSError, yaml.YAMLError) as e:
                logger.exception(f"Error loading secrets file: {e}")
                self._secrets = {}
        else:
            logger.info("No secrets file found. Using environment only.")
            self._secrets = {}

    def get(self, key: str, default: Any = None) -> Any:
        """Get a configuration value by key.
        Priority order:
        1. Environment variables (from _config dict)
        2. Local secrets file (dot notation walks nested sections)
        3. Direct environment variable lookup (os.getenv)
        4. Default value
        """
        if key in self._config:
            return self._config[key]

        if "." in key:
            value: Any = self._secrets
            for part in key.split("."):
                if isinstance(value, dict) and part in value:
                    value = cast("Any", value[part])
                else:
                    return default
            return value

        if key in self._secrets:
            return self._secrets[key]

        env_value = os.getenv(key)
        if env_value is not None:
            return env_value

        return default

    def get_database_url(self) -> str:
        """Database URL from the environment or secrets. Empty when not configured."""
        db_url = os.getenv("DATABASE_URL")
        if db_url:
            return db_url

        database = self._secrets.get("database") if self._secrets else None
        if isinstance(database, dict) and database.get("url"):
            return str(database["url"])

        return ""

    def is_production(self) -> bool:
        return self._env.lower() == "production"

    def is_testing(self) -> bool:
        return self._env.lower() in ("test", "testing")

    def is_local(self) -> bool:
        return self._env.lower() in ("local", "development", "dev")

    def get_environment(self) -> str:
        return self._env


class Settings(BaseSettings):
    """Server settings read directly from the environment."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", case_sensitive=True, extra="ignore")

    PROJECT_NAME: str = "Enrollment Service"
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    RELOAD: bool = False
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:8000"

    @property
    def BACKEND_CORS_ORIGINS(self) -> list[str]:
        """Returns the CORS origins as a list"""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]
