import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

BASE_PATH = Path(__file__).parent

ALLOWED_MIME_TYPES = ("image/jpeg", "image/png", "image/webp", "application/pdf")
LANGUAGES = ("en", "cn")
DEFAULT_LANG = "en"


def _env(name, default=None):
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip()


def _env_int(name, default):
    value = _env(name)
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {value!r}")


def _env_bool(name, default=False):
    value = _env(name)
    if value is None:
        return default
    return value.lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Config:
    """Process-wide settings, read once at startup and passed to create_app."""

    secret_key: str = "dev-secret-key-change-me"
    database_url: Optional[str] = f"sqlite:///{BASE_PATH / 'compliance_lab.db'}"

    openai_api_key: Optional[str] = None
    openai_model: str = "gpt-4o"
    openai_base_url: Optional[str] = None
    azure_openai_endpoint: Optional[str] = None
    azure_openai_api_version: str = "2024-12-01-preview"
    model_timeout_seconds: float = 120.0

    upload_folder: str = str(BASE_PATH / "uploads")
    max_file_size_mb: int = 20
    max_files: int = 10
    report_list_limit: int = 50
    session_days: int = 7

    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 3000
    debug: bool = False

    @classmethod
    def from_env(cls):
        defaults = cls()
        return cls(
            secret_key=_env("SECRET_KEY", defaults.secret_key),
            # An empty DATABASE_URL turns persistence off; analysis keeps working.
            database_url=_env("DATABASE_URL", defaults.database_url) or None,
            openai_api_key=_env("OPENAI_API_KEY") or None,
            openai_model=_env("OPENAI_MODEL", defaults.openai_model),
            openai_base_url=_env("OPENAI_BASE_URL") or None,
            azure_openai_endpoint=_env("AZURE_OPENAI_ENDPOINT") or None,
            azure_openai_api_version=_env("AZURE_OPENAI_API_VERSION", defaults.azure_openai_api_version),
            model_timeout_seconds=float(_env("MODEL_TIMEOUT_SECONDS") or defaults.model_timeout_seconds),
            upload_folder=_env("UPLOAD_FOLDER", defaults.upload_folder),
            max_file_size_mb=_env_int("MAX_FILE_SIZE_MB", defaults.max_file_size_mb),
            max_files=_env_int("MAX_FILES", defaults.max_files),
            report_list_limit=_env_int("REPORT_LIST_LIMIT", defaults.report_list_limit),
            session_days=_env_int("SESSION_DAYS", defaults.session_days),
            log_level=_env("LOG_LEVEL", defaults.log_level).upper(),
            host=_env("HOST", defaults.host),
            port=_env_int("PORT", defaults.port),
            debug=_env_bool("FLASK_DEBUG", defaults.debug),
        )

    @property
    def model_configured(self):
        return bool(self.openai_api_key)

    @property
    def store_configured(self):
        return bool(self.database_url)

    @property
    def max_file_size(self):
        return self.max_file_size_mb * 1024 * 1024


def normalize_lang(value):
    value = (value or "").strip().lower()
    return value if value in LANGUAGES else DEFAULT_LANG
