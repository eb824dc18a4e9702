"""Application settings loaded from environment variables."""

from pathlib import Path

from pydantic import AliasChoices, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parents[1]
DEFAULT_DATA_DIR = BASE_DIR / "data"
DEFAULT_MARKSCHEME_DIR = BASE_DIR / "ms"

PLACEHOLDER_PREFIX = "YOUR_"


def is_configured(value: str | None) -> bool:
    """Return True for a non-empty value that is not a `YOUR_..._PLACEHOLDER` stub."""
    cleaned = (value or "").strip()
    return bool(cleaned) and not cleaned.startswith(PLACEHOLDER_PREFIX)


class Settings(BaseSettings):
    """Runtime configuration for the PaperBuddy backend."""

    model_config = SettingsConfigDict(env_prefix="PAPERBUDDY_", extra="ignore")

    app_name: str = "PaperBuddy API"
    log_level: str = "INFO"
    data_dir: str = Field(
        default=str(DEFAULT_DATA_DIR),
        validation_alias=AliasChoices("PAPERBUDDY_DATA_DIR", "DATA_DIR"),
    )
    sqlite_path: str | None = Field(
        default=None,
        validation_alias=AliasChoices("PAPERBUDDY_SQLITE_PATH", "SQLITE_DB_PATH"),
    )
    max_upload_mb: int = 15

    # CORS configuration
    cors_allow_origins: str = Field(
        default="*",
        validation_alias=AliasChoices("PAPERBUDDY_CORS_ALLOW_ORIGINS", "CORS_ALLOW_ORIGINS"),
    )

    # Mark scheme artifacts
    markscheme_backend: str = "local"
    markscheme_dir: str = Field(
        default=str(DEFAULT_MARKSCHEME_DIR),
        validation_alias=AliasChoices("PAPERBUDDY_MARKSCHEME_DIR", "MARKSCHEME_DIR"),
    )
    markscheme_base_url: str | None = Field(
        default=None,
        validation_alias=AliasChoices("PAPERBUDDY_MARKSCHEME_BASE_URL", "MARKSCHEME_BASE_URL"),
    )
    min_markscheme_chars: int = Field(default=50, ge=0)
    http_timeout_seconds: float = 30.0

    # OCR provider
    ocr_provider: str = "compdfkit"
    compdfkit_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("PAPERBUDDY_COMPDFKIT_API_KEY", "COMPDFKIT_API_KEY"),
    )
    compdfkit_ocr_endpoint_url: str | None = Field(
        default=None,
        validation_alias=AliasChoices("PAPERBUDDY_COMPDFKIT_OCR_ENDPOINT_URL", "COMPDFKIT_OCR_ENDPOINT_URL"),
    )

    # AI grading
    openai_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("PAPERBUDDY_OPENAI_API_KEY", "CHATGPT_API_KEY", "OPENAI_API_KEY"),
    )
    ai_model: str = "gpt-3.5-turbo-0125"
    ai_temperature: float = 0.5
    ai_timeout_seconds: float = 60.0

    @model_validator(mode="after")
    def _set_sqlite_path(self) -> "Settings":
        if not self.sqlite_path:
            self.sqlite_path = str(Path(self.data_dir) / "paperbuddy.db")
        return self

    @property
    def sqlite_url(self) -> str:
        return f"sqlite:///{self.sqlite_path}"

    @property
    def data_path(self) -> Path:
        return Path(self.data_dir)

    @property
    def markscheme_path(self) -> Path:
        return Path(self.markscheme_dir)

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_mb * 1024 * 1024

    @property
    def cors_origin_list(self) -> list[str]:
        if self.cors_allow_origins.strip() == "*":
            return ["*"]
        return [origin.strip() for origin in self.cors_allow_origins.split(",") if origin.strip()]

    @property
    def ai_configured(self) -> bool:
        return is_configured(self.openai_api_key)

    @property
    def ocr_configured(self) -> bool:
        return is_configured(self.compdfkit_api_key) and is_configured(self.compdfkit_ocr_endpoint_url)


settings = Settings()
