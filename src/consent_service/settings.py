from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ServiceSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # AI document extraction
    anthropic_api_key: str = Field(default="", alias="ANTHROPIC_API_KEY")
    anthropic_base_url: str = Field(default="https://api.anthropic.com", alias="ANTHROPIC_BASE_URL")
    anthropic_version: str = Field(default="2023-06-01", alias="ANTHROPIC_VERSION")
    extraction_model: str = Field(default="claude-sonnet-4-20250514", alias="EXTRACTION_MODEL")
    extraction_max_tokens: int = Field(default=1000, alias="EXTRACTION_MAX_TOKENS")
    extraction_timeout_seconds: float = Field(default=60.0, alias="EXTRACTION_TIMEOUT_SECONDS")

    # VIN decoding
    nhtsa_base_url: str = Field(default="https://vpic.nhtsa.dot.gov/api/vehicles", alias="NHTSA_BASE_URL")
    vin_timeout_seconds: float = Field(default=10.0, alias="VIN_TIMEOUT_SECONDS")

    # Form sessions
    form_session_ttl_seconds: int = Field(default=3_600, alias="FORM_SESSION_TTL_SECONDS")
    max_upload_bytes: int = Field(default=20 * 1024 * 1024, alias="MAX_UPLOAD_BYTES")

    # Letter template
    letter_company_name: str = Field(default="Clutch Technologies Inc.", alias="LETTER_COMPANY_NAME")
    letter_recipient: str = Field(default="Access Nova Scotia", alias="LETTER_RECIPIENT")
    letter_font_path: str = Field(default="", alias="LETTER_FONT_PATH")
    letter_bold_font_path: str = Field(default="", alias="LETTER_BOLD_FONT_PATH")

    # Logging
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_format: str = Field(default="json", alias="LOG_FORMAT")
