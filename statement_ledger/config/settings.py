from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    log_level: str = "INFO"

    pdf_engine: str = "pymupdf"

    text_sufficiency_threshold: int = 150
    meaningful_script: str = "Han"
    render_scale: float = 3.0
    image_contrast_factor: float = 1.4
    image_jpeg_quality: int = 90

    cutoff_day: int | None = Field(default=None, ge=1, le=31)
    password_presets: list[str] = Field(default_factory=list)

    inference_provider: str = "openai"
    inference_api_key: str = ""
    inference_model_name: str = ""
    inference_base_url: str = ""
    inference_timeout_seconds: int = 120
    inference_temperature: float = 0.0

    snapshot_backend: str = "file"
    snapshot_path: str = "ledger_snapshot.json"
    snapshot_key: str = "default"

    db_host: str = "localhost"
    db_port: int = 5432
    db_database: str = "statement_ledger"
    db_username: str = "statement_ledger"
    db_password: str = "secret"
