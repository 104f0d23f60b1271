"""Configuration management using Pydantic Settings"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # External Services
    store_api_base: str = "http://localhost:8080/api"

    # Service
    service_name: str = "store-ledger"
    log_level: str = "INFO"

    # HTTP Client
    http_timeout_seconds: float = 5.0

    # Display
    currency_symbol: str = "Rs. "

    # Statement export (page geometry in millimetres, surface in CSS-style pixels)
    statement_page_width_mm: float = 210.0
    statement_page_height_mm: float = 295.0
    statement_surface_width_px: int = 800
    statement_render_scale: int = 2
    statement_font_path: str | None = None

    # Backup
    backup_dir: str = "backups"
    backup_file_name: str = "store_management_backup.json"


settings = Settings()
