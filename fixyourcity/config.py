"""Pydantic Settings loaded from environment."""
import os

from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_DATA_DIR = os.path.join(os.path.dirname(__file__), "data")


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="FIXYOURCITY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    data_dir: str = DEFAULT_DATA_DIR
    storage_key: str = "fixYourCityReports"
    success_dismiss_delay: float = 2.0  # seconds the success message stays up
    log_level: str = "INFO"
    cors_origins: str = "http://localhost:3000,http://localhost:5173"

    @property
    def reports_file(self) -> str:
        return os.path.join(self.data_dir, f"{self.storage_key}.json")

    @property
    def cors_origins_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


settings = Settings()
