import logging

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_CORS_ALLOW_ORIGINS = ",".join(
    [
        "https://jmandmj.vercel.app",
        "https://media-uploader-backend.vercel.app",
        "http://localhost:3001",
        "http://localhost:5173",  # Vite dev server
    ]
)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = Field(default="development", validation_alias="APP_ENV")
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    host: str = Field(default="0.0.0.0", validation_alias="HOST")
    port: int = Field(default=3001, validation_alias="PORT")

    cors_allow_origins: str = Field(default=DEFAULT_CORS_ALLOW_ORIGINS, validation_alias="CORS_ALLOW_ORIGINS")

    cloud_name: str = Field(default="", validation_alias="CLOUD_NAME")
    cloud_api_key: str = Field(default="", validation_alias="CLOUD_API_KEY")
    cloud_api_secret: str = Field(default="", validation_alias="CLOUD_API_SECRET")

    media_folder: str = Field(default="wedding-memories", validation_alias="MEDIA_FOLDER")

    def allowed_origins(self) -> list[str]:
        return [o.strip() for o in str(self.cors_allow_origins or "").split(",") if o.strip()]

    @property
    def media_store_enabled(self) -> bool:
        return all([self.cloud_name, self.cloud_api_key, self.cloud_api_secret])

    @property
    def media_prefix(self) -> str:
        return str(self.media_folder or "").strip("/") + "/"

    def is_prod(self) -> bool:
        return (self.app_env or "").strip().lower() in {"prod", "production"}


settings = Settings()


def validate_settings(s: Settings) -> None:
    if "*" in s.allowed_origins():
        raise RuntimeError("CORS_ALLOW_ORIGINS must not include '*' when allow_credentials=true")

    level = str(s.log_level or "").strip().upper()
    if not isinstance(logging.getLevelName(level), int):
        raise RuntimeError(f"LOG_LEVEL must be one of DEBUG, INFO, WARNING, ERROR, CRITICAL (got '{s.log_level}')")

    if s.is_prod():
        if not s.media_store_enabled:
            raise RuntimeError("CLOUD_NAME, CLOUD_API_KEY and CLOUD_API_SECRET must be set in production")
        if not str(s.media_folder or "").strip("/"):
            raise RuntimeError("MEDIA_FOLDER must not be empty in production")
