from pydantic_settings import BaseSettings
from pydantic import Field
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings."""

    # Database
    database_url: str = Field(..., env="DATABASE_URL")

    # Auth
    # Read from JWT_SECRET rather than the field name
    jwt_secret_key: str = Field(..., validation_alias="JWT_SECRET")
    token_expire_hours: int = Field(default=8, env="TOKEN_EXPIRE_HOURS")

    # Cloudinary image storage
    cloudinary_cloud_name: str = Field(default="", env="CLOUDINARY_CLOUD_NAME")
    cloudinary_api_key: str = Field(default="", env="CLOUDINARY_API_KEY")
    cloudinary_api_secret: str = Field(default="", env="CLOUDINARY_API_SECRET")
    cloudinary_folder: str = Field(default="dialysis_app", env="CLOUDINARY_FOLDER")
    cloudinary_api_url: str = Field(
        default="https://api.cloudinary.com/v1_1",
        env="CLOUDINARY_API_URL",
    )
    storage_timeout_seconds: float = Field(default=30.0, env="STORAGE_TIMEOUT_SECONDS")

    # CORS
    cors_origins: list[str] = Field(
        default=[
            "http://localhost:3000",
            "http://127.0.0.1:3000",
            "https://dialysis-app-fyp.vercel.app",
        ],
        env="CORS_ORIGINS",
    )

    # Logging
    log_level: str = Field(default="INFO", env="LOG_LEVEL")
    log_format: str = Field(default="verbose", env="LOG_FORMAT")  # "verbose" | "json"

    class Config:
        env_file = ".env"
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
