"""
Minka Platform Configuration
Settings for the campaign service and the campaign lifecycle client
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict
from typing import Annotated, Optional, List
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application Settings
    app_name: str = Field(default="Minka Crowdfunding Platform")
    app_version: str = Field(default="1.0.0")
    environment: str = Field(default="development")

    # Server Settings
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000)

    # JWT Configuration
    jwt_algorithm: str = Field(default="HS256")
    jwt_secret_key: str = Field(default="dev-jwt-secret-change-in-production")
    jwt_expiration_hours: int = Field(default=24)

    # Database Configuration
    database_url: str = Field(default="sqlite:///./minka.db")
    database_echo: bool = Field(default=False)

    # Rate Limiting Configuration
    rate_limit_enabled: bool = Field(default=True)
    draft_rate_limit: str = Field(default="60/hour")
    upload_rate_limit: str = Field(default="120/hour")

    # CORS Configuration
    cors_origins: Annotated[List[str], NoDecode] = Field(default=["*"])
    cors_allow_credentials: bool = Field(default=True)

    # Object storage (uploads)
    upload_directory: str = Field(default="./uploads")
    public_media_base_url: str = Field(default="http://localhost:8000/media")
    max_upload_size: int = Field(default=5242880)  # 5MB
    allowed_upload_types: Annotated[List[str], NoDecode] = Field(
        default=["image/jpeg", "image/png", "image/jpg", "video/mp4"]
    )

    # Campaign rules enforced by the service
    max_goal_amount: int = Field(default=150000)
    default_campaign_days: int = Field(default=30)

    # Lifecycle client
    api_base_url: str = Field(default="http://localhost:8000")
    api_timeout: int = Field(default=30)
    max_media_file_size: int = Field(default=2097152)  # 2MB
    allowed_media_types: Annotated[List[str], NoDecode] = Field(default=["image/jpeg", "image/png"])

    # Logging Configuration
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    # Validators
    @field_validator("cors_origins", "allowed_upload_types", "allowed_media_types", mode="before")
    @classmethod
    def parse_list(cls, v):
        """Parse comma separated values from the environment"""
        if isinstance(v, str):
            return [item.strip() for item in v.split(",") if item.strip()]
        return v

    @field_validator("database_url")
    @classmethod
    def validate_database_url(cls, v):
        """Validate database URL format"""
        if not v:
            raise ValueError("Database URL cannot be empty")
        return v

    @field_validator("jwt_secret_key")
    @classmethod
    def validate_jwt_secret_key(cls, v):
        """Validate JWT secret key"""
        if len(v) < 32:
            raise ValueError("JWT secret key must be at least 32 characters long")
        return v

    @property
    def is_development(self) -> bool:
        return self.environment != "production"


# Global settings instance
_settings: Optional[Settings] = None


@lru_cache()
def get_settings() -> Settings:
    """Get application settings (cached)"""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


class ConfigManager:
    """Configuration manager facade"""

    def __init__(self):
        self.settings = get_settings()

    def get_database_url(self) -> str:
        """Get database URL"""
        return self.settings.database_url

    def get_jwt_config(self) -> dict:
        """Get JWT configuration"""
        return {
            "secret_key": self.settings.jwt_secret_key,
            "algorithm": self.settings.jwt_algorithm,
            "expiration_hours": self.settings.jwt_expiration_hours,
        }

    def get_storage_config(self) -> dict:
        """Get object storage configuration"""
        return {
            "directory": self.settings.upload_directory,
            "public_base_url": self.settings.public_media_base_url,
            "max_size": self.settings.max_upload_size,
            "allowed_types": self.settings.allowed_upload_types,
        }


__all__ = [
    "Settings",
    "get_settings",
    "ConfigManager",
]
