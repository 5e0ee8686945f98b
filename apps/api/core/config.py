"""
Centralized configuration management with validation.

All environment variables are loaded and validated here.
This ensures consistent configuration across the application.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from typing import Optional
from dotenv import load_dotenv

load_dotenv()


class Settings(BaseSettings):
    """Application settings with validation."""
    
    # Pydantic v2 configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore"
    )
    
    # API Configuration
    API_HOST: str = Field(default="0.0.0.0")
    API_PORT: int = Field(default=8000)
    
    # Logging Configuration
    LOG_LEVEL: str = Field(default="INFO")
    LOG_FORMAT: str = Field(default="json")  # json or text
    
    # Plan engine
    # Directory holding plan_rules.yaml / workout_catalog.yaml (defaults to apps/api/config)
    PLAN_CONFIG_DIR: Optional[str] = Field(default=None)
    # Seeds workout variety for every request when set (reproducible plans)
    PLAN_RANDOM_SEED: Optional[int] = Field(default=None)
    MIN_PLAN_WEEKS: int = Field(default=1, ge=1)
    MAX_PLAN_WEEKS: int = Field(default=30, ge=1)
    
    # Environment
    ENVIRONMENT: str = Field(default="development")
    DEBUG: bool = Field(default=False)
    
    # CORS - comma-separated list of allowed origins for production
    # e.g., "https://plans.example.com,https://www.plans.example.com"
    CORS_ORIGINS: Optional[str] = Field(default=None)


# Global settings instance
settings = Settings()
