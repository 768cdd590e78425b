"""
Centralized configuration management with validation.

All environment variables are loaded and validated here.
This ensures consistent configuration across the application.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from typing import List, Optional
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

    # Database Configuration
    # DATABASE_URL wins when set (managed Postgres hands out a single URL).
    DATABASE_URL: Optional[str] = Field(default=None)
    POSTGRES_USER: str = Field(default="postgres")
    POSTGRES_PASSWORD: str = Field(default="postgres")
    POSTGRES_DB: str = Field(default="ptstudio")
    POSTGRES_HOST: str = Field(default="postgres")
    POSTGRES_PORT: int = Field(default=5432)

    # Database Pool Configuration
    DB_POOL_SIZE: int = Field(default=10)
    DB_MAX_OVERFLOW: int = Field(default=10)
    DB_POOL_TIMEOUT: int = Field(default=30)
    DB_POOL_RECYCLE: int = Field(default=3600)  # 1 hour

    # JWT Authentication - REQUIRED for token signing
    SECRET_KEY: str = Field(
        default=...,  # Required - no default
        description="JWT signing key. Must be cryptographically secure (32+ chars). "
                    "Generate with: python -c \"import secrets; print(secrets.token_urlsafe(32))\""
    )
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(default=7 * 24 * 60)

    # API Configuration
    API_HOST: str = Field(default="0.0.0.0")
    API_PORT: int = Field(default=8000)

    # Logging Configuration
    LOG_LEVEL: str = Field(default="INFO")
    LOG_FORMAT: str = Field(default="json")  # json or text

    # LLM providers
    ANTHROPIC_API_KEY: Optional[str] = Field(default=None)
    ANTHROPIC_MODEL: str = Field(default="claude-3-5-sonnet-20241022")
    OPENAI_API_KEY: Optional[str] = Field(default=None)
    OPENAI_MODEL: str = Field(default="gpt-4o")
    GOOGLE_AI_API_KEY: Optional[str] = Field(default=None)
    GEMINI_MODEL: str = Field(default="gemini-2.5-flash")

    # Ordered provider chain: primary first, then the single fallback.
    GENERATION_PROVIDERS: str = Field(default="anthropic,openai")
    GENERATION_MAX_TOKENS: int = Field(default=4000)
    GENERATION_TEMPERATURE: float = Field(default=0.7, ge=0.0, le=2.0)

    # Notion mirror (optional - mirror is disabled when either is missing)
    NOTION_TOKEN: Optional[str] = Field(default=None)
    NOTION_DATABASE_ID: Optional[str] = Field(default=None)

    # Plan defaults baked into prompts and summaries
    PLAN_COACH_NAME: str = Field(default="Coach Pete Ryan")
    PLAN_LOCATION: str = Field(default="PureGym West Byfleet")
    PLAN_SESSION_MINUTES: int = Field(default=45)

    # Environment
    ENVIRONMENT: str = Field(default="development")
    DEBUG: bool = Field(default=False)
    EXPOSE_API_DOCS: bool = Field(default=False)

    # CORS - comma-separated list of allowed origins for production
    CORS_ORIGINS: Optional[str] = Field(default=None)

    @property
    def generation_provider_names(self) -> List[str]:
        return [
            name.strip().lower()
            for name in self.GENERATION_PROVIDERS.split(",")
            if name.strip()
        ]

    @property
    def notion_configured(self) -> bool:
        return bool(self.NOTION_TOKEN and self.NOTION_DATABASE_ID)


# Global settings instance
settings = Settings()
