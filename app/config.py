"""Application configuration using Pydantic settings."""

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    DB_HOST: Optional[str] = None
    DB_PORT: int = 5432
    DB_NAME: Optional[str] = None
    DB_USER: Optional[str] = None
    DB_PASSWORD: Optional[str] = None
    DB_POOL_MIN: int = 1
    DB_POOL_MAX: int = 10
    QUERY_TIMEOUT: int = 30
    DB_POOL_ACQUIRE_TIMEOUT: float = 10.0

    # Row-level security
    RLS_ROLE: str = "app_user"
    RLS_IDENTITY_SETTING: str = "app.current_user_id"

    # Table semantics index
    TABLE_SEMANTICS_TABLE: str = "table_semantics"
    TOP_K_TABLES: int = 2
    ENABLE_NATIVE_SIMILARITY: bool = True

    # LLM APIs
    LLM_PROVIDER: str = "openai"

    OPENAI_API_KEY: Optional[str] = None
    OPENAI_GENERAL_MODEL: str = "gpt-4o"
    OPENAI_EMBEDDING_MODEL: str = "text-embedding-3-small"
    OPENAI_MAX_TOKENS: int = 1000

    ANTHROPIC_API_KEY: Optional[str] = None
    ANTHROPIC_SQL_MODEL: str = ""
    ANTHROPIC_MAX_TOKENS: int = 1000

    # Langfuse
    LANGFUSE_PUBLIC_KEY: Optional[str] = None
    LANGFUSE_SECRET_KEY: Optional[str] = None
    LANGFUSE_HOST: str = "https://us.cloud.langfuse.com"

    # Application
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8001
    STREAMLIT_PORT: int = 8501
    LOG_LEVEL: str = "INFO"

    # Pydantic v2 configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"
    )


# Global settings instance
settings = Settings()
