"""Application configuration management."""
from typing import List, Optional
from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Application settings."""

    # AI provider hosts (endpoint paths are fixed per provider)
    deepseek_base_url: str = Field(
        default="https://api.deepseek.com",
        description="DeepSeek API host"
    )
    doubao_base_url: str = Field(
        default="https://ark.cn-beijing.volces.com",
        description="Doubao (Volcengine Ark) API host"
    )
    tongyi_base_url: str = Field(
        default="https://dashscope.aliyuncs.com",
        description="Tongyi Qianwen (DashScope) API host"
    )

    # Remembered provider configuration, used when a request omits it
    default_provider: str = Field(
        default="deepseek",
        description="Provider used when a request does not name one"
    )
    default_api_key: str = Field(
        default="",
        description="API key used when a request does not carry one"
    )
    default_model: Optional[str] = Field(
        default=None,
        description="Model override used when a request does not carry one"
    )

    # LLM call limits
    llm_timeout_seconds: float = Field(
        default=60.0,
        gt=0,
        description="Timeout for a single provider call, in seconds"
    )
    llm_max_tokens: int = Field(
        default=4096,
        gt=0,
        description="max_tokens sent with every review request"
    )

    # Review configuration
    chunk_size: int = Field(
        default=8000,
        description="Characters per review window"
    )
    chunk_overlap: int = Field(
        default=500,
        description="Characters shared by consecutive review windows"
    )
    outline_row_delay_seconds: float = Field(
        default=1.0,
        ge=0.0,
        description="Pause between checklist rows in outline mode"
    )

    # File Upload Configuration
    max_upload_mb: int = Field(
        default=20,
        gt=0,
        description="Largest accepted upload, in megabytes"
    )

    # Application Configuration
    debug: bool = Field(default=True, description="Debug mode")
    host: str = Field(default="0.0.0.0", description="Host address")
    port: int = Field(default=8000, description="Port number")

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")

    # Security
    allowed_origins: List[str] = Field(
        default=["http://localhost:5173", "http://127.0.0.1:5173", "http://localhost:8000"],
        description="List of allowed origins for CORS"
    )

    class Config:
        env_file = ".env"
        case_sensitive = False


# Global settings instance
settings = Settings()
