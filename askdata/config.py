"""Configuration management using pydantic-settings."""

from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Server Configuration
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=7788, description="Server port")
    debug: bool = Field(default=False, description="Debug mode")

    # Storage Configuration
    database_path: str = Field(default="./data/askdata.db", description="DuckDB database path")
    datasources_dir: str = Field(default="./data/datasources", description="Directory holding DuckDB data source files")

    # OpenAI Configuration
    openai_api_key: Optional[str] = Field(default=None, description="OpenAI API key")
    openai_base_url: Optional[str] = Field(default=None, description="OpenAI-compatible API base URL")
    nl_query_model: str = Field(default="gpt-4o-mini", description="Model used to write queries")
    title_model: str = Field(default="gpt-4o-mini", description="Model used to title conversations")
    embedding_model: str = Field(default="text-embedding-3-large", description="Embedding model for semantic search")
    semantic_search_threshold: float = Field(default=0.75, description="Minimum cosine similarity for a match")

    # Natural Language Query Configuration
    nl_query_max_attempts: int = Field(default=5, description="Maximum query attempts per tool call")
    nl_query_retry_delay: float = Field(default=2.0, description="Seconds to wait between query attempts")
    related_examples_limit: int = Field(default=5, description="Maximum few-shot examples per prompt")
    report_row_limit: int = Field(default=100, description="Row limit applied to agent queries")

    # Run Configuration
    recorder_poll_interval: float = Field(default=2.0, description="Seconds between run status polls")

    # Web Search Configuration
    web_reader_url: str = Field(default="https://r.jina.ai", description="Reader endpoint for URLs")
    web_search_url: str = Field(default="https://s.jina.ai", description="Search endpoint for queries")
    web_timeout: float = Field(default=30.0, description="Web request timeout in seconds")

    # Upload Configuration
    max_upload_files: int = Field(default=10, description="Maximum files per turn")
    max_upload_size: int = Field(default=200 * 1024 * 1024, description="Maximum file size in bytes")

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Log level")
    log_file: str = Field(default="./logs/app.log", description="Log file path")


# Global settings instance
settings = Settings()
