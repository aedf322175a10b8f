"""
Configuration settings for the MongoDB latency exporter
"""

from enum import Enum

from pydantic import Field, validator
from pydantic_settings import BaseSettings


class Environment(str, Enum):
    """Environment types"""

    DEVELOPMENT = "development"
    TESTING = "testing"
    STAGING = "staging"
    PRODUCTION = "production"


class LogLevel(str, Enum):
    """Log levels"""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class MongoSettings(BaseSettings):
    """MongoDB client configuration"""

    uri: str = Field(default="mongodb://localhost:27017")
    app_name: str = Field(default="mongo-latency-exporter")
    server_selection_timeout_ms: int = Field(default=5000)
    connect_timeout_ms: int = Field(default=5000)
    socket_timeout_ms: int = Field(default=10000)
    aggregate_max_time_ms: int = Field(default=5000)
    # Client-side operation timeout (timeoutMS); when set it replaces
    # socket_timeout_ms and aggregate_max_time_ms
    operation_timeout_ms: int | None = Field(default=None)

    @validator(
        "server_selection_timeout_ms",
        "connect_timeout_ms",
        "socket_timeout_ms",
        "operation_timeout_ms",
        "aggregate_max_time_ms",
    )
    def validate_timeouts(cls, v):
        if v is not None and v <= 0:
            raise ValueError("timeouts must be positive")
        return v

    class Config:
        env_prefix = "MONGODB_"


class ExporterSettings(BaseSettings):
    """Metrics exposition configuration"""

    namespace: str = Field(default="mongodb")
    host: str = Field(default="127.0.0.1")
    port: int = Field(default=9216)
    scrape_timeout_seconds: float = Field(default=30.0)

    @validator("scrape_timeout_seconds")
    def validate_scrape_timeout(cls, v):
        if v <= 0:
            raise ValueError("scrape_timeout_seconds must be positive")
        return v

    class Config:
        env_prefix = "EXPORTER_"


class Settings(BaseSettings):
    """Main application settings"""

    # Environment
    environment: Environment = Field(default=Environment.DEVELOPMENT)
    log_level: LogLevel = Field(default=LogLevel.INFO)

    # Application
    app_name: str = Field(default="MongoDB Latency Exporter")
    app_version: str = Field(default="1.0.0")

    # Component settings
    mongodb: MongoSettings = Field(default_factory=MongoSettings)
    exporter: ExporterSettings = Field(default_factory=ExporterSettings)

    @validator("environment", pre=True)
    def validate_environment(cls, v):
        if isinstance(v, str):
            return Environment(v.lower())
        return v

    @validator("log_level", pre=True)
    def validate_log_level(cls, v):
        if isinstance(v, str):
            return LogLevel(v.upper())
        return v

    def is_production(self) -> bool:
        """Check if running in production"""
        return self.environment == Environment.PRODUCTION

    def is_development(self) -> bool:
        """Check if running in development"""
        return self.environment == Environment.DEVELOPMENT

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


# Global settings instance
settings = Settings()
