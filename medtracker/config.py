"""
Configuration management with environment variable support and validation.

Design principles:
- Environment-specific configs (dev, staging, prod)
- Validation at startup (fail fast)
- Type safety with Pydantic
- Secure defaults (no API keys in code)
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal, cast

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator, model_validator

# Load environment variables from .env file
load_dotenv()

DEFAULT_ANALYSIS_MODEL = "google-gla:gemini-2.5-flash"
DEFAULT_DATA_FILE = str(Path.home() / ".medtracker" / "storage.json")


class AIProviderConfig(BaseModel):
    """AI provider configuration. Analysis is disabled when no key is set."""

    google_api_key: str | None = Field(None, description="Google Gemini API key")

    analysis_model: str = Field(
        default=DEFAULT_ANALYSIS_MODEL, description="Model used for the daily health analysis"
    )
    thinking_budget: int = Field(
        default=8000, ge=0, description="Reasoning token budget for models that support it"
    )
    temperature: float | None = Field(
        default=None, ge=0.0, le=2.0, description="Sampling temperature, provider default if unset"
    )
    response_language: str = Field(
        default="English", min_length=1, description="Language the analysis is written in"
    )

    @field_validator("google_api_key")
    def validate_api_key(cls, v):
        if not v:
            return None
        if v == "your-google-api-key-here":
            raise ValueError("GOOGLE_API_KEY still holds the placeholder value from .env.example")
        return v

    @property
    def analysis_enabled(self) -> bool:
        return self.google_api_key is not None


class StorageConfig(BaseModel):
    """Where the state blob lives."""

    data_file: str = Field(default=DEFAULT_DATA_FILE, description="JSON file backing the store")
    state_key: str = Field(
        default="healthTrackData_v14", min_length=1, description="Key of the state blob"
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Logging level"
    )
    format: Literal["json", "console"] = Field(default="json", description="Logging format")


class AppConfig(BaseModel):
    """Main application configuration combining all subsystems."""

    environment: Literal["development", "staging", "production"] = Field(
        default="development", description="Environment"
    )
    debug: bool = Field(default=False, description="Enable debug mode")

    ai_provider: AIProviderConfig
    storage: StorageConfig
    logging: LoggingConfig

    @model_validator(mode="after")
    def debug_only_in_dev(self) -> "AppConfig":
        """Ensure debug mode is only allowed in development environment."""
        if self.debug and self.environment != "development":
            raise ValueError("debug mode is only allowed in development environment")
        return self


def load_config_from_env() -> AppConfig:
    """Load configuration from environment variables with validation."""

    def _env_to_literal(val: str) -> Literal["development", "staging", "production"]:
        v = val.strip().lower()
        if v in {"dev", "development"}:
            return "development"
        if v in {"stage", "staging"}:
            return "staging"
        return "production"

    def _level_to_literal(val: str) -> Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]:
        v = val.strip().upper()
        return cast(
            Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
            v if v in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"} else "INFO",
        )

    def _format_to_literal(val: str | None, debug: bool) -> Literal["json", "console"]:
        if val is None:
            return "console" if debug else "json"
        return "console" if val.strip().lower() == "console" else "json"

    def _optional_float(val: str | None) -> float | None:
        if val is None or not val.strip():
            return None
        return float(val)

    environment = _env_to_literal(os.getenv("ENVIRONMENT", "development"))
    debug = environment == "development"

    ai_config = AIProviderConfig(
        google_api_key=os.getenv("GOOGLE_API_KEY", ""),
        analysis_model=os.getenv("ANALYSIS_MODEL", DEFAULT_ANALYSIS_MODEL),
        thinking_budget=int(os.getenv("ANALYSIS_THINKING_BUDGET", "8000")),
        temperature=_optional_float(os.getenv("ANALYSIS_TEMPERATURE")),
        response_language=os.getenv("ANALYSIS_LANGUAGE", "English"),
    )

    storage_config = StorageConfig(
        data_file=os.getenv("MEDTRACKER_DATA_FILE", DEFAULT_DATA_FILE),
        state_key=os.getenv("MEDTRACKER_STORAGE_KEY", "healthTrackData_v14"),
    )

    logging_config = LoggingConfig(
        level=_level_to_literal(os.getenv("LOG_LEVEL", "INFO")),
        format=_format_to_literal(os.getenv("LOG_FORMAT"), debug),
    )

    return AppConfig(
        environment=environment,
        debug=debug,
        ai_provider=ai_config,
        storage=storage_config,
        logging=logging_config,
    )


@lru_cache
def get_config() -> AppConfig:
    """Get cached application configuration."""
    return load_config_from_env()


def reset_config_cache() -> None:
    """Drop the cached configuration so the next get_config() re-reads the environment."""
    get_config.cache_clear()


def validate_config() -> None:
    """Validate configuration at startup."""
    try:
        config = get_config()
        print(f"✅ Configuration loaded for {config.environment} environment")

        if config.ai_provider.analysis_enabled:
            print("✅ Google API key configured")
        else:
            print("ℹ️  No GOOGLE_API_KEY set, AI analysis disabled")

    except Exception as e:
        print(f"❌ Configuration validation failed: {e}")
        raise


def get_model_config() -> dict[str, Any]:
    """Get the settings used to build the analysis agent."""
    config = get_config()
    return {
        "model_name": config.ai_provider.analysis_model,
        "thinking_budget": config.ai_provider.thinking_budget,
        "temperature": config.ai_provider.temperature,
        "response_language": config.ai_provider.response_language,
    }


def print_config_summary() -> None:
    """Print configuration summary for debugging."""
    config = get_config()

    print("\n🔧 CONFIGURATION SUMMARY")
    print(f"Environment: {config.environment}")
    print(f"Debug Mode: {config.debug}")
    print(f"Log Level: {config.logging.level} ({config.logging.format})")

    print("\n🤖 AI CONFIGURATION")
    print(f"Analysis Enabled: {config.ai_provider.analysis_enabled}")
    print(f"Analysis Model: {config.ai_provider.analysis_model}")
    print(f"Thinking Budget: {config.ai_provider.thinking_budget}")
    print(f"Response Language: {config.ai_provider.response_language}")

    print("\n💾 STORAGE CONFIGURATION")
    print(f"Data File: {config.storage.data_file}")
    print(f"State Key: {config.storage.state_key}")


if __name__ == "__main__":
    validate_config()
    print_config_summary()
