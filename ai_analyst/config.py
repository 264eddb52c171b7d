"""
Global Configuration Settings

Centralized configuration for the AI analyst service.
Controls the usage-tracking service, model settings, raw data limits and logging.
"""

import os
from typing import Optional
import logging

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

_logging_configured = False


class AppConfig:
    """Global application configuration."""

    def __init__(self):
        # OpenAI Configuration
        self.OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
        self.OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
        self.MODEL_TEMPERATURE = float(os.getenv("MODEL_TEMPERATURE", "0.7"))

        # Backend Service Configuration (usage tracking + raw records)
        self.API_BASE_URL = os.getenv("API_BASE_URL", "").rstrip("/")
        self.REQUEST_TIMEOUT = float(os.getenv("REQUEST_TIMEOUT", "30"))

        # Quota Configuration
        self.QUOTA_MAX_RETRIES = int(os.getenv("QUOTA_MAX_RETRIES", "1"))
        self.QUOTA_RETRY_BASE_DELAY = float(os.getenv("QUOTA_RETRY_BASE_DELAY", "0"))

        # Raw Data Prompt Limits
        self.RAW_DATA_MAX_ROWS = int(os.getenv("RAW_DATA_MAX_ROWS", "200"))
        self.RAW_DATA_MAX_CHARS = int(os.getenv("RAW_DATA_MAX_CHARS", "12000"))

        # Logging Configuration
        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

        # Development/Debug Configuration
        self.DEBUG_MODE = self._get_bool_env("DEBUG_MODE", default=False)
        self.ENABLE_CORS = self._get_bool_env("ENABLE_CORS", default=True)

        # Log the current configuration
        self._log_configuration()

    def _get_bool_env(self, key: str, default: bool = False) -> bool:
        """Get boolean value from environment variable."""
        value = os.getenv(key, "").lower()
        if value in ("true", "1", "yes", "on"):
            return True
        elif value in ("false", "0", "no", "off"):
            return False
        else:
            return default

    def _log_configuration(self):
        """Log the current configuration settings."""
        logger.info("🔧 Application Configuration:")
        logger.info(f"   OpenAI Model: {self.OPENAI_MODEL}")
        logger.info(f"   Usage API: {self.API_BASE_URL or '(not set)'}")
        logger.info(f"   Quota Retries: {self.QUOTA_MAX_RETRIES}")
        logger.info(f"   Raw Data Limits: {self.RAW_DATA_MAX_ROWS} rows / {self.RAW_DATA_MAX_CHARS} chars")
        logger.info(f"   Debug Mode: {'✅ ENABLED' if self.DEBUG_MODE else '❌ DISABLED'}")
        logger.info(f"   Log Level: {self.LOG_LEVEL}")

    def is_development_mode(self) -> bool:
        """Check if running in development mode."""
        return self.DEBUG_MODE or os.getenv("ENVIRONMENT", "").lower() in ("dev", "development", "local")

    def get_summary(self) -> dict:
        """Get a summary of current configuration."""
        return {
            "openai_model": self.OPENAI_MODEL,
            "api_base_url": self.API_BASE_URL,
            "quota_max_retries": self.QUOTA_MAX_RETRIES,
            "raw_data_max_rows": self.RAW_DATA_MAX_ROWS,
            "raw_data_max_chars": self.RAW_DATA_MAX_CHARS,
            "debug_mode": self.DEBUG_MODE,
            "log_level": self.LOG_LEVEL,
            "development_mode": self.is_development_mode()
        }


_config: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """Get the shared configuration instance, loading it on first use."""
    global _config
    if _config is None:
        load_dotenv()
        _config = AppConfig()
    return _config


def reset_config() -> None:
    """Drop the shared configuration so the next get_config() re-reads the environment."""
    global _config
    _config = None


def configure_logging(level: Optional[str] = None) -> None:
    """Set up root logging once. Later calls are no-ops."""
    global _logging_configured
    if _logging_configured:
        return
    logging.basicConfig(
        level=(level or get_config().LOG_LEVEL).upper(),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    _logging_configured = True


# Environment variable documentation
ENV_VARS_HELP = """
Environment Variables for Configuration:

🤖 OpenAI:
   OPENAI_API_KEY=sk-...              # OpenAI API key
   OPENAI_MODEL=gpt-4o-mini           # OpenAI model to use
   MODEL_TEMPERATURE=0.7              # Sampling temperature

🌐 Backend service:
   API_BASE_URL=https://...           # Base URL of the usage-tracking / raw-data service
   REQUEST_TIMEOUT=30                 # HTTP timeout in seconds

🎟️  Quota:
   QUOTA_MAX_RETRIES=1                # Extra attempts after a transport failure
   QUOTA_RETRY_BASE_DELAY=0           # Backoff base delay in seconds (0 = retry immediately)

📄 Raw data prompts:
   RAW_DATA_MAX_ROWS=200              # Rows embedded in a raw data prompt
   RAW_DATA_MAX_CHARS=12000           # Characters embedded in a raw data prompt

🐛 Development:
   DEBUG_MODE=true|false              # Enable debug mode (default: false)
   LOG_LEVEL=INFO|DEBUG|WARNING       # Logging level (default: INFO)
   ENABLE_CORS=true|false             # Enable CORS (default: true)

Example .env file:
   API_BASE_URL=http://localhost:5000/api
   OPENAI_MODEL=gpt-4o-mini
   LOG_LEVEL=DEBUG
"""

if __name__ == "__main__":
    config = get_config()
    print("🔧 AI Analyst Configuration")
    print("=" * 50)
    for key, value in config.get_summary().items():
        print(f"{key}: {value}")
    print("\n" + ENV_VARS_HELP)
