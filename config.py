"""
Centralized configuration for the chapter quiz service.
Loads settings from environment variables (and a .env file) with defaults.
"""
import os
from typing import Any, Dict

from dotenv import load_dotenv

load_dotenv()


class Config:
    """
    Configuration for quiz generation, the model client and the database.
    """

    # Model configuration
    GEMINI_API_KEY = os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY", "")
    GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")
    MODEL_TIMEOUT = float(os.getenv("MODEL_TIMEOUT", "60"))
    MODEL_TEMPERATURE = float(os.getenv("MODEL_TEMPERATURE", "0.9"))

    # Retry configuration (retries after the first attempt)
    MAX_GENERATION_RETRIES = int(os.getenv("MAX_GENERATION_RETRIES", "2"))

    # Quiz shape
    TARGET_QUESTION_COUNT = int(os.getenv("TARGET_QUESTION_COUNT", "15"))
    MIN_QUESTION_COUNT = int(os.getenv("MIN_QUESTION_COUNT", "10"))

    # Source content handling
    MIN_CONTENT_LENGTH = int(os.getenv("MIN_CONTENT_LENGTH", "100"))
    CONTENT_CHAR_BUDGET = int(os.getenv("CONTENT_CHAR_BUDGET", "8000"))
    QUALITY_SAMPLE_SIZE = int(os.getenv("QUALITY_SAMPLE_SIZE", "2000"))

    # Logging
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    LOG_FILE = os.getenv("LOG_FILE", "")

    # Database
    DATABASE_URL = os.getenv("DATABASE_URL", "")

    @classmethod
    def get_config_dict(cls) -> Dict[str, Any]:
        return {
            key: value for key, value in cls.__dict__.items()
            if key.isupper() and not callable(value)
        }

    @classmethod
    def log_config(cls, logger) -> None:
        """
        Log the configuration values, masking secrets.

        Args:
            logger: Logger to use for logging
        """
        logger.info("=== Configuration ===")
        for key, value in cls.get_config_dict().items():
            if key == "GEMINI_API_KEY":
                value = f"{value[:4]}...{value[-4:]}" if len(value) > 8 else "[Not Set]"
            elif key == "DATABASE_URL" and "@" in value:
                value = value.split("@", 1)[-1]
            logger.info(f"{key}: {value}")
        logger.info("====================")


config = Config()
