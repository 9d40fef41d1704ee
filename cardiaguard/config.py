"""
CardiaGuard Configuration
=========================
Centralised settings for the analysis model, API keys and logging.
Loads secrets from the project-level .env file.
"""
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# ── Paths ───────────────────────────────────────────────────────────────
PROJECT_ROOT = Path(__file__).resolve().parent.parent

# ── Load .env ───────────────────────────────────────────────────────────
load_dotenv(PROJECT_ROOT / ".env")

APP_VERSION = "1.0.0"

DEFAULT_MODEL = "gemini-2.5-flash"

GENERIC_ANALYSIS_ERROR = (
    "Analysis Failed: Please check your internet connection and API configuration."
)


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return float(raw)


@dataclass
class Settings:
    """Runtime settings, read from the environment at construction time."""
    gemini_api_key: Optional[str] = field(
        default_factory=lambda: os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY")
    )
    gemini_model: str = field(
        default_factory=lambda: os.getenv("CARDIAGUARD_GEMINI_MODEL", DEFAULT_MODEL)
    )
    temperature: float = field(
        default_factory=lambda: _env_float("CARDIAGUARD_TEMPERATURE", 0.2)
    )
    request_timeout_seconds: float = field(
        default_factory=lambda: _env_float("CARDIAGUARD_REQUEST_TIMEOUT", 30.0)
    )
    log_level: str = field(
        default_factory=lambda: os.getenv("CARDIAGUARD_LOG_LEVEL", "INFO")
    )
    log_file: Optional[str] = field(
        default_factory=lambda: os.getenv("CARDIAGUARD_LOG_FILE") or None
    )


settings = Settings()
