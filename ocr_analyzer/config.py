"""
Runtime settings, read from the environment.

A `.env` file in the working directory is loaded first, so local
development only needs OPENAI_API_KEY in `.env`.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

DEFAULT_MODEL = "gpt-4o-mini"
DEFAULT_HISTORY_PATH = Path("~/.ocr-analyzer/storage.json")
TRUTHY = {"1", "true", "yes", "on"}


@dataclass
class Settings:
    """Configuration for the analyzer and its collaborators."""
    openai_api_key: Optional[str] = None
    model: str = DEFAULT_MODEL
    temperature: float = 0.0
    timeout: Optional[float] = None
    history_path: Path = DEFAULT_HISTORY_PATH.expanduser()
    use_mock: bool = False
    log_level: str = "INFO"


def _optional_float(value: Optional[str]) -> Optional[float]:
    if value is None or not value.strip():
        return None
    return float(value)


def load_settings(env_file: Optional[Path] = None) -> Settings:
    """
    Build Settings from environment variables.

    Args:
        env_file: Optional explicit `.env` path (default: search from cwd)

    Returns:
        Settings instance

    Raises:
        ValueError: If a numeric variable cannot be parsed
    """
    load_dotenv(env_file)

    history_path = os.getenv("OCR_ANALYZER_HISTORY_PATH")
    return Settings(
        openai_api_key=os.getenv("OPENAI_API_KEY") or None,
        model=os.getenv("OCR_ANALYZER_MODEL", DEFAULT_MODEL),
        temperature=float(os.getenv("OCR_ANALYZER_TEMPERATURE", "0")),
        timeout=_optional_float(os.getenv("OCR_ANALYZER_TIMEOUT")),
        history_path=Path(history_path).expanduser() if history_path else DEFAULT_HISTORY_PATH.expanduser(),
        use_mock=os.getenv("OCR_ANALYZER_MOCK", "").strip().lower() in TRUTHY,
        log_level=os.getenv("OCR_ANALYZER_LOG_LEVEL", "INFO").upper(),
    )
