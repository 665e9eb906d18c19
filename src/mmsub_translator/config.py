"""Configuration and constants."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Optional
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables once
load_dotenv()

DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/openai/"
DEFAULT_MODEL = "gemini-3-flash-preview"
DEFAULT_STORE_DIR = Path.home() / ".mmsub_translator" / "projects"


def _env_store_dir() -> Path:
    value = os.environ.get("MMSUB_STORE_DIR")
    return Path(value).expanduser() if value else DEFAULT_STORE_DIR


@dataclass
class TranslatorConfig:
    """Configuration for the subtitle translator."""

    # API settings
    api_key: Optional[str] = None
    base_url: str = field(default_factory=lambda: os.environ.get("MMSUB_BASE_URL", DEFAULT_BASE_URL))
    model_name: str = field(default_factory=lambda: os.environ.get("MMSUB_MODEL", DEFAULT_MODEL))
    timeout: float = 60.0

    # Processing settings
    batch_size: int = 20
    training_limit: int = 30
    retry_failed: bool = True

    # Output settings
    output_prefix: str = "mm_"

    # Storage
    store_dir: Path = field(default_factory=_env_store_dir)

    def __post_init__(self):
        """Load API key from environment if not provided."""
        if self.api_key is None:
            self.api_key = os.environ.get("GEMINI_API_KEY")

    @classmethod
    def from_args(cls, args) -> "TranslatorConfig":
        """Create config from argparse namespace; unset options fall back to the environment."""
        config = cls(api_key=getattr(args, 'api_key', None) or None)

        if getattr(args, 'base_url', None):
            config.base_url = args.base_url
        if getattr(args, 'model_name', None):
            config.model_name = args.model_name
        if getattr(args, 'store_dir', None):
            config.store_dir = Path(args.store_dir).expanduser()
        if getattr(args, 'batch_size', None) is not None:
            config.batch_size = args.batch_size
        if getattr(args, 'training_limit', None) is not None:
            config.training_limit = args.training_limit

        return config

    def validate(self) -> Optional[str]:
        """
        Validate configuration.

        Returns:
            Error message if invalid, None if valid
        """
        if not self.api_key:
            return "API key is required. Set GEMINI_API_KEY or use --api-key"

        if self.batch_size < 1 or self.batch_size > 100:
            return f"Batch size must be 1-100, got {self.batch_size}"

        if self.training_limit < 0:
            return f"Training limit must not be negative, got {self.training_limit}"

        return None


# Default glossary filename
DEFAULT_GLOSSARY_FILENAME = "glossary.txt"

# Appended to the file name of imported training projects
TRAINING_NAME_SUFFIX = " (Training Data)"
