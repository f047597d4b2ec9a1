"""Application settings and configuration."""

from pathlib import Path
from dataclasses import dataclass, field
import os
from typing import Optional
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# Project root directory
PROJECT_ROOT = Path(__file__).parent.parent.parent.parent


def _optional_path(name: str) -> Optional[Path]:
    value = os.getenv(name)
    return Path(value) if value else None


@dataclass
class PresetConfig:
    """Preset persistence settings."""

    db_path: Path = field(
        default_factory=lambda: Path(
            os.getenv("EDUFILTER_PRESETS_DB", str(PROJECT_ROOT / "data" / "presets.db"))
        )
    )
    namespace_prefix: str = "saved-filters"


@dataclass
class AppConfig:
    """Application configuration settings."""

    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    log_file: Optional[Path] = field(default_factory=lambda: _optional_path("EDUFILTER_LOG_FILE"))
    suggestion_limit: int = field(
        default_factory=lambda: int(os.getenv("EDUFILTER_SUGGESTION_LIMIT", "5"))
    )


@dataclass
class Config:
    """Main configuration container."""

    presets: PresetConfig = field(default_factory=PresetConfig)
    app: AppConfig = field(default_factory=AppConfig)


# Global config instance
config = Config()
