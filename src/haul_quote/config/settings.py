"""
Centralized settings and path configuration for the quoting tool.
"""
import os
from pathlib import Path
from dataclasses import dataclass
from typing import Optional


STORE_ENV_VAR = 'HAUL_QUOTE_STORE'


def get_project_root() -> Path:
    """Get the project root directory (where pyproject.toml lives)."""
    current = Path(__file__).resolve()
    for parent in current.parents:
        if (parent / 'pyproject.toml').exists():
            return parent
    # Fallback to 3 levels up from this file
    return Path(__file__).resolve().parent.parent.parent.parent


@dataclass
class Settings:
    """Application settings with sensible defaults."""

    project_root: Path

    # Flat key-value store holding the persisted rate table
    store_path: Path
    storage_key: str = 'haul_cfg_v1'

    # Quote presentation
    currency_unit: str = 'won'
    quote_title: str = 'Household Bulky Waste Carry-Down Service Quote'
    disclaimer: str = 'Municipal bulky-waste sticker fees are not included (charged at cost).'

    @classmethod
    def load(cls, project_root: Optional[Path] = None) -> 'Settings':
        """Load settings from the project structure and environment."""
        root = project_root or get_project_root()

        store_override = os.environ.get(STORE_ENV_VAR)
        store_path = Path(store_override) if store_override else root / 'data' / 'store.json'

        return cls(
            project_root=root,
            store_path=store_path,
        )


# Default settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings
