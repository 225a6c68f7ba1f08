"""
Config Store - flat key-value persistence for the rate table.

Values are strings kept in a single JSON file, one entry per key. The rate
table is stored under a fixed versioned key.
"""
import json
import logging
from pathlib import Path
from typing import Optional

from ..engine import rate_config
from ..engine.models import RateConfig

logger = logging.getLogger(__name__)


class KeyValueStore:
    """String key → string value store backed by a JSON file."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def _read_all(self) -> dict:
        if not self.path.exists():
            return {}
        with open(self.path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"Store file {self.path} does not hold a JSON object")
        return data

    def get_item(self, key: str) -> Optional[str]:
        """Return the stored value, or None if the key is absent."""
        value = self._read_all().get(key)
        return value if isinstance(value, str) else None

    def set_item(self, key: str, value: str):
        """Write a value. Raises OSError if the file cannot be written."""
        try:
            data = self._read_all()
        except ValueError:
            logger.warning("Store file %s is corrupt, starting a fresh one", self.path)
            data = {}
        data[key] = value

        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + '.tmp')
        with open(tmp_path, 'w', encoding='utf-8') as f:
            json.dump(data, f, ensure_ascii=False, indent=2)
        tmp_path.replace(self.path)


class ConfigStore:
    """Loads and saves the rate table through a KeyValueStore."""

    def __init__(self, store: KeyValueStore, key: str = 'haul_cfg_v1'):
        self.store = store
        self.key = key

    def load(self) -> RateConfig:
        """Read the stored rate table, falling back to defaults on any problem."""
        try:
            raw = self.store.get_item(self.key)
        except (OSError, ValueError) as e:
            logger.warning("Could not read rate table from %s: %s", self.store.path, e)
            raw = None
        return rate_config.load(raw)

    def save(self, cfg: RateConfig) -> bool:
        """
        Persist the rate table.

        A failed write is logged and reported as False; it never raises and
        never touches the in-memory config.
        """
        try:
            self.store.set_item(self.key, rate_config.dumps(cfg))
            return True
        except OSError as e:
            logger.warning("Could not save rate table to %s: %s", self.store.path, e)
            return False
