"""
OmegaConf-based Settings Store

Manages simulation settings using OmegaConf for:
- Automatic config merging (defaults → runtime overrides)
- Native dot-notation reads and updates
- YAML file persistence (no database needed)
"""

import logging
import time
from pathlib import Path
from typing import Any, Dict, Optional

from omegaconf import DictConfig, OmegaConf

logger = logging.getLogger(__name__)


# Built-in values used when config.defaults.yaml is absent or incomplete
BUILTIN_DEFAULTS: Dict[str, Any] = {
    "universe": {
        "width": 64,
        "height": 64,
        "pattern": "default",
        "seed": None,
    },
    "simulation": {
        "tick_rate_hz": 10.0,
        "autoplay": False,
        "max_steps_per_request": 1000,
    },
    "security": {
        "cors_origins": "",
    },
}


def _default_config_dir() -> Path:
    """Resolve the config directory: image path, then repo checkout."""
    if Path("/usr/src/app/config").exists():
        return Path("/usr/src/app/config")
    return Path(__file__).resolve().parent.parent.parent / "config"


class SettingsStore:
    """
    Manages settings with OmegaConf for automatic merging.

    Load order (later overrides earlier):
    1. built-in defaults
    2. config.defaults.yaml (shipped simulation defaults)
    3. config_settings.yaml (runtime overrides - gitignored)
    """

    def __init__(self, config_dir: Optional[Path] = None):
        self.config_dir = Path(config_dir) if config_dir is not None else _default_config_dir()

        # File paths
        self.defaults_path = self.config_dir / "config.defaults.yaml"
        self.settings_path = self.config_dir / "config_settings.yaml"

        self._cache: Optional[DictConfig] = None
        self._cache_timestamp: float = 0
        self.cache_ttl: int = 5  # seconds

    def clear_cache(self) -> None:
        """Clear the configuration cache, forcing reload on next access."""
        self._cache = None
        self._cache_timestamp = 0
        logger.info("Settings cache cleared")

    def _load_yaml_if_exists(self, path: Path) -> Optional[DictConfig]:
        """Load a YAML file if it exists, return None otherwise."""
        if path.exists():
            try:
                return OmegaConf.load(path)
            except Exception as e:
                logger.error(f"Error loading {path}: {e}")
        return None

    def _merge_sources(self) -> DictConfig:
        configs = [OmegaConf.create(BUILTIN_DEFAULTS)]

        if cfg := self._load_yaml_if_exists(self.defaults_path):
            configs.append(cfg)
            logger.debug(f"Loaded defaults from {self.defaults_path}")

        if cfg := self._load_yaml_if_exists(self.settings_path):
            configs.append(cfg)
            logger.debug(f"Loaded settings from {self.settings_path}")

        merged = OmegaConf.merge(*configs)
        self._cache = merged
        self._cache_timestamp = time.time()
        return merged

    async def load_config(self, use_cache: bool = True) -> DictConfig:
        """
        Load merged configuration from all sources.

        Returns:
            OmegaConf DictConfig with all values merged
        """
        if use_cache and self._cache is not None:
            if time.time() - self._cache_timestamp < self.cache_ttl:
                return self._cache

        logger.debug("Loading configuration from all sources...")
        return self._merge_sources()

    async def get(self, key_path: str, default: Any = None) -> Any:
        """
        Get a value by dot-notation path.

        Args:
            key_path: Dot notation path (e.g., "simulation.tick_rate_hz")
            default: Default value if not found
        """
        config = await self.load_config()
        return OmegaConf.select(config, key_path, default=default)

    def get_sync(self, key_path: str, default: Any = None) -> Any:
        """
        Sync version of get() for module-level initialization.

        Use this when config values are needed outside an event loop
        (e.g., CORS origins while building the app).
        """
        if self._cache is None:
            self._merge_sources()
        return OmegaConf.select(self._cache, key_path, default=default)

    async def get_config_as_dict(self) -> Dict[str, Any]:
        config = await self.load_config()
        return OmegaConf.to_container(config, resolve=True)

    @staticmethod
    def _apply_updates(config: DictConfig, updates: dict) -> None:
        for key, value in updates.items():
            if '.' in key and not isinstance(value, dict):
                OmegaConf.update(config, key, value)
            else:
                OmegaConf.update(config, key, value, merge=True)

    def _save_to_file(self, file_path: Path, updates: dict) -> None:
        """Internal helper to save updates to a specific file."""
        current = self._load_yaml_if_exists(file_path) or OmegaConf.create({})
        self._apply_updates(current, updates)

        file_path.parent.mkdir(parents=True, exist_ok=True)
        OmegaConf.save(current, file_path)
        logger.info(f"Saved to {file_path}: {list(updates.keys())}")

    async def preview(self, updates: dict) -> Dict[str, Any]:
        """Merged configuration as it would be after ``update(updates)``, without saving."""
        candidate = OmegaConf.merge(await self.load_config(use_cache=False))
        self._apply_updates(candidate, updates)
        return OmegaConf.to_container(candidate, resolve=True)

    async def update(self, updates: dict) -> None:
        """
        Persist overrides to config_settings.yaml.

        Args:
            updates: Dict with updates - supports both formats:
                     - Dot notation: {"simulation.tick_rate_hz": 30}
                     - Nested: {"simulation": {"tick_rate_hz": 30}}
        """
        self._save_to_file(self.settings_path, updates)
        self._cache = None

    async def reset(self) -> bool:
        """
        Reset settings by deleting the runtime overrides file.

        Returns:
            True if a file was deleted
        """
        self._cache = None
        if self.settings_path.exists():
            self.settings_path.unlink()
            logger.info(f"Deleted {self.settings_path}")
            return True
        return False


# Global instance
_settings_store: Optional[SettingsStore] = None


def get_settings_store(config_dir: Optional[Path] = None) -> SettingsStore:
    """Get global SettingsStore instance."""
    global _settings_store
    if _settings_store is None:
        _settings_store = SettingsStore(config_dir)
    return _settings_store


def set_settings_store(store: Optional[SettingsStore]) -> None:
    """Replace the global SettingsStore instance (None drops it)."""
    global _settings_store
    _settings_store = store
