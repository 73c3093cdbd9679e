"""Configuration module"""

from .infra_settings import get_infra_settings, InfraSettings
from .omegaconf_settings import (
    get_settings_store,
    set_settings_store,
    SettingsStore,
    BUILTIN_DEFAULTS,
)

__all__ = [
    # Infrastructure settings (env vars)
    "get_infra_settings",
    "InfraSettings",
    # Settings store (YAML files)
    "get_settings_store",
    "set_settings_store",
    "SettingsStore",
    "BUILTIN_DEFAULTS",
]
