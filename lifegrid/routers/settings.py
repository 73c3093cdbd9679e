"""
Settings and configuration endpoints (OmegaConf-based)

Provides REST API for reading and updating simulation settings with
automatic config merging (built-in defaults → config.defaults.yaml → overrides).
Updates are validated against the known keys before they are saved. Universe
settings apply on the next reset or restart; the running universe is untouched.
"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, HTTPException
from omegaconf.errors import OmegaConfBaseException
from pydantic import BaseModel

from lifegrid.config.infra_settings import get_infra_settings
from lifegrid.config.omegaconf_settings import get_settings_store
from lifegrid.exceptions import InvalidRequest
from lifegrid.models.settings import validate_config

logger = logging.getLogger(__name__)
router = APIRouter()


class SettingsResponse(BaseModel):
    """Settings response model - infrastructure settings."""
    env_name: str
    port: int
    www_dir: str
    config_dir: str


@router.get("", response_model=SettingsResponse)
async def get_settings_info():
    """Get current infrastructure settings."""
    infra = get_infra_settings()
    return SettingsResponse(
        env_name=infra.ENV_NAME,
        port=infra.PORT,
        www_dir=str(infra.WWW_DIR),
        config_dir=str(get_settings_store().config_dir),
    )


@router.get("/config")
async def get_config() -> Dict[str, Any]:
    """Get merged configuration."""
    try:
        return await get_settings_store().get_config_as_dict()
    except Exception as e:
        logger.error(f"Error getting config: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@router.put("/config")
async def update_config(updates: Dict[str, Any]):
    """Persist configuration overrides (422 on unknown keys or bad values)."""
    if not updates:
        return {"success": True, "message": "No updates to apply"}
    store = get_settings_store()
    try:
        candidate = await store.preview(updates)
    except OmegaConfBaseException as e:
        raise InvalidRequest(f"Cannot apply updates: {e}")
    validate_config(candidate)
    try:
        await store.update(updates)
        return {"success": True, "message": "Configuration updated"}
    except Exception as e:
        logger.error(f"Error updating config: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/reset")
async def reset_config():
    """Delete runtime overrides, returning to shipped defaults."""
    try:
        deleted = await get_settings_store().reset()
        return {
            "success": True,
            "message": "Settings reset to defaults",
            "deleted": deleted,
        }
    except Exception as e:
        logger.error(f"Error resetting config: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/refresh")
async def refresh_config() -> Dict[str, Any]:
    """Drop the cached configuration so edited YAML files are re-read."""
    get_settings_store().clear_cache()
    return {"success": True, "message": "Configuration refreshed"}
