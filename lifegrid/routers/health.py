"""Health check endpoints"""

import time

from fastapi import APIRouter

from lifegrid.services.universe_manager import universe_manager_ready

router = APIRouter()


@router.get("/health")
async def health_check():
    """Liveness probe; reports whether the universe is initialized."""
    return {
        "status": "ok",
        "ts": int(time.time()),
        "universe_ready": universe_manager_ready(),
    }
