"""
Health Router.

`GET /healthcheck` reports whether the service is up and whether the comments
database answers queries. It requires no input and is safe to poll from
uptime checkers.
"""

from datetime import datetime, timezone
from typing import Dict, Any
from fastapi import APIRouter, Depends

from core.database import get_database_info
from core.logging_config import get_logger
from services.comment_store import CommentStore
from .dependencies import get_comment_store

logger = get_logger(__name__)

SERVICE_NAME = "Novel Comments API"
SERVICE_VERSION = "1.0.0"

health_router = APIRouter(tags=["Health"])


@health_router.get("/healthcheck")
async def health_check(
    store: CommentStore = Depends(get_comment_store),
) -> Dict[str, Any]:
    """
    Basic health check endpoint

    Returns:
        Dict with status, timestamp, version and database diagnostics
    """
    logger.debug("Health check requested")

    db_info = await get_database_info(store.engine)

    return {
        "status": "healthy" if db_info["connection_healthy"] else "degraded",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": SERVICE_VERSION,
        "service": SERVICE_NAME,
        "database": db_info,
    }
