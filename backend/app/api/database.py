"""
Database management API endpoints
Provides health checks and connection stats for the plan store
"""

import logging

from fastapi import APIRouter, HTTPException, status
from fastapi.responses import JSONResponse

from app.db.session import db_manager, database_health_check, get_database_stats

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/health",
    responses={
        200: {"description": "Database is healthy"},
        503: {"description": "Database is unhealthy"}
    },
    summary="Database health check",
    description="Check database connectivity and connection pool status"
)
async def get_database_health():
    health_info = await database_health_check()
    status_code = (
        status.HTTP_200_OK if health_info["status"] == "healthy"
        else status.HTTP_503_SERVICE_UNAVAILABLE
    )
    return JSONResponse(status_code=status_code, content=health_info)


@router.get("/stats",
    responses={
        200: {"description": "Database connection statistics"},
        500: {"description": "Failed to retrieve statistics"}
    },
    summary="Database statistics",
    description="Connection counters plus utilization and error rate"
)
async def get_database_statistics():
    try:
        stats = get_database_stats()
        pool_size = max(db_manager.settings.DB_POOL_SIZE, 1)
        stats["computed_metrics"] = {
            "connection_utilization": round(stats["active_connections"] / pool_size * 100, 2),
            "error_rate": round(
                stats["failed_connections"] / max(stats["total_connections"], 1) * 100, 2
            ),
        }
        stats["database_type"] = (
            db_manager.engine.url.get_backend_name() if db_manager.engine else "not_initialized"
        )
        return stats

    except (KeyError, TypeError) as e:
        logger.error(f"Failed to retrieve database statistics: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to retrieve database statistics"
        )
