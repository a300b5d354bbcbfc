"""
Route & Sync Routes

Endpoints for the workout route projection:
- /routes - Current route buckets (walking/running/cycling)
- /sync - Trigger an incremental sync pass
- /sync/status - Sync watermark and in-progress flag
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from pydantic import BaseModel
from typing import Optional
from datetime import datetime
from sqlalchemy.ext.asyncio import AsyncSession

from plore.db.session import get_async_db
from plore.features.health import ProviderAuthorizationError
from plore.features.workouts.schemas import RouteBucketsResponse, SyncResponse
from plore.features.workouts.sync import SyncCoordinator, SyncCommitError, SyncWatermarkStore

logger = logging.getLogger(__name__)

router = APIRouter()


class SyncStatus(BaseModel):
    last_sync_at: Optional[datetime] = None
    sync_in_progress: bool


def get_coordinator(request: Request) -> SyncCoordinator:
    """Dependency returning the application's sync coordinator."""
    coordinator = getattr(request.app.state, "coordinator", None)
    if coordinator is None:
        raise HTTPException(status_code=503, detail="Sync coordinator not initialized")
    return coordinator


@router.get("/routes", response_model=RouteBucketsResponse)
async def get_routes(coordinator: SyncCoordinator = Depends(get_coordinator)):
    """Latest published route buckets."""
    return RouteBucketsResponse.from_buckets(coordinator.routes)


@router.post("/sync", response_model=SyncResponse)
async def trigger_sync(
    force: bool = Query(default=False, description="Ignore the minimum sync interval"),
    coordinator: SyncCoordinator = Depends(get_coordinator)
):
    """Run an incremental sync pass now."""
    try:
        result = await coordinator.incremental_sync(interval=0 if force else None)
    except ProviderAuthorizationError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except SyncCommitError as e:
        logger.error(f"Sync commit failed: {e}")
        raise HTTPException(status_code=500, detail="Sync could not be committed")

    return SyncResponse(**result.to_dict())


@router.get("/sync/status", response_model=SyncStatus)
async def sync_status(
    db: AsyncSession = Depends(get_async_db),
    coordinator: SyncCoordinator = Depends(get_coordinator)
):
    """Current watermark and whether a pass is running."""
    last_sync_at = await SyncWatermarkStore(db).get()
    return SyncStatus(
        last_sync_at=last_sync_at,
        sync_in_progress=coordinator.sync_in_progress
    )
