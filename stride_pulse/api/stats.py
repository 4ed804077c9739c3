from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from stride_pulse.api.deps import get_controller
from stride_pulse.core.aggregator import history_summary
from stride_pulse.core.constants import HISTORY_WINDOW
from stride_pulse.schemas.run import (
    HistorySummary,
    LifetimeStats,
    RunRecord,
    SettingsUpdate,
    ShoeCreate,
    ShoeProfile,
    UserSettings,
)
from stride_pulse.services.session import SessionController

router = APIRouter(prefix="/stats", tags=["stats"])


@router.get("/", response_model=LifetimeStats)
async def get_stats(ctl: SessionController = Depends(get_controller)):
    return ctl.stats


@router.get("/history", response_model=list[RunRecord])
async def list_history(
    include_rest: bool = Query(True),
    limit: Optional[int] = Query(None, ge=1),
    ctl: SessionController = Depends(get_controller),
):
    """
    Archived runs, most recent first.

      GET /stats/history?include_rest=false&limit=10
    """
    runs = ctl.stats.history
    if not include_rest:
        runs = [r for r in runs if not r.is_rest_day]
    if limit is not None:
        runs = runs[:limit]
    return runs


@router.get("/summary", response_model=HistorySummary)
async def get_summary(
    window: int = Query(HISTORY_WINDOW, ge=1, le=52),
    ctl: SessionController = Depends(get_controller),
):
    return history_summary(ctl.stats.history, window)


# --------- Gear --------- #

@router.post("/shoes", response_model=ShoeProfile)
async def add_shoe(payload: ShoeCreate, ctl: SessionController = Depends(get_controller)):
    return ctl.add_shoe(payload.name, payload.limit_km)


@router.put("/shoes/{shoe_id}/active", response_model=ShoeProfile)
async def set_active_shoe(shoe_id: str, ctl: SessionController = Depends(get_controller)):
    try:
        return ctl.set_active_shoe(shoe_id)
    except KeyError:
        raise HTTPException(status_code=404, detail="Shoe not found")


# --------- Settings --------- #

@router.put("/settings", response_model=UserSettings)
async def update_settings(payload: SettingsUpdate, ctl: SessionController = Depends(get_controller)):
    changes = payload.model_dump(exclude_unset=True)
    # alert bounds may be cleared with null, the archive period may not
    if changes.get("auto_archive_period") is None:
        changes.pop("auto_archive_period", None)
    return ctl.update_settings(**changes)


@router.delete("/", status_code=204)
async def wipe(ctl: SessionController = Depends(get_controller)):
    """Wipe system memory: history, gear, settings and today's run."""
    ctl.wipe()
