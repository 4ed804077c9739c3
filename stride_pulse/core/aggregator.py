"""Lifetime statistics bookkeeping.

`archive` is the only place totals and shoe mileage change, so
`total_distance_m`, `total_runs` and `total_steps` always equal the fold of
`history`. Every function here takes a `LifetimeStats` and returns a new one.
"""
from typing import Optional
from uuid import uuid4

from stride_pulse.core.constants import HISTORY_WINDOW, KM_M
from stride_pulse.schemas.run import (
    HistoryBar,
    HistorySummary,
    LifetimeStats,
    RunRecord,
    ShoeProfile,
)


def archive(stats: LifetimeStats, run: RunRecord) -> LifetimeStats:
    """Fold a completed run into the stats. Re-archiving the same id is a no-op."""
    if any(h.id == run.id for h in stats.history):
        return stats

    shoes = [
        shoe.model_copy(update={"current_mileage_m": shoe.current_mileage_m + run.distance_m})
        if run.shoe_id is not None and shoe.id == run.shoe_id
        else shoe
        for shoe in stats.shoes
    ]

    return stats.model_copy(
        update={
            "total_distance_m": stats.total_distance_m + run.distance_m,
            "total_runs": stats.total_runs + (0 if run.is_rest_day else 1),
            "total_steps": stats.total_steps + run.steps,
            "history": [run, *stats.history],
            "shoes": shoes,
        }
    )


def add_shoe(
    stats: LifetimeStats,
    name: str,
    limit_km: float,
    shoe_id: Optional[str] = None,
) -> LifetimeStats:
    # The first pair of shoes becomes the active one
    shoe = ShoeProfile(
        id=shoe_id or uuid4().hex[:12],
        name=name,
        current_mileage_m=0.0,
        limit_m=limit_km * KM_M,
        is_active=len(stats.shoes) == 0,
    )
    return stats.model_copy(update={"shoes": [*stats.shoes, shoe]})


def set_active_shoe(stats: LifetimeStats, shoe_id: str) -> LifetimeStats:
    """Make `shoe_id` the only active shoe. Raises KeyError for unknown ids."""
    if not any(s.id == shoe_id for s in stats.shoes):
        raise KeyError(shoe_id)
    shoes = [s.model_copy(update={"is_active": s.id == shoe_id}) for s in stats.shoes]
    return stats.model_copy(update={"shoes": shoes})


def active_shoe(stats: LifetimeStats) -> Optional[ShoeProfile]:
    return next((s for s in stats.shoes if s.is_active), None)


def update_settings(stats: LifetimeStats, **changes) -> LifetimeStats:
    new_settings = stats.settings.model_copy(update=changes)
    return stats.model_copy(update={"settings": new_settings})


def history_summary(history: list[RunRecord], window: int = HISTORY_WINDOW) -> HistorySummary:
    """Most recent `window` active runs, oldest first, with average and best distance."""
    recent = [r for r in history if not r.is_rest_day][:window]
    recent.reverse()
    if not recent:
        return HistorySummary(runs=[], avg_distance_m=0.0, max_distance_m=0.0)

    distances = [r.distance_m for r in recent]
    return HistorySummary(
        runs=[HistoryBar(start_time_ms=r.start_time_ms, distance_m=r.distance_m) for r in recent],
        avg_distance_m=sum(distances) / len(distances),
        max_distance_m=max(distances),
    )
