from fastapi import APIRouter, Depends

from stride_pulse.api.deps import get_controller
from stride_pulse.core import aggregator
from stride_pulse.core.path_view import path_polyline
from stride_pulse.core.time_utils import format_pace, format_time
from stride_pulse.schemas.run import (
    FeedbackRead,
    LocationErrorIn,
    LocationIn,
    MotionAccessIn,
    MotionIn,
    NotesIn,
    PathView,
    RunRecord,
    SampleAck,
    TickIn,
    TodayRead,
)
from stride_pulse.services.feedback import get_run_feedback
from stride_pulse.services.session import SessionController

router = APIRouter(prefix="/today", tags=["today"])


def _today_read(ctl: SessionController) -> TodayRead:
    run = ctl.today
    return TodayRead(
        run=run,
        pace=format_pace(run.duration_s, run.distance_m),
        elapsed=format_time(run.duration_s),
        gps_signal=ctl.gps_signal,
        gps_accuracy=ctl.gps_accuracy,
        speed_alert=ctl.speed_alert,
        motion=ctl.motion_state.value,
        active_shoe=aggregator.active_shoe(ctl.stats),
    )


@router.get("/", response_model=TodayRead)
async def get_today(ctl: SessionController = Depends(get_controller)):
    ctl.refresh()
    return _today_read(ctl)


# --------- Location stream --------- #

@router.post("/location", response_model=SampleAck)
async def post_location(payload: LocationIn, ctl: SessionController = Depends(get_controller)):
    """
    Publish one GPS fix from the device.

    Fixes with null coordinates or within the jitter radius of the last
    accepted point come back with accepted=false; they are not errors.
    """
    before = ctl.accepted_fixes
    ctl.location.publish(payload)
    return SampleAck(accepted=ctl.accepted_fixes > before)


@router.post("/location/error", status_code=204)
async def post_location_error(payload: LocationErrorIn, ctl: SessionController = Depends(get_controller)):
    ctl.location.report_error(f"{payload.message} (code {payload.code})" if payload.code is not None else payload.message)


@router.delete("/location", status_code=204)
async def stop_location(ctl: SessionController = Depends(get_controller)):
    ctl.stop_location()


# --------- Motion stream --------- #

@router.post("/motion", response_model=SampleAck)
async def post_motion(payload: MotionIn, ctl: SessionController = Depends(get_controller)):
    before = ctl.step_events
    ctl.motion.publish(payload)
    return SampleAck(accepted=ctl.step_events > before)


@router.post("/motion/access", response_model=TodayRead)
async def post_motion_access(payload: MotionAccessIn, ctl: SessionController = Depends(get_controller)):
    ctl.grant_motion(payload.granted)
    return _today_read(ctl)


@router.delete("/motion", status_code=204)
async def stop_motion(ctl: SessionController = Depends(get_controller)):
    ctl.stop_motion()


# --------- Session --------- #

@router.post("/tick", response_model=TodayRead)
async def tick(payload: TickIn, ctl: SessionController = Depends(get_controller)):
    ctl.tick(payload.seconds)
    return _today_read(ctl)


@router.post("/finish", response_model=RunRecord)
async def finish_run(payload: NotesIn, ctl: SessionController = Depends(get_controller)):
    return ctl.finish(notes=payload.notes)


@router.post("/rest", response_model=RunRecord)
async def save_rest_day(payload: NotesIn, ctl: SessionController = Depends(get_controller)):
    return ctl.save_rest_day(notes=payload.notes)


@router.get("/path", response_model=PathView)
async def get_path(ctl: SessionController = Depends(get_controller)):
    ctl.refresh()
    return path_polyline(ctl.today.path)


@router.get("/feedback", response_model=FeedbackRead)
def get_feedback(ctl: SessionController = Depends(get_controller)):
    run = ctl.today
    return FeedbackRead(feedback=get_run_feedback(run.distance_m, run.duration_s, run.steps))
