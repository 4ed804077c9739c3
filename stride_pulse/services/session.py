"""Session controller: the single owner of today's run and the lifetime stats.

Sensor callbacks and API handlers go through this object; every state
change replaces `today` / `stats` with a new value and the changed document
is persisted right after. The accepted path lives in a ring buffer and is
copied into `today` only when the record is read or saved. Location and
motion update disjoint fields of the run, so the order in which their
samples arrive does not matter.
"""
import logging
from typing import Optional

from stride_pulse.core import aggregator
from stride_pulse.core.config import Settings, settings as default_settings
from stride_pulse.core.geo import PathBuffer, reduce_location, signal_quality, speed_alert
from stride_pulse.core.steps import StepDetector
from stride_pulse.core.time_utils import is_same_local_day, now_ms
from stride_pulse.schemas.run import LifetimeStats, LocationSample, RunRecord
from stride_pulse.services.sensors import (
    AccessState,
    LocationProvider,
    MotionProvider,
    Subscription,
)
from stride_pulse.services.store import BlobStore, new_run

logger = logging.getLogger(__name__)


def is_empty_run(run: RunRecord) -> bool:
    """Nothing was recorded: no distance, steps, time or fixes."""
    return run.distance_m == 0 and run.steps == 0 and run.duration_s == 0 and not run.path


class SessionController:
    def __init__(
        self,
        store: BlobStore,
        location: LocationProvider,
        motion: MotionProvider,
        config: Settings | None = None,
        clock=now_ms,
    ):
        self.store = store
        self.location = location
        self.motion = motion
        self.config = config or default_settings
        self.clock = clock

        self.stats: LifetimeStats = store.load_stats()
        self._today: RunRecord = store.load_today(self.clock())
        self._path = PathBuffer(self.config.path_capacity, self._today.path)
        self._path_stale = False
        self.detector = self._new_detector()

        self.gps_accuracy: Optional[float] = None
        self.speed_mps: Optional[float] = None
        self._accuracy_count = sum(1 for p in self._today.path if p.accuracy is not None)

        self._location_sub: Optional[Subscription] = None
        self._motion_sub: Optional[Subscription] = None

        # Monotonic counters, handy for acknowledging pushed samples
        self.accepted_fixes = 0
        self.step_events = 0

    def _new_detector(self) -> StepDetector:
        return StepDetector(
            threshold=self.config.step_threshold,
            hysteresis=self.config.step_hysteresis,
            cooldown_ms=self.config.step_cooldown_ms,
        )

    @property
    def today(self) -> RunRecord:
        if self._path_stale:
            self._today = self._today.model_copy(update={"path": self._path.to_list()})
            self._path_stale = False
        return self._today

    # --------- lifecycle --------- #

    def start(self) -> None:
        if self._location_sub is None:
            self._location_sub = self.location.subscribe(self.on_location, self.on_location_error)
        self._subscribe_motion()

    def _subscribe_motion(self) -> AccessState:
        state = self.motion.request_access()
        if state is AccessState.granted and self._motion_sub is None:
            self._motion_sub = self.motion.subscribe(self.on_motion)
        elif state is not AccessState.granted:
            logger.info("Sensors offline: motion access is %s", state.value)
        return state

    def grant_motion(self, granted: bool) -> AccessState:
        self.motion.record_answer(granted)
        return self._subscribe_motion()

    @property
    def motion_state(self) -> AccessState:
        return self.motion.request_access()

    def stop_location(self) -> None:
        if self._location_sub is not None:
            self._location_sub.cancel()
            self._location_sub = None

    def stop_motion(self) -> None:
        if self._motion_sub is not None:
            self._motion_sub.cancel()
            self._motion_sub = None

    def stop(self) -> None:
        self.stop_location()
        self.stop_motion()

    # --------- sensor callbacks --------- #

    def on_location(self, fix) -> bool:
        """Reduce one raw fix (anything with latitude/longitude/...). Returns acceptance."""
        if fix.latitude is None or fix.longitude is None:
            return False
        self.refresh()

        self.gps_accuracy = fix.accuracy
        self.speed_mps = getattr(fix, "speed", None)

        sample = LocationSample(
            latitude=fix.latitude,
            longitude=fix.longitude,
            timestamp_ms=fix.timestamp_ms if fix.timestamp_ms is not None else self.clock(),
            altitude=fix.altitude,
            accuracy=fix.accuracy,
        )
        result = reduce_location(
            self._path,
            self._today.distance_m,
            self._today.elevation_gain_m,
            sample,
            jitter_m=self.config.jitter_threshold_m,
        )
        if not result.accepted:
            return False

        self.accepted_fixes += 1
        self._path_stale = True
        active = aggregator.active_shoe(self.stats)
        self._replace_today(
            distance_m=result.distance_m,
            elevation_gain_m=result.elevation_gain_m,
            shoe_id=active.id if active else None,
            avg_accuracy=self._fold_accuracy(sample.accuracy),
        )
        return True

    def on_location_error(self, error) -> None:
        # Stale state until the stream recovers; nothing accrues meanwhile
        logger.error("GPS error: %s", error)

    def on_motion(self, reading) -> bool:
        """Feed one acceleration reading (x/y/z/timestamp_ms). Returns True on a step."""
        if reading.x is None or reading.y is None or reading.z is None:
            return False
        self.refresh()

        ts = reading.timestamp_ms if reading.timestamp_ms is not None else self.clock()
        if not self.detector.feed(reading.x, reading.y, reading.z, ts):
            return False
        self.step_events += 1
        self._replace_today(steps=self._today.steps + 1)
        return True

    def _fold_accuracy(self, accuracy: Optional[float]) -> Optional[float]:
        prev = self._today.avg_accuracy
        if accuracy is None:
            return prev
        if prev is None or self._accuracy_count == 0:
            self._accuracy_count = 1
            return accuracy
        self._accuracy_count += 1
        return prev + (accuracy - prev) / self._accuracy_count

    # --------- session updates --------- #

    def tick(self, seconds: int = 1) -> RunRecord:
        self.refresh()
        self._replace_today(duration_s=self._today.duration_s + seconds)
        return self.today

    def finish(self, notes: Optional[str] = None, rest_day: bool = False) -> RunRecord:
        """Archive the current run and start a fresh one. Returns the archived run."""
        done = self.today.model_copy(
            update={"end_time_ms": self.clock(), "notes": notes, "is_rest_day": rest_day}
        )
        self.stats = aggregator.archive(self.stats, done)
        self._start_new_run(self.clock())
        logger.info("Archived run %s (%.0f m, rest day: %s)", done.id, done.distance_m, rest_day)
        return done

    def save_rest_day(self, notes: Optional[str] = None) -> RunRecord:
        return self.finish(notes=notes, rest_day=True)

    def refresh(self) -> None:
        """Close out a run left over from an earlier local day.

        A run with recorded activity is archived, ending where its elapsed
        time ends; an untouched one is dropped, as on startup.
        """
        now = self.clock()
        if is_same_local_day(self._today.start_time_ms, now, self.store.tz_name):
            return
        stale = self.today
        if is_empty_run(stale):
            logger.info("Day rollover, dropping empty run %s", stale.id)
        else:
            logger.info("Day rollover, archiving run %s", stale.id)
            ended = stale.model_copy(
                update={"end_time_ms": stale.start_time_ms + stale.duration_s * 1000}
            )
            self.stats = aggregator.archive(self.stats, ended)
        self._start_new_run(now)

    def _start_new_run(self, start_ms: int) -> None:
        self._today = new_run(start_ms)
        self._path = PathBuffer(self.config.path_capacity)
        self._path_stale = False
        self.detector.reset()
        self._accuracy_count = 0
        self.persist()

    def _replace_today(self, **changes) -> None:
        # per-sample changes only touch today's document
        self._today = self._today.model_copy(update=changes)
        self.store.save_today(self.today)

    # --------- stats --------- #

    def add_shoe(self, name: str, limit_km: float):
        self.stats = aggregator.add_shoe(self.stats, name, limit_km)
        self.store.save_stats(self.stats)
        return self.stats.shoes[-1]

    def set_active_shoe(self, shoe_id: str):
        self.stats = aggregator.set_active_shoe(self.stats, shoe_id)
        self.store.save_stats(self.stats)
        return aggregator.active_shoe(self.stats)

    def update_settings(self, **changes):
        self.stats = aggregator.update_settings(self.stats, **changes)
        self.store.save_stats(self.stats)
        return self.stats.settings

    def wipe(self) -> None:
        """Forget everything: history, shoes, settings and today's run."""
        self.store.clear()
        self.stats = LifetimeStats()
        self._start_new_run(self.clock())

    # --------- views --------- #

    @property
    def gps_signal(self) -> Optional[str]:
        return signal_quality(
            self.gps_accuracy,
            poor_m=self.config.gps_poor_accuracy_m,
            critical_m=self.config.gps_critical_accuracy_m,
        )

    @property
    def speed_alert(self) -> Optional[str]:
        return speed_alert(self.speed_mps, self.stats.settings)

    def persist(self) -> None:
        self.store.save(self.today, self.stats)
