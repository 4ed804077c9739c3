"""JSON blob persistence for today's run and the lifetime stats.

Each document is rewritten after every change to it. Writes are best
effort: a failed write is logged and the in-memory state stays
authoritative until the next successful save (last write wins on load).
"""
import json
import logging
from uuid import uuid4

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from stride_pulse.core.config import settings
from stride_pulse.core.constants import STATS_KEY, TODAY_KEY
from stride_pulse.core.time_utils import is_same_local_day
from stride_pulse.models.blob import Blob
from stride_pulse.schemas.run import LifetimeStats, RunRecord

logger = logging.getLogger(__name__)


def new_run(start_ms: int) -> RunRecord:
    # start time keeps ids sortable, the suffix keeps back-to-back runs distinct
    return RunRecord(id=f"{start_ms}-{uuid4().hex[:8]}", start_time_ms=start_ms)


class BlobStore:
    def __init__(self, session_factory, tz_name: str | None = None):
        self._session_factory = session_factory
        self.tz_name = tz_name if tz_name is not None else settings.timezone

    # --------- raw key/value --------- #

    def get(self, key: str):
        """Return the decoded JSON document under `key`, or None."""
        try:
            with self._session_factory() as db:
                row = db.get(Blob, key)
                raw = row.value if row is not None else None
        except SQLAlchemyError:
            logger.exception("Could not read blob %s", key)
            return None
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning("Discarding unreadable blob %s", key)
            return None

    def put(self, key: str, document) -> bool:
        payload = json.dumps(document)
        try:
            with self._session_factory() as db:
                row = db.get(Blob, key)
                if row is None:
                    db.add(Blob(key=key, value=payload))
                else:
                    row.value = payload
                db.commit()
        except SQLAlchemyError:
            logger.exception("Could not write blob %s", key)
            return False
        return True

    def delete(self, *keys: str) -> None:
        try:
            with self._session_factory() as db:
                db.query(Blob).filter(Blob.key.in_(keys)).delete(synchronize_session=False)
                db.commit()
        except SQLAlchemyError:
            logger.exception("Could not delete blobs %s", ", ".join(keys))

    # --------- documents --------- #

    def load_stats(self) -> LifetimeStats:
        doc = self.get(STATS_KEY)
        if doc is None:
            return LifetimeStats()
        try:
            return LifetimeStats.model_validate(doc)
        except ValidationError:
            logger.warning("Stored stats do not match the current shape, starting fresh")
            return LifetimeStats()

    def load_today(self, now_ms: int) -> RunRecord:
        """Stored in-progress run if it started today, otherwise a fresh one."""
        doc = self.get(TODAY_KEY)
        if doc is not None:
            try:
                run = RunRecord.model_validate(doc)
            except ValidationError:
                logger.warning("Stored run does not match the current shape, starting fresh")
            else:
                if is_same_local_day(run.start_time_ms, now_ms, self.tz_name):
                    return run
                logger.info("Discarding in-progress run %s from a previous day", run.id)
        return new_run(now_ms)

    def save_today(self, today: RunRecord) -> bool:
        return self.put(TODAY_KEY, today.to_blob())

    def save_stats(self, stats: LifetimeStats) -> bool:
        return self.put(STATS_KEY, stats.to_blob())

    def save(self, today: RunRecord, stats: LifetimeStats) -> bool:
        saved_today = self.save_today(today)
        saved_stats = self.save_stats(stats)
        return saved_today and saved_stats

    def clear(self) -> None:
        self.delete(TODAY_KEY, STATS_KEY)
