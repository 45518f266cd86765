from __future__ import annotations

import logging

from apscheduler.schedulers.background import BackgroundScheduler

from .settings import AppSettings
from .storage.cache import SnapshotCache

LOGGER = logging.getLogger(__name__)

CACHE_SWEEP_JOB_ID = "cache_sweep_job"


def run_cache_sweep_job(cache: SnapshotCache) -> int:
    removed = cache.prune_expired()
    if removed:
        LOGGER.info("Cache sweep removed %d expired entries (%d remain)", removed, len(cache))
    else:
        LOGGER.debug("Cache sweep found no expired entries")
    return removed


def build_scheduler(settings: AppSettings, cache: SnapshotCache) -> BackgroundScheduler:
    scheduler = BackgroundScheduler(timezone="UTC")
    scheduler.add_job(
        run_cache_sweep_job,
        "interval",
        kwargs={"cache": cache},
        seconds=settings.yaml.cache.sweep_interval_seconds,
        id=CACHE_SWEEP_JOB_ID,
        replace_existing=True,
        max_instances=1,
        coalesce=True,
        misfire_grace_time=60,
    )
    return scheduler
