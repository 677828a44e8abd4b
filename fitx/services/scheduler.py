from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from ..errors import FitxError
from .backup import BackupEngine, DirectoryTransport

logger = logging.getLogger(__name__)

JOB_ID = "auto_backup"


async def run_auto_backup(engine: BackupEngine, target_dir: Path) -> Optional[Path]:
    """One scheduled export into ``target_dir``; failures are logged, not raised."""
    try:
        result = await engine.export_store(DirectoryTransport(target_dir))
    except FitxError as e:
        logger.error("[fitx] auto-backup: failed: %s", e)
        return None
    logger.info("[fitx] auto-backup: wrote %s", result.handoff)
    return result.handoff


class BackupScheduler:
    def __init__(self, engine: BackupEngine, target_dir: Optional[Path] = None) -> None:
        self.engine = engine
        self.target_dir = Path(target_dir or engine.settings.backup_dir)
        self.scheduler = AsyncIOScheduler()

    @property
    def running(self) -> bool:
        return self.scheduler.running

    def _add_job(self, interval_minutes: int) -> None:
        self.scheduler.add_job(
            run_auto_backup,
            IntervalTrigger(minutes=interval_minutes),
            args=[self.engine, self.target_dir],
            id=JOB_ID,
            replace_existing=True,
        )

    def start(self, interval_minutes: int) -> None:
        """Start the background scheduler with the configured interval"""
        if interval_minutes <= 0:
            logger.info("[fitx] auto-backup: disabled")
            return
        if not self.scheduler.running:
            self._add_job(interval_minutes)
            self.scheduler.start()
            logger.info("[fitx] auto-backup: started with %d minute interval", interval_minutes)

    def update_interval(self, interval_minutes: int) -> None:
        """Reschedule the job; a non-positive interval removes it."""
        if not self.scheduler.running:
            self.start(interval_minutes)
            return
        if self.scheduler.get_job(JOB_ID):
            self.scheduler.remove_job(JOB_ID)
        if interval_minutes > 0:
            self._add_job(interval_minutes)
            logger.info("[fitx] auto-backup: updated interval to %d minutes", interval_minutes)
        else:
            logger.info("[fitx] auto-backup: disabled")

    def shutdown(self) -> None:
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
