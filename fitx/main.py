from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Union

from .db import Store
from .migrations import SchemaReport, ensure_schema, reset_store
from .services.backup import BackupEngine, ExportResult, Transport
from .services.exercises import ExerciseRepository
from .services.nutrition import NutritionRepository
from .services.scheduler import BackupScheduler
from .services.users import UserRepository
from .services.weights import WeightRepository
from .services.workouts import WorkoutRepository
from .settings import Settings, get_settings

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


class FitxApp:
    """Owns the store handle and everything built on it.

    UI code holds one of these for the life of the process: call
    :meth:`startup` before anything else and :meth:`shutdown` at exit.
    """

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self.settings = settings or get_settings()
        self.store = Store(self.settings)
        self.users = UserRepository(self.store)
        self.exercises = ExerciseRepository(self.store)
        self.nutrition = NutritionRepository(self.store)
        self.weights = WeightRepository(self.store)
        self.workouts = WorkoutRepository(self.store)
        self.backups = BackupEngine(self.store, self.settings)
        self.scheduler = BackupScheduler(self.backups)

    async def startup(self) -> SchemaReport:
        report = await ensure_schema(self.store)
        self.scheduler.start(self.settings.auto_backup_minutes)
        return report

    async def shutdown(self) -> None:
        self.scheduler.shutdown()
        await self.store.dispose()

    async def reset(self) -> None:
        """Wipe all data; the next startup re-seeds the exercise catalog."""
        await reset_store(self.store)

    async def export(self, transport: Optional[Transport] = None) -> ExportResult:
        return await self.backups.export_store(transport)

    async def restore(self, source: Union[str, Path]) -> SchemaReport:
        """Import a backup file and bring it up to the current schema."""
        await self.backups.import_store(source)
        return await ensure_schema(self.store)

    def update_backup_interval(self, minutes: int) -> None:
        self.scheduler.update_interval(minutes)

    async def restore_from_cloud(self, token: str, file_id: str, file_name: str) -> SchemaReport:
        await self.backups.restore_from_cloud(token, file_id, file_name)
        return await ensure_schema(self.store)


async def create_app(settings: Optional[Settings] = None) -> FitxApp:
    settings = settings or get_settings()
    configure_logging(settings.log_level)
    app = FitxApp(settings)
    report = await app.startup()
    logger.info(
        "[fitx] store ready at %s (created=%d added=%d seeded=%d failed=%d)",
        app.store.path, len(report.created), len(report.added), report.seeded, len(report.failed),
    )
    return app
