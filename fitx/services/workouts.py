from __future__ import annotations

from datetime import date, datetime
from typing import List, Optional, Sequence

from sqlalchemy import func
from sqlmodel import col, select

from .. import codec
from ..db import Store
from ..models import (
    PerformedExercise,
    Workout,
    WorkoutExerciseEntry,
    WorkoutRead,
    WorkoutSession,
    WorkoutSessionRead,
)

QUICK_LOG_WORKOUT_ID = 0


def _template(row: Workout) -> WorkoutRead:
    return WorkoutRead(
        id=row.id,
        title=row.title,
        exercises=codec.decode_plan(row.exercises),
        is_template=bool(row.is_template),
        created_at=row.created_at,
    )


def _session(row: WorkoutSession) -> WorkoutSessionRead:
    return WorkoutSessionRead(
        **row.model_dump(exclude={"exercises_done"}),
        exercises_done=codec.decode_performed(row.exercises_done),
    )


class WorkoutRepository:
    """Workout templates and the append-only session log."""

    def __init__(self, store: Store) -> None:
        self.store = store

    async def add_template(self, title: str, exercises: Sequence[WorkoutExerciseEntry]) -> WorkoutRead:
        row = Workout(
            title=title,
            exercises=codec.encode_plan(exercises),
            is_template=True,
            created_at=codec.stamp(),
        )
        async with self.store.session() as session:
            session.add(row)
            await session.commit()
            await session.refresh(row)
            return _template(row)

    async def list_templates(self) -> List[WorkoutRead]:
        async with self.store.session() as session:
            result = await session.exec(
                select(Workout)
                .where(col(Workout.is_template).is_(True))
                .order_by(col(Workout.created_at).desc(), col(Workout.id).desc())
            )
            return [_template(row) for row in result.all()]

    async def get_template(self, workout_id: int) -> Optional[WorkoutRead]:
        async with self.store.session() as session:
            row = await session.get(Workout, workout_id)
            return _template(row) if row else None

    async def delete_template(self, workout_id: int) -> bool:
        # Sessions keep their workout_id; the reference is soft.
        async with self.store.session() as session:
            row = await session.get(Workout, workout_id)
            if row is None:
                return False
            await session.delete(row)
            await session.commit()
            return True

    async def log_session(
        self,
        workout_id: int,
        exercises_done: Sequence[PerformedExercise],
        duration_seconds: int = 0,
        calories_burned: int = 0,
        performed_at: Optional[datetime] = None,
    ) -> WorkoutSessionRead:
        row = WorkoutSession(
            workout_id=workout_id,
            date=codec.stamp(performed_at),
            duration_seconds=duration_seconds,
            exercises_done=codec.encode_performed(exercises_done),
            calories_burned=calories_burned,
        )
        async with self.store.session() as session:
            session.add(row)
            await session.commit()
            await session.refresh(row)
            return _session(row)

    async def quick_log(self, performed: PerformedExercise, performed_at: Optional[datetime] = None) -> WorkoutSessionRead:
        """Log a single exercise without a template."""
        return await self.log_session(QUICK_LOG_WORKOUT_ID, [performed], performed_at=performed_at)

    async def list_sessions(self) -> List[WorkoutSessionRead]:
        async with self.store.session() as session:
            result = await session.exec(
                select(WorkoutSession).order_by(col(WorkoutSession.date).desc(), col(WorkoutSession.id).desc())
            )
            return [_session(row) for row in result.all()]

    async def count_sessions_on(self, day: Optional[date] = None) -> int:
        async with self.store.session() as session:
            result = await session.exec(
                select(func.count())
                .select_from(WorkoutSession)
                .where(codec.local_date(col(WorkoutSession.date)) == func.date(codec.day_key(day)))
            )
            return result.one()
