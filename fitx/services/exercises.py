from __future__ import annotations

from typing import List, Optional, Sequence

from sqlalchemy import func
from sqlmodel import col, select

from .. import codec
from ..db import Store
from ..errors import NotFoundError
from ..models import Exercise, ExerciseRead


def _read(row: Exercise) -> ExerciseRead:
    return ExerciseRead(
        **row.model_dump(exclude={"cues", "is_timed", "is_favorite", "is_custom"}),
        is_timed=bool(row.is_timed),
        is_favorite=bool(row.is_favorite),
        is_custom=bool(row.is_custom),
        cues=codec.decode_cues(row.cues),
    )


class ExerciseRepository:
    def __init__(self, store: Store) -> None:
        self.store = store

    async def _all(self, statement) -> List[ExerciseRead]:
        async with self.store.session() as session:
            result = await session.exec(statement.order_by(Exercise.name))
            return [_read(row) for row in result.all()]

    async def list_all(self) -> List[ExerciseRead]:
        return await self._all(select(Exercise))

    async def list_by_category(self, category: str) -> List[ExerciseRead]:
        return await self._all(select(Exercise).where(Exercise.category == category))

    async def list_favorites(self) -> List[ExerciseRead]:
        return await self._all(select(Exercise).where(col(Exercise.is_favorite).is_(True)))

    async def search(self, query: str) -> List[ExerciseRead]:
        """Case-insensitive substring match on name or muscles."""
        return await self._all(
            select(Exercise).where(
                col(Exercise.name).icontains(query, autoescape=True)
                | col(Exercise.muscles).icontains(query, autoescape=True)
            )
        )

    async def get(self, exercise_id: int) -> Optional[ExerciseRead]:
        async with self.store.session() as session:
            row = await session.get(Exercise, exercise_id)
            return _read(row) if row else None

    async def count(self) -> int:
        async with self.store.session() as session:
            return (await session.exec(select(func.count()).select_from(Exercise))).one()

    async def toggle_favorite(self, exercise_id: int) -> bool:
        """Flip the stored favorite flag and return its new value."""
        async with self.store.session() as session:
            row = await session.get(Exercise, exercise_id)
            if row is None:
                raise NotFoundError(f"exercise {exercise_id} does not exist")
            row.is_favorite = not row.is_favorite
            session.add(row)
            await session.commit()
            return row.is_favorite

    async def add_custom(
        self,
        name: str,
        category: str,
        muscles: str = "",
        equipment: str = "",
        default_sets: int = 3,
        default_reps: int = 10,
        is_timed: bool = False,
        demo_video_url: str = "",
        cues: Sequence[str] = (),
        note: Optional[str] = None,
    ) -> ExerciseRead:
        row = Exercise(
            name=name,
            category=category,
            muscles=muscles,
            equipment=equipment,
            default_sets=default_sets,
            default_reps=default_reps,
            is_timed=is_timed,
            demo_video_url=demo_video_url,
            cues=codec.encode_cues(cues),
            is_favorite=False,
            is_custom=True,
            note=note,
        )
        async with self.store.session() as session:
            session.add(row)
            await session.commit()
            await session.refresh(row)
            return _read(row)
