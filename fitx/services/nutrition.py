from __future__ import annotations

from datetime import date, datetime
from typing import List, Optional

from sqlalchemy import func
from sqlmodel import col, select

from .. import codec
from ..db import Store
from ..models import DailyTotals, FoodEntry, FoodEntryRead


def _on_day(day: Optional[date]):
    return codec.local_date(col(FoodEntry.timestamp)) == func.date(codec.day_key(day))


class NutritionRepository:
    def __init__(self, store: Store) -> None:
        self.store = store

    async def add_entry(
        self,
        name: str,
        calories: int,
        protein: int = 0,
        carbs: int = 0,
        fat: int = 0,
        timestamp: Optional[datetime] = None,
    ) -> FoodEntryRead:
        row = FoodEntry(
            name=name,
            calories=calories,
            protein=protein,
            carbs=carbs,
            fat=fat,
            timestamp=codec.stamp(timestamp),
        )
        async with self.store.session() as session:
            session.add(row)
            await session.commit()
            await session.refresh(row)
            return FoodEntryRead.model_validate(row)

    async def list_for_day(self, day: Optional[date] = None) -> List[FoodEntryRead]:
        async with self.store.session() as session:
            result = await session.exec(
                select(FoodEntry).where(_on_day(day)).order_by(col(FoodEntry.timestamp).desc())
            )
            return [FoodEntryRead.model_validate(row) for row in result.all()]

    async def list_today(self) -> List[FoodEntryRead]:
        return await self.list_for_day()

    async def totals_for_day(self, day: Optional[date] = None) -> DailyTotals:
        """Macro sums for one day; zero for every field when nothing was logged."""
        statement = select(
            func.coalesce(func.sum(FoodEntry.calories), 0),
            func.coalesce(func.sum(FoodEntry.protein), 0),
            func.coalesce(func.sum(FoodEntry.carbs), 0),
            func.coalesce(func.sum(FoodEntry.fat), 0),
        ).where(_on_day(day))
        async with self.store.session() as session:
            calories, protein, carbs, fat = (await session.exec(statement)).one()
        return DailyTotals(calories=calories, protein=protein, carbs=carbs, fat=fat)

    async def today_totals(self) -> DailyTotals:
        return await self.totals_for_day()

    async def delete(self, entry_id: int) -> bool:
        async with self.store.session() as session:
            row = await session.get(FoodEntry, entry_id)
            if row is None:
                return False
            await session.delete(row)
            await session.commit()
            return True
