from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from sqlmodel import col, select

from .. import codec
from ..db import Store
from ..models import WeightSample, WeightSampleRead


class WeightRepository:
    def __init__(self, store: Store) -> None:
        self.store = store

    async def add(self, weight: float, note: Optional[str] = None, timestamp: Optional[datetime] = None) -> WeightSampleRead:
        row = WeightSample(weight=weight, note=note or "", timestamp=codec.stamp(timestamp))
        async with self.store.session() as session:
            session.add(row)
            await session.commit()
            await session.refresh(row)
            return WeightSampleRead.model_validate(row)

    async def history(self, limit: int = 30) -> List[WeightSampleRead]:
        async with self.store.session() as session:
            result = await session.exec(
                select(WeightSample).order_by(col(WeightSample.timestamp).desc()).limit(limit)
            )
            return [WeightSampleRead.model_validate(row) for row in result.all()]

    async def latest(self) -> Optional[WeightSampleRead]:
        samples = await self.history(limit=1)
        return samples[0] if samples else None
