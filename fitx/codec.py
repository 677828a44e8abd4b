"""JSON text columns <-> value types.

Only the services package calls these; query code never sees raw blobs.
The encoding is plain JSON arrays, the same shape the app has always
written, so existing rows stay readable.
"""
from __future__ import annotations

from datetime import date, datetime
from typing import List, Optional, Sequence

from pydantic import TypeAdapter, ValidationError
from sqlalchemy import case, func

from .errors import QueryError
from .models import PerformedExercise, WorkoutExerciseEntry


_cues = TypeAdapter(List[str])
_plan = TypeAdapter(List[WorkoutExerciseEntry])
_performed = TypeAdapter(List[PerformedExercise])


def _dump(adapter: TypeAdapter, items: Sequence) -> str:
    return adapter.dump_json(list(items)).decode()


def _load(adapter: TypeAdapter, raw: Optional[str], what: str) -> list:
    if not raw:
        return []
    try:
        return adapter.validate_json(raw)
    except ValidationError as e:
        raise QueryError(f"stored {what} is not decodable: {e}") from e


def encode_cues(cues: Sequence[str]) -> str:
    return _dump(_cues, cues)


def decode_cues(raw: Optional[str]) -> List[str]:
    return _load(_cues, raw, "cue list")


def encode_plan(entries: Sequence[WorkoutExerciseEntry]) -> str:
    return _dump(_plan, entries)


def decode_plan(raw: Optional[str]) -> List[WorkoutExerciseEntry]:
    return _load(_plan, raw, "workout exercise list")


def encode_performed(done: Sequence[PerformedExercise]) -> str:
    return _dump(_performed, done)


def decode_performed(raw: Optional[str]) -> List[PerformedExercise]:
    return _load(_performed, raw, "performed exercise list")


def stamp(value: Optional[datetime] = None) -> str:
    """Local wall-clock timestamp as stored in every date/timestamp column."""
    return (value or datetime.now()).isoformat(timespec="seconds")


def day_key(day: Optional[date] = None) -> str:
    return (day or date.today()).isoformat()


def local_date(column):
    """SQL ``date()`` of a stored timestamp, on the local calendar.

    Rows written by older app versions hold UTC stamps ending in ``Z``;
    those are shifted to local time before the date is taken.
    """
    return case((column.like("%Z"), func.date(column, "localtime")), else_=func.date(column))
