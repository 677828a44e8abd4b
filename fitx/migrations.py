"""Startup schema check for the store file.

There is no version table: the columns actually present are the migration
state. Every start creates missing tables, adds any column the models
declare that a table lacks, then seeds the exercise catalog into an empty
``exercises`` table. Column adds are additive only; nothing is dropped,
renamed or rewritten.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from itertools import groupby
from typing import List, Set

from sqlalchemy import delete, func, inspect
from sqlalchemy.dialects import sqlite
from sqlalchemy.schema import CreateColumn
from sqlmodel import SQLModel, select

from . import codec
from .catalog import DEFAULT_EXERCISES
from .db import Store
from .errors import StructuralError
from .models import Exercise, FoodEntry, User, WeightSample, Workout, WorkoutSession

logger = logging.getLogger(__name__)

# Creation and migration order; exercises must be final before seeding.
TABLES = [User, Exercise, Workout, WorkoutSession, FoodEntry, WeightSample]


@dataclass(frozen=True)
class ColumnStep:
    table: str
    column: str
    statement: str

    @property
    def name(self) -> str:
        return f"{self.table}.{self.column}"


@dataclass
class SchemaReport:
    created: List[str] = field(default_factory=list)
    added: List[str] = field(default_factory=list)
    failed: List[StructuralError] = field(default_factory=list)
    seeded: int = 0

    @property
    def ok(self) -> bool:
        return not self.failed


def build_column_steps() -> List[ColumnStep]:
    dialect = sqlite.dialect()
    steps: List[ColumnStep] = []
    for model in TABLES:
        table = model.__table__
        for column in table.columns:
            if column.primary_key:
                continue
            ddl = str(CreateColumn(column).compile(dialect=dialect)).strip()
            steps.append(ColumnStep(table.name, column.name, f"ALTER TABLE {table.name} ADD COLUMN {ddl}"))
    return steps


COLUMN_STEPS = build_column_steps()


def _present_columns(sync_conn, table: str) -> Set[str]:
    return {c["name"] for c in inspect(sync_conn).get_columns(table)}


def _table_names(sync_conn) -> Set[str]:
    return set(inspect(sync_conn).get_table_names())


def _fail(report: SchemaReport, step: str, exc: Exception) -> None:
    err = StructuralError(step, str(exc))
    logger.error("[fitx] schema step failed, continuing: %s", err)
    report.failed.append(err)


async def _create_tables(store: Store, report: SchemaReport) -> None:
    tables = [m.__table__ for m in TABLES]
    try:
        async with store.engine.begin() as conn:
            before = await conn.run_sync(_table_names)
            await conn.run_sync(SQLModel.metadata.create_all, tables=tables)
    except Exception as e:
        _fail(report, "create tables", e)
        return
    report.created = [t.name for t in tables if t.name not in before]
    if report.created:
        logger.info("[fitx] schema: created tables %s", ", ".join(report.created))


async def _migrate_table(store: Store, table: str, steps: List[ColumnStep], report: SchemaReport) -> None:
    added: List[str] = []
    try:
        async with store.engine.begin() as conn:
            present = await conn.run_sync(_present_columns, table)
            for step in steps:
                if step.column in present:
                    continue
                logger.info("[fitx] schema: adding column %s", step.name)
                try:
                    async with conn.begin_nested():
                        await conn.exec_driver_sql(step.statement)
                except Exception as e:
                    _fail(report, step.name, e)
                    continue
                added.append(step.name)
    except Exception as e:
        _fail(report, f"migrate {table}", e)
        return
    report.added.extend(added)


async def _seed_exercises(store: Store, report: SchemaReport) -> None:
    try:
        async with store.session() as session:
            count = (await session.exec(select(func.count()).select_from(Exercise))).one()
            if count:
                return
            logger.info("[fitx] schema: seeding %d default exercises", len(DEFAULT_EXERCISES))
            session.add_all(
                Exercise(**{**entry, "cues": codec.encode_cues(entry["cues"])}, is_favorite=False, is_custom=False)
                for entry in DEFAULT_EXERCISES
            )
            await session.commit()
    except Exception as e:
        _fail(report, "seed exercises", e)
        return
    report.seeded = len(DEFAULT_EXERCISES)


async def ensure_schema(store: Store) -> SchemaReport:
    """Bring the store up to the current table shapes. Safe on every start; never raises."""
    report = SchemaReport()
    async with store.maintenance:
        await _create_tables(store, report)
        for table, steps in groupby(COLUMN_STEPS, key=lambda s: s.table):
            await _migrate_table(store, table, list(steps), report)
        await _seed_exercises(store, report)
    if report.failed:
        logger.warning("[fitx] schema: %d step(s) failed", len(report.failed))
    return report


async def reset_store(store: Store) -> None:
    """Delete every row of every table in one transaction."""
    async with store.maintenance:
        async with store.session() as session:
            for model in reversed(TABLES):
                await session.execute(delete(model))
            await session.commit()
    logger.info("[fitx] store reset: all tables emptied")
