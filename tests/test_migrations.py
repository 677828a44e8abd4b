from __future__ import annotations

import pytest
from sqlalchemy import inspect

from fitx import migrations
from fitx.catalog import DEFAULT_EXERCISES
from fitx.migrations import ColumnStep, ensure_schema, reset_store
from fitx.models import FoodEntry, User
from fitx.services.exercises import ExerciseRepository
from fitx.services.nutrition import NutritionRepository


async def _columns(store, table):
    async with store.engine.connect() as conn:
        return await conn.run_sync(lambda c: [col["name"] for col in inspect(c).get_columns(table)])


async def _rows(store, sql):
    async with store.engine.connect() as conn:
        result = await conn.exec_driver_sql(sql)
        return [tuple(r) for r in result.all()]


@pytest.mark.asyncio
async def test_fresh_store_gets_all_tables_and_catalog(bare_store):
    report = await ensure_schema(bare_store)

    assert report.ok
    assert set(report.created) == {"users", "exercises", "workouts", "workout_sessions", "food_entries", "weights"}
    assert report.added == []
    assert report.seeded == len(DEFAULT_EXERCISES)
    assert await ExerciseRepository(bare_store).count() == len(DEFAULT_EXERCISES)


@pytest.mark.asyncio
async def test_journal_mode_is_wal(store):
    rows = await _rows(store, "PRAGMA journal_mode")
    assert rows[0][0].lower() == "wal"


@pytest.mark.asyncio
async def test_ensure_schema_is_idempotent(store):
    nutrition = NutritionRepository(store)
    await nutrition.add_entry("Oats", 150, 5, 27, 3)
    before = {t: await _columns(store, t) for t in ("users", "exercises", "workouts", "workout_sessions", "food_entries", "weights")}

    for _ in range(3):
        report = await ensure_schema(store)
        assert report.ok
        assert report.created == []
        assert report.added == []
        assert report.seeded == 0

    after = {t: await _columns(store, t) for t in before}
    assert after == before
    assert len(await nutrition.list_today()) == 1
    assert await ExerciseRepository(store).count() == len(DEFAULT_EXERCISES)


@pytest.mark.asyncio
async def test_old_workouts_table_gains_columns_and_keeps_rows(bare_store):
    async with bare_store.engine.begin() as conn:
        await conn.exec_driver_sql("CREATE TABLE workouts (id INTEGER PRIMARY KEY AUTOINCREMENT, exercises TEXT)")
        for i in range(4):
            await conn.exec_driver_sql("INSERT INTO workouts (exercises) VALUES (?)", (f'["legacy-{i}"]',))

    report = await ensure_schema(bare_store)

    assert report.ok
    assert {"workouts.title", "workouts.is_template", "workouts.created_at"} <= set(report.added)
    assert "workouts" not in report.created
    assert set(await _columns(bare_store, "workouts")) == {"id", "title", "exercises", "is_template", "created_at"}

    rows = await _rows(bare_store, "SELECT id, exercises, title, is_template, created_at FROM workouts ORDER BY id")
    assert rows == [(i + 1, f'["legacy-{i}"]', None, 0, None) for i in range(4)]


@pytest.mark.asyncio
async def test_old_exercises_table_gets_is_custom_before_seeding(bare_store):
    async with bare_store.engine.begin() as conn:
        await conn.exec_driver_sql(
            "CREATE TABLE exercises (id INTEGER PRIMARY KEY AUTOINCREMENT, name TEXT, category TEXT, "
            "muscles TEXT, equipment TEXT, default_sets INTEGER, default_reps INTEGER, is_timed INTEGER DEFAULT 0, "
            "demo_video_url TEXT, cues TEXT, is_favorite INTEGER DEFAULT 0)"
        )

    report = await ensure_schema(bare_store)

    assert report.ok
    assert "exercises.is_custom" in report.added
    assert "exercises.note" in report.added
    assert report.seeded == len(DEFAULT_EXERCISES)
    exercises = await ExerciseRepository(bare_store).list_all()
    assert all(not e.is_custom for e in exercises)


@pytest.mark.asyncio
async def test_seed_skipped_when_exercises_present(bare_store):
    async with bare_store.engine.begin() as conn:
        await conn.exec_driver_sql("CREATE TABLE exercises (id INTEGER PRIMARY KEY AUTOINCREMENT, name TEXT)")
        await conn.exec_driver_sql("INSERT INTO exercises (name) VALUES ('Kettlebell Swing')")

    report = await ensure_schema(bare_store)

    assert report.seeded == 0
    names = [e.name for e in await ExerciseRepository(bare_store).list_all()]
    assert names == ["Kettlebell Swing"]


@pytest.mark.asyncio
async def test_failed_step_is_reported_and_others_still_run(bare_store, monkeypatch):
    async with bare_store.engine.begin() as conn:
        await conn.exec_driver_sql("CREATE TABLE exercises (id INTEGER PRIMARY KEY AUTOINCREMENT, name TEXT, category TEXT)")

    steps = list(migrations.COLUMN_STEPS)
    first = next(i for i, s in enumerate(steps) if s.table == "exercises")
    steps.insert(first, ColumnStep("exercises", "broken", "ALTER TABLE no_such_table ADD COLUMN broken INTEGER"))
    monkeypatch.setattr(migrations, "COLUMN_STEPS", steps)

    report = await ensure_schema(bare_store)

    assert [f.step for f in report.failed] == ["exercises.broken"]
    assert "exercises.muscles" in report.added
    assert "exercises.is_custom" in report.added
    assert "broken" not in await _columns(bare_store, "exercises")
    assert report.seeded == len(DEFAULT_EXERCISES)


@pytest.mark.asyncio
async def test_unreadable_store_file_does_not_raise(bare_store):
    bare_store.path.write_bytes(b"this is not a sqlite database" * 64)

    report = await ensure_schema(bare_store)

    assert not report.ok
    assert report.seeded == 0


def test_column_steps_cover_every_non_key_column():
    names = {s.name for s in migrations.COLUMN_STEPS}
    assert "users.id" not in names
    assert "workout_sessions.exercises_done" in names
    assert "weights.note" in names
    flag = next(s for s in migrations.COLUMN_STEPS if s.name == "exercises.is_custom")
    assert flag.statement.startswith("ALTER TABLE exercises ADD COLUMN is_custom")
    assert "DEFAULT 0" in flag.statement


@pytest.mark.asyncio
async def test_reset_empties_everything_and_next_start_reseeds(store):
    async with store.session() as session:
        session.add(User(name="Sam"))
        session.add(FoodEntry(name="Apple", calories=95, timestamp="2026-01-01T08:00:00"))
        await session.commit()

    await reset_store(store)

    for table in ("users", "exercises", "workouts", "workout_sessions", "food_entries", "weights"):
        assert await _rows(store, f"SELECT COUNT(*) FROM {table}") == [(0,)]

    report = await ensure_schema(store)
    assert report.seeded == len(DEFAULT_EXERCISES)
    for table in ("users", "workouts", "workout_sessions", "food_entries", "weights"):
        assert await _rows(store, f"SELECT COUNT(*) FROM {table}") == [(0,)]
