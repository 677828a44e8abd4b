from __future__ import annotations

from datetime import date, datetime, timedelta

import pytest

from fitx.errors import NotFoundError, QueryError
from fitx.models import PerformedExercise, PerformedSet, UserProfile, Workout, WorkoutExerciseEntry
from fitx.services.users import UserRepository
from fitx.services.weights import WeightRepository
from fitx.services.workouts import QUICK_LOG_WORKOUT_ID, WorkoutRepository


# weights

@pytest.mark.asyncio
async def test_weight_history_newest_first_with_limit(store):
    weights = WeightRepository(store)
    start = datetime(2026, 1, 1, 7, 30)
    for i in range(40):
        await weights.add(80 - i * 0.1, timestamp=start + timedelta(days=i))

    history = await weights.history()
    assert len(history) == 30
    assert history[0].timestamp == start + timedelta(days=39)
    assert history == sorted(history, key=lambda s: s.timestamp, reverse=True)
    assert len(await weights.history(limit=5)) == 5


@pytest.mark.asyncio
async def test_latest_weight(store):
    weights = WeightRepository(store)
    assert await weights.latest() is None

    await weights.add(82.5, note="after holidays", timestamp=datetime(2026, 1, 2, 8))
    await weights.add(81.0, timestamp=datetime(2026, 2, 2, 8))

    latest = await weights.latest()
    assert latest.weight == 81.0
    assert latest.note == ""


# workouts and sessions

def _plan():
    return [
        WorkoutExerciseEntry(exercise_id=1, name="Barbell Back Squat", sets=4, reps=8, order=0),
        WorkoutExerciseEntry(exercise_id=3, name="Barbell Bench Press", sets=4, reps=8, order=1),
    ]


@pytest.mark.asyncio
async def test_template_round_trip_and_listing(store):
    workouts = WorkoutRepository(store)
    legs = await workouts.add_template("Leg Day", _plan())
    push = await workouts.add_template("Push Day", _plan()[1:])

    fetched = await workouts.get_template(legs.id)
    assert fetched.title == "Leg Day"
    assert fetched.is_template is True
    assert fetched.exercises == _plan()

    listed = await workouts.list_templates()
    assert [w.id for w in listed] == [push.id, legs.id]


@pytest.mark.asyncio
async def test_list_templates_skips_non_templates(store):
    async with store.session() as session:
        session.add(Workout(title="Old ad-hoc", exercises="[]", is_template=False, created_at="2020-01-01T00:00:00"))
        await session.commit()
    workouts = WorkoutRepository(store)
    await workouts.add_template("Full Body", _plan())

    assert [w.title for w in await workouts.list_templates()] == ["Full Body"]


@pytest.mark.asyncio
async def test_delete_template_leaves_sessions(store):
    workouts = WorkoutRepository(store)
    template = await workouts.add_template("Leg Day", _plan())
    await workouts.log_session(template.id, [], duration_seconds=1800)

    assert await workouts.delete_template(template.id) is True
    assert await workouts.delete_template(template.id) is False
    assert await workouts.get_template(template.id) is None
    sessions = await workouts.list_sessions()
    assert [s.workout_id for s in sessions] == [template.id]


@pytest.mark.asyncio
async def test_sessions_newest_first_and_blobs_decoded(store):
    workouts = WorkoutRepository(store)
    done = [
        PerformedExercise(
            exercise_id=1, name="Barbell Back Squat", sets=2, reps=8, order=0,
            sets_performed=[PerformedSet(reps=8, weight=100, completed=True), PerformedSet(reps=6, weight=100)],
        )
    ]
    older = await workouts.log_session(7, done, duration_seconds=2400, calories_burned=310,
                                       performed_at=datetime(2026, 5, 1, 18))
    newer = await workouts.quick_log(
        PerformedExercise(exercise_id=17, name="Running", sets=1, duration=30, is_timed=True),
        performed_at=datetime(2026, 5, 2, 7),
    )

    sessions = await workouts.list_sessions()
    assert [s.id for s in sessions] == [newer.id, older.id]
    assert sessions[0].workout_id == QUICK_LOG_WORKOUT_ID
    assert sessions[0].exercises_done[0].duration == 30
    assert sessions[1].exercises_done == done
    assert sessions[1].calories_burned == 310


@pytest.mark.asyncio
async def test_count_sessions_today(store):
    workouts = WorkoutRepository(store)
    await workouts.quick_log(PerformedExercise(exercise_id=10, name="Push-ups", sets=3, reps=15))
    await workouts.quick_log(PerformedExercise(exercise_id=10, name="Push-ups", sets=3, reps=15),
                             performed_at=datetime.now() - timedelta(days=2))

    assert await workouts.count_sessions_on() == 1
    assert await workouts.count_sessions_on(date(1999, 1, 1)) == 0


@pytest.mark.asyncio
async def test_corrupt_blob_surfaces_as_query_error(store):
    async with store.session() as session:
        session.add(Workout(title="Broken", exercises="{not json", is_template=True, created_at="2026-01-01T00:00:00"))
        await session.commit()

    with pytest.raises(QueryError):
        await WorkoutRepository(store).list_templates()


# users

@pytest.mark.asyncio
async def test_save_profile_creates_then_updates_single_user(store):
    users = UserRepository(store)
    assert await users.has_user() is False

    first = await users.save_profile(UserProfile(name="Alex", height=180, starting_weight=82, goal="lose"))
    assert first.created_at is not None

    second = await users.save_profile(UserProfile(name="Alex R.", height=180, starting_weight=80, goal="maintain"))
    assert second.id == first.id
    assert second.created_at == first.created_at

    current = await users.get_current()
    assert current.name == "Alex R."
    assert current.goal == "maintain"

    async with store.engine.connect() as conn:
        assert (await conn.exec_driver_sql("SELECT COUNT(*) FROM users")).scalar() == 1


@pytest.mark.asyncio
async def test_current_user_is_lowest_id(store):
    async with store.engine.begin() as conn:
        await conn.exec_driver_sql("INSERT INTO users (id, name) VALUES (5, 'second')")
        await conn.exec_driver_sql("INSERT INTO users (id, name) VALUES (2, 'first')")

    assert (await UserRepository(store).get_current()).name == "first"


@pytest.mark.asyncio
async def test_update_user_fields(store):
    users = UserRepository(store)
    with pytest.raises(NotFoundError):
        await users.update(goal="gain")

    await users.save_profile(UserProfile(name="Kim", activity_level="light"))
    updated = await users.update(activity_level="very_active")
    assert updated.activity_level == "very_active"
    assert updated.name == "Kim"

    with pytest.raises(ValueError):
        await users.update(created_at="yesterday")
