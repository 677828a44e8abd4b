from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel
from sqlalchemy import text
from sqlmodel import SQLModel, Field


# Non-key columns stay nullable so old stores can gain them via ADD COLUMN.
def _flag():
    return Field(default=False, sa_column_kwargs={"server_default": text("0")})


class User(SQLModel, table=True):
    __tablename__ = "users"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    dob: Optional[str] = None
    gender: Optional[str] = None
    height: Optional[float] = None
    starting_weight: Optional[float] = None
    activity_level: Optional[str] = None
    goal: Optional[str] = None
    created_at: Optional[str] = None


class Exercise(SQLModel, table=True):
    __tablename__ = "exercises"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: Optional[str] = None
    category: Optional[str] = None
    muscles: Optional[str] = None
    equipment: Optional[str] = None
    default_sets: Optional[int] = None
    default_reps: Optional[int] = None
    is_timed: Optional[bool] = _flag()
    demo_video_url: Optional[str] = None
    cues: Optional[str] = None  # JSON list of strings
    is_favorite: Optional[bool] = _flag()
    is_custom: Optional[bool] = _flag()
    note: Optional[str] = None


class Workout(SQLModel, table=True):
    __tablename__ = "workouts"

    id: Optional[int] = Field(default=None, primary_key=True)
    title: Optional[str] = None
    exercises: Optional[str] = None  # JSON list of WorkoutExerciseEntry
    is_template: Optional[bool] = _flag()
    created_at: Optional[str] = None


class WorkoutSession(SQLModel, table=True):
    __tablename__ = "workout_sessions"

    id: Optional[int] = Field(default=None, primary_key=True)
    # 0 for quick logs; SQLite does not enforce the reference
    workout_id: Optional[int] = Field(default=None, foreign_key="workouts.id")
    date: Optional[str] = None
    duration_seconds: Optional[int] = None
    exercises_done: Optional[str] = None  # JSON list of PerformedExercise
    calories_burned: Optional[int] = None


class FoodEntry(SQLModel, table=True):
    __tablename__ = "food_entries"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: Optional[str] = None
    calories: Optional[int] = None
    protein: Optional[int] = None
    carbs: Optional[int] = None
    fat: Optional[int] = None
    timestamp: Optional[str] = None


class WeightSample(SQLModel, table=True):
    __tablename__ = "weights"

    id: Optional[int] = Field(default=None, primary_key=True)
    weight: Optional[float] = None
    timestamp: Optional[str] = None
    note: Optional[str] = None


# Values stored inside the JSON text columns.

class WorkoutExerciseEntry(BaseModel):
    exercise_id: int
    name: str
    sets: int
    reps: int
    order: int = 0


class PerformedSet(BaseModel):
    reps: int = 0
    weight: float = 0
    completed: bool = False


class PerformedExercise(BaseModel):
    exercise_id: int
    name: str
    sets: int = 0
    reps: int = 0
    order: Optional[int] = None
    weight: Optional[float] = None
    duration: Optional[int] = None
    is_timed: Optional[bool] = None
    sets_performed: List[PerformedSet] = []


# Shapes handed to callers; blobs already decoded.

class UserProfile(SQLModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    dob: Optional[str] = None
    gender: Optional[str] = None
    height: Optional[float] = None
    starting_weight: Optional[float] = None
    activity_level: Optional[str] = None
    goal: Optional[str] = None


class UserRead(UserProfile):
    id: int
    created_at: Optional[datetime] = None


class ExerciseRead(SQLModel):
    id: int
    name: Optional[str] = None
    category: Optional[str] = None
    muscles: Optional[str] = None
    equipment: Optional[str] = None
    default_sets: Optional[int] = None
    default_reps: Optional[int] = None
    is_timed: bool = False
    demo_video_url: Optional[str] = None
    cues: List[str] = []
    is_favorite: bool = False
    is_custom: bool = False
    note: Optional[str] = None


class WorkoutRead(SQLModel):
    id: int
    title: Optional[str] = None
    exercises: List[WorkoutExerciseEntry] = []
    is_template: bool = False
    created_at: Optional[datetime] = None


class WorkoutSessionRead(SQLModel):
    id: int
    workout_id: Optional[int] = None
    date: Optional[datetime] = None
    duration_seconds: Optional[int] = None
    exercises_done: List[PerformedExercise] = []
    calories_burned: Optional[int] = None


class FoodEntryRead(SQLModel):
    id: int
    name: Optional[str] = None
    calories: Optional[int] = None
    protein: Optional[int] = None
    carbs: Optional[int] = None
    fat: Optional[int] = None
    timestamp: Optional[datetime] = None


class WeightSampleRead(SQLModel):
    id: int
    weight: Optional[float] = None
    timestamp: Optional[datetime] = None
    note: Optional[str] = None


class DailyTotals(BaseModel):
    calories: float = 0
    protein: float = 0
    carbs: float = 0
    fat: float = 0
