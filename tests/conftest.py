import os
from datetime import date, datetime, timedelta

import pytest

# Keep tests off the on-disk database and the user's locale settings
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["LOCALE"] = "ko"

from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from admitplan.clock import FixedClock  # noqa: E402
from admitplan.database import Base  # noqa: E402
from admitplan import crud  # noqa: E402
import admitplan.models  # noqa: E402,F401

# Monday afternoon; the admission year is 2026
NOW = datetime(2026, 10, 19, 15, 30)
TODAY = NOW.date()


@pytest.fixture
def db():
    """Fresh in-memory database per test"""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    yield session
    session.close()
    engine.dispose()


@pytest.fixture
def clock():
    return FixedClock(NOW)


@pytest.fixture
def student(db):
    return crud.create_user(db, "Minji", "STUDENT", "family-1")


@pytest.fixture
def parent(db):
    return crud.create_user(db, "Minji's mom", "PARENT", "family-1")


@pytest.fixture
def other_student(db):
    return crud.create_user(db, "Jiho", "STUDENT", "family-2")


@pytest.fixture
def make_plan(db, student):
    def _make_plan(student_id=None, start_date=TODAY, title="Plan"):
        return crud.create_plan(
            db,
            student_id=student_id or student.id,
            title=title,
            start_date=start_date,
            end_date=start_date + timedelta(days=84),
        )
    return _make_plan


@pytest.fixture
def make_task(db):
    def _make_task(plan, title="Task", week_number=1, theme="study", due_date=None, description=None):
        return crud.create_task(
            db,
            plan_id=plan.id,
            week_number=week_number,
            theme=theme,
            title=title,
            description=description,
            due_date=due_date,
        )
    return _make_task


@pytest.fixture
def make_schedule(db, student):
    def _make_schedule(title, start_date, school="Seoul Science High School", note=None, student_id=None):
        db_school = crud.get_or_create_school(db, school)
        schedule = crud.add_schedule(db, db_school.id, title, start_date, note=note)
        db.commit()
        crud.add_target_school(db, student_id or student.id, db_school.id)
        return schedule
    return _make_schedule


def days_from_today(days: int) -> date:
    return TODAY + timedelta(days=days)
