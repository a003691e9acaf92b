"""
D-Day dashboard: merges admission schedules of a student's target schools
and open task due dates into one ranked countdown list.

daysLeft is the calendar-day difference between the item's date and today,
so time-of-day never shifts an item by one.
"""

import calendar
import logging
from datetime import date, timedelta
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from admitplan import crud
from admitplan.access import family_guarded
from admitplan.clock import Clock, default_clock
from admitplan.errors import BadRequest
from admitplan.messages import t
from admitplan.schemas import (
    CountdownItem,
    CountdownType,
    CustomDDayCreate,
    DDayAlert,
    DDayDashboard,
    Milestone,
    Priority,
    TimelineGroup,
)

logger = logging.getLogger(__name__)

LOOKBACK_DAYS = 30
URGENT_DAYS = 3
ADMISSION_IMPORTANT_DAYS = 30
DEFAULT_IMPORTANT_DAYS = 14
UPCOMING_LIMIT = 10
PASSED_LIMIT = 5
PERSONAL_PLAN_DAYS = 365

# Stored task theme for each kind of student-defined countdown
DDAY_THEMES = {
    CountdownType.CUSTOM: "D-Day",
    CountdownType.EXAM: "D-Day exam",
}
DDAY_TYPES = {theme: item_type for item_type, theme in DDAY_THEMES.items()}
DDAY_TITLE_PREFIX = "[D-Day] "

ALERT_MESSAGES = {
    0: "alert_today",
    1: "alert_tomorrow",
    3: "alert_three_days",
    7: "alert_one_week",
}

# (message key, month, day) relative to the admission year
MILESTONES = [
    ("milestone_first_semester_final", 6, 20),
    ("milestone_second_semester_midterm", 10, 15),
    ("milestone_application_open", 11, 1),
    ("milestone_application_close", 11, 15),
    ("milestone_first_round", 12, 1),
    ("milestone_interview", 12, 15),
    ("milestone_final_announcement", 12, 25),
]


class DDayPrioritizer:
    """Pure ranking rules; no database access."""

    @staticmethod
    def days_left(item_date: date, today: date) -> int:
        return (item_date - today).days

    @staticmethod
    def classify(days_left: int, item_type: CountdownType) -> Priority:
        """
        Urgent within 3 days for every type. Admission dates stay important
        for 30 days out, everything else for 14.
        """
        if days_left <= URGENT_DAYS:
            return Priority.URGENT
        if item_type == CountdownType.ADMISSION:
            if days_left <= ADMISSION_IMPORTANT_DAYS:
                return Priority.IMPORTANT
        elif days_left <= DEFAULT_IMPORTANT_DAYS:
            return Priority.IMPORTANT
        return Priority.NORMAL

    @staticmethod
    def rank(items: List[CountdownItem]) -> List[CountdownItem]:
        # Stable: ties keep collection order (admissions before tasks)
        return sorted(items, key=lambda item: item.days_left)

    @staticmethod
    def partition(ranked: List[CountdownItem]) -> Tuple[List[CountdownItem], List[CountdownItem]]:
        """
        Split ranked items into all upcoming ones (daysLeft >= 0) and the five
        most recently passed ones, most recent first.
        """
        upcoming = [item for item in ranked if item.days_left >= 0]
        passed = [item for item in ranked if item.days_left < 0]
        return upcoming, list(reversed(passed[-PASSED_LIMIT:]))

    @staticmethod
    def select_main(upcoming: List[CountdownItem]) -> Optional[CountdownItem]:
        """Nearest admission item if any, else the nearest item of any type"""
        for item in upcoming:
            if item.type == CountdownType.ADMISSION:
                return item
        return upcoming[0] if upcoming else None

    @staticmethod
    def admission_year(today: date) -> int:
        return today.year if today.month >= 9 else today.year - 1

    @staticmethod
    def milestones(today: date, locale: Optional[str] = None) -> List[Milestone]:
        """Static yearly admissions calendar, not tied to any school"""
        year = DDayPrioritizer.admission_year(today)
        result = []
        for key, month, day in MILESTONES:
            milestone_date = date(year, month, day)
            result.append(Milestone(
                title=t(key, locale),
                date=milestone_date,
                completed=milestone_date < today
            ))
        return result

    @staticmethod
    def month_label(value: date, locale: Optional[str] = None) -> str:
        return t(
            "timeline_month",
            locale,
            year=value.year,
            month=value.month,
            month_name=calendar.month_name[value.month]
        )

    @staticmethod
    def timeline(upcoming: List[CountdownItem], locale: Optional[str] = None) -> List[TimelineGroup]:
        """Group items by month label in order of first appearance"""
        groups = {}
        for item in upcoming:
            label = DDayPrioritizer.month_label(item.date, locale)
            if label not in groups:
                groups[label] = TimelineGroup(month=label, events=[])
            groups[label].events.append(item)
        return list(groups.values())

    @staticmethod
    def alerts(upcoming: List[CountdownItem], locale: Optional[str] = None) -> List[DDayAlert]:
        """One alert per item exactly 0, 1, 3 or 7 days away"""
        return [
            DDayAlert(item=item, message=t(ALERT_MESSAGES[item.days_left], locale, title=item.title))
            for item in upcoming
            if item.days_left in ALERT_MESSAGES
        ]


def _make_item(
    item_id: int,
    title: str,
    item_date: date,
    item_type: CountdownType,
    today: date,
    school_name: Optional[str] = None,
    description: Optional[str] = None
) -> CountdownItem:
    days_left = DDayPrioritizer.days_left(item_date, today)
    return CountdownItem(
        id=item_id,
        title=title,
        date=item_date,
        days_left=days_left,
        type=item_type,
        school_name=school_name,
        priority=DDayPrioritizer.classify(days_left, item_type),
        description=description
    )


def collect_items(db: Session, student_id: int, today: date) -> List[CountdownItem]:
    """
    Countdown items dated from 30 days ago onward: admission schedules of the
    student's target schools, then unfinished tasks of ACTIVE plans.
    """
    since = today - timedelta(days=LOOKBACK_DAYS)
    items = []

    for schedule, school in crud.get_target_schedules_since(db, student_id, since):
        items.append(_make_item(
            schedule.id,
            schedule.title,
            schedule.start_date,
            CountdownType.ADMISSION,
            today,
            school_name=school.name,
            description=schedule.note
        ))

    for task in crud.get_open_tasks_due_since(db, student_id, since):
        if task.theme in DDAY_TYPES and task.title.startswith(DDAY_TITLE_PREFIX):
            item_type, title = DDAY_TYPES[task.theme], task.title[len(DDAY_TITLE_PREFIX):]
        else:
            item_type, title = CountdownType.TASK, task.title
        items.append(_make_item(task.id, title, task.due_date, item_type, today, description=task.description))

    return items


def _upcoming_and_passed(db: Session, student_id: int, today: date):
    ranked = DDayPrioritizer.rank(collect_items(db, student_id, today))
    upcoming, passed = DDayPrioritizer.partition(ranked)
    return upcoming, passed


def get_dashboard(db: Session, student_id: int, clock: Optional[Clock] = None) -> DDayDashboard:
    """
    Build the D-Day dashboard.

    The main D-Day and the month timeline come from the full upcoming list;
    only the returned ``upcoming`` is cut to the nearest ten.
    """
    today = (clock or default_clock()).today()
    upcoming, passed = _upcoming_and_passed(db, student_id, today)

    dashboard = DDayDashboard(
        main_dday=DDayPrioritizer.select_main(upcoming),
        upcoming=upcoming[:UPCOMING_LIMIT],
        passed=passed,
        milestones=DDayPrioritizer.milestones(today),
        timeline=DDayPrioritizer.timeline(upcoming)
    )
    logger.debug(
        "D-Day dashboard for student %s: %d upcoming, %d passed",
        student_id, len(upcoming), len(passed)
    )
    return dashboard


def add_custom_dday(
    db: Session,
    student_id: int,
    data: CustomDDayCreate,
    clock: Optional[Clock] = None
) -> CountdownItem:
    """
    Store a student-defined countdown as a week-1 task of the active plan,
    creating a one-year personal-schedule plan when there is none.
    """
    if data.type not in DDAY_THEMES:
        raise BadRequest("invalid_dday_type", type=data.type.value)
    today = (clock or default_clock()).today()

    try:
        plan = crud.get_active_plan(db, student_id)
        if not plan:
            plan = crud.create_plan(
                db,
                student_id=student_id,
                title=t("personal_plan_title"),
                start_date=today,
                end_date=today + timedelta(days=PERSONAL_PLAN_DAYS),
                commit=False
            )
            logger.info("Created personal schedule plan %s for student %s", plan.id, student_id)

        task = crud.create_task(
            db,
            plan_id=plan.id,
            week_number=1,
            theme=DDAY_THEMES[data.type],
            title=DDAY_TITLE_PREFIX + data.title,
            description=data.description,
            due_date=data.date,
            commit=False
        )
        db.commit()
    except Exception:
        db.rollback()
        raise

    return _make_item(task.id, data.title, data.date, data.type, today, description=data.description)


def check_alerts(db: Session, student_id: int, clock: Optional[Clock] = None) -> List[DDayAlert]:
    """Alerts for the dashboard's upcoming items at exactly 0, 1, 3 or 7 days; a pure read"""
    return DDayPrioritizer.alerts(get_dashboard(db, student_id, clock).upcoming)


get_child_dashboard = family_guarded(get_dashboard)
