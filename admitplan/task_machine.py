"""
Task status transitions and task reads for a student's action plan.

A transition only reacts to the *target* status; any jump between states is
accepted. The task update and the audit event are committed together.
"""

import logging
from datetime import datetime
from typing import NamedTuple, Optional, Tuple, Union

from sqlalchemy.orm import Session

from admitplan import crud
from admitplan.clock import Clock, default_clock
from admitplan.errors import BadRequest, Forbidden, NotFound
from admitplan.messages import t
from admitplan.models import EventLogEntry, WeeklyTask
from admitplan.schemas import (
    CurrentWeekTasks,
    EventType,
    PlanStatus,
    PlanTasks,
    TaskStatus,
    WeekGroup,
    WeeklyTaskResponse,
)

logger = logging.getLogger(__name__)

PLAN_WEEKS = 12


class TransitionEffect(NamedTuple):
    """What entering a status does to the task and the event log"""
    set_completed_at: bool
    clear_completed_at: bool
    event_type: EventType
    title_key: str
    keeps_reason: bool


class TaskStateMachine:
    """Decides the side effects of entering a task status."""

    EFFECTS = {
        TaskStatus.IN_PROGRESS: TransitionEffect(False, False, EventType.TASK_STARTED, "event_started", False),
        TaskStatus.DONE: TransitionEffect(True, False, EventType.TASK_COMPLETED, "event_completed", False),
        TaskStatus.SKIPPED: TransitionEffect(False, False, EventType.TASK_SKIPPED, "event_skipped", True),
        TaskStatus.TODO: TransitionEffect(False, True, EventType.TASK_STATUS_CHANGED, "event_status_changed", False),
    }

    @staticmethod
    def parse_status(status: Union[str, TaskStatus]) -> TaskStatus:
        """Coerce a raw status value, rejecting unknown ones"""
        if isinstance(status, TaskStatus):
            return status
        try:
            return TaskStatus(str(status).strip().upper())
        except ValueError:
            raise BadRequest("invalid_status", status=status) from None

    @classmethod
    def effect_of(cls, target: TaskStatus) -> TransitionEffect:
        return cls.EFFECTS[target]

    @classmethod
    def apply(cls, task: WeeklyTask, target: TaskStatus, now: datetime) -> TransitionEffect:
        """
        Mutate the task in memory for the target status.

        completed_at is set on entering DONE and cleared on returning to TODO;
        IN_PROGRESS and SKIPPED leave it as it was.
        """
        effect = cls.effect_of(target)
        task.status = target.value
        if effect.set_completed_at:
            task.completed_at = now
        elif effect.clear_completed_at:
            task.completed_at = None
        return effect


def transition(
    db: Session,
    task_id: int,
    actor_id: int,
    target_status: Union[str, TaskStatus],
    reason: Optional[str] = None,
    clock: Optional[Clock] = None
) -> Tuple[WeeklyTask, EventLogEntry]:
    """
    Move a task to a new status and record exactly one event for it.

    Raises:
        BadRequest: unknown status value
        NotFound: task does not exist
        Forbidden: the task's plan is not the actor's
    """
    target = TaskStateMachine.parse_status(target_status)
    now = (clock or default_clock()).now()

    task = crud.get_task(db, task_id)
    if not task:
        raise NotFound("task_not_found")
    if task.plan.student_id != actor_id:
        logger.warning("Student %s tried to change task %s of another student", actor_id, task_id)
        raise Forbidden("task_forbidden")

    try:
        effect = TaskStateMachine.apply(task, target, now)
        event = crud.append_event(
            db,
            student_id=task.plan.student_id,
            type=effect.event_type.value,
            title=t(effect.title_key, title=task.title),
            description=reason if effect.keeps_reason else None,
            reference_id=task.id,
            created_at=now,
            commit=False
        )
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(task)
    db.refresh(event)
    logger.info("Task %s -> %s (event %s)", task.id, target.value, event.type)
    return task, event


def current_week_number(start_date, today) -> int:
    """Week of the plan that contains today, clamped to 1..12"""
    diff_days = (today - start_date).days
    return max(1, min(PLAN_WEEKS, diff_days // 7 + 1))


def get_current_week_tasks(db: Session, student_id: int, clock: Optional[Clock] = None) -> CurrentWeekTasks:
    """Tasks of the current week of the active plan, or the "no active plan" shape"""
    plan = crud.get_active_plan(db, student_id)
    if not plan:
        return CurrentWeekTasks(tasks=[], message=t("no_active_plan"))

    today = (clock or default_clock()).today()
    week = current_week_number(plan.start_date, today)
    tasks = crud.get_week_tasks(db, plan.id, week)
    return CurrentWeekTasks(
        plan_id=plan.id,
        week_number=week,
        theme=tasks[0].theme if tasks else None,
        tasks=[WeeklyTaskResponse.model_validate(task) for task in tasks]
    )


def get_plan_tasks(db: Session, student_id: int, plan_id: int) -> PlanTasks:
    """All tasks of a plan grouped by week"""
    plan = crud.get_student_plan(db, student_id, plan_id)
    if not plan:
        raise NotFound("plan_not_found")

    groups = {}
    for task in crud.get_plan_tasks(db, plan.id):
        if task.week_number not in groups:
            groups[task.week_number] = WeekGroup(week_number=task.week_number, theme=task.theme, tasks=[])
        groups[task.week_number].tasks.append(WeeklyTaskResponse.model_validate(task))

    return PlanTasks(
        plan_id=plan.id,
        title=plan.title,
        start_date=plan.start_date,
        end_date=plan.end_date,
        status=PlanStatus(plan.status),
        weeks=list(groups.values())
    )


def get_week_tasks(db: Session, student_id: int, plan_id: int, week_number: int) -> WeekGroup:
    """Tasks of one week of one of the student's plans"""
    plan = crud.get_student_plan(db, student_id, plan_id)
    if not plan:
        raise NotFound("plan_not_found")

    tasks = crud.get_week_tasks(db, plan.id, week_number)
    return WeekGroup(
        week_number=week_number,
        theme=tasks[0].theme if tasks else None,
        tasks=[WeeklyTaskResponse.model_validate(task) for task in tasks]
    )
