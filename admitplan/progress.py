from collections import Counter
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from admitplan import crud
from admitplan.errors import NotFound
from admitplan.schemas import ProgressSummary, TaskStatus


def _rate(part: int, total: int) -> float:
    """Percentage rounded to one decimal, 0 for an empty plan"""
    if total == 0:
        return 0
    return round(part / total * 100, 1)


def summarize_statuses(statuses: Iterable[str], plan_id: Optional[int] = None) -> ProgressSummary:
    """
    Reduce task statuses to completion statistics.

    progress_rate counts only DONE tasks. completion_rate also counts SKIPPED
    ones, since a skipped task is closed rather than failed.
    """
    counts = Counter(TaskStatus(status) for status in statuses)
    total = sum(counts.values())
    completed = counts[TaskStatus.DONE]
    skipped = counts[TaskStatus.SKIPPED]

    return ProgressSummary(
        plan_id=plan_id,
        total=total,
        completed=completed,
        in_progress=counts[TaskStatus.IN_PROGRESS],
        skipped=skipped,
        todo=counts[TaskStatus.TODO],
        progress_rate=_rate(completed, total),
        completion_rate=_rate(completed + skipped, total)
    )


def get_plan_progress(db: Session, plan_id: int, actor_id: int) -> ProgressSummary:
    """Completion statistics for one of the actor's plans"""
    plan = crud.get_student_plan(db, actor_id, plan_id)
    if not plan:
        raise NotFound("plan_not_found")

    tasks = crud.get_plan_tasks(db, plan.id)
    return summarize_statuses((task.status for task in tasks), plan_id=plan.id)
