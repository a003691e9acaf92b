from sqlalchemy.orm import Session
from admitplan.models import ActionPlan, WeeklyTask
from admitplan.schemas import PlanStatus, TaskStatus
from datetime import date
from typing import List, Optional

def create_task(
    db: Session,
    plan_id: int,
    week_number: int,
    theme: str,
    title: str,
    description: Optional[str] = None,
    due_date: Optional[date] = None,
    commit: bool = True
) -> WeeklyTask:
    """Materialize a TODO task inside a plan"""
    db_task = WeeklyTask(
        plan_id=plan_id,
        week_number=week_number,
        theme=theme,
        title=title,
        description=description,
        due_date=due_date,
        status=TaskStatus.TODO.value
    )
    db.add(db_task)
    if commit:
        db.commit()
        db.refresh(db_task)
    else:
        db.flush()
    return db_task

def get_task(db: Session, task_id: int) -> Optional[WeeklyTask]:
    """Get task by ID"""
    return db.query(WeeklyTask).filter(WeeklyTask.id == task_id).first()

def get_plan_tasks(db: Session, plan_id: int) -> List[WeeklyTask]:
    """Get all tasks of a plan in week order"""
    return db.query(WeeklyTask).filter(
        WeeklyTask.plan_id == plan_id
    ).order_by(WeeklyTask.week_number, WeeklyTask.created_at, WeeklyTask.id).all()

def get_week_tasks(db: Session, plan_id: int, week_number: int) -> List[WeeklyTask]:
    """Get the tasks of one week of a plan"""
    return db.query(WeeklyTask).filter(
        WeeklyTask.plan_id == plan_id,
        WeeklyTask.week_number == week_number
    ).order_by(WeeklyTask.created_at, WeeklyTask.id).all()

def get_open_tasks_due_since(db: Session, student_id: int, since: date) -> List[WeeklyTask]:
    """Get unfinished tasks of the student's ACTIVE plans due on or after a date"""
    return db.query(WeeklyTask).join(ActionPlan).filter(
        ActionPlan.student_id == student_id,
        ActionPlan.status == PlanStatus.ACTIVE.value,
        WeeklyTask.due_date.isnot(None),
        WeeklyTask.due_date >= since,
        WeeklyTask.status != TaskStatus.DONE.value
    ).order_by(WeeklyTask.due_date, WeeklyTask.id).all()
