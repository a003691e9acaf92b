import logging
from sqlalchemy.orm import Session
from admitplan.models import ActionPlan
from admitplan.schemas import PlanStatus
from datetime import date
from typing import List, Optional

logger = logging.getLogger(__name__)

def create_plan(
    db: Session,
    student_id: int,
    title: str,
    start_date: date,
    end_date: date,
    commit: bool = True
) -> ActionPlan:
    """
    Create a new ACTIVE plan for a student.

    Any plan of the student that is still ACTIVE is archived first, so a
    student never has more than one ACTIVE plan.
    """
    previous = db.query(ActionPlan).filter(
        ActionPlan.student_id == student_id,
        ActionPlan.status == PlanStatus.ACTIVE.value
    ).all()
    for plan in previous:
        plan.status = PlanStatus.ARCHIVED.value
        logger.info("Archived plan %s of student %s", plan.id, student_id)

    db_plan = ActionPlan(
        student_id=student_id,
        title=title,
        start_date=start_date,
        end_date=end_date,
        status=PlanStatus.ACTIVE.value
    )
    db.add(db_plan)
    if commit:
        db.commit()
        db.refresh(db_plan)
    else:
        db.flush()
    return db_plan

def get_active_plan(db: Session, student_id: int) -> Optional[ActionPlan]:
    """Get the student's ACTIVE plan (most recent, should there be several)"""
    return db.query(ActionPlan).filter(
        ActionPlan.student_id == student_id,
        ActionPlan.status == PlanStatus.ACTIVE.value
    ).order_by(ActionPlan.created_at.desc(), ActionPlan.id.desc()).first()

def list_active_plans(db: Session, student_id: int) -> List[ActionPlan]:
    return db.query(ActionPlan).filter(
        ActionPlan.student_id == student_id,
        ActionPlan.status == PlanStatus.ACTIVE.value
    ).all()

def get_student_plan(db: Session, student_id: int, plan_id: int) -> Optional[ActionPlan]:
    """Get a plan only if it belongs to the student"""
    return db.query(ActionPlan).filter(
        ActionPlan.id == plan_id,
        ActionPlan.student_id == student_id
    ).first()
