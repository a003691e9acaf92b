from sqlalchemy.orm import Session
from admitplan.models import School, AdmissionSchedule, TargetSchool
from datetime import date
from typing import List, Optional, Tuple

def get_or_create_school(db: Session, name: str) -> School:
    school = db.query(School).filter(School.name == name).first()
    if not school:
        school = School(name=name)
        db.add(school)
        db.flush()
    return school

def add_schedule(
    db: Session,
    school_id: int,
    title: str,
    start_date: date,
    end_date: Optional[date] = None,
    type: Optional[str] = None,
    note: Optional[str] = None
) -> AdmissionSchedule:
    """Add a schedule unless the school already has one with the same title and start"""
    existing = db.query(AdmissionSchedule).filter(
        AdmissionSchedule.school_id == school_id,
        AdmissionSchedule.title == title,
        AdmissionSchedule.start_date == start_date
    ).first()
    if existing:
        existing.end_date = end_date
        existing.type = type
        existing.note = note
        return existing

    schedule = AdmissionSchedule(
        school_id=school_id,
        title=title,
        start_date=start_date,
        end_date=end_date,
        type=type,
        note=note
    )
    db.add(schedule)
    db.flush()
    return schedule

def add_target_school(db: Session, student_id: int, school_id: int) -> TargetSchool:
    target = db.query(TargetSchool).filter(
        TargetSchool.student_id == student_id,
        TargetSchool.school_id == school_id
    ).first()
    if not target:
        target = TargetSchool(student_id=student_id, school_id=school_id)
        db.add(target)
        db.commit()
        db.refresh(target)
    return target

def get_target_schedules_since(
    db: Session, student_id: int, since: date
) -> List[Tuple[AdmissionSchedule, School]]:
    """Get schedules of the student's target schools starting on or after a date"""
    return db.query(AdmissionSchedule, School).join(
        School, AdmissionSchedule.school_id == School.id
    ).join(
        TargetSchool, TargetSchool.school_id == School.id
    ).filter(
        TargetSchool.student_id == student_id,
        AdmissionSchedule.start_date >= since
    ).order_by(AdmissionSchedule.start_date, AdmissionSchedule.id).all()
