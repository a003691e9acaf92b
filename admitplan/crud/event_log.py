from sqlalchemy.orm import Session
from admitplan.models import EventLogEntry
from datetime import datetime
from typing import Any, List, Optional, Tuple

def append_event(
    db: Session,
    student_id: int,
    type: str,
    title: str,
    description: Optional[str] = None,
    reference_id: Optional[int] = None,
    metadata: Optional[Any] = None,
    created_at: Optional[datetime] = None,
    commit: bool = True
) -> EventLogEntry:
    """Insert an event log entry. Entries are never updated or deleted."""
    db_event = EventLogEntry(
        student_id=student_id,
        type=type,
        title=title,
        description=description,
        reference_id=reference_id,
        event_metadata=metadata
    )
    if created_at is not None:
        db_event.created_at = created_at
    db.add(db_event)
    if commit:
        db.commit()
        db.refresh(db_event)
    else:
        db.flush()
    return db_event

def query_events(
    db: Session,
    student_id: int,
    type: Optional[str] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    offset: int = 0,
    limit: int = 20
) -> Tuple[List[EventLogEntry], int]:
    """Get one page of a student's events, newest first, with the total count"""
    query = db.query(EventLogEntry).filter(EventLogEntry.student_id == student_id)
    if type:
        query = query.filter(EventLogEntry.type == type)
    if start_date:
        query = query.filter(EventLogEntry.created_at >= start_date)
    if end_date:
        query = query.filter(EventLogEntry.created_at <= end_date)

    total = query.count()
    events = query.order_by(
        EventLogEntry.created_at.desc(), EventLogEntry.id.desc()
    ).offset(offset).limit(limit).all()
    return events, total
