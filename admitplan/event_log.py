"""
Student event log: append, filtered paging and month-bucketed timelines.
"""

import logging
import math
from datetime import datetime
from typing import Any, Optional

from pydantic import ValidationError
from sqlalchemy.orm import Session

from admitplan import crud
from admitplan.access import family_guarded
from admitplan.clock import Clock, default_clock
from admitplan.config import settings
from admitplan.errors import BadRequest
from admitplan.models import EventLogEntry
from admitplan.schemas import (
    EventLogResponse,
    EventPage,
    EventQuery,
    EventTimeline,
    MonthGroup,
    Pagination,
)

logger = logging.getLogger(__name__)


def build_query(**filters) -> EventQuery:
    """Validate raw filters (type, start_date, end_date, page, limit)"""
    try:
        return EventQuery(**{key: value for key, value in filters.items() if value is not None})
    except ValidationError as e:
        detail = "; ".join(
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}" for error in e.errors()
        )
        raise BadRequest("invalid_request", detail=detail) from e


def _page_bounds(query: EventQuery) -> tuple:
    limit = query.limit if query.limit is not None else settings.default_page_size
    if query.page < 1:
        raise BadRequest("invalid_page")
    if limit < 1 or limit > settings.max_page_size:
        raise BadRequest("invalid_limit", max_limit=settings.max_page_size)
    return query.page, limit


def append(
    db: Session,
    student_id: int,
    type: str,
    title: str,
    description: Optional[str] = None,
    reference_id: Optional[int] = None,
    metadata: Optional[Any] = None,
    created_at: Optional[datetime] = None,
    clock: Optional[Clock] = None
) -> EventLogEntry:
    """Record an event for a student, stamped with the clock unless given a time"""
    event = crud.append_event(
        db,
        student_id=student_id,
        type=type,
        title=title,
        description=description,
        reference_id=reference_id,
        metadata=metadata,
        created_at=created_at or (clock or default_clock()).now()
    )
    logger.debug("Appended %s event %s for student %s", type, event.id, student_id)
    return event


def get_events(db: Session, student_id: int, query: Optional[EventQuery] = None) -> EventPage:
    """Newest-first page of a student's events"""
    query = query or EventQuery()
    page, limit = _page_bounds(query)

    events, total = crud.query_events(
        db,
        student_id,
        type=query.type.value if query.type else None,
        start_date=query.start_date,
        end_date=query.end_date,
        offset=(page - 1) * limit,
        limit=limit
    )
    return EventPage(
        events=[EventLogResponse.model_validate(event) for event in events],
        pagination=Pagination(
            page=page,
            limit=limit,
            total=total,
            total_pages=math.ceil(total / limit)
        )
    )


def get_timeline(
    db: Session,
    student_id: int,
    query: Optional[EventQuery] = None,
    limit: Optional[int] = None
) -> EventTimeline:
    """
    Up to ``limit`` events grouped by calendar month of creation.

    Groups keep the order in which their month first appears in the
    newest-first page.
    """
    query = (query or EventQuery()).model_copy(
        update={"limit": limit or settings.timeline_event_limit}
    )
    page = get_events(db, student_id, query)

    groups = {}
    for event in page.events:
        key = event.created_at.strftime("%Y-%m")
        if key not in groups:
            groups[key] = MonthGroup(month=key, events=[])
        groups[key].events.append(event)

    return EventTimeline(timeline=list(groups.values()), pagination=page.pagination)


get_child_events = family_guarded(get_events)
get_child_timeline = family_guarded(get_timeline)
