from pydantic import BaseModel, Field
from typing import List, Optional, Any
from datetime import date, datetime
from enum import Enum


class TaskStatus(str, Enum):
    TODO = "TODO"
    IN_PROGRESS = "IN_PROGRESS"
    DONE = "DONE"
    SKIPPED = "SKIPPED"


class PlanStatus(str, Enum):
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"
    ARCHIVED = "ARCHIVED"


class EventType(str, Enum):
    TASK_STARTED = "TASK_STARTED"
    TASK_COMPLETED = "TASK_COMPLETED"
    TASK_SKIPPED = "TASK_SKIPPED"
    TASK_STATUS_CHANGED = "TASK_STATUS_CHANGED"
    # Domain events written by intake subsystems
    GRADE_ADDED = "GRADE_ADDED"
    ACTIVITY_ADDED = "ACTIVITY_ADDED"
    READING_ADDED = "READING_ADDED"
    VOLUNTEER_ADDED = "VOLUNTEER_ADDED"
    ATTENDANCE_UPDATED = "ATTENDANCE_UPDATED"


class CountdownType(str, Enum):
    ADMISSION = "admission"
    TASK = "task"
    EXAM = "exam"
    CUSTOM = "custom"


class Priority(str, Enum):
    URGENT = "urgent"
    IMPORTANT = "important"
    NORMAL = "normal"


# ---------- Tasks ----------

class TaskStatusUpdate(BaseModel):
    """Schema for a task status change request"""
    status: TaskStatus
    reason: Optional[str] = None  # only recorded for SKIPPED


class WeeklyTaskResponse(BaseModel):
    """Schema for weekly task response"""
    id: int
    plan_id: int
    week_number: int
    theme: str
    title: str
    description: Optional[str] = None
    status: TaskStatus
    due_date: Optional[date] = None
    completed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class WeekGroup(BaseModel):
    week_number: int
    theme: Optional[str] = None
    tasks: List[WeeklyTaskResponse]


class CurrentWeekTasks(BaseModel):
    """Tasks of the week the active plan is currently in"""
    plan_id: Optional[int] = None
    week_number: Optional[int] = None
    theme: Optional[str] = None
    tasks: List[WeeklyTaskResponse] = []
    message: Optional[str] = None


class PlanTasks(BaseModel):
    plan_id: int
    title: str
    start_date: date
    end_date: date
    status: PlanStatus
    weeks: List[WeekGroup]


class ProgressSummary(BaseModel):
    """Completion statistics for a plan"""
    plan_id: Optional[int] = None
    total: int
    completed: int
    in_progress: int
    skipped: int
    todo: int
    progress_rate: float
    completion_rate: float


# ---------- Event log ----------

class EventLogResponse(BaseModel):
    id: int
    student_id: int
    type: str
    title: str
    description: Optional[str] = None
    reference_id: Optional[int] = None
    metadata: Optional[Any] = Field(default=None, validation_alias="event_metadata")
    created_at: datetime

    class Config:
        from_attributes = True
        populate_by_name = True


class TransitionResult(BaseModel):
    task: WeeklyTaskResponse
    event: EventLogResponse


class EventQuery(BaseModel):
    """Filters and paging for event log reads"""
    type: Optional[EventType] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    page: int = 1
    limit: Optional[int] = None  # settings.default_page_size when omitted


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int


class EventPage(BaseModel):
    events: List[EventLogResponse]
    pagination: Pagination


class MonthGroup(BaseModel):
    month: str  # YYYY-MM
    events: List[EventLogResponse]


class EventTimeline(BaseModel):
    timeline: List[MonthGroup]
    pagination: Pagination


# ---------- Plan conversion ----------

class PlanItem(BaseModel):
    """One week's item of an action plan, before it becomes a task"""
    week: int
    title: str
    description: str = ""
    category: str = "other"  # study, activity, reading, other
    priority: str = "medium"  # high, medium, low


class CreatedTask(BaseModel):
    id: int
    title: str
    due_date: date


class ConversionResult(BaseModel):
    success: bool = True
    plan_id: int
    tasks_created: int
    tasks: List[CreatedTask]


# ---------- D-Day ----------

class CountdownItem(BaseModel):
    """Anything with a date, ranked by days remaining"""
    id: int
    title: str
    date: date
    days_left: int
    type: CountdownType
    school_name: Optional[str] = None
    priority: Priority
    description: Optional[str] = None


class Milestone(BaseModel):
    title: str
    date: date
    completed: bool


class TimelineGroup(BaseModel):
    month: str  # locale-formatted "Month Year"
    events: List[CountdownItem]


class DDayDashboard(BaseModel):
    main_dday: Optional[CountdownItem] = None
    upcoming: List[CountdownItem] = []
    passed: List[CountdownItem] = []
    milestones: List[Milestone] = []
    timeline: List[TimelineGroup] = []


class CustomDDayCreate(BaseModel):
    """Schema for a student-defined countdown"""
    title: str = Field(min_length=1, max_length=200)
    date: date
    description: Optional[str] = None
    type: CountdownType = CountdownType.CUSTOM


class DDayAlert(BaseModel):
    item: CountdownItem
    message: str
