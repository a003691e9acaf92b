from admitplan.models.user import User
from admitplan.models.action_plan import ActionPlan
from admitplan.models.weekly_task import WeeklyTask
from admitplan.models.event_log import EventLogEntry
from admitplan.models.school import School, AdmissionSchedule, TargetSchool
from admitplan.models.ai_output import AIOutput

__all__ = [
    "User",
    "ActionPlan",
    "WeeklyTask",
    "EventLogEntry",
    "School",
    "AdmissionSchedule",
    "TargetSchool",
    "AIOutput",
]
