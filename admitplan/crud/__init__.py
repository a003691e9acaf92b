from admitplan.crud.user import create_user, get_user, share_family
from admitplan.crud.plan import create_plan, get_active_plan, list_active_plans, get_student_plan
from admitplan.crud.task import (
    create_task,
    get_task,
    get_plan_tasks,
    get_week_tasks,
    get_open_tasks_due_since
)
from admitplan.crud.event_log import append_event, query_events
from admitplan.crud.school import (
    get_or_create_school,
    add_schedule,
    add_target_school,
    get_target_schedules_since
)
from admitplan.crud.ai_output import ACTION_PLAN, save_ai_output, get_action_plan_output

__all__ = [
    "create_user",
    "get_user",
    "share_family",
    "create_plan",
    "get_active_plan",
    "list_active_plans",
    "get_student_plan",
    "create_task",
    "get_task",
    "get_plan_tasks",
    "get_week_tasks",
    "get_open_tasks_due_since",
    "append_event",
    "query_events",
    "get_or_create_school",
    "add_schedule",
    "add_target_school",
    "get_target_schedules_since",
    "ACTION_PLAN",
    "save_ai_output",
    "get_action_plan_output",
]
