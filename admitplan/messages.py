"""User-facing message catalogs, keyed by locale."""

from admitplan.config import settings

MESSAGES = {
    "ko": {
        "plan_not_found": "플랜을 찾을 수 없습니다",
        "task_not_found": "Task를 찾을 수 없습니다",
        "ai_output_not_found": "AI 출력을 찾을 수 없습니다",
        "task_forbidden": "이 작업을 변경할 권한이 없습니다",
        "family_forbidden": "접근 권한이 없습니다",
        "invalid_status": "올바르지 않은 상태값입니다: {status}",
        "invalid_page": "페이지 번호는 1 이상이어야 합니다",
        "invalid_limit": "페이지 크기는 1 이상 {max_limit} 이하여야 합니다",
        "invalid_request": "잘못된 요청입니다: {detail}",
        "no_active_plan": "활성화된 플랜이 없습니다",
        "no_valid_plan_items": "생성할 수 있는 플랜 항목이 없습니다",
        "invalid_dday_type": "D-Day 유형은 custom 또는 exam이어야 합니다: {type}",
        "event_started": "할 일 시작: {title}",
        "event_completed": "할 일 완료: {title}",
        "event_skipped": "할 일 건너뜀: {title}",
        "event_status_changed": "할 일 상태 변경: {title}",
        "alert_today": "🚨 오늘입니다! {title}",
        "alert_tomorrow": "⚠️ 내일입니다! {title}",
        "alert_three_days": "📢 3일 남았습니다: {title}",
        "alert_one_week": "📅 일주일 남았습니다: {title}",
        "personal_plan_title": "개인 일정",
        "ai_plan_title": "AI 생성 액션 플랜",
        "timeline_month": "{year}년 {month}월",
        "milestone_first_semester_final": "1학기 기말고사",
        "milestone_second_semester_midterm": "2학기 중간고사",
        "milestone_application_open": "원서 접수 시작",
        "milestone_application_close": "원서 접수 마감",
        "milestone_first_round": "1차 전형",
        "milestone_interview": "면접",
        "milestone_final_announcement": "최종 발표",
    },
    "en": {
        "plan_not_found": "Plan not found",
        "task_not_found": "Task not found",
        "ai_output_not_found": "AI output not found",
        "task_forbidden": "You are not allowed to change this task",
        "family_forbidden": "Access denied",
        "invalid_status": "Invalid task status: {status}",
        "invalid_page": "Page must be 1 or greater",
        "invalid_limit": "Limit must be between 1 and {max_limit}",
        "invalid_request": "Invalid request: {detail}",
        "no_active_plan": "No active plan",
        "no_valid_plan_items": "No plan items to create",
        "invalid_dday_type": "D-Day type must be custom or exam: {type}",
        "event_started": "Task started: {title}",
        "event_completed": "Task completed: {title}",
        "event_skipped": "Task skipped: {title}",
        "event_status_changed": "Task status changed: {title}",
        "alert_today": "🚨 Today! {title}",
        "alert_tomorrow": "⚠️ Tomorrow! {title}",
        "alert_three_days": "📢 3 days left: {title}",
        "alert_one_week": "📅 One week left: {title}",
        "personal_plan_title": "Personal schedule",
        "ai_plan_title": "AI-generated action plan",
        "timeline_month": "{month_name} {year}",
        "milestone_first_semester_final": "1st-semester final exam",
        "milestone_second_semester_midterm": "2nd-semester midterm exam",
        "milestone_application_open": "Application window opens",
        "milestone_application_close": "Application window closes",
        "milestone_first_round": "First-round screening",
        "milestone_interview": "Interview",
        "milestone_final_announcement": "Final announcement",
    },
}


def t(key: str, locale: str = None, **kwargs) -> str:
    """Look up a message, falling back to Korean and then to the raw key."""
    catalog = MESSAGES.get(locale or settings.locale, MESSAGES["ko"])
    template = catalog.get(key) or MESSAGES["ko"].get(key, key)
    return template.format(**kwargs) if kwargs else template
