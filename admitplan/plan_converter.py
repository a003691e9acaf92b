import logging
import re
from datetime import date, timedelta
from typing import List, Optional

from sqlalchemy.orm import Session

from admitplan import crud
from admitplan.clock import Clock, default_clock
from admitplan.errors import BadRequest, NotFound
from admitplan.messages import t
from admitplan.schemas import ConversionResult, CreatedTask, PlanItem

logger = logging.getLogger(__name__)

PLAN_DAYS = 84  # 12 weeks
PLAN_WEEKS = 12
MAX_TITLE_LENGTH = 100
AI_TITLE_PREFIX = "[AI] "

WEEK_MARKER = re.compile(r"(\d+)\s*(?:주차|주|week)|week\s*(\d+)", re.IGNORECASE)
TASK_LINE = re.compile(r"^[-*•]\s*(.+)|^\d+[.)]\s*(.+)")

CATEGORY_KEYWORDS = [
    ("reading", ("독서", "책", "읽", "read", "book")),
    ("activity", ("동아리", "봉사", "활동", "club", "volunteer", "activity")),
    ("study", ("공부", "복습", "학습", "성적", "study", "review", "grade")),
]
URGENT_KEYWORDS = ("중요", "필수", "마감", "urgent", "important", "deadline")


def get_default_plan_template() -> List[PlanItem]:
    """Canned three-month plan, one item per week"""
    return [
        # Month 1
        PlanItem(week=1, title="목표 학교 분석", description="목표 학교 3곳의 입시 요강 분석하기", category="study", priority="high"),
        PlanItem(week=2, title="1학기 성적 복습", description="1학기 취약 과목 복습 계획 세우기", category="study", priority="high"),
        PlanItem(week=3, title="독서 활동 시작", description="입시에 도움되는 도서 1권 선정 및 읽기", category="reading", priority="medium"),
        PlanItem(week=4, title="동아리 활동 정리", description="동아리 활동 내용 및 성과 정리하기", category="activity", priority="medium"),
        # Month 2
        PlanItem(week=5, title="모의고사 대비", description="주요 과목 모의고사 풀이 및 오답 분석", category="study", priority="high"),
        PlanItem(week=6, title="자기소개서 초안", description="자기소개서 1차 초안 작성", category="other", priority="high"),
        PlanItem(week=7, title="봉사활동 계획", description="봉사활동 일정 계획 및 실행", category="activity", priority="medium"),
        PlanItem(week=8, title="독서 독후감 작성", description="읽은 도서 독후감 작성 및 정리", category="reading", priority="medium"),
        # Month 3
        PlanItem(week=9, title="면접 준비 시작", description="예상 면접 질문 정리 및 답변 준비", category="other", priority="high"),
        PlanItem(week=10, title="자기소개서 수정", description="자기소개서 피드백 반영 및 수정", category="other", priority="high"),
        PlanItem(week=11, title="최종 점검", description="원서 제출 전 서류 최종 점검", category="other", priority="high"),
        PlanItem(week=12, title="면접 모의 연습", description="모의 면접 연습 및 피드백 반영", category="other", priority="high"),
    ]


class PlanTextParser:
    """
    Best-effort conversion of a free-text action plan into weekly items.
    Pure: no I/O, the same text always yields the same items.
    """

    @staticmethod
    def parse(text: str) -> List[PlanItem]:
        """
        Scan lines for week markers ("3주차", "3주", "3 week", "Week 3") and
        bullet or numbered lines ("- ...", "* ...", "• ...", "1. ...", "1) ...").

        Falls back to the default template when nothing is recognized.
        """
        items = []
        current_week = 1

        for line in (text or "").splitlines():
            week_match = WEEK_MARKER.search(line)
            if week_match:
                current_week = int(week_match.group(1) or week_match.group(2))
                continue

            task_match = TASK_LINE.match(line.strip())
            if not task_match:
                continue

            title = (task_match.group(1) or task_match.group(2)).strip()
            item = PlanItem(
                week=current_week,
                title=title,
                description="",
                category=PlanTextParser.detect_category(title),
                priority=PlanTextParser.detect_priority(title, current_week)
            )
            if is_materializable(item):
                items.append(item)

        if not items:
            logger.info("No plan items recognized, using default template")
            return get_default_plan_template()
        return items

    @staticmethod
    def detect_category(title: str) -> str:
        lower = title.lower()
        for category, keywords in CATEGORY_KEYWORDS:
            if any(keyword in lower for keyword in keywords):
                return category
        return "other"

    @staticmethod
    def detect_priority(title: str, week: int) -> str:
        lower = title.lower()
        if any(keyword in lower for keyword in URGENT_KEYWORDS):
            return "high"
        # Opening weeks and the run-up to the deadline
        if week <= 2 or week >= 11:
            return "high"
        return "medium"


def parse_free_text(text: str) -> List[PlanItem]:
    return PlanTextParser.parse(text)


def is_materializable(item: PlanItem) -> bool:
    """Week within the plan and a wordy title shorter than 100 characters"""
    title = item.title.strip()
    if not 1 <= item.week <= PLAN_WEEKS:
        return False
    # "---" rules and bare bullets carry no task
    return 0 < len(title) < MAX_TITLE_LENGTH and re.search(r"\w", title) is not None


def due_date_for_week(start_date: date, week: int) -> date:
    """Last day of the given plan week"""
    return start_date + timedelta(days=week * 7 - 1)


def convert_to_tasks(
    db: Session,
    student_id: int,
    items: List[PlanItem],
    start_date: Optional[date] = None,
    clock: Optional[Clock] = None
) -> ConversionResult:
    """
    Create a new 12-week ACTIVE plan and one TODO task per plan item.

    Items outside weeks 1..12 or with unusable titles are dropped; when none
    remain, BadRequest is raised and the current plan is left alone. The plan
    and its tasks are committed together.
    """
    start = start_date or (clock or default_clock()).today()

    valid_items = [item for item in items if is_materializable(item)]
    if len(valid_items) < len(items):
        logger.warning("Dropped %d invalid plan items", len(items) - len(valid_items))
    if not valid_items:
        raise BadRequest("no_valid_plan_items")

    try:
        plan = crud.create_plan(
            db,
            student_id=student_id,
            title=t("ai_plan_title"),
            start_date=start,
            end_date=start + timedelta(days=PLAN_DAYS),
            commit=False
        )
        tasks = [
            crud.create_task(
                db,
                plan_id=plan.id,
                week_number=item.week,
                theme=item.category,
                title=AI_TITLE_PREFIX + item.title.strip(),
                description=item.description or None,
                due_date=due_date_for_week(start, item.week),
                commit=False
            )
            for item in valid_items
        ]
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info("Created plan %s with %d tasks for student %s", plan.id, len(tasks), student_id)
    return ConversionResult(
        success=True,
        plan_id=plan.id,
        tasks_created=len(tasks),
        tasks=[CreatedTask(id=task.id, title=task.title, due_date=task.due_date) for task in tasks]
    )


def parse_and_convert(
    db: Session,
    student_id: int,
    text: str,
    start_date: Optional[date] = None,
    clock: Optional[Clock] = None
) -> ConversionResult:
    """Parse a free-text plan and materialize it"""
    return convert_to_tasks(db, student_id, parse_free_text(text), start_date, clock)


def convert_from_ai_history(
    db: Session,
    student_id: int,
    output_id: int,
    start_date: Optional[date] = None,
    clock: Optional[Clock] = None
) -> ConversionResult:
    """Materialize a previously stored action-plan response"""
    output = crud.get_action_plan_output(db, student_id, output_id)
    if not output:
        raise NotFound("ai_output_not_found")
    return parse_and_convert(db, student_id, output.response, start_date, clock)
