from datetime import timedelta

import pytest

from admitplan import crud, plan_converter
from admitplan.errors import BadRequest, NotFound
from admitplan.models import ActionPlan
from admitplan.plan_converter import PlanTextParser, is_materializable
from admitplan.schemas import PlanItem, PlanStatus
from tests.conftest import TODAY


SAMPLE_PLAN = """
12주 액션 플랜

1주차
- 목표 학교 입시 요강 분석
- 1학기 성적 정리

Week 2
* Read a book on science
• Join the robotics club

3 week
1. 필수 서류 목록 만들기
2) 봉사활동 신청
"""


class TestParser:

    def test_week_markers_and_bullets(self):
        items = PlanTextParser.parse(SAMPLE_PLAN)

        assert [(item.week, item.title) for item in items] == [
            (1, "목표 학교 입시 요강 분석"),
            (1, "1학기 성적 정리"),
            (2, "Read a book on science"),
            (2, "Join the robotics club"),
            (3, "필수 서류 목록 만들기"),
            (3, "봉사활동 신청"),
        ]

    def test_heading_with_week_word_is_a_marker(self):
        # "12주" in the title line sets the week before any bullet
        items = PlanTextParser.parse("12주 계획\n- 면접 연습")

        assert items[0].week == 12

    def test_lines_before_first_marker_default_to_week_one(self):
        items = PlanTextParser.parse("- 자기소개서 초안")

        assert items[0].week == 1

    def test_korean_week_forms(self):
        items = PlanTextParser.parse("4주차\n- A 과제\n5주\n- B 과제")

        assert [item.week for item in items] == [4, 5]

    def test_no_items_falls_back_to_template(self):
        items = PlanTextParser.parse("열심히 하겠습니다.\n화이팅!")

        assert items == plan_converter.get_default_plan_template()
        assert len(items) == 12

    def test_empty_text(self):
        assert len(plan_converter.parse_free_text("")) == 12

    def test_out_of_range_weeks_dropped(self):
        items = PlanTextParser.parse("13주차\n- 너무 늦은 과제\n2주차\n- 정상 과제")

        assert [item.title for item in items] == ["정상 과제"]

    def test_rule_lines_ignored(self):
        items = PlanTextParser.parse("1주차\n- ---\n- 진짜 과제")

        assert [item.title for item in items] == ["진짜 과제"]

    def test_deterministic(self):
        assert PlanTextParser.parse(SAMPLE_PLAN) == PlanTextParser.parse(SAMPLE_PLAN)

    @pytest.mark.parametrize("title,category", [
        ("독서 감상문 쓰기", "reading"),
        ("Read a book", "reading"),
        ("동아리 발표 준비", "activity"),
        ("Volunteer at the library center", "activity"),
        ("수학 복습", "study"),
        ("Grade review", "study"),
        ("자기소개서 초안", "other"),
    ])
    def test_category(self, title, category):
        assert PlanTextParser.detect_category(title) == category

    @pytest.mark.parametrize("title,week,priority", [
        ("원서 마감 확인", 6, "high"),
        ("Important: portfolio", 6, "high"),
        ("모의고사 풀이", 6, "medium"),
        ("모의고사 풀이", 1, "high"),
        ("모의고사 풀이", 2, "high"),
        ("모의고사 풀이", 11, "high"),
        ("모의고사 풀이", 10, "medium"),
    ])
    def test_priority(self, title, week, priority):
        assert PlanTextParser.detect_priority(title, week) == priority


class TestMaterializable:

    def test_title_length_limit(self):
        assert is_materializable(PlanItem(week=1, title="x" * 99))
        assert not is_materializable(PlanItem(week=1, title="x" * 100))

    def test_blank_title(self):
        assert not is_materializable(PlanItem(week=1, title="   "))

    @pytest.mark.parametrize("week", [0, 13, -1])
    def test_week_bounds(self, week):
        assert not is_materializable(PlanItem(week=week, title="Task"))


class TestConvertToTasks:

    def test_default_template(self, db, clock, student):
        result = plan_converter.convert_to_tasks(
            db, student.id, plan_converter.get_default_plan_template(), clock=clock
        )

        plan = db.get(ActionPlan, result.plan_id)
        assert result.success
        assert result.tasks_created == 12
        assert plan.start_date == TODAY
        assert plan.end_date == TODAY + timedelta(days=84)
        assert plan.status == PlanStatus.ACTIVE.value
        assert result.tasks[0].title == "[AI] 목표 학교 분석"
        assert result.tasks[0].due_date == TODAY + timedelta(days=6)
        assert result.tasks[-1].due_date == TODAY + timedelta(days=83)

    def test_tasks_start_as_todo(self, db, clock, student):
        result = plan_converter.convert_to_tasks(
            db, student.id, plan_converter.get_default_plan_template(), clock=clock
        )

        tasks = crud.get_plan_tasks(db, result.plan_id)
        assert {task.status for task in tasks} == {"TODO"}
        assert all(task.completed_at is None for task in tasks)
        assert tasks[2].theme == "reading"

    def test_explicit_start_date(self, db, student):
        start = TODAY + timedelta(days=5)

        result = plan_converter.convert_to_tasks(db, student.id, [PlanItem(week=2, title="Essay")], start)

        assert result.tasks[0].due_date == start + timedelta(days=13)

    def test_invalid_items_skipped(self, db, clock, student):
        items = [PlanItem(week=1, title="Keep"), PlanItem(week=14, title="Drop"), PlanItem(week=2, title="y" * 120)]

        result = plan_converter.convert_to_tasks(db, student.id, items, clock=clock)

        assert [task.title for task in result.tasks] == ["[AI] Keep"]

    @pytest.mark.parametrize("items", [[], [PlanItem(week=20, title="x")], [PlanItem(week=1, title="---")]])
    def test_nothing_valid_keeps_current_plan(self, db, clock, student, make_plan, make_task, items):
        current = make_plan(title="Current")
        make_task(current, title="Essay", due_date=TODAY + timedelta(days=3))

        with pytest.raises(BadRequest):
            plan_converter.convert_to_tasks(db, student.id, items, clock=clock)

        db.refresh(current)
        assert current.status == PlanStatus.ACTIVE.value
        assert db.query(ActionPlan).count() == 1
        assert len(crud.get_plan_tasks(db, current.id)) == 1

    def test_previous_plan_archived(self, db, clock, student, make_plan):
        old = make_plan(title="Old")

        result = plan_converter.convert_to_tasks(db, student.id, [PlanItem(week=1, title="New")], clock=clock)

        db.refresh(old)
        assert old.status == PlanStatus.ARCHIVED.value
        assert crud.get_active_plan(db, student.id).id == result.plan_id
        assert len(crud.list_active_plans(db, student.id)) == 1

    def test_parse_and_convert(self, db, clock, student):
        result = plan_converter.parse_and_convert(db, student.id, SAMPLE_PLAN, clock=clock)

        assert result.tasks_created == 6
        assert result.tasks[2].due_date == TODAY + timedelta(days=13)


class TestConvertFromHistory:

    def test_stored_output(self, db, clock, student):
        output = crud.save_ai_output(db, student.id, SAMPLE_PLAN)

        result = plan_converter.convert_from_ai_history(db, student.id, output.id, clock=clock)

        assert result.tasks_created == 6

    def test_missing_output(self, db, clock, student):
        with pytest.raises(NotFound):
            plan_converter.convert_from_ai_history(db, student.id, 77, clock=clock)

    def test_other_students_output(self, db, clock, student, other_student):
        output = crud.save_ai_output(db, other_student.id, SAMPLE_PLAN)

        with pytest.raises(NotFound):
            plan_converter.convert_from_ai_history(db, student.id, output.id, clock=clock)
