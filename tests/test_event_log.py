from datetime import datetime, timedelta

import pytest

from admitplan import event_log
from admitplan.clock import SystemClock
from admitplan.errors import BadRequest, Forbidden
from admitplan.schemas import EventQuery, EventType
from admitplan.task_machine import transition
from tests.conftest import NOW


@pytest.fixture
def seeded(db, student):
    """Seven events spread over September and October 2026"""
    stamps = [
        (EventType.TASK_STARTED, datetime(2026, 9, 2, 9, 0)),
        (EventType.TASK_COMPLETED, datetime(2026, 9, 20, 18, 0)),
        (EventType.GRADE_ADDED, datetime(2026, 9, 28, 12, 0)),
        (EventType.TASK_STARTED, datetime(2026, 10, 1, 8, 0)),
        (EventType.TASK_SKIPPED, datetime(2026, 10, 5, 21, 0)),
        (EventType.TASK_COMPLETED, datetime(2026, 10, 10, 10, 0)),
        (EventType.TASK_COMPLETED, datetime(2026, 10, 18, 22, 0)),
    ]
    return [
        event_log.append(db, student.id, event_type.value, f"{event_type.value} {i}", created_at=created_at)
        for i, (event_type, created_at) in enumerate(stamps)
    ]


class TestQuery:

    def test_newest_first(self, db, student, seeded):
        page = event_log.get_events(db, student.id)

        created = [event.created_at for event in page.events]
        assert created == sorted(created, reverse=True)
        assert page.pagination.total == 7

    def test_pagination(self, db, student, seeded):
        page = event_log.get_events(db, student.id, EventQuery(page=2, limit=3))

        assert len(page.events) == 3
        assert page.pagination.page == 2
        assert page.pagination.total_pages == 3
        assert page.events[0].created_at == datetime(2026, 10, 1, 8, 0)

    def test_last_partial_page(self, db, student, seeded):
        page = event_log.get_events(db, student.id, EventQuery(page=3, limit=3))

        assert len(page.events) == 1

    def test_type_filter(self, db, student, seeded):
        page = event_log.get_events(db, student.id, EventQuery(type=EventType.TASK_COMPLETED))

        assert page.pagination.total == 3
        assert {event.type for event in page.events} == {"TASK_COMPLETED"}

    def test_closed_date_range(self, db, student, seeded):
        query = EventQuery(start_date=datetime(2026, 9, 20, 18, 0), end_date=datetime(2026, 10, 1, 8, 0))

        page = event_log.get_events(db, student.id, query)

        assert page.pagination.total == 3

    def test_empty_log(self, db, student):
        page = event_log.get_events(db, student.id)

        assert page.events == []
        assert page.pagination.total_pages == 0

    def test_only_own_events(self, db, student, other_student, seeded):
        assert event_log.get_events(db, other_student.id).pagination.total == 0

    def test_metadata_round_trip(self, db, student):
        event_log.append(db, student.id, "GRADE_ADDED", "Math A", metadata={"subject": "math"})

        event = event_log.get_events(db, student.id).events[0]

        assert event.metadata == {"subject": "math"}


class TestQueryValidation:

    def test_build_query_parses_strings(self):
        query = event_log.build_query(type="TASK_SKIPPED", start_date="2026-10-01", page=2, limit=None)

        assert query.type == EventType.TASK_SKIPPED
        assert query.start_date == datetime(2026, 10, 1)
        assert query.limit is None

    def test_unknown_type(self):
        with pytest.raises(BadRequest):
            event_log.build_query(type="NOT_A_TYPE")

    @pytest.mark.parametrize("page,limit", [(0, 10), (1, 0), (1, 101), (-1, 5)])
    def test_out_of_range_paging(self, db, student, page, limit):
        with pytest.raises(BadRequest):
            event_log.get_events(db, student.id, EventQuery(page=page, limit=limit))


class TestTimeline:

    def test_grouped_by_month_newest_first(self, db, student, seeded):
        result = event_log.get_timeline(db, student.id)

        assert [group.month for group in result.timeline] == ["2026-10", "2026-09"]
        assert len(result.timeline[0].events) == 4
        assert len(result.timeline[1].events) == 3

    def test_respects_limit(self, db, student, seeded):
        result = event_log.get_timeline(db, student.id, limit=2)

        assert [group.month for group in result.timeline] == ["2026-10"]
        assert result.pagination.limit == 2

    def test_filters_apply(self, db, student, seeded):
        result = event_log.get_timeline(db, student.id, EventQuery(type=EventType.GRADE_ADDED))

        assert [group.month for group in result.timeline] == ["2026-09"]


class TestFamilyAccess:

    def test_parent_reads_child_events(self, db, student, parent, seeded):
        page = event_log.get_child_events(db, parent.id, student.id, EventQuery())

        assert page.pagination.total == 7

    def test_parent_reads_child_timeline(self, db, student, parent, seeded):
        result = event_log.get_child_timeline(db, parent.id, student.id)

        assert len(result.timeline) == 2

    def test_other_family_forbidden(self, db, student, other_student, seeded, monkeypatch):
        calls = []
        monkeypatch.setattr(
            "admitplan.crud.query_events",
            lambda *args, **kwargs: calls.append(args) or ([], 0),
        )

        with pytest.raises(Forbidden):
            event_log.get_child_events(db, other_student.id, student.id, EventQuery())

        assert calls == []

    def test_missing_family_id_forbidden(self, db, student):
        from admitplan import crud

        loner = crud.create_user(db, "No family", "PARENT", None)

        with pytest.raises(Forbidden):
            event_log.get_child_timeline(db, loner.id, student.id)

    def test_unknown_parent_forbidden(self, db, student):
        with pytest.raises(Forbidden):
            event_log.get_child_events(db, 12345, student.id)


class TestTimeBase:

    def test_append_after_transition_sorts_newest(self, db, student, make_plan, make_task):
        task = make_task(make_plan())
        clock = SystemClock("Asia/Seoul")

        transition(db, task.id, student.id, "DONE", clock=clock)
        event_log.append(db, student.id, "GRADE_ADDED", "Math A")

        events = event_log.get_events(db, student.id).events
        assert [event.title for event in events][0] == "Math A"
        assert events[0].created_at >= events[1].created_at

    def test_default_stamp_uses_local_clock(self, db, student):
        before = SystemClock().now()
        event = event_log.append(db, student.id, "GRADE_ADDED", "Math A")
        after = SystemClock().now()

        assert before <= event.created_at <= after

    def test_row_defaults_share_the_time_base(self, db, student, make_plan):
        plan = make_plan()

        assert abs(plan.created_at - SystemClock().now()) < timedelta(minutes=1)
        assert abs(student.created_at - SystemClock().now()) < timedelta(minutes=1)

    def test_explicit_clock(self, db, student, clock):
        event = event_log.append(db, student.id, "GRADE_ADDED", "Math A", clock=clock)

        assert event.created_at == NOW
