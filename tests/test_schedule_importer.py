from datetime import date

import pandas as pd
import pytest

from admitplan.models import AdmissionSchedule, School
from admitplan.schedule_importer import ScheduleParser, import_schedules


@pytest.fixture
def frame():
    return pd.DataFrame({
        " School ": ["Seoul Science High School", "Seoul Science High School", "Busan Foreign Language High", None],
        "Title": ["Application window", "Interview", "Briefing session", "Orphan row"],
        "Start Date": ["2026-11-02", "2026.12.01", "2026/10/25", "2026-11-10"],
        "End Date": ["2026-11-06", None, None, None],
        "Note": ["Online only", None, "Main hall", None],
    })


class TestParseFrame:

    def test_normalizes_columns_and_dates(self, frame):
        rows = ScheduleParser.parse_frame(frame)

        assert len(rows) == 3
        assert rows[0] == {
            "school": "Seoul Science High School",
            "title": "Application window",
            "start_date": date(2026, 11, 2),
            "end_date": date(2026, 11, 6),
            "type": None,
            "note": "Online only",
        }
        assert rows[1]["start_date"] == date(2026, 12, 1)
        assert rows[1]["end_date"] is None
        assert rows[2]["start_date"] == date(2026, 10, 25)

    def test_unparseable_date_skips_row(self):
        rows = ScheduleParser.parse_frame(pd.DataFrame({
            "School": ["A"], "Title": ["Fair"], "Start_Date": ["sometime in autumn"],
        }))

        assert rows == []

    def test_timestamp_values(self):
        rows = ScheduleParser.parse_frame(pd.DataFrame({
            "School": ["A"], "Title": ["Fair"], "Start_Date": [pd.Timestamp("2026-11-20 09:00")],
        }))

        assert rows[0]["start_date"] == date(2026, 11, 20)


class TestAutoParse:

    def test_csv(self, tmp_path, frame):
        path = tmp_path / "schedules.csv"
        frame.to_csv(path, index=False)

        rows = ScheduleParser.auto_parse(str(path))

        assert [row["title"] for row in rows] == ["Application window", "Interview", "Briefing session"]

    def test_unsupported_format(self, tmp_path):
        with pytest.raises(ValueError):
            ScheduleParser.auto_parse(str(tmp_path / "schedules.pdf"))


class TestImport:

    def test_stores_schools_and_schedules(self, db, frame):
        count = import_schedules(db, ScheduleParser.parse_frame(frame))

        assert count == 3
        assert db.query(School).count() == 2
        assert db.query(AdmissionSchedule).count() == 3

    def test_reimport_updates_in_place(self, db, frame):
        rows = ScheduleParser.parse_frame(frame)
        import_schedules(db, rows)

        rows[0]["note"] = "Moved to the main hall"
        import_schedules(db, rows)

        assert db.query(AdmissionSchedule).count() == 3
        schedule = db.query(AdmissionSchedule).filter(AdmissionSchedule.title == "Application window").one()
        assert schedule.note == "Moved to the main hall"
