import logging
import pandas as pd
from typing import List, Dict, Any, Optional
from datetime import date, datetime
from pathlib import Path

from sqlalchemy.orm import Session

from admitplan import crud

logger = logging.getLogger(__name__)


class ScheduleParser:
    """
    Parse published admission schedule tables.
    Expected columns: School, Title, Start_Date, End_Date, Type, Note
    """

    @staticmethod
    def parse_frame(df: pd.DataFrame) -> List[Dict[str, Any]]:
        # Normalize column names
        df.columns = df.columns.str.strip().str.lower().str.replace(" ", "_")

        rows = []
        for _, row in df.iterrows():
            school = ScheduleParser._clean(row.get("school"))
            title = ScheduleParser._clean(row.get("title", row.get("name")))
            start_date = ScheduleParser._parse_date(row.get("start_date", row.get("date")))

            # Skip rows with missing essential data
            if not (school and title and start_date):
                continue

            rows.append({
                "school": school,
                "title": title,
                "start_date": start_date,
                "end_date": ScheduleParser._parse_date(row.get("end_date")),
                "type": ScheduleParser._clean(row.get("type")),
                "note": ScheduleParser._clean(row.get("note", row.get("description")))
            })
        return rows

    @staticmethod
    def parse_csv_table(file_path: str) -> List[Dict[str, Any]]:
        return ScheduleParser.parse_frame(pd.read_csv(file_path))

    @staticmethod
    def parse_excel_table(file_path: str) -> List[Dict[str, Any]]:
        return ScheduleParser.parse_frame(pd.read_excel(file_path))

    @staticmethod
    def auto_parse(file_path: str) -> List[Dict[str, Any]]:
        """
        Automatically detect file type and parse accordingly.
        Supports: CSV, Excel (xlsx, xls)
        """
        file_ext = Path(file_path).suffix.lower()

        if file_ext == ".csv":
            return ScheduleParser.parse_csv_table(file_path)
        elif file_ext in [".xlsx", ".xls"]:
            return ScheduleParser.parse_excel_table(file_path)
        else:
            raise ValueError(f"Unsupported file format: {file_ext}. Use .csv or .xlsx")

    @staticmethod
    def _clean(value: Any) -> Optional[str]:
        if value is None or pd.isna(value):
            return None
        text = str(value).strip()
        return text or None

    @staticmethod
    def _parse_date(date_value: Any) -> Optional[date]:
        """Parse date from various formats"""
        if date_value is None or pd.isna(date_value):
            return None

        if isinstance(date_value, (datetime, pd.Timestamp)):
            return date_value.date()
        if isinstance(date_value, date):
            return date_value

        date_str = str(date_value).strip()

        # Common formats - including 2-digit years
        formats = ["%Y-%m-%d", "%Y.%m.%d", "%Y/%m/%d", "%d/%m/%Y", "%m/%d/%Y", "%d-%m-%Y", "%d/%m/%y", "%m/%d/%y"]

        for fmt in formats:
            try:
                return datetime.strptime(date_str, fmt).date()
            except ValueError:
                continue

        return None


def import_schedules(db: Session, rows: List[Dict[str, Any]]) -> int:
    """Upsert schools and their schedules; returns the number of rows stored"""
    try:
        for row in rows:
            school = crud.get_or_create_school(db, row["school"])
            crud.add_schedule(
                db,
                school_id=school.id,
                title=row["title"],
                start_date=row["start_date"],
                end_date=row.get("end_date"),
                type=row.get("type"),
                note=row.get("note")
            )
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info("Imported %d admission schedules", len(rows))
    return len(rows)
