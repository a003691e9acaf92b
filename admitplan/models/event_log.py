from sqlalchemy import Column, Integer, String, DateTime, Text, ForeignKey, JSON
from admitplan.clock import local_now
from admitplan.database import Base

class EventLogEntry(Base):
    """Append-only record of something that happened to a student's tasks"""
    __tablename__ = "event_logs"

    id = Column(Integer, primary_key=True, index=True)
    student_id = Column(Integer, ForeignKey("users.id"), index=True, nullable=False)
    type = Column(String, nullable=False, index=True)
    title = Column(String, nullable=False)
    description = Column(Text)
    reference_id = Column(Integer)  # task or other entity that caused it
    event_metadata = Column("metadata", JSON)
    created_at = Column(DateTime, default=local_now, index=True)
