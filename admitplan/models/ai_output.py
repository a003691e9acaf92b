from sqlalchemy import Column, Integer, String, DateTime, Text, ForeignKey
from admitplan.clock import local_now
from admitplan.database import Base

class AIOutput(Base):
    """Raw generative-text response kept for later conversion"""
    __tablename__ = "ai_outputs"

    id = Column(Integer, primary_key=True, index=True)
    student_id = Column(Integer, ForeignKey("users.id"), index=True, nullable=False)
    type = Column(String, nullable=False)  # ACTION_PLAN, ...
    prompt = Column(Text)
    response = Column(Text, nullable=False)
    created_at = Column(DateTime, default=local_now)
