from sqlalchemy import Column, Integer, String, Date, DateTime, Text, ForeignKey
from sqlalchemy.orm import relationship
from admitplan.clock import local_now
from admitplan.database import Base
from admitplan.schemas import TaskStatus

class WeeklyTask(Base):
    """Single trackable unit of work inside a plan"""
    __tablename__ = "weekly_tasks"

    id = Column(Integer, primary_key=True, index=True)
    plan_id = Column(Integer, ForeignKey("action_plans.id"), index=True, nullable=False)
    week_number = Column(Integer, nullable=False)  # 1..12 by convention
    theme = Column(String, nullable=False)  # free-form category label
    title = Column(String, nullable=False)
    description = Column(Text)
    status = Column(String, nullable=False, default=TaskStatus.TODO.value)
    due_date = Column(Date)
    completed_at = Column(DateTime)  # set iff status == DONE
    created_at = Column(DateTime, default=local_now)

    plan = relationship("ActionPlan", back_populates="tasks")
