from sqlalchemy import Column, Integer, String, Date, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from admitplan.clock import local_now
from admitplan.database import Base
from admitplan.schemas import PlanStatus

class ActionPlan(Base):
    """Bounded multi-week engagement for one student"""
    __tablename__ = "action_plans"

    id = Column(Integer, primary_key=True, index=True)
    student_id = Column(Integer, ForeignKey("users.id"), index=True, nullable=False)
    title = Column(String, nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    status = Column(String, nullable=False, default=PlanStatus.ACTIVE.value)
    created_at = Column(DateTime, default=local_now)

    student = relationship("User", back_populates="action_plans")
    tasks = relationship("WeeklyTask", back_populates="plan")
