from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.orm import relationship
from admitplan.clock import local_now
from admitplan.database import Base

class User(Base):
    """Student or parent account, linked to a family"""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    role = Column(String, nullable=False, default="STUDENT")  # STUDENT, PARENT
    family_id = Column(String, index=True)  # shared by parent and child
    created_at = Column(DateTime, default=local_now)

    action_plans = relationship("ActionPlan", back_populates="student")
    target_schools = relationship("TargetSchool", back_populates="student")
