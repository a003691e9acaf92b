from sqlalchemy import Column, Integer, String, Date, Text, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from admitplan.database import Base

class School(Base):
    """School whose admission calendar is published"""
    __tablename__ = "schools"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, unique=True)

    schedules = relationship("AdmissionSchedule", back_populates="school")


class AdmissionSchedule(Base):
    """Published admission event for a school (read-only for planning)"""
    __tablename__ = "admission_schedules"

    id = Column(Integer, primary_key=True, index=True)
    school_id = Column(Integer, ForeignKey("schools.id"), index=True, nullable=False)
    title = Column(String, nullable=False)
    type = Column(String)  # APPLICATION, INTERVIEW, RESULT_ANNOUNCEMENT, ...
    start_date = Column(Date, nullable=False)
    end_date = Column(Date)
    note = Column(Text)

    school = relationship("School", back_populates="schedules")


class TargetSchool(Base):
    """Student's chosen target school"""
    __tablename__ = "target_schools"
    __table_args__ = (UniqueConstraint("student_id", "school_id"),)

    id = Column(Integer, primary_key=True, index=True)
    student_id = Column(Integer, ForeignKey("users.id"), index=True, nullable=False)
    school_id = Column(Integer, ForeignKey("schools.id"), nullable=False)

    student = relationship("User", back_populates="target_schools")
    school = relationship("School")
