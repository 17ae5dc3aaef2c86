"""Enrollment model definitions."""

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from backend.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Enrollment(Base):
    """Links a student to a course; one row per (student, course) pair."""
    __tablename__ = "enrollments"

    student_id = Column(Integer, ForeignKey("students.id"), primary_key=True)
    course_id = Column(Integer, ForeignKey("courses.id"), primary_key=True)
    enrolled_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    status = Column(String(30))
