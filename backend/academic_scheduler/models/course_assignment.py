import uuid
from datetime import datetime

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from academic_scheduler.db.base import Base


class CourseAssignment(Base):
    """A lecturer teaching a course for one group in a term.

    Course, lecturer and group identity are denormalized onto the row so that
    conflict checks never need to join the surrounding catalog tables.
    """

    __tablename__ = "course_assignments"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    course_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    course_name: Mapped[str] = mapped_column(String(200), nullable=False)
    lecturer_id: Mapped[str | None] = mapped_column(String(36), nullable=True, index=True)
    lecturer_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    group_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    group_name: Mapped[str] = mapped_column(String(100), nullable=False)
    academic_year: Mapped[str | None] = mapped_column(String(20), nullable=True)
    term: Mapped[str | None] = mapped_column(String(50), nullable=True)
    availability: Mapped[str | None] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), onupdate=func.now())
