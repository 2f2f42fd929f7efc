from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from academic_scheduler.db.base import Base


class TimeSlot(Base):
    __tablename__ = "time_slots"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    label: Mapped[str] = mapped_column(String(50), unique=True, index=True, nullable=False)
    order_index: Mapped[int] = mapped_column(Integer, nullable=False)
