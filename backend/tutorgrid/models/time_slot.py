from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from tutorgrid.db.base import Base


class TimeSlot(Base):
    __tablename__ = "time_slots"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    start_time: Mapped[str] = mapped_column(String(5), nullable=False)
    end_time: Mapped[str] = mapped_column(String(5), nullable=False)
    display_order: Mapped[int] = mapped_column(Integer, nullable=False, unique=True, index=True)

    @property
    def label(self) -> str:
        return f"{self.start_time}-{self.end_time}"
