from sqlalchemy import Integer, String, ForeignKey, Index, func
from datetime import datetime
from sqlalchemy.orm import Mapped, mapped_column
from shiftswap.db.database import Base
from shiftswap.db.types import UTCDateTime


class Shifts(Base):
    __tablename__ = "shifts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    restaurant_id: Mapped[int] = mapped_column(Integer, ForeignKey("restaurants.id"), nullable=False)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False)
    start_datetime_utc: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    end_datetime_utc: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    shift_type: Mapped[str] = mapped_column(String(50), nullable=False)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

    __table_args__ = (
        Index("ix_shifts_restaurant_start", "restaurant_id", "start_datetime_utc"),
        Index("ix_shifts_user_start", "user_id", "start_datetime_utc"),
    )
