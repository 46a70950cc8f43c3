from sqlalchemy import Integer, func, ForeignKey, UniqueConstraint, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime
from enum import Enum
from shiftswap.db.database import Base
from shiftswap.db.types import UTCDateTime

class EmploymentStatus(str, Enum):
    ACTIVE = "ACTIVE"
    LEAVER = "LEAVER"
    ON_LEAVE = "ON_LEAVE"

class Employees(Base):
    """Membership of a user in a restaurant."""
    __tablename__ = "employees"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    restaurant_id: Mapped[int] = mapped_column(Integer, ForeignKey("restaurants.id"), nullable=False, index=True)
    employment_status: Mapped[EmploymentStatus] = mapped_column(SQLEnum(EmploymentStatus, name="employment_status_enum", native_enum=True), nullable=False, default=EmploymentStatus.ACTIVE)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

    __table_args__ = (
        UniqueConstraint("user_id", "restaurant_id"),
    )
