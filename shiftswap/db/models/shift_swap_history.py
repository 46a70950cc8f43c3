from typing import Optional
from enum import Enum
from datetime import datetime
from sqlalchemy import ForeignKey, Integer, String, Text, Enum as SQLEnum, func
from sqlalchemy.orm import Mapped, mapped_column

from shiftswap.db.database import Base
from shiftswap.db.types import UTCDateTime
from shiftswap.db.models.swap_requests import SwapStatus


class SwapChangeType(str, Enum):
    SWAP_REQUESTED = "SWAP_REQUESTED"
    ACCEPTED_BY_EMPLOYEE = "ACCEPTED_BY_EMPLOYEE"
    REJECTED_BY_EMPLOYEE = "REJECTED_BY_EMPLOYEE"
    SWAP_APPROVED = "SWAP_APPROVED"
    SWAP_REJECTED = "SWAP_REJECTED"
    SWAP_EXPIRED = "SWAP_EXPIRED"


class ShiftSwapHistory(Base):
    """Append-only audit row. Shift fields are a snapshot taken when the row is written."""
    __tablename__ = "shift_swap_history"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    swap_request_id: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey("swap_requests.id"), nullable=True, index=True)
    shift_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)  # no FK, history outlives the shift
    restaurant_id: Mapped[int] = mapped_column(Integer, ForeignKey("restaurants.id"), nullable=False, index=True)
    from_user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    to_user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    status: Mapped[SwapStatus] = mapped_column(SQLEnum(SwapStatus, name="swap_status_enum"), nullable=False, index=True)
    change_type: Mapped[SwapChangeType] = mapped_column(SQLEnum(SwapChangeType, name="swap_change_type_enum"), nullable=False)
    shift_date: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, index=True)
    shift_start_time: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    shift_end_time: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    shift_type: Mapped[str] = mapped_column(String(50), nullable=False)
    requested_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, index=True)
    approved_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime, nullable=True)
    approved_by_id: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey("users.id"), nullable=True)
    actor_user_id: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey("users.id"), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    recorded_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, server_default=func.now())
