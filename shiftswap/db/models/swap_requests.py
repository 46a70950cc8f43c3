from typing import Optional
from enum import Enum
from datetime import datetime
from sqlalchemy import ForeignKey, Index, Integer, Enum as SQLEnum, func, text
from sqlalchemy.orm import Mapped, mapped_column

from shiftswap.db.database import Base
from shiftswap.db.types import UTCDateTime


class SwapStatus(str, Enum):
    PENDING = "PENDING"                     # waiting for the target employee
    ACCEPTED = "ACCEPTED"                   # accepted by employee, waiting for a manager
    REJECTED = "REJECTED"                   # rejected by employee
    APPROVED = "APPROVED"                   # approved by manager, shift reassigned
    MANAGER_REJECTED = "MANAGER_REJECTED"
    EXPIRED = "EXPIRED"                     # no response inside the window


_ACTIVE_PREDICATE = text("status IN ('PENDING', 'ACCEPTED')")


class SwapRequests(Base):
    __tablename__ = "swap_requests"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    shift_id: Mapped[int] = mapped_column(Integer, ForeignKey("shifts.id"), nullable=False, index=True)
    from_user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    to_user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    status: Mapped[SwapStatus] = mapped_column(SQLEnum(SwapStatus, name="swap_status_enum"), nullable=False, default=SwapStatus.PENDING, index=True)
    requested_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    expires_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, index=True)
    responded_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime, nullable=True)
    approved_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime, nullable=True)
    approved_by_id: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey("users.id"), nullable=True)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

    __table_args__ = (
        # one active request per shift
        Index(
            "uq_swap_requests_active_shift",
            "shift_id",
            unique=True,
            sqlite_where=_ACTIVE_PREDICATE,
            postgresql_where=_ACTIVE_PREDICATE,
        ),
        Index("ix_swap_requests_status_expires", "status", "expires_at"),
    )
