from sqlalchemy import Integer, func, UniqueConstraint, ForeignKey, Enum as SQLEnum
from datetime import datetime
from typing import Optional
from sqlalchemy.orm import Mapped, mapped_column
from enum import Enum
from shiftswap.db.database import Base
from shiftswap.db.types import UTCDateTime

class Role(str, Enum):
    EMPLOYEE = "EMPLOYEE"
    MANAGER = "MANAGER"
    ADMIN = "ADMIN"
    OWNER = "OWNER"

class UserRoles(Base):
    __tablename__ = "user_roles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    restaurant_id: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey("restaurants.id"), nullable=True, index=True) # null = global role
    role: Mapped[Role] = mapped_column(SQLEnum(Role, name="role_enum", native_enum=True), nullable=False)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

    __table_args__ = (
        UniqueConstraint('user_id', 'restaurant_id', 'role'),
    )
