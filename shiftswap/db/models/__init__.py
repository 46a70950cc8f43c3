from shiftswap.db.database import Base

# Import models
from shiftswap.db.models.users import Users
from shiftswap.db.models.restaurants import Restaurants
from shiftswap.db.models.user_roles import UserRoles, Role
from shiftswap.db.models.employees import Employees, EmploymentStatus
from shiftswap.db.models.shifts import Shifts
from shiftswap.db.models.swap_requests import SwapRequests, SwapStatus
from shiftswap.db.models.shift_swap_history import ShiftSwapHistory, SwapChangeType
from shiftswap.db.models.notifications import Notifications, NotificationSettings

__all__ = [
    "Base",
    # Models
    "Users",
    "Restaurants",
    "UserRoles",
    "Employees",
    "Shifts",
    "SwapRequests",
    "ShiftSwapHistory",
    "Notifications",
    "NotificationSettings",
    # Enums
    "Role",
    "EmploymentStatus",
    "SwapStatus",
    "SwapChangeType",
]
