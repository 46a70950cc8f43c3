"""
Collaborator lookups used by the swap engine: permission gate, restaurant
membership and the narrow shift read/write capability.
"""

from enum import Enum
from typing import List, Optional

from sqlalchemy import update
from sqlalchemy.orm import Session

from shiftswap.db.models.employees import Employees, EmploymentStatus
from shiftswap.db.models.shifts import Shifts
from shiftswap.db.models.user_roles import UserRoles, Role
from shiftswap.db.models.users import Users

from .errors import ShiftReassignmentError


class Capability(str, Enum):
    REQUEST_SHIFT_SWAP = "REQUEST_SHIFT_SWAP"
    APPROVE_SHIFT_SWAP = "APPROVE_SHIFT_SWAP"


ELEVATED_ROLES = [Role.ADMIN, Role.OWNER]

ROLE_CAPABILITIES = {
    Role.EMPLOYEE: {Capability.REQUEST_SHIFT_SWAP},
    Role.MANAGER: {Capability.REQUEST_SHIFT_SWAP, Capability.APPROVE_SHIFT_SWAP},
    Role.ADMIN: {Capability.REQUEST_SHIFT_SWAP, Capability.APPROVE_SHIFT_SWAP},
    Role.OWNER: {Capability.REQUEST_SHIFT_SWAP, Capability.APPROVE_SHIFT_SWAP},
}

# members with no explicit role in the restaurant
DEFAULT_MEMBER_CAPABILITIES = {Capability.REQUEST_SHIFT_SWAP}


def get_user(db: Session, user_id: int) -> Optional[Users]:
    return db.query(Users).filter(Users.id == user_id).first()


def is_elevated(db: Session, user_id: int) -> bool:
    """Global ADMIN/OWNER (restaurant_id=None) bypass swap permission checks."""
    role = db.query(UserRoles).filter(
        UserRoles.user_id == user_id,
        UserRoles.role.in_(ELEVATED_ROLES),
        UserRoles.restaurant_id.is_(None),
    ).first()
    return role is not None


def is_active_member(db: Session, user_id: int, restaurant_id: int) -> bool:
    membership = db.query(Employees).join(Users, Users.id == Employees.user_id).filter(
        Employees.user_id == user_id,
        Employees.restaurant_id == restaurant_id,
        Employees.employment_status == EmploymentStatus.ACTIVE,
        Users.is_active.is_(True),
    ).first()
    return membership is not None


def has_permission(db: Session, user_id: int, restaurant_id: int, capability: Capability) -> bool:
    roles = db.query(UserRoles).filter(
        UserRoles.user_id == user_id,
        UserRoles.restaurant_id == restaurant_id,
    ).all()
    for r in roles:
        if capability in ROLE_CAPABILITIES.get(r.role, set()):
            return True

    if capability in DEFAULT_MEMBER_CAPABILITIES:
        return is_active_member(db, user_id, restaurant_id)
    return False


def can_act(db: Session, user_id: int, restaurant_id: int, capability: Capability) -> bool:
    return is_elevated(db, user_id) or has_permission(db, user_id, restaurant_id, capability)


def get_approvable_restaurant_ids(db: Session, user_id: int) -> Optional[List[int]]:
    """
    Restaurant IDs where the user may approve swaps, or None if elevated (all restaurants).
    """
    if is_elevated(db, user_id):
        return None

    roles = db.query(UserRoles).filter(
        UserRoles.user_id == user_id,
        UserRoles.restaurant_id.isnot(None),
    ).all()
    return sorted({
        r.restaurant_id for r in roles
        if Capability.APPROVE_SHIFT_SWAP in ROLE_CAPABILITIES.get(r.role, set())
    })


def get_shift(db: Session, shift_id: int) -> Optional[Shifts]:
    return db.query(Shifts).filter(Shifts.id == shift_id).first()


def reassign_shift_owner(db: Session, shift_id: int, new_owner_id: int) -> None:
    """
    Point the shift at its new owner inside the caller's transaction.
    The caller commits or rolls back together with the swap status change.
    """
    result = db.execute(
        update(Shifts)
        .where(Shifts.id == shift_id)
        .values(user_id=new_owner_id)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        raise ShiftReassignmentError(f"Shift {shift_id} could not be reassigned to user {new_owner_id}")
