"""
Read side of the swap engine: single lookups and filtered lists, with the
visibility rule applied. A viewer sees a request if they are its requester or
target, hold APPROVE_SHIFT_SWAP for its restaurant, or are elevated.
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Query, Session

from shiftswap.core.timeutils import as_utc
from shiftswap.db.models.shifts import Shifts
from shiftswap.db.models.swap_requests import SwapRequests, SwapStatus

from .access import Capability, can_act, get_approvable_restaurant_ids
from .errors import SwapError, SwapErrorCode


def _with_shift(query: Query) -> Query:
    return query.join(Shifts, Shifts.id == SwapRequests.shift_id)


def _visible_to(query: Query, db: Session, viewer_id: int) -> Query:
    approvable = get_approvable_restaurant_ids(db, viewer_id)
    if approvable is None:
        return query  # elevated

    involved = or_(SwapRequests.from_user_id == viewer_id, SwapRequests.to_user_id == viewer_id)
    if approvable:
        return query.filter(or_(involved, Shifts.restaurant_id.in_(approvable)))
    return query.filter(involved)


def get_swap_request_for_viewer(db: Session, request_id: int, viewer_id: int) -> SwapRequests:
    swap = db.query(SwapRequests).filter(SwapRequests.id == request_id).first()
    if not swap:
        raise SwapError(SwapErrorCode.SWAP_NOT_FOUND, "Swap request not found")

    if viewer_id in (swap.from_user_id, swap.to_user_id):
        return swap

    shift = db.query(Shifts).filter(Shifts.id == swap.shift_id).first()
    if shift and can_act(db, viewer_id, shift.restaurant_id, Capability.APPROVE_SHIFT_SWAP):
        return swap

    raise SwapError(SwapErrorCode.NOT_AUTHORIZED, "No access to this swap request")


def list_swap_requests(
    db: Session,
    viewer_id: int,
    status: Optional[SwapStatus] = None,
    from_user_id: Optional[int] = None,
    to_user_id: Optional[int] = None,
    restaurant_id: Optional[int] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    include_expired: bool = False,
    skip: int = 0,
    limit: int = 100,
) -> List[SwapRequests]:
    """
    Filtered list, newest first. EXPIRED requests are hidden unless asked for
    by status or include_expired. Dates filter on the shift's start.
    """
    query = _with_shift(db.query(SwapRequests))

    if status:
        query = query.filter(SwapRequests.status == status)
    elif not include_expired:
        query = query.filter(SwapRequests.status != SwapStatus.EXPIRED)

    if from_user_id:
        query = query.filter(SwapRequests.from_user_id == from_user_id)
    if to_user_id:
        query = query.filter(SwapRequests.to_user_id == to_user_id)
    if restaurant_id:
        query = query.filter(Shifts.restaurant_id == restaurant_id)
    if start_date:
        query = query.filter(Shifts.start_datetime_utc >= as_utc(start_date))
    if end_date:
        query = query.filter(Shifts.start_datetime_utc <= as_utc(end_date))

    query = _visible_to(query, db, viewer_id)
    return query.order_by(SwapRequests.requested_at.desc(), SwapRequests.id.desc()).offset(skip).limit(limit).all()


def list_incoming(db: Session, user_id: int, restaurant_id: Optional[int] = None) -> List[SwapRequests]:
    """PENDING requests waiting on this user's answer."""
    query = _with_shift(db.query(SwapRequests)).filter(
        SwapRequests.to_user_id == user_id,
        SwapRequests.status == SwapStatus.PENDING,
    )
    if restaurant_id:
        query = query.filter(Shifts.restaurant_id == restaurant_id)
    return query.order_by(SwapRequests.requested_at.desc(), SwapRequests.id.desc()).all()


def list_outgoing(
    db: Session,
    user_id: int,
    restaurant_id: Optional[int] = None,
    status: Optional[SwapStatus] = None,
) -> List[SwapRequests]:
    query = _with_shift(db.query(SwapRequests)).filter(SwapRequests.from_user_id == user_id)
    if status:
        query = query.filter(SwapRequests.status == status)
    if restaurant_id:
        query = query.filter(Shifts.restaurant_id == restaurant_id)
    return query.order_by(SwapRequests.requested_at.desc(), SwapRequests.id.desc()).all()


def list_pending_manager_approval(
    db: Session,
    viewer_id: int,
    restaurant_id: Optional[int] = None,
) -> List[SwapRequests]:
    """ACCEPTED requests in restaurants where the viewer can approve."""
    query = _with_shift(db.query(SwapRequests)).filter(SwapRequests.status == SwapStatus.ACCEPTED)
    if restaurant_id:
        query = query.filter(Shifts.restaurant_id == restaurant_id)

    approvable = get_approvable_restaurant_ids(db, viewer_id)
    if approvable is not None:
        if not approvable:
            return []
        query = query.filter(Shifts.restaurant_id.in_(approvable))

    return query.order_by(SwapRequests.responded_at.desc(), SwapRequests.id.desc()).all()
