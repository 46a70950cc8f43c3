"""
Swap audit trail. Rows are only ever added; nothing here updates or deletes.
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from shiftswap.core.timeutils import as_utc
from shiftswap.db.models.shift_swap_history import ShiftSwapHistory, SwapChangeType
from shiftswap.db.models.shifts import Shifts
from shiftswap.db.models.swap_requests import SwapStatus

from .access import get_approvable_restaurant_ids

HISTORY_LIMIT = 100


def record_history(
    db: Session,
    shift: Shifts,
    *,
    swap_request_id: Optional[int],
    from_user_id: int,
    to_user_id: int,
    status: SwapStatus,
    change_type: SwapChangeType,
    requested_at: datetime,
    actor_user_id: Optional[int] = None,
    approved_at: Optional[datetime] = None,
    approved_by_id: Optional[int] = None,
    notes: Optional[str] = None,
) -> ShiftSwapHistory:
    start = as_utc(shift.start_datetime_utc)
    row = ShiftSwapHistory(
        swap_request_id=swap_request_id,
        shift_id=shift.id,
        restaurant_id=shift.restaurant_id,
        from_user_id=from_user_id,
        to_user_id=to_user_id,
        status=status,
        change_type=change_type,
        shift_date=start.replace(hour=0, minute=0, second=0, microsecond=0),
        shift_start_time=start,
        shift_end_time=as_utc(shift.end_datetime_utc),
        shift_type=shift.shift_type,
        requested_at=requested_at,
        approved_at=approved_at,
        approved_by_id=approved_by_id,
        actor_user_id=actor_user_id,
        notes=notes,
    )
    db.add(row)
    return row


def list_history_for_request(db: Session, swap_request_id: int) -> List[ShiftSwapHistory]:
    """Timeline of one swap request, oldest first."""
    return db.query(ShiftSwapHistory).filter(
        ShiftSwapHistory.swap_request_id == swap_request_id
    ).order_by(ShiftSwapHistory.id.asc()).all()


def list_history(
    db: Session,
    viewer_id: int,
    restaurant_id: Optional[int] = None,
    user_id: Optional[int] = None,
    status: Optional[SwapStatus] = None,
    change_type: Optional[SwapChangeType] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
) -> List[ShiftSwapHistory]:
    """
    History across swaps, newest first.
    Approvers see their restaurants; everyone else only rows they are party to.
    """
    query = db.query(ShiftSwapHistory)

    approvable = get_approvable_restaurant_ids(db, viewer_id)
    if approvable is not None:
        own = or_(ShiftSwapHistory.from_user_id == viewer_id, ShiftSwapHistory.to_user_id == viewer_id)
        if approvable:
            query = query.filter(or_(own, ShiftSwapHistory.restaurant_id.in_(approvable)))
        else:
            query = query.filter(own)

    if restaurant_id:
        query = query.filter(ShiftSwapHistory.restaurant_id == restaurant_id)
    if user_id:
        query = query.filter(or_(ShiftSwapHistory.from_user_id == user_id, ShiftSwapHistory.to_user_id == user_id))
    if status:
        query = query.filter(ShiftSwapHistory.status == status)
    if change_type:
        query = query.filter(ShiftSwapHistory.change_type == change_type)
    if start_date:
        query = query.filter(ShiftSwapHistory.shift_date >= as_utc(start_date))
    if end_date:
        query = query.filter(ShiftSwapHistory.shift_date <= as_utc(end_date))

    return query.order_by(ShiftSwapHistory.requested_at.desc(), ShiftSwapHistory.id.desc()).limit(HISTORY_LIMIT).all()
