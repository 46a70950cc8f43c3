"""
Persistence for swap requests.

Every status change goes through a compare-and-set: the expected status is
part of the UPDATE's WHERE clause, so of two racing writers only one sees a
matching row.
"""

import logging
from dataclasses import dataclass, fields
from datetime import datetime, timedelta
from typing import List, NamedTuple, Optional

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from shiftswap.db.models.swap_requests import SwapRequests, SwapStatus

from .errors import SwapError, SwapErrorCode
from .transitions import ACTIVE_STATUSES


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SwapRequestPatch:
    """Fields to change on a swap request. None means leave the column alone."""
    status: Optional[SwapStatus] = None
    responded_at: Optional[datetime] = None
    approved_at: Optional[datetime] = None
    approved_by_id: Optional[int] = None

    def values(self) -> dict:
        return {f.name: getattr(self, f.name) for f in fields(self) if getattr(self, f.name) is not None}


class ExpiredRow(NamedTuple):
    id: int
    shift_id: int
    from_user_id: int
    to_user_id: int
    requested_at: datetime


def get_swap_request(db: Session, request_id: int) -> Optional[SwapRequests]:
    return db.query(SwapRequests).filter(SwapRequests.id == request_id).first()


def find_active_for_shift(db: Session, shift_id: int) -> Optional[SwapRequests]:
    return db.query(SwapRequests).filter(
        SwapRequests.shift_id == shift_id,
        SwapRequests.status.in_(ACTIVE_STATUSES),
    ).first()


def insert_swap_request(
    db: Session,
    shift_id: int,
    from_user_id: int,
    to_user_id: int,
    requested_at: datetime,
    response_window: timedelta,
) -> SwapRequests:
    """
    Add a PENDING request and flush it. A concurrent creator that slipped past
    the active-request check trips the partial unique index instead.
    """
    swap = SwapRequests(
        shift_id=shift_id,
        from_user_id=from_user_id,
        to_user_id=to_user_id,
        status=SwapStatus.PENDING,
        requested_at=requested_at,
        expires_at=requested_at + response_window,
    )
    db.add(swap)
    try:
        db.flush()
    except IntegrityError:
        db.rollback()
        logger.warning("Concurrent swap request for shift %s lost the race", shift_id)
        raise SwapError(
            SwapErrorCode.SWAP_ALREADY_EXISTS,
            "An active swap request already exists for this shift",
        )
    return swap


def compare_and_set(db: Session, request_id: int, expected: SwapStatus, patch: SwapRequestPatch) -> bool:
    """Apply `patch` only if the row is still in `expected`. Returns False if another writer got there first."""
    values = patch.values()
    if not values:
        raise ValueError("Empty swap request patch")

    result = db.execute(
        update(SwapRequests)
        .where(SwapRequests.id == request_id, SwapRequests.status == expected)
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


def expire_overdue(db: Session, now: datetime, request_id: Optional[int] = None) -> List[ExpiredRow]:
    """
    Single conditional bulk UPDATE PENDING -> EXPIRED for rows past their deadline.
    Only rows this statement actually flipped are returned.
    """
    stmt = (
        update(SwapRequests)
        .where(
            SwapRequests.status == SwapStatus.PENDING,
            SwapRequests.expires_at < now,
        )
        .values(status=SwapStatus.EXPIRED)
        .returning(
            SwapRequests.id,
            SwapRequests.shift_id,
            SwapRequests.from_user_id,
            SwapRequests.to_user_id,
            SwapRequests.requested_at,
        )
        .execution_options(synchronize_session=False)
    )
    if request_id is not None:
        stmt = stmt.where(SwapRequests.id == request_id)

    return [ExpiredRow(*row) for row in db.execute(stmt).all()]
