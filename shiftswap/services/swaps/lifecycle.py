"""
Swap lifecycle - the three actor-facing operations.

Flow for each call:
1. Load the request/shift and authorise the actor
2. Check the transition against the state machine
3. Compare-and-set the status (a lost race surfaces as INVALID_STATUS_TRANSITION)
4. Append a history row in the same transaction, commit
5. Tell the notifier, after commit, without letting it fail the call
"""

import logging
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from shiftswap.core.config import settings
from shiftswap.core.timeutils import as_utc, utcnow
from shiftswap.db.models.shift_swap_history import SwapChangeType
from shiftswap.db.models.shifts import Shifts
from shiftswap.db.models.swap_requests import SwapRequests, SwapStatus
from shiftswap.services.notifications import NotificationEvent, SwapNotification, get_notifier

from .access import Capability, can_act, get_shift, get_user, is_active_member, reassign_shift_owner
from .errors import SwapError, SwapErrorCode
from .expiration import record_expiry
from .history import record_history
from .store import (
    SwapRequestPatch,
    compare_and_set,
    expire_overdue,
    find_active_for_shift,
    get_swap_request,
    insert_swap_request,
)
from .transitions import ensure_transition


logger = logging.getLogger(__name__)


def response_window() -> timedelta:
    return timedelta(hours=settings.SWAP_RESPONSE_WINDOW_HOURS)


def create_swap_request(
    db: Session,
    shift_id: int,
    from_user_id: int,
    to_user_id: int,
    now: Optional[datetime] = None,
) -> SwapRequests:
    """
    Offer `shift_id` to `to_user_id`. Checks run in a fixed order and the
    first failure wins.
    """
    now = as_utc(now) or utcnow()

    shift = get_shift(db, shift_id)
    if not shift:
        raise SwapError(SwapErrorCode.SHIFT_NOT_FOUND, "Shift not found")

    if shift.user_id != from_user_id:
        raise SwapError(SwapErrorCode.NOT_AUTHORIZED, "You can only request a swap for your own shifts")

    if not can_act(db, from_user_id, shift.restaurant_id, Capability.REQUEST_SHIFT_SWAP):
        raise SwapError(SwapErrorCode.NOT_AUTHORIZED, "Not allowed to request shift swaps in this restaurant")

    if shift.start_datetime_utc <= now:
        raise SwapError(SwapErrorCode.SHIFT_IN_PAST, "Cannot swap a shift that has already started")

    if find_active_for_shift(db, shift_id):
        raise SwapError(SwapErrorCode.SWAP_ALREADY_EXISTS, "An active swap request already exists for this shift")

    if not get_user(db, to_user_id):
        raise SwapError(SwapErrorCode.USER_NOT_FOUND, "User not found")

    if not is_active_member(db, to_user_id, shift.restaurant_id):
        raise SwapError(SwapErrorCode.USER_NOT_IN_RESTAURANT, "User is not an active member of this restaurant")

    if to_user_id == from_user_id:
        raise SwapError(SwapErrorCode.CANNOT_SWAP_WITH_SELF, "Cannot swap a shift with yourself")

    swap = insert_swap_request(db, shift.id, from_user_id, to_user_id, now, response_window())
    record_history(
        db, shift,
        swap_request_id=swap.id,
        from_user_id=from_user_id,
        to_user_id=to_user_id,
        status=SwapStatus.PENDING,
        change_type=SwapChangeType.SWAP_REQUESTED,
        requested_at=now,
        actor_user_id=from_user_id,
        notes="Swap requested",
    )
    db.commit()
    db.refresh(swap)

    logger.info(
        "Swap request %s created for shift %s: %s -> %s",
        swap.id, shift.id, from_user_id, to_user_id,
    )
    _notify(NotificationEvent.SHIFT_SWAP_REQUEST, _notice(swap, shift, [to_user_id], from_user_id))
    return swap


def respond_to_swap(
    db: Session,
    request_id: int,
    by_user_id: int,
    accept: bool,
    now: Optional[datetime] = None,
) -> SwapRequests:
    """Target employee accepts or rejects. Rejection is final."""
    now = as_utc(now) or utcnow()
    target = SwapStatus.ACCEPTED if accept else SwapStatus.REJECTED

    swap = get_swap_request(db, request_id)
    if not swap:
        raise SwapError(SwapErrorCode.SWAP_NOT_FOUND, "Swap request not found")

    # status first: a settled request answers the same way whoever asks
    if swap.status != SwapStatus.PENDING:
        raise _invalid_status(swap.status, target)

    if swap.to_user_id != by_user_id:
        raise SwapError(SwapErrorCode.NOT_AUTHORIZED, "This swap request is not addressed to you")

    ensure_transition(swap.status, target)

    shift = get_shift(db, swap.shift_id)
    if not shift:
        raise SwapError(SwapErrorCode.SHIFT_NOT_FOUND, "Shift not found")

    # past the deadline but not swept yet: expire it here instead of accepting
    if swap.expires_at < now:
        if expire_overdue(db, now, request_id=swap.id):
            record_expiry(db, shift, swap.id, swap.from_user_id, swap.to_user_id, swap.requested_at)
            db.commit()
            logger.info("Swap request %s expired on late response", swap.id)
        else:
            db.rollback()
        raise SwapError(
            SwapErrorCode.INVALID_STATUS_TRANSITION,
            f"Cannot respond to a request with status {SwapStatus.EXPIRED.value}: the response window has closed",
        )

    patch = SwapRequestPatch(status=target, responded_at=now)
    if not compare_and_set(db, swap.id, SwapStatus.PENDING, patch):
        db.rollback()
        raise _lost_race(db, swap.id, target)

    record_history(
        db, shift,
        swap_request_id=swap.id,
        from_user_id=swap.from_user_id,
        to_user_id=swap.to_user_id,
        status=target,
        change_type=SwapChangeType.ACCEPTED_BY_EMPLOYEE if accept else SwapChangeType.REJECTED_BY_EMPLOYEE,
        requested_at=swap.requested_at,
        actor_user_id=by_user_id,
        notes="Accepted by employee" if accept else "Rejected by employee",
    )
    db.commit()
    db.refresh(swap)

    logger.info("Swap request %s %s by user %s", swap.id, target.value, by_user_id)
    event = NotificationEvent.SHIFT_SWAP_ACCEPTED if accept else NotificationEvent.SHIFT_SWAP_REJECTED
    _notify(event, _notice(swap, shift, [swap.from_user_id], by_user_id))
    return swap


def approve_swap(
    db: Session,
    request_id: int,
    by_user_id: int,
    approve: bool,
    now: Optional[datetime] = None,
) -> SwapRequests:
    """
    Manager decision on an ACCEPTED request. Approval reassigns the shift in
    the same transaction as the status change; if the reassignment fails
    nothing is committed.
    """
    now = as_utc(now) or utcnow()
    target = SwapStatus.APPROVED if approve else SwapStatus.MANAGER_REJECTED

    swap = get_swap_request(db, request_id)
    if not swap:
        raise SwapError(SwapErrorCode.SWAP_NOT_FOUND, "Swap request not found")

    shift = get_shift(db, swap.shift_id)
    if not shift:
        raise SwapError(SwapErrorCode.SHIFT_NOT_FOUND, "Shift not found")

    if not can_act(db, by_user_id, shift.restaurant_id, Capability.APPROVE_SHIFT_SWAP):
        raise SwapError(SwapErrorCode.NOT_AUTHORIZED, "Not allowed to approve shift swaps in this restaurant")

    if swap.status != SwapStatus.ACCEPTED:
        raise SwapError(
            SwapErrorCode.INVALID_STATUS_TRANSITION,
            f"Cannot decide on a request with status {swap.status.value}. Status ACCEPTED is required.",
        )

    ensure_transition(swap.status, target)

    original_owner_id = shift.user_id
    patch = SwapRequestPatch(status=target, approved_at=now, approved_by_id=by_user_id)
    if not compare_and_set(db, swap.id, SwapStatus.ACCEPTED, patch):
        db.rollback()
        raise _lost_race(db, swap.id, target)

    if approve:
        try:
            reassign_shift_owner(db, shift.id, swap.to_user_id)
        except Exception as e:
            db.rollback()
            logger.error("Failed to execute swap %s: %s", swap.id, e)
            raise SwapError(SwapErrorCode.SWAP_EXECUTION_FAILED, "Failed to reassign the shift, nothing was changed")

    record_history(
        db, shift,
        swap_request_id=swap.id,
        from_user_id=original_owner_id if approve else swap.from_user_id,
        to_user_id=swap.to_user_id,
        status=target,
        change_type=SwapChangeType.SWAP_APPROVED if approve else SwapChangeType.SWAP_REJECTED,
        requested_at=swap.requested_at,
        actor_user_id=by_user_id,
        approved_at=now,
        approved_by_id=by_user_id,
        notes="Swap approved by manager" if approve else "Swap rejected by manager",
    )
    db.commit()
    db.refresh(swap)

    if approve:
        logger.info(
            "Swap request %s approved by %s, shift %s transferred from %s to %s",
            swap.id, by_user_id, shift.id, original_owner_id, swap.to_user_id,
        )
    else:
        logger.info("Swap request %s rejected by manager %s", swap.id, by_user_id)

    event = NotificationEvent.SHIFT_SWAP_APPROVED if approve else NotificationEvent.SHIFT_SWAP_DECLINED
    _notify(event, _notice(swap, shift, [swap.from_user_id, swap.to_user_id], by_user_id))
    return swap


def _invalid_status(current: SwapStatus, target: SwapStatus) -> SwapError:
    return SwapError(
        SwapErrorCode.INVALID_STATUS_TRANSITION,
        f"Cannot move a request with status {SwapStatus(current).value} to {target.value}",
    )


def _lost_race(db: Session, request_id: int, target: SwapStatus) -> SwapError:
    """Another writer changed the status between our read and our write."""
    current = get_swap_request(db, request_id)
    logger.warning("Swap request %s changed concurrently, now %s", request_id, current.status.value)
    return _invalid_status(current.status, target)


def _notice(swap: SwapRequests, shift: Shifts, recipients, actor_user_id: int) -> SwapNotification:
    return SwapNotification(
        recipient_user_ids=list(recipients),
        swap_request_id=swap.id,
        shift_id=shift.id,
        status=swap.status.value,
        actor_user_id=actor_user_id,
        extra={"shift_date": shift.start_datetime_utc.date().isoformat()},
    )


def _notify(event: NotificationEvent, payload: SwapNotification) -> None:
    # fire-and-forget: a broken notifier never fails a committed swap
    try:
        get_notifier().notify(event, payload)
    except Exception as e:
        logger.error("Error sending %s notification for swap %s: %s", event.value, payload.swap_request_id, e)
