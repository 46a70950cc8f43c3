"""
Swap request state machine.
Pure lookups, no I/O: callers decide what to do with a refused transition.
"""

from typing import Dict, FrozenSet

from shiftswap.db.models.swap_requests import SwapStatus

from .errors import SwapError, SwapErrorCode


VALID_TRANSITIONS: Dict[SwapStatus, FrozenSet[SwapStatus]] = {
    SwapStatus.PENDING: frozenset({SwapStatus.ACCEPTED, SwapStatus.REJECTED, SwapStatus.EXPIRED}),
    SwapStatus.ACCEPTED: frozenset({SwapStatus.APPROVED, SwapStatus.MANAGER_REJECTED}),
    SwapStatus.REJECTED: frozenset(),
    SwapStatus.APPROVED: frozenset(),
    SwapStatus.MANAGER_REJECTED: frozenset(),
    SwapStatus.EXPIRED: frozenset(),
}

ACTIVE_STATUSES: FrozenSet[SwapStatus] = frozenset({SwapStatus.PENDING, SwapStatus.ACCEPTED})
TERMINAL_STATUSES: FrozenSet[SwapStatus] = frozenset(s for s, targets in VALID_TRANSITIONS.items() if not targets)


def is_valid_transition(current: SwapStatus, target: SwapStatus) -> bool:
    return target in VALID_TRANSITIONS.get(SwapStatus(current), frozenset())


def is_terminal(status: SwapStatus) -> bool:
    return SwapStatus(status) in TERMINAL_STATUSES


def ensure_transition(current: SwapStatus, target: SwapStatus) -> None:
    if not is_valid_transition(current, target):
        raise SwapError(
            SwapErrorCode.INVALID_STATUS_TRANSITION,
            f"Invalid status transition: {SwapStatus(current).value} -> {SwapStatus(target).value}",
        )
