"""
Shift swap lifecycle package.

Usage:
    from shiftswap.services.swaps import create_swap_request, respond_to_swap, approve_swap

    swap = create_swap_request(db, shift_id=12, from_user_id=3, to_user_id=4)
    swap = respond_to_swap(db, swap.id, by_user_id=4, accept=True)
    swap = approve_swap(db, swap.id, by_user_id=2, approve=True)

    # background expiry
    from shiftswap.services.swaps import SwapExpirationScheduler

    scheduler = SwapExpirationScheduler()
    scheduler.start()
    ...
    scheduler.stop()
"""

from .errors import SwapError, SwapErrorCode
from .transitions import (
    ACTIVE_STATUSES,
    TERMINAL_STATUSES,
    is_terminal,
    is_valid_transition,
)
from .store import SwapRequestPatch
from .lifecycle import create_swap_request, respond_to_swap, approve_swap
from .expiration import expire_swap_requests, SwapExpirationScheduler
from .history import list_history, list_history_for_request
from .queries import (
    get_swap_request_for_viewer,
    list_swap_requests,
    list_incoming,
    list_outgoing,
    list_pending_manager_approval,
)

__all__ = [
    # Errors
    "SwapError",
    "SwapErrorCode",
    # State machine
    "ACTIVE_STATUSES",
    "TERMINAL_STATUSES",
    "is_terminal",
    "is_valid_transition",
    "SwapRequestPatch",
    # Operations
    "create_swap_request",
    "respond_to_swap",
    "approve_swap",
    "expire_swap_requests",
    "SwapExpirationScheduler",
    # Reads
    "list_history",
    "list_history_for_request",
    "get_swap_request_for_viewer",
    "list_swap_requests",
    "list_incoming",
    "list_outgoing",
    "list_pending_manager_approval",
]
