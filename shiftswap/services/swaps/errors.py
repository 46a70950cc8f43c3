from enum import Enum


class SwapErrorCode(str, Enum):
    SHIFT_NOT_FOUND = "SHIFT_NOT_FOUND"
    USER_NOT_FOUND = "USER_NOT_FOUND"
    USER_NOT_IN_RESTAURANT = "USER_NOT_IN_RESTAURANT"
    NOT_AUTHORIZED = "NOT_AUTHORIZED"
    SHIFT_IN_PAST = "SHIFT_IN_PAST"
    SWAP_ALREADY_EXISTS = "SWAP_ALREADY_EXISTS"
    CANNOT_SWAP_WITH_SELF = "CANNOT_SWAP_WITH_SELF"
    SWAP_NOT_FOUND = "SWAP_NOT_FOUND"
    INVALID_STATUS_TRANSITION = "INVALID_STATUS_TRANSITION"
    SWAP_EXECUTION_FAILED = "SWAP_EXECUTION_FAILED"


class SwapError(Exception):
    """A swap operation was refused. `code` tells the caller why."""

    def __init__(self, code: SwapErrorCode, message: str):
        super().__init__(message)
        self.code = code
        self.message = message

    def __repr__(self) -> str:
        return f"SwapError({self.code.value}: {self.message})"


class ShiftReassignmentError(Exception):
    pass
