from pydantic import BaseModel
from datetime import datetime
from typing import Optional
from shiftswap.db.models.swap_requests import SwapStatus
from shiftswap.db.models.shift_swap_history import SwapChangeType


class ShiftSwapHistoryResponse(BaseModel):
    id: int
    swap_request_id: Optional[int]
    shift_id: int
    restaurant_id: int
    from_user_id: int
    to_user_id: int
    status: SwapStatus
    change_type: SwapChangeType
    shift_date: datetime
    shift_start_time: datetime
    shift_end_time: datetime
    shift_type: str
    requested_at: datetime
    approved_at: Optional[datetime]
    approved_by_id: Optional[int]
    actor_user_id: Optional[int]
    notes: Optional[str]
    recorded_at: datetime

    class Config:
        from_attributes = True
