from pydantic import BaseModel
from datetime import datetime
from typing import Optional
from shiftswap.db.models.swap_requests import SwapStatus


class SwapRequestCreate(BaseModel):
    shift_id: int
    to_user_id: int


class SwapRespond(BaseModel):
    accept: bool


class SwapApprove(BaseModel):
    approve: bool


class SwapRequestResponse(BaseModel):
    id: int
    shift_id: int
    from_user_id: int
    to_user_id: int
    status: SwapStatus
    requested_at: datetime
    expires_at: datetime
    responded_at: Optional[datetime]
    approved_at: Optional[datetime]
    approved_by_id: Optional[int]

    class Config:
        from_attributes = True
