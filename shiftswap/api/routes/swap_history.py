from datetime import datetime
from typing import List, Optional
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shiftswap.api.deps import get_db, get_current_user
from shiftswap.db.models.users import Users
from shiftswap.db.models.swap_requests import SwapStatus
from shiftswap.db.models.shift_swap_history import SwapChangeType
from shiftswap.schemas.swap_history import ShiftSwapHistoryResponse
from shiftswap.services.swaps import list_history

router = APIRouter(prefix="/swap-history", tags=["swap-history"])


@router.get("", response_model=List[ShiftSwapHistoryResponse])
def list_swap_history(
    restaurant_id: Optional[int] = None,
    user_id: Optional[int] = None,
    swap_status: Optional[SwapStatus] = None,
    change_type: Optional[SwapChangeType] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    db: Session = Depends(get_db),
    current_user: Users = Depends(get_current_user),
):
    """Swap history, latest 100 rows - managers see their restaurants, employees only their own swaps"""
    return list_history(
        db,
        viewer_id=current_user.id,
        restaurant_id=restaurant_id,
        user_id=user_id,
        status=swap_status,
        change_type=change_type,
        start_date=start_date,
        end_date=end_date,
    )
