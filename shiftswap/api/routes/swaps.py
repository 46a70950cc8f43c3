from datetime import datetime
from typing import List, Optional
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from shiftswap.api.deps import get_db, get_current_user, swap_error_to_http
from shiftswap.db.models.users import Users
from shiftswap.db.models.swap_requests import SwapStatus
from shiftswap.schemas.swap_requests import SwapRequestCreate, SwapRespond, SwapApprove, SwapRequestResponse
from shiftswap.schemas.swap_history import ShiftSwapHistoryResponse
from shiftswap.services.swaps import (
    SwapError,
    approve_swap,
    create_swap_request,
    get_swap_request_for_viewer,
    list_history_for_request,
    list_incoming,
    list_outgoing,
    list_pending_manager_approval,
    list_swap_requests,
    respond_to_swap,
)

router = APIRouter(prefix="/swaps", tags=["swaps"])


@router.post("", response_model=SwapRequestResponse, status_code=status.HTTP_201_CREATED)
def create_swap(
    payload: SwapRequestCreate,
    db: Session = Depends(get_db),
    current_user: Users = Depends(get_current_user),
):
    """Offer one of your own shifts to a colleague"""
    try:
        return create_swap_request(db, payload.shift_id, current_user.id, payload.to_user_id)
    except SwapError as e:
        raise swap_error_to_http(e)


@router.get("", response_model=List[SwapRequestResponse])
def list_swaps(
    swap_status: Optional[SwapStatus] = None,
    from_user_id: Optional[int] = None,
    to_user_id: Optional[int] = None,
    restaurant_id: Optional[int] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    include_expired: bool = False,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    current_user: Users = Depends(get_current_user),
):
    """List swaps visible to the caller - own requests plus restaurants they approve for"""
    return list_swap_requests(
        db,
        viewer_id=current_user.id,
        status=swap_status,
        from_user_id=from_user_id,
        to_user_id=to_user_id,
        restaurant_id=restaurant_id,
        start_date=start_date,
        end_date=end_date,
        include_expired=include_expired,
        skip=skip,
        limit=limit,
    )


@router.get("/incoming", response_model=List[SwapRequestResponse])
def incoming_swaps(
    restaurant_id: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user: Users = Depends(get_current_user),
):
    return list_incoming(db, current_user.id, restaurant_id)


@router.get("/outgoing", response_model=List[SwapRequestResponse])
def outgoing_swaps(
    restaurant_id: Optional[int] = None,
    swap_status: Optional[SwapStatus] = None,
    db: Session = Depends(get_db),
    current_user: Users = Depends(get_current_user),
):
    return list_outgoing(db, current_user.id, restaurant_id, swap_status)


@router.get("/pending-approval", response_model=List[SwapRequestResponse])
def pending_approval_swaps(
    restaurant_id: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user: Users = Depends(get_current_user),
):
    """Accepted swaps waiting on a manager decision"""
    return list_pending_manager_approval(db, current_user.id, restaurant_id)


@router.get("/{request_id}", response_model=SwapRequestResponse)
def get_swap(
    request_id: int,
    db: Session = Depends(get_db),
    current_user: Users = Depends(get_current_user),
):
    try:
        return get_swap_request_for_viewer(db, request_id, current_user.id)
    except SwapError as e:
        raise swap_error_to_http(e)


@router.get("/{request_id}/history", response_model=List[ShiftSwapHistoryResponse])
def get_swap_history(
    request_id: int,
    db: Session = Depends(get_db),
    current_user: Users = Depends(get_current_user),
):
    try:
        get_swap_request_for_viewer(db, request_id, current_user.id)
    except SwapError as e:
        raise swap_error_to_http(e)
    return list_history_for_request(db, request_id)


@router.post("/{request_id}/respond", response_model=SwapRequestResponse)
def respond_swap(
    request_id: int,
    payload: SwapRespond,
    db: Session = Depends(get_db),
    current_user: Users = Depends(get_current_user),
):
    """Target employee accepts or rejects"""
    try:
        return respond_to_swap(db, request_id, current_user.id, payload.accept)
    except SwapError as e:
        raise swap_error_to_http(e)


@router.post("/{request_id}/approve", response_model=SwapRequestResponse)
def approve_swap_request(
    request_id: int,
    payload: SwapApprove,
    db: Session = Depends(get_db),
    current_user: Users = Depends(get_current_user),
):
    """Manager approves (reassigning the shift) or rejects an accepted swap"""
    try:
        return approve_swap(db, request_id, current_user.id, payload.approve)
    except SwapError as e:
        raise swap_error_to_http(e)
