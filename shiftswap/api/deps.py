from typing import Generator
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from shiftswap.db.database import SessionLocal
from shiftswap.core.security import decode_access_token
from shiftswap.db.models.users import Users
from shiftswap.services.swaps import SwapError, SwapErrorCode

security = HTTPBearer()


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
) -> Users:
    token_data = decode_access_token(credentials.credentials)
    if token_data is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")

    user = db.query(Users).filter(Users.id == token_data.user_id).first()
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")

    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account disabled")

    return user


SWAP_ERROR_STATUS = {
    SwapErrorCode.SHIFT_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    SwapErrorCode.SWAP_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    SwapErrorCode.USER_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    SwapErrorCode.NOT_AUTHORIZED: status.HTTP_403_FORBIDDEN,
    SwapErrorCode.SWAP_EXECUTION_FAILED: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def swap_error_to_http(error: SwapError) -> HTTPException:
    """Map an engine error onto a response; anything unlisted is a 400."""
    return HTTPException(
        status_code=SWAP_ERROR_STATUS.get(error.code, status.HTTP_400_BAD_REQUEST),
        detail={"error": error.code.value, "message": error.message},
    )
