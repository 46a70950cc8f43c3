import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from shiftswap.core.config import settings
from shiftswap.db.database import init_db
from shiftswap.api.routes import swaps, swap_history
from shiftswap.services.swaps import SwapExpirationScheduler

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    scheduler = None
    if settings.SWAP_SWEEPER_ENABLED:
        scheduler = SwapExpirationScheduler()
        scheduler.start()
    else:
        logger.info("Swap expiration scheduler disabled")
    try:
        yield
    finally:
        if scheduler:
            scheduler.stop()


app = FastAPI(title="ShiftSwap API", version="0.1.0", lifespan=lifespan)

app.include_router(swaps.router, prefix="/api/v1")
app.include_router(swap_history.router, prefix="/api/v1")


@app.get("/health")
def health_check():
    return {"status": "ok"}
