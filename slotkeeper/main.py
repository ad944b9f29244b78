import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slotkeeper.api.v1.router import api_router
from slotkeeper.core.config import settings
from slotkeeper.core.database import async_session
from slotkeeper.core.exceptions import ReservationError
from slotkeeper.services.hold_sweeper import HoldSweeper

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    sweeper = None
    if settings.HOLD_SWEEP_ENABLED:
        sweeper = HoldSweeper(async_session, interval_seconds=settings.HOLD_SWEEP_INTERVAL_SECONDS)
        sweeper.start()
    yield
    if sweeper:
        sweeper.stop()


app = FastAPI(
    title="Slotkeeper API",
    description="Slot holds, capacity and booking confirmation",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ReservationError)
async def reservation_error_handler(request: Request, exc: ReservationError):
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, **exc.extra},
    )


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    """Malformed input is a client error like any other validation failure."""
    errors = [
        {"loc": list(err.get("loc", [])), "msg": err.get("msg")}
        for err in exc.errors()
    ]
    return JSONResponse(status_code=400, content={"detail": "Invalid request", "errors": errors})


app.include_router(api_router, prefix="/api/v1")


@app.get("/health")
async def health():
    return {"status": "ok", "service": "slotkeeper-api", "version": "0.1.0"}
