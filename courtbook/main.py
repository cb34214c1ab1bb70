"""
FastAPI app entrypoint.

Court booking: time windows, per-court capacity allocation, availability, expired-window sweeper.
"""
import logging
import threading
from contextlib import asynccontextmanager
from pathlib import Path

from apscheduler.schedulers.background import BackgroundScheduler
from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Load .env from the project root before any app code
load_dotenv(Path(__file__).resolve().parent.parent / ".env")

from courtbook.api.routes import reservations, windows
from courtbook.config import settings
from courtbook.db.session import SessionLocal
from courtbook.scheduler.window_cleanup_job import run_window_cleanup_job, schedule_window_cleanup

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Sweeper belongs to the process lifecycle: one pass now, then on the configured interval
    scheduler = BackgroundScheduler()

    def startup_sweep():
        result = run_window_cleanup_job(SessionLocal)
        if result is not None:
            logger.info(
                "Startup sweep removed %s windows; next sweep in %ss", result.windows, settings.sweep_interval_seconds
            )

    threading.Thread(target=startup_sweep, daemon=True).start()
    schedule_window_cleanup(scheduler, SessionLocal, settings.sweep_interval_seconds)
    scheduler.start()
    app.state.scheduler = scheduler
    logger.info("Court booking backend ready")
    yield
    scheduler.shutdown(wait=False)


app = FastAPI(title="Court Booking", version="0.1.0", lifespan=lifespan)

# CORS: dev origins + optional CORS_ORIGINS (comma-separated) for the deployed frontend
_cors_origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]
if settings.cors_origins:
    _cors_origins.extend(o.strip() for o in settings.cors_origins.split(",") if o.strip())
app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(windows.router, prefix="/windows", tags=["windows"])
app.include_router(reservations.router, prefix="/reservations", tags=["reservations"])


@app.get("/", include_in_schema=False)
def root():
    """Root: point to API docs and health."""
    return {"message": "Court Booking API", "docs": "/docs", "health": "/health"}


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
