"""
FastAPI app entrypoint.

The swap core (NegotiationEngine) is built once in the lifespan around the shared session factory and
the engine's connection pool is disposed at shutdown.
"""
import logging
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

# Load .env from backend/ before any app code
load_dotenv(Path(__file__).resolve().parent.parent / ".env")

from slotswap.api.routes import slots, swap
from slotswap.config import settings
from slotswap.core.errors import SwapError, swap_error_to_http
from slotswap.db import session as db_session
from slotswap.services.negotiation import NegotiationEngine

logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.negotiation_engine = NegotiationEngine(db_session.SessionLocal)
    logger.info("SlotSwap backend ready (database=%s)", db_session.engine.url.render_as_string(hide_password=True))
    yield
    db_session.engine.dispose()
    logger.info("Database engine disposed")


app = FastAPI(title="SlotSwap", version="0.1.0", lifespan=lifespan)

# CORS: dev origins + optional CORS_ORIGINS env (comma-separated) for the production frontend
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


@app.exception_handler(SwapError)
async def handle_swap_error(request: Request, exc: SwapError):
    http_exc = swap_error_to_http(exc)
    return JSONResponse(status_code=http_exc.status_code, content=http_exc.detail)


app.include_router(slots.router, prefix="/api/events", tags=["slots"])
app.include_router(swap.router, prefix="/api/swap", tags=["swap"])


@app.get("/", include_in_schema=False)
def root():
    """Root: point to API docs and health."""
    return {"message": "SlotSwap API", "docs": "/docs", "health": "/health"}


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
