"""FastAPI application entry point."""

import logging
import os
import time
from collections import defaultdict

import structlog
import uvicorn
from fastapi import FastAPI, WebSocket
from fastapi.middleware.cors import CORSMiddleware

from times_trainer.api.routes import router
from times_trainer.api.websocket import handle_browser_websocket
from times_trainer.config import get_settings

# Simple in-memory rate limiter for WebSocket connections
_ws_connection_times: dict[str, list[float]] = defaultdict(list)
_WS_RATE_LIMIT = 10  # max WS connections per IP per window
_WS_RATE_WINDOW = 60  # seconds

is_production = os.getenv("ENV", "development").lower() == "production"

if is_production:
    # Production: JSON format for machine parsing
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(logging.INFO),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
else:
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(logging.DEBUG),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

settings = get_settings()

app = FastAPI(title="Times Trainer", version="0.1.0")
_allowed_origins_env = os.getenv(
    "ALLOWED_ORIGINS", "http://localhost:8000,http://127.0.0.1:8000"
)
allowed_origins = [o.strip() for o in _allowed_origins_env.split(",")]
app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(router)


def _rate_limited(client_ip: str, now: float) -> bool:
    times = _ws_connection_times[client_ip]
    times[:] = [t for t in times if now - t < _WS_RATE_WINDOW]
    if len(times) >= _WS_RATE_LIMIT:
        return True
    times.append(now)
    return False


@app.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket) -> None:
    """Drill WebSocket endpoint with per-IP rate limiting."""
    client_ip = websocket.client.host if websocket.client else "unknown"
    if _rate_limited(client_ip, time.time()):
        await websocket.close(code=1008, reason="Rate limit exceeded")
        return
    await handle_browser_websocket(websocket, settings)


def main() -> None:
    """Run the application."""
    uvicorn.run(
        "times_trainer.main:app",
        host=settings.host,
        port=settings.port,
        reload=False,
        log_level="info",
    )


if __name__ == "__main__":
    main()
