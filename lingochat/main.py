"""
LingoChat Backend - FastAPI Application Entry Point
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from lingochat.routers import chat
from lingochat.services.config_manager import ConfigManager

logger = logging.getLogger("lingochat")


def setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager - startup and shutdown logic"""
    # Tests may install a config before startup
    if getattr(app.state, "config", None) is None:
        app.state.config = ConfigManager.get_instance().get_config()
    setup_logging(app.state.config.log_level)
    logger.info("[Backend] Starting LingoChat Backend (model: %s)", app.state.config.gemini.model)

    yield
    logger.info("[Backend] Shutting down LingoChat Backend...")


app = FastAPI(
    title="LingoChat Backend",
    description="Translated streaming chat backend",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(chat.router, prefix="/api", tags=["chat"])


@app.exception_handler(RequestValidationError)
async def invalid_request_handler(request: Request, exc: RequestValidationError):
    """Reject malformed bodies before any stream is opened"""
    logger.warning("[Backend] Rejected request to %s: %s", request.url.path, exc.errors())
    return JSONResponse(status_code=400, content={"detail": "Invalid request body"})


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "service": "lingochat-backend"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
