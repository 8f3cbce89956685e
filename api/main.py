"""Persona Studio FastAPI Application"""

import logging
import os
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import uvicorn
from dotenv import load_dotenv
load_dotenv()  # Load .env file

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from .routes import chat, health, profiles, render

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

DEFAULT_CORS_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:5173",
    "http://127.0.0.1:5173",
]


class ProxyHeadersMiddleware(BaseHTTPMiddleware):
    """Middleware to handle X-Forwarded-Proto for HTTPS redirects behind a reverse proxy."""

    async def dispatch(self, request: Request, call_next):
        if request.headers.get("x-forwarded-proto") == "https":
            request.scope["scheme"] = "https"
        return await call_next(request)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """Application lifespan handler."""
    logger.info("Starting Persona Studio API...")
    yield
    logger.info("Shutting down Persona Studio API...")


app = FastAPI(
    title="Persona Studio",
    description="Character chat and multi-angle render proxy API",
    version="0.1.0",
    lifespan=lifespan,
)

# Proxy headers middleware (must be added first)
app.add_middleware(ProxyHeadersMiddleware)

# CORS middleware for the browser client
cors_origins = os.getenv("CORS_ORIGINS")
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins.split(",") if cors_origins else DEFAULT_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)

# Include routers
app.include_router(health.router, tags=["Health"])
app.include_router(render.router, prefix="/api/qwen", tags=["Render"])
app.include_router(chat.router, prefix="/api/chat", tags=["Chat"])
app.include_router(profiles.router, prefix="/api/profiles", tags=["Profiles"])


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": "Persona Studio",
        "version": "0.1.0",
        "status": "running",
        "docs": "/docs",
    }


def run() -> None:
    """Serve the API with uvicorn."""
    uvicorn.run(
        "api.main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
    )


if __name__ == "__main__":
    run()
