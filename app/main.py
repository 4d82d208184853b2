# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# This is the main entry point for the Torah Trivia API.
# It configures the FastAPI application with middleware, routers, and handlers.
#
# Usage:
#   uvicorn app.main:app --reload
# =============================================================================

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import settings
from app.exceptions import (
    TriviaException,
    application_error_handler,
    trivia_exception_handler,
)
from app.routers import billing, head_to_head, health, profile, questions
from app.auth import routes as auth_routes
from lib.utils import ApplicationError

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Logs configuration on startup; nothing needs tearing down.
    """
    logger.info(f"Starting Torah Trivia API in {settings.ENVIRONMENT} mode")
    logger.info(f"CORS origins: {settings.cors_origins_list}")
    if not settings.stripe_configured:
        logger.warning("Stripe is not configured; billing endpoints will return 503")

    yield

    logger.info("Shutting down Torah Trivia API")


# Create FastAPI application
app = FastAPI(
    title="Torah Trivia API",
    description="""
## Torah Trivia API

AI-generated Torah trivia with points, tiers and a Pro subscription.

### Game Modes

| Mode | Who | How |
|------|-----|-----|
| **Solo** | Everyone | One generated question at a time; free plan limited per day |
| **Head-to-Head** | Pro | Two players, same questions, share a six-character code |

### Tiers

Beginner (0) → Student (100) → Scholar (300) → Chacham (700) → Gadol (1500)

### Quick Start

```bash
# 1. Get a question
curl "http://localhost:8000/api/v1/questions/next?category=Chumash" \\
  -H "Authorization: Bearer $TOKEN"

# 2. Answer it
curl -X POST http://localhost:8000/api/v1/questions/answer \\
  -H "Authorization: Bearer $TOKEN" \\
  -H "Content-Type: application/json" \\
  -d '{"question_id": "...", "selected_answer": "Avraham"}'
```
""",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    openapi_tags=[
        {
            "name": "Auth",
            "description": "Verify Supabase access tokens",
        },
        {
            "name": "Profile",
            "description": "Player profile, wrong answers and points history",
        },
        {
            "name": "Questions",
            "description": "Solo play: generated questions and scoring",
        },
        {
            "name": "Head-to-Head",
            "description": "Two-player games (Pro)",
        },
        {
            "name": "Billing",
            "description": "Stripe subscription checkout, sync and webhooks",
        },
        {
            "name": "Health",
            "description": "API health and readiness checks",
        },
    ],
)


# =============================================================================
# Middleware
# =============================================================================

# CORS middleware - allows cross-origin requests
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list if settings.is_production else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Exception Handlers
# =============================================================================

@app.exception_handler(TriviaException)
async def handle_trivia_exception(request: Request, exc: TriviaException):
    """Handle domain exceptions raised by the service layer."""
    return await trivia_exception_handler(request, exc)


@app.exception_handler(ApplicationError)
async def handle_application_error(request: Request, exc: ApplicationError):
    """Handle database and question-writer failures."""
    logger.error(f"Upstream error on {request.url.path}: {exc}")
    return await application_error_handler(request, exc)


@app.exception_handler(Exception)
async def handle_general_exception(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.exception(f"Unexpected error: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "detail": "An unexpected error occurred",
            "code": "INTERNAL_ERROR",
        }
    )


# =============================================================================
# Routers
# =============================================================================

# Authentication endpoints
app.include_router(
    auth_routes.router,
    prefix="/api/v1/auth",
    tags=["Auth"]
)

# Health check endpoints
app.include_router(
    health.router,
    prefix="/api/v1",
    tags=["Health"]
)

# Profile endpoints
app.include_router(
    profile.router,
    prefix="/api/v1/profile",
    tags=["Profile"]
)

# Solo play endpoints
app.include_router(
    questions.router,
    prefix="/api/v1/questions",
    tags=["Questions"]
)

# Head-to-head endpoints
app.include_router(
    head_to_head.router,
    prefix="/api/v1/head-to-head",
    tags=["Head-to-Head"]
)

# Billing endpoints
app.include_router(
    billing.router,
    prefix="/api/v1/billing",
    tags=["Billing"]
)


# =============================================================================
# Root Endpoint
# =============================================================================

@app.get("/", tags=["Root"])
async def root():
    """
    Root endpoint - returns API info.
    """
    return {
        "name": "Torah Trivia API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/api/v1/health",
    }
