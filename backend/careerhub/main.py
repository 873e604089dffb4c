"""
CareerHub Admin API - Main Application Entry Point

This module initializes the FastAPI application with:
- Logging and database schema initialization
- CORS middleware for the dashboard frontend
- Prometheus metrics
- Static serving of uploaded files
- API router registration

Architecture:
    FastAPI App
    ├── Lifespan Management (startup)
    ├── CORS Middleware
    ├── Prometheus Middleware (/metrics)
    ├── /files - Object storage downloads
    └── API Router
        ├── /auth - Login, logout, current principal
        ├── /jobs - Job CRUD, search, application tracking
        ├── /counselors - Counselor CRUD, schedules, bookings, ratings
        ├── /communities - Communities, membership, messages
        ├── /search - Combined dashboard search
        └── /stats - Dashboard statistics
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from careerhub.api import api_router
from careerhub.config import get_settings
from careerhub.database import init_db
from careerhub.middleware import setup_metrics

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup:
        1. Configure logging
        2. Create database tables
    """
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    await init_db()
    logging.getLogger(__name__).info("CareerHub API started")
    yield


app = FastAPI(
    title="CareerHub Admin API",
    description="Admin dashboard API for jobs, counselors and communities",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

setup_metrics(app)

app.mount("/files", StaticFiles(directory=settings.storage_dir, check_dir=False), name="files")

app.include_router(api_router)


@app.get("/health")
async def health_check():
    return {"status": "healthy"}
