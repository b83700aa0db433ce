# /markhub-backend/app/main.py

# --- Core FastAPI Imports ---
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from .core.config import settings
from .core.logging_config import configure_logging
from .db.base import Base
from .db.database import engine
from .models.submission_model import ACCA_PAPERS

# --- Application-specific Router Imports ---
from .routers import (
    student_router,
    marker_router,
    community_router,
    profile_router,
    files_router,
)


# --- Application Lifecycle Management ---
@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    # Alembic owns the schema in deployed environments; this covers fresh local databases.
    Base.metadata.create_all(bind=engine)
    yield


# --- FastAPI Application Instance Creation ---
app = FastAPI(
    title="MarkHub Backend API",
    description="Peer-review marketplace: students upload practice answers, markers claim and review them.",
    version="1.0.0",
    lifespan=lifespan
)

# --- Middleware Configuration ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- API Router Inclusion ---
app.include_router(profile_router.router, prefix="/api/profile", tags=["Profile"])
app.include_router(student_router.router, prefix="/api/student", tags=["Student"])
app.include_router(marker_router.router, prefix="/api/marker", tags=["Marker"])
app.include_router(community_router.router, prefix="/api/community", tags=["Community"])

# Signed download links carry their own credential and sit outside /api.
app.include_router(files_router.router, prefix="/files", tags=["Files"])


@app.get("/api/papers", tags=["Reference"])
async def list_papers():
    """The ACCA papers a submission can be filed under."""
    return [{"value": code, "label": label} for code, label in ACCA_PAPERS.items()]


# --- Root / Health Check Endpoint ---
@app.get("/", tags=["Health Check"])
async def read_root():
    """A simple health check endpoint to confirm the API is online."""
    return {"status": "MarkHub Backend is running!", "version": app.version}
