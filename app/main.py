# /app/main.py

# --- Core FastAPI Imports ---
import os
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from dotenv import load_dotenv

# --- Application-specific Router Imports ---
from .routers import (
    dashboard_router,
    students_router,
    alerts_router,
    predictions_router,
    settings_router,
)

# --- Imports for Startup Logic ---
from .db.base import Base
from .db.database import engine, SessionLocal
from .services import sample_data
from .services.storage_service import StorageService, USE_DATABASE

load_dotenv()

SEED_SAMPLE_DATA = os.getenv("SEED_SAMPLE_DATA", "true").lower() == "true"


def _seed_store():
    session = SessionLocal() if USE_DATABASE else None
    try:
        sample_data.seed_sample_data(StorageService(db_session=session))
    except Exception as e:
        print(f"ERROR seeding sample data: {e}")
    finally:
        if session is not None:
            session.close()


# --- Application Lifecycle Management ---
@asynccontextmanager
async def lifespan(app: FastAPI):
    # This code runs ONCE when the application starts up.
    if USE_DATABASE:
        Base.metadata.create_all(bind=engine)
    if SEED_SAMPLE_DATA:
        _seed_store()
    yield
    # This code runs ONCE when the application shuts down.

# --- FastAPI Application Instance Creation ---
app = FastAPI(
    title="Student Risk Monitor API",
    description="Tracks student attendance, grades and behavior, predicts academic risk and raises alerts.",
    version="1.0.0",
    lifespan=lifespan
)

# --- Middleware Configuration ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- API Router Inclusion ---
app.include_router(dashboard_router.router, prefix="/api/dashboard", tags=["Dashboard"])
app.include_router(students_router.router, prefix="/api/students", tags=["Students"])
app.include_router(alerts_router.router, prefix="/api/alerts", tags=["Alerts"])
app.include_router(predictions_router.router, prefix="/api/predictions", tags=["Predictions"])
app.include_router(settings_router.router, prefix="/api/settings", tags=["Settings"])

# --- Root / Health Check Endpoint ---
@app.get("/", tags=["Health Check"])
async def read_root():
    """A simple health check endpoint to confirm the API is online."""
    return {"status": "Student Risk Monitor is running!", "version": app.version}
