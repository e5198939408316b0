"""FastAPI application entry point."""
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from classbook.config import settings
from classbook.database import Base, engine

# Import routers
from classbook.routers import users, classrooms, bookings, availability
from classbook.routers import settings as settings_router

# Import all models so Base.metadata knows about them
import classbook.models  # noqa: F401

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title="Classroom Booking",
    description="Classroom reservations with operating hours, daily usage caps and approval workflows",
    version="0.1.0",
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers
app.include_router(users.router, prefix="/api/users", tags=["Users"])
app.include_router(classrooms.router, prefix="/api/classrooms", tags=["Classrooms"])
app.include_router(settings_router.router, prefix="/api/settings", tags=["Settings"])
app.include_router(bookings.router, prefix="/api/bookings", tags=["Bookings"])
app.include_router(availability.router, prefix="/api/availability", tags=["Availability"])


@app.on_event("startup")
def on_startup():
    """Create database tables on startup (for SQLite dev mode)."""
    if settings.DATABASE_URL.startswith("sqlite"):
        Base.metadata.create_all(bind=engine)


@app.get("/api/health")
def health_check():
    return {"status": "ok"}
