"""FastAPI application entry point."""
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from venueflow.config import settings
from venueflow.database import Base, engine

# Import routers
from venueflow.routers import users, venues, events, reviews, notifications

# Import all models so Base.metadata knows about them
from venueflow.models.user import User                              # noqa: F401
from venueflow.models.venue import Venue, VenueArea, VenueDefaultReviewer  # noqa: F401
from venueflow.models.event import Event, EventArea                 # noqa: F401
from venueflow.models.event_version import EventVersion             # noqa: F401
from venueflow.models.approval import Approval                      # noqa: F401
from venueflow.models.audit_log import AuditLog                     # noqa: F401
from venueflow.models.notification import Notification              # noqa: F401

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)

app = FastAPI(
    title="VenueFlow",
    description="Venue event lifecycle, drafts, submissions and reviewer decisions",
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
app.include_router(venues.router, prefix="/api/venues", tags=["Venues"])
app.include_router(events.router, prefix="/api/events", tags=["Events"])
app.include_router(reviews.router, prefix="/api/reviews", tags=["Reviews"])
app.include_router(notifications.router, prefix="/api/notifications", tags=["Notifications"])


@app.on_event("startup")
def on_startup():
    """Create database tables on startup (for SQLite dev mode)."""
    if settings.DATABASE_URL.startswith("sqlite"):
        Base.metadata.create_all(bind=engine)


@app.get("/api/health")
def health_check():
    return {"status": "ok"}
