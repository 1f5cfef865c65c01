import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from starlette.requests import Request
from starlette.responses import JSONResponse

from . import config
from .cognito_service import on_auth_state_change
from .exceptions import FormValidationError
from .routers import auth, events, guests, reports, rsvp, wizard

config.configure_logging()
logger = logging.getLogger(__name__)

# Initialize the FastAPI app
app = FastAPI(title="InviteMe")

# CORS configuration - Allow frontend to interact with backend
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(FormValidationError)
async def form_validation_error_handler(request: Request, exc: FormValidationError):
    return JSONResponse(status_code=400, content={"detail": {"message": exc.message, "fields": exc.fields}})


def _log_auth_change(event, session):
    user = (session or {}).get("user") or {}
    logger.info("Auth state changed: %s %s", event, user.get("email", ""))


on_auth_state_change(_log_auth_change)


# Root endpoint for health checks and general status
@app.get("/")
def read_root():
    return {"message": "InviteMe backend is running"}


# Include routers for different sections of the app
app.include_router(auth.router, prefix="/auth", tags=["auth"])
app.include_router(events.router, prefix="/events", tags=["events"])
app.include_router(wizard.router, prefix="/wizard", tags=["wizard"])
app.include_router(guests.router, prefix="/guests", tags=["guests"])
app.include_router(reports.router, prefix="/reports", tags=["reports"])
app.include_router(rsvp.router, prefix="/rsvp", tags=["rsvp"])

if not config.DESIGNS_BASE.startswith("http"):
    app.mount("/static/designs", StaticFiles(directory=config.DESIGNS_BASE, check_dir=False), name="designs")

# Catch-all /<event_id>/<guest_id>; must stay last
app.include_router(rsvp.public_router, tags=["rsvp"])
