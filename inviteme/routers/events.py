import logging
import uuid
from datetime import datetime, timezone

from fastapi import APIRouter, HTTPException, Depends

from .auth import get_current_user
from ..designs import FONTS, design_file, list_designs, list_fonts, load_design
from ..dynamodb_service import (get_event_by_id, get_latest_event, save_event, update_event_design,
                                update_event_details)
from ..enums.event_type import EventType, normalize_event_type
from ..exceptions import BackendError, FormValidationError
from ..invitation_image import compose_invitation
from ..invitation_text import default_invitation_text, resolve_invitation_text
from ..models import DEFAULT_FONT_KEY, CurrentUser, DesignRequest, EventDetails, EventRequest
from ..s3_service import resolve_invitation_url, upload_invitation
from ..validation import validate_event_details
from ..wizard import STEP_TITLES

logger = logging.getLogger(__name__)

router = APIRouter()

UNKNOWN_EVENT_TYPE = "יש לבחור סוג אירוע מהרשימה"
UNKNOWN_FONT = "יש לבחור גופן מהרשימה"
UNKNOWN_DESIGN = "יש לבחור עיצוב מהרשימה"
EVENT_NOT_FOUND = "האירוע לא נמצא"
EVENT_SAVE_FAILED = "שגיאה בשמירת פרטי האירוע"
EVENT_LOAD_FAILED = "שגיאה בטעינת פרטי האירוע"
DESIGN_UPLOAD_FAILED = "שגיאה בהעלאת ההזמנה"

# Half-hour slots from 08:00 to 23:30
TIME_SLOTS = [f"{slot // 2:02d}:{'00' if slot % 2 == 0 else '30'}" for slot in range(16, 48)]


# === Shared helpers ===

def resolve_event(current_user: CurrentUser, event_id: str = None):
    """
    Return the organizer's current event.

    An explicit event_id wins; otherwise the organizer's most recently
    created event is used.

    Returns:
        dict: The event, or None when the organizer has no event yet.
    """
    try:
        if not event_id:
            return get_latest_event(current_user.id)
        event = get_event_by_id(event_id)
    except BackendError:
        logger.exception("Loading event %s failed", event_id)
        raise HTTPException(status_code=500, detail=EVENT_LOAD_FAILED)

    if not event:
        raise HTTPException(status_code=404, detail=EVENT_NOT_FOUND)
    if event.get("user_id") != current_user.id:
        raise HTTPException(status_code=403, detail="You are not authorized to access this event")
    return event


def require_event(current_user: CurrentUser, event_id: str = None) -> dict:
    event = resolve_event(current_user, event_id)
    if not event:
        raise HTTPException(status_code=404, detail=EVENT_NOT_FOUND)
    return event


def invitation_text_for(event: dict) -> str:
    """The text chosen with the design, or the type's default text."""
    details = event.get("event_details") or {}
    if details.get("invitation_text"):
        return details["invitation_text"]
    return default_invitation_text(normalize_event_type(event["event_type"]), EventDetails.model_validate(details))


def event_view(event: dict) -> dict:
    return {**event, "invitation_url": resolve_invitation_url(event.get("invitation_path"))}


def _parse_event_type(raw: str) -> EventType:
    try:
        return normalize_event_type(raw)
    except ValueError:
        raise FormValidationError(UNKNOWN_EVENT_TYPE, ["event_type"]) from None


# === Routes ===

@router.get("/options")
def get_options():
    """
    Everything the wizard needs to render its pickers.
    """
    return {
        "event_types": [event_type.value for event_type in EventType],
        "time_slots": TIME_SLOTS,
        "fonts": list_fonts(),
        "default_font": DEFAULT_FONT_KEY,
        "designs": list_designs(),
        "steps": [{"step": int(step), "title": title} for step, title in STEP_TITLES.items()],
    }


@router.post("/")
def create_event(request: EventRequest, current_user: CurrentUser = Depends(get_current_user)):
    """
    Validates the event detail form and creates the event.

    Args:
        request (EventRequest): Event type and details.
        current_user (CurrentUser): The authenticated organizer.

    Returns:
        dict: The created event.
    """
    event_type = _parse_event_type(request.event_type)
    validate_event_details(event_type, request.details)

    event_item = {
        "id": str(uuid.uuid4()),
        "user_id": current_user.id,
        "event_type": event_type.value,
        "event_details": request.details.model_dump(by_alias=True),
        "font": DEFAULT_FONT_KEY,
        "created_at": datetime.now(timezone.utc).isoformat(),
    }

    try:
        save_event(event_item)
    except BackendError:
        logger.exception("Failed to save event")
        raise HTTPException(status_code=500, detail=EVENT_SAVE_FAILED)

    return {"message": "Event created successfully.", "event": event_view(event_item)}


@router.get("/latest")
def get_current_event(current_user: CurrentUser = Depends(get_current_user)):
    event = require_event(current_user)
    return event_view(event)


@router.get("/{event_id}")
def get_event_details(event_id: str, current_user: CurrentUser = Depends(get_current_user)):
    return event_view(require_event(current_user, event_id))


@router.put("/{event_id}")
def update_event(event_id: str, request: EventRequest, current_user: CurrentUser = Depends(get_current_user)):
    """
    Re-validates and stores edited event details, keeping any chosen
    invitation text and font.
    """
    event = require_event(current_user, event_id)
    event_type = _parse_event_type(request.event_type)
    validate_event_details(event_type, request.details)

    previous = event.get("event_details") or {}
    details = request.details.model_dump(by_alias=True)
    for key in ("invitation_text", "font"):
        if key in previous:
            details[key] = previous[key]

    try:
        updated = update_event_details(event["id"], event_type.value, details)
    except BackendError:
        logger.exception("Failed to update event %s", event_id)
        raise HTTPException(status_code=500, detail=EVENT_SAVE_FAILED)

    return {"message": "Event updated successfully.", "event": event_view(updated or {**event, "event_details": details})}


@router.get("/{event_id}/invitation-text")
def get_invitation_text(event_id: str, current_user: CurrentUser = Depends(get_current_user)):
    event = require_event(current_user, event_id)
    details = EventDetails.model_validate(event.get("event_details") or {})
    return {
        "default_text": default_invitation_text(normalize_event_type(event["event_type"]), details),
        "invitation_text": invitation_text_for(event),
    }


@router.post("/{event_id}/design")
def choose_design(event_id: str, request: DesignRequest, current_user: CurrentUser = Depends(get_current_user)):
    """
    Composes the invitation image for the chosen design and font, uploads
    it and records it on the event.

    Args:
        event_id (str): The event ID.
        request (DesignRequest): Design id, font key and optional custom text.
        current_user (CurrentUser): The authenticated organizer.

    Returns:
        dict: The updated event with its public invitation URL.
    """
    event = require_event(current_user, event_id)

    if request.font_key not in FONTS:
        raise FormValidationError(UNKNOWN_FONT, ["font_key"])
    try:
        design_file(request.design_id)
    except KeyError:
        raise FormValidationError(UNKNOWN_DESIGN, ["design_id"]) from None

    event_type = normalize_event_type(event["event_type"])
    stored_details = event.get("event_details") or {}
    text = resolve_invitation_text(event_type, EventDetails.model_validate(stored_details),
                                   request.invitation_text)

    try:
        background = load_design(request.design_id)
        image = compose_invitation(background, text or " ", request.font_key)
        invitation_path = upload_invitation(image)
        details = {**stored_details, "invitation_text": text, "font": request.font_key}
        updated = update_event_design(event["id"], invitation_path, request.font_key, details)
    except BackendError:
        logger.exception("Invitation upload failed for event %s", event_id)
        raise HTTPException(status_code=500, detail=DESIGN_UPLOAD_FAILED)

    updated = updated or {**event, "invitation_path": invitation_path, "font": request.font_key,
                          "event_details": details}
    return {"message": "Design saved successfully.", "design_id": request.design_id,
            "event": event_view(updated)}
