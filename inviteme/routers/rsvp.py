import logging
import uuid
from datetime import datetime, timezone

from fastapi import APIRouter, HTTPException, Depends

from .auth import get_current_user
from .events import resolve_event
from ..dynamodb_service import (get_event_by_id, get_guest, get_latest_event, get_latest_guest,
                                save_rsvp_submission, update_guest_rsvp)
from ..enums.guest_status import GuestStatus, status_of
from ..exceptions import BackendError, FormValidationError
from ..models import CurrentUser, HeadcountSubmission, RsvpResponse
from ..s3_service import resolve_invitation_url
from ..validation import NO_GUESTS_COUNTED, validate_headcount

logger = logging.getLogger(__name__)

# Organizer pages under /rsvp
router = APIRouter()

# The per-guest page behind /<event_id>/<guest_id>; no login required
public_router = APIRouter()

LOAD_FAILED = "שגיאה בטעינת הנתונים"
CHOICE_REQUIRED = "אנא בחר/י האם את/ה מגיע/ה."
SAVE_FAILED = "אירעה שגיאה בשמירה."
SAVED = "הנתונים נשמרו בהצלחה!"
LATEST_GUEST_FAILED = "אירעה שגיאה בטעינת פרטי האורח"
NO_GUESTS = "טרם נשלחו הזמנות"
SUBMISSION_SAVED = "מספר המשתתפים נשמר"

# special meal category -> column prefix
MEAL_COLUMNS = {"vegetarian": "veg", "vegan": "vegan", "glatt": "glatt"}


def _greeting(guest: dict) -> str:
    return f"היי {guest.get('first_name', '')}, נשמח לדעת אם את/ה מגיע/ה לאירוע שלנו."


def _prefill(guest: dict) -> dict:
    """Existing answers, so a returning guest sees what they entered before."""
    adults = guest.get("adults")
    children = guest.get("children")
    return {
        "adults": 1 if adults is None else adults,
        "children": children or 0,
        "special_meals": {
            meal: {"adults": guest.get(f"{prefix}_adults") or 0, "children": guest.get(f"{prefix}_children") or 0}
            for meal, prefix in MEAL_COLUMNS.items()
        },
    }


def attending_fields(response: RsvpResponse) -> dict:
    """
    Map an accepted RSVP onto the guest's columns.
    """
    fields = {
        "status": GuestStatus.APPROVED.value,
        "adults": response.adults,
        "children": response.children,
        "total_guests": response.adults + response.children,
    }
    for meal, prefix in MEAL_COLUMNS.items():
        count = getattr(response.special_meals, meal)
        fields[f"{prefix}_adults"] = count.adults
        fields[f"{prefix}_children"] = count.children

    fields["allergy_adults"] = sum(a.adults for a in response.allergies)
    fields["allergy_children"] = sum(a.children for a in response.allergies)
    fields["allergy_note"] = "; ".join(a.description.strip() for a in response.allergies if a.description.strip())
    return fields


def declined_fields() -> dict:
    fields = {"status": GuestStatus.REJECTED.value, "adults": 0, "children": 0, "total_guests": 0,
              "allergy_note": ""}
    for prefix in list(MEAL_COLUMNS.values()) + ["allergy"]:
        fields[f"{prefix}_adults"] = 0
        fields[f"{prefix}_children"] = 0
    return fields


# === Public guest page ===

@public_router.get("/{event_id}/{guest_id}")
def get_rsvp_page(event_id: str, guest_id: str):
    """
    Data for the guest's RSVP page: greeting, invitation image and the
    previously entered counts.
    """
    try:
        guest = get_guest(event_id, guest_id)
        event = get_event_by_id(event_id) if guest else None
    except BackendError:
        logger.exception("Loading RSVP page failed")
        raise HTTPException(status_code=500, detail=LOAD_FAILED)

    if not guest:
        raise HTTPException(status_code=404, detail=LOAD_FAILED)

    status = status_of(guest)
    return {
        "event_id": event_id,
        "guest_id": guest_id,
        "first_name": guest.get("first_name"),
        "last_name": guest.get("last_name"),
        "status": status.value,
        "greeting": _greeting(guest),
        "invitation_url": resolve_invitation_url((event or {}).get("invitation_path")),
        "form": _prefill(guest),
    }


@public_router.post("/{event_id}/{guest_id}")
def submit_rsvp(event_id: str, guest_id: str, response: RsvpResponse):
    """
    Stores the guest's answer. Declining zeroes every count; accepting
    validates the headcount against special meals and allergies first.
    """
    if response.attending is None:
        raise FormValidationError(CHOICE_REQUIRED, ["attending"])

    if response.attending:
        validate_headcount(response.adults, response.children, response.special_meals, response.allergies)
        fields = attending_fields(response)
    else:
        fields = declined_fields()

    try:
        updated = update_guest_rsvp(event_id, guest_id, fields)
    except BackendError:
        logger.exception("Saving RSVP failed for guest %s", guest_id)
        raise HTTPException(status_code=500, detail=SAVE_FAILED)

    if updated is None:
        raise HTTPException(status_code=404, detail=LOAD_FAILED)

    logger.info("Guest %s answered %s", guest_id, fields["status"])
    return {"message": SAVED, "status": fields["status"]}


# === Organizer pages ===

@router.get("/latest")
def get_latest_invited_guest(current_user: CurrentUser = Depends(get_current_user)):
    """
    The organizer's most recently invited guest with the invitation image,
    taken from the guest's own event or, failing that, from the latest event
    that has an invitation.
    """
    try:
        guest = get_latest_guest(current_user.id)
        if not guest:
            raise HTTPException(status_code=404, detail=NO_GUESTS)

        invitation_path = None
        if guest.get("event_id"):
            event = get_event_by_id(guest["event_id"])
            invitation_path = (event or {}).get("invitation_path")
        if not invitation_path:
            event = get_latest_event(current_user.id, with_invitation=True)
            invitation_path = (event or {}).get("invitation_path")
    except BackendError:
        logger.exception("Fetch latest guest failed")
        raise HTTPException(status_code=500, detail=LATEST_GUEST_FAILED)

    return {"guest": guest, "invitation_url": resolve_invitation_url(invitation_path)}


@router.post("/submissions")
def submit_headcount(submission: HeadcountSubmission, current_user: CurrentUser = Depends(get_current_user)):
    """
    The organizer's own "how many are coming" form from step 5.
    """
    validate_headcount(submission.adults, submission.children, submission.special_meals, submission.allergies,
                       empty_message=NO_GUESTS_COUNTED)
    event = resolve_event(current_user, submission.event_id)

    special_meals = submission.special_meals.model_dump()
    special_meals["allergies"] = [allergy.model_dump() for allergy in submission.allergies]

    item = {
        "id": str(uuid.uuid4()),
        "user_id": current_user.id,
        "event_id": event["id"] if event else None,
        "event_type": event["event_type"] if event else None,
        "adults": submission.adults,
        "children": submission.children,
        "special_meals": special_meals,
        "created_at": datetime.now(timezone.utc).isoformat(),
    }

    try:
        save_rsvp_submission(item)
    except BackendError:
        logger.exception("RSVP submission insert failed")
        raise HTTPException(status_code=500, detail=SAVE_FAILED)

    return {"message": SUBMISSION_SAVED, "submission": item}
