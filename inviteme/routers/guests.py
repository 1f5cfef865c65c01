import logging
import uuid
from datetime import datetime, timezone

from fastapi import APIRouter, HTTPException, Depends

from .auth import get_current_user
from .events import invitation_text_for, require_event, resolve_event
from .. import config
from ..dynamodb_service import add_invited_guest, fetch_guests_by_event, search_guests
from ..enums.guest_status import GuestStatus, status_of
from ..exceptions import BackendError, FormValidationError
from ..messaging import build_rsvp_link, build_sms_url, build_whatsapp_url
from ..models import CurrentUser, GuestInvite
from ..s3_service import resolve_invitation_url
from ..validation import validate_guest_contact

logger = logging.getLogger(__name__)

router = APIRouter()

SEND_FAILED = {
    "whatsapp": "אירעה שגיאה בשליחת ההזמנה.",
    "sms": "אירעה שגיאה בשליחת ההזמנה בסמס.",
}
SEARCH_TERM_REQUIRED = "נא להזין שם או טלפון"
SEARCH_NO_RESULTS = "לא נמצאו אורחים תואמים"
SEARCH_FAILED = "שגיאה בחיפוש"
GUEST_LIST_FAILED = "שגיאה בטעינת רשימת האורחים"

# Invitations sent from this process, per organizer. Removing an entry only
# affects this list, never the stored guest.
sent_guests = {}


@router.post("/invite")
def send_invitation(invite: GuestInvite, current_user: CurrentUser = Depends(get_current_user)):
    """
    Saves an invited guest for the current event and builds the WhatsApp or
    SMS link that carries the invitation and the guest's RSVP link.

    Args:
        invite (GuestInvite): Guest details and the channel to send through.
        current_user (CurrentUser): The authenticated organizer.

    Returns:
        dict: The saved guest, the RSVP link and the message URL to open.
    """
    validate_guest_contact(invite.first_name, invite.last_name, invite.phone, invite.email)
    event = require_event(current_user, invite.event_id)

    guest_item = {
        "id": str(uuid.uuid4()),
        "user_id": current_user.id,
        "event_id": event["id"],
        "first_name": invite.first_name.strip(),
        "last_name": invite.last_name.strip(),
        "phone": invite.phone.strip(),
        "email": invite.email.strip() or None,
        "status": GuestStatus.PENDING.value,
        "total_guests": 1,
        "adults": 1,
        "children": 0,
        "created_at": datetime.now(timezone.utc).isoformat(),
    }

    try:
        add_invited_guest(guest_item)
        invitation_text = invitation_text_for(event)
    except BackendError:
        logger.exception("Failed to send invitation")
        raise HTTPException(status_code=500, detail=SEND_FAILED[invite.channel])

    rsvp_link = build_rsvp_link(event["id"], guest_item["id"])
    if not config.is_production():
        logger.debug("RSVP link: %s", rsvp_link)

    if invite.channel == "sms":
        message_url = build_sms_url(invite.phone, invitation_text, rsvp_link)
    else:
        invitation_url = resolve_invitation_url(event.get("invitation_path"))
        message_url = build_whatsapp_url(invite.phone, invitation_text, invitation_url, rsvp_link)

    sent_guests.setdefault(current_user.id, []).append({
        "guest_id": guest_item["id"],
        "name": f"{guest_item['first_name']} {guest_item['last_name']}",
        "phone": guest_item["phone"],
        "email": guest_item["email"],
        "channel": invite.channel,
    })

    return {
        "guest": guest_item,
        "rsvp_link": rsvp_link,
        "message_url": message_url,
        "channel": invite.channel,
    }


@router.get("/")
def get_guest_list(event_id: str = None, current_user: CurrentUser = Depends(get_current_user)):
    """
    Guests of the current event, grouped by response status.
    """
    event = resolve_event(current_user, event_id)
    groups = {status.value: [] for status in GuestStatus}
    if not event:
        return {"event_id": None, "guests": groups}

    try:
        guests = fetch_guests_by_event(event["id"])
    except BackendError:
        logger.exception("Failed to fetch guest list")
        raise HTTPException(status_code=500, detail=GUEST_LIST_FAILED)

    for guest in guests:
        groups[status_of(guest).value].append({**guest, "status_label": status_of(guest).label})
    return {"event_id": event["id"], "guests": groups}


@router.get("/search")
def find_guests(term: str = "", current_user: CurrentUser = Depends(get_current_user)):
    term = term.strip()
    if not term:
        raise FormValidationError(SEARCH_TERM_REQUIRED, ["term"])

    try:
        guests = search_guests(current_user.id, term)
    except BackendError:
        logger.exception("Guest search failed")
        raise HTTPException(status_code=500, detail=SEARCH_FAILED)

    if not guests:
        raise HTTPException(status_code=404, detail=SEARCH_NO_RESULTS)
    return {"results": guests}


@router.get("/sent")
def get_sent_guests(current_user: CurrentUser = Depends(get_current_user)):
    return {"sent": sent_guests.get(current_user.id, [])}


@router.delete("/sent/{index}")
def delete_sent_guest(index: int, current_user: CurrentUser = Depends(get_current_user)):
    """
    Removes an entry from the in-memory sent list. The stored guest is kept.
    """
    entries = sent_guests.get(current_user.id, [])
    if not 0 <= index < len(entries):
        raise HTTPException(status_code=404, detail="Guest not found in the sent list")
    removed = entries.pop(index)
    return {"removed": removed, "sent": entries}
