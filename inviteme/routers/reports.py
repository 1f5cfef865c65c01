import io
import logging

from fastapi import APIRouter, HTTPException, Depends
from starlette.responses import StreamingResponse

from .auth import get_current_user
from ..dynamodb_service import fetch_guests_by_status
from ..enums.guest_status import GuestStatus
from ..exceptions import BackendError
from ..models import CurrentUser
from ..reports import build_csv, summarize

logger = logging.getLogger(__name__)

router = APIRouter()

REPORT_FAILED = "שגיאה בטעינת הדוח"


def _load(current_user: CurrentUser, status: GuestStatus, event_id: str = None) -> list:
    try:
        return fetch_guests_by_status(current_user.id, status, event_id)
    except BackendError:
        logger.exception("Load %s guests failed", status.value)
        raise HTTPException(status_code=500, detail=REPORT_FAILED)


@router.get("/{status}")
def get_report(status: GuestStatus, event_id: str = None, current_user: CurrentUser = Depends(get_current_user)):
    """
    Guests with the given response status, with headcount and meal totals.

    Args:
        status (GuestStatus): approved, rejected or pending.
        event_id (str): Narrow the report to one event.
        current_user (CurrentUser): The authenticated organizer.
    """
    guests = _load(current_user, status, event_id)
    return {
        "status": status.value,
        "title": status.report_title,
        "guests": guests,
        "totals": summarize(guests),
    }


@router.get("/{status}/csv", response_class=StreamingResponse)
def export_report_csv(status: GuestStatus, event_id: str = None,
                      current_user: CurrentUser = Depends(get_current_user)):
    """
    Download the report as a CSV file (UTF-8 with BOM so Excel shows Hebrew).
    """
    guests = _load(current_user, status, event_id)
    content = build_csv(guests).encode("utf-8")
    return StreamingResponse(
        io.BytesIO(content),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f"attachment; filename={status.value}_guests.csv"}
    )
