import logging

from fastapi import APIRouter, HTTPException, Depends

from .auth import get_current_user
from .events import resolve_event
from ..dynamodb_service import fetch_guests_by_event, fetch_rsvp_submissions
from ..exceptions import BackendError
from ..models import CurrentUser
from ..wizard import STEP_TITLES, Step, WizardState, check_step, completed_steps, state_from_event

logger = logging.getLogger(__name__)

router = APIRouter()


def load_state(current_user: CurrentUser, event_id: str = None) -> WizardState:
    event = resolve_event(current_user, event_id)
    if not event:
        return WizardState()
    try:
        guests = fetch_guests_by_event(event["id"])
        submissions = fetch_rsvp_submissions(current_user.id, event["id"])
    except BackendError:
        logger.exception("Loading wizard state failed")
        raise HTTPException(status_code=500, detail="שגיאה בטעינת נתוני האירוע")
    return state_from_event(event, guests, submissions)


def _state_view(state: WizardState) -> dict:
    return {
        "event_type": state.event_type.value if state.event_type else None,
        "event_details_completed": state.event_details_completed,
        "selected_design": state.selected_design,
        "invitation_sent": state.invitation_sent,
        "rsvp_confirmed": state.rsvp_confirmed,
        "missing_fields": state.missing_fields,
    }


@router.get("/steps")
def get_steps(event_id: str = None, current_user: CurrentUser = Depends(get_current_user)):
    """
    All five steps with their titles, highlight flags and gates.
    """
    state = load_state(current_user, event_id)
    done = completed_steps(state)
    steps = []
    for step in Step:
        gate = check_step(state, step)
        steps.append({
            "step": int(step),
            "title": STEP_TITLES[step],
            "completed": step in done,
            "allowed": gate.allowed,
            "message": gate.message,
            "reopen_step": int(gate.reopen_step) if gate.reopen_step else None,
        })
    return {"state": _state_view(state), "steps": steps}


@router.get("/steps/{step}")
def open_step(step: int, event_id: str = None, current_user: CurrentUser = Depends(get_current_user)):
    """
    Try to open a step. When a prior step is incomplete the response names
    the step to reopen and the message to show.
    """
    try:
        step = Step(step)
    except ValueError:
        raise HTTPException(status_code=404, detail="Unknown step") from None

    state = load_state(current_user, event_id)
    gate = check_step(state, step)
    return {
        "step": int(step),
        "title": STEP_TITLES[step],
        "allowed": gate.allowed,
        "message": gate.message,
        "reopen_step": int(gate.reopen_step) if gate.reopen_step else None,
    }
