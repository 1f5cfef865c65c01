"""
Step gating for the five-step invitation wizard.

The gate only looks at flags derived from what is already stored for the
event; nothing is persisted per step.
"""
from dataclasses import dataclass, field
from enum import IntEnum
from typing import List, Optional

from .enums.event_type import EventType, normalize_event_type
from .models import EventDetails
from .validation import missing_fields, missing_fields_message


class Step(IntEnum):
    EVENT_TYPE = 1
    EVENT_DETAILS = 2
    DESIGN = 3
    GUEST_INVITATION = 4
    RSVP_REPORTS = 5


STEP_TITLES = {
    Step.EVENT_TYPE: "שלב 1 - סוג אירוע",
    Step.EVENT_DETAILS: "שלב 2 - פרטי האירוע",
    Step.DESIGN: "שלב 3 - בחר עיצוב הזמנה",
    Step.GUEST_INVITATION: "שלב 4 - שליחת הזמנה לאורח",
    Step.RSVP_REPORTS: 'שלב 5 - דוחו"ת אישורי הגעה',
}

EVENT_TYPE_REQUIRED = "עליך לבחור סוג אירוע לפני מעבר לשלב זה"
EVENT_DETAILS_REQUIRED = "נא למלא את פרטי האירוע לפני מעבר לשלב זה"
DESIGN_REQUIRED = "יש לבחור עיצוב הזמנה לפני מעבר לשלב זה"


@dataclass
class WizardState:
    event_type: Optional[EventType] = None
    event_details_completed: bool = False
    selected_design: Optional[str] = None
    invitation_sent: bool = False
    rsvp_confirmed: bool = False
    missing_fields: List[str] = field(default_factory=list)


@dataclass
class StepGate:
    allowed: bool
    message: str = ""
    reopen_step: Optional[Step] = None


def state_from_event(event: Optional[dict], guests: List[dict] = (), rsvp_submissions: List[dict] = ()) -> WizardState:
    """
    Derive the wizard flags from the stored event, its guests and the
    organizer's own RSVP submissions.
    """
    if not event or not event.get("event_type"):
        return WizardState()

    try:
        event_type = normalize_event_type(event["event_type"])
    except ValueError:
        return WizardState()

    details = EventDetails.model_validate(event.get("event_details") or {})
    missing = missing_fields(event_type, details)

    return WizardState(
        event_type=event_type,
        event_details_completed=not missing,
        selected_design=event.get("invitation_path"),
        invitation_sent=bool(guests),
        rsvp_confirmed=bool(rsvp_submissions) or any(g.get("status") == "approved" for g in guests),
        missing_fields=missing,
    )


def check_step(state: WizardState, step: Step) -> StepGate:
    """
    Decide whether a step may be opened.

    Returns:
        StepGate: allowed, or the message to show and the step to reopen.
    """
    step = Step(step)
    if step in (Step.EVENT_TYPE, Step.RSVP_REPORTS):
        return StepGate(allowed=True)

    if not state.event_type:
        return StepGate(False, EVENT_TYPE_REQUIRED, Step.EVENT_TYPE)

    if step == Step.EVENT_DETAILS:
        return StepGate(allowed=True)

    if not state.event_details_completed:
        message = missing_fields_message(state.missing_fields) if state.missing_fields else EVENT_DETAILS_REQUIRED
        return StepGate(False, message, Step.EVENT_DETAILS)

    if step == Step.GUEST_INVITATION and not state.selected_design:
        return StepGate(False, DESIGN_REQUIRED, Step.DESIGN)

    return StepGate(allowed=True)


def completed_steps(state: WizardState) -> List[Step]:
    flags = {
        Step.EVENT_TYPE: bool(state.event_type),
        Step.EVENT_DETAILS: state.event_details_completed,
        Step.DESIGN: bool(state.selected_design),
        Step.GUEST_INVITATION: state.invitation_sent,
        Step.RSVP_REPORTS: state.rsvp_confirmed,
    }
    return [step for step, done in flags.items() if done]
