"""
Client-side form rules for the event wizard and the RSVP forms.

Every rule raises FormValidationError carrying the Hebrew message shown to
the user and the names of the offending fields.
"""
import re
from datetime import date, datetime
from typing import List, Optional

from .enums.event_type import EventType
from .exceptions import FormValidationError
from .models import Allergy, EventDetails, SpecialMeals

# Hebrew labels for the event detail form fields, in form order
FIELD_LABELS = {
    "bride_name": "שם הכלה",
    "groom_name": "שם החתן",
    "bride_parents": "שם הורי הכלה",
    "groom_parents": "שם הורי החתן",
    "boy_name": "שם חתן בר מצווה",
    "boy_parents": "שם ההורים",
    "girl_name": "שם כלת בת מצווה",
    "girl_parents": "שם ההורים",
    "baby_parents": "שם ההורים",
    "birthday_name": "שם החוגג/ת",
    "birthday_age": "גיל",
    "business_name": "שם החברה",
    "business_contact": "איש קשר",
    "date": "תאריך האירוע",
    "time": "שעת האירוע",
    "chuppah_time": "שעת החופה",
    "hall_name": "שם האולם",
    "hall_address": "כתובת האולם",
}

COMMON_FIELDS = ["date", "time", "hall_name", "hall_address"]

TYPE_FIELDS = {
    EventType.WEDDING: ["bride_name", "groom_name", "bride_parents", "groom_parents", "chuppah_time"],
    EventType.HENNA: ["bride_name", "groom_name", "bride_parents", "groom_parents"],
    EventType.BAR_MITZVAH: ["boy_name", "boy_parents"],
    EventType.BAT_MITZVAH: ["girl_name", "girl_parents"],
    EventType.BRIT: ["baby_parents"],
    EventType.BRITA: ["baby_parents"],
    EventType.BIRTHDAY: ["birthday_name", "birthday_age"],
    EventType.BUSINESS: ["business_name", "business_contact"],
}

MISSING_FIELDS_PREFIX = "נא למלא את השדות הבאים: "
DATE_NOT_IN_FUTURE = "תאריך האירוע חייב להיות עתידי."
DATE_INVALID = "תאריך האירוע אינו תקין."

GUEST_REQUIRED = "נא למלא שם פרטי, שם משפחה ומספר טלפון תקין."
PHONE_INVALID = "מספר טלפון לא תקין – יש להזין 10 ספרות."
EMAIL_INVALID = "המייל לא תקין"

NEGATIVE_COUNT = "מספר אורחים לא יכול להיות שלילי"
NO_PARTICIPANTS = "יש להזין לפחות משתתף אחד."
NO_GUESTS_COUNTED = "יש להזין לפחות אורח אחד"  # organizer headcount form
SPECIAL_MEALS_EXCEED = "סך המנות המיוחדות חורג ממספר האורחים."
ALLERGY_DESCRIPTION_MISSING = "יש להזין סוג אלרגיה עבור כל אלרגיה שמצויינת."

PHONE_DIGITS = 10
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def required_fields(event_type: EventType) -> List[str]:
    """
    Return the required detail fields for an event type, in form order.
    """
    allowed = set(COMMON_FIELDS) | set(TYPE_FIELDS.get(EventType(event_type), []))
    return [name for name in FIELD_LABELS if name in allowed]


def missing_fields(event_type: EventType, details: EventDetails) -> List[str]:
    values = details.model_dump()
    return [name for name in required_fields(event_type) if not str(values.get(name, "")).strip()]


def missing_fields_message(fields: List[str]) -> str:
    return MISSING_FIELDS_PREFIX + ", ".join(FIELD_LABELS.get(name, name) for name in fields)


def validate_event_details(event_type: EventType, details: EventDetails, today: Optional[date] = None):
    """
    Validate the event detail form for the selected event type.

    Args:
        event_type (EventType): The selected event type.
        details (EventDetails): The submitted form.
        today (date): Reference date for the "must be in the future" rule.

    Raises:
        FormValidationError: On a past date or any missing required field.
    """
    today = today or date.today()

    if details.date.strip():
        try:
            event_date = datetime.strptime(details.date.strip(), "%Y-%m-%d").date()
        except ValueError:
            raise FormValidationError(DATE_INVALID, ["date"]) from None
        if event_date <= today:
            raise FormValidationError(DATE_NOT_IN_FUTURE, ["date"])

    missing = missing_fields(event_type, details)
    if missing:
        raise FormValidationError(missing_fields_message(missing), missing)


def phone_digits(phone: str) -> str:
    return re.sub(r"\D", "", phone or "")


def is_valid_phone(phone: str) -> bool:
    return len(phone_digits(phone)) == PHONE_DIGITS


def validate_guest_contact(first_name: str, last_name: str, phone: str, email: str = ""):
    """
    Validate the guest invitation form.

    Raises:
        FormValidationError: On a missing name/phone, a phone that is not
            exactly 10 digits, or a malformed email.
    """
    values = {"first_name": first_name, "last_name": last_name, "phone": phone}
    missing = [name for name, value in values.items() if not str(value or "").strip()]
    if missing:
        raise FormValidationError(GUEST_REQUIRED, missing)

    if not is_valid_phone(phone):
        raise FormValidationError(PHONE_INVALID, ["phone"])

    email = (email or "").strip()
    if email and not EMAIL_PATTERN.match(email):
        raise FormValidationError(EMAIL_INVALID, ["email"])


def validate_headcount(adults: int, children: int, special_meals: SpecialMeals, allergies: List[Allergy],
                       empty_message: str = NO_PARTICIPANTS):
    """
    Validate declared headcounts against special meals and allergies.

    Raises:
        FormValidationError: On negative counts, an empty party, special meal
            totals above the declared counts, or an undescribed allergy.
    """
    meals = [special_meals.vegetarian, special_meals.vegan, special_meals.glatt]
    counts = [adults, children]
    counts += [m.adults for m in meals] + [m.children for m in meals]
    counts += [a.adults for a in allergies] + [a.children for a in allergies]
    if any(count < 0 for count in counts):
        raise FormValidationError(NEGATIVE_COUNT, ["adults", "children"])

    if adults == 0 and children == 0:
        raise FormValidationError(empty_message, ["adults", "children"])

    special_adults = sum(m.adults for m in meals) + sum(a.adults for a in allergies)
    special_children = sum(m.children for m in meals) + sum(a.children for a in allergies)
    if special_adults > adults or special_children > children:
        raise FormValidationError(SPECIAL_MEALS_EXCEED, ["special_meals", "allergies"])

    if any((a.adults > 0 or a.children > 0) and not a.description.strip() for a in allergies):
        raise FormValidationError(ALLERGY_DESCRIPTION_MISSING, ["allergies"])
