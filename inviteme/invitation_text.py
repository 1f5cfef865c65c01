from .enums.event_type import EventType
from .models import EventDetails


def format_date_to_hebrew(iso_date: str) -> str:
    """Turn YYYY-MM-DD into DD/MM/YYYY."""
    if not iso_date:
        return ""
    parts = iso_date.split("-")
    if len(parts) != 3:
        return iso_date
    year, month, day = parts
    return f"{day}/{month}/{year}"


def _when_and_where(d: EventDetails, venue_prefix: str = "באולם ") -> str:
    return (
        f"בתאריך {format_date_to_hebrew(d.date)} בשעה {d.time}\n"
        f"{venue_prefix}{d.hall_name}, {d.hall_address}"
    )


def _wedding(d: EventDetails) -> str:
    return (
        f"{d.bride_parents} ובתם {d.bride_name} יחד עם {d.groom_parents} ובנם {d.groom_name}\n"
        "שמחים להזמינכם לחגוג עמנו את חתונת ילדינו\n"
        f"{_when_and_where(d)}\n"
        f"חופה תתקיים בשעה {d.chuppah_time}"
    )


def _henna(d: EventDetails) -> str:
    return (
        f"{d.bride_parents} ובתם {d.bride_name} יחד עם {d.groom_parents} ובנם {d.groom_name}\n"
        "מזמינים אתכם לחגוג עמנו בחינה\n"
        f"{_when_and_where(d)}"
    )


def _bar_mitzvah(d: EventDetails) -> str:
    return (
        f"אנו, {d.boy_parents},\n"
        f"מזמינים אתכם לחגוג עמנו את בר המצווה של בננו {d.boy_name}\n"
        f"{_when_and_where(d)}"
    )


def _bat_mitzvah(d: EventDetails) -> str:
    return (
        f"אנו, {d.girl_parents},\n"
        f"מזמינים אתכם לחגוג עמנו את בת המצווה של בתנו {d.girl_name}\n"
        f"{_when_and_where(d)}"
    )


def _brit(d: EventDetails) -> str:
    return (
        f"אנו, {d.baby_parents},\n"
        "שמחים להזמינכם לברית בננו\n"
        f"{_when_and_where(d)}"
    )


def _brita(d: EventDetails) -> str:
    return (
        f"אנו, {d.baby_parents},\n"
        "שמחים להזמינכם לבריתה בתנו\n"
        f"{_when_and_where(d)}"
    )


def _birthday(d: EventDetails) -> str:
    return (
        f"את/ה מוזמנ/ת לחגוג עם {d.birthday_name} יום הולדת {d.birthday_age}!\n"
        f"{_when_and_where(d, venue_prefix='ב-')}"
    )


def _business(d: EventDetails) -> str:
    return (
        f"חברת {d.business_name} ({d.business_contact})\n"
        "מתכבדת להזמינך לאירוע העסקי שלנו\n"
        f"{_when_and_where(d, venue_prefix='ב-')}"
    )


INVITATION_TEMPLATES = {
    EventType.WEDDING: _wedding,
    EventType.HENNA: _henna,
    EventType.BAR_MITZVAH: _bar_mitzvah,
    EventType.BAT_MITZVAH: _bat_mitzvah,
    EventType.BRIT: _brit,
    EventType.BRITA: _brita,
    EventType.BIRTHDAY: _birthday,
    EventType.BUSINESS: _business,
}


def default_invitation_text(event_type: EventType, details: EventDetails) -> str:
    """
    Build the default invitation text for an event.

    Args:
        event_type (EventType): The event type.
        details (EventDetails): The filled event details.

    Returns:
        str: A heading line, a blank line and the type's template.
    """
    event_type = EventType(event_type)
    template = INVITATION_TEMPLATES[event_type]
    return f"הזמנה ל{event_type.value}\n\n" + template(details)


def resolve_invitation_text(event_type: EventType, details: EventDetails, custom_text: str = None) -> str:
    """Custom text wins when it is not blank."""
    if custom_text and custom_text.strip():
        return custom_text.strip()
    return default_invitation_text(event_type, details)
