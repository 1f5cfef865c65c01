from enum import Enum


class EventType(str, Enum):
    WEDDING = "חתונה"
    HENNA = "חינה"
    BAR_MITZVAH = "בר מצווה"
    BAT_MITZVAH = "בת מצווה"
    BRIT = "ברית"
    BRITA = "בריתה"
    BIRTHDAY = "יום הולדת"
    BUSINESS = "אירוע עסקי"


# Combined label offered by older front ends for both ceremonies
COMBINED_BRIT_LABEL = "ברית/ה"


def normalize_event_type(value: str) -> EventType:
    """
    Map a raw event type label to an EventType.

    The combined "ברית/ה" label folds into BRIT. "בריתה" is not folded:
    it stays BRITA so the ceremony keeps its own invitation text.

    Raises:
        ValueError: If the label is not a known event type.
    """
    value = (value or "").strip()
    if value == COMBINED_BRIT_LABEL:
        return EventType.BRIT
    return EventType(value)
