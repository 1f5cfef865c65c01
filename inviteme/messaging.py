from urllib.parse import quote

from . import config
from .validation import phone_digits

ISRAEL_COUNTRY_CODE = "972"

# Characters left unescaped by the browser's encodeURIComponent
_URI_COMPONENT_SAFE = "-_.!~*'()"


def encode_uri_component(text: str) -> str:
    return quote(text, safe=_URI_COMPONENT_SAFE)


def to_international(phone: str) -> str:
    """050-123-4567 -> 972501234567"""
    digits = phone_digits(phone)
    return ISRAEL_COUNTRY_CODE + digits[1:]


def build_rsvp_link(event_id: str, guest_id: str, base_url: str = None) -> str:
    base_url = (base_url or config.PUBLIC_BASE_URL).rstrip("/")
    return f"{base_url}/{event_id}/{guest_id}"


def whatsapp_message(invitation_text: str, invitation_url: str, rsvp_link: str) -> str:
    return (
        f"{invitation_text}\n\n"
        f"מצורפת ההזמנה לאירוע:\n{invitation_url or ''}\n\n"
        f"לאישור השתתפות לחצו על הקישור:\n{rsvp_link}"
    )


def sms_message(invitation_text: str, rsvp_link: str) -> str:
    return f"{invitation_text}\n\nלאישור השתתפות לחצו על הקישור:\n{rsvp_link}"


def build_whatsapp_url(phone: str, invitation_text: str, invitation_url: str, rsvp_link: str) -> str:
    """
    Build a wa.me link that opens WhatsApp with a pre-filled invitation.
    """
    text = whatsapp_message(invitation_text, invitation_url, rsvp_link)
    return f"https://wa.me/{to_international(phone)}?text={encode_uri_component(text)}"


def build_sms_url(phone: str, invitation_text: str, rsvp_link: str) -> str:
    """
    Build an sms: link that opens the default SMS app with a pre-filled invitation.
    """
    body = sms_message(invitation_text, rsvp_link)
    return f"sms:{to_international(phone)}?body={encode_uri_component(body)}"
