from enum import Enum


class GuestStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"

    @property
    def label(self) -> str:
        return STATUS_LABELS[self]

    @property
    def report_title(self) -> str:
        return REPORT_TITLES[self]


STATUS_LABELS = {
    GuestStatus.APPROVED: "מגיע",
    GuestStatus.REJECTED: "לא מגיע",
    GuestStatus.PENDING: "טרם הגיב",
}

REPORT_TITLES = {
    GuestStatus.APPROVED: "אורחים מגיעים",
    GuestStatus.REJECTED: "אורחים לא מגיעים",
    GuestStatus.PENDING: "אורחים שטרם הגיבו",
}


def status_of(guest: dict) -> GuestStatus:
    """A missing or empty status counts as pending."""
    raw = guest.get("status")
    if not raw:
        return GuestStatus.PENDING
    try:
        return GuestStatus(raw)
    except ValueError:
        return GuestStatus.PENDING
