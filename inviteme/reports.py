import csv
import io

CSV_HEADERS = ["#", "שם פרטי", "שם משפחה", "טלפון", "בוגרים", "ילדים", 'סה"כ',
               "צמחוני", "טבעוני", "גלאט", "אלרגיות", "הערות"]
TOTAL_LABEL = 'סה"כ'
ALLERGY_FALLBACK_NOTE = "אלרגיה"
UTF8_BOM = "\ufeff"


def _count(guest: dict, key: str) -> int:
    return int(guest.get(key) or 0)


def _pair(guest: dict, prefix: str) -> int:
    return _count(guest, f"{prefix}_adults") + _count(guest, f"{prefix}_children")


def summarize(guests: list) -> dict:
    """
    Sum headcounts and special meals over a list of guests.

    Returns:
        dict: adults, children, total, vegetarian, vegan, glatt and allergy totals.
    """
    adults = sum(_count(g, "adults") for g in guests)
    children = sum(_count(g, "children") for g in guests)
    return {
        "adults": adults,
        "children": children,
        "total": adults + children,
        "vegetarian": sum(_pair(g, "veg") for g in guests),
        "vegan": sum(_pair(g, "vegan") for g in guests),
        "glatt": sum(_pair(g, "glatt") for g in guests),
        "allergy": sum(_pair(g, "allergy") for g in guests),
    }


def allergy_note(guest: dict) -> str:
    if guest.get("allergy_note"):
        return guest["allergy_note"]
    return ALLERGY_FALLBACK_NOTE if _pair(guest, "allergy") > 0 else "-"


def build_csv(guests: list) -> str:
    """
    Render guests as CSV text with a UTF-8 byte-order mark and a totals row.
    """
    output = io.StringIO()
    writer = csv.writer(output, lineterminator="\n")
    writer.writerow(CSV_HEADERS)

    for idx, guest in enumerate(guests, start=1):
        adults = _count(guest, "adults")
        children = _count(guest, "children")
        writer.writerow([
            idx,
            guest.get("first_name", ""),
            guest.get("last_name", ""),
            guest.get("phone", ""),
            adults,
            children,
            adults + children,
            _pair(guest, "veg"),
            _pair(guest, "vegan"),
            _pair(guest, "glatt"),
            _pair(guest, "allergy"),
            allergy_note(guest),
        ])

    totals = summarize(guests)
    writer.writerow(["", TOTAL_LABEL, "", "", totals["adults"], totals["children"], totals["total"],
                     totals["vegetarian"], totals["vegan"], totals["glatt"], totals["allergy"], ""])

    return UTF8_BOM + output.getvalue()
