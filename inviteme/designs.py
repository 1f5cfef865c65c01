import logging
import os
from urllib.parse import quote

import requests

from . import config
from .exceptions import BackendError

logger = logging.getLogger(__name__)

# Invitation backgrounds, numbered from 1
DESIGN_FILES = [f"עיצוב-הזמנה-{n}.jpg" for n in range(1, 18)] + [
    "עיצוב הזמנה-18.jpg",
    "עיצוב-הזמנה-19.jpg",
    "עיצוב-הזמנה-20.jpg",
    "עיצוב-הזמנה-21.jpg",
]

FONTS = {
    "gloria": {"label": "Gloria Hallelujah", "file": "GloriaHallelujah-Regular.ttf"},
    "assistant": {"label": "Assistant", "file": "Assistant-Regular.ttf"},
    "mplus": {"label": "M PLUS 1p", "file": "MPLUS1p-Regular.ttf"},
    "secular": {"label": "Secular One", "file": "SecularOne-Regular.ttf"},
    "ojuju": {"label": "Ojuju", "file": "Ojuju-Regular.ttf"},
    "macondo": {"label": "Macondo", "file": "Macondo-Regular.ttf"},
}

DOWNLOAD_TIMEOUT = 30


def _is_remote(base: str) -> bool:
    return base.startswith("http://") or base.startswith("https://")


def design_file(design_id: int) -> str:
    """
    Return the file name of a design.

    Raises:
        KeyError: If the id is outside the catalogue.
    """
    if not 1 <= design_id <= len(DESIGN_FILES):
        raise KeyError(f"Unknown design {design_id}")
    return DESIGN_FILES[design_id - 1]


def design_url(design_id: int, base: str = None) -> str:
    base = (base or config.DESIGNS_BASE).rstrip("/")
    name = design_file(design_id)
    if _is_remote(base):
        return f"{base}/{quote(name)}"
    return f"/static/designs/{quote(name)}"


def list_designs(base: str = None):
    return [{"id": n, "url": design_url(n, base)} for n in range(1, len(DESIGN_FILES) + 1)]


def list_fonts():
    return [{"key": key, "label": font["label"]} for key, font in FONTS.items()]


def _read_asset(base: str, name: str, what: str) -> bytes:
    """Read `name` from a local directory, or download it when `base` is an http(s) URL."""
    if _is_remote(base):
        url = f"{base}/{quote(name)}"
        try:
            response = requests.get(url, timeout=DOWNLOAD_TIMEOUT)
            response.raise_for_status()
            return response.content
        except requests.RequestException as e:
            raise BackendError(f"Error downloading {what}: {str(e)}") from e

    try:
        with open(os.path.join(base, name), "rb") as asset:
            return asset.read()
    except OSError as e:
        raise BackendError(f"Error reading {what}: {str(e)}") from e


def load_design(design_id: int, base: str = None) -> bytes:
    """
    Load a design background as raw image bytes.

    Args:
        design_id (int): 1-based design id.
        base (str): Local directory or http(s) base URL. Defaults to DESIGNS_BASE.

    Returns:
        bytes: The background image.
    """
    base = (base or config.DESIGNS_BASE).rstrip("/")
    return _read_asset(base, design_file(design_id), f"design {design_id}")


def load_font_file(font_key: str, base: str = None) -> bytes:
    """
    Load the TTF of a font key from FONTS_DIR (a directory or an http(s) base URL).

    Raises:
        KeyError: If the font key is not in FONTS.
        BackendError: If the file cannot be read or downloaded.
    """
    name = FONTS[font_key]["file"]
    base = (base or config.FONTS_DIR).rstrip("/")
    return _read_asset(base, name, f"font {font_key}")
