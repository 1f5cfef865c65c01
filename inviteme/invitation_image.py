import io
import logging
import math

from bidi.algorithm import get_display
from PIL import Image, ImageDraw, ImageFont, UnidentifiedImageError, features

from .designs import FONTS, load_font_file
from .exceptions import BackendError

logger = logging.getLogger(__name__)

FONT_SIZE_RATIO = 0.04  # of the image height
LINE_HEIGHT_RATIO = 1.4
TEXT_COLOR = (0, 0, 0)
JPEG_QUALITY = 90


def load_font(font_key: str, size: int, fonts_dir: str = None):
    """
    Load the TrueType font for a font key from the fonts directory.

    Raises:
        KeyError: If the font key is unknown.
        BackendError: If the font file is missing or not a valid font.
    """
    if font_key not in FONTS:
        raise KeyError(f"Unknown font {font_key}")
    data = load_font_file(font_key, fonts_dir)
    try:
        return ImageFont.truetype(io.BytesIO(data), size)
    except OSError as e:
        raise BackendError(f"Error loading font {font_key}: {str(e)}") from e


def _uses_raqm(font) -> bool:
    return features.check("raqm") and getattr(font, "layout_engine", None) == ImageFont.Layout.RAQM


def compose_invitation(background: bytes, text: str, font_key: str, fonts_dir: str = None) -> bytes:
    """
    Draw the invitation text centred over a background design.

    Lines are laid out right to left: by libraqm when Pillow has it, otherwise
    each line is reordered into visual order before drawing.

    Args:
        background (bytes): The design image.
        text (str): Invitation text, lines separated by "\\n".
        font_key (str): One of FONTS.
        fonts_dir (str): Directory or http(s) base holding the TTF files.

    Returns:
        bytes: The composed invitation as JPEG.
    """
    try:
        image = Image.open(io.BytesIO(background)).convert("RGB")
    except (UnidentifiedImageError, OSError) as e:
        raise BackendError(f"Error loading design image: {str(e)}") from e

    width, height = image.size
    font_size = max(1, math.floor(height * FONT_SIZE_RATIO))
    font = load_font(font_key, font_size, fonts_dir)
    uses_raqm = _uses_raqm(font)
    if not uses_raqm:
        logger.debug("libraqm not available, reordering invitation lines with python-bidi")

    lines = (text or " ").split("\n")
    line_height = font_size * LINE_HEIGHT_RATIO
    start_y = (height - line_height * len(lines)) / 2

    draw = ImageDraw.Draw(image)
    for idx, line in enumerate(lines):
        line = line.strip()
        if not line:
            continue
        position = (width / 2, start_y + idx * line_height)
        if uses_raqm:
            draw.text(position, line, font=font, fill=TEXT_COLOR, anchor="mm", direction="rtl")
        else:
            draw.text(position, get_display(line, base_dir="R"), font=font, fill=TEXT_COLOR, anchor="mm")

    output = io.BytesIO()
    image.save(output, format="JPEG", quality=JPEG_QUALITY)
    return output.getvalue()
