"""
Render the authorization letter for a completed consent form.

The letter is a fixed US-letter layout (850x1100 at the default config) drawn
with Pillow: a static template with the form values dropped into label/value
slots, exported as a JPEG. Text coordinates are baselines, the way a browser
canvas places them; Pillow anchors handle that directly.
"""

from __future__ import annotations

import datetime as dt
import io
import logging
import re
from dataclasses import dataclass

from PIL import Image, ImageDraw, ImageFont

from consent.config import DEFAULT_FORM_CONFIG, FormConfig
from consent.data_models import FormRecord

logger = logging.getLogger(__name__)

FONT_SIZE = 14
HEADING_FONT_SIZE = 22
LABEL_X = 60
VALUE_X = 160
BULLET_X = 80

_FALLBACK_REGULAR = ("arial.ttf", "DejaVuSans.ttf")
_FALLBACK_BOLD = ("arialbd.ttf", "DejaVuSans-Bold.ttf")

Font = ImageFont.FreeTypeFont | ImageFont.ImageFont


def format_letter_date(value: dt.date, config: FormConfig = DEFAULT_FORM_CONFIG) -> str:
    return f"{config.month_names[value.month - 1]} {value.day}, {value.year}"


def export_filename(full_name: str, config: FormConfig = DEFAULT_FORM_CONFIG) -> str:
    sanitized = re.sub(r"\s+", "_", full_name.strip())
    if not sanitized:
        return f"{config.default_export_name}.jpg"
    return f"{config.default_export_name}_{sanitized}.jpg"


def _load_font(candidates: tuple[str, ...], size: int) -> Font:
    for path in candidates:
        if not path:
            continue
        try:
            return ImageFont.truetype(path, size=size)
        except OSError:
            continue
    logger.debug("No TrueType font found among %s, using Pillow default", candidates)
    return ImageFont.load_default(size=size)


@dataclass(frozen=True)
class LetterFonts:
    regular: Font
    bold: Font
    heading: Font

    @classmethod
    def load(cls, font_path: str = "", bold_font_path: str = "") -> LetterFonts:
        return cls(
            regular=_load_font((font_path, *_FALLBACK_REGULAR), FONT_SIZE),
            bold=_load_font((bold_font_path, *_FALLBACK_BOLD), FONT_SIZE),
            heading=_load_font((bold_font_path, *_FALLBACK_BOLD), HEADING_FONT_SIZE),
        )


class LetterRenderer:
    def __init__(
        self,
        fonts: LetterFonts | None = None,
        company_name: str = "Clutch Technologies Inc.",
        recipient: str = "Access Nova Scotia",
        config: FormConfig = DEFAULT_FORM_CONFIG,
    ) -> None:
        self.fonts = fonts or LetterFonts.load()
        self.company_name = company_name
        self.recipient = recipient
        self.config = config

    def _text(self, draw: ImageDraw.ImageDraw, x: float, y: float, text: str, font: Font, anchor: str = "ls") -> None:
        draw.text((x, y), text, fill="#000000", font=font, anchor=anchor)

    def _field(self, draw: ImageDraw.ImageDraw, y: int, label: str, value: str, value_x: int = VALUE_X) -> None:
        self._text(draw, LABEL_X, y, label, self.fonts.bold)
        self._text(draw, value_x, y, value, self.fonts.regular)

    def _bullets(self, draw: ImageDraw.ImageDraw, y: int, items: tuple[str, ...], step: int = 20) -> int:
        for item in items:
            self._text(draw, BULLET_X, y, f"•  {item}", self.fonts.regular)
            y += step
        return y - step

    def draw(self, record: FormRecord) -> Image.Image:
        width, height = self.config.canvas_size
        image = Image.new("RGB", (width, height), color="#ffffff")
        draw = ImageDraw.Draw(image)

        y = 80
        heading = "AUTHORIZATION LETTER"
        self._text(draw, width / 2, y, heading, self.fonts.heading, anchor="ms")
        draw.line([(250, y + 5), (600, y + 5)], fill="#000000", width=1)

        y += 50
        self._field(draw, y, "Full Name:", record.full_name)
        y += 25
        self._field(draw, y, "Address:", record.address)
        y += 25
        self._field(draw, y, "Date:", format_letter_date(record.date, self.config))
        y += 40

        self._text(draw, LABEL_X, y, f"To: {self.recipient}", self.fonts.bold)
        y += 30
        self._text(
            draw,
            LABEL_X,
            y,
            f"I, {record.full_name}, authorize an employee of {self.company_name}, to act",
            self.fonts.regular,
        )
        y += 20
        self._text(draw, LABEL_X, y, "on my behalf for the purpose of:", self.fonts.regular)
        y += 25
        y = self._bullets(
            draw,
            y,
            (
                "Registering the vehicle listed below",
                "Obtaining new licence plates",
                "Submitting or receiving relevant documentation",
            ),
        )
        y += 35

        self._text(draw, LABEL_X, y, "Vehicle Information:", self.fonts.bold)
        y += 25
        self._field(draw, y, "Year:", record.year)
        y += 20
        self._field(draw, y, "Make & Model:", record.make_model, value_x=180)
        y += 20
        self._field(draw, y, "VIN:", record.vin)
        y += 35

        self._text(draw, LABEL_X, y, "Documents Provided:", self.fonts.bold)
        y += 25
        y = self._bullets(
            draw,
            y,
            ("Copy of valid driver license", "Proof of insurance", "Vehicle registration"),
        )
        y += 30

        clause = (
            "I understand that I am responsible for all transactions completed on my behalf. By signing this",
            f"form, the customer authorizes {self.company_name} to charge the customer's credit card for",
            "plating services, including any applicable taxes or fees.",
        )
        for line in clause:
            self._text(draw, LABEL_X, y, line, self.fonts.regular)
            y += 18
        y += 22

        self._text(draw, LABEL_X, y, "Signature (Digital):", self.fonts.bold)
        draw.line([(200, y), (420, y)], fill="#000000", width=1)
        self._text(draw, 480, y, "Printed Name:", self.fonts.bold)
        draw.line([(590, y), (780, y)], fill="#000000", width=1)
        return image

    def render(self, record: FormRecord) -> bytes:
        """Draw ``record`` and return the letter as JPEG bytes."""
        image = self.draw(record)
        buffer = io.BytesIO()
        image.save(buffer, format="JPEG", quality=self.config.jpeg_quality)
        return buffer.getvalue()
