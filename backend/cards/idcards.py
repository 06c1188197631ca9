"""Printable staff ID cards rendered with Pillow."""
from __future__ import annotations

import io
import logging
from functools import lru_cache
from pathlib import Path
from typing import Optional

from django.conf import settings
from PIL import Image, ImageDraw, ImageFont, UnidentifiedImageError

from people.services.staff_detail import StaffDetail, staff_detail

from . import images

logger = logging.getLogger(__name__)

CARD_WIDTH = 1190
CARD_HEIGHT = 754

PHOTO_X, PHOTO_Y = 20, 50
PHOTO_WIDTH, PHOTO_HEIGHT = 288, 376
PHOTO_INSET = 3

TEXT_X = 420
EXPIRY_VALUE_X = 560

MAROON = (128, 0, 0)
BLACK = (0, 0, 0)
WHITE = (255, 255, 255)
GRAY = (128, 128, 128)
PLACEHOLDER = (240, 240, 240)
FRAME = (200, 200, 200)

TITLE = 'UNIVERSITY OF PERADENIYA'
SIGNATURE_LABEL = 'Authorized Signature'
NOTICE = (
    'This card is the property of the University of Peradeniya. '
    'If found, please return to the Security Office.'
)

PHOTO_CATEGORIES = ('Staff', 'Permanent', 'Temporary')


class UnknownStaffError(LookupError):
    pass


@lru_cache(maxsize=16)
def _font(size: int, bold: bool = False):
    name = settings.GATEPASS_IDCARD_FONT_BOLD if bold else settings.GATEPASS_IDCARD_FONT
    try:
        return ImageFont.truetype(name, size)
    except OSError:
        return ImageFont.load_default(size=size)


def _background(path: Optional[Path]) -> Optional[Image.Image]:
    if not path:
        return None
    try:
        with Image.open(path) as source:
            return source.convert('RGB').resize((CARD_WIDTH, CARD_HEIGHT))
    except (OSError, UnidentifiedImageError):
        logger.debug('Could not load card background: %s', path)
        return None


def _blank_front() -> Image.Image:
    card = Image.new('RGB', (CARD_WIDTH, CARD_HEIGHT), WHITE)
    draw = ImageDraw.Draw(card)
    draw.rectangle((0, 0, CARD_WIDTH, 40), fill=MAROON)
    draw.text((400, 28), TITLE, font=_font(18, bold=True), fill=WHITE, anchor='ls')
    return card


def _photo(staff: StaffDetail) -> Optional[Image.Image]:
    for category in (staff.category, *PHOTO_CATEGORIES):
        path = images.profile_image_path(category, staff.emp_no)
        if path is None:
            continue
        try:
            with Image.open(path) as source:
                return source.convert('RGB')
        except (OSError, UnidentifiedImageError):
            logger.debug('Could not load photo for %s in %s', staff.emp_no, category)
    return None


def _draw_photo(card: Image.Image, staff: StaffDetail) -> None:
    draw = ImageDraw.Draw(card)
    box = (PHOTO_X, PHOTO_Y, PHOTO_X + PHOTO_WIDTH, PHOTO_Y + PHOTO_HEIGHT)
    draw.rectangle(box, fill=WHITE)

    inner = (PHOTO_WIDTH - 2 * PHOTO_INSET, PHOTO_HEIGHT - 2 * PHOTO_INSET)
    photo = _photo(staff)
    if photo is not None:
        card.paste(photo.resize(inner), (PHOTO_X + PHOTO_INSET, PHOTO_Y + PHOTO_INSET))
    else:
        draw.rectangle(
            (PHOTO_X + PHOTO_INSET, PHOTO_Y + PHOTO_INSET,
             PHOTO_X + PHOTO_INSET + inner[0], PHOTO_Y + PHOTO_INSET + inner[1]),
            fill=PLACEHOLDER,
        )
        draw.text((PHOTO_X + 90, PHOTO_Y + 190), 'No Photo', font=_font(14), fill=GRAY, anchor='ls')

    draw.rectangle(box, outline=FRAME, width=3)


def _wrapped(draw: ImageDraw.ImageDraw, text: str, x: int, y: int, max_width: int, line_height: int, font):
    line = ''
    for word in text.split(' '):
        candidate = f'{line} {word}' if line else word
        if line and draw.textlength(candidate, font=font) > max_width:
            draw.text((x, y), line, font=font, fill=BLACK, anchor='ls')
            line = word
            y += line_height
        else:
            line = candidate
    if line:
        draw.text((x, y), line, font=font, fill=BLACK, anchor='ls')


def _png(card: Image.Image) -> bytes:
    buffer = io.BytesIO()
    card.save(buffer, format='PNG')
    return buffer.getvalue()


def _lookup(emp_no: str) -> StaffDetail:
    staff = staff_detail(emp_no)
    if staff is None:
        raise UnknownStaffError(emp_no)
    return staff


def render_front(emp_no: str) -> bytes:
    """Front side PNG. Raises ``UnknownStaffError`` when no staff record matches."""
    staff = _lookup(emp_no)
    card = _background(settings.GATEPASS_IDCARD_FRONT_BG) or _blank_front()
    _draw_photo(card, staff)

    draw = ImageDraw.Draw(card)
    regular = _font(18)
    draw.text((TEXT_X, 180), staff.emp_name, font=_font(20, bold=True), fill=BLACK, anchor='ls')
    draw.text((TEXT_X, 230), staff.designation, font=regular, fill=BLACK, anchor='ls')
    draw.text((TEXT_X, 280), f'NIC: {staff.nic}', font=regular, fill=BLACK, anchor='ls')
    draw.text((TEXT_X, 330), f'Emp No: {staff.emp_no}', font=regular, fill=BLACK, anchor='ls')

    expiry = staff.expiry_date
    draw.text((TEXT_X, 380), 'Expiry:', font=_font(18, bold=True), fill=BLACK, anchor='ls')
    draw.text(
        (EXPIRY_VALUE_X, 380),
        expiry.isoformat() if expiry else 'N/A',
        font=regular, fill=BLACK, anchor='ls',
    )
    return _png(card)


def render_back(emp_no: str) -> bytes:
    _lookup(emp_no)
    card = _background(settings.GATEPASS_IDCARD_BACK_BG) or Image.new('RGB', (CARD_WIDTH, CARD_HEIGHT), WHITE)
    draw = ImageDraw.Draw(card)

    label_font = _font(20, bold=True)
    label_x = int((CARD_WIDTH - draw.textlength(SIGNATURE_LABEL, font=label_font)) / 2)
    draw.text((label_x, 240), SIGNATURE_LABEL, font=label_font, fill=BLACK, anchor='ls')
    draw.line((350, 200, 840, 200), fill=BLACK, width=2)

    _wrapped(draw, NOTICE, 60, 380, 1060, 20, _font(18, bold=True))
    return _png(card)
