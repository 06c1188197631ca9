"""QR codes pointing at the person lookup page.

Codes are rendered with ``qrcode`` (Pillow image factory). Batch generation
writes PNGs under ``GATEPASS_QR_ROOT``::

    Student/<faculty>/<20yy>/<safeId>.png
    Staff/<Permanent|Temporary|...>/<safeId>.png
    Visitor/<safeId>.png

Existing files are left alone, so a batch can be re-run safely.
"""
from __future__ import annotations

import base64
import io
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional
from urllib.parse import urlencode

import qrcode
from django.conf import settings
from qrcode.constants import ERROR_CORRECT_M

from people.services import staff as staff_store
from people.services import students, visitors

logger = logging.getLogger(__name__)

QR_SIZE = 250
QR_BORDER = 1
STAFF_TYPES = ('Permanent', 'Temporary', 'Casual', 'Contract', 'Institute', 'Visitor')

_UNSAFE = re.compile(r'[^A-Za-z0-9_-]')


@dataclass(frozen=True)
class BatchResult:
    label: str
    generated: int = 0
    skipped: int = 0

    @property
    def message(self) -> str:
        return f'{self.label} QR codes: {self.generated} generated, {self.skipped} already existed.'


def sanitize(value) -> str:
    return _UNSAFE.sub('_', str(value or ''))


def _root() -> Path:
    return Path(settings.GATEPASS_QR_ROOT)


def render_png(content: str, size: int = QR_SIZE) -> bytes:
    code = qrcode.QRCode(error_correction=ERROR_CORRECT_M, border=QR_BORDER, box_size=1)
    code.add_data(content.encode('utf-8'))
    code.make(fit=True)
    modules = code.modules_count + 2 * QR_BORDER
    code.box_size = max(1, size // modules)

    image = code.make_image(fill_color='black', back_color='white').get_image()
    if image.size != (size, size):
        image = image.resize((size, size))
    buffer = io.BytesIO()
    image.save(buffer, format='PNG')
    return buffer.getvalue()


def qr_data_uri(content: str) -> str:
    encoded = base64.b64encode(render_png(content)).decode('ascii')
    return f'data:image/png;base64,{encoded}'


def base_url(request=None) -> str:
    configured = (getattr(settings, 'GATEPASS_PUBLIC_BASE_URL', '') or '').rstrip('/')
    if configured or request is None:
        return configured
    return request.build_absolute_uri('/').rstrip('/')


def person_lookup_url(request, person_id: str, base: Optional[str] = None) -> str:
    if base is None:
        base = base_url(request)
    return f'{base}/search/person?{urlencode({"id": person_id})}'


def qr_path(folder: str, person_id: str) -> Path:
    return _root() / folder / f'{sanitize(person_id)}.png'


def save_qr(content: str, folder: str, person_id: str) -> Path:
    target = qr_path(folder, person_id)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(render_png(content))
    return target


def _batch(label: str, items: Iterable[tuple], base: str) -> BatchResult:
    generated = skipped = 0
    for folder, person_id in items:
        if not person_id:
            continue
        if qr_path(folder, person_id).exists():
            skipped += 1
            continue
        save_qr(person_lookup_url(None, person_id, base), folder, person_id)
        generated += 1
    result = BatchResult(label, generated, skipped)
    logger.info('Batch %s QR generation complete: %s generated, %s skipped', label, generated, skipped)
    return result


def _student_items():
    for reg_no in students.registered_reg_nos():
        faculty, year = students.split_reg_no(reg_no)
        yield f'Student/{sanitize(faculty)}/{sanitize(year)}', reg_no


def generate_student_batch(base: str) -> BatchResult:
    return _batch('Student', _student_items(), base)


def generate_staff_batch(staff_type: str, base: str) -> BatchResult:
    staff_type = (staff_type or '').strip().capitalize()
    if staff_type not in STAFF_TYPES:
        raise ValueError(f'Unknown staff type: {staff_type}')

    if staff_type == 'Visitor':
        items = (('Visitor', str(visitor.id)) for visitor in visitors.all_newest_first())
    elif staff_type == 'Permanent':
        items = (('Staff/Permanent', row.emp_no) for row in staff_store.all_latest())
    else:
        items = ((f'Staff/{staff_type}', row.emp_no) for row in staff_store.by_category(staff_type))
    return _batch(staff_type, items, base)
