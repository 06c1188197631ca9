"""Vehicle registration certificates (PDF) stored on disk.

Layout under ``GATEPASS_CERTIFICATE_ROOT``::

    Student/<faculty>/<20yy>/      students, grouped by registration number
    Staff/<Category>/<id>/         permanent / temporary / casual / contract / institute
    Visitor/<id>/
    Misc/<id>/

File names are ``<safeId>_<safeVehicleNo>_<millis>_<originalName>``, which is
what ties a certificate to a person and a vehicle.
"""
from __future__ import annotations

import logging
import os
import re
import time
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from django.conf import settings

from people.services.students import split_reg_no

logger = logging.getLogger(__name__)

PDF_CONTENT_TYPE = 'application/pdf'
STAFF_CATEGORIES = ('permanent', 'temporary', 'casual', 'contract', 'institute')

_UNSAFE = re.compile(r'[^A-Za-z0-9._-]')


class CertificateError(Exception):
    pass


def sanitize(value: Optional[str]) -> str:
    if value is None:
        return 'unknown'
    return _UNSAFE.sub('_', str(value))


def _root() -> Path:
    return Path(settings.GATEPASS_CERTIFICATE_ROOT)


def relative_dir(category: str, person_id: str) -> Path:
    category = (category or '').strip().lower()
    if category == 'student':
        faculty, year = split_reg_no(person_id)
        return Path('Student') / sanitize(faculty) / sanitize(year)
    if category in STAFF_CATEGORIES:
        return Path('Staff') / category.capitalize() / sanitize(person_id)
    if category == 'visitor':
        return Path('Visitor') / sanitize(person_id)
    return Path('Misc') / sanitize(person_id)


def directory_for(category: str, person_id: str) -> Path:
    return _root() / relative_dir(category, person_id)


def _owned_by(name: str, person_id: str) -> bool:
    # Student folders are shared by a whole intake year.
    return name.startswith(f'{sanitize(person_id)}_')


def validate_upload(uploaded) -> None:
    if uploaded is None or not getattr(uploaded, 'size', 0):
        raise CertificateError('Certificate file is required')
    if getattr(uploaded, 'content_type', None) != PDF_CONTENT_TYPE:
        raise CertificateError('Only PDF files are allowed')
    if uploaded.size > settings.GATEPASS_CERTIFICATE_MAX_BYTES:
        limit_mb = settings.GATEPASS_CERTIFICATE_MAX_BYTES // (1024 * 1024)
        raise CertificateError(f'Certificate exceeds {limit_mb} MB')


def save_certificate(uploaded, category: str, person_id: str, vehicle_no: str) -> Path:
    """Store an uploaded PDF and return its path. Raises ``CertificateError`` on rejection."""
    validate_upload(uploaded)

    directory = directory_for(category, person_id)
    directory.mkdir(parents=True, exist_ok=True)
    original = os.path.basename(uploaded.name or 'certificate.pdf')
    filename = '_'.join([
        sanitize(person_id),
        sanitize(vehicle_no),
        str(int(time.time() * 1000)),
        sanitize(original),
    ])
    target = directory / filename
    with open(target, 'wb') as handle:
        for chunk in uploaded.chunks():
            handle.write(chunk)
    logger.info('Certificate stored: %s', target)
    return target


def list_certificates(category: str, person_id: str) -> List[str]:
    directory = directory_for(category, person_id)
    if not directory.is_dir():
        return []
    return sorted(
        entry.name
        for entry in directory.iterdir()
        if entry.is_file() and _owned_by(entry.name, person_id)
    )


def _vehicle_prefix(person_id: str, vehicle_no: str) -> str:
    return f'{sanitize(person_id)}_{sanitize(vehicle_no)}_'


def _belongs_to(name: str, prefix: str) -> bool:
    # The plate is only ever read from the fixed prefix, never from the uploaded name.
    return re.match(rf'{re.escape(prefix)}\d+_', name) is not None


def certificates_for_vehicle(category: str, person_id: str, vehicle_no: str) -> List[str]:
    prefix = _vehicle_prefix(person_id, vehicle_no)
    return [name for name in list_certificates(category, person_id) if _belongs_to(name, prefix)]


def certificates_by_vehicle(category: str, person_id: str, vehicles: Iterable) -> Dict[str, List[str]]:
    names = list_certificates(category, person_id)
    grouped = {}
    for vehicle in vehicles:
        prefix = _vehicle_prefix(person_id, vehicle.vehicle_no)
        grouped[vehicle.vehicle_no] = [name for name in names if _belongs_to(name, prefix)]
    return grouped


def resolve(category: str, person_id: str, filename: str) -> Path:
    """Absolute path of a stored certificate; only the base name of *filename* is used."""
    name = os.path.basename((filename or '').replace('\\', '/'))
    if not name or name in ('.', '..'):
        raise CertificateError('Invalid file name')
    directory = directory_for(category, person_id).resolve()
    path = (directory / name).resolve()
    if path.parent != directory:
        raise CertificateError('Invalid file name')
    if not path.is_file():
        raise CertificateError(f'Certificate not found: {name}')
    return path


def delete_certificate(category: str, person_id: str, filename: str) -> bool:
    try:
        path = resolve(category, person_id, filename)
    except CertificateError:
        return False
    path.unlink()
    logger.info('Certificate deleted: %s', path)
    return True


def rename_for_vehicle(category: str, person_id: str, old_vehicle_no: str, new_vehicle_no: str) -> int:
    old_prefix = _vehicle_prefix(person_id, old_vehicle_no)
    new_prefix = _vehicle_prefix(person_id, new_vehicle_no)
    if old_prefix == new_prefix:
        return 0
    directory = directory_for(category, person_id)
    renamed = 0
    for name in certificates_for_vehicle(category, person_id, old_vehicle_no):
        os.replace(directory / name, directory / (new_prefix + name[len(old_prefix):]))
        renamed += 1
    return renamed


def delete_for_vehicle(category: str, person_id: str, vehicle_no: str) -> int:
    directory = directory_for(category, person_id)
    removed = 0
    for name in certificates_for_vehicle(category, person_id, vehicle_no):
        (directory / name).unlink(missing_ok=True)
        removed += 1
    return removed
