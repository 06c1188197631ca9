"""Profile photos kept on disk under ``GATEPASS_IMAGE_ROOT``.

One current photo per person at ``<Student|Staff|Visitor>/<safeId><ext>``;
replaced photos move to ``Old/<safeId>_<yyyymmdd_HHMMSS><ext>``.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from django.conf import settings
from django.utils import timezone

logger = logging.getLogger(__name__)

EXTENSIONS = ('.jpg', '.jpeg', '.png', '.gif')
CATEGORY_DIRS = ('Student', 'Staff', 'Visitor')
ARCHIVE_DIR = 'Old'
URL_PREFIX = '/uploads/images/'


class ImageError(Exception):
    pass


@dataclass(frozen=True)
class StoredImage:
    name: str
    url: str
    size: int
    modified: float


def safe_id(person_id) -> str:
    return str(person_id or '').strip().replace('/', '_').replace('\\', '_')


def category_dir(category: Optional[str]) -> str:
    category = (category or '').strip().lower()
    if category == 'student':
        return 'Student'
    if category in ('visitor', 'visit'):
        return 'Visitor'
    return 'Staff'


def _root() -> Path:
    return Path(settings.GATEPASS_IMAGE_ROOT)


def _url(relative: Path) -> str:
    return URL_PREFIX + relative.as_posix()


def profile_image_path(category: str, person_id) -> Optional[Path]:
    name = safe_id(person_id)
    if not name:
        return None
    directory = _root() / category_dir(category)
    for ext in EXTENSIONS:
        candidate = directory / f'{name}{ext}'
        if candidate.is_file():
            return candidate
    return None


def profile_image_url(category: str, person_id) -> Optional[str]:
    path = profile_image_path(category, person_id)
    if path is None:
        return None
    return _url(path.relative_to(_root()))


def _extension(uploaded) -> str:
    ext = os.path.splitext(uploaded.name or '')[1].lower()
    if ext not in EXTENSIONS:
        raise ImageError('Only JPG, PNG and GIF images are allowed')
    return ext


def _archive(current: Path, name: str) -> Path:
    archive = _root() / ARCHIVE_DIR
    archive.mkdir(parents=True, exist_ok=True)
    stamp = timezone.localtime().strftime('%Y%m%d_%H%M%S')
    target = archive / f'{name}_{stamp}{current.suffix}'
    os.replace(current, target)
    logger.info('Archived profile image %s -> %s', current, target)
    return target


def save_profile_image(uploaded, category: str, person_id) -> str:
    """Store *uploaded* as the person's photo, archiving the previous one. Returns its URL."""
    name = safe_id(person_id)
    if not name:
        raise ImageError('Person id is required')
    if uploaded is None or not getattr(uploaded, 'size', 0):
        raise ImageError('Please select an image to upload')
    if not (getattr(uploaded, 'content_type', '') or '').startswith('image/'):
        raise ImageError('Only image files are allowed')
    if uploaded.size > settings.GATEPASS_IMAGE_MAX_BYTES:
        limit_mb = settings.GATEPASS_IMAGE_MAX_BYTES // (1024 * 1024)
        raise ImageError(f'Image exceeds {limit_mb} MB')
    ext = _extension(uploaded)

    current = profile_image_path(category, person_id)
    if current is not None:
        _archive(current, name)

    directory = _root() / category_dir(category)
    directory.mkdir(parents=True, exist_ok=True)
    target = directory / f'{name}{ext}'
    with open(target, 'wb') as handle:
        for chunk in uploaded.chunks():
            handle.write(chunk)
    logger.info('Profile image stored: %s', target)
    return _url(target.relative_to(_root()))


def delete_profile_image(category: str, person_id) -> bool:
    """Move the current photo to the archive; False when there is none."""
    current = profile_image_path(category, person_id)
    if current is None:
        return False
    _archive(current, safe_id(person_id))
    return True


def list_archived(person_id) -> List[StoredImage]:
    directory = _root() / ARCHIVE_DIR
    prefix = f'{safe_id(person_id)}_'
    if not directory.is_dir() or prefix == '_':
        return []
    images = []
    for entry in directory.iterdir():
        if entry.is_file() and entry.name.startswith(prefix) and entry.suffix.lower() in EXTENSIONS:
            stat = entry.stat()
            images.append(StoredImage(
                name=entry.name,
                url=_url(entry.relative_to(_root())),
                size=stat.st_size,
                modified=stat.st_mtime,
            ))
    return sorted(images, key=lambda image: image.modified, reverse=True)


def resolve_upload(relative: str) -> Path:
    """Absolute path for a ``/uploads/images/`` request; refuses anything outside the image root."""
    root = _root().resolve()
    path = (root / (relative or '')).resolve()
    if root not in path.parents or not path.is_file():
        raise ImageError('Image not found')
    if path.suffix.lower() not in EXTENSIONS:
        raise ImageError('Image not found')
    return path
