"""Database dumps written to ``GATEPASS_BACKUP_ROOT``.

The dump runs ``GATEPASS_DUMP_BINARY`` (``mysqldump`` or ``pg_dump``) against
the default connection. The password is handed over through the client's
environment variable, never on the command line.
"""
from __future__ import annotations

import logging
import os
import re
import subprocess
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import List, Tuple

from django.conf import settings
from django.db import connections
from django.utils import timezone

logger = logging.getLogger(__name__)

SUFFIX = '.sql'
_UNSAFE = re.compile(r'[^A-Za-z0-9_-]')


class BackupError(Exception):
    pass


@dataclass(frozen=True)
class BackupInfo:
    filename: str
    size_bytes: int
    modified: datetime

    @property
    def formatted_size(self) -> str:
        if self.size_bytes < 1024:
            return f'{self.size_bytes} B'
        if self.size_bytes < 1024 * 1024:
            return f'{self.size_bytes / 1024:.1f} KB'
        return f'{self.size_bytes / (1024 * 1024):.1f} MB'


def _root() -> Path:
    return Path(settings.GATEPASS_BACKUP_ROOT)


def dump_command(db: dict) -> Tuple[List[str], dict]:
    """argv and extra environment for dumping the connection described by *db*."""
    binary = settings.GATEPASS_DUMP_BINARY
    vendor = db['ENGINE'].rsplit('.', 1)[-1]
    env = {}
    if vendor == 'mysql':
        argv = [binary, '-u', db.get('USER') or '', '-h', db.get('HOST') or 'localhost']
        if db.get('PORT'):
            argv += ['-P', str(db['PORT'])]
        argv += ['--single-transaction', '--routines', '--triggers', str(db['NAME'])]
        if db.get('PASSWORD'):
            env['MYSQL_PWD'] = db['PASSWORD']
    elif vendor in ('postgresql', 'postgis'):
        argv = [binary, '-U', db.get('USER') or '', '-h', db.get('HOST') or 'localhost']
        if db.get('PORT'):
            argv += ['-p', str(db['PORT'])]
        argv.append(str(db['NAME']))
        if db.get('PASSWORD'):
            env['PGPASSWORD'] = db['PASSWORD']
    else:
        raise BackupError(f'Backups are not supported for the {vendor} backend')
    return argv, env


def create_backup(alias: str = 'default') -> Path:
    """Dump the database to ``<db>_<yyyy-mm-dd_HH-MM-SS>.sql``; the partial file is removed on failure."""
    db = connections[alias].settings_dict
    argv, extra_env = dump_command(db)

    root = _root()
    root.mkdir(parents=True, exist_ok=True)
    stamp = timezone.localtime().strftime('%Y-%m-%d_%H-%M-%S')
    database = _UNSAFE.sub('_', Path(str(db['NAME'])).stem) or 'database'
    target = root / f'{database}_{stamp}{SUFFIX}'

    logger.info('Starting database backup: %s -> %s', db['NAME'], target)
    try:
        with open(target, 'wb') as output:
            result = subprocess.run(
                argv,
                stdout=output,
                stderr=subprocess.PIPE,
                env={**os.environ, **extra_env},
                check=False,
            )
    except OSError as exc:
        target.unlink(missing_ok=True)
        logger.error('Backup could not start: %s', exc)
        raise BackupError(f'Could not run {argv[0]}: {exc}') from exc

    if result.returncode != 0:
        target.unlink(missing_ok=True)
        detail = result.stderr.decode('utf-8', 'replace').strip()
        logger.error('Backup failed with exit code %s: %s', result.returncode, detail)
        raise BackupError(f'{argv[0]} failed with exit code {result.returncode}: {detail}')

    logger.info('Backup completed: %s (%s bytes)', target, target.stat().st_size)
    return target


def list_backups() -> List[BackupInfo]:
    root = _root()
    if not root.is_dir():
        return []
    backups = []
    for entry in root.iterdir():
        if entry.is_file() and entry.suffix == SUFFIX:
            stat = entry.stat()
            backups.append(BackupInfo(
                filename=entry.name,
                size_bytes=stat.st_size,
                modified=datetime.fromtimestamp(stat.st_mtime, tz=timezone.get_current_timezone()),
            ))
    return sorted(backups, key=lambda info: info.modified, reverse=True)


def backup_path(filename: str) -> Path:
    """Path of an existing backup; only the base name of *filename* is honoured."""
    name = os.path.basename((filename or '').replace('\\', '/'))
    if not name.endswith(SUFFIX) or name == SUFFIX:
        raise BackupError('Invalid backup file name')
    path = _root() / name
    if not path.is_file():
        raise BackupError(f'Backup not found: {name}')
    return path


def delete_backup(filename: str) -> bool:
    try:
        path = backup_path(filename)
    except BackupError:
        return False
    path.unlink()
    logger.info('Backup deleted: %s', path.name)
    return True
