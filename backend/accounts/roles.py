"""Coarse authorization roles.

Every stored ``User.utype`` maps to exactly one ``Role``; everything the
application grants (dashboard tasks, route prefixes, API permissions) is
keyed by the role, never by the raw tag.
"""
from __future__ import annotations

import enum
from typing import Optional


class Role(str, enum.Enum):
    ADMIN = 'ADMIN'
    ENTRY = 'ENTRY'
    VIEWER = 'VIEWER'
    SEARCHER = 'SEARCHER'
    SELF_SERVICE = 'SELF_SERVICE'

    @property
    def label(self) -> str:
        return _LABELS[self]

    @classmethod
    def from_utype(cls, utype: Optional[str]) -> 'Role':
        return _UTYPE_ROLES.get(normalize_user_type(utype), cls.SELF_SERVICE)


_LABELS = {
    Role.ADMIN: 'Administrator',
    Role.ENTRY: 'Entry operator',
    Role.VIEWER: 'Viewer',
    Role.SEARCHER: 'Searcher',
    Role.SELF_SERVICE: 'User',
}

_UTYPE_ROLES = {
    'ADMIN': Role.ADMIN,
    'ENTRY': Role.ENTRY,
    'VIEWER': Role.VIEWER,
    'ACADEMIC': Role.VIEWER,
    'NONACADEMIC': Role.VIEWER,
    'SEARCHER': Role.SEARCHER,
    'GOOGLEUSER': Role.SELF_SERVICE,
    'STUDENT': Role.SELF_SERVICE,
    'USER': Role.SELF_SERVICE,
}

ALL_ROLES = frozenset(Role)
OPERATOR_ROLES = frozenset({Role.ADMIN, Role.ENTRY, Role.VIEWER, Role.SEARCHER})


def normalize_user_type(utype: Optional[str]) -> str:
    """'non_academic', 'Non-Academic' and 'NONACADEMIC' all compare equal."""
    if not utype:
        return ''
    return str(utype).replace('_', '').replace('-', '').replace(' ', '').strip().upper()


def is_academic_user_type(utype: Optional[str]) -> bool:
    return normalize_user_type(utype) == 'ACADEMIC'


def is_non_academic_user_type(utype: Optional[str]) -> bool:
    return normalize_user_type(utype) == 'NONACADEMIC'


def role_of(user) -> Optional[Role]:
    if user is None or not getattr(user, 'is_authenticated', False):
        return None
    return Role.from_utype(getattr(user, 'utype', None))
