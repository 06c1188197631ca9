"""Resolve a bare person identifier to one unified person view.

An identifier is a student registration number (``AG/23/218``), an
employee number (``12345``), a marked id (``PER_12345``, ``TEM_...``,
``INS_...``, ``VIS_42``) or a visitor id. ``plan_lookup`` decides which
stores to ask and in which order; ``resolve_person`` asks them, stops at the
first hit and attaches the person's vehicles.

A store that fails (registry unreachable, bad SQL) counts as "no match from
that store"; the lookup carries on with the remaining ones.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Callable, Dict, List, Optional, Tuple

from django.utils import timezone

from . import staff as staff_store
from . import students as student_store
from . import visitors as visitor_store

logger = logging.getLogger(__name__)

STUDENT_ID_RE = re.compile(r'^[A-Z]+/\d{2}/')

STUDENT = 'Student'
PERMANENT = 'Permanent Staff'
TEMPORARY = 'Temporary Staff'
VISITOR = 'Visitor'

PERSON_TYPES = (STUDENT, PERMANENT, TEMPORARY, VISITOR)

_MARKERS = (
    ('PER_', PERMANENT),
    ('TEM_', TEMPORARY),
    ('INS_', TEMPORARY),
    ('VIS_', VISITOR),
)

_TYPE_HINTS = {
    'student': STUDENT,
    'permanent': PERMANENT,
    'staff': PERMANENT,
    'temporary': TEMPORARY,
    'casual': TEMPORARY,
    'contract': TEMPORARY,
    'institute': TEMPORARY,
    'visitor': VISITOR,
}


@dataclass
class PersonView:
    id: str
    type: str
    name: str = ''
    designation: str = ''
    category: str = ''
    department: str = ''
    nic: str = ''
    gender: str = ''
    employee_type: str = ''
    image_url: str = ''
    faculty: str = ''
    course: str = ''
    semester: str = ''
    reason: str = ''
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    # Only set for visitors: whether the pass covers today.
    valid: Optional[bool] = None
    vehicles: List[Any] = field(default_factory=list)

    @property
    def is_student(self) -> bool:
        return self.type == STUDENT

    @property
    def is_visitor(self) -> bool:
        return self.type == VISITOR

    @property
    def is_staff(self) -> bool:
        return self.type in (PERMANENT, TEMPORARY)

    @property
    def vehicle_type_tag(self) -> str:
        """Value stored in ``Vehicle.type`` for this person's registrations."""
        if self.type == TEMPORARY:
            return (self.category or 'Temporary').split('-')[0].strip().title() or 'Temporary'
        return {STUDENT: 'Student', PERMANENT: 'Permanent', VISITOR: 'Visitor'}.get(self.type, '')

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'type': self.type,
            'name': self.name,
            'designation': self.designation,
            'category': self.category,
            'department': self.department,
            'nic': self.nic,
            'gender': self.gender,
            'employeeType': self.employee_type,
            'imageUrl': self.image_url,
            'faculty': self.faculty,
            'course': self.course,
            'semester': self.semester,
            'reason': self.reason,
            'dateFrom': self.date_from.isoformat() if self.date_from else None,
            'dateTo': self.date_to.isoformat() if self.date_to else None,
            'isValid': self.valid,
            'vehicles': [vehicle.to_dict() for vehicle in self.vehicles],
        }


def _text(value) -> str:
    return '' if value is None else str(value)


def normalize_type_hint(type_hint: Optional[str]) -> Optional[str]:
    if not type_hint:
        return None
    hint = str(type_hint).strip()
    if hint in PERSON_TYPES:
        return hint
    return _TYPE_HINTS.get(hint.lower())


def _strip_marker(identifier: str) -> Tuple[Optional[str], str]:
    for marker, kind in _MARKERS:
        if identifier.startswith(marker):
            return kind, identifier[len(marker):]
    return None, identifier


def plan_lookup(identifier: str, type_hint: Optional[str] = None) -> List[Tuple[str, str]]:
    """Ordered (store, key) pairs to try for *identifier*."""
    identifier = (identifier or '').strip()
    if not identifier:
        return []

    marker_kind, key = _strip_marker(identifier)
    hinted = normalize_type_hint(type_hint)
    if hinted:
        return [(hinted, key)]
    if STUDENT_ID_RE.match(identifier):
        return [(STUDENT, identifier)]
    if marker_kind:
        return [(marker_kind, key)]
    return [(PERMANENT, identifier), (TEMPORARY, identifier), (VISITOR, identifier)]


def student_view(reg_no: str) -> Optional[PersonView]:
    student = student_store.basic_info(reg_no)
    if student is None:
        return None
    return PersonView(
        id=student.reg_no,
        type=STUDENT,
        name=student.full_name,
        nic=student.nic,
        gender=student.gender,
        image_url=student.image_url,
        faculty=student.faculty_name,
        course=student.course_name,
        semester=student.semester_name,
    )


def permanent_view(emp_no: str) -> Optional[PersonView]:
    staff = staff_store.latest_by_emp_no(emp_no)
    if staff is None:
        return None
    return PersonView(
        id=staff.emp_no,
        type=PERMANENT,
        name=_text(staff.emp_name),
        designation=_text(staff.designation),
        category=_text(staff.category),
        department=_text(staff.department),
        nic=_text(staff.nic),
        gender=_text(staff.sex),
        employee_type=_text(staff.employee_type),
        image_url=_profile_image_url('Staff', staff.emp_no),
    )


def temporary_view(emp_no: str) -> Optional[PersonView]:
    staff = staff_store.first_by_emp_no(emp_no)
    if staff is None:
        return None
    return PersonView(
        id=staff.emp_no,
        type=TEMPORARY,
        name=_text(staff.emp_name),
        designation=_text(staff.designation),
        category=_text(staff.category),
        department=_text(staff.department),
        nic=_text(staff.nic),
        gender=_text(staff.sex),
        employee_type=_text(staff.employee_type),
        image_url=_profile_image_url('Staff', staff.emp_no),
    )


def visitor_view(visitor_id: str) -> Optional[PersonView]:
    visitor = visitor_store.by_id(visitor_id)
    if visitor is None:
        return None
    return PersonView(
        id=str(visitor.id),
        type=VISITOR,
        name=visitor.name,
        reason=visitor.reason,
        date_from=visitor.date_from,
        date_to=visitor.date_to,
        valid=visitor.is_valid_on(timezone.localdate()),
        image_url=_profile_image_url('Visitor', str(visitor.id)),
    )


_BUILDERS: Dict[str, Callable[[str], Optional[PersonView]]] = {
    STUDENT: student_view,
    PERMANENT: permanent_view,
    TEMPORARY: temporary_view,
    VISITOR: visitor_view,
}


def _profile_image_url(category: str, person_id: str) -> str:
    from cards.images import profile_image_url

    return profile_image_url(category, person_id) or ''


def _probe(kind: str, key: str) -> Optional[PersonView]:
    try:
        return _BUILDERS[kind](key)
    except Exception:
        logger.exception('%s lookup failed for %r; treating as no match', kind, key)
        return None


def load_vehicles(person_id: str) -> list:
    """The person's vehicles, newest first; a failed lookup yields []."""
    from vehicles.services import vehicles_for

    try:
        return list(vehicles_for(person_id))
    except Exception:
        logger.warning('Failed to load vehicles for %r', person_id, exc_info=True)
        return []


def resolve_person(identifier: str, type_hint: Optional[str] = None) -> Optional[PersonView]:
    """First store hit for *identifier* as a ``PersonView``, or None when nobody matches."""
    for kind, key in plan_lookup(identifier, type_hint):
        person = _probe(kind, key)
        if person is not None:
            person.vehicles = load_vehicles(person.id)
            return person
    return None
