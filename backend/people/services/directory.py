"""Person dropdowns for the vehicle entry form, scoped by the operator's user type."""
from __future__ import annotations

import logging
from typing import List, Optional

from accounts.roles import is_academic_user_type, is_non_academic_user_type
from people.models import Staff

from . import staff as staff_store
from . import visitors as visitor_store
from .students import PersonOption

logger = logging.getLogger(__name__)

PERMANENT = 'permanent'
VISITOR = 'visitor'
TEMPORARY_CATEGORIES = ('temporary', 'casual', 'contract', 'institute')


def _is_scoped(utype: Optional[str]) -> bool:
    return is_academic_user_type(utype) or is_non_academic_user_type(utype)


def is_category_allowed(category: Optional[str], utype: Optional[str]) -> bool:
    """Academic and non-academic accounts only ever see permanent staff."""
    if not category or not category.strip():
        return True
    if _is_scoped(utype):
        return category.strip().lower() == PERMANENT
    return True


def can_view_permanent(staff: Optional[Staff], utype: Optional[str]) -> bool:
    if staff is None:
        return False
    employee_type = (staff.employee_type or '').strip().lower()
    non_academic = employee_type == Staff.NON_ACADEMIC.lower()
    if is_non_academic_user_type(utype):
        return non_academic
    if is_academic_user_type(utype):
        return not non_academic
    return True


def _permanent_rows(utype: Optional[str]):
    if is_non_academic_user_type(utype):
        return staff_store.all_latest_non_academic()
    if is_academic_user_type(utype):
        return staff_store.all_latest_academic()
    return staff_store.all_latest()


def list_persons(category: str, utype: Optional[str] = None) -> List[PersonOption]:
    category = (category or '').strip().lower()
    if not is_category_allowed(category, utype):
        return []
    try:
        if category == PERMANENT:
            return [
                PersonOption(row.emp_no, f'{row.emp_no} - {row.emp_name or ""} (Permanent)')
                for row in _permanent_rows(utype)
            ]
        if category in TEMPORARY_CATEGORIES:
            return [
                PersonOption(row.emp_no, f'{row.emp_no} - {row.emp_name or ""} ({row.category})')
                for row in staff_store.by_category(category)
            ]
        if category == VISITOR:
            return [
                PersonOption(str(row.id), f'{row.id} - {row.name} (Visitor)')
                for row in visitor_store.all_newest_first()
            ]
    except Exception:
        logger.exception('Listing persons failed for category=%s utype=%s', category, utype)
        return []
    return []
