"""Permanent and temporary staff lookups over the payroll snapshot tables."""
from __future__ import annotations

from typing import List, Optional

from django.db.models import Max, OuterRef, QuerySet, Subquery

from people.models import Staff, TemporaryStaff


def _first(queryset: QuerySet):
    rows = list(queryset[:1])
    return rows[0] if rows else None


def _latest_rows(queryset: QuerySet, *partition: str) -> QuerySet:
    """Restrict *queryset* to the newest snapshot per *partition* key."""
    model = queryset.model
    newest = (
        model.objects.filter(**{name: OuterRef(name) for name in partition})
        .order_by('-salary_date')
        .values('salary_date')[:1]
    )
    return queryset.filter(salary_date=Subquery(newest)).order_by(*partition)


# --- permanent staff -------------------------------------------------------

def latest_by_emp_no(emp_no: str) -> Optional[Staff]:
    """The employee's row at the maximum snapshot date, never an older one."""
    emp_no = (emp_no or '').strip()
    if not emp_no:
        return None
    latest = Staff.objects.filter(emp_no=emp_no).aggregate(latest=Max('salary_date'))['latest']
    if latest is None:
        return None
    return _first(Staff.objects.filter(emp_no=emp_no, salary_date=latest))


def all_latest() -> QuerySet:
    return _latest_rows(Staff.objects.all(), 'emp_no')


def all_latest_academic() -> QuerySet:
    return all_latest().exclude(employee_type=Staff.NON_ACADEMIC)


def all_latest_non_academic() -> QuerySet:
    return all_latest().filter(employee_type=Staff.NON_ACADEMIC)


def search_by_name(name: str) -> List[Staff]:
    name = (name or '').strip()
    if not name:
        return []
    return list(_latest_rows(Staff.objects.filter(emp_name__icontains=name), 'emp_no'))


# --- temporary / casual / contract / institute ------------------------------

def first_by_emp_no(emp_no: str) -> Optional[TemporaryStaff]:
    emp_no = (emp_no or '').strip()
    if not emp_no:
        return None
    return _first(TemporaryStaff.objects.filter(emp_no=emp_no).order_by('-salary_date', 'category'))


def by_category(category: str) -> QuerySet:
    """Case-insensitive prefix match: 'Temporary' also selects 'Temporary-Extended'."""
    category = (category or '').strip()
    if not category:
        return TemporaryStaff.objects.none()
    return _latest_rows(TemporaryStaff.objects.filter(category__istartswith=category), 'emp_no', 'category')


def search_temporary_by_name(name: str) -> List[TemporaryStaff]:
    name = (name or '').strip()
    if not name:
        return []
    return list(
        _latest_rows(TemporaryStaff.objects.filter(emp_name__icontains=name), 'emp_no', 'category')
    )
