"""Staff profile read model used by the staff pages and the ID card."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import List, Optional

from people.models import Staff, TemporaryStaff

from . import staff as staff_store

logger = logging.getLogger(__name__)

ACADEMIC_RETIREMENT_AGE = 65
DEFAULT_RETIREMENT_AGE = 60


@dataclass
class StaffDetail:
    emp_no: str
    emp_name: str = ''
    nic: str = ''
    sex: str = ''
    date_of_birth: str = ''
    designation: str = ''
    category: str = ''
    employee_type: str = ''
    department: str = ''
    department_code: str = ''
    branch_name: str = ''
    latest_salary_date: Optional[date] = None
    image_url: str = ''
    is_temporary: bool = False

    @property
    def is_academic(self) -> bool:
        return 'academic' in (self.employee_type.strip().lower(), self.category.strip().lower())

    @property
    def retirement_age(self) -> int:
        return ACADEMIC_RETIREMENT_AGE if self.is_academic else DEFAULT_RETIREMENT_AGE

    @property
    def gender_display(self) -> str:
        return {'M': 'Male', 'F': 'Female'}.get(self.sex.strip().upper(), self.sex)

    @property
    def expiry_date(self) -> Optional[date]:
        """Card expiry: date of birth plus the retirement age, None when the DOB is unusable."""
        try:
            born = datetime.strptime(self.date_of_birth.strip(), '%Y-%m-%d').date()
        except ValueError:
            return None
        try:
            return born.replace(year=born.year + self.retirement_age)
        except ValueError:
            # 29 February
            return born.replace(year=born.year + self.retirement_age, day=28)

    @property
    def certificate_category(self) -> str:
        return self.category or 'Staff'


def _text(value) -> str:
    return '' if value is None else str(value)


def _profile_image_url(category: str, emp_no: str) -> str:
    from cards.images import profile_image_url

    return profile_image_url(category, emp_no) or profile_image_url('Staff', emp_no) or ''


def from_permanent(row: Staff) -> StaffDetail:
    return StaffDetail(
        emp_no=row.emp_no,
        emp_name=_text(row.emp_name),
        nic=_text(row.nic),
        sex=_text(row.sex),
        date_of_birth=_text(row.date_of_birth),
        designation=_text(row.designation),
        category=_text(row.category),
        employee_type=_text(row.employee_type),
        department=_text(row.department),
        department_code=_text(row.department_code),
        branch_name=_text(row.branch_name),
        latest_salary_date=row.salary_date,
        image_url=_profile_image_url('Permanent', row.emp_no),
    )


def from_temporary(row: TemporaryStaff) -> StaffDetail:
    return StaffDetail(
        emp_no=row.emp_no,
        emp_name=_text(row.emp_name),
        nic=_text(row.nic),
        sex=_text(row.sex),
        date_of_birth=_text(row.date_of_birth),
        designation=_text(row.designation),
        category=_text(row.category),
        employee_type=_text(row.employee_type),
        department=_text(row.department),
        department_code=_text(row.department_code),
        latest_salary_date=row.salary_date,
        image_url=_profile_image_url(row.category, row.emp_no),
        is_temporary=True,
    )


def staff_detail(emp_no: str) -> Optional[StaffDetail]:
    """Permanent staff first, then temporary/casual/contract/institute."""
    emp_no = (emp_no or '').strip()
    if not emp_no:
        return None
    permanent = staff_store.latest_by_emp_no(emp_no)
    if permanent is not None:
        return from_permanent(permanent)
    temporary = staff_store.first_by_emp_no(emp_no)
    if temporary is not None:
        return from_temporary(temporary)
    return None


def search_staff(query: str) -> List[StaffDetail]:
    """Name search over both feeds; falls back to an exact employee number."""
    query = (query or '').strip()
    if not query:
        return []
    results = [from_permanent(row) for row in staff_store.search_by_name(query)]
    results.extend(from_temporary(row) for row in staff_store.search_temporary_by_name(query))
    if not results:
        exact = staff_detail(query)
        if exact is not None:
            results.append(exact)
    return results
