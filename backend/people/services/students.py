"""Read-only access to the external student registry.

The registry is a separate database (``studdb``) owned by the academic
registry; we only ever SELECT from it. Tables involved:

- ``stud``        one row per registration (Reg_No, NIC, Faculty, Course, Status)
- ``studbasic``   names, gender, contact (keyed by NIC)
- ``studother``   personal and guardian details (keyed by NIC)
- ``faculty``, ``course``, ``district``  code -> name lookups
- ``studclass``   semester registrations (keyed by Reg_No)

Every value that comes back NULL is exposed as an empty string.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence
from urllib.parse import quote

from django.conf import settings
from django.db import DatabaseError, connections

logger = logging.getLogger(__name__)

STATUS_REGISTERED = 'REGISTERED'
DEFAULT_IMAGE_URL = '/static/images/user.svg'

SEMESTER_NAMES = {
    '1': 'First',
    '2': 'Second',
    '3': 'Third',
    '4': 'Fourth',
    '5': 'Fifth',
    '6': 'Sixth',
    '7': 'Seventh',
    '8': 'Eighth',
    '9': 'Ninth',
    '10': 'Tenth',
    '11': 'Eleventh',
    '12': 'Twelfth',
}


@dataclass
class StudentBasic:
    reg_no: str = ''
    nic: str = ''
    full_name: str = ''
    app_year: str = ''
    faculty: str = ''
    course: str = ''
    faculty_name: str = ''
    course_name: str = ''
    gender: str = ''
    semester_name: str = ''
    image_url: str = DEFAULT_IMAGE_URL


@dataclass
class StudentDetail:
    reg_no: str = ''
    app_year: str = ''
    faculty: str = ''
    course: str = ''
    status: str = ''
    nic: str = ''
    title: str = ''
    initials: str = ''
    last_name: str = ''
    full_name: str = ''
    gender: str = ''
    select_type: str = ''
    registered_on: str = ''
    phone: str = ''
    address1: str = ''
    address2: str = ''
    address3: str = ''
    faculty_name: str = ''
    course_name: str = ''
    district: str = ''
    date_of_birth: str = ''
    religion: str = ''
    ethnicity: str = ''
    z_score: str = ''
    police_station: str = ''
    home_phone: str = ''
    mobile: str = ''
    email: str = ''
    guardian_name: str = ''
    guardian_address: str = ''
    guardian_phone: str = ''
    guardian_relationship: str = ''
    emergency_contact_name: str = ''
    emergency_contact_phone: str = ''
    emergency_contact_relationship: str = ''
    semester: str = ''
    semester_name: str = ''
    semester_registered_on: str = ''
    semester_history: List[str] = field(default_factory=list)
    image_url: str = DEFAULT_IMAGE_URL

    @property
    def is_registered(self) -> bool:
        return self.status == STATUS_REGISTERED

    @property
    def address(self) -> str:
        return ', '.join(part for part in (self.address1, self.address2, self.address3) if part)


@dataclass(frozen=True)
class StudentLogin:
    reg_no: str
    nic: str
    last_name: str


@dataclass(frozen=True)
class PersonOption:
    """One entry of a person picker: value + human label."""
    id: str
    label: str


def get_conn():
    if 'studdb' in connections.databases:
        return connections['studdb']
    return connections['default']


def _text(value: Any) -> str:
    if value is None:
        return ''
    return str(value).strip()


def _fetch_all(sql: str, params: Sequence[Any] = ()) -> List[Dict[str, Any]]:
    with get_conn().cursor() as cursor:
        cursor.execute(sql, list(params))
        columns = [col[0] for col in cursor.description]
        return [dict(zip(columns, row)) for row in cursor.fetchall()]


def _fetch_one(sql: str, params: Sequence[Any] = ()) -> Optional[Dict[str, Any]]:
    rows = _fetch_all(sql, params)
    return rows[0] if rows else None


def semester_name(raw: Any) -> str:
    """'1'..'12' -> 'First'..'Twelfth'; anything else is returned as given."""
    value = _text(raw)
    return SEMESTER_NAMES.get(value, value)


def image_url(reg_no: Optional[str]) -> str:
    reg_no = _text(reg_no)
    if not reg_no:
        return DEFAULT_IMAGE_URL
    return f'{settings.GATEPASS_STUDENT_IMAGE_URL}{quote(reg_no, safe="")}'


def split_reg_no(reg_no: str):
    """'AG/23/218' -> ('AG', '2023'); two-digit years are taken as 20xx."""
    parts = _text(reg_no).split('/')
    faculty = parts[0] if parts and parts[0] else 'UNKNOWN'
    year = parts[1] if len(parts) > 1 and parts[1] else '0000'
    if len(year) == 2:
        year = '20' + year
    return faculty, year


def _latest_semester(reg_no: str) -> Optional[Dict[str, Any]]:
    return _fetch_one(
        'SELECT Semester AS Semester, RegDate AS RegDate FROM studclass '
        'WHERE Reg_No = %s ORDER BY RegDate DESC LIMIT 1',
        [reg_no],
    )


def basic_info(reg_no: str) -> Optional[StudentBasic]:
    """Registered students only; None when absent, not registered or unreachable."""
    reg_no = _text(reg_no)
    if not reg_no:
        return None
    try:
        row = _fetch_one(
            """
            SELECT s.Reg_No AS Reg_No, s.NIC AS NIC, sb.Full_Name AS Full_Name,
                   s.App_Year AS App_Year, s.Faculty AS Faculty, s.Course AS Course,
                   COALESCE(f.Fac_name, s.Faculty) AS FacultyName,
                   COALESCE(c.Course_name, s.Course) AS CourseName,
                   sb.Gender AS Gender
            FROM stud s
            LEFT JOIN studbasic sb ON s.NIC = sb.NIC
            LEFT JOIN faculty f ON s.Faculty = f.Fac_Code
            LEFT JOIN course c ON s.Course = c.Course_ID
            WHERE s.Reg_No = %s AND s.Status = %s
            LIMIT 1
            """,
            [reg_no, STATUS_REGISTERED],
        )
    except DatabaseError:
        logger.exception('Student registry lookup failed for %s', reg_no)
        return None
    if row is None:
        return None

    student = StudentBasic(
        reg_no=_text(row['Reg_No']),
        nic=_text(row['NIC']),
        full_name=_text(row['Full_Name']),
        app_year=_text(row['App_Year']),
        faculty=_text(row['Faculty']),
        course=_text(row['Course']),
        faculty_name=_text(row['FacultyName']),
        course_name=_text(row['CourseName']),
        gender=_text(row['Gender']),
        image_url=image_url(row['Reg_No']),
    )
    try:
        latest = _latest_semester(reg_no)
    except DatabaseError:
        logger.warning('Could not load semester for %s', reg_no, exc_info=True)
        latest = None
    if latest:
        student.semester_name = semester_name(latest['Semester'])
    return student


def full_detail(reg_no: str) -> Optional[StudentDetail]:
    """Complete profile regardless of status, with the semester history."""
    reg_no = _text(reg_no)
    if not reg_no:
        return None
    try:
        row = _fetch_one(
            """
            SELECT s.Reg_No AS Reg_No, s.App_Year AS App_Year, s.Faculty AS Faculty,
                   s.Course AS Course, s.Status AS Status, s.NIC AS NIC,
                   sb.Title AS Title, sb.Initials AS Initials, sb.L_Name AS L_Name,
                   sb.Full_Name AS Full_Name, sb.Gender AS Gender,
                   sb.SelectType AS SelectType, sb.RegOn AS RegOn, sb.Phone_No AS Phone_No,
                   sb.ADD1 AS ADD1, sb.ADD2 AS ADD2, sb.ADD3 AS ADD3,
                   f.Fac_name AS FacultyName, c.Course_name AS CourseName,
                   d.District AS DistrictName,
                   so.DOB AS DOB, so.Religion AS Religion, so.Ethic AS Ethic,
                   so.Z_Score AS Z_Score, so.Police AS Police,
                   so.Home AS Home, so.Mobile AS Mobile, so.Email AS Email,
                   so.PName AS PName, so.PAdd AS PAdd, so.PTelNo AS PTelNo,
                   so.PRelationship AS PRelationship,
                   so.EName AS EName, so.ETelNo AS ETelNo, so.ERelationship AS ERelationship
            FROM stud s
            LEFT JOIN studbasic sb ON s.NIC = sb.NIC
            LEFT JOIN faculty f ON s.Faculty = f.Fac_Code
            LEFT JOIN course c ON s.Course = c.Course_ID
            LEFT JOIN studother so ON s.NIC = so.NIC
            LEFT JOIN district d ON so.Dist_No = d.Dist_No
            WHERE s.Reg_No = %s
            LIMIT 1
            """,
            [reg_no],
        )
    except DatabaseError:
        logger.exception('Student registry detail lookup failed for %s', reg_no)
        return None
    if row is None:
        return None

    detail = StudentDetail(
        reg_no=_text(row['Reg_No']),
        app_year=_text(row['App_Year']),
        faculty=_text(row['Faculty']),
        course=_text(row['Course']),
        status=_text(row['Status']),
        nic=_text(row['NIC']),
        title=_text(row['Title']),
        initials=_text(row['Initials']),
        last_name=_text(row['L_Name']),
        full_name=_text(row['Full_Name']),
        gender=_text(row['Gender']),
        select_type=_text(row['SelectType']),
        registered_on=_text(row['RegOn']),
        phone=_text(row['Phone_No']),
        address1=_text(row['ADD1']),
        address2=_text(row['ADD2']),
        address3=_text(row['ADD3']),
        faculty_name=_text(row['FacultyName']),
        course_name=_text(row['CourseName']),
        district=_text(row['DistrictName']),
        date_of_birth=_text(row['DOB']),
        religion=_text(row['Religion']),
        ethnicity=_text(row['Ethic']),
        z_score=_text(row['Z_Score']),
        police_station=_text(row['Police']),
        home_phone=_text(row['Home']),
        mobile=_text(row['Mobile']),
        email=_text(row['Email']),
        guardian_name=_text(row['PName']),
        guardian_address=_text(row['PAdd']),
        guardian_phone=_text(row['PTelNo']),
        guardian_relationship=_text(row['PRelationship']),
        emergency_contact_name=_text(row['EName']),
        emergency_contact_phone=_text(row['ETelNo']),
        emergency_contact_relationship=_text(row['ERelationship']),
        image_url=image_url(row['Reg_No']),
    )

    try:
        history = _fetch_all(
            'SELECT Semester AS Semester, RegDate AS RegDate FROM studclass '
            'WHERE Reg_No = %s ORDER BY RegDate ASC',
            [reg_no],
        )
    except DatabaseError:
        logger.warning('Could not load semester history for %s', reg_no, exc_info=True)
        history = []

    if history:
        latest = history[-1]
        detail.semester = _text(latest['Semester'])
        detail.semester_name = semester_name(latest['Semester'])
        detail.semester_registered_on = _text(latest['RegDate'])
        detail.semester_history = [
            f"Semester {semester_name(item['Semester'])} - {_text(item['RegDate'])}" for item in history
        ]
    return detail


def is_registered(reg_no: str) -> bool:
    """True only for a row with exactly this Reg_No and Status = REGISTERED."""
    reg_no = _text(reg_no)
    if not reg_no:
        return False
    try:
        row = _fetch_one(
            'SELECT COUNT(*) AS total FROM stud WHERE Reg_No = %s AND Status = %s',
            [reg_no, STATUS_REGISTERED],
        )
    except DatabaseError:
        logger.exception('Student registration check failed for %s', reg_no)
        return False
    return bool(row and row['total'])


def verify_login(reg_no: str, nic: str) -> Optional[StudentLogin]:
    """Match a registered student by registration number and NIC."""
    reg_no = _text(reg_no)
    nic = _text(nic)
    if not reg_no or not nic:
        return None
    try:
        row = _fetch_one(
            """
            SELECT s.Reg_No AS Reg_No, s.NIC AS NIC, sb.L_Name AS L_Name
            FROM stud s
            INNER JOIN studbasic sb ON s.NIC = sb.NIC
            WHERE s.Reg_No = %s AND s.NIC = %s AND s.Status = %s
            LIMIT 1
            """,
            [reg_no, nic, STATUS_REGISTERED],
        )
    except DatabaseError:
        logger.exception('Student login lookup failed for %s', reg_no)
        return None
    if row is None:
        return None
    return StudentLogin(reg_no=_text(row['Reg_No']), nic=_text(row['NIC']), last_name=_text(row['L_Name']))


def search(query: str, limit: int = 200) -> List[StudentBasic]:
    """Registration number or full name contains *query*."""
    query = _text(query)
    if not query:
        return []
    pattern = f'%{query}%'
    try:
        rows = _fetch_all(
            """
            SELECT s.Reg_No AS Reg_No, s.NIC AS NIC, s.App_Year AS App_Year,
                   s.Faculty AS Faculty, s.Course AS Course,
                   sb.Full_Name AS Full_Name, sb.Gender AS Gender,
                   f.Fac_name AS FacultyName, c.Course_name AS CourseName
            FROM stud s
            LEFT JOIN studbasic sb ON s.NIC = sb.NIC
            LEFT JOIN faculty f ON s.Faculty = f.Fac_Code
            LEFT JOIN course c ON s.Course = c.Course_ID
            WHERE s.Reg_No LIKE %s OR sb.Full_Name LIKE %s
            ORDER BY s.Reg_No
            LIMIT %s
            """,
            [pattern, pattern, limit],
        )
    except DatabaseError:
        logger.exception('Student search failed for %r', query)
        return []
    return [
        StudentBasic(
            reg_no=_text(row['Reg_No']),
            nic=_text(row['NIC']),
            full_name=_text(row['Full_Name']),
            app_year=_text(row['App_Year']),
            faculty=_text(row['Faculty']),
            course=_text(row['Course']),
            faculty_name=_text(row['FacultyName']),
            course_name=_text(row['CourseName']),
            gender=_text(row['Gender']),
            image_url=image_url(row['Reg_No']),
        )
        for row in rows
    ]


def _registered(faculty: Optional[str] = None) -> List[Dict[str, Any]]:
    sql = (
        'SELECT s.Reg_No AS Reg_No, sb.Full_Name AS Full_Name '
        'FROM stud s LEFT JOIN studbasic sb ON s.NIC = sb.NIC '
        'WHERE s.Status = %s'
    )
    params: List[Any] = [STATUS_REGISTERED]
    if faculty:
        sql += ' AND s.Reg_No LIKE %s'
        params.append(f'{faculty}/%')
    return _fetch_all(sql + ' ORDER BY s.Reg_No ASC', params)


def registered_reg_nos() -> List[str]:
    try:
        return [_text(row['Reg_No']) for row in _registered() if _text(row['Reg_No'])]
    except DatabaseError:
        logger.exception('Could not list registered students')
        return []


def faculties() -> List[str]:
    """Distinct registration-number prefixes of registered students."""
    try:
        rows = _registered()
    except DatabaseError:
        logger.exception('Could not list student faculties')
        return []
    return sorted({_text(row['Reg_No']).split('/')[0] for row in rows if _text(row['Reg_No'])})


def years_by_faculty(faculty: str) -> List[str]:
    faculty = _text(faculty)
    if not faculty:
        return []
    try:
        rows = _registered(faculty)
    except DatabaseError:
        logger.exception('Could not list years for faculty %s', faculty)
        return []
    return sorted({split_reg_no(row['Reg_No'])[1] for row in rows})


def students_by_faculty_and_year(faculty: str, year: str) -> List[PersonOption]:
    faculty = _text(faculty)
    year = _text(year)
    if not faculty or not year:
        return []
    try:
        rows = _registered(faculty)
    except DatabaseError:
        logger.exception('Could not list students for faculty=%s year=%s', faculty, year)
        return []

    options = []
    for row in rows:
        reg_no = _text(row['Reg_No'])
        if split_reg_no(reg_no)[1] != year:
            continue
        name = _text(row['Full_Name'])
        options.append(PersonOption(reg_no, f'{reg_no} - {name}' if name else reg_no))
    return options
