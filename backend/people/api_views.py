from __future__ import annotations

import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from .services import directory, staff as staff_store, students
from .services.identity import (
    PERMANENT,
    STUDENT,
    STUDENT_ID_RE,
    TEMPORARY,
    resolve_person,
)

logger = logging.getLogger(__name__)

_USER_INFO_CATEGORIES = {
    STUDENT: 'student',
    PERMANENT: 'staff',
    TEMPORARY: 'temporary_staff',
}


def _missing(message: str):
    return Response({'error': message}, status=status.HTTP_400_BAD_REQUEST)


class UserInfoView(APIView):
    """GET /api/user/info?userid=  Student or staff card data for a bare id."""

    def get(self, request):
        user_id = (request.query_params.get('userid') or '').strip()
        if not user_id:
            return _missing('No user ID provided')

        type_hint = STUDENT if STUDENT_ID_RE.match(user_id) else None
        person = resolve_person(user_id, type_hint)
        if person is None or person.type not in _USER_INFO_CATEGORIES:
            return Response({'error': 'User not found'})

        data = person.to_dict()
        data.pop('vehicles')
        return Response({'category': _USER_INFO_CATEGORIES[person.type], 'data': data})


class UserEmailView(APIView):
    """GET /api/user/email?userid=&type=student|staff&nic=

    Staff lookups must present the NIC on record; the payroll feed carries no
    email column, so a confirmed staff lookup returns the verified identity only.
    """

    def get(self, request):
        user_id = (request.query_params.get('userid') or '').strip()
        kind = (request.query_params.get('type') or '').strip().lower()
        nic = (request.query_params.get('nic') or '').strip()
        if not user_id:
            return _missing('No user ID provided')

        if kind == 'student':
            detail = students.full_detail(user_id)
            if detail is None or not detail.is_registered:
                return Response({'error': 'Student not found or not registered'})
            return Response({'email': detail.email, 'type': 'student', 'status': 'Registered'})

        if kind == 'staff':
            if not nic:
                return _missing('NIC is required for staff email lookup')
            staff = staff_store.latest_by_emp_no(user_id)
            if staff is None:
                return Response({'error': 'Staff not found'})
            if (staff.nic or '').lower() != nic.lower():
                return Response({'error': 'NIC verification failed'})
            return Response({
                'empno': staff.emp_no,
                'nic': staff.nic,
                'latest_salary_date': staff.salary_date,
                'type': 'staff',
                'status': 'Login confirmed',
            })

        return _missing("Invalid type parameter. Use 'student' or 'staff'.")


class PersonMasterView(APIView):
    """GET /api/person/master?empid=&type=  Person record plus registered vehicles."""

    def get(self, request):
        emp_id = (request.query_params.get('empid') or '').strip()
        if not emp_id:
            return _missing('No ID provided')

        person = resolve_person(emp_id, request.query_params.get('type'))
        if person is None:
            return Response({'error': 'Person not found'})

        data = person.to_dict()
        vehicles = data.pop('vehicles')
        return Response({'person': data, 'vehicles': vehicles})


class PersonResolveView(APIView):
    """GET /api/person/resolve?id=&type=  Where the scanner should send the browser."""

    def get(self, request):
        person_id = (request.query_params.get('id') or '').strip()
        if not person_id:
            return _missing('No ID provided')

        person = resolve_person(person_id, request.query_params.get('type'))
        if person is None:
            return Response({'found': False, 'error': 'Person not found'})

        if person.is_student:
            redirect_url = f'/student/detail?regno={person.id}'
        else:
            redirect_url = f'/search/person?id={person.id}'
        return Response({
            'found': True,
            'type': person.type,
            'id': person.id,
            'name': person.name,
            'isValid': person.valid,
            'redirectUrl': redirect_url,
        })


class PersonsListView(APIView):
    """GET /api/persons/list?category=permanent|temporary|casual|contract|institute|visitor"""

    def get(self, request):
        category = request.query_params.get('category') or ''
        options = directory.list_persons(category, getattr(request.user, 'utype', None))
        return Response([{'id': option.id, 'label': option.label} for option in options])


class StudentFacultiesView(APIView):
    def get(self, request):
        return Response(students.faculties())


class StudentYearsView(APIView):
    def get(self, request):
        faculty = (request.query_params.get('faculty') or '').strip()
        if not faculty:
            return _missing('faculty is required')
        return Response(students.years_by_faculty(faculty))


class StudentListView(APIView):
    def get(self, request):
        faculty = (request.query_params.get('faculty') or '').strip()
        year = (request.query_params.get('year') or '').strip()
        if not faculty or not year:
            return _missing('faculty and year are required')
        options = students.students_by_faculty_and_year(faculty, year)
        return Response([{'id': option.id, 'label': option.label} for option in options])
