from __future__ import annotations

import logging

from django.http import HttpRequest
from django.shortcuts import render

from accounts.access import forbidden
from cards.qr import person_lookup_url, qr_data_uri
from vehicles.services import get_vehicle, vehicles_for
from vehicles.services.certificates import CertificateError, list_certificates

from .services import directory, staff as staff_store, students
from .services.identity import STUDENT, resolve_person
from .services.staff_detail import search_staff, staff_detail

logger = logging.getLogger(__name__)


def _certificates(category: str, person_id: str) -> list:
    try:
        return list_certificates(category, person_id)
    except CertificateError:
        logger.debug('No certificates for %s/%s', category, person_id, exc_info=True)
        return []


def person_search(request: HttpRequest):
    """GET /search/person?id=...  Unified lookup used by the QR scanner links."""
    search_id = (request.GET.get('id') or '').strip()
    context = {'search_id': search_id}
    if search_id:
        person = resolve_person(search_id, request.GET.get('type'))
        context['found'] = person is not None
        if person is None:
            context['not_found_message'] = f'No record found for: {search_id}'
        else:
            context['person'] = person
            context['qr_image'] = qr_data_uri(person_lookup_url(request, person.id))
    return render(request, 'people/person_search.html', context)


def staff_detail_view(request: HttpRequest):
    """GET /staff/detail?empno=..."""
    emp_no = (request.GET.get('empno') or '').strip()
    if not emp_no:
        return render(request, 'people/staff_detail.html', {})

    detail = staff_detail(emp_no)
    if detail is None:
        return render(
            request,
            'people/staff_detail.html',
            {'error': f'Staff member not found: {emp_no}', 'search_emp_no': emp_no},
        )

    if not detail.is_temporary:
        row = staff_store.latest_by_emp_no(emp_no)
        if not directory.can_view_permanent(row, request.user.utype):
            logger.warning('User %s may not view staff %s', request.user.username, emp_no)
            return forbidden(request, 'You may not view this staff member.')

    context = {
        'staff': detail,
        'vehicles': vehicles_for(emp_no),
        'certificates': _certificates(detail.certificate_category, emp_no),
    }
    return render(request, 'people/staff_detail.html', context)


def staff_search(request: HttpRequest):
    """GET /staff/search?query=..."""
    query = (request.GET.get('query') or '').strip()
    context = {'query': query}
    if query:
        context['results'] = search_staff(query)
    return render(request, 'people/staff_search.html', context)


def student_detail(request: HttpRequest):
    """GET /student/detail?regno=..."""
    reg_no = (request.GET.get('regno') or '').strip()
    if not reg_no:
        return render(request, 'people/student_detail.html', {'error': 'Please enter a student registration number.'})

    student = students.full_detail(reg_no)
    if student is None:
        return render(
            request,
            'people/student_detail.html',
            {'error': f'Student not found: {reg_no}', 'search_reg_no': reg_no},
        )

    context = {
        'student': student,
        'search_reg_no': reg_no,
        'vehicles': vehicles_for(reg_no),
        'certificates': _certificates('Student', reg_no),
    }
    return render(request, 'people/student_detail.html', context)


def student_search(request: HttpRequest):
    """GET /student/search?query=..."""
    query = (request.GET.get('query') or '').strip()
    context = {'query': query}
    if query:
        context['students'] = students.search(query)
    return render(request, 'people/student_search.html', context)


def view_detail(request: HttpRequest):
    """GET /view/detail?id=...&vehicleno=...&category=...  Person plus one selected vehicle."""
    person_id = (request.GET.get('id') or '').strip()
    vehicle_no = (request.GET.get('vehicleno') or '').strip()
    category = request.GET.get('category') or None
    if category and category.lower() == 'auto':
        category = None

    person = resolve_person(person_id, category) if person_id else None
    if person is None:
        return render(request, 'people/view_detail.html', {'error': f'Person not found: {person_id}'})

    context = {'person': person}
    if vehicle_no:
        context['selected_vehicle'] = get_vehicle(person.id, vehicle_no)
    if person.type == STUDENT:
        detail = students.full_detail(person.id)
        if detail is not None:
            context['student_detail'] = detail
            context['semester_info'] = detail.semester_name
    return render(request, 'people/view_detail.html', context)
