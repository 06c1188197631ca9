from __future__ import annotations

import logging
from urllib.parse import urlencode

from django.contrib import messages
from django.core.exceptions import ValidationError
from django.http import FileResponse, Http404, HttpRequest
from django.shortcuts import redirect, render
from django.views.decorators.http import require_GET, require_POST

from accounts.session import SessionContext
from people.services import staff as staff_store, students
from people.services.identity import STUDENT_ID_RE

from . import services
from .forms import CATEGORY_CHOICES, SelfServiceVehicleForm, VehicleEntryForm, VehicleUpdateForm
from .models import Vehicle
from .services import certificates
from .services.certificates import CertificateError

logger = logging.getLogger(__name__)


def _validation_message(exc: ValidationError) -> str:
    if hasattr(exc, 'message_dict'):
        return ' '.join(message for messages_ in exc.message_dict.values() for message in messages_)
    return ' '.join(exc.messages)


def _form_error(form) -> str:
    return ' '.join(f'{field}: {" ".join(errors)}' for field, errors in form.errors.items())


def _insert_redirect(category: str, person_id: str, status: str = ''):
    params = {'category': category or '', 'id': person_id or ''}
    if status:
        params['status'] = status
    return redirect(f'/vehicle/insert?{urlencode(params)}')


def _base_url(request: HttpRequest) -> str:
    return request.build_absolute_uri('/').rstrip('/')


@require_GET
def insert_form(request: HttpRequest):
    """GET /vehicle/insert?category=&id=&status="""
    category = (request.GET.get('category') or '').strip()
    person_id = (request.GET.get('id') or '').strip()
    status = (request.GET.get('status') or '').strip()
    context = {
        'categories': CATEGORY_CHOICES,
        'category': category,
        'selected_id': person_id,
        'selected_status': status,
        'vehicle_types': services.active_vehicle_types(),
        'statuses': Vehicle.Status.choices,
    }
    if person_id:
        vehicles = list(services.vehicles_for(person_id, status or None))
        context['vehicles'] = vehicles
        if category:
            context['certificates'] = certificates.certificates_by_vehicle(category, person_id, vehicles)
    return render(request, 'vehicles/insert.html', context)


@require_POST
def add_vehicle(request: HttpRequest):
    """POST /vehicle/add"""
    form = VehicleEntryForm(request.POST, request.FILES)
    if not form.is_valid():
        messages.error(request, f'Error: {_form_error(form)}')
        return _insert_redirect(request.POST.get('category'), request.POST.get('id'), request.POST.get('status'))

    data = form.cleaned_data
    certificate = data.get('certificate')
    try:
        if certificate:
            certificates.validate_upload(certificate)
        vehicle = services.register_vehicle(
            emp_id=data['id'],
            vehicle_no=data['vehicle_no'],
            owner=data.get('owner') or '',
            person_type=services.category_to_type(data['category']),
            vehicle_type_id=data.get('vehicle_type_id'),
            mobile=data.get('mobile') or '',
            email=data.get('email') or '',
            created_by=request.user.username,
            base_url=_base_url(request),
        )
        if certificate:
            certificates.save_certificate(certificate, data['category'], vehicle.emp_id, vehicle.vehicle_no)
    except ValidationError as exc:
        messages.error(request, f'Error: {_validation_message(exc)}')
    except (services.VehicleError, CertificateError) as exc:
        messages.error(request, f'Error: {exc}')
    else:
        messages.success(request, 'Vehicle added successfully!')
    return _insert_redirect(data['category'], data['id'], data.get('status'))


@require_POST
def update_vehicle(request: HttpRequest):
    """POST /vehicle/update"""
    form = VehicleUpdateForm(request.POST, request.FILES)
    if not form.is_valid():
        messages.error(request, f'Error: {_form_error(form)}')
        return _insert_redirect(request.POST.get('category'), request.POST.get('id'), request.POST.get('status'))

    data = form.cleaned_data
    certificate = data.get('certificate')
    try:
        if certificate:
            certificates.validate_upload(certificate)
        vehicle = services.update_vehicle(
            data['id'],
            data['old_vehicle_no'],
            vehicle_no=data['vehicle_no'],
            owner=data.get('owner'),
            approval_status=data.get('approval_status') or None,
            vehicle_type_id=data.get('vehicle_type_id'),
            mobile=data.get('mobile'),
            email=data.get('email'),
            updated_by=request.user.username,
            category=data['category'],
        )
        if certificate:
            certificates.save_certificate(certificate, data['category'], vehicle.emp_id, vehicle.vehicle_no)
    except ValidationError as exc:
        messages.error(request, f'Error: {_validation_message(exc)}')
    except (services.VehicleError, CertificateError) as exc:
        messages.error(request, f'Error: {exc}')
    else:
        messages.success(request, 'Vehicle updated successfully!')
    return _insert_redirect(data['category'], data['id'], data.get('status'))


@require_POST
def delete_vehicle(request: HttpRequest):
    """POST /vehicle/delete"""
    category = request.POST.get('category', '')
    person_id = request.POST.get('id', '')
    try:
        services.delete_vehicle(person_id, request.POST.get('vehicleNo', ''), category, request.user.username)
    except services.VehicleError as exc:
        messages.error(request, f'Error: {exc}')
    else:
        messages.success(request, 'Vehicle deleted successfully!')
    return _insert_redirect(category, person_id, request.POST.get('status', ''))


@require_GET
def pending(request: HttpRequest):
    return render(request, 'vehicles/pending.html', {'vehicles': services.pending_vehicles()})


def _decide(request: HttpRequest, action, success_message: str):
    try:
        action(request.POST.get('empId', ''), request.POST.get('vehicleNo', ''), request.user.username)
    except services.VehicleError as exc:
        messages.error(request, f'Error: {exc}')
    else:
        messages.success(request, success_message)
    return redirect('/vehicle/pending')


@require_POST
def approve(request: HttpRequest):
    return _decide(request, services.approve_vehicle, 'Vehicle approved!')


@require_POST
def reject(request: HttpRequest):
    return _decide(request, services.reject_vehicle, 'Vehicle rejected!')


@require_GET
def search(request: HttpRequest):
    query = (request.GET.get('query') or '').strip()
    context = {'query': query}
    if query:
        context['vehicles'] = services.search_vehicles(query)
    return render(request, 'vehicles/search.html', context)


@require_GET
def scanner(request: HttpRequest):
    """Plate scanner page; recognition runs in the browser and calls /api/vehicle/check."""
    return render(request, 'vehicles/scanner.html')


@require_GET
def certificate_download(request: HttpRequest):
    """GET /vehicle/certificate/download?category=&id=&filename="""
    try:
        path = certificates.resolve(
            request.GET.get('category', ''),
            request.GET.get('id', ''),
            request.GET.get('filename', ''),
        )
    except CertificateError as exc:
        raise Http404(str(exc))
    return FileResponse(open(path, 'rb'), content_type=certificates.PDF_CONTENT_TYPE, filename=path.name)


@require_POST
def certificate_delete(request: HttpRequest):
    """POST /vehicle/certificate/delete"""
    category = request.POST.get('category', '')
    person_id = request.POST.get('id', '')
    filename = request.POST.get('filename', '')
    if certificates.delete_certificate(category, person_id, filename):
        messages.success(request, f'Certificate deleted: {filename}')
    else:
        messages.error(request, f'Certificate not found: {filename}')

    return_url = request.POST.get('returnUrl', '')
    if return_url.startswith('/') and not return_url.startswith('//'):
        return redirect(return_url)
    return _insert_redirect(category, person_id, request.POST.get('status', ''))


# --- self service ------------------------------------------------------------

def self_service_id(request: HttpRequest) -> str:
    """The signed-in person's id: federated uid claim, else the account username."""
    context = SessionContext.from_request(request)
    if context is not None and context.uid:
        return context.uid
    return request.user.username


def detect_category(person_id: str) -> str:
    if STUDENT_ID_RE.match(person_id) and students.is_registered(person_id):
        return 'student'
    if staff_store.latest_by_emp_no(person_id) is not None:
        return 'permanent'
    return ''


def my_vehicles(request: HttpRequest):
    """GET /my/vehicle"""
    person_id = self_service_id(request)
    category = detect_category(person_id) if person_id else ''
    context = {
        'user_id': person_id,
        'category': category,
        'vehicle_types': services.active_vehicle_types(),
    }
    if not category:
        context['error'] = 'User ID not found or not activated in Student or Staff records.'
        return render(request, 'vehicles/self_service.html', context)

    if category == 'student':
        context['student'] = students.basic_info(person_id)
    else:
        context['staff'] = staff_store.latest_by_emp_no(person_id)
    context['existing_vehicles'] = services.vehicles_for(person_id)
    return render(request, 'vehicles/self_service.html', context)


@require_POST
def my_vehicle_add(request: HttpRequest):
    """POST /my/vehicle/add  Self registration; the certificate is mandatory."""
    person_id = self_service_id(request)
    category = detect_category(person_id)
    if not category:
        messages.error(request, 'User ID not found or not activated in Student or Staff records.')
        return redirect('/my/vehicle')

    form = SelfServiceVehicleForm(request.POST, request.FILES)
    if not form.is_valid():
        messages.error(request, SelfServiceVehicleForm.REQUIRED_MESSAGE)
        return redirect('/my/vehicle')

    data = form.cleaned_data
    try:
        certificates.validate_upload(data['certificate'])
        vehicle = services.register_vehicle(
            emp_id=person_id,
            vehicle_no=data['vehicle_no'],
            owner=data['owner'],
            person_type=services.category_to_type(category),
            vehicle_type_id=data['vehicle_type_id'],
            mobile=data['mobile'],
            email=data['email'],
            created_by=request.user.username,
            base_url=_base_url(request),
        )
        certificates.save_certificate(data['certificate'], category, person_id, vehicle.vehicle_no)
    except ValidationError as exc:
        messages.error(request, _validation_message(exc))
    except (services.VehicleError, CertificateError) as exc:
        messages.error(request, str(exc))
    else:
        messages.success(
            request,
            f'Vehicle {vehicle.vehicle_no} registered successfully! '
            f'A confirmation email has been sent to {vehicle.email}',
        )
    return redirect('/my/vehicle')
