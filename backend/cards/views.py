from __future__ import annotations

import logging
from urllib.parse import urlencode

from django.contrib import messages
from django.http import FileResponse, Http404, HttpRequest, HttpResponse
from django.shortcuts import redirect, render
from django.views.decorators.http import require_GET, require_POST
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.roles import is_academic_user_type, is_non_academic_user_type
from people.services import directory, staff as staff_store
from people.services.identity import resolve_person
from people.services.students import DEFAULT_IMAGE_URL
from people.services.staff_detail import from_permanent

from . import idcards, images, qr

logger = logging.getLogger(__name__)

_NOT_PERSONAL = ('student', 'visitor')
IMAGE_CATEGORIES = ('Student', 'Permanent', 'Temporary', 'Casual', 'Contract', 'Institute', 'Visitor')


def _images_redirect(category: str, person_id: str):
    return redirect(f'/view/images?{urlencode({"category": category, "id": person_id})}')


def _staff_access_error(category: str, person_id: str, utype) -> str:
    if not directory.is_category_allowed(category, utype):
        return 'This category is not allowed for your user type.'
    if category.lower() == 'permanent':
        row = staff_store.latest_by_emp_no(person_id)
        if row is not None and not directory.can_view_permanent(row, utype):
            return 'This staff record is not accessible for your user type.'
    return ''


def _staff_extras(category: str, person_id: str) -> dict:
    if category.lower() in _NOT_PERSONAL:
        return {}
    row = staff_store.latest_by_emp_no(person_id)
    if row is None:
        return {}
    detail = from_permanent(row)
    expiry = detail.expiry_date
    extras = {
        'salary_date': row.salary_date,
        'staff_nic': detail.nic,
        'staff_employee_type': detail.employee_type,
    }
    if expiry is not None:
        extras['expiry_date'] = expiry.isoformat()
    return extras


@require_GET
def image_management(request: HttpRequest):
    """GET /view/images?category=&id=&faculty=&year="""
    utype = request.user.utype
    category = (request.GET.get('category') or '').strip()
    person_id = (request.GET.get('id') or '').strip()
    locked = is_academic_user_type(utype) or is_non_academic_user_type(utype)
    if locked and category and category.lower() != 'permanent':
        category, person_id = 'Permanent', ''

    context = {
        'locked_permanent': locked,
        'category_choices': IMAGE_CATEGORIES,
        'category': category,
        'id': person_id,
        'faculty': request.GET.get('faculty', ''),
        'year': request.GET.get('year', ''),
        'show_cascading': category.lower() == 'student',
    }
    if not (category and person_id):
        return render(request, 'cards/images.html', context)

    error = _staff_access_error(category, person_id, utype)
    if error:
        context['error'] = error
        return render(request, 'cards/images.html', context)

    current = images.profile_image_url(category, person_id)
    context.update({
        'show_detail': True,
        'person': resolve_person(person_id),
        'current_image_url': current,
        'has_image': current is not None,
        'archived_images': images.list_archived(person_id),
    })
    context.update(_staff_extras(category, person_id))
    return render(request, 'cards/images.html', context)


class ImageDetailView(APIView):
    """GET /view/images/detail?category=&id=  JSON for the image page's live preview."""

    def get(self, request):
        category = (request.query_params.get('category') or '').strip()
        person_id = (request.query_params.get('id') or '').strip()
        if not person_id:
            return Response({'error': 'ID is required'}, status=status.HTTP_400_BAD_REQUEST)

        utype = request.user.utype
        if not directory.is_category_allowed(category, utype):
            return Response(
                {'error': 'This category is not allowed for your user type'},
                status=status.HTTP_403_FORBIDDEN,
            )
        person = resolve_person(person_id)
        if person is None:
            return Response({'error': 'Person not found'}, status=status.HTTP_404_NOT_FOUND)
        error = _staff_access_error(category, person_id, utype)
        if error:
            return Response({'error': error.rstrip('.')}, status=status.HTTP_403_FORBIDDEN)

        if category.lower() == 'student':
            image_url = person.image_url or DEFAULT_IMAGE_URL
        else:
            image_url = images.profile_image_url(category, person_id)

        data = {
            'id': person.id,
            'type': person.type,
            'name': person.name,
            'designation': person.designation,
            'department': person.department,
            'category': person.category,
            'nic': person.nic,
            'employeeType': person.employee_type,
            'imageUrl': image_url,
            'hasImage': bool(image_url),
        }
        extras = _staff_extras(category, person_id)
        if extras:
            data['salaryDate'] = extras['salary_date']
            data['staffNic'] = extras['staff_nic']
            data['staffEmployeeType'] = extras['staff_employee_type']
            if 'expiry_date' in extras:
                data['expiryDate'] = extras['expiry_date']
        data['archivedImages'] = [image.name for image in images.list_archived(person_id)]
        return Response(data)


@require_POST
def image_upload(request: HttpRequest):
    """POST /view/images/upload (multipart: category, id, profile_image)"""
    category = request.POST.get('category', '')
    person_id = request.POST.get('id', '')
    try:
        url = images.save_profile_image(request.FILES.get('profile_image'), category, person_id)
    except images.ImageError as exc:
        logger.warning('Image upload failed for %s (%s): %s', person_id, category, exc)
        messages.error(request, f'Upload failed: {exc}')
    else:
        logger.info('Image uploaded for %s (%s): %s', person_id, category, url)
        messages.success(request, 'Image uploaded successfully. Old image archived.')
    return _images_redirect(category, person_id)


@require_POST
def image_delete(request: HttpRequest):
    category = request.POST.get('category', '')
    person_id = request.POST.get('id', '')
    if images.delete_profile_image(category, person_id):
        messages.success(request, 'Image deleted.')
    else:
        messages.error(request, 'No image found to delete.')
    return _images_redirect(category, person_id)


@require_GET
def serve_image(request: HttpRequest, path: str):
    """GET /uploads/images/<path>"""
    try:
        target = images.resolve_upload(path)
    except images.ImageError:
        raise Http404('Image not found')
    return FileResponse(open(target, 'rb'))


# --- ID cards ----------------------------------------------------------------

@require_GET
def idcard_preview(request: HttpRequest):
    emp_no = (request.GET.get('empno') or '').strip()
    return render(request, 'cards/idcard_preview.html', {'empno': emp_no, 'show_card': bool(emp_no)})


def _card_response(render_side, emp_no: str) -> HttpResponse:
    try:
        png = render_side(emp_no)
    except idcards.UnknownStaffError:
        logger.warning('ID card request for unknown staff: %s', emp_no)
        raise Http404('Staff member not found')
    response = HttpResponse(png, content_type='image/png')
    response['Cache-Control'] = 'no-cache'
    return response


@require_GET
def idcard_front(request: HttpRequest, emp_no: str):
    return _card_response(idcards.render_front, emp_no)


@require_GET
def idcard_back(request: HttpRequest, emp_no: str):
    return _card_response(idcards.render_back, emp_no)


# --- QR codes ----------------------------------------------------------------

@require_GET
def qr_generate_form(request: HttpRequest):
    return render(request, 'cards/qr_generate.html', {'staff_types': qr.STAFF_TYPES})


@require_GET
def qr_code(request: HttpRequest):
    """GET /qr/code?content=  PNG for on-page display."""
    content = request.GET.get('content', '')
    if not content:
        return HttpResponse('content is required', status=400, content_type='text/plain')
    return HttpResponse(qr.render_png(content), content_type='image/png')


@require_POST
def qr_generate_students(request: HttpRequest):
    result = qr.generate_student_batch(qr.base_url(request))
    messages.success(request, result.message)
    return redirect('/qr/generate')


@require_POST
def qr_generate_staff(request: HttpRequest):
    staff_type = request.POST.get('staffType', '')
    try:
        result = qr.generate_staff_batch(staff_type, qr.base_url(request))
    except ValueError as exc:
        messages.error(request, f'Error: {exc}')
    else:
        messages.success(request, result.message)
    return redirect('/qr/generate')
