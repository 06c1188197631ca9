"""Vehicle registration lifecycle.

A vehicle is created ``Pending`` and an administrator moves it to
``Approved`` or ``Rejected``; no other transition exists. Duplicate
registrations for the same (person id, vehicle number) are refused with
``DuplicateVehicleError``.

The duplicate check runs before the insert and is not atomic with it: two
concurrent submissions for the same pair can both pass the check. The unique
constraint on ``vehidb`` then rejects the second insert, and that
``IntegrityError`` is reported as the same ``DuplicateVehicleError``.
"""
from __future__ import annotations

import logging
from typing import Optional

from django.db import IntegrityError, transaction
from django.db.models import Q, QuerySet
from django.utils import timezone

from vehicles.models import Vehicle, VehicleType
from vehicles.validators import normalize_vehicle_no, validate_vehicle_data

from . import certificates, notifications

logger = logging.getLogger(__name__)

_CATEGORY_TYPES = {category.lower(): category for category in Vehicle.PERSON_TYPES}


class VehicleError(Exception):
    default_message = 'Vehicle operation failed'

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.default_message)


class DuplicateVehicleError(VehicleError):
    default_message = 'Vehicle already registered for this employee'


class VehicleNotFoundError(VehicleError):
    default_message = 'Vehicle not found'


class InvalidTransitionError(VehicleError):
    default_message = 'Only pending vehicles can be approved or rejected'


def category_to_type(category: Optional[str]) -> str:
    """'permanent' -> 'Permanent'; unknown categories are stored as given."""
    if not category:
        return 'Unknown'
    return _CATEGORY_TYPES.get(category.strip().lower(), category.strip())


def active_vehicle_types() -> QuerySet:
    return VehicleType.objects.filter(is_active=True).order_by('type_name')


def vehicles_for(emp_id: str, status: Optional[str] = None) -> QuerySet:
    """The person's vehicles, newest first."""
    queryset = Vehicle.objects.select_related('vehicle_type').filter(emp_id=(emp_id or '').strip())
    if status:
        queryset = queryset.filter(approval_status__iexact=status)
    return queryset.order_by('-create_date', '-id')


def get_vehicle(emp_id: str, vehicle_no: str) -> Optional[Vehicle]:
    return (
        Vehicle.objects.select_related('vehicle_type')
        .filter(emp_id=(emp_id or '').strip(), vehicle_no__iexact=normalize_vehicle_no(vehicle_no))
        .first()
    )


def vehicle_exists(emp_id: str, vehicle_no: str) -> bool:
    return Vehicle.objects.filter(
        emp_id=(emp_id or '').strip(), vehicle_no__iexact=normalize_vehicle_no(vehicle_no)
    ).exists()


def find_by_number(vehicle_no: str) -> Optional[Vehicle]:
    """Exact (case-insensitive) plate match across all persons."""
    vehicle_no = normalize_vehicle_no(vehicle_no)
    if not vehicle_no:
        return None
    return Vehicle.objects.filter(vehicle_no__iexact=vehicle_no).order_by('-create_date').first()


def _require(emp_id: str, vehicle_no: str) -> Vehicle:
    vehicle = get_vehicle(emp_id, vehicle_no)
    if vehicle is None:
        raise VehicleNotFoundError()
    return vehicle


def _vehicle_type(vehicle_type_id) -> Optional[VehicleType]:
    if vehicle_type_id in (None, ''):
        return None
    try:
        return VehicleType.objects.filter(pk=int(vehicle_type_id)).first()
    except (TypeError, ValueError):
        return None


def register_vehicle(
    *,
    emp_id: str,
    vehicle_no: str,
    owner: str = '',
    person_type: str = '',
    vehicle_type_id=None,
    mobile: str = '',
    email: str = '',
    created_by: str = '',
    notify: bool = True,
    base_url: str = '',
) -> Vehicle:
    cleaned = validate_vehicle_data({
        'emp_id': emp_id,
        'vehicle_no': vehicle_no,
        'owner': owner,
        'mobile': mobile,
        'email': email,
    })
    if vehicle_exists(cleaned['emp_id'], cleaned['vehicle_no']):
        raise DuplicateVehicleError()

    try:
        with transaction.atomic():
            vehicle = Vehicle.objects.create(
                emp_id=cleaned['emp_id'],
                vehicle_no=cleaned['vehicle_no'],
                owner=cleaned.get('owner') or '',
                type=person_type,
                vehicle_type=_vehicle_type(vehicle_type_id),
                mobile=cleaned.get('mobile') or '',
                email=cleaned.get('email') or '',
                created_by=created_by,
                approval_status=Vehicle.Status.PENDING,
            )
    except IntegrityError:
        logger.info('Concurrent duplicate registration for %s/%s', cleaned['emp_id'], cleaned['vehicle_no'])
        raise DuplicateVehicleError()

    logger.info('Vehicle registered: emp_id=%s vehicle_no=%s by=%s', vehicle.emp_id, vehicle.vehicle_no, created_by)
    if notify and vehicle.email:
        notifications.queue_registration_email(vehicle, base_url=base_url)
    return vehicle


def update_vehicle(
    emp_id: str,
    old_vehicle_no: str,
    *,
    vehicle_no: str,
    owner: Optional[str] = None,
    approval_status: Optional[str] = None,
    vehicle_type_id=None,
    mobile: Optional[str] = None,
    email: Optional[str] = None,
    updated_by: str = '',
    category: Optional[str] = None,
) -> Vehicle:
    """Edit a registration in place; a changed number also renames its certificates."""
    vehicle = _require(emp_id, old_vehicle_no)
    cleaned = validate_vehicle_data({
        'emp_id': vehicle.emp_id,
        'vehicle_no': vehicle_no,
        'mobile': mobile or '',
        'email': email or '',
    })
    new_no = cleaned['vehicle_no']
    renamed = new_no != normalize_vehicle_no(vehicle.vehicle_no)
    if renamed and vehicle_exists(vehicle.emp_id, new_no):
        raise DuplicateVehicleError()
    if approval_status and approval_status not in Vehicle.Status.values:
        raise VehicleError(f'Unknown approval status: {approval_status}')

    old_stored_no = vehicle.vehicle_no
    vehicle.vehicle_no = new_no
    if owner is not None:
        vehicle.owner = owner.strip()
    if approval_status:
        vehicle.approval_status = approval_status
    if vehicle_type_id not in (None, ''):
        vehicle.vehicle_type = _vehicle_type(vehicle_type_id)
    if mobile is not None:
        vehicle.mobile = cleaned['mobile']
    if email is not None:
        vehicle.email = cleaned['email']
    vehicle.created_by = updated_by or vehicle.created_by

    try:
        with transaction.atomic():
            vehicle.save()
    except IntegrityError:
        raise DuplicateVehicleError()

    if renamed and category:
        certificates.rename_for_vehicle(category, vehicle.emp_id, old_stored_no, new_no)
    logger.info('Vehicle updated: emp_id=%s %s -> %s by=%s', vehicle.emp_id, old_stored_no, new_no, updated_by)
    return vehicle


def delete_vehicle(emp_id: str, vehicle_no: str, category: Optional[str] = None, deleted_by: str = '') -> None:
    vehicle = _require(emp_id, vehicle_no)
    stored_no = vehicle.vehicle_no
    vehicle.delete()
    if category:
        removed = certificates.delete_for_vehicle(category, emp_id, stored_no)
        if removed:
            logger.info('Removed %d certificate(s) for %s/%s', removed, emp_id, stored_no)
    logger.info('Vehicle deleted: emp_id=%s vehicle_no=%s by=%s', emp_id, stored_no, deleted_by)


def _transition(emp_id: str, vehicle_no: str, target: str, actor: str) -> Vehicle:
    with transaction.atomic():
        vehicle = (
            Vehicle.objects.select_for_update()
            .filter(emp_id=(emp_id or '').strip(), vehicle_no__iexact=normalize_vehicle_no(vehicle_no))
            .first()
        )
        if vehicle is None:
            raise VehicleNotFoundError()
        if not vehicle.is_pending:
            raise InvalidTransitionError(
                f'Vehicle {vehicle.vehicle_no} is already {vehicle.approval_status.lower()}'
            )
        vehicle.approval_status = target
        vehicle.approval_by = actor
        vehicle.approval_date = timezone.now()
        vehicle.save(update_fields=['approval_status', 'approval_by', 'approval_date'])
        if vehicle.email:
            notifications.queue_status_email(vehicle)

    logger.info('Vehicle %s: emp_id=%s vehicle_no=%s by=%s', target.lower(), vehicle.emp_id, vehicle.vehicle_no, actor)
    return vehicle


def approve_vehicle(emp_id: str, vehicle_no: str, approved_by: str = '') -> Vehicle:
    return _transition(emp_id, vehicle_no, Vehicle.Status.APPROVED, approved_by)


def reject_vehicle(emp_id: str, vehicle_no: str, rejected_by: str = '') -> Vehicle:
    return _transition(emp_id, vehicle_no, Vehicle.Status.REJECTED, rejected_by)


def search_vehicles(query: str) -> QuerySet:
    query = (query or '').strip()
    if not query:
        return Vehicle.objects.none()
    return (
        Vehicle.objects.select_related('vehicle_type')
        .filter(Q(vehicle_no__icontains=query) | Q(emp_id__icontains=query) | Q(owner__icontains=query))
        .order_by('-create_date')
    )


def pending_vehicles() -> QuerySet:
    return Vehicle.objects.select_related('vehicle_type').filter(approval_status=Vehicle.Status.PENDING).order_by('create_date')
