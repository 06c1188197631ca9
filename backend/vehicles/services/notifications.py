"""Registration and approval emails.

Sending is fire-and-forget: the message is built after the surrounding
transaction commits and handed to a daemon thread (``GATEPASS_EMAIL_ASYNC``),
so the request never waits on SMTP. Failures are logged and otherwise
ignored; the caller is not told.
"""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Callable

from django.conf import settings
from django.core.mail import EmailMultiAlternatives, get_connection
from django.db import connections, transaction
from django.template.loader import render_to_string

from vehicles.models import Vehicle

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VehicleMail:
    vehicle_id: int
    to: str
    subject: str
    text_body: str
    html_body: str
    status: str


def _base_url(base_url: str = '') -> str:
    return (base_url or getattr(settings, 'GATEPASS_PUBLIC_BASE_URL', '') or '').rstrip('/')


def _render(template: str, context: dict):
    return (
        render_to_string(f'emails/{template}.txt', context),
        render_to_string(f'emails/{template}.html', context),
    )


def registration_mail(vehicle: Vehicle, base_url: str = '') -> VehicleMail:
    context = {
        'vehicle': vehicle,
        'person_name': vehicle.owner or vehicle.emp_id,
        'profile_url': f'{_base_url(base_url)}/search/person?id={vehicle.emp_id}',
    }
    text_body, html_body = _render('vehicle_registered', context)
    return VehicleMail(
        vehicle_id=vehicle.pk,
        to=vehicle.email,
        subject=f'UOP Vehicle Registration Confirmation - {vehicle.vehicle_no}',
        text_body=text_body,
        html_body=html_body,
        status=vehicle.approval_status,
    )


def status_mail(vehicle: Vehicle) -> VehicleMail:
    context = {
        'vehicle': vehicle,
        'person_name': vehicle.owner or vehicle.emp_id,
        'approved': vehicle.approval_status == Vehicle.Status.APPROVED,
    }
    text_body, html_body = _render('vehicle_status', context)
    return VehicleMail(
        vehicle_id=vehicle.pk,
        to=vehicle.email,
        subject=f'Vehicle {vehicle.approval_status} - {vehicle.vehicle_no}',
        text_body=text_body,
        html_body=html_body,
        status=vehicle.approval_status,
    )


def send(mail: VehicleMail) -> bool:
    timeout = int(getattr(settings, 'GATEPASS_EMAIL_TIMEOUT', 10) or 10)
    try:
        message = EmailMultiAlternatives(
            subject=mail.subject,
            body=mail.text_body,
            from_email=settings.DEFAULT_FROM_EMAIL,
            to=[mail.to],
            connection=get_connection(timeout=timeout),
        )
        message.attach_alternative(mail.html_body, 'text/html')
        sent = message.send(fail_silently=False)
    except Exception:
        logger.exception('Vehicle email to %s failed (%s)', mail.to, mail.subject)
        return False

    if not sent:
        logger.warning('SMTP accepted no recipients for %s (%s)', mail.to, mail.subject)
        return False

    Vehicle.objects.filter(pk=mail.vehicle_id).update(email_sent=True, last_notified_status=mail.status)
    logger.info('Vehicle email sent to %s (%s)', mail.to, mail.subject)
    return True


def _run_in_worker(mail: VehicleMail) -> None:
    try:
        send(mail)
    finally:
        connections.close_all()


def dispatch(mail: VehicleMail) -> None:
    if getattr(settings, 'GATEPASS_EMAIL_ASYNC', True):
        threading.Thread(target=_run_in_worker, args=(mail,), name='vehicle-mail', daemon=True).start()
    else:
        send(mail)


def _queue(build: Callable[[], VehicleMail]) -> None:
    def _after_commit():
        try:
            mail = build()
        except Exception:
            logger.exception('Could not build vehicle email')
            return
        dispatch(mail)

    transaction.on_commit(_after_commit)


def queue_registration_email(vehicle: Vehicle, base_url: str = '') -> None:
    _queue(lambda: registration_mail(vehicle, base_url))


def queue_status_email(vehicle: Vehicle) -> None:
    _queue(lambda: status_mail(vehicle))
