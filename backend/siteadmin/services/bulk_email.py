"""Circular mail to the ``emailtab`` contact list."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from django.conf import settings
from django.core.mail import EmailMultiAlternatives, get_connection
from django.utils.html import strip_tags

from siteadmin.models import EmailContact

logger = logging.getLogger(__name__)

DEFAULT_SUBJECT = 'UOP Vehicle Registration Confirmation'
DEFAULT_BODY = (
    '<b>Link : <u>https://gatepass.pdn.ac.lk</u></b><br>\n'
    'User Name: Emp Provident fund no in five digits (Ex: 01234)<br>\n'
    'Password: Emp NIC no (As in ETF statement)<br><br>\n'
)


@dataclass
class BulkEmailResult:
    sent: int = 0
    failed: int = 0
    errors: List[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.sent + self.failed

    @property
    def message(self) -> str:
        text = f'Bulk email complete: {self.sent} sent, {self.failed} failed out of {self.total} contacts.'
        if self.errors:
            text += ' Failed: ' + ', '.join(self.errors)
        return text


def contact_emails() -> List[str]:
    emails = (
        EmailContact.objects.exclude(email__isnull=True).exclude(email='')
        .values_list('email', flat=True)
    )
    return [email.strip() for email in emails if email.strip()]


def send_bulk_email(subject: str, body: str, recipients: Optional[Iterable[str]] = None) -> BulkEmailResult:
    """Send *body* (HTML) one message per recipient; defaults to every contact on file."""
    if recipients is None:
        recipients = contact_emails()

    result = BulkEmailResult()
    timeout = int(getattr(settings, 'GATEPASS_EMAIL_TIMEOUT', 10) or 10)
    connection = get_connection(timeout=timeout)
    text_body = strip_tags(body)
    for address in recipients:
        address = (address or '').strip()
        if not address:
            continue
        message = EmailMultiAlternatives(
            subject=subject,
            body=text_body,
            from_email=settings.DEFAULT_FROM_EMAIL,
            to=[address],
            connection=connection,
        )
        message.attach_alternative(body, 'text/html')
        try:
            message.send(fail_silently=False)
        except Exception as exc:
            logger.error('Bulk email failed for %s: %s', address, exc)
            result.failed += 1
            result.errors.append(address)
        else:
            logger.info('Bulk email sent to: %s', address)
            result.sent += 1

    logger.info('Bulk email results: %s sent, %s failed', result.sent, result.failed)
    return result
