import logging
from typing import Optional

from django.contrib.auth import get_user_model
from django.db import transaction
from django.utils import timezone

logger = logging.getLogger(__name__)


def record_login(user):
    """Stamp ``last_login`` without touching any other column."""
    user.last_login = timezone.now()
    user.save(update_fields=['last_login'])
    return user


@transaction.atomic
def upsert_account(username: str, *, utype: str, full_name: str = '', email: str = '',
                   password: Optional[str] = None):
    """Create or refresh the local row for a student or federated login.

    - a new row gets *utype*; an existing row keeps the type an administrator
      may have given it
    - ``full_name`` and ``email`` are refreshed when supplied
    - ``password`` (the student NIC) is stored as issued
    - ``last_login`` is stamped in every case
    """
    if not username:
        raise ValueError('username is required')

    User = get_user_model()
    user = User.objects.select_for_update().filter(username=username).first()
    created = user is None
    if created:
        user = User(username=username, utype=utype, create_date=timezone.now())
        if password is None:
            user.set_unusable_password()

    if full_name:
        user.full_name = full_name
    if email:
        user.email = email
    if password is not None:
        user.set_password(password)
    user.last_login = timezone.now()
    user.save()

    logger.info('Account %s: username=%s utype=%s', 'created' if created else 'updated', username, user.utype)
    return user
