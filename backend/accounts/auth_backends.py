from __future__ import annotations

import logging
import re
from typing import Optional

from django.contrib.auth import get_user_model
from django.contrib.auth.backends import BaseBackend

from .models import UserType
from .services import record_login, upsert_account

logger = logging.getLogger(__name__)

# Registration numbers used as login names: M/24/001, AHS/22/010
STUDENT_LOGIN_RE = re.compile(r'^[A-Za-z]+/\d+/.*')


class _UserLookupMixin:
    def get_user(self, user_id):
        UserModel = get_user_model()
        try:
            return UserModel._default_manager.get(pk=user_id)
        except UserModel.DoesNotExist:
            return None

    def user_can_authenticate(self, user) -> bool:
        is_active = getattr(user, 'is_active', None)
        return is_active or is_active is None


class LocalAccountBackend(_UserLookupMixin, BaseBackend):
    """Authenticate against the ``user`` table.

    Passwords are compared exactly as stored (legacy accounts were never
    hashed), so a student who logged in once is served from here on every
    later login without touching the student registry.
    """

    def authenticate(self, request, username: Optional[str] = None, password: Optional[str] = None, **kwargs):
        if not username or not password:
            return None

        identifier = str(username).strip()
        if not identifier:
            return None

        UserModel = get_user_model()
        try:
            user = UserModel._default_manager.get(username=identifier)
        except UserModel.DoesNotExist:
            return None

        if not self.user_can_authenticate(user) or not user.check_password(password):
            return None

        return record_login(user)


class StudentAccountBackend(_UserLookupMixin, BaseBackend):
    """Authenticate a registered student by registration number and NIC.

    Only consulted for usernames shaped like a registration number. On
    success the student gets a local ``entry`` account whose password is the
    NIC, so ``LocalAccountBackend`` handles the next login.
    """

    def authenticate(self, request, username: Optional[str] = None, password: Optional[str] = None, **kwargs):
        if not username or not password:
            return None

        reg_no = str(username).strip()
        if not STUDENT_LOGIN_RE.match(reg_no):
            return None

        from people.services import students

        login = students.verify_login(reg_no, str(password).strip())
        if login is None:
            logger.info('Student login rejected for %s', reg_no)
            return None

        user = upsert_account(
            login.reg_no,
            utype=UserType.ENTRY,
            full_name=login.last_name,
            password=login.nic,
        )
        if not self.user_can_authenticate(user):
            return None

        logger.info('Student authenticated via registry: %s', login.reg_no)
        return user
