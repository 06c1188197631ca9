from __future__ import annotations

from dataclasses import dataclass, asdict, field
from typing import Optional

from django.utils import timezone

SESSION_KEY = 'gatepass.context'
KEEPALIVE_TOKEN_KEY = 'gatepass.keepalive_csrf'

AUTH_FORM = 'form'
AUTH_STUDENT = 'student'
AUTH_OIDC = 'oidc'
AUTH_GOOGLE = 'google'


@dataclass
class SessionContext:
    """What the login left behind for the rest of the session.

    Lives in the Django session under ``SESSION_KEY`` from login until
    logout or expiry; identity-provider claims are never written to the
    database.
    """
    auth_method: str
    uid: str = ''
    email: str = ''
    employee_type: str = ''
    name_with_initials: str = ''
    login_time: float = field(default_factory=lambda: timezone.now().timestamp())
    id_token: str = ''
    token_expires_at: Optional[float] = None

    @property
    def is_federated(self) -> bool:
        return self.auth_method in (AUTH_OIDC, AUTH_GOOGLE)

    def token_ttl(self) -> int:
        if not self.token_expires_at:
            return 0
        return max(0, int(self.token_expires_at - timezone.now().timestamp()))

    def store(self, request) -> None:
        request.session[SESSION_KEY] = asdict(self)

    @classmethod
    def from_request(cls, request) -> Optional['SessionContext']:
        session = getattr(request, 'session', None)
        if session is None:
            return None
        raw = session.get(SESSION_KEY)
        if not raw:
            return None
        try:
            return cls(**raw)
        except TypeError:
            return None

    @staticmethod
    def clear(request) -> None:
        request.session.pop(SESSION_KEY, None)
