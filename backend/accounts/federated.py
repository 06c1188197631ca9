"""Federated login through Keycloak (OIDC) or Google.

The OAuth dance itself is Authlib's; this module only decides whether the
identity the provider vouched for may use the gate-pass system and what
local account and session context it maps to.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Mapping, Optional
from urllib.parse import urlencode

from authlib.integrations.django_client import OAuth
from django.conf import settings

from .models import UserType
from .services import upsert_account
from .session import AUTH_GOOGLE, AUTH_OIDC, SessionContext

logger = logging.getLogger(__name__)

PROVIDER_AUTH_METHODS = {
    'keycloak': AUTH_OIDC,
    'google': AUTH_GOOGLE,
}

oauth = OAuth()
for _name, _config in getattr(settings, 'AUTHLIB_OAUTH_CLIENTS', {}).items():
    oauth.register(_name, **_config)


class FederatedLoginError(Exception):
    """The provider answered but the identity cannot be used."""

    error_code = 'oauth'


class DomainNotAllowed(FederatedLoginError):
    error_code = 'domain'


@dataclass(frozen=True)
class FederatedIdentity:
    uid: str = ''
    email: str = ''
    name: str = ''
    name_with_initials: str = ''
    employee_type: str = ''

    @classmethod
    def from_claims(cls, claims: Mapping) -> 'FederatedIdentity':
        def claim(key):
            value = claims.get(key)
            return str(value).strip() if value is not None else ''

        return cls(
            uid=claim('uid'),
            email=claim('email').lower(),
            name=claim('name'),
            name_with_initials=claim('name_with_initials'),
            employee_type=claim('employee_type'),
        )

    @property
    def username(self) -> str:
        return self.uid or self.email

    @property
    def display_name(self) -> str:
        return self.name_with_initials or self.name


def get_client(provider: str):
    if provider not in PROVIDER_AUTH_METHODS:
        return None
    return oauth.create_client(provider)


def is_allowed_domain(email: str, allowed: Optional[Iterable[str]] = None) -> bool:
    """True for an address in an allowed domain or any subdomain of one."""
    if not email or '@' not in email:
        return False
    if allowed is None:
        allowed = settings.GATEPASS_ALLOWED_EMAIL_DOMAINS
    domain = email.rsplit('@', 1)[1].strip().lower()
    for entry in allowed:
        entry = entry.strip().lower()
        if entry and (domain == entry or domain.endswith('.' + entry)):
            return True
    return False


def accept_identity(identity: FederatedIdentity):
    """Upsert the local account for *identity* or raise ``FederatedLoginError``."""
    if not is_allowed_domain(identity.email):
        logger.warning('Federated login rejected - domain not allowed: %s', identity.email or '<none>')
        raise DomainNotAllowed(identity.email)
    if not identity.username:
        raise FederatedLoginError('identity carries neither uid nor email')

    return upsert_account(
        identity.username,
        utype=UserType.GOOGLE_USER,
        full_name=identity.display_name,
        email=identity.email,
    )


def build_session_context(provider: str, identity: FederatedIdentity, token: Mapping) -> SessionContext:
    expires_at = token.get('expires_at')
    userinfo = token.get('userinfo') or {}
    if userinfo.get('exp'):
        expires_at = min(float(userinfo['exp']), float(expires_at)) if expires_at else float(userinfo['exp'])
    return SessionContext(
        auth_method=PROVIDER_AUTH_METHODS.get(provider, AUTH_OIDC),
        uid=identity.uid,
        email=identity.email,
        employee_type=identity.employee_type,
        name_with_initials=identity.name_with_initials,
        id_token=token.get('id_token', '') or '',
        token_expires_at=float(expires_at) if expires_at else None,
    )


def end_session_url(context: SessionContext, post_logout_redirect_uri: str) -> Optional[str]:
    """Provider logout URL for an OIDC session, or None when there is none to end."""
    if context is None or context.auth_method != AUTH_OIDC:
        return None
    client = get_client('keycloak')
    if client is None:
        return None
    try:
        metadata = client.load_server_metadata()
    except Exception:
        logger.exception('Could not load OIDC metadata for logout')
        return None
    endpoint = metadata.get('end_session_endpoint')
    if not endpoint:
        return None
    params = {'post_logout_redirect_uri': post_logout_redirect_uri}
    if context.id_token:
        params['id_token_hint'] = context.id_token
    return f'{endpoint}?{urlencode(params)}'
