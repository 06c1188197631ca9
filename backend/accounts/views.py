from __future__ import annotations

import logging

import requests
from authlib.integrations.base_client import OAuthError
from django.conf import settings
from django.contrib.auth import login as auth_login, logout as auth_logout, views as auth_views
from django.contrib.auth.decorators import login_required
from django.http import HttpRequest
from django.shortcuts import redirect, render
from rest_framework_simplejwt.views import TokenObtainPairView

from .federated import (
    PROVIDER_AUTH_METHODS,
    FederatedIdentity,
    FederatedLoginError,
    accept_identity,
    build_session_context,
    end_session_url,
    get_client,
)
from .forms import GatePassAuthenticationForm
from .serializers import GatePassTokenObtainPairSerializer
from .services_dashboard import resolve_dashboard
from .session import AUTH_FORM, AUTH_STUDENT, SessionContext

logger = logging.getLogger(__name__)

LOGIN_ERRORS = {
    'domain': 'Access denied: Only @pdn.ac.lk emails are allowed',
    'oauth': 'Single sign-on failed. Please try again.',
}
DEFAULT_LOGIN_ERROR = 'Invalid username or password'

LOCAL_BACKEND = 'accounts.auth_backends.LocalAccountBackend'
STUDENT_BACKEND = 'accounts.auth_backends.StudentAccountBackend'


def home(request: HttpRequest):
    if request.user.is_authenticated:
        return redirect(settings.LOGIN_REDIRECT_URL)
    return redirect(settings.LOGIN_URL)


class GatePassLoginView(auth_views.LoginView):
    template_name = 'registration/login.html'
    authentication_form = GatePassAuthenticationForm
    redirect_authenticated_user = True

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        error = self.request.GET.get('error')
        if error is not None:
            context['login_error'] = LOGIN_ERRORS.get(error, DEFAULT_LOGIN_ERROR)
        if 'logout' in self.request.GET:
            context['login_message'] = 'You have been logged out successfully'
        context['providers'] = [name for name in PROVIDER_AUTH_METHODS if get_client(name) is not None]
        return context

    def form_valid(self, form):
        response = super().form_valid(form)
        user = form.get_user()
        method = AUTH_STUDENT if getattr(user, 'backend', '') == STUDENT_BACKEND else AUTH_FORM
        SessionContext(
            auth_method=method,
            uid=user.username,
            email=user.email,
            name_with_initials=user.full_name,
        ).store(self.request)
        logger.info('Login: user=%s method=%s', user.username, method)
        return response


def logout_view(request: HttpRequest):
    """End the local session; OIDC sessions also end at the identity provider."""
    context = SessionContext.from_request(request)
    post_logout = request.build_absolute_uri(settings.LOGOUT_REDIRECT_URL)
    target = end_session_url(context, post_logout) if context is not None else None

    username = request.user.username if request.user.is_authenticated else None
    auth_logout(request)
    if username:
        logger.info('Logout: user=%s federated=%s', username, bool(target))

    return redirect(target or settings.LOGOUT_REDIRECT_URL)


def oauth_login(request: HttpRequest, provider: str):
    client = get_client(provider)
    if client is None:
        logger.warning('Login requested for unconfigured provider %s', provider)
        return redirect(f'{settings.LOGIN_URL}?error=oauth')
    redirect_uri = request.build_absolute_uri(f'/login/oauth2/code/{provider}')
    return client.authorize_redirect(request, redirect_uri)


def oauth_callback(request: HttpRequest, provider: str):
    client = get_client(provider)
    if client is None:
        return redirect(f'{settings.LOGIN_URL}?error=oauth')

    try:
        token = client.authorize_access_token(request)
        claims = token.get('userinfo') or client.userinfo(token=token)
    except (OAuthError, requests.RequestException):
        logger.exception('Federated login failed at provider %s', provider)
        return redirect(f'{settings.LOGIN_URL}?error=oauth')

    identity = FederatedIdentity.from_claims(claims or {})
    try:
        user = accept_identity(identity)
    except FederatedLoginError as exc:
        return redirect(f'{settings.LOGIN_URL}?error={exc.error_code}')

    auth_login(request, user, backend=LOCAL_BACKEND)
    build_session_context(provider, identity, token).store(request)
    logger.info('Federated login: provider=%s user=%s', provider, user.username)
    return redirect(settings.LOGIN_REDIRECT_URL)


@login_required(login_url=settings.LOGIN_URL)
def dashboard(request: HttpRequest):
    return render(request, 'accounts/dashboard.html', resolve_dashboard(request.user))


def access_denied(request: HttpRequest):
    return render(request, 'errors/403.html', {'message': 'You do not have access to this page.'}, status=403)


class GatePassTokenObtainPairView(TokenObtainPairView):
    serializer_class = GatePassTokenObtainPairSerializer
