from .roles import role_of
from .session import SessionContext


def gatepass_session(request):
    """Expose the caller's role and login context to every template."""
    role = role_of(getattr(request, 'user', None))
    return {
        'gatepass_role': role.value if role else '',
        'gatepass_role_label': role.label if role else '',
        'gatepass_context': SessionContext.from_request(request),
    }
