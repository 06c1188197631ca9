from django import template

from accounts.access import is_allowed
from accounts.roles import role_of

register = template.Library()


@register.filter
def get_item(obj, key):
    """Template helper: dict access by dynamic key."""
    try:
        return obj.get(key)
    except Exception:
        try:
            return obj[key]
        except Exception:
            return ''


@register.filter
def can_open(user, path):
    """``{% if request.user|can_open:'/qr/generate' %}`` hides links the role cannot follow."""
    return is_allowed(str(path), role_of(user))
