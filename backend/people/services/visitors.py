from __future__ import annotations

from typing import Optional

from django.db.models import QuerySet

from people.models import Visitor


def by_id(visitor_id) -> Optional[Visitor]:
    """Visitor ids are numeric; anything else cannot match."""
    try:
        pk = int(str(visitor_id).strip())
    except (TypeError, ValueError):
        return None
    return Visitor.objects.filter(pk=pk).first()


def all_newest_first() -> QuerySet:
    return Visitor.objects.order_by('-id')

