# shared/utils/pagination.py
"""
Pagination for list endpoints. Always applied after every scoping filter so
the total reflects what the caller may actually see.
"""
from django.conf import settings
from django.core.paginator import EmptyPage, Paginator
from django.http import JsonResponse

from shared.constants import PAGINATION_HEADERS


def _positive_int(value, default):
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    return number if number > 0 else default


def paginate(queryset, request, serializer=None):
    """
    Return ``(items, meta)`` for the requested page.

    ``page`` / ``page_size`` come from the query string; page size is capped
    by ``API_MAX_PAGE_SIZE``. A page past the end yields an empty item list.
    """
    default_size = getattr(settings, 'API_PAGE_SIZE', 20)
    max_size = getattr(settings, 'API_MAX_PAGE_SIZE', 100)

    page_number = _positive_int(request.GET.get('page'), 1)
    page_size = min(_positive_int(request.GET.get('page_size'), default_size), max_size)

    paginator = Paginator(queryset, page_size)
    try:
        objects = list(paginator.page(page_number).object_list)
    except EmptyPage:
        objects = []

    serializer = serializer or (lambda obj: obj.to_dict())
    meta = {
        'total': paginator.count,
        'page': page_number,
        'page_size': page_size,
        'total_pages': paginator.num_pages if paginator.count else 0,
    }
    return [serializer(obj) for obj in objects], meta


def paginated_response(queryset, request, serializer=None):
    """JsonResponse with the page in the body and the metadata mirrored in headers."""
    items, meta = paginate(queryset, request, serializer)
    response = JsonResponse({'results': items, 'pagination': meta})
    for key, header in PAGINATION_HEADERS.items():
        response[header] = str(meta[key])
    return response
