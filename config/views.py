# config/views.py
"""
Project-level views: health check and JSON error handlers.
"""
import logging

from django.db import connection
from django.db.utils import OperationalError
from django.http import JsonResponse
from django.utils import timezone

from core.middleware import NOT_FOUND_BODY

logger = logging.getLogger(__name__)


def health_check_view(request):
    """System health check endpoint."""
    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
        db_status = True
    except OperationalError:
        logger.error("Health check: database unreachable")
        db_status = False

    status_code = 200 if db_status else 503

    return JsonResponse({
        'status': 'healthy' if db_status else 'unhealthy',
        'database': 'connected' if db_status else 'disconnected',
        'timestamp': timezone.now().isoformat(),
    }, status=status_code)


# ============================================================================
# ERROR HANDLERS
# ============================================================================

def handler400(request, exception):
    return JsonResponse({
        'error': 'BAD_REQUEST',
        'message': 'Your request could not be processed.',
        'details': {},
    }, status=400)


def handler404(request, exception):
    return JsonResponse(NOT_FOUND_BODY, status=404)


def handler500(request):
    return JsonResponse({
        'error': 'INTERNAL_ERROR',
        'message': 'An unexpected error occurred.',
        'details': {},
    }, status=500)
