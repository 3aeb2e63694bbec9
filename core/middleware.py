# core/middleware.py
"""
MIDDLEWARE - tenant context, security headers, request logging and the
single place where business exceptions become HTTP responses.
"""
import logging
from typing import Optional, Any

from django.conf import settings
from django.http import Http404, JsonResponse

from shared.constants import SCHOOL_CODE_HEADER
from .exceptions import (
    AuthorizationError,
    NotFoundError,
    SagaFailure,
    SchoolManagementException,
)
from .tenancy import ANONYMOUS, Principal, resolve_school

logger = logging.getLogger(__name__)


# ============ TENANT CONTEXT MIDDLEWARE ============

class TenantContextMiddleware:
    """
    Attaches ``request.principal`` and ``request.school``.

    School resolution order:
    1. ``tenant_id`` URL kwarg
    2. ``X-School-Code`` header
    3. The principal's home school
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        request.principal = self._resolve_principal(request)
        request.school = None
        return self.get_response(request)

    def process_view(self, request, view_func, view_args, view_kwargs):
        request.school = self._resolve_school(request, view_kwargs.get('tenant_id'))
        return None

    def _resolve_principal(self, request) -> Principal:
        user = getattr(request, 'user', None)
        if user is None or not user.is_authenticated:
            return ANONYMOUS
        principal = Principal.from_user(user)
        logger.debug(f"Resolved principal {principal.user_id} roles={sorted(r.value for r in principal.roles)}")
        return principal

    def _resolve_school(self, request, tenant_id) -> Optional[Any]:
        school = resolve_school(
            tenant_id=tenant_id,
            school_code=request.headers.get(SCHOOL_CODE_HEADER),
            principal=getattr(request, 'principal', None),
        )
        if school:
            logger.debug(f"Resolved school: {school.code}")
        return school


# ============ SECURITY HEADERS MIDDLEWARE ============

class SecurityHeadersMiddleware:
    """Adds baseline security headers."""

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        response = self.get_response(request)
        response["X-Content-Type-Options"] = "nosniff"
        response["X-Frame-Options"] = "DENY"
        response["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.setdefault("Cache-Control", "no-store")
        return response


# ============ EXCEPTION HANDLING MIDDLEWARE ============

NOT_FOUND_BODY = {
    'error': 'NOT_FOUND',
    'message': 'Resource not found.',
    'details': {},
}


class ExceptionHandlingMiddleware:
    """Maps SchoolManagementException subclasses to JSON; everything else is an opaque 500."""

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        return self.get_response(request)

    def process_exception(self, request, exception):
        # Denied and missing are indistinguishable to the caller
        if isinstance(exception, (AuthorizationError, NotFoundError, Http404)):
            logger.info(f"Not found / denied on {request.path}: {exception}")
            return JsonResponse(NOT_FOUND_BODY, status=404)

        if isinstance(exception, SagaFailure):
            logger.error(f"Saga failure on {request.path} at step {exception.step}: {exception}", exc_info=True)
            return JsonResponse({
                'error': exception.error_code,
                'message': 'The operation failed and no changes were saved.',
                'details': {'step': exception.step} if exception.step else {},
            }, status=exception.status_code)

        if isinstance(exception, SchoolManagementException):
            logger.warning(f"Business exception on {request.path}: {exception}")
            return JsonResponse({
                'error': exception.error_code,
                'message': str(exception) if exception.user_friendly else "Operation failed.",
                'details': exception.details,
            }, status=exception.status_code)

        logger.error(f"System exception on {request.path}: {exception}", exc_info=True)
        return JsonResponse({
            'error': 'INTERNAL_ERROR',
            'message': 'System error. Our team has been notified.',
            'details': {},
        }, status=500)


# ============ REQUEST LOGGING MIDDLEWARE ============

class RequestLoggingMiddleware:
    """Debug-level structured request/response logging."""

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        if self._should_skip_logging(request) or not settings.DEBUG:
            return self.get_response(request)

        logger.debug("Request", extra={
            "method": request.method,
            "path": request.path,
            "ip": self._get_client_ip(request),
            "user": getattr(getattr(request, 'principal', None), "user_id", None),
        })

        response = self.get_response(request)

        logger.debug("Response", extra={
            "path": request.path,
            "status": response.status_code,
            "school": getattr(getattr(request, "school", None), "pk", None),
        })
        return response

    def _should_skip_logging(self, request) -> bool:
        skip_paths = ['/static/', '/media/', '/favicon.ico', '/health/']
        return any(request.path.startswith(path) for path in skip_paths)

    def _get_client_ip(self, request) -> str:
        xff = request.META.get("HTTP_X_FORWARDED_FOR")
        return xff.split(",")[0] if xff else request.META.get("REMOTE_ADDR", "unknown")
