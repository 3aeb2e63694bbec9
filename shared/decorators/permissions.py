# shared/decorators/permissions.py
"""
UNIFIED PERMISSION DECORATORS
==============================

Thin view decorators over the policy engine. All decisions flow through
``core.policy.PolicyEngine``; these only wire the request to it.
"""

import logging
from functools import wraps
from typing import Callable

from django.http import HttpRequest, HttpResponse

from core.exceptions import AuthenticationError, NotFoundError
from core.policy import PolicyEngine, Resource
from core.scoping import QueryScope
from core.tenancy import ANONYMOUS, resolve_school

logger = logging.getLogger(__name__)


# ============================================================================
# 1. HELPERS
# ============================================================================

def _principal(request: HttpRequest):
    return getattr(request, 'principal', ANONYMOUS)


def _attach_school(request: HttpRequest, tenant_id):
    """Resolve the live school named in the path or raise NotFoundError."""
    school = getattr(request, 'school', None)
    if school is None or school.pk != tenant_id:
        school = resolve_school(tenant_id=tenant_id)
    if school is None:
        raise NotFoundError("School not found")
    request.school = school
    return school


# ============================================================================
# 2. CORE DECORATORS
# ============================================================================

def require_principal(view_func: Callable) -> Callable:
    """Reject anonymous callers with AuthenticationError."""
    @wraps(view_func)
    def _wrapped_view(request: HttpRequest, *args, **kwargs) -> HttpResponse:
        principal = _principal(request)
        if not principal.is_authenticated:
            raise AuthenticationError()
        request.policy = PolicyEngine(principal)
        return view_func(request, *args, **kwargs)

    return _wrapped_view


def require_super_admin(view_func: Callable) -> Callable:
    """Platform-level endpoints."""
    @wraps(view_func)
    @require_principal
    def _wrapped_view(request: HttpRequest, *args, **kwargs) -> HttpResponse:
        request.policy.require_super_admin()
        return view_func(request, *args, **kwargs)

    return _wrapped_view


def require_tenant(manage: bool = False) -> Callable:
    """
    Authorize the caller on the school in the ``tenant_id`` URL kwarg.

    Attaches ``request.school``, ``request.policy`` and ``request.scope``.
    """
    def decorator(view_func: Callable) -> Callable:
        @wraps(view_func)
        @require_principal
        def _wrapped_view(request: HttpRequest, *args, **kwargs) -> HttpResponse:
            tenant_id = kwargs.get('tenant_id')
            # Deny first so that a foreign tenant and a missing tenant look alike
            if manage:
                request.policy.authorize_manage(Resource.TENANT, tenant_id)
            else:
                request.policy.authorize_access(Resource.TENANT, tenant_id)
            school = _attach_school(request, tenant_id)
            request.scope = QueryScope(_principal(request), school)
            return view_func(request, *args, **kwargs)

        return _wrapped_view

    return decorator


def public_tenant(view_func: Callable) -> Callable:
    """Anonymous endpoints that still need a live school in the path."""
    @wraps(view_func)
    def _wrapped_view(request: HttpRequest, *args, **kwargs) -> HttpResponse:
        _attach_school(request, kwargs.get('tenant_id'))
        request.policy = PolicyEngine(_principal(request))
        return view_func(request, *args, **kwargs)

    return _wrapped_view


__all__ = [
    'require_principal',
    'require_super_admin',
    'require_tenant',
    'public_tenant',
]
