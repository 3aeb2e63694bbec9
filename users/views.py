# users/views.py
"""
USER VIEWS - authentication, school principals and platform administrators.
"""
import logging

from django.contrib.auth import authenticate, login, logout
from django.contrib.auth import get_user_model
from django.db.models import Q
from django.http import HttpResponse, JsonResponse
from django.middleware.csrf import get_token
from django.views.decorators.csrf import csrf_exempt, ensure_csrf_cookie
from django.views.decorators.http import require_http_methods

from core.exceptions import AuthenticationError, NotFoundError
from core.policy import Resource
from shared.constants import Role
from shared.decorators.permissions import require_principal, require_super_admin, require_tenant
from shared.utils.pagination import paginated_response
from shared.utils.payload import changed_fields, clean_form, parse_json
from .forms import (
    ChangePasswordForm,
    LoginForm,
    PasswordResetForm,
    PrincipalCreateForm,
    PrincipalUpdateForm,
)
from .services import CredentialService, PrincipalService

logger = logging.getLogger(__name__)

User = get_user_model()


def _filter_principals(queryset, request):
    role = request.GET.get('role', '').strip()
    if role:
        queryset = queryset.filter(role_assignments__role=role)
    search = request.GET.get('search', '').strip()
    if search:
        queryset = queryset.filter(
            Q(email__icontains=search) | Q(first_name__icontains=search) | Q(last_name__icontains=search)
        )
    active = request.GET.get('is_active')
    if active in ('true', 'false'):
        queryset = queryset.filter(is_active=(active == 'true'))
    return queryset.distinct().order_by('last_name', 'first_name', 'pk')


# ============ AUTHENTICATION ============

@require_http_methods(["GET"])
@ensure_csrf_cookie
def csrf_view(request):
    """Hands out the CSRF token that session clients echo back in X-CSRFToken."""
    return JsonResponse({'csrf_token': get_token(request)})


@csrf_exempt
@require_http_methods(["POST"])
def login_view(request):
    cleaned = clean_form(LoginForm, parse_json(request))
    user = authenticate(request, username=cleaned['email'], password=cleaned['password'])
    if user is None:
        logger.info(f"Failed login for {cleaned['email']}")
        raise AuthenticationError("Invalid email or password.")
    login(request, user)
    logger.info(f"User {user.pk} logged in")
    return JsonResponse(user.to_dict())


@require_http_methods(["POST"])
@require_principal
def logout_view(request):
    logout(request)
    return HttpResponse(status=204)


@require_http_methods(["GET"])
@require_principal
def me_view(request):
    return JsonResponse(request.user.to_dict())


@require_http_methods(["POST"])
@require_principal
def change_password_view(request):
    cleaned = clean_form(ChangePasswordForm, parse_json(request))
    CredentialService.change_password(request.user, cleaned['current_password'], cleaned['new_password'])
    return HttpResponse(status=204)


# ============ SCHOOL PRINCIPALS ============

@require_http_methods(["GET", "POST"])
@require_tenant()
def principal_collection_view(request, tenant_id):
    if request.method == "POST":
        request.policy.authorize_manage(Resource.TENANT, request.school)
        cleaned = clean_form(PrincipalCreateForm, parse_json(request))
        roles = cleaned.pop('roles')
        user = PrincipalService.create_principal(request.principal, request.school, cleaned, roles)
        return JsonResponse(user.to_dict(), status=201)

    users = _filter_principals(request.scope.principals(), request)
    return paginated_response(users, request)


def _get_principal(request, user_id):
    return request.scope.get(request.scope.principals(), user_id, 'User')


@require_http_methods(["GET", "PUT", "PATCH", "DELETE"])
@require_tenant()
def principal_detail_view(request, tenant_id, user_id):
    user = _get_principal(request, user_id)
    request.policy.authorize_access(Resource.PRINCIPAL, request.school, user)

    if request.method == "GET":
        return JsonResponse(user.to_dict())

    request.policy.authorize_manage(Resource.PRINCIPAL, request.school, user)

    if request.method == "DELETE":
        counts = PrincipalService.delete_principal(request.principal, user)
        return JsonResponse({'deleted': True, 'user_id': user_id, **counts})

    data = parse_json(request)
    cleaned = clean_form(PrincipalUpdateForm, data, partial=True)
    user = PrincipalService.update_principal(request.principal, user, changed_fields(data, cleaned))
    return JsonResponse(user.to_dict())


@require_http_methods(["GET"])
@require_tenant(manage=True)
def principal_statistics_view(request, tenant_id):
    return JsonResponse(PrincipalService.get_principal_stats(request.scope.principals()))


@require_http_methods(["POST"])
@require_tenant(manage=True)
def principal_reset_password_view(request, tenant_id, user_id):
    user = _get_principal(request, user_id)
    request.policy.authorize_manage(Resource.PRINCIPAL, request.school, user)
    cleaned = clean_form(PasswordResetForm, parse_json(request))
    CredentialService.reset_password(request.principal, user, cleaned['new_password'])
    return HttpResponse(status=204)


# ============ PLATFORM ADMINISTRATION ============

@require_http_methods(["GET", "POST"])
@require_super_admin
def super_admin_collection_view(request):
    if request.method == "POST":
        cleaned = clean_form(PrincipalCreateForm, {**parse_json(request), 'roles': [Role.SUPER_ADMIN.value]})
        cleaned.pop('roles')
        user = PrincipalService.create_principal(request.principal, None, cleaned, [Role.SUPER_ADMIN])
        return JsonResponse(user.to_dict(), status=201)

    users = _filter_principals(User.objects.with_role(Role.SUPER_ADMIN), request)
    return paginated_response(users, request)


@require_http_methods(["DELETE"])
@require_super_admin
def platform_principal_delete_view(request, user_id):
    user = User.objects.filter(pk=user_id).first()
    if user is None:
        raise NotFoundError("User not found")
    counts = PrincipalService.delete_principal_platform(request.principal, user)
    return JsonResponse({'deleted': True, 'user_id': user_id, **counts})
