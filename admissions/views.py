# admissions/views.py
"""
ADMISSION VIEWS - public enrollment and the admin pre-registration desk.
"""
import logging

from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods

from core.exceptions import ConflictError
from shared.decorators.permissions import public_tenant, require_tenant
from shared.utils.idempotency import IdempotencyService
from shared.utils.pagination import paginated_response
from shared.utils.payload import parse_json
from .forms import clean_enrollment
from .services import EnrollmentOrchestrator, PreRegistrationService

logger = logging.getLogger(__name__)


# ============ PUBLIC ENROLLMENT ============

def _enroll(request, tenant_id):
    guardian, children = clean_enrollment(parse_json(request))

    idempotency_key = IdempotencyService.get_idempotency_key(request, scope=f"enroll_{tenant_id}")
    if idempotency_key and not IdempotencyService.check_and_lock(idempotency_key):
        logger.info(f"Duplicate enrollment request for school {tenant_id}")
        raise ConflictError("This enrollment was already submitted.")

    try:
        fact = EnrollmentOrchestrator(tenant_id, guardian, children).run()
    except Exception:
        if idempotency_key:
            IdempotencyService.mark_failed(idempotency_key)
        raise

    if idempotency_key:
        IdempotencyService.mark_processed(idempotency_key)
    return JsonResponse(fact.to_dict(), status=201)


@csrf_exempt
@require_http_methods(["GET", "POST"])
def enrollment_collection_view(request, tenant_id):
    if request.method == "POST":
        return public_tenant(_enroll)(request, tenant_id=tenant_id)
    return require_tenant(manage=True)(_pre_registration_list)(request, tenant_id=tenant_id)


# ============ PRE-REGISTRATION DESK ============

def _pre_registration_list(request, tenant_id):
    guardians = PreRegistrationService.filter(PreRegistrationService.guardians(request.school), request.GET)
    return paginated_response(guardians, request, serializer=PreRegistrationService.summary)


@require_http_methods(["GET", "DELETE"])
@require_tenant(manage=True)
def pre_registration_detail_view(request, tenant_id, guardian_id):
    guardian = PreRegistrationService.get_guardian(request.school, guardian_id)

    if request.method == "DELETE":
        counts = PreRegistrationService.discard(request.principal, guardian)
        return JsonResponse({'deleted': True, 'guardian_id': guardian_id, **counts})

    return JsonResponse(PreRegistrationService.summary(guardian, with_children=True))


@require_http_methods(["POST"])
@require_tenant(manage=True)
def pre_registration_validate_view(request, tenant_id, guardian_id):
    guardian = PreRegistrationService.get_guardian(request.school, guardian_id)
    registered = PreRegistrationService.validate(request.principal, guardian)
    return JsonResponse({'guardian_id': guardian_id, 'registered': registered})
