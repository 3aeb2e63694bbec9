# billing/views.py
"""
Billing views - payments (Admin manages; parents read their own children's).
"""
import logging

from django.http import HttpResponse, JsonResponse
from django.views.decorators.http import require_http_methods

from core.policy import Resource
from shared.decorators.permissions import require_tenant
from shared.utils.pagination import paginated_response
from shared.utils.payload import changed_fields, clean_form, parse_json
from .forms import PaymentForm
from .services import PaymentService

logger = logging.getLogger(__name__)


def _filter_payments(queryset, request):
    status = request.GET.get('status', '').strip()
    if status:
        queryset = queryset.filter(status=status)
    child_id = request.GET.get('child_id', '').strip()
    if child_id.isdigit():
        queryset = queryset.filter(child_id=int(child_id))
    kind = request.GET.get('kind', '').strip()
    if kind:
        queryset = queryset.filter(kind=kind)
    school_year = request.GET.get('school_year', '').strip()
    if school_year:
        queryset = queryset.filter(school_year=school_year)
    return queryset


@require_http_methods(["GET", "POST"])
@require_tenant()
def payment_collection_view(request, tenant_id):
    scope = request.scope

    if request.method == "POST":
        request.policy.authorize_manage(Resource.TENANT, request.school)
        cleaned = clean_form(PaymentForm, parse_json(request))
        child = scope.get(scope.children(), cleaned['child_id'], 'Child')
        payment = PaymentService.create_payment(request.principal, request.school, child, cleaned)
        return JsonResponse(payment.to_dict(), status=201)

    payments = _filter_payments(scope.payments(), request)
    return paginated_response(payments.order_by('-due_on', '-created_at', '-pk'), request)


@require_http_methods(["GET"])
@require_tenant()
def payment_summary_view(request, tenant_id):
    payments = _filter_payments(request.scope.payments(), request)
    return JsonResponse(PaymentService.summary(payments))


@require_http_methods(["GET", "PUT", "PATCH", "DELETE"])
@require_tenant()
def payment_detail_view(request, tenant_id, payment_id):
    scope = request.scope
    payment = scope.get(scope.payments().select_related('child'), payment_id, 'Payment')
    request.policy.authorize_access(Resource.PAYMENT, request.school, payment.child)

    if request.method == "GET":
        return JsonResponse(payment.to_dict())

    request.policy.authorize_manage(Resource.PAYMENT, request.school, payment.child)

    if request.method == "DELETE":
        PaymentService.delete_payment(request.principal, payment)
        return HttpResponse(status=204)

    data = parse_json(request)
    data.pop('child_id', None)
    cleaned = clean_form(PaymentForm, data, partial=True)
    payment = PaymentService.update_payment(request.principal, payment, changed_fields(data, cleaned))
    return JsonResponse(payment.to_dict())
