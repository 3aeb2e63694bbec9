# records/views.py
"""
RECORD VIEWS - report cards (governed by the child) and schedules
(governed by the classroom). Uploads are multipart.
"""
import logging

from django.http import HttpResponse, JsonResponse
from django.views.decorators.http import require_http_methods

from core.policy import Resource
from shared.decorators.permissions import require_tenant
from shared.utils.pagination import paginated_response
from shared.utils.payload import clean_form
from .forms import ReportCardForm, ScheduleFileForm
from .models import ReportCard, ScheduleFile
from .services import DocumentService

logger = logging.getLogger(__name__)


def _without_blobs(queryset):
    return queryset.defer('content')


# ============ REPORT CARDS ============

@require_http_methods(["GET", "POST"])
@require_tenant()
def report_card_collection_view(request, tenant_id):
    scope = request.scope

    if request.method == "POST":
        cleaned = clean_form(ReportCardForm, request.POST.dict())
        child = scope.get(scope.children(), cleaned['child_id'], 'Child')
        request.policy.authorize_manage(Resource.CHILD, request.school, child)
        report_card = DocumentService.create_report_card(
            request.principal, request.school, child, cleaned['term'],
            request.FILES.get('file'), cleaned.get('school_year'),
        )
        return JsonResponse(report_card.to_dict(), status=201)

    report_cards = _without_blobs(scope.child_documents(ReportCard))
    child_id = request.GET.get('child_id', '').strip()
    if child_id.isdigit():
        report_cards = report_cards.filter(child_id=int(child_id))
    term = request.GET.get('term', '').strip()
    if term.isdigit():
        report_cards = report_cards.filter(term=int(term))
    school_year = request.GET.get('school_year', '').strip()
    if school_year:
        report_cards = report_cards.filter(school_year=school_year)
    return paginated_response(report_cards.order_by('-school_year', 'term', 'pk'), request)


def _get_report_card(request, report_card_id):
    scope = request.scope
    report_card = scope.get(scope.child_documents(ReportCard), report_card_id, 'Report card')
    request.policy.authorize_access(Resource.CHILD, request.school, report_card.child)
    return report_card


@require_http_methods(["GET", "DELETE"])
@require_tenant()
def report_card_detail_view(request, tenant_id, report_card_id):
    report_card = _get_report_card(request, report_card_id)

    if request.method == "DELETE":
        request.policy.authorize_manage(Resource.CHILD, request.school, report_card.child)
        DocumentService.delete(request.principal, report_card)
        return HttpResponse(status=204)

    return JsonResponse(report_card.to_dict())


@require_http_methods(["GET"])
@require_tenant()
def report_card_download_view(request, tenant_id, report_card_id):
    return DocumentService.download(_get_report_card(request, report_card_id))


# ============ SCHEDULES ============

@require_http_methods(["GET", "POST"])
@require_tenant()
def schedule_collection_view(request, tenant_id):
    scope = request.scope

    if request.method == "POST":
        cleaned = clean_form(ScheduleFileForm, request.POST.dict())
        classroom = scope.get(scope.classrooms(), cleaned['classroom_id'], 'Classroom')
        request.policy.authorize_manage(Resource.CLASSROOM, request.school, classroom)
        schedule = DocumentService.create_schedule(
            request.principal, request.school, classroom,
            request.FILES.get('file'), cleaned.get('school_year'),
        )
        return JsonResponse(schedule.to_dict(), status=201)

    schedules = _without_blobs(scope.classroom_documents(ScheduleFile))
    classroom_id = request.GET.get('classroom_id', '').strip()
    if classroom_id.isdigit():
        schedules = schedules.filter(classroom_id=int(classroom_id))
    school_year = request.GET.get('school_year', '').strip()
    if school_year:
        schedules = schedules.filter(school_year=school_year)
    return paginated_response(schedules.order_by('-school_year', 'filename', 'pk'), request)


def _get_schedule(request, schedule_id):
    scope = request.scope
    schedule = scope.get(scope.classroom_documents(ScheduleFile), schedule_id, 'Schedule')
    request.policy.authorize_access(Resource.CLASSROOM, request.school, schedule.classroom)
    return schedule


@require_http_methods(["GET", "DELETE"])
@require_tenant()
def schedule_detail_view(request, tenant_id, schedule_id):
    schedule = _get_schedule(request, schedule_id)

    if request.method == "DELETE":
        request.policy.authorize_manage(Resource.CLASSROOM, request.school, schedule.classroom)
        DocumentService.delete(request.principal, schedule)
        return HttpResponse(status=204)

    return JsonResponse(schedule.to_dict())


@require_http_methods(["GET"])
@require_tenant()
def schedule_download_view(request, tenant_id, schedule_id):
    return DocumentService.download(_get_schedule(request, schedule_id))
