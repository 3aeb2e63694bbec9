# core/views.py
"""
CORE VIEWS - schools (tenants) and classrooms, JSON only.
"""
import logging

from django.db.models import Q
from django.http import HttpResponse, JsonResponse
from django.views.decorators.http import require_http_methods

from shared.decorators.permissions import require_principal, require_super_admin, require_tenant
from shared.utils.pagination import paginated_response
from shared.utils.payload import changed_fields, clean_form, parse_json
from .forms import ClassroomForm, SchoolForm
from .models import School
from .policy import Resource
from .scoping import QueryScope
from .services import ClassroomService, SchoolService

logger = logging.getLogger(__name__)


# ============ SCHOOL VIEWS ============

@require_http_methods(["GET", "POST"])
@require_principal
def school_collection_view(request):
    """GET: schools visible to the caller. POST: create a school (platform admins)."""
    if request.method == "POST":
        request.policy.require_super_admin()
        cleaned = clean_form(SchoolForm, parse_json(request))
        school = SchoolService.create_school(request.principal, cleaned)
        return JsonResponse(school.to_dict(), status=201)

    principal = request.principal
    schools = School.objects.all()
    if not principal.is_super_admin:
        schools = schools.filter(pk=principal.tenant_id)

    search = request.GET.get('search', '').strip()
    if search:
        schools = schools.filter(Q(name__icontains=search) | Q(code__icontains=search))
    return paginated_response(schools.order_by('name'), request)


@require_http_methods(["GET", "PUT", "PATCH", "DELETE"])
@require_tenant()
def school_detail_view(request, tenant_id):
    school = request.school

    if request.method == "GET":
        return JsonResponse(school.to_dict())

    if request.method == "DELETE":
        request.policy.require_super_admin()
        SchoolService.delete_school(request.principal, school)
        return HttpResponse(status=204)

    request.policy.authorize_manage(Resource.TENANT, school)
    data = parse_json(request)
    cleaned = clean_form(SchoolForm, data, partial=True)
    school = SchoolService.update_school(request.principal, school, changed_fields(data, cleaned))
    return JsonResponse(school.to_dict())


# ============ CLASSROOM VIEWS ============

@require_http_methods(["GET", "POST"])
@require_tenant()
def classroom_collection_view(request, tenant_id):
    scope: QueryScope = request.scope

    if request.method == "POST":
        request.policy.authorize_manage(Resource.TENANT, request.school)
        cleaned = clean_form(ClassroomForm, parse_json(request))
        classroom = ClassroomService.create_classroom(request.principal, request.school, cleaned)
        return JsonResponse(classroom.to_dict(), status=201)

    classrooms = scope.classrooms()
    search = request.GET.get('search', '').strip()
    if search:
        classrooms = classrooms.filter(name__icontains=search)
    return paginated_response(classrooms.order_by('name'), request)


@require_http_methods(["GET", "PUT", "PATCH", "DELETE"])
@require_tenant()
def classroom_detail_view(request, tenant_id, classroom_id):
    scope: QueryScope = request.scope
    classroom = scope.get(scope.classrooms(), classroom_id, 'Classroom')

    if request.method == "GET":
        request.policy.authorize_access(Resource.CLASSROOM, request.school, classroom)
        return JsonResponse(classroom.to_dict())

    request.policy.authorize_manage(Resource.CLASSROOM, request.school, classroom)

    if request.method == "DELETE":
        # Lead teachers may edit their classroom, only admins remove it
        request.policy.authorize_manage(Resource.TENANT, request.school)
        ClassroomService.delete_classroom(request.principal, classroom)
        return HttpResponse(status=204)

    data = parse_json(request)
    cleaned = clean_form(ClassroomForm, data, partial=True)
    updates = changed_fields(data, cleaned)
    if 'lead_teacher_id' in updates:
        request.policy.authorize_manage(Resource.TENANT, request.school)
    classroom = ClassroomService.update_classroom(request.principal, classroom, updates)
    return JsonResponse(classroom.to_dict())


@require_http_methods(["GET"])
@require_tenant(manage=True)
def classroom_statistics_view(request, tenant_id):
    return JsonResponse(ClassroomService.get_classroom_stats(request.scope.classrooms()))
