# students/views.py
"""
STUDENT VIEWS - children, parent links and teacher links (JSON).
"""
import logging

from django.db.models import Q
from django.http import HttpResponse, JsonResponse
from django.views.decorators.http import require_http_methods

from core.policy import Resource
from shared.decorators.permissions import require_tenant
from shared.utils.pagination import paginated_response
from shared.utils.payload import changed_fields, clean_form, parse_json
from .forms import ChildForm, ParentLinkForm, TeacherLinkForm
from .models import ParentChildLink, TeacherChildLink
from .services import ChildService, LinkService

logger = logging.getLogger(__name__)


# ============ CHILD VIEWS ============

@require_http_methods(["GET", "POST"])
@require_tenant()
def child_collection_view(request, tenant_id):
    if request.method == "POST":
        request.policy.authorize_manage(Resource.TENANT, request.school)
        cleaned = clean_form(ChildForm, parse_json(request))
        child = ChildService.create_child(request.principal, request.school, cleaned)
        return JsonResponse(child.to_dict(), status=201)

    children = request.scope.children().select_related('classroom')

    status = request.GET.get('status', '').strip()
    if status:
        children = children.filter(status=status)
    classroom_id = request.GET.get('classroom_id', '').strip()
    if classroom_id.isdigit():
        children = children.filter(classroom_id=int(classroom_id))
    school_year = request.GET.get('school_year', '').strip()
    if school_year:
        children = children.filter(school_year=school_year)
    search = request.GET.get('search', '').strip()
    if search:
        children = children.filter(Q(first_name__icontains=search) | Q(last_name__icontains=search))

    return paginated_response(children.order_by('last_name', 'first_name', 'pk'), request)


@require_http_methods(["GET", "PUT", "PATCH", "DELETE"])
@require_tenant()
def child_detail_view(request, tenant_id, child_id):
    scope = request.scope
    child = scope.get(scope.children(), child_id, 'Child')
    request.policy.authorize_access(Resource.CHILD, request.school, child)

    if request.method == "GET":
        return JsonResponse(child.to_dict())

    request.policy.authorize_manage(Resource.CHILD, request.school, child)

    if request.method == "DELETE":
        request.policy.authorize_manage(Resource.TENANT, request.school)
        ChildService.delete_child(request.principal, child)
        return HttpResponse(status=204)

    data = parse_json(request)
    cleaned = clean_form(ChildForm, data, partial=True)
    updates = changed_fields(data, cleaned)
    if 'classroom_id' in updates or 'status' in updates:
        # moving a child between classes or changing enrollment status is an admin decision
        request.policy.authorize_manage(Resource.TENANT, request.school)
    child = ChildService.update_child(request.principal, child, updates)
    return JsonResponse(child.to_dict())


@require_http_methods(["GET"])
@require_tenant(manage=True)
def child_statistics_view(request, tenant_id):
    return JsonResponse(ChildService.get_child_stats(request.scope.children()))


# ============ LINK VIEWS ============

def _link_collection(request, model, owner_field, form_class, create):
    if request.method == "POST":
        request.policy.authorize_manage(Resource.TENANT, request.school)
        cleaned = clean_form(form_class, parse_json(request))
        link = create(request.principal, request.school, cleaned[f"{owner_field}_id"], cleaned['child_id'])
        return JsonResponse(link.to_dict(), status=201)

    links = request.scope.links(model, owner_field)
    child_id = request.GET.get('child_id', '').strip()
    if child_id.isdigit():
        links = links.filter(child_id=int(child_id))
    owner_id = request.GET.get(f"{owner_field}_id", '').strip()
    if owner_id.isdigit():
        links = links.filter(**{f"{owner_field}_id": int(owner_id)})
    return paginated_response(links.order_by('-created_at', '-pk'), request)


def _link_delete(request, model, owner_field, link_id):
    request.policy.authorize_manage(Resource.TENANT, request.school)
    link = request.scope.get(request.scope.links(model, owner_field), link_id, 'Link')
    LinkService.delete_link(request.principal, link)
    return HttpResponse(status=204)


@require_http_methods(["GET", "POST"])
@require_tenant()
def parent_link_collection_view(request, tenant_id):
    return _link_collection(request, ParentChildLink, 'parent', ParentLinkForm, LinkService.create_parent_link)


@require_http_methods(["DELETE"])
@require_tenant(manage=True)
def parent_link_delete_view(request, tenant_id, link_id):
    return _link_delete(request, ParentChildLink, 'parent', link_id)


@require_http_methods(["GET", "POST"])
@require_tenant()
def teacher_link_collection_view(request, tenant_id):
    return _link_collection(request, TeacherChildLink, 'teacher', TeacherLinkForm, LinkService.create_teacher_link)


@require_http_methods(["DELETE"])
@require_tenant(manage=True)
def teacher_link_delete_view(request, tenant_id, link_id):
    return _link_delete(request, TeacherChildLink, 'teacher', link_id)
