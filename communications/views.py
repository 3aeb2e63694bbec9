# communications/views.py
"""
COMMUNICATION VIEWS

Liaison messages are governed by the child they concern; announcements and
activities by the school, narrowed by target class for parents.
"""
import logging

from django.db.models import Q
from django.http import HttpResponse, JsonResponse
from django.utils import timezone
from django.views.decorators.http import require_http_methods

from core.policy import Resource
from shared.decorators.permissions import require_tenant
from shared.utils.pagination import paginated_response
from shared.utils.payload import changed_fields, clean_form, parse_json
from .forms import (
    ActivityCalendarForm,
    ActivityForm,
    AnnouncementForm,
    LiaisonMessageForm,
    LiaisonReplyForm,
    UpcomingActivitiesForm,
)
from .models import Activity, Announcement, LiaisonMessage
from .services import BulletinService, LiaisonService

logger = logging.getLogger(__name__)

DEFAULT_UPCOMING_LIMIT = 5


# ============ LIAISON NOTEBOOK ============

@require_http_methods(["GET", "POST"])
@require_tenant()
def liaison_collection_view(request, tenant_id):
    scope = request.scope

    if request.method == "POST":
        cleaned = clean_form(LiaisonMessageForm, parse_json(request))
        child = scope.get(scope.children(), cleaned['child_id'], 'Child')
        request.policy.authorize_manage(Resource.CHILD, request.school, child)
        message = LiaisonService.create_message(request.principal, request.school, child, cleaned)
        return JsonResponse(message.to_dict(), status=201)

    messages = scope.child_documents(LiaisonMessage)
    child_id = request.GET.get('child_id', '').strip()
    if child_id.isdigit():
        messages = messages.filter(child_id=int(child_id))
    kind = request.GET.get('kind', '').strip()
    if kind:
        messages = messages.filter(kind=kind)
    unread = request.GET.get('unread')
    if unread == 'true':
        messages = messages.filter(read_by_parent=False)
    return paginated_response(messages.order_by('-created_at', '-pk'), request)


def _get_message(request, message_id):
    scope = request.scope
    message = scope.get(scope.child_documents(LiaisonMessage), message_id, 'Message')
    request.policy.authorize_access(Resource.CHILD, request.school, message.child)
    return message


@require_http_methods(["GET", "PUT", "PATCH", "DELETE"])
@require_tenant()
def liaison_detail_view(request, tenant_id, message_id):
    message = _get_message(request, message_id)

    if request.method == "GET":
        return JsonResponse(message.to_dict())

    request.policy.authorize_manage(Resource.CHILD, request.school, message.child)

    if request.method == "DELETE":
        LiaisonService.delete_message(request.principal, message)
        return HttpResponse(status=204)

    data = parse_json(request)
    data.pop('child_id', None)
    cleaned = clean_form(LiaisonMessageForm, data, partial=True)
    message = LiaisonService.update_message(request.principal, message, changed_fields(data, cleaned))
    return JsonResponse(message.to_dict())


@require_http_methods(["POST"])
@require_tenant()
def liaison_mark_read_view(request, tenant_id, message_id):
    message = _get_message(request, message_id)
    request.policy.authorize_guardian(request.school, message.child)
    message = LiaisonService.mark_read(request.principal, message)
    return JsonResponse(message.to_dict())


@require_http_methods(["POST"])
@require_tenant()
def liaison_reply_view(request, tenant_id, message_id):
    message = _get_message(request, message_id)
    request.policy.authorize_guardian(request.school, message.child)
    cleaned = clean_form(LiaisonReplyForm, parse_json(request))
    message = LiaisonService.reply(request.principal, message, cleaned['reply'])
    return JsonResponse(message.to_dict())


@require_http_methods(["GET"])
@require_tenant()
def liaison_statistics_view(request, tenant_id):
    messages = request.scope.child_documents(LiaisonMessage)
    child_id = request.GET.get('child_id', '').strip()
    if child_id.isdigit():
        messages = messages.filter(child_id=int(child_id))
    return JsonResponse(LiaisonService.get_liaison_stats(messages))


# ============ ANNOUNCEMENTS & ACTIVITIES ============

def _bulletin_collection(request, model, form_class, search_fields, ordering, exact_filters=()):
    if request.method == "POST":
        request.policy.authorize_manage(Resource.TENANT, request.school)
        cleaned = clean_form(form_class, parse_json(request))
        item = BulletinService.create(request.principal, request.school, model, cleaned)
        return JsonResponse(item.to_dict(), status=201)

    items = request.scope.bulletins(model)
    for field in ('target_class', *exact_filters):
        value = request.GET.get(field, '').strip()
        if value:
            items = items.filter(**{field: value})
    search = request.GET.get('search', '').strip()
    if search:
        condition = Q()
        for field in search_fields:
            condition |= Q(**{f"{field}__icontains": search})
        items = items.filter(condition)
    return paginated_response(items.order_by(*ordering), request)


def _bulletin_detail(request, model, form_class, item_id):
    item = request.scope.get(request.scope.bulletins(model), item_id, model._meta.verbose_name.title())

    if request.method == "GET":
        return JsonResponse(item.to_dict())

    request.policy.authorize_manage(Resource.TENANT, request.school)

    if request.method == "DELETE":
        BulletinService.delete(request.principal, item)
        return HttpResponse(status=204)

    data = parse_json(request)
    cleaned = clean_form(form_class, data, partial=True)
    item = BulletinService.update(request.principal, item, changed_fields(data, cleaned))
    return JsonResponse(item.to_dict())


@require_http_methods(["GET", "POST"])
@require_tenant()
def announcement_collection_view(request, tenant_id):
    return _bulletin_collection(
        request, Announcement, AnnouncementForm, ('title', 'content'), ('-published_at', '-pk'),
        exact_filters=('kind',),
    )


@require_http_methods(["GET", "PUT", "PATCH", "DELETE"])
@require_tenant()
def announcement_detail_view(request, tenant_id, announcement_id):
    return _bulletin_detail(request, Announcement, AnnouncementForm, announcement_id)


@require_http_methods(["GET"])
@require_tenant(manage=True)
def announcement_statistics_view(request, tenant_id):
    return JsonResponse(BulletinService.get_announcement_stats(request.scope.bulletins(Announcement)))


@require_http_methods(["GET", "POST"])
@require_tenant()
def activity_collection_view(request, tenant_id):
    return _bulletin_collection(
        request, Activity, ActivityForm, ('name', 'description', 'location'), ('start_date', 'start_time', 'pk'),
    )


@require_http_methods(["GET", "PUT", "PATCH", "DELETE"])
@require_tenant()
def activity_detail_view(request, tenant_id, activity_id):
    return _bulletin_detail(request, Activity, ActivityForm, activity_id)


@require_http_methods(["GET"])
@require_tenant()
def activity_upcoming_view(request, tenant_id):
    cleaned = clean_form(UpcomingActivitiesForm, request.GET)
    limit = cleaned['limit'] or DEFAULT_UPCOMING_LIMIT
    activities = BulletinService.upcoming_activities(request.scope.bulletins(Activity), limit)
    return JsonResponse({'results': [activity.to_dict() for activity in activities]})


@require_http_methods(["GET"])
@require_tenant()
def activity_calendar_view(request, tenant_id):
    cleaned = clean_form(ActivityCalendarForm, request.GET)
    today = timezone.localdate()
    year = cleaned['year'] or today.year
    month = cleaned['month'] or today.month
    activities = BulletinService.activity_calendar(
        request.scope.bulletins(Activity), year, month, (cleaned['target_class'] or '').strip()
    )
    return JsonResponse({
        'year': year,
        'month': month,
        'results': [activity.to_dict() for activity in activities],
    })


@require_http_methods(["GET"])
@require_tenant(manage=True)
def activity_statistics_view(request, tenant_id):
    return JsonResponse(BulletinService.get_activity_stats(request.scope.bulletins(Activity)))
