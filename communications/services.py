# communications/services.py
"""
COMMUNICATION SERVICES - liaison notebook, announcements, activities.
"""
import logging
from datetime import date
from typing import Any, Dict, List

from django.db.models import Count, Q
from django.db.models.functions import TruncMonth
from django.utils import timezone

from core.exceptions import ValidationError
from core.lifecycle import LifecycleManager
from core.models import Classroom
from shared.constants import AnnouncementKind, LiaisonKind
from .models import Activity, Announcement, LiaisonMessage

logger = logging.getLogger(__name__)


def _blank_to_default(data: Dict[str, Any], *fields) -> Dict[str, Any]:
    """Drop empty optional choice/datetime fields so model defaults apply."""
    data = dict(data)
    for name in fields:
        if name in data and data[name] in (None, ''):
            data.pop(name)
    return data


def _check_target_class(school, data: Dict[str, Any]):
    target = (data.get('target_class') or '').strip()
    if 'target_class' in data:
        data['target_class'] = target
    if target and not Classroom.objects.for_school(school).filter(name=target).exists():
        raise ValidationError(
            "Target class is not a classroom of this school.",
            details={'target_class': ['Unknown classroom']},
        )
    return data


def _months_back(day: date, months: int) -> date:
    """First day of the month ``months`` before ``day``."""
    index = day.year * 12 + day.month - 1 - months
    return date(index // 12, index % 12 + 1, 1)


def _monthly_counts(items, field: str, lookup: str, months: int = 6) -> List[Dict[str, int]]:
    """Item counts for the current month and the ``months - 1`` before it, newest first."""
    since = _months_back(timezone.localdate(), months - 1)
    rows = (
        items.filter(**{f"{lookup}__gte": since})
        .annotate(month=TruncMonth(field))
        .values('month')
        .annotate(count=Count('pk'))
        .order_by('-month')
    )
    return [{'year': row['month'].year, 'month': row['month'].month, 'count': row['count']} for row in rows]


# ============ LIAISON NOTEBOOK ============

class LiaisonService:

    @staticmethod
    def create_message(principal, school, child, data: Dict[str, Any]) -> LiaisonMessage:
        data = _blank_to_default(data, 'kind')
        data.pop('child_id', None)
        message = LifecycleManager(principal).create(LiaisonMessage, school=school, child=child, **data)
        logger.info(f"Liaison message {message.pk} written for child {child.pk}")
        return message

    @staticmethod
    def update_message(principal, message: LiaisonMessage, data: Dict[str, Any]) -> LiaisonMessage:
        data = _blank_to_default(data, 'kind')
        data.pop('child_id', None)
        return LifecycleManager(principal).update(message, **data)

    @staticmethod
    def delete_message(principal, message: LiaisonMessage):
        return LifecycleManager(principal).soft_delete(message)

    @staticmethod
    def mark_read(principal, message: LiaisonMessage) -> LiaisonMessage:
        if message.read_by_parent:
            return message
        message.mark_read()
        message.updated_by_id = principal.user_id
        message.save(update_fields=['read_by_parent', 'read_at', 'updated_by', 'updated_at'])
        logger.info(f"Liaison message {message.pk} read by user {principal.user_id}")
        return message

    @staticmethod
    def reply(principal, message: LiaisonMessage, text: str) -> LiaisonMessage:
        if not message.reply_required:
            raise ValidationError("This message does not expect a reply.")
        now = timezone.now()
        message.mark_read()
        message.parent_reply = text
        message.replied_at = now
        message.updated_by_id = principal.user_id
        message.save(update_fields=[
            'read_by_parent', 'read_at', 'parent_reply', 'replied_at', 'updated_by', 'updated_at',
        ])
        logger.info(f"Liaison message {message.pk} answered by user {principal.user_id}")
        return message

    @staticmethod
    def get_liaison_stats(messages) -> Dict[str, Any]:
        """Reading and reply counts over an already scoped messages queryset."""
        messages = LiaisonMessage.objects.filter(pk__in=messages.values('pk'))
        total = messages.count()
        read = messages.filter(read_by_parent=True).count()

        rows = messages.order_by().values('kind').annotate(
            total=Count('pk'),
            read=Count('pk', filter=Q(read_by_parent=True)),
            replied=Count('pk', filter=~Q(parent_reply='')),
        )
        by_kind = {kind.value: {'total': 0, 'read': 0, 'replied': 0} for kind in LiaisonKind}
        for row in rows:
            by_kind[row['kind']] = {'total': row['total'], 'read': row['read'], 'replied': row['replied']}

        return {
            'total': total,
            'read': read,
            'unread': total - read,
            'reply_required': messages.filter(reply_required=True).count(),
            'replied': messages.exclude(parent_reply='').count(),
            'awaiting_reply': messages.filter(reply_required=True, parent_reply='').count(),
            'kind_distribution': by_kind,
        }


# ============ BULLETINS ============

class BulletinService:
    """Announcements and activities share the same life cycle."""

    @staticmethod
    def create(principal, school, model, data: Dict[str, Any]):
        data = _check_target_class(school, _blank_to_default(data, 'kind', 'published_at'))
        item = LifecycleManager(principal).create(model, school=school, **data)
        logger.info(f"{model.__name__} {item.pk} published in school {school.pk}")
        return item

    @staticmethod
    def update(principal, item, data: Dict[str, Any]):
        data = _check_target_class(item.school_id, _blank_to_default(data, 'kind', 'published_at'))
        return LifecycleManager(principal).update(item, **data)

    @staticmethod
    def delete(principal, item):
        return LifecycleManager(principal).soft_delete(item)

    # ---------- reporting ----------

    @staticmethod
    def get_announcement_stats(announcements) -> Dict[str, Any]:
        announcements = Announcement.objects.filter(pk__in=announcements.values('pk'))
        total = announcements.count()
        targeted = announcements.exclude(target_class='').count()

        return {
            'total': total,
            'general': total - targeted,
            'targeted': targeted,
            'with_notification': announcements.filter(send_notification=True).count(),
            'kind_distribution': {
                kind.value: announcements.filter(kind=kind).count() for kind in AnnouncementKind
            },
            'by_month': _monthly_counts(announcements, 'published_at', 'published_at__date'),
        }

    @staticmethod
    def get_activity_stats(activities) -> Dict[str, Any]:
        activities = Activity.objects.filter(pk__in=activities.values('pk'))
        today = timezone.localdate()
        total = activities.count()
        targeted = activities.exclude(target_class='').count()

        return {
            'total': total,
            'general': total - targeted,
            'targeted': targeted,
            'upcoming': activities.filter(start_date__gte=today).count(),
            'this_month': activities.filter(start_date__year=today.year, start_date__month=today.month).count(),
            'this_year': activities.filter(start_date__year=today.year).count(),
            'by_month': _monthly_counts(activities, 'start_date', 'start_date'),
        }

    @staticmethod
    def upcoming_activities(activities, limit: int) -> List[Activity]:
        """The next ``limit`` activities starting today or later."""
        today = timezone.localdate()
        return list(activities.filter(start_date__gte=today).order_by('start_date', 'start_time', 'pk')[:limit])

    @staticmethod
    def activity_calendar(activities, year: int, month: int, target_class: str = ''):
        """Activities starting in one calendar month; a class filter keeps untargeted ones."""
        activities = activities.filter(start_date__year=year, start_date__month=month)
        if target_class:
            activities = activities.filter(Q(target_class='') | Q(target_class=target_class))
        return activities.order_by('start_date', 'start_time', 'pk')
