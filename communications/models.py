# communications/models.py
"""
School-to-family communication: per-child liaison notebook entries,
school-wide announcements and activities.
"""
from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone

from core.models import TenantOwnedModel
from shared.constants import CHILD_MODEL_PATH, AnnouncementKind, LiaisonKind


def _iso(value):
    return value.isoformat() if value else None


class LiaisonMessage(TenantOwnedModel):
    """Entry in a child's liaison notebook, optionally awaiting a parent reply."""
    child = models.ForeignKey(CHILD_MODEL_PATH, on_delete=models.CASCADE, related_name='liaison_messages')
    title = models.CharField(max_length=200)
    message = models.TextField()
    kind = models.CharField(max_length=20, choices=LiaisonKind.choices, default=LiaisonKind.INFO)
    read_by_parent = models.BooleanField(default=False)
    read_at = models.DateTimeField(null=True, blank=True)
    reply_required = models.BooleanField(default=False)
    parent_reply = models.TextField(blank=True)
    replied_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = 'communications_liaison_message'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['school', 'child'], name='liaison_school_child_idx'),
        ]

    def __str__(self):
        return self.title

    def mark_read(self):
        if not self.read_by_parent:
            self.read_by_parent = True
            self.read_at = timezone.now()

    def to_dict(self):
        return {
            'id': self.id,
            'child_id': self.child_id,
            'title': self.title,
            'message': self.message,
            'kind': self.kind,
            'read_by_parent': self.read_by_parent,
            'read_at': _iso(self.read_at),
            'reply_required': self.reply_required,
            'parent_reply': self.parent_reply,
            'replied_at': _iso(self.replied_at),
            'created_at': _iso(self.created_at),
        }


class Announcement(TenantOwnedModel):
    """School announcement; ``target_class`` holds a classroom name, blank for everyone."""
    title = models.CharField(max_length=200)
    content = models.TextField()
    kind = models.CharField(max_length=20, choices=AnnouncementKind.choices, default=AnnouncementKind.GENERAL)
    published_at = models.DateTimeField(default=timezone.now)
    target_class = models.CharField(max_length=100, blank=True)
    send_notification = models.BooleanField(default=False)

    class Meta:
        db_table = 'communications_announcement'
        ordering = ['-published_at']
        indexes = [
            models.Index(fields=['school', 'target_class'], name='announcement_target_idx'),
        ]

    def __str__(self):
        return self.title

    def to_dict(self):
        return {
            'id': self.id,
            'title': self.title,
            'content': self.content,
            'kind': self.kind,
            'published_at': _iso(self.published_at),
            'target_class': self.target_class or None,
            'send_notification': self.send_notification,
        }


class Activity(TenantOwnedModel):
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    start_date = models.DateField()
    end_date = models.DateField(null=True, blank=True)
    start_time = models.TimeField(null=True, blank=True)
    end_time = models.TimeField(null=True, blank=True)
    location = models.CharField(max_length=200, blank=True)
    target_class = models.CharField(max_length=100, blank=True)

    class Meta:
        db_table = 'communications_activity'
        ordering = ['start_date', 'start_time']
        verbose_name_plural = 'Activities'
        indexes = [
            models.Index(fields=['school', 'target_class'], name='activity_target_idx'),
        ]

    def __str__(self):
        return self.name

    def clean(self):
        if self.end_date and self.start_date and self.end_date < self.start_date:
            raise ValidationError({'end_date': 'End date cannot be before start date.'})
        if (
            self.start_time and self.end_time
            and (self.end_date in (None, self.start_date))
            and self.end_time <= self.start_time
        ):
            raise ValidationError({'end_time': 'End time must be after start time.'})

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'start_date': _iso(self.start_date),
            'end_date': _iso(self.end_date),
            'start_time': _iso(self.start_time),
            'end_time': _iso(self.end_time),
            'location': self.location,
            'target_class': self.target_class or None,
        }
