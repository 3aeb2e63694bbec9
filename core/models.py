# core/models.py
"""
CORE MODELS - tenant (School), Classroom and the abstract bases every
school-owned record builds on (audit stamps, Deletable capability, tenant id).
"""
import logging
import re

from django.apps import apps
from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.db.models import Q
from django.utils import timezone

from shared.constants import SCHOOL_MODEL_PATH
from .exceptions import InvariantViolation
from .managers import AllTenantManager, LiveManager, TenantManager

logger = logging.getLogger(__name__)

SCHOOL_CODE_RE = re.compile(r'^[A-Z0-9_]+$')
SCHOOL_YEAR_RE = re.compile(r'^(\d{4})-(\d{4})$')


def current_school_year(today=None):
    """Academic year label, rolling over on 1 September (e.g. ``2025-2026``)."""
    today = today or timezone.localdate()
    start = today.year if today.month >= 9 else today.year - 1
    return f"{start}-{start + 1}"


def validate_school_year(value):
    match = SCHOOL_YEAR_RE.match(value or '')
    if not match or int(match.group(2)) != int(match.group(1)) + 1:
        raise ValidationError('School year must look like YYYY-YYYY with consecutive years.')


# ============ ABSTRACT BASES ============

class AuditedModel(models.Model):
    """Creation and update stamps."""
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL,
        null=True, blank=True, related_name='+'
    )
    updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL,
        null=True, blank=True, related_name='+'
    )

    class Meta:
        abstract = True


class DeletableModel(models.Model):
    """
    Soft-delete capability shared by every record that can be removed.

    Subclasses override ``check_deletable`` to refuse deletion while
    dependent data is still live.
    """
    is_deleted = models.BooleanField(default=False, db_index=True)
    deleted_at = models.DateTimeField(null=True, blank=True)
    deleted_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL,
        null=True, blank=True, related_name='+'
    )

    class Meta:
        abstract = True

    def check_deletable(self):
        """Raise InvariantViolation when the row must not be deleted."""

    def mark_deleted(self, by=None):
        self.is_deleted = True
        self.deleted_at = timezone.now()
        self.deleted_by = by
        if hasattr(self, 'updated_by'):
            self.updated_by = by


class TenantOwnedModel(AuditedModel, DeletableModel):
    """Base for every row that belongs to exactly one school."""
    school = models.ForeignKey(SCHOOL_MODEL_PATH, on_delete=models.PROTECT, related_name='+')

    objects = TenantManager()
    all_objects = AllTenantManager()

    class Meta:
        abstract = True

    @classmethod
    def from_db(cls, db, field_names, values):
        instance = super().from_db(db, field_names, values)
        instance._loaded_school_id = instance.__dict__.get('school_id')
        return instance

    def save(self, *args, **kwargs):
        loaded = getattr(self, '_loaded_school_id', None)
        if loaded is not None and self.school_id != loaded:
            logger.warning(
                f"Refused tenant change on {self._meta.label} #{self.pk}: {loaded} -> {self.school_id}"
            )
            raise InvariantViolation("The school of an existing record cannot be changed.")
        super().save(*args, **kwargs)
        self._loaded_school_id = self.school_id


# ============ SCHOOL MODEL ============

class School(AuditedModel, DeletableModel):
    """School institution model - the tenant every other record hangs off."""
    name = models.CharField(max_length=200)
    code = models.CharField(max_length=20, help_text="Upper-case letters, digits and underscores")
    address = models.CharField(max_length=500, blank=True)
    city = models.CharField(max_length=100, blank=True)
    phone = models.CharField(max_length=20, blank=True)
    email = models.EmailField(max_length=100)
    school_year = models.CharField(
        max_length=9, default=current_school_year, validators=[validate_school_year]
    )

    objects = LiveManager()
    all_objects = models.Manager()

    class Meta:
        db_table = 'core_school'
        ordering = ['name']
        constraints = [
            models.UniqueConstraint(
                fields=['code'], condition=Q(is_deleted=False), name='uniq_live_school_code'
            ),
            models.UniqueConstraint(
                fields=['email'], condition=Q(is_deleted=False), name='uniq_live_school_email'
            ),
        ]

    def __str__(self):
        return f"{self.name} ({self.code})"

    def clean(self):
        self.code = (self.code or '').strip().upper()
        self.email = (self.email or '').strip().lower()
        if self.code and not SCHOOL_CODE_RE.match(self.code):
            raise ValidationError({
                'code': 'Code may only contain upper-case letters, digits and underscores.'
            })

    def check_deletable(self):
        User = apps.get_model('users', 'User')
        Child = apps.get_model('students', 'Child')
        user_count = User.objects.filter(school=self).count()
        child_count = Child.objects.filter(school=self).count()
        if user_count or child_count:
            raise InvariantViolation(
                "School still has users or active children and cannot be deleted.",
                details={'users': user_count, 'children': child_count},
            )

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'code': self.code,
            'address': self.address,
            'city': self.city,
            'phone': self.phone,
            'email': self.email,
            'school_year': self.school_year,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }


# ============ CLASSROOM MODEL ============

class Classroom(TenantOwnedModel):
    """A class group inside a school, optionally led by one teacher."""
    name = models.CharField(max_length=100)
    capacity = models.PositiveSmallIntegerField(
        default=30, validators=[MinValueValidator(1), MaxValueValidator(100)]
    )
    lead_teacher = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='led_classrooms',
    )

    class Meta:
        db_table = 'core_classroom'
        ordering = ['name']
        constraints = [
            models.UniqueConstraint(
                fields=['school', 'name'], condition=Q(is_deleted=False), name='uniq_live_classroom_name'
            ),
        ]
        indexes = [
            models.Index(fields=['school', 'is_deleted'], name='classroom_school_live_idx'),
        ]

    def __str__(self):
        return f"{self.name} - {self.school_id}"

    @property
    def active_children_count(self):
        return self.children.count()

    def clean(self):
        if self.lead_teacher_id and self.lead_teacher.school_id != self.school_id:
            raise ValidationError({'lead_teacher': 'Lead teacher must belong to the same school.'})

    def check_deletable(self):
        count = self.active_children_count
        if count:
            raise InvariantViolation(
                f"Classroom '{self.name}' still has {count} active children.",
                details={'children': count},
            )

    def to_dict(self):
        return {
            'id': self.id,
            'school_id': self.school_id,
            'name': self.name,
            'capacity': self.capacity,
            'lead_teacher_id': self.lead_teacher_id,
            'active_children': self.active_children_count,
        }
