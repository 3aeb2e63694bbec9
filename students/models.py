# students/models.py
"""
STUDENT MODELS - children and the link tables that grant parents and
teachers visibility into them.
"""
import logging

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q
from django.utils import timezone

from core.models import TenantOwnedModel, current_school_year, validate_school_year
from shared.constants import CLASSROOM_MODEL_PATH, ChildStatus, Gender

logger = logging.getLogger(__name__)


class Child(TenantOwnedModel):
    """A child enrolled (or pre-registered) in a school."""
    first_name = models.CharField(max_length=100)
    last_name = models.CharField(max_length=100)
    date_of_birth = models.DateField()
    gender = models.CharField(max_length=1, choices=Gender.choices)
    classroom = models.ForeignKey(
        CLASSROOM_MODEL_PATH,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='children',
    )
    school_year = models.CharField(
        max_length=9, default=current_school_year, validators=[validate_school_year]
    )
    status = models.CharField(
        max_length=20, choices=ChildStatus.choices, default=ChildStatus.PRE_REGISTERED
    )
    enrolled_at = models.DateTimeField(null=True, blank=True)
    uses_canteen = models.BooleanField(default=False)

    class Meta:
        db_table = 'students_child'
        ordering = ['last_name', 'first_name']
        verbose_name_plural = 'Children'
        indexes = [
            models.Index(fields=['school', 'status'], name='child_school_status_idx'),
            models.Index(fields=['school', 'classroom'], name='child_school_class_idx'),
        ]

    def __str__(self):
        return f"{self.full_name} - {self.school_id}"

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}"

    @property
    def age(self):
        today = timezone.localdate()
        return today.year - self.date_of_birth.year - (
            (today.month, today.day) < (self.date_of_birth.month, self.date_of_birth.day)
        )

    def clean(self):
        if self.date_of_birth and self.date_of_birth > timezone.localdate():
            raise ValidationError({'date_of_birth': 'Date of birth cannot be in the future.'})
        if self.classroom_id and self.classroom.school_id != self.school_id:
            raise ValidationError({'classroom': 'Classroom must belong to the same school.'})

    def to_dict(self):
        return {
            'id': self.id,
            'school_id': self.school_id,
            'first_name': self.first_name,
            'last_name': self.last_name,
            'date_of_birth': self.date_of_birth.isoformat(),
            'gender': self.gender,
            'classroom_id': self.classroom_id,
            'school_year': self.school_year,
            'status': self.status,
            'enrolled_at': self.enrolled_at.isoformat() if self.enrolled_at else None,
            'uses_canteen': self.uses_canteen,
        }


class ParentChildLink(TenantOwnedModel):
    """Grants a Parent principal visibility into one child."""
    parent = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='parent_links'
    )
    child = models.ForeignKey(Child, on_delete=models.CASCADE, related_name='parent_links')

    class Meta:
        db_table = 'students_parent_child_link'
        constraints = [
            models.UniqueConstraint(
                fields=['parent', 'child'], condition=Q(is_deleted=False), name='uniq_live_parent_child'
            ),
        ]
        indexes = [
            models.Index(fields=['parent', 'is_deleted'], name='parent_link_live_idx'),
        ]

    def __str__(self):
        return f"{self.parent_id} -> {self.child_id}"

    def to_dict(self):
        return {
            'id': self.id,
            'parent_id': self.parent_id,
            'child_id': self.child_id,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }


class TeacherChildLink(TenantOwnedModel):
    """Grants a Teacher principal visibility into one child."""
    teacher = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='teacher_links'
    )
    child = models.ForeignKey(Child, on_delete=models.CASCADE, related_name='teacher_links')

    class Meta:
        db_table = 'students_teacher_child_link'
        constraints = [
            models.UniqueConstraint(
                fields=['teacher', 'child'], condition=Q(is_deleted=False), name='uniq_live_teacher_child'
            ),
        ]
        indexes = [
            models.Index(fields=['teacher', 'is_deleted'], name='teacher_link_live_idx'),
        ]

    def __str__(self):
        return f"{self.teacher_id} -> {self.child_id}"

    def to_dict(self):
        return {
            'id': self.id,
            'teacher_id': self.teacher_id,
            'child_id': self.child_id,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
