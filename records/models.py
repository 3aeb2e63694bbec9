# records/models.py
"""
Report cards and class schedules. Uploaded content is kept as an opaque blob
next to its filename, content type and size.
"""
from django.db import models
from django.db.models import Q

from core.models import TenantOwnedModel, current_school_year, validate_school_year
from shared.constants import CHILD_MODEL_PATH, CLASSROOM_MODEL_PATH, Term


class UploadedDocument(TenantOwnedModel):
    filename = models.CharField(max_length=255)
    content_type = models.CharField(max_length=100, blank=True)
    size = models.PositiveIntegerField(default=0)
    content = models.BinaryField()
    school_year = models.CharField(
        max_length=9, default=current_school_year, validators=[validate_school_year]
    )

    class Meta:
        abstract = True

    def file_dict(self):
        return {
            'filename': self.filename,
            'content_type': self.content_type,
            'size': self.size,
        }


class ReportCard(UploadedDocument):
    child = models.ForeignKey(CHILD_MODEL_PATH, on_delete=models.CASCADE, related_name='report_cards')
    term = models.PositiveSmallIntegerField(choices=Term.choices)

    class Meta:
        db_table = 'records_report_card'
        ordering = ['-school_year', 'term']
        constraints = [
            models.UniqueConstraint(
                fields=['child', 'term', 'school_year'],
                condition=Q(is_deleted=False),
                name='uniq_live_report_card',
            ),
        ]

    def __str__(self):
        return f"Report card {self.child_id} T{self.term} {self.school_year}"

    def to_dict(self):
        return {
            'id': self.id,
            'child_id': self.child_id,
            'term': self.term,
            'school_year': self.school_year,
            **self.file_dict(),
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }


class ScheduleFile(UploadedDocument):
    classroom = models.ForeignKey(CLASSROOM_MODEL_PATH, on_delete=models.CASCADE, related_name='schedules')

    class Meta:
        db_table = 'records_schedule_file'
        ordering = ['-school_year', 'filename']
        constraints = [
            models.UniqueConstraint(
                fields=['classroom', 'school_year', 'filename'],
                condition=Q(is_deleted=False),
                name='uniq_live_schedule_file',
            ),
        ]

    def __str__(self):
        return f"Schedule {self.classroom_id} {self.school_year} {self.filename}"

    def to_dict(self):
        return {
            'id': self.id,
            'classroom_id': self.classroom_id,
            'school_year': self.school_year,
            **self.file_dict(),
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
