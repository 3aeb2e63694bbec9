# records/services.py
"""
RECORD SERVICES - report cards and class schedules.

Uploads are validated (extension, size) before the row is built, so a rejected
file never reaches the database.
"""
import logging

from django.http import HttpResponse

from core.lifecycle import LifecycleManager
from shared.utils.uploads import validate_upload
from .models import ReportCard, ScheduleFile

logger = logging.getLogger(__name__)

REPORT_CARD_UPLOAD = 'report_card'
SCHEDULE_UPLOAD = 'schedule'


class DocumentService:

    @staticmethod
    def create_report_card(principal, school, child, term: int, uploaded, school_year=None) -> ReportCard:
        blob = validate_upload(uploaded, REPORT_CARD_UPLOAD)
        report_card = LifecycleManager(principal).create(
            ReportCard,
            school=school,
            child=child,
            term=term,
            school_year=school_year or child.school_year or school.school_year,
            **blob,
        )
        logger.info(f"Report card uploaded for child {child.pk}, term {term} ({blob['size']} bytes)")
        return report_card

    @staticmethod
    def create_schedule(principal, school, classroom, uploaded, school_year=None) -> ScheduleFile:
        blob = validate_upload(uploaded, SCHEDULE_UPLOAD)
        schedule = LifecycleManager(principal).create(
            ScheduleFile,
            school=school,
            classroom=classroom,
            school_year=school_year or school.school_year,
            **blob,
        )
        logger.info(f"Schedule {schedule.filename} uploaded for classroom {classroom.pk}")
        return schedule

    @staticmethod
    def delete(principal, document):
        return LifecycleManager(principal).soft_delete(document)

    @staticmethod
    def download(document) -> HttpResponse:
        response = HttpResponse(
            bytes(document.content),
            content_type=document.content_type or 'application/octet-stream',
        )
        response['Content-Disposition'] = f'attachment; filename="{document.filename}"'
        response['Content-Length'] = str(document.size)
        return response
