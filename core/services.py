# core/services.py
"""
CORE SERVICES - schools and classrooms.
Views stay thin; every mutation goes through the lifecycle manager.
"""
import logging
from typing import Any, Dict, Optional

from django.apps import apps
from django.db import transaction
from django.db.models import Count, Q

from shared.constants import Role
from .exceptions import ValidationError
from .lifecycle import LifecycleManager
from .models import Classroom, School

logger = logging.getLogger(__name__)


# ============ HELPER FUNCTIONS ============

def _get_model(model_name: str, app_label: str = 'core'):
    """Get model lazily to avoid circular imports."""
    try:
        return apps.get_model(app_label, model_name)
    except LookupError as e:
        logger.error(f"Model not found: {app_label}.{model_name} - {e}")
        raise


def _without_blanks(data: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in data.items() if value not in (None, '')}


# ============ SCHOOL SERVICES ============

class SchoolService:
    """Tenant lifecycle."""

    @staticmethod
    def create_school(principal, data: Dict[str, Any]) -> School:
        school = LifecycleManager(principal).create(School, **_without_blanks(data))
        logger.info(f"School created: {school.name} ({school.code})")
        return school

    @staticmethod
    def update_school(principal, school: School, data: Dict[str, Any]) -> School:
        return LifecycleManager(principal).update(school, **data)

    @staticmethod
    @transaction.atomic
    def delete_school(principal, school: School) -> School:
        return LifecycleManager(principal).soft_delete(school)


# ============ CLASSROOM SERVICES ============

class ClassroomService:
    """Classroom lifecycle."""

    @staticmethod
    def resolve_lead_teacher(school, teacher_id: Optional[int]):
        """A lead teacher must be an active Teacher of the same school."""
        if teacher_id is None:
            return None
        User = _get_model('User', 'users')
        teacher = User.objects.with_role(Role.TEACHER).filter(
            pk=teacher_id, school=school, is_active=True
        ).first()
        if teacher is None:
            raise ValidationError(
                "Lead teacher must be an active teacher of this school.",
                details={'lead_teacher_id': ['Unknown teacher']},
            )
        return teacher

    @staticmethod
    def create_classroom(principal, school, data: Dict[str, Any]) -> Classroom:
        data = dict(data)
        if 'lead_teacher_id' in data:
            data['lead_teacher'] = ClassroomService.resolve_lead_teacher(school, data.pop('lead_teacher_id'))
        return LifecycleManager(principal).create(Classroom, school=school, **_without_blanks(data))

    @staticmethod
    def update_classroom(principal, classroom: Classroom, data: Dict[str, Any]) -> Classroom:
        data = dict(data)
        if 'lead_teacher_id' in data:
            data['lead_teacher'] = ClassroomService.resolve_lead_teacher(
                classroom.school_id, data.pop('lead_teacher_id')
            )
        if data.get('capacity') is None:
            data.pop('capacity', None)
        return LifecycleManager(principal).update(classroom, **data)

    @staticmethod
    @transaction.atomic
    def delete_classroom(principal, classroom: Classroom) -> Classroom:
        return LifecycleManager(principal).soft_delete(classroom)

    @staticmethod
    def get_classroom_stats(classrooms) -> Dict[str, Any]:
        """Staffing and occupancy over an already scoped classrooms queryset."""
        classrooms = list(
            Classroom.objects.filter(pk__in=classrooms.values('pk'))
            .annotate(headcount=Count('children', filter=Q(children__is_deleted=False)))
        )
        with_teacher = sum(1 for c in classrooms if c.lead_teacher_id is not None)
        occupancy = [c.headcount / c.capacity * 100 for c in classrooms if c.capacity]

        return {
            'total': len(classrooms),
            'with_lead_teacher': with_teacher,
            'without_lead_teacher': len(classrooms) - with_teacher,
            'capacity': sum(c.capacity for c in classrooms),
            'headcount': sum(c.headcount for c in classrooms),
            'full': sum(1 for c in classrooms if c.headcount >= c.capacity),
            'average_occupancy': round(sum(occupancy) / len(occupancy), 1) if occupancy else 0.0,
        }
