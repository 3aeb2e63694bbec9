# students/services.py
"""
STUDENT SERVICES - children and their parent/teacher links.
"""
import logging
from typing import Any, Dict, Optional

from django.contrib.auth import get_user_model
from django.db import transaction
from django.utils import timezone

from core.exceptions import ValidationError
from core.lifecycle import LifecycleManager
from core.models import Classroom
from shared.constants import ChildStatus, Gender, Role
from .models import Child, ParentChildLink, TeacherChildLink

logger = logging.getLogger(__name__)

User = get_user_model()


# ============ HELPER FUNCTIONS ============

def resolve_classroom(school, classroom_id: Optional[int]):
    """A child's classroom must be a live classroom of the same school."""
    if classroom_id is None:
        return None
    classroom = Classroom.objects.for_school(school).filter(pk=classroom_id).first()
    if classroom is None:
        raise ValidationError(
            "Classroom does not belong to this school.",
            details={'classroom_id': ['Unknown classroom']},
        )
    return classroom


def _resolve_member(school, user_id: int, role: Role, field: str):
    user = User.objects.with_role(role).filter(pk=user_id, school=school, is_active=True).first()
    if user is None:
        raise ValidationError(
            f"User is not an active {role.label.lower()} of this school.",
            details={field: ['Unknown user']},
        )
    return user


def _resolve_child(school, child_id: int):
    child = Child.objects.for_school(school).filter(pk=child_id).first()
    if child is None:
        raise ValidationError("Child does not belong to this school.", details={'child_id': ['Unknown child']})
    return child


# ============ CHILD SERVICES ============

class ChildService:

    @staticmethod
    def _prepare(school, data: Dict[str, Any]) -> Dict[str, Any]:
        data = dict(data)
        if 'classroom_id' in data:
            data['classroom'] = resolve_classroom(school, data.pop('classroom_id'))
        for optional in ('school_year', 'status'):
            if optional in data and not data[optional]:
                data.pop(optional)
        return data

    @staticmethod
    def create_child(principal, school, data: Dict[str, Any]) -> Child:
        data = ChildService._prepare(school, data)
        data.setdefault('school_year', school.school_year)
        if data.get('status') == ChildStatus.REGISTERED:
            data['enrolled_at'] = timezone.now()
        return LifecycleManager(principal).create(Child, school=school, **data)

    @staticmethod
    def update_child(principal, child: Child, data: Dict[str, Any]) -> Child:
        data = ChildService._prepare(child.school_id, data)
        if data.get('status') == ChildStatus.REGISTERED and child.enrolled_at is None:
            data['enrolled_at'] = timezone.now()
        return LifecycleManager(principal).update(child, **data)

    @staticmethod
    @transaction.atomic
    def delete_child(principal, child: Child) -> Child:
        """Soft delete the child and every live link pointing at it."""
        lifecycle = LifecycleManager(principal)
        lifecycle.soft_delete(child)
        ParentChildLink.objects.filter(child=child).soft_delete(by_id=principal.user_id)
        TeacherChildLink.objects.filter(child=child).soft_delete(by_id=principal.user_id)
        return child

    @staticmethod
    @transaction.atomic
    def register_children(principal, children) -> int:
        """Move pre-registered children to registered."""
        count = 0
        lifecycle = LifecycleManager(principal)
        for child in children:
            if child.status != ChildStatus.PRE_REGISTERED:
                continue
            lifecycle.update(child, status=ChildStatus.REGISTERED, enrolled_at=timezone.now())
            count += 1
        return count

    @staticmethod
    def get_child_stats(children) -> Dict[str, Any]:
        """Head counts over an already scoped children queryset."""
        children = Child.objects.filter(pk__in=children.values('pk'))
        total = children.count()
        with_classroom = children.filter(classroom__is_deleted=False).count()

        return {
            'total': total,
            'status_distribution': {status.value: children.filter(status=status).count() for status in ChildStatus},
            'gender_distribution': {gender.value: children.filter(gender=gender).count() for gender in Gender},
            'uses_canteen': children.filter(uses_canteen=True).count(),
            'with_classroom': with_classroom,
            'without_classroom': total - with_classroom,
        }


# ============ LINK SERVICES ============

class LinkService:

    @staticmethod
    def create_parent_link(principal, school, parent_id: int, child_id: int) -> ParentChildLink:
        parent = _resolve_member(school, parent_id, Role.PARENT, 'parent_id')
        child = _resolve_child(school, child_id)
        link = LifecycleManager(principal).create(ParentChildLink, school=school, parent=parent, child=child)
        logger.info(f"Parent {parent.pk} linked to child {child.pk}")
        return link

    @staticmethod
    def create_teacher_link(principal, school, teacher_id: int, child_id: int) -> TeacherChildLink:
        teacher = _resolve_member(school, teacher_id, Role.TEACHER, 'teacher_id')
        child = _resolve_child(school, child_id)
        link = LifecycleManager(principal).create(TeacherChildLink, school=school, teacher=teacher, child=child)
        logger.info(f"Teacher {teacher.pk} linked to child {child.pk}")
        return link

    @staticmethod
    def delete_link(principal, link):
        return LifecycleManager(principal).soft_delete(link)
