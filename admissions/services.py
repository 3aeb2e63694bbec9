# admissions/services.py
"""
ENROLLMENT SERVICES

``EnrollmentOrchestrator`` creates a guardian account, its children and the
parent links as one all-or-nothing unit:

    START -> GUARDIAN_CREATED -> CHILDREN_CREATED -> LINKS_CREATED -> COMMITTED
      any non-terminal state -> FAILED -> ROLLED_BACK

``PreRegistrationService`` is the admin side: list, inspect, validate or
discard what the public form produced.
"""
import enum
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction
from django.db.models import Count, Exists, OuterRef, Q
from django.utils import timezone

from core.exceptions import ConflictError, NotFoundError, SagaFailure, ValidationError
from core.lifecycle import LifecycleManager
from core.models import Classroom, School
from core.tenancy import Principal
from shared.constants import ChildStatus, Role
from students.models import Child, ParentChildLink
from students.services import ChildService
from users.services import CredentialService, PrincipalService
from .signals import enrollment_completed

logger = logging.getLogger(__name__)

User = get_user_model()


class EnrollmentState(enum.Enum):
    START = 'start'
    GUARDIAN_CREATED = 'guardian_created'
    CHILDREN_CREATED = 'children_created'
    LINKS_CREATED = 'links_created'
    COMMITTED = 'committed'
    FAILED = 'failed'
    ROLLED_BACK = 'rolled_back'


TERMINAL_STATES = {EnrollmentState.COMMITTED, EnrollmentState.ROLLED_BACK}


@dataclass(frozen=True)
class EnrollmentCompleted:
    """Immutable record of one committed enrollment."""
    guardian_id: int
    tenant_id: int
    child_ids: Tuple[int, ...]
    completed_at: datetime = field(default_factory=timezone.now)

    def to_dict(self):
        return {
            'guardian_id': self.guardian_id,
            'tenant_id': self.tenant_id,
            'child_ids': list(self.child_ids),
        }


# ============ ENROLLMENT SAGA ============

class EnrollmentOrchestrator:
    """Runs one enrollment attempt. A failed attempt leaves nothing behind, so a new orchestrator can retry from START."""

    def __init__(self, tenant_id: int, guardian: Dict[str, Any], children: List[Dict[str, Any]]):
        self.tenant_id = tenant_id
        self.guardian_data = dict(guardian)
        self.children_data = [dict(c) for c in children]
        self.state = EnrollmentState.START
        self.history = [EnrollmentState.START]

    def _advance(self, state: EnrollmentState):
        logger.debug(f"Enrollment school={self.tenant_id}: {self.state.value} -> {state.value}")
        self.state = state
        self.history.append(state)

    # ---------- START ----------

    def validate(self) -> Tuple[School, Dict[int, Classroom]]:
        """All checks that must pass before the first write."""
        school = School.objects.filter(pk=self.tenant_id).first()
        if school is None:
            raise NotFoundError("School not found")

        if not self.children_data:
            raise ValidationError("At least one child is required.", details={'children': ['Required']})

        email = (self.guardian_data.get('email') or '').strip().lower()
        if CredentialService.email_taken(email):
            raise ConflictError("This email is already registered.", details={'email': ['Taken']})
        self.guardian_data['email'] = email
        CredentialService.validate_new_password(self.guardian_data.get('password', ''))

        wanted = {c['classroom_id'] for c in self.children_data if c.get('classroom_id')}
        classrooms = {c.pk: c for c in Classroom.objects.for_school(school).filter(pk__in=wanted)}
        missing = wanted - set(classrooms)
        if missing:
            raise ValidationError(
                "Some classrooms do not belong to this school.",
                details={'classroom_id': sorted(missing)},
            )
        return school, classrooms

    # ---------- steps ----------

    def _create_guardian(self, school: School):
        data = {k: v for k, v in self.guardian_data.items() if v not in (None, '')}
        password = data.pop('password')
        guardian = User.objects.create_user(email=data.pop('email'), password=password, school=school, **data)
        guardian.add_role(Role.PARENT)
        return guardian

    def _create_children(self, school: School, guardian, classrooms) -> List[Child]:
        lifecycle = LifecycleManager(Principal(guardian.pk, school.pk, frozenset({Role.PARENT})))
        children = []
        for data in self.children_data:
            data = dict(data)
            classroom_id = data.pop('classroom_id', None)
            children.append(lifecycle.create(
                Child,
                school=school,
                classroom=classrooms.get(classroom_id),
                status=ChildStatus.PRE_REGISTERED,
                school_year=school.school_year,
                **data,
            ))
        return children

    def _create_links(self, school: School, guardian, children) -> List[ParentChildLink]:
        lifecycle = LifecycleManager(Principal(guardian.pk, school.pk, frozenset({Role.PARENT})))
        return [
            lifecycle.create(ParentChildLink, school=school, parent=guardian, child=child)
            for child in children
        ]

    # ---------- run ----------

    def run(self) -> EnrollmentCompleted:
        if self.state is not EnrollmentState.START:
            raise ValidationError("Enrollment attempt already ran.")

        school, classrooms = self.validate()

        step = EnrollmentState.GUARDIAN_CREATED
        try:
            with transaction.atomic():
                guardian = self._create_guardian(school)
                self._advance(EnrollmentState.GUARDIAN_CREATED)

                step = EnrollmentState.CHILDREN_CREATED
                children = self._create_children(school, guardian, classrooms)
                self._advance(EnrollmentState.CHILDREN_CREATED)

                step = EnrollmentState.LINKS_CREATED
                self._create_links(school, guardian, children)
                self._advance(EnrollmentState.LINKS_CREATED)
        except Exception as exc:
            self._advance(EnrollmentState.FAILED)
            self._advance(EnrollmentState.ROLLED_BACK)
            if isinstance(exc, IntegrityError) and step is EnrollmentState.GUARDIAN_CREATED:
                logger.info(f"Enrollment in school {school.pk} lost the race for {self.guardian_data['email']}")
                raise ConflictError("This email is already registered.", details={'email': ['Taken']}) from exc
            logger.error(f"Enrollment in school {school.pk} rolled back at step {step.value}: {exc}")
            raise SagaFailure(
                f"Enrollment failed while reaching {step.value}; nothing was saved.",
                step=step.value,
            ) from exc

        self._advance(EnrollmentState.COMMITTED)
        fact = EnrollmentCompleted(
            guardian_id=guardian.pk,
            tenant_id=school.pk,
            child_ids=tuple(child.pk for child in children),
        )
        transaction.on_commit(
            lambda: enrollment_completed.send(sender=EnrollmentOrchestrator, fact=fact)
        )
        logger.info(f"Enrollment committed: guardian {guardian.pk}, {len(children)} children, school {school.pk}")
        return fact


# ============ PRE-REGISTRATION MANAGEMENT ============

class PreRegistrationService:
    """Admin view over guardians created by the public enrollment form."""

    @staticmethod
    def guardians(school):
        live_links = ParentChildLink.objects.filter(parent=OuterRef('pk'), child__is_deleted=False)
        link_filter = Q(parent_links__is_deleted=False, parent_links__child__is_deleted=False)
        return (
            User.objects.with_role(Role.PARENT)
            .filter(school=school)
            .filter(Exists(live_links))
            .annotate(
                children_count=Count('parent_links', filter=link_filter, distinct=True),
                pre_registered_count=Count(
                    'parent_links',
                    filter=link_filter & Q(parent_links__child__status=ChildStatus.PRE_REGISTERED),
                    distinct=True,
                ),
                registered_count=Count(
                    'parent_links',
                    filter=link_filter & Q(parent_links__child__status=ChildStatus.REGISTERED),
                    distinct=True,
                ),
            )
        )

    @staticmethod
    def filter(queryset, params):
        validated = params.get('validated')
        if validated == 'true':
            queryset = queryset.filter(registered_count__gt=0)
        elif validated == 'false':
            queryset = queryset.filter(registered_count=0, pre_registered_count__gt=0)

        status = params.get('status')
        if status:
            queryset = queryset.filter(
                parent_links__is_deleted=False,
                parent_links__child__is_deleted=False,
                parent_links__child__status=status,
            )

        date_from = params.get('date_from')
        if date_from:
            queryset = queryset.filter(date_joined__date__gte=date_from)
        date_to = params.get('date_to')
        if date_to:
            queryset = queryset.filter(date_joined__date__lte=date_to)

        search = (params.get('search') or '').strip()
        if search:
            queryset = queryset.filter(
                Q(email__icontains=search) | Q(first_name__icontains=search) | Q(last_name__icontains=search)
            )
        return queryset.distinct().order_by('-date_joined', '-pk')

    @staticmethod
    def children_of(guardian) -> List[Child]:
        return list(
            Child.objects.filter(parent_links__parent=guardian, parent_links__is_deleted=False)
            .select_related('classroom')
            .distinct()
            .order_by('pk')
        )

    @staticmethod
    def summary(guardian, with_children=False) -> Dict[str, Any]:
        data = {
            'guardian': guardian.to_dict(),
            'created_at': guardian.date_joined.isoformat(),
            'children_count': getattr(guardian, 'children_count', None),
            'pre_registered_count': getattr(guardian, 'pre_registered_count', None),
            'registered_count': getattr(guardian, 'registered_count', None),
        }
        if data['registered_count'] is not None:
            data['validated'] = data['registered_count'] > 0
        if with_children:
            children = PreRegistrationService.children_of(guardian)
            data['children'] = [c.to_dict() for c in children]
            data['children_count'] = len(children)
            data['pre_registered_count'] = sum(c.status == ChildStatus.PRE_REGISTERED for c in children)
            data['registered_count'] = sum(c.status == ChildStatus.REGISTERED for c in children)
            data['validated'] = data['registered_count'] > 0
        return data

    @staticmethod
    def get_guardian(school, guardian_id):
        guardian = PreRegistrationService.guardians(school).filter(pk=guardian_id).first()
        if guardian is None:
            raise NotFoundError("Pre-registration not found")
        return guardian

    @staticmethod
    @transaction.atomic
    def validate(principal, guardian) -> int:
        pending = [c for c in PreRegistrationService.children_of(guardian) if c.status == ChildStatus.PRE_REGISTERED]
        if not pending:
            raise ValidationError("No pre-registered children to validate.")
        count = ChildService.register_children(principal, pending)
        logger.info(f"Pre-registration of guardian {guardian.pk} validated: {count} children registered")
        return count

    @staticmethod
    @transaction.atomic
    def discard(principal, guardian) -> Dict[str, int]:
        """Soft delete the guardian's children, then remove the guardian account and, with it, its links."""
        PrincipalService.guard_self(principal, guardian)
        children = PreRegistrationService.children_of(guardian)
        child_ids = [c.pk for c in children]

        children_deleted = Child.objects.filter(pk__in=child_ids).soft_delete(by_id=principal.user_id)

        guardian_id = guardian.pk
        _, removed = guardian.delete()
        links_deleted = removed.get(ParentChildLink._meta.label, 0)
        logger.info(
            f"Pre-registration of guardian {guardian_id} discarded: "
            f"{children_deleted} children, {links_deleted} links"
        )
        return {'children': children_deleted, 'links': links_deleted}
