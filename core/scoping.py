# core/scoping.py
"""
Query scoping: every read path is built as

    tenant filter -> live rows only -> role narrowing

before any ordering, searching or pagination happens.
"""
import logging

from django.apps import apps
from django.db.models import Q

from shared.constants import Role
from .exceptions import NotFoundError

logger = logging.getLogger(__name__)


def _model(name, app_label):
    return apps.get_model(app_label, name)


class QueryScope:
    """Scoped querysets for one principal inside one school."""

    def __init__(self, principal, tenant):
        self.principal = principal
        self.tenant_id = getattr(tenant, 'pk', tenant)

    # ---------- building blocks ----------

    @property
    def unrestricted(self):
        """Admins (and SuperAdmins) see the whole school."""
        return self.principal.is_super_admin or self.principal.has_role(Role.ADMIN)

    def base(self, model_or_queryset):
        qs = model_or_queryset
        if not hasattr(qs, 'query'):
            qs = qs.objects.all()
        return qs.filter(school_id=self.tenant_id, is_deleted=False)

    @staticmethod
    def get(queryset, pk, label='Resource'):
        """Fetch one row from a scoped queryset; absent and invisible look the same."""
        try:
            return queryset.get(pk=pk)
        except (queryset.model.DoesNotExist, ValueError, TypeError):
            raise NotFoundError(f"{label} not found")

    def _parent_child_ids(self):
        ParentChildLink = _model('ParentChildLink', 'students')
        return ParentChildLink.objects.filter(
            school_id=self.tenant_id, parent_id=self.principal.user_id
        ).values('child_id')

    def _teacher_child_filter(self):
        TeacherChildLink = _model('TeacherChildLink', 'students')
        linked = TeacherChildLink.objects.filter(
            school_id=self.tenant_id, teacher_id=self.principal.user_id
        ).values('child_id')
        return Q(pk__in=linked) | Q(classroom__lead_teacher_id=self.principal.user_id)

    # ---------- resources ----------

    def children(self, queryset=None):
        Child = _model('Child', 'students')
        qs = self.base(queryset if queryset is not None else Child)
        if self.unrestricted:
            return qs
        condition = Q(pk__in=[])
        if self.principal.has_role(Role.TEACHER):
            condition |= self._teacher_child_filter()
        if self.principal.has_role(Role.PARENT):
            condition |= Q(pk__in=self._parent_child_ids())
        return qs.filter(condition).distinct()

    def guardian_children(self, queryset=None):
        """Children reachable through a parent link only (payments)."""
        Child = _model('Child', 'students')
        qs = self.base(queryset if queryset is not None else Child)
        if self.unrestricted:
            return qs
        if self.principal.has_role(Role.PARENT):
            return qs.filter(pk__in=self._parent_child_ids())
        return qs.none()

    def classrooms(self, queryset=None):
        Classroom = _model('Classroom', 'core')
        qs = self.base(queryset if queryset is not None else Classroom)
        if self.unrestricted:
            return qs
        visible_children = self.children().exclude(classroom__isnull=True).values('classroom_id')
        condition = Q(pk__in=visible_children)
        if self.principal.has_role(Role.TEACHER):
            condition |= Q(lead_teacher_id=self.principal.user_id)
        return qs.filter(condition).distinct()

    def child_documents(self, model_or_queryset):
        """Rows hanging off a child (report cards, liaison messages)."""
        qs = self.base(model_or_queryset).filter(child__is_deleted=False)
        if self.unrestricted:
            return qs
        return qs.filter(child_id__in=self.children().values('pk'))

    def classroom_documents(self, model_or_queryset):
        qs = self.base(model_or_queryset).filter(classroom__is_deleted=False)
        if self.unrestricted:
            return qs
        return qs.filter(classroom_id__in=self.classrooms().values('pk'))

    def payments(self, model_or_queryset=None):
        Payment = _model('Payment', 'billing')
        qs = self.base(model_or_queryset if model_or_queryset is not None else Payment)
        qs = qs.filter(child__is_deleted=False)
        if self.unrestricted:
            return qs
        return qs.filter(child_id__in=self.guardian_children().values('pk'))

    def parent_class_names(self):
        """Distinct classroom names of the principal's linked children."""
        Child = _model('Child', 'students')
        return list(
            Child.objects.filter(pk__in=self._parent_child_ids(), classroom__is_deleted=False)
            .exclude(classroom__isnull=True)
            .values_list('classroom__name', flat=True)
            .distinct()
        )

    def bulletins(self, model_or_queryset):
        """
        Announcements and activities. A parent-only principal sees untargeted
        items plus items targeted at a classroom one of their children is in.
        """
        qs = self.base(model_or_queryset)
        if self.unrestricted or self.principal.has_role(Role.TEACHER):
            return qs
        if self.principal.has_role(Role.PARENT):
            return qs.filter(Q(target_class='') | Q(target_class__in=self.parent_class_names()))
        return qs.none()

    def links(self, model, owner_field):
        """Parent or teacher link rows; non-admins only see their own."""
        qs = self.base(model).filter(child__is_deleted=False)
        if self.unrestricted:
            return qs
        return qs.filter(**{f"{owner_field}_id": self.principal.user_id})

    def principals(self, queryset=None):
        User = _model('User', 'users')
        qs = queryset if queryset is not None else User.objects.all()
        qs = qs.filter(school_id=self.tenant_id)
        if self.unrestricted:
            return qs
        return qs.filter(pk=self.principal.user_id)
