# core/managers.py
"""
Tenant-aware querysets and managers.

Every school-owned model uses ``LiveManager`` as its default manager, so a plain
``Model.objects`` never returns soft-deleted rows. ``all_objects`` is the escape
hatch for guards and maintenance code that must see everything.
"""
from django.db import models
from django.utils import timezone


class SoftDeleteQuerySet(models.QuerySet):
    """QuerySet helpers for the Deletable capability."""

    def soft_delete(self, by_id=None):
        """Bulk soft delete on behalf of user ``by_id``. Returns the number of rows flagged."""
        now = timezone.now()
        fields = {'is_deleted': True, 'deleted_at': now, 'updated_at': now}
        if by_id is not None:
            fields["deleted_by_id"] = by_id
            fields["updated_by_id"] = by_id
        return self.filter(is_deleted=False).update(**fields)


class TenantQuerySet(SoftDeleteQuerySet):
    """QuerySet helpers for tenant scoping."""

    def for_school(self, school):
        school_id = getattr(school, 'pk', school)
        return self.filter(school_id=school_id)


class LiveManager(models.Manager.from_queryset(SoftDeleteQuerySet)):
    """Default manager that hides soft-deleted rows."""

    def get_queryset(self):
        return super().get_queryset().filter(is_deleted=False)


class TenantManager(models.Manager.from_queryset(TenantQuerySet)):
    """Default manager for school-owned rows: live rows only, scoped on demand."""

    def get_queryset(self):
        return super().get_queryset().filter(is_deleted=False)


class AllTenantManager(models.Manager.from_queryset(TenantQuerySet)):
    """Unfiltered manager, deleted rows included."""
    pass
