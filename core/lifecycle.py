# core/lifecycle.py
"""
Lifecycle manager: audit stamping, validation, live-uniqueness checks and
guarded soft deletion for every school-owned record.
"""
import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError, models, transaction

from .exceptions import ConflictError, InvariantViolation, ValidationError

logger = logging.getLogger(__name__)


def validation_details(exc: DjangoValidationError) -> dict:
    """Flatten a Django ValidationError into a JSON-friendly dict."""
    if hasattr(exc, 'error_dict'):
        return {field: [str(m) for m in messages] for field, messages in exc.message_dict.items()}
    return {'__all__': [str(m) for m in exc.messages]}


class LifecycleManager:
    """Create, update and delete school-owned rows on behalf of one principal."""

    def __init__(self, principal):
        self.principal = principal

    @property
    def user_id(self):
        return self.principal.user_id if self.principal is not None else None

    # ---------- mutations ----------

    def create(self, model, school=None, **fields):
        instance = model(**fields)
        if school is not None:
            instance.school_id = getattr(school, 'pk', school)
        if hasattr(instance, 'created_by_id'):
            instance.created_by_id = self.user_id
            instance.updated_by_id = self.user_id

        self.validate(instance)
        self.check_unique(instance)
        self._save(instance)
        logger.info(f"Created {model._meta.label} #{instance.pk} by user {self.user_id}")
        return instance

    def update(self, instance, **fields):
        new_school = fields.pop('school', None)
        new_school_id = fields.pop('school_id', getattr(new_school, 'pk', new_school))
        if new_school_id is not None and new_school_id != getattr(instance, 'school_id', None):
            raise InvariantViolation("The school of an existing record cannot be changed.")

        for name, value in fields.items():
            setattr(instance, name, value)
        if hasattr(instance, 'updated_by_id'):
            instance.updated_by_id = self.user_id

        self.validate(instance)
        self.check_unique(instance)
        self._save(instance)
        logger.info(f"Updated {instance._meta.label} #{instance.pk} by user {self.user_id}")
        return instance

    def soft_delete(self, instance):
        if instance.is_deleted:
            return instance
        try:
            instance.check_deletable()
        except InvariantViolation:
            logger.warning(f"Deletion refused for {instance._meta.label} #{instance.pk}")
            raise
        instance.mark_deleted()
        instance.deleted_by_id = self.user_id
        if hasattr(instance, 'updated_by_id'):
            instance.updated_by_id = self.user_id
        instance.save()
        logger.info(f"Soft-deleted {instance._meta.label} #{instance.pk} by user {self.user_id}")
        return instance

    # ---------- checks ----------

    @staticmethod
    def validate(instance):
        try:
            instance.full_clean(validate_unique=False, validate_constraints=False)
        except DjangoValidationError as e:
            raise ValidationError(
                f"Invalid {instance._meta.verbose_name}", details=validation_details(e)
            ) from e

    @staticmethod
    def check_unique(instance):
        """Raise ConflictError when a live row already holds one of the instance's unique keys."""
        model = type(instance)
        for constraint in model._meta.constraints:
            if not isinstance(constraint, models.UniqueConstraint) or not constraint.fields:
                continue
            lookup = {}
            for name in constraint.fields:
                value = getattr(instance, model._meta.get_field(name).attname)
                if value is None:
                    break
                lookup[name] = value
            else:
                qs = model._base_manager.filter(**lookup)
                if constraint.condition is not None:
                    qs = qs.filter(constraint.condition)
                if instance.pk is not None:
                    qs = qs.exclude(pk=instance.pk)
                if qs.exists():
                    fields = ', '.join(constraint.fields)
                    raise ConflictError(
                        f"A {model._meta.verbose_name} with the same {fields} already exists.",
                        details={'fields': list(constraint.fields)},
                    )

    @staticmethod
    def _save(instance):
        try:
            with transaction.atomic():
                instance.save()
        except IntegrityError as e:
            logger.warning(f"Integrity error saving {instance._meta.label}: {e}")
            raise ConflictError(f"Conflicting {instance._meta.verbose_name}.") from e
