# users/services.py
"""
USER SERVICES - principal accounts, roles, credentials and guarded deletion.
"""
import logging
from typing import Any, Dict, Iterable, Optional

from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction

from core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    InvariantViolation,
    ValidationError,
)
from core.lifecycle import validation_details
from shared.constants import Role

logger = logging.getLogger(__name__)

User = get_user_model()

TENANT_ROLES = {Role.ADMIN, Role.TEACHER, Role.PARENT}
PROFILE_FIELDS = ('first_name', 'last_name', 'phone_number', 'address', 'gender', 'date_of_birth')


# ============ CREDENTIALS ============

class CredentialService:
    """Password handling on top of Django's auth machinery."""

    @staticmethod
    def validate_new_password(password: str, user=None):
        try:
            validate_password(password, user=user)
        except DjangoValidationError as e:
            raise ValidationError("Password does not meet requirements.", details={
                'password': validation_details(e)['__all__'],
            }) from e

    @staticmethod
    def email_taken(email: str) -> bool:
        return User.objects.filter(email__iexact=(email or '').strip()).exists()

    @staticmethod
    def reset_password(actor, user, new_password: str):
        PrincipalService.guard_platform_account(actor, user)
        CredentialService.validate_new_password(new_password, user)
        user.set_password(new_password)
        user.save(update_fields=['password'])
        logger.info(f"Password reset for user {user.pk} by user {actor.user_id}")

    @staticmethod
    def change_password(user, current_password: str, new_password: str):
        if not user.check_password(current_password):
            raise AuthenticationError("Current password is incorrect.")
        CredentialService.validate_new_password(new_password, user)
        user.set_password(new_password)
        user.save(update_fields=['password'])
        logger.info(f"Password changed by user {user.pk}")


# ============ PRINCIPAL SERVICES ============

class PrincipalService:
    """Creation, update and deletion of principals."""

    # ---------- guards ----------

    @staticmethod
    def _normalize_roles(roles: Iterable) -> set:
        try:
            return {Role(r) for r in roles}
        except ValueError as e:
            raise ValidationError("Unknown role.", details={'roles': [str(e)]}) from e

    @staticmethod
    def _check_grantable(actor, roles: set, school):
        if not roles:
            raise ValidationError("At least one role is required.", details={'roles': ['Required']})
        if Role.SUPER_ADMIN in roles and not actor.is_super_admin:
            raise AuthorizationError("Only platform administrators can grant the SuperAdmin role.")
        if school is not None and Role.SUPER_ADMIN in roles and roles - {Role.SUPER_ADMIN}:
            raise ValidationError("SuperAdmin cannot be combined with school roles.",
                                  details={'roles': ['Invalid combination']})
        if school is None and roles - {Role.SUPER_ADMIN}:
            raise ValidationError("School roles need a school.", details={'roles': ['School required']})

    @staticmethod
    def guard_last_super_admin(user):
        """Refuse to remove the last active SuperAdmin."""
        if not (user.is_active and user.is_super_admin):
            return
        remaining = User.objects.active_super_admins().exclude(pk=user.pk).count()
        if remaining == 0:
            logger.warning(f"Refused to remove last SuperAdmin {user.pk}")
            raise InvariantViolation("The last active SuperAdmin cannot be removed or deactivated.")

    @staticmethod
    def guard_platform_account(actor, user):
        """SuperAdmin accounts are only changed by SuperAdmins, whichever school they are homed in."""
        if user.is_super_admin and not actor.is_super_admin:
            logger.warning(f"User {actor.user_id} refused a change to SuperAdmin {user.pk}")
            raise AuthorizationError("Only platform administrators can change a SuperAdmin account.")

    @staticmethod
    def guard_self(actor, user):
        if actor.user_id == user.pk:
            raise InvariantViolation("You cannot delete your own account.")

    @staticmethod
    def live_link_counts(user) -> Dict[str, int]:
        return {
            'parent_links': user.parent_links.filter(child__is_deleted=False).count(),
            'teacher_links': user.teacher_links.filter(child__is_deleted=False).count(),
        }

    # ---------- mutations ----------

    @staticmethod
    @transaction.atomic
    def create_principal(actor, school, data: Dict[str, Any], roles: Iterable) -> Any:
        roles = PrincipalService._normalize_roles(roles)
        PrincipalService._check_grantable(actor, roles, school)
        user = PrincipalService._create_account(school, data, roles)
        logger.info(f"Principal created: {user.email} roles={sorted(r.value for r in roles)} by user {actor.user_id}")
        return user

    @staticmethod
    @transaction.atomic
    def bootstrap_super_admin(data: Dict[str, Any]) -> Any:
        """First SuperAdmin of a deployment, created from the command line without an actor."""
        user = PrincipalService._create_account(None, data, {Role.SUPER_ADMIN})
        logger.info(f"SuperAdmin bootstrapped: {user.email}")
        return user

    @staticmethod
    def _create_account(school, data: Dict[str, Any], roles: set) -> Any:
        email = data['email'].strip().lower()
        if CredentialService.email_taken(email):
            raise ConflictError("A user with this email already exists.", details={'email': ['Taken']})
        CredentialService.validate_new_password(data['password'])

        profile = {k: v for k, v in data.items() if k in PROFILE_FIELDS and v not in (None, '')}
        user = User.objects.create_user(
            email=email,
            password=data['password'],
            school=school,
            **profile,
        )
        for role in roles:
            user.add_role(role)
        return user

    @staticmethod
    @transaction.atomic
    def update_principal(actor, user, data: Dict[str, Any]) -> Any:
        PrincipalService.guard_platform_account(actor, user)
        data = dict(data)
        roles = data.pop('roles', None)
        is_active = data.pop('is_active', None)

        for field in PROFILE_FIELDS:
            if field in data:
                value = data[field]
                setattr(user, field, '' if value is None and field != 'date_of_birth' else value)

        if is_active is not None and is_active != user.is_active:
            if not is_active:
                PrincipalService.guard_self(actor, user)
                PrincipalService.guard_last_super_admin(user)
            user.is_active = is_active

        user.save()

        if roles is not None:
            PrincipalService.set_roles(actor, user, roles)

        logger.info(f"Principal {user.pk} updated by user {actor.user_id}")
        return user

    @staticmethod
    def set_roles(actor, user, roles: Iterable):
        wanted = PrincipalService._normalize_roles(roles)
        PrincipalService._check_grantable(actor, wanted, user.school_id)
        current = set(user.roles)

        if Role.SUPER_ADMIN in current - wanted:
            if not actor.is_super_admin:
                raise AuthorizationError("Only platform administrators can revoke the SuperAdmin role.")
            PrincipalService.guard_last_super_admin(user)

        for role in current - wanted:
            user.remove_role(role)
        for role in wanted - current:
            user.add_role(role)

    @staticmethod
    @transaction.atomic
    def delete_principal(actor, user) -> Dict[str, int]:
        """
        School-level deletion: physical, refused while the principal still has
        live links to live children.
        """
        PrincipalService.guard_platform_account(actor, user)
        PrincipalService.guard_self(actor, user)
        PrincipalService.guard_last_super_admin(user)

        counts = PrincipalService.live_link_counts(user)
        if any(counts.values()):
            logger.warning(f"Refused to delete user {user.pk}: live child links {counts}")
            raise InvariantViolation(
                "User still has children linked and cannot be deleted.", details=counts
            )

        user_id = user.pk
        user.delete()
        logger.info(f"Principal {user_id} deleted by user {actor.user_id}")
        return counts

    @staticmethod
    @transaction.atomic
    def delete_principal_platform(actor, user) -> Dict[str, int]:
        """Platform deletion: links go with the account, their count is returned for audit."""
        PrincipalService.guard_self(actor, user)
        PrincipalService.guard_last_super_admin(user)

        counts = PrincipalService.live_link_counts(user)
        user_id = user.pk
        user.delete()
        logger.info(f"Principal {user_id} deleted by platform admin {actor.user_id}; links removed: {counts}")
        return counts

    @staticmethod
    def get_principal_stats(users) -> Dict[str, Any]:
        """Role and activity counts over an already scoped principals queryset."""
        users = User.objects.filter(pk__in=users.values('pk'))
        total = users.count()
        active = users.filter(is_active=True).count()

        return {
            'total': total,
            'role_distribution': {role.value: users.filter(role_assignments__role=role).count() for role in Role},
            'active': active,
            'inactive': total - active,
        }
