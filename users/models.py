# users/models.py
from django.contrib.auth.models import AbstractUser
from django.db import models
from django.utils.translation import gettext_lazy as _
import logging

# SHARED IMPORTS
from shared.constants import Gender, Role, SCHOOL_MODEL_PATH
from core.exceptions import InvariantViolation

from .managers import UserManager

logger = logging.getLogger(__name__)


class User(AbstractUser):
    """
    Principal of the platform.

    Belongs to exactly one school, except platform SuperAdmins whose ``school``
    may be empty. Roles live in ``UserRole`` rows.
    """

    username = models.CharField(
        _("username"),
        max_length=150,
        blank=True,
        null=True,
        help_text=_("Optional. 150 characters or fewer."),
    )

    email = models.EmailField(_("email address"), unique=True)
    phone_number = models.CharField(max_length=20, blank=True)
    address = models.CharField(max_length=500, blank=True)
    gender = models.CharField(max_length=1, choices=Gender.choices, blank=True)
    date_of_birth = models.DateField(null=True, blank=True)

    school = models.ForeignKey(
        SCHOOL_MODEL_PATH,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='users'
    )

    objects = UserManager()

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = []

    class Meta:
        db_table = 'auth_user'
        indexes = [
            models.Index(fields=['school', 'is_active'], name='user_school_active_idx'),
        ]

    def __str__(self):
        return self.email

    @classmethod
    def from_db(cls, db, field_names, values):
        instance = super().from_db(db, field_names, values)
        instance._loaded_school_id = instance.__dict__.get('school_id')
        return instance

    def save(self, *args, **kwargs):
        loaded = getattr(self, '_loaded_school_id', None)
        if loaded is not None and self.school_id != loaded:
            raise InvariantViolation("A user cannot be moved to another school.")
        super().save(*args, **kwargs)
        self._loaded_school_id = self.school_id

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def roles(self):
        """Frozen set of ``Role`` values held by this user."""
        return frozenset(Role(r) for r in self.role_assignments.values_list('role', flat=True))

    def has_role(self, role):
        return self.role_assignments.filter(role=role).exists()

    @property
    def is_super_admin(self):
        return self.has_role(Role.SUPER_ADMIN)

    def add_role(self, role):
        assignment, created = UserRole.objects.get_or_create(user=self, role=role)
        if created:
            logger.info(f"Role {role} granted to {self.email}")
        return assignment

    def remove_role(self, role):
        return UserRole.objects.filter(user=self, role=role).delete()[0] > 0

    def to_dict(self):
        return {
            'id': self.id,
            'email': self.email,
            'first_name': self.first_name,
            'last_name': self.last_name,
            'phone_number': self.phone_number,
            'address': self.address,
            'gender': self.gender,
            'date_of_birth': self.date_of_birth.isoformat() if self.date_of_birth else None,
            'school_id': self.school_id,
            'roles': sorted(str(r) for r in self.roles),
            'is_active': self.is_active,
        }


class UserRole(models.Model):
    """One role held by one user."""
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='role_assignments')
    role = models.CharField(max_length=20, choices=Role.choices)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'users_role'
        constraints = [
            models.UniqueConstraint(fields=['user', 'role'], name='uniq_user_role'),
        ]
        indexes = [
            models.Index(fields=['role'], name='user_role_role_idx'),
        ]

    def __str__(self):
        return f"{self.user.email} - {self.role}"
