# users/managers.py
"""
CUSTOM USER MANAGER - Uses email as username
"""
from django.contrib.auth.models import UserManager as BaseUserManager
from django.utils.translation import gettext_lazy as _

from shared.constants import Role


class UserManager(BaseUserManager):
    """
    Custom manager for User model with email as username.
    Inherits from BaseUserManager for Django auth compatibility.
    """

    def create_user(self, email, password=None, **extra_fields):
        """
        Create and save a regular User with the given email and password.

        Raises:
            ValueError: If email is not provided
        """
        if not email:
            raise ValueError(_('The Email must be set'))

        email = self.normalize_email(email).lower()
        extra_fields.setdefault('username', email[:150])

        user = self.model(email=email, **extra_fields)

        if password:
            user.set_password(password)
        else:
            user.set_unusable_password()

        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        """
        Create a platform SuperAdmin: Django superuser flags plus the SuperAdmin role.
        """
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        extra_fields.setdefault('is_active', True)

        if extra_fields.get('is_staff') is not True:
            raise ValueError(_('Superuser must have is_staff=True.'))
        if extra_fields.get('is_superuser') is not True:
            raise ValueError(_('Superuser must have is_superuser=True.'))

        user = self.create_user(email, password, **extra_fields)
        user.add_role(Role.SUPER_ADMIN)
        return user

    def get_by_natural_key(self, email):
        return self.get(email__iexact=email)

    def with_role(self, role):
        return self.filter(role_assignments__role=role).distinct()

    def active_super_admins(self):
        return self.with_role(Role.SUPER_ADMIN).filter(is_active=True)
