# core/tenancy.py
"""
Tenant context: who is acting, and on behalf of which school.
"""
import logging
from dataclasses import dataclass, field
from typing import FrozenSet, Optional

from django.apps import apps

from shared.constants import Role

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Principal:
    """Immutable snapshot of the acting user used by the policy engine."""
    user_id: Optional[int] = None
    tenant_id: Optional[int] = None
    roles: FrozenSet[Role] = field(default_factory=frozenset)

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None

    @property
    def is_super_admin(self) -> bool:
        return Role.SUPER_ADMIN in self.roles

    def has_role(self, role) -> bool:
        return role in self.roles

    def has_any_role(self, roles) -> bool:
        return bool(self.roles & frozenset(roles))

    @classmethod
    def from_user(cls, user) -> 'Principal':
        if user is None or not user.is_authenticated or not user.is_active:
            return ANONYMOUS
        return cls(user_id=user.pk, tenant_id=user.school_id, roles=user.roles)


ANONYMOUS = Principal()


def resolve_school(tenant_id=None, school_code=None, principal=None):
    """
    Resolve the live school for a request: explicit id, then code header,
    then the principal's home school. Returns None when nothing matches.
    """
    School = apps.get_model('core', 'School')

    if tenant_id is not None:
        return School.objects.filter(pk=tenant_id).first()

    if school_code:
        school = School.objects.filter(code=school_code.strip().upper()).first()
        if school is None:
            logger.debug(f"Unknown school code: {school_code}")
        return school

    if principal is not None and principal.tenant_id is not None:
        return School.objects.filter(pk=principal.tenant_id).first()

    return None
