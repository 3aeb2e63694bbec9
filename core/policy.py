# core/policy.py
"""
POLICY ENGINE - SINGLE SOURCE OF TRUTH FOR AUTHORIZATION
=========================================================

``decide()`` is a pure decision over (principal, tenant, roles, relationship).
``PolicyEngine`` maps every resource type onto the two capability tiers,
CanAccess and CanManage, through one rule table.
"""
import enum
import logging
from dataclasses import dataclass
from typing import Any, Callable, FrozenSet, Optional

from django.apps import apps

from shared.constants import Role
from .exceptions import AuthorizationError

logger = logging.getLogger(__name__)

RelationshipCheck = Callable[[Any], bool]


class Decision(enum.Enum):
    ALLOW = 'allow'
    DENY = 'deny'

    def __bool__(self):
        return self is Decision.ALLOW


class Resource(enum.Enum):
    TENANT = 'tenant'
    CLASSROOM = 'classroom'
    CHILD = 'child'
    PRINCIPAL = 'principal'
    PAYMENT = 'payment'


TENANT_ROLES = frozenset({Role.ADMIN, Role.TEACHER, Role.PARENT})
ADMIN_ONLY = frozenset({Role.ADMIN})


def _tenant_id(target):
    return getattr(target, 'pk', target)


# ============================================================================
# 1. DECISION FUNCTION
# ============================================================================

def decide(principal, target_tenant, required_roles, relationship_check: Optional[RelationshipCheck] = None) -> Decision:
    """
    Precedence:
    1. SuperAdmin -> Allow, whatever the tenant
    2. Home tenant differs from target tenant -> Deny
    3. Role set intersects required_roles -> Allow
    4. Relationship check given -> its verdict
    5. Deny
    """
    if principal is None or not principal.is_authenticated:
        return Decision.DENY

    if principal.is_super_admin:
        return Decision.ALLOW

    tenant_id = _tenant_id(target_tenant)
    if principal.tenant_id is None or tenant_id is None or principal.tenant_id != tenant_id:
        return Decision.DENY

    if principal.has_any_role(required_roles):
        return Decision.ALLOW

    if relationship_check is not None and relationship_check(principal):
        return Decision.ALLOW

    return Decision.DENY


# ============================================================================
# 2. RELATIONSHIP CHECKS
# ============================================================================

def _model(name, app_label):
    return apps.get_model(app_label, name)


class ChildRelationship:
    """
    Principal is connected to a child through a live link row, or as lead
    teacher of the child's classroom.
    """

    def __init__(self, child, via=(Role.PARENT, Role.TEACHER), links=True, lead_teacher=True):
        self.child = child
        self.via = frozenset(via)
        self.links = links
        self.lead_teacher = lead_teacher

    def __call__(self, principal) -> bool:
        child = self.child
        if child is None or child.is_deleted or child.school_id != principal.tenant_id:
            return False

        if self.links and Role.PARENT in self.via and principal.has_role(Role.PARENT):
            ParentChildLink = _model('ParentChildLink', 'students')
            if ParentChildLink.objects.filter(parent_id=principal.user_id, child_id=child.pk).exists():
                return True

        if Role.TEACHER in self.via and principal.has_role(Role.TEACHER):
            if self.links:
                TeacherChildLink = _model('TeacherChildLink', 'students')
                if TeacherChildLink.objects.filter(teacher_id=principal.user_id, child_id=child.pk).exists():
                    return True
            if self.lead_teacher and child.classroom_id:
                Classroom = _model('Classroom', 'core')
                if Classroom.objects.filter(pk=child.classroom_id, lead_teacher_id=principal.user_id).exists():
                    return True

        return False


class ClassroomRelationship:
    """
    Principal leads the classroom, or (unless ``lead_only``) is linked to a
    live child sitting in it.
    """

    def __init__(self, classroom, lead_only=False):
        self.classroom = classroom
        self.lead_only = lead_only

    def __call__(self, principal) -> bool:
        classroom = self.classroom
        if classroom is None or classroom.is_deleted or classroom.school_id != principal.tenant_id:
            return False

        if principal.has_role(Role.TEACHER):
            if classroom.lead_teacher_id == principal.user_id:
                return True
            if not self.lead_only:
                TeacherChildLink = _model('TeacherChildLink', 'students')
                if TeacherChildLink.objects.filter(
                    teacher_id=principal.user_id,
                    child__classroom_id=classroom.pk,
                    child__is_deleted=False,
                ).exists():
                    return True

        if not self.lead_only and principal.has_role(Role.PARENT):
            ParentChildLink = _model('ParentChildLink', 'students')
            if ParentChildLink.objects.filter(
                parent_id=principal.user_id,
                child__classroom_id=classroom.pk,
                child__is_deleted=False,
            ).exists():
                return True

        return False


class IsSelf:
    def __init__(self, user):
        self.user_id = getattr(user, 'pk', user)

    def __call__(self, principal) -> bool:
        return self.user_id is not None and principal.user_id == self.user_id


# ============================================================================
# 3. RULE TABLE
# ============================================================================

@dataclass(frozen=True)
class Rule:
    access_roles: FrozenSet[Role]
    manage_roles: FrozenSet[Role]
    access_relationship: Optional[Callable[[Any], RelationshipCheck]] = None
    manage_relationship: Optional[Callable[[Any], RelationshipCheck]] = None


RULES = {
    Resource.TENANT: Rule(TENANT_ROLES, ADMIN_ONLY),
    Resource.CLASSROOM: Rule(
        ADMIN_ONLY, ADMIN_ONLY,
        access_relationship=ClassroomRelationship,
        manage_relationship=lambda classroom: ClassroomRelationship(classroom, lead_only=True),
    ),
    Resource.CHILD: Rule(
        ADMIN_ONLY, ADMIN_ONLY,
        access_relationship=ChildRelationship,
        manage_relationship=lambda child: ChildRelationship(child, via=(Role.TEACHER,), links=False),
    ),
    Resource.PRINCIPAL: Rule(ADMIN_ONLY, ADMIN_ONLY, access_relationship=IsSelf),
    Resource.PAYMENT: Rule(
        ADMIN_ONLY, ADMIN_ONLY,
        access_relationship=lambda child: ChildRelationship(child, via=(Role.PARENT,), lead_teacher=False),
    ),
}


# ============================================================================
# 4. ENGINE
# ============================================================================

class PolicyEngine:
    """Capability checks for one principal."""

    def __init__(self, principal):
        self.principal = principal

    @staticmethod
    def _check(factory, target):
        if factory is None or target is None:
            return None
        return factory(target)

    def can_access(self, resource: Resource, tenant, target=None) -> Decision:
        rule = RULES[resource]
        return decide(
            self.principal, tenant, rule.access_roles,
            self._check(rule.access_relationship, target),
        )

    def can_manage(self, resource: Resource, tenant, target=None) -> Decision:
        # Manage is evaluated on top of access so it can never be wider.
        if not self.can_access(resource, tenant, target):
            return Decision.DENY
        rule = RULES[resource]
        return decide(
            self.principal, tenant, rule.manage_roles,
            self._check(rule.manage_relationship, target),
        )

    def authorize_access(self, resource: Resource, tenant, target=None):
        if not self.can_access(resource, tenant, target):
            self._deny('access', resource, tenant, target)

    def authorize_manage(self, resource: Resource, tenant, target=None):
        if not self.can_manage(resource, tenant, target):
            self._deny('manage', resource, tenant, target)

    def authorize_guardian(self, tenant, child):
        """Parent-only actions on a child (liaison read receipts and replies)."""
        check = ChildRelationship(child, via=(Role.PARENT,), lead_teacher=False)
        if not decide(self.principal, tenant, frozenset(), check):
            self._deny('answer for', Resource.CHILD, tenant, child)

    def require_super_admin(self):
        if not (self.principal.is_authenticated and self.principal.is_super_admin):
            logger.info(f"Denied platform operation to user {self.principal.user_id}")
            raise AuthorizationError("Platform administrators only.")

    def _deny(self, tier, resource, tenant, target):
        target_id = getattr(target, 'pk', target)
        logger.info(
            f"Denied {tier} on {resource.value} #{target_id} in school {_tenant_id(tenant)} "
            f"to user {self.principal.user_id}"
        )
        raise AuthorizationError(f"Not allowed to {tier} this {resource.value}.")
