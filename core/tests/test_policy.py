# core/tests/test_policy.py
from unittest import mock

from django.test import TestCase

from core.exceptions import AuthorizationError
from core.policy import ADMIN_ONLY, Decision, PolicyEngine, Resource, decide
from core.tenancy import ANONYMOUS
from shared.constants import Role
from shared.testing import (
    link_parent,
    link_teacher,
    make_child,
    make_classroom,
    make_school,
    make_super_admin,
    make_user,
    principal_for,
)


class DecideTest(TestCase):
    def setUp(self):
        self.school = make_school('ALPHA')
        self.other = make_school('BETA')
        self.admin = principal_for(make_user('admin@alpha.test', self.school, [Role.ADMIN]))
        self.parent = principal_for(make_user('parent@alpha.test', self.school, [Role.PARENT]))
        self.foreign_admin = principal_for(make_user('admin@beta.test', self.other, [Role.ADMIN]))
        self.root = principal_for(make_super_admin())

    def test_anonymous_is_denied(self):
        self.assertEqual(decide(ANONYMOUS, self.school, {Role.ADMIN}), Decision.DENY)
        self.assertEqual(decide(ANONYMOUS, self.school, set(), lambda p: True), Decision.DENY)

    def test_super_admin_is_allowed_in_any_school(self):
        self.assertEqual(decide(self.root, self.school, ADMIN_ONLY), Decision.ALLOW)
        self.assertEqual(decide(self.root, self.other.pk, frozenset()), Decision.ALLOW)

    def test_matching_role_is_allowed(self):
        self.assertEqual(decide(self.admin, self.school, ADMIN_ONLY), Decision.ALLOW)

    def test_foreign_tenant_is_denied_even_with_matching_role(self):
        self.assertEqual(decide(self.foreign_admin, self.school, ADMIN_ONLY), Decision.DENY)

    def test_relationship_is_not_consulted_for_foreign_tenant(self):
        check = mock.Mock(return_value=True)
        self.assertEqual(decide(self.foreign_admin, self.school, ADMIN_ONLY, check), Decision.DENY)
        check.assert_not_called()

    def test_relationship_decides_when_roles_miss(self):
        self.assertEqual(decide(self.parent, self.school, ADMIN_ONLY, lambda p: True), Decision.ALLOW)
        self.assertEqual(decide(self.parent, self.school, ADMIN_ONLY, lambda p: False), Decision.DENY)
        self.assertEqual(decide(self.parent, self.school, ADMIN_ONLY), Decision.DENY)

    def test_decision_is_truthy_only_when_allowed(self):
        self.assertTrue(Decision.ALLOW)
        self.assertFalse(Decision.DENY)


class PolicyEngineTest(TestCase):
    def setUp(self):
        self.school = make_school('ALPHA')
        self.other = make_school('BETA')

        self.admin = make_user('admin@alpha.test', self.school, [Role.ADMIN])
        self.lead = make_user('lead@alpha.test', self.school, [Role.TEACHER])
        self.teacher = make_user('teacher@alpha.test', self.school, [Role.TEACHER])
        self.parent = make_user('parent@alpha.test', self.school, [Role.PARENT])
        self.stranger = make_user('stranger@alpha.test', self.school, [Role.PARENT])
        self.foreign_admin = make_user('admin@beta.test', self.other, [Role.ADMIN])
        self.root = make_super_admin()

        self.classroom = make_classroom(self.school, 'CP1', lead_teacher=self.lead)
        self.child = make_child(self.school, classroom=self.classroom)
        link_parent(self.parent, self.child)
        link_teacher(self.teacher, self.child)

    def engine(self, user):
        return PolicyEngine(principal_for(user))

    def test_parent_can_access_but_not_manage_linked_child(self):
        engine = self.engine(self.parent)
        self.assertTrue(engine.can_access(Resource.CHILD, self.school, self.child))
        self.assertFalse(engine.can_manage(Resource.CHILD, self.school, self.child))

    def test_unlinked_parent_cannot_access_child(self):
        self.assertFalse(self.engine(self.stranger).can_access(Resource.CHILD, self.school, self.child))

    def test_lead_teacher_manages_child_but_linked_teacher_only_reads(self):
        self.assertTrue(self.engine(self.lead).can_manage(Resource.CHILD, self.school, self.child))
        teacher = self.engine(self.teacher)
        self.assertTrue(teacher.can_access(Resource.CHILD, self.school, self.child))
        self.assertFalse(teacher.can_manage(Resource.CHILD, self.school, self.child))

    def test_lead_teacher_manages_classroom_but_not_tenant(self):
        engine = self.engine(self.lead)
        self.assertTrue(engine.can_manage(Resource.CLASSROOM, self.school, self.classroom))
        self.assertFalse(engine.can_manage(Resource.TENANT, self.school))
        self.assertTrue(engine.can_access(Resource.TENANT, self.school))

    def test_payments_are_visible_to_linked_parent_only(self):
        self.assertTrue(self.engine(self.parent).can_access(Resource.PAYMENT, self.school, self.child))
        self.assertFalse(self.engine(self.lead).can_access(Resource.PAYMENT, self.school, self.child))
        self.assertFalse(self.engine(self.teacher).can_access(Resource.PAYMENT, self.school, self.child))

    def test_principal_may_read_own_record_only(self):
        engine = self.engine(self.parent)
        self.assertTrue(engine.can_access(Resource.PRINCIPAL, self.school, self.parent))
        self.assertFalse(engine.can_manage(Resource.PRINCIPAL, self.school, self.parent))
        self.assertFalse(engine.can_access(Resource.PRINCIPAL, self.school, self.teacher))

    def test_foreign_admin_is_denied_everything(self):
        engine = self.engine(self.foreign_admin)
        for resource, target in (
            (Resource.TENANT, None),
            (Resource.CLASSROOM, self.classroom),
            (Resource.CHILD, self.child),
            (Resource.PAYMENT, self.child),
        ):
            self.assertFalse(engine.can_access(resource, self.school, target))

    def test_deleted_child_breaks_relationship(self):
        self.child.is_deleted = True
        self.child.save()
        self.assertFalse(self.engine(self.parent).can_access(Resource.CHILD, self.school, self.child))

    def test_manage_never_exceeds_access(self):
        users = [self.admin, self.lead, self.teacher, self.parent, self.stranger, self.foreign_admin, self.root]
        cases = [
            (Resource.TENANT, None),
            (Resource.CLASSROOM, self.classroom),
            (Resource.CHILD, self.child),
            (Resource.PRINCIPAL, self.parent),
            (Resource.PAYMENT, self.child),
        ]
        for user in users:
            engine = self.engine(user)
            for resource, target in cases:
                with self.subTest(user=user.email, resource=resource):
                    if engine.can_manage(resource, self.school, target):
                        self.assertTrue(engine.can_access(resource, self.school, target))

    def test_authorize_raises_authorization_error(self):
        with self.assertRaises(AuthorizationError):
            self.engine(self.parent).authorize_manage(Resource.TENANT, self.school)
        with self.assertRaises(AuthorizationError):
            self.engine(self.admin).require_super_admin()
        self.engine(self.root).require_super_admin()

    def test_authorize_guardian_requires_parent_link(self):
        self.engine(self.parent).authorize_guardian(self.school, self.child)
        with self.assertRaises(AuthorizationError):
            self.engine(self.stranger).authorize_guardian(self.school, self.child)
        with self.assertRaises(AuthorizationError):
            self.engine(self.admin).authorize_guardian(self.school, self.child)
