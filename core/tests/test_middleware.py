# core/tests/test_middleware.py
import json

from django.contrib.auth.models import AnonymousUser
from django.http import Http404
from django.test import RequestFactory, TestCase

from core.exceptions import (
    AuthorizationError,
    ConflictError,
    InvariantViolation,
    NotFoundError,
    SagaFailure,
    ValidationError,
)
from core.middleware import ExceptionHandlingMiddleware, TenantContextMiddleware
from shared.constants import SCHOOL_CODE_HEADER, Role
from shared.testing import make_school, make_super_admin, make_user


class ExceptionHandlingMiddlewareTest(TestCase):
    def setUp(self):
        self.factory = RequestFactory()
        self.middleware = ExceptionHandlingMiddleware(lambda r: None)

    def handle(self, exception):
        response = self.middleware.process_exception(self.factory.get('/tenants/1/'), exception)
        return response.status_code, json.loads(response.content)

    def test_denied_and_missing_are_indistinguishable(self):
        denied = self.handle(AuthorizationError("Not allowed to access this child."))
        missing = self.handle(NotFoundError("Child not found"))
        http404 = self.handle(Http404())
        self.assertEqual(denied, missing)
        self.assertEqual(missing, http404)
        self.assertEqual(denied[0], 404)

    def test_business_errors_keep_message_and_details(self):
        status, body = self.handle(ValidationError("Invalid input.", details={'name': ['Required']}))
        self.assertEqual(status, 400)
        self.assertEqual(body['error'], 'VALIDATION_ERROR')
        self.assertEqual(body['details'], {'name': ['Required']})

        status, body = self.handle(ConflictError("Duplicate"))
        self.assertEqual((status, body['error']), (409, 'CONFLICT'))

        status, body = self.handle(InvariantViolation("Classroom still has children"))
        self.assertEqual((status, body['error']), (422, 'INVARIANT_VIOLATION'))
        self.assertEqual(body['message'], 'Classroom still has children')

    def test_saga_failure_is_generic(self):
        status, body = self.handle(SagaFailure("boom in step", step='links_created'))
        self.assertEqual(status, 500)
        self.assertEqual(body['error'], 'SAGA_FAILURE')
        self.assertNotIn('boom', body['message'])
        self.assertEqual(body['details'], {'step': 'links_created'})

    def test_unexpected_errors_are_opaque(self):
        status, body = self.handle(RuntimeError("database password is hunter2"))
        self.assertEqual(status, 500)
        self.assertEqual(body['error'], 'INTERNAL_ERROR')
        self.assertNotIn('hunter2', json.dumps(body))


class TenantContextMiddlewareTest(TestCase):
    def setUp(self):
        self.factory = RequestFactory()
        self.middleware = TenantContextMiddleware(lambda r: None)
        self.school = make_school('ALPHA')
        self.other = make_school('BETA')
        self.user = make_user('admin@alpha.test', self.school, [Role.ADMIN])

    def resolve(self, user=None, tenant_id=None, **headers):
        request = self.factory.get('/', headers=headers)
        request.user = user or AnonymousUser()
        self.middleware(request)
        self.middleware.process_view(request, None, (), {'tenant_id': tenant_id} if tenant_id else {})
        return request

    def test_principal_is_anonymous_without_login(self):
        request = self.resolve()
        self.assertFalse(request.principal.is_authenticated)
        self.assertIsNone(request.school)

    def test_principal_snapshot_carries_roles_and_home_school(self):
        request = self.resolve(self.user)
        self.assertEqual(request.principal.user_id, self.user.pk)
        self.assertEqual(request.principal.tenant_id, self.school.pk)
        self.assertTrue(request.principal.has_role(Role.ADMIN))

    def test_url_tenant_wins_over_header_and_home(self):
        request = self.resolve(self.user, tenant_id=self.other.pk, **{SCHOOL_CODE_HEADER: 'ALPHA'})
        self.assertEqual(request.school, self.other)

    def test_header_wins_over_home_school(self):
        request = self.resolve(self.user, **{SCHOOL_CODE_HEADER: 'beta'})
        self.assertEqual(request.school, self.other)

    def test_home_school_is_the_fallback(self):
        self.assertEqual(self.resolve(self.user).school, self.school)

    def test_deleted_school_does_not_resolve(self):
        self.other.is_deleted = True
        self.other.save()
        self.assertIsNone(self.resolve(self.user, tenant_id=self.other.pk).school)


class TenantIsolationApiTest(TestCase):
    def setUp(self):
        self.school = make_school('ALPHA')
        self.other = make_school('BETA')
        self.foreign_admin = make_user('admin@beta.test', self.other, [Role.ADMIN])

    def test_foreign_and_missing_tenants_answer_the_same(self):
        self.client.force_login(self.foreign_admin)
        foreign = self.client.get(f"/tenants/{self.school.pk}/")
        missing = self.client.get("/tenants/999999/")
        self.assertEqual(foreign.status_code, 404)
        self.assertEqual(foreign.status_code, missing.status_code)
        self.assertEqual(foreign.json(), missing.json())

    def test_super_admin_gets_not_found_for_deleted_tenant(self):
        self.client.force_login(make_super_admin())
        self.school.is_deleted = True
        self.school.save()
        response = self.client.get(f"/tenants/{self.school.pk}/")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()['error'], 'NOT_FOUND')

    def test_anonymous_caller_must_authenticate(self):
        response = self.client.get(f"/tenants/{self.school.pk}/classrooms/")
        self.assertEqual(response.status_code, 401)
