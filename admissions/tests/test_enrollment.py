# admissions/tests/test_enrollment.py
from unittest import mock

from django.contrib.auth import get_user_model
from django.core.cache import cache
from django.db import IntegrityError
from django.test import Client, TestCase

from admissions.forms import clean_enrollment
from admissions.services import (
    EnrollmentOrchestrator,
    EnrollmentState,
    PreRegistrationService,
)
from admissions.signals import enrollment_completed
from core.exceptions import ConflictError, NotFoundError, SagaFailure, ValidationError
from shared.constants import ChildStatus, Role
from shared.testing import (
    PASSWORD,
    link_parent,
    make_child,
    make_classroom,
    make_school,
    make_user,
    principal_for,
)
from students.models import Child, ParentChildLink

User = get_user_model()


def guardian_payload(email='guardian@family.test'):
    return {
        'email': email,
        'password': PASSWORD,
        'first_name': 'Mary',
        'last_name': 'Shelley',
        'phone_number': '0600000000',
    }


def child_payload(first_name='Ada', **extra):
    return {
        'first_name': first_name,
        'last_name': 'Shelley',
        'date_of_birth': '2018-03-01',
        'gender': 'F',
        **extra,
    }


class EnrollmentOrchestratorTest(TestCase):
    def setUp(self):
        self.school = make_school('ALPHA')
        self.classroom = make_classroom(self.school, 'CP1')

    def build(self, children=None, email='guardian@family.test'):
        guardian, cleaned = clean_enrollment({
            'guardian': guardian_payload(email),
            'children': children or [child_payload('Ada'), child_payload('Percy', gender='M')],
        })
        return EnrollmentOrchestrator(self.school.pk, guardian, cleaned)

    def test_success_creates_guardian_children_and_links(self):
        orchestrator = self.build([
            child_payload('Ada', classroom_id=self.classroom.pk),
            child_payload('Percy', gender='M'),
        ])
        fact = orchestrator.run()

        guardian = User.objects.get(email='guardian@family.test')
        self.assertEqual(fact.guardian_id, guardian.pk)
        self.assertEqual(fact.tenant_id, self.school.pk)
        self.assertEqual(len(fact.child_ids), 2)
        self.assertTrue(guardian.has_role(Role.PARENT))
        self.assertEqual(guardian.school_id, self.school.pk)

        children = Child.objects.filter(pk__in=fact.child_ids)
        self.assertEqual({c.status for c in children}, {ChildStatus.PRE_REGISTERED})
        self.assertEqual({c.school_year for c in children}, {self.school.school_year})
        self.assertEqual(children.get(first_name='Ada').classroom_id, self.classroom.pk)
        self.assertEqual(ParentChildLink.objects.filter(parent=guardian).count(), 2)

        self.assertEqual(orchestrator.state, EnrollmentState.COMMITTED)
        self.assertEqual(orchestrator.history, [
            EnrollmentState.START,
            EnrollmentState.GUARDIAN_CREATED,
            EnrollmentState.CHILDREN_CREATED,
            EnrollmentState.LINKS_CREATED,
            EnrollmentState.COMMITTED,
        ])

    def test_failure_during_links_leaves_nothing_behind(self):
        orchestrator = self.build()
        with mock.patch.object(EnrollmentOrchestrator, '_create_links', side_effect=RuntimeError("boom")):
            with self.assertRaises(SagaFailure) as ctx:
                orchestrator.run()

        self.assertEqual(ctx.exception.step, EnrollmentState.LINKS_CREATED.value)
        self.assertEqual(orchestrator.state, EnrollmentState.ROLLED_BACK)
        self.assertEqual(orchestrator.history[-2:], [EnrollmentState.FAILED, EnrollmentState.ROLLED_BACK])
        self.assertFalse(User.objects.filter(email='guardian@family.test').exists())
        self.assertEqual(Child.all_objects.filter(school=self.school).count(), 0)
        self.assertEqual(ParentChildLink.all_objects.filter(school=self.school).count(), 0)

    def test_failure_while_creating_children_reports_that_step(self):
        orchestrator = self.build()
        with mock.patch.object(EnrollmentOrchestrator, '_create_children', side_effect=RuntimeError("boom")):
            with self.assertRaises(SagaFailure) as ctx:
                orchestrator.run()
        self.assertEqual(ctx.exception.step, EnrollmentState.CHILDREN_CREATED.value)
        self.assertFalse(User.objects.filter(email='guardian@family.test').exists())

    def test_retry_after_failure_succeeds(self):
        with mock.patch.object(EnrollmentOrchestrator, '_create_links', side_effect=RuntimeError("boom")):
            with self.assertRaises(SagaFailure):
                self.build().run()
        fact = self.build().run()
        self.assertEqual(len(fact.child_ids), 2)

    def test_orchestrator_runs_once(self):
        orchestrator = self.build()
        orchestrator.run()
        with self.assertRaises(ValidationError):
            orchestrator.run()

    def test_taken_email_conflicts_before_any_write(self):
        make_user('guardian@family.test', self.school, [Role.PARENT])
        orchestrator = self.build(email='Guardian@Family.test')
        with self.assertRaises(ConflictError):
            orchestrator.run()
        self.assertEqual(orchestrator.history, [EnrollmentState.START])
        self.assertEqual(Child.all_objects.count(), 0)

    def test_lost_email_race_is_a_conflict(self):
        orchestrator = self.build()
        with mock.patch.object(EnrollmentOrchestrator, '_create_guardian', side_effect=IntegrityError("duplicate")):
            with self.assertRaises(ConflictError) as ctx:
                orchestrator.run()
        self.assertEqual(ctx.exception.details, {'email': ['Taken']})
        self.assertEqual(orchestrator.history[-2:], [EnrollmentState.FAILED, EnrollmentState.ROLLED_BACK])
        self.assertEqual(Child.all_objects.count(), 0)

    def test_classroom_of_another_school_is_rejected(self):
        foreign = make_classroom(make_school('BETA'), 'CP1')
        orchestrator = self.build([child_payload('Ada', classroom_id=foreign.pk)])
        with self.assertRaises(ValidationError) as ctx:
            orchestrator.run()
        self.assertEqual(ctx.exception.details['classroom_id'], [foreign.pk])
        self.assertFalse(User.objects.filter(email='guardian@family.test').exists())

    def test_unknown_school_is_not_found(self):
        orchestrator = self.build()
        orchestrator.tenant_id = self.school.pk + 1000
        with self.assertRaises(NotFoundError):
            orchestrator.run()

    def test_fact_is_published_after_commit(self):
        received = []

        def receiver(sender, fact, **kwargs):
            received.append(fact)

        enrollment_completed.connect(receiver, weak=False)
        self.addCleanup(enrollment_completed.disconnect, receiver)

        with self.captureOnCommitCallbacks(execute=True) as callbacks:
            fact = self.build().run()
            self.assertEqual(received, [])

        self.assertEqual(len(callbacks), 1)
        self.assertEqual(received, [fact])

    def test_no_fact_for_failed_enrollment(self):
        received = []

        def receiver(sender, fact, **kwargs):
            received.append(fact)

        enrollment_completed.connect(receiver, weak=False)
        self.addCleanup(enrollment_completed.disconnect, receiver)

        with self.captureOnCommitCallbacks(execute=True):
            with mock.patch.object(EnrollmentOrchestrator, '_create_links', side_effect=RuntimeError("boom")):
                with self.assertRaises(SagaFailure):
                    self.build().run()
        self.assertEqual(received, [])


class EnrollmentApiTest(TestCase):
    def setUp(self):
        cache.clear()
        self.school = make_school('ALPHA')
        self.url = f"/tenants/{self.school.pk}/enrollments/"
        self.payload = {'guardian': guardian_payload(), 'children': [child_payload()]}

    def test_anonymous_enrollment_returns_fact(self):
        response = self.client.post(self.url, self.payload, content_type='application/json')
        self.assertEqual(response.status_code, 201)
        body = response.json()
        self.assertEqual(body['tenant_id'], self.school.pk)
        self.assertEqual(len(body['child_ids']), 1)

    def test_enrollment_works_for_clients_without_a_csrf_token(self):
        client = Client(enforce_csrf_checks=True)
        response = client.post(self.url, self.payload, content_type='application/json')
        self.assertEqual(response.status_code, 201)
        self.assertTrue(User.objects.filter(email='guardian@family.test').exists())

    def test_lost_email_race_returns_conflict(self):
        with mock.patch.object(EnrollmentOrchestrator, '_create_guardian', side_effect=IntegrityError("duplicate")):
            response = self.client.post(self.url, self.payload, content_type='application/json')
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json()['error'], 'CONFLICT')

    def test_repeated_idempotency_key_conflicts(self):
        headers = {'HTTP_X_IDEMPOTENCY_KEY': 'form-123'}
        first = self.client.post(self.url, self.payload, content_type='application/json', **headers)
        self.assertEqual(first.status_code, 201)

        second = self.client.post(self.url, self.payload, content_type='application/json', **headers)
        self.assertEqual(second.status_code, 409)
        self.assertEqual(User.objects.filter(email='guardian@family.test').count(), 1)

    def test_failed_attempt_releases_idempotency_key(self):
        headers = {'HTTP_X_IDEMPOTENCY_KEY': 'form-456'}
        with mock.patch.object(EnrollmentOrchestrator, '_create_links', side_effect=RuntimeError("boom")):
            response = self.client.post(self.url, self.payload, content_type='application/json', **headers)
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json()['error'], 'SAGA_FAILURE')
        self.assertEqual(response.json()['details'], {'step': 'links_created'})

        retry = self.client.post(self.url, self.payload, content_type='application/json', **headers)
        self.assertEqual(retry.status_code, 201)

    def test_empty_children_list_is_invalid(self):
        response = self.client.post(
            self.url, {'guardian': guardian_payload(), 'children': []}, content_type='application/json'
        )
        self.assertEqual(response.status_code, 400)
        self.assertIn('children', response.json()['details'])

    def test_child_errors_are_reported_by_position(self):
        response = self.client.post(self.url, {
            'guardian': guardian_payload(),
            'children': [child_payload(), {'first_name': 'Percy'}],
        }, content_type='application/json')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(list(response.json()['details']['children']), ['1'])

    def test_unknown_school_is_not_found(self):
        response = self.client.post(
            f"/tenants/{self.school.pk + 1000}/enrollments/", self.payload, content_type='application/json'
        )
        self.assertEqual(response.status_code, 404)


class PreRegistrationDeskTest(TestCase):
    def setUp(self):
        self.school = make_school('ALPHA')
        self.admin = make_user('admin@alpha.test', self.school, [Role.ADMIN])
        self.guardian = make_user('guardian@family.test', self.school, [Role.PARENT])
        self.children = [
            make_child(self.school, 'Ada', status=ChildStatus.PRE_REGISTERED),
            make_child(self.school, 'Percy', status=ChildStatus.PRE_REGISTERED),
        ]
        for child in self.children:
            link_parent(self.guardian, child)
        self.url = f"/tenants/{self.school.pk}/enrollments/"
        self.client.force_login(self.admin)

    def test_list_counts_children(self):
        body = self.client.get(self.url).json()
        self.assertEqual(body['pagination']['total'], 1)
        entry = body['results'][0]
        self.assertEqual(entry['guardian']['id'], self.guardian.pk)
        self.assertEqual(entry['children_count'], 2)
        self.assertEqual(entry['pre_registered_count'], 2)
        self.assertFalse(entry['validated'])

    def test_validated_filter(self):
        self.assertEqual(self.client.get(self.url, {'validated': 'true'}).json()['pagination']['total'], 0)
        self.assertEqual(self.client.get(self.url, {'validated': 'false'}).json()['pagination']['total'], 1)

    def test_detail_lists_children(self):
        body = self.client.get(f"{self.url}{self.guardian.pk}/").json()
        self.assertEqual(sorted(c['first_name'] for c in body['children']), ['Ada', 'Percy'])

    def test_validate_registers_pending_children(self):
        response = self.client.post(f"{self.url}{self.guardian.pk}/validate/")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['registered'], 2)
        for child in self.children:
            child.refresh_from_db()
            self.assertEqual(child.status, ChildStatus.REGISTERED)
            self.assertIsNotNone(child.enrolled_at)

        response = self.client.post(f"{self.url}{self.guardian.pk}/validate/")
        self.assertEqual(response.status_code, 400)

    def test_discard_removes_guardian_and_hides_children(self):
        response = self.client.delete(f"{self.url}{self.guardian.pk}/")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['children'], 2)
        self.assertEqual(response.json()['links'], 2)

        self.assertFalse(User.objects.filter(pk=self.guardian.pk).exists())
        self.assertEqual(Child.objects.filter(school=self.school).count(), 0)
        self.assertEqual(Child.all_objects.filter(school=self.school, is_deleted=True).count(), 2)
        self.assertEqual(ParentChildLink.all_objects.filter(child__in=self.children).count(), 0)

    def test_teacher_cannot_use_desk(self):
        teacher = make_user('teacher@alpha.test', self.school, [Role.TEACHER])
        self.client.force_login(teacher)
        self.assertEqual(self.client.get(self.url).status_code, 404)
        self.assertEqual(self.client.post(f"{self.url}{self.guardian.pk}/validate/").status_code, 404)

    def test_service_guardian_lookup_is_tenant_scoped(self):
        other = make_school('BETA')
        with self.assertRaises(NotFoundError):
            PreRegistrationService.get_guardian(other, self.guardian.pk)

    def test_service_validate_records_actor(self):
        guardian = PreRegistrationService.get_guardian(self.school, self.guardian.pk)
        PreRegistrationService.validate(principal_for(self.admin), guardian)
        self.assertEqual(
            set(Child.objects.filter(pk__in=[c.pk for c in self.children]).values_list('updated_by_id', flat=True)),
            {self.admin.pk},
        )
