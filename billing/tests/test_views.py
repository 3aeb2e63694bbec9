# billing/tests/test_views.py
from decimal import Decimal

from django.test import TestCase

from billing.models import Payment
from shared.constants import PaymentKind, PaymentStatus, Role
from shared.testing import (
    link_parent,
    link_teacher,
    make_child,
    make_classroom,
    make_school,
    make_user,
)


def make_payment(child, amount='100.00', status=PaymentStatus.PENDING, **fields):
    return Payment.objects.create(
        school_id=child.school_id, child=child, kind=PaymentKind.TUITION,
        amount=Decimal(amount), status=status, **fields
    )


class PaymentViewsTest(TestCase):
    def setUp(self):
        self.school = make_school('ALPHA')
        self.admin = make_user('admin@alpha.test', self.school, [Role.ADMIN])
        self.parent = make_user('parent@alpha.test', self.school, [Role.PARENT])
        self.lead = make_user('lead@alpha.test', self.school, [Role.TEACHER])
        classroom = make_classroom(self.school, 'CP1', lead_teacher=self.lead)
        self.child = make_child(self.school, 'Ada', classroom=classroom)
        self.sibling = make_child(self.school, 'Bob', classroom=classroom)
        link_parent(self.parent, self.child)
        link_teacher(self.lead, self.child)
        self.url = f"/tenants/{self.school.pk}/payments/"

    def test_admin_records_payment(self):
        self.client.force_login(self.admin)
        response = self.client.post(self.url, {
            'child_id': self.child.pk, 'kind': 'canteen', 'amount': '45.50', 'due_on': '2026-10-01',
        }, content_type='application/json')
        self.assertEqual(response.status_code, 201)
        body = response.json()
        self.assertEqual(body['amount'], '45.50')
        self.assertEqual(body['status'], PaymentStatus.PENDING)
        self.assertEqual(body['school_year'], self.child.school_year)

    def test_paid_payment_needs_date_and_method(self):
        self.client.force_login(self.admin)
        response = self.client.post(self.url, {
            'child_id': self.child.pk, 'kind': 'tuition', 'amount': '300', 'status': 'paid',
        }, content_type='application/json')
        self.assertEqual(response.status_code, 400)
        self.assertIn('paid_on', response.json()['details'])

        response = self.client.post(self.url, {
            'child_id': self.child.pk, 'kind': 'tuition', 'amount': '300', 'status': 'paid',
            'paid_on': '2026-09-15', 'method': 'cash',
        }, content_type='application/json')
        self.assertEqual(response.status_code, 201)

    def test_non_positive_amount_is_rejected(self):
        self.client.force_login(self.admin)
        response = self.client.post(self.url, {
            'child_id': self.child.pk, 'kind': 'tuition', 'amount': '0',
        }, content_type='application/json')
        self.assertEqual(response.status_code, 400)
        self.assertIn('amount', response.json()['details'])

    def test_parent_sees_only_linked_children_payments(self):
        own = make_payment(self.child)
        other = make_payment(self.sibling)

        self.client.force_login(self.parent)
        results = self.client.get(self.url).json()['results']
        self.assertEqual([p['id'] for p in results], [own.pk])
        self.assertEqual(self.client.get(f"{self.url}{own.pk}/").status_code, 200)
        self.assertEqual(self.client.get(f"{self.url}{other.pk}/").status_code, 404)

    def test_parent_cannot_modify_payment(self):
        payment = make_payment(self.child)
        self.client.force_login(self.parent)
        response = self.client.patch(
            f"{self.url}{payment.pk}/", {'status': 'cancelled'}, content_type='application/json'
        )
        self.assertEqual(response.status_code, 404)
        payment.refresh_from_db()
        self.assertEqual(payment.status, PaymentStatus.PENDING)

    def test_teacher_never_sees_payments(self):
        payment = make_payment(self.child)
        self.client.force_login(self.lead)
        self.assertEqual(self.client.get(self.url).json()['results'], [])
        self.assertEqual(self.client.get(f"{self.url}{payment.pk}/").status_code, 404)

    def test_admin_marks_payment_paid(self):
        payment = make_payment(self.child)
        self.client.force_login(self.admin)
        response = self.client.patch(f"{self.url}{payment.pk}/", {
            'status': 'paid', 'paid_on': '2026-10-02', 'method': 'transfer',
        }, content_type='application/json')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['status'], PaymentStatus.PAID)
        self.assertEqual(response.json()['amount'], '100.00')

    def test_summary_excludes_cancelled_from_total(self):
        make_payment(self.child, '100.00')
        make_payment(self.child, '50.00', status=PaymentStatus.PAID)
        make_payment(self.child, '30.00', status=PaymentStatus.CANCELLED)
        make_payment(self.sibling, '999.00')

        self.client.force_login(self.parent)
        body = self.client.get(f"{self.url}summary/").json()
        self.assertEqual(body['total'], '150.00')
        self.assertEqual(body['by_status']['cancelled'], {'count': 1, 'total': '30.00'})
        self.assertEqual(body['by_status']['late'], {'count': 0, 'total': '0.00'})

        self.client.force_login(self.admin)
        self.assertEqual(self.client.get(f"{self.url}summary/").json()['total'], '1149.00')

    def test_deleted_payment_disappears(self):
        payment = make_payment(self.child)
        self.client.force_login(self.admin)
        self.assertEqual(self.client.delete(f"{self.url}{payment.pk}/").status_code, 204)
        self.assertEqual(self.client.get(self.url).json()['pagination']['total'], 0)
        self.assertTrue(Payment.all_objects.get(pk=payment.pk).is_deleted)
