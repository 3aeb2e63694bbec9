# core/tests/test_lifecycle.py
from django.test import TestCase

from core.exceptions import ConflictError, InvariantViolation, ValidationError
from core.lifecycle import LifecycleManager
from core.models import Classroom, School, current_school_year
from shared.constants import Role
from shared.testing import make_child, make_classroom, make_school, make_user, principal_for


class LifecycleManagerTest(TestCase):
    def setUp(self):
        self.school = make_school('ALPHA')
        self.other = make_school('BETA')
        self.admin = make_user('admin@alpha.test', self.school, [Role.ADMIN])
        self.lifecycle = LifecycleManager(principal_for(self.admin))

    def test_create_stamps_school_and_creator(self):
        classroom = self.lifecycle.create(Classroom, school=self.school, name='CP1')
        self.assertEqual(classroom.school_id, self.school.pk)
        self.assertEqual(classroom.created_by_id, self.admin.pk)
        self.assertEqual(classroom.updated_by_id, self.admin.pk)

    def test_create_validates_fields(self):
        with self.assertRaises(ValidationError) as ctx:
            self.lifecycle.create(Classroom, school=self.school, name='CP1', capacity=500)
        self.assertIn('capacity', ctx.exception.details)

    def test_duplicate_live_key_conflicts_and_is_reusable_after_soft_delete(self):
        first = self.lifecycle.create(Classroom, school=self.school, name='CP1')
        with self.assertRaises(ConflictError):
            self.lifecycle.create(Classroom, school=self.school, name='CP1')

        self.lifecycle.soft_delete(first)
        again = self.lifecycle.create(Classroom, school=self.school, name='CP1')
        self.assertNotEqual(again.pk, first.pk)
        self.assertEqual(Classroom.all_objects.filter(school=self.school, name='CP1').count(), 2)

    def test_same_key_in_another_school_is_fine(self):
        self.lifecycle.create(Classroom, school=self.school, name='CP1')
        other = LifecycleManager(None).create(Classroom, school=self.other, name='CP1')
        self.assertEqual(other.school_id, self.other.pk)

    def test_update_refuses_tenant_change(self):
        classroom = make_classroom(self.school)
        with self.assertRaises(InvariantViolation):
            self.lifecycle.update(classroom, school=self.other)

    def test_save_refuses_tenant_change_on_loaded_row(self):
        classroom = Classroom.objects.get(pk=make_classroom(self.school).pk)
        classroom.school_id = self.other.pk
        with self.assertRaises(InvariantViolation):
            classroom.save()

    def test_classroom_with_live_children_cannot_be_deleted(self):
        classroom = make_classroom(self.school)
        child = make_child(self.school, classroom=classroom)

        with self.assertRaises(InvariantViolation):
            self.lifecycle.soft_delete(classroom)
        classroom.refresh_from_db()
        self.assertFalse(classroom.is_deleted)

        LifecycleManager(principal_for(self.admin)).soft_delete(child)
        self.lifecycle.soft_delete(classroom)
        self.assertTrue(Classroom.all_objects.get(pk=classroom.pk).is_deleted)
        self.assertFalse(Classroom.objects.filter(pk=classroom.pk).exists())

    def test_soft_delete_stamps_deleter(self):
        classroom = self.lifecycle.soft_delete(make_classroom(self.school))
        self.assertTrue(classroom.is_deleted)
        self.assertIsNotNone(classroom.deleted_at)
        self.assertEqual(classroom.deleted_by_id, self.admin.pk)

    def test_school_with_users_cannot_be_deleted(self):
        with self.assertRaises(InvariantViolation):
            self.lifecycle.soft_delete(self.school)

        empty = make_school('GAMMA')
        self.lifecycle.soft_delete(empty)
        self.assertFalse(School.objects.filter(pk=empty.pk).exists())


class SchoolModelTest(TestCase):
    def test_code_is_normalised_and_checked(self):
        lifecycle = LifecycleManager(None)
        school = lifecycle.create(School, name='Delta', code='delta_1', email='Delta@School.test')
        self.assertEqual(school.code, 'DELTA_1')
        self.assertEqual(school.email, 'delta@school.test')

        with self.assertRaises(ValidationError):
            lifecycle.create(School, name='Bad', code='not-valid', email='bad@school.test')

    def test_school_year_defaults_to_current(self):
        self.assertEqual(make_school('EPSILON').school_year, current_school_year())
