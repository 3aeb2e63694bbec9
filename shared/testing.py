# shared/testing.py
"""
Small builders for test data. Rows are created directly, bypassing services,
so each test sets up exactly the state it needs.
"""
from datetime import date

from django.contrib.auth import get_user_model

from core.models import Classroom, School
from core.tenancy import Principal
from shared.constants import ChildStatus, Gender, Role

PASSWORD = 'Blue-Harbour-42'


def make_school(code='ALPHA', **fields):
    fields.setdefault('name', f"{code.title()} School")
    fields.setdefault('email', f"{code.lower()}@school.test")
    return School.objects.create(code=code, **fields)


def make_user(email, school=None, roles=(), password=PASSWORD, **fields):
    user = get_user_model().objects.create_user(email=email, password=password, school=school, **fields)
    for role in roles:
        user.add_role(role)
    return user


def make_super_admin(email='root@platform.test'):
    return make_user(email, roles=[Role.SUPER_ADMIN])


def principal_for(user):
    return Principal.from_user(user)


def make_classroom(school, name='CP1', **fields):
    return Classroom.objects.create(school=school, name=name, **fields)


def make_child(school, first_name='Ada', classroom=None, **fields):
    from students.models import Child

    fields.setdefault('last_name', 'Lovelace')
    fields.setdefault('date_of_birth', date(2018, 3, 1))
    fields.setdefault('gender', Gender.FEMALE)
    fields.setdefault('status', ChildStatus.REGISTERED)
    return Child.objects.create(school=school, first_name=first_name, classroom=classroom, **fields)


def link_parent(parent, child):
    from students.models import ParentChildLink

    return ParentChildLink.objects.create(school_id=child.school_id, parent=parent, child=child)


def link_teacher(teacher, child):
    from students.models import TeacherChildLink

    return TeacherChildLink.objects.create(school_id=child.school_id, teacher=teacher, child=child)
