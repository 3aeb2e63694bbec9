# students/forms.py
"""
STUDENT FORMS - payload validation for children and link records.
"""
from django import forms

from shared.constants import ChildStatus, Gender
from shared.forms import ApiForm


class ChildForm(ApiForm):
    first_name = forms.CharField(max_length=100)
    last_name = forms.CharField(max_length=100)
    date_of_birth = forms.DateField()
    gender = forms.ChoiceField(choices=Gender.choices)
    classroom_id = forms.IntegerField(required=False)
    school_year = forms.RegexField(regex=r'^\d{4}-\d{4}$', required=False)
    status = forms.ChoiceField(choices=ChildStatus.choices, required=False)
    uses_canteen = forms.BooleanField(required=False)


class ParentLinkForm(ApiForm):
    parent_id = forms.IntegerField()
    child_id = forms.IntegerField()


class TeacherLinkForm(ApiForm):
    teacher_id = forms.IntegerField()
    child_id = forms.IntegerField()
