# core/forms.py
"""
CORE FORMS - payload validation for schools and classrooms.
"""
from django import forms

from shared.forms import ApiForm


class SchoolForm(ApiForm):
    name = forms.CharField(max_length=200)
    code = forms.CharField(max_length=20)
    address = forms.CharField(max_length=500, required=False)
    city = forms.CharField(max_length=100, required=False)
    phone = forms.CharField(max_length=20, required=False)
    email = forms.EmailField(max_length=100)
    school_year = forms.RegexField(regex=r'^\d{4}-\d{4}$', required=False)

    def clean_code(self):
        return (self.cleaned_data.get('code') or '').strip().upper()


class ClassroomForm(ApiForm):
    name = forms.CharField(max_length=100)
    capacity = forms.IntegerField(min_value=1, max_value=100, required=False)
    lead_teacher_id = forms.IntegerField(required=False)
