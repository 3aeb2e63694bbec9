# admissions/forms.py
"""
ADMISSION FORMS - the public pre-registration payload:
one guardian plus a non-empty list of children.
"""
from django import forms

from core.exceptions import ValidationError
from shared.constants import Gender
from shared.forms import ApiForm
from shared.utils.payload import clean_form


class GuardianForm(ApiForm):
    email = forms.EmailField(max_length=254)
    password = forms.CharField(strip=False)
    first_name = forms.CharField(max_length=150)
    last_name = forms.CharField(max_length=150)
    phone_number = forms.CharField(max_length=20, required=False)
    address = forms.CharField(max_length=500, required=False)
    gender = forms.ChoiceField(choices=Gender.choices, required=False)


class EnrollmentChildForm(ApiForm):
    first_name = forms.CharField(max_length=100)
    last_name = forms.CharField(max_length=100)
    date_of_birth = forms.DateField()
    gender = forms.ChoiceField(choices=Gender.choices)
    classroom_id = forms.IntegerField(required=False)
    uses_canteen = forms.BooleanField(required=False)


def clean_enrollment(payload: dict):
    """Validate the whole payload; returns ``(guardian, children)`` cleaned dicts."""
    guardian_data = payload.get('guardian')
    children_data = payload.get('children')

    if not isinstance(guardian_data, dict):
        raise ValidationError("Guardian details are required.", details={'guardian': ['Required']})
    if not isinstance(children_data, list) or not children_data:
        raise ValidationError("At least one child is required.", details={'children': ['Required']})

    guardian = clean_form(GuardianForm, guardian_data)

    children, errors = [], {}
    for index, child_data in enumerate(children_data):
        if not isinstance(child_data, dict):
            errors[str(index)] = {'__all__': ['Must be an object']}
            continue
        try:
            children.append(clean_form(EnrollmentChildForm, child_data))
        except ValidationError as e:
            errors[str(index)] = e.details
    if errors:
        raise ValidationError("Invalid child details.", details={'children': errors})

    return guardian, children
