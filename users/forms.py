# users/forms.py
"""
USER FORMS - payload validation for principals and authentication.
"""
from django import forms

from shared.constants import Gender, Role
from shared.forms import ApiForm


class LoginForm(ApiForm):
    email = forms.EmailField()
    password = forms.CharField(strip=False)


class ChangePasswordForm(ApiForm):
    current_password = forms.CharField(strip=False)
    new_password = forms.CharField(strip=False)


class PasswordResetForm(ApiForm):
    new_password = forms.CharField(strip=False)


class PrincipalProfileForm(ApiForm):
    first_name = forms.CharField(max_length=150)
    last_name = forms.CharField(max_length=150)
    phone_number = forms.CharField(max_length=20, required=False)
    address = forms.CharField(max_length=500, required=False)
    gender = forms.ChoiceField(choices=Gender.choices, required=False)
    date_of_birth = forms.DateField(required=False)


class PrincipalCreateForm(PrincipalProfileForm):
    email = forms.EmailField(max_length=254)
    password = forms.CharField(strip=False)
    roles = forms.MultipleChoiceField(choices=Role.choices)


class PrincipalUpdateForm(PrincipalProfileForm):
    is_active = forms.BooleanField(required=False)
    roles = forms.MultipleChoiceField(choices=Role.choices, required=False)
