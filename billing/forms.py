# billing/forms.py
from decimal import Decimal

from django import forms

from shared.constants import PaymentKind, PaymentMethods, PaymentStatus, Term
from shared.forms import ApiForm


class PaymentForm(ApiForm):
    child_id = forms.IntegerField()
    kind = forms.ChoiceField(choices=PaymentKind.choices)
    amount = forms.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal('0.01'))
    paid_on = forms.DateField(required=False)
    due_on = forms.DateField(required=False)
    method = forms.ChoiceField(choices=PaymentMethods.choices, required=False)
    status = forms.ChoiceField(choices=PaymentStatus.choices, required=False)
    receipt_number = forms.CharField(max_length=50, required=False)
    description = forms.CharField(max_length=500, required=False)
    term = forms.TypedChoiceField(choices=Term.choices, coerce=int, required=False, empty_value=None)
    school_year = forms.RegexField(regex=r'^\d{4}-\d{4}$', required=False)
