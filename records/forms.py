# records/forms.py
from django import forms

from shared.constants import Term
from shared.forms import ApiForm

SCHOOL_YEAR_REGEX = r'^\d{4}-\d{4}$'


class ReportCardForm(ApiForm):
    child_id = forms.IntegerField()
    term = forms.TypedChoiceField(choices=Term.choices, coerce=int)
    school_year = forms.RegexField(regex=SCHOOL_YEAR_REGEX, required=False)


class ScheduleFileForm(ApiForm):
    classroom_id = forms.IntegerField()
    school_year = forms.RegexField(regex=SCHOOL_YEAR_REGEX, required=False)
