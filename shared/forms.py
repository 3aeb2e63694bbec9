# shared/forms.py
"""
Base form for JSON API payloads.
"""
from django import forms


class ApiForm(forms.Form):
    """
    Django form validating a decoded JSON/multipart payload.

    ``partial=True`` makes every field optional so the same form serves
    create (full) and update (partial) requests.
    """

    def __init__(self, *args, partial=False, **kwargs):
        super().__init__(*args, **kwargs)
        self.partial = partial
        if partial:
            for field in self.fields.values():
                field.required = False
