# shared/utils/payload.py
"""
Request payload helpers: JSON body parsing and form validation that raise
the system's own ValidationError.
"""
import json

from core.exceptions import ValidationError


def parse_json(request) -> dict:
    """Decode a JSON object body. Empty bodies decode to ``{}``."""
    if not request.body:
        return {}
    try:
        data = json.loads(request.body)
    except (ValueError, UnicodeDecodeError) as e:
        raise ValidationError("Request body is not valid JSON.") from e
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object.")
    return data


def clean_form(form_class, data, files=None, **kwargs) -> dict:
    """Validate ``data`` with a Django form and return its cleaned data."""
    form = form_class(data=data, files=files, **kwargs)
    if not form.is_valid():
        details = {
            field: [error['message'] for error in errors]
            for field, errors in form.errors.get_json_data().items()
        }
        raise ValidationError("Invalid input.", details=details)
    return form.cleaned_data


def changed_fields(data, cleaned) -> dict:
    """Keep only the fields actually sent by the client (partial updates)."""
    return {name: value for name, value in cleaned.items() if name in data}
