# shared/utils/uploads.py
"""
Uploaded file validation for file-bearing records.
"""
import os

from django.conf import settings

from core.exceptions import ValidationError
from shared.constants import ALLOWED_UPLOAD_EXTENSIONS, MB


def upload_limit(kind: str) -> int:
    """Maximum size in bytes for an upload kind (``report_card``, ``schedule``)."""
    return settings.SCHOOL_UPLOAD_LIMITS[kind]


def validate_upload(uploaded, kind: str) -> dict:
    """
    Check extension and size, then read the file.

    Returns the blob fields ready for the model:
    ``filename``, ``content_type``, ``size``, ``content``.
    """
    if uploaded is None:
        raise ValidationError("A file is required.", details={'file': ['This field is required.']})

    extension = os.path.splitext(uploaded.name)[1].lower().lstrip('.')
    if extension not in ALLOWED_UPLOAD_EXTENSIONS:
        allowed = ', '.join(ALLOWED_UPLOAD_EXTENSIONS)
        raise ValidationError(
            f"File type not allowed. Allowed extensions: {allowed}.",
            details={'file': [f"Allowed extensions: {allowed}"]},
        )

    limit = upload_limit(kind)
    if uploaded.size > limit:
        raise ValidationError(
            f"File too large. Maximum size is {limit // MB} MB.",
            details={'file': [f"Maximum size: {limit // MB} MB"]},
        )
    if uploaded.size == 0:
        raise ValidationError("File is empty.", details={'file': ['Empty file']})

    return {
        'filename': os.path.basename(uploaded.name),
        'content_type': getattr(uploaded, 'content_type', '') or '',
        'size': uploaded.size,
        'content': uploaded.read(),
    }
