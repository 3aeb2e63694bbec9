# shared/__init__.py
"""
Shared package - central access to constants and small utilities.
Avoids importing models or services to prevent circular dependencies.
"""

# Constants
from .constants import (
    SCHOOL_CODE_HEADER,
    IDEMPOTENCY_HEADER,
    ALLOWED_UPLOAD_EXTENSIONS,
    Role,
    ChildStatus,
)

__all__ = [
    'SCHOOL_CODE_HEADER',
    'IDEMPOTENCY_HEADER',
    'ALLOWED_UPLOAD_EXTENSIONS',
    'Role',
    'ChildStatus',
]
