# shared/constants/__init__.py
from .model_fields import (
    SCHOOL_MODEL_PATH,
    CLASSROOM_MODEL_PATH,
    CHILD_MODEL_PATH,
    TENANT_FIELD,
    TENANT_ID_FIELD,
    SCHOOL_CODE_HEADER,
    IDEMPOTENCY_HEADER,
    PAGINATION_HEADERS,
    ALLOWED_UPLOAD_EXTENSIONS,
    MB,
    Role,
    ChildStatus,
    Gender,
    Term,
    LiaisonKind,
    AnnouncementKind,
    PaymentKind,
    PaymentMethods,
    PaymentStatus,
)

__all__ = [
    'SCHOOL_MODEL_PATH',
    'CLASSROOM_MODEL_PATH',
    'CHILD_MODEL_PATH',
    'TENANT_FIELD',
    'TENANT_ID_FIELD',
    'SCHOOL_CODE_HEADER',
    'IDEMPOTENCY_HEADER',
    'PAGINATION_HEADERS',
    'ALLOWED_UPLOAD_EXTENSIONS',
    'MB',
    'Role',
    'ChildStatus',
    'Gender',
    'Term',
    'LiaisonKind',
    'AnnouncementKind',
    'PaymentKind',
    'PaymentMethods',
    'PaymentStatus',
]
