# shared/constants/model_fields.py

"""
CONSTANT field values shared across every app.
NO model imports - safe to import from models, services and settings alike.
"""
from django.db import models


# Model paths (lazy FK references)
SCHOOL_MODEL_PATH = 'core.School'
CLASSROOM_MODEL_PATH = 'core.Classroom'
CHILD_MODEL_PATH = 'students.Child'

# Tenant field carried by every school-owned row
TENANT_FIELD = 'school'
TENANT_ID_FIELD = 'school_id'

# Request header used by API clients that do not put the tenant in the path
SCHOOL_CODE_HEADER = 'X-School-Code'
IDEMPOTENCY_HEADER = 'X-Idempotency-Key'

# Pagination headers
PAGINATION_HEADERS = {
    'total': 'X-Total-Count',
    'page': 'X-Page',
    'page_size': 'X-Page-Size',
    'total_pages': 'X-Total-Pages',
}

# Uploads
ALLOWED_UPLOAD_EXTENSIONS = ('pdf', 'doc', 'docx', 'jpg', 'jpeg', 'png')
MB = 1024 * 1024


class Role(models.TextChoices):
    """Closed set of principal roles."""
    SUPER_ADMIN = 'super_admin', 'Super Admin'
    ADMIN = 'admin', 'Admin'
    TEACHER = 'teacher', 'Teacher'
    PARENT = 'parent', 'Parent'


class ChildStatus(models.TextChoices):
    PRE_REGISTERED = 'pre_registered', 'Pre-registered'
    REGISTERED = 'registered', 'Registered'
    SUSPENDED = 'suspended', 'Suspended'
    GRADUATED = 'graduated', 'Graduated'


class Gender(models.TextChoices):
    MALE = 'M', 'Male'
    FEMALE = 'F', 'Female'


class Term(models.IntegerChoices):
    FIRST = 1, 'First term'
    SECOND = 2, 'Second term'
    THIRD = 3, 'Third term'


class LiaisonKind(models.TextChoices):
    INFO = 'info', 'Information'
    HOMEWORK = 'homework', 'Homework'
    BEHAVIOUR = 'behaviour', 'Behaviour'
    HEALTH = 'health', 'Health'
    PRAISE = 'praise', 'Praise'
    SANCTION = 'sanction', 'Sanction'


class AnnouncementKind(models.TextChoices):
    GENERAL = 'general', 'General'
    CANTEEN = 'canteen', 'Canteen'
    ACTIVITY = 'activity', 'Activity'
    URGENT = 'urgent', 'Urgent'
    INFORMATION = 'information', 'Information'


class PaymentKind(models.TextChoices):
    TUITION = 'tuition', 'Tuition'
    CANTEEN = 'canteen', 'Canteen'
    TRANSPORT = 'transport', 'Transport'
    ACTIVITY = 'activity', 'Activity'


class PaymentMethods(models.TextChoices):
    CASH = 'cash', 'Cash'
    CHEQUE = 'cheque', 'Cheque'
    TRANSFER = 'transfer', 'Bank transfer'
    MOBILE_MONEY = 'mobile_money', 'Mobile money'


class PaymentStatus(models.TextChoices):
    PENDING = 'pending', 'Pending'
    PAID = 'paid', 'Paid'
    LATE = 'late', 'Late'
    CANCELLED = 'cancelled', 'Cancelled'
