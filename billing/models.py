# billing/models.py
from decimal import Decimal
import logging

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models

from core.models import TenantOwnedModel, current_school_year, validate_school_year
from shared.constants import CHILD_MODEL_PATH, PaymentKind, PaymentMethods, PaymentStatus, Term

logger = logging.getLogger(__name__)


class Payment(TenantOwnedModel):
    """A fee payment (or expected payment) recorded against one child."""
    child = models.ForeignKey(CHILD_MODEL_PATH, on_delete=models.CASCADE, related_name='payments')
    kind = models.CharField(max_length=20, choices=PaymentKind.choices)
    amount = models.DecimalField(
        max_digits=10, decimal_places=2, validators=[MinValueValidator(Decimal('0.01'))]
    )
    paid_on = models.DateField(null=True, blank=True)
    due_on = models.DateField(null=True, blank=True)
    method = models.CharField(max_length=20, choices=PaymentMethods.choices, blank=True)
    status = models.CharField(max_length=20, choices=PaymentStatus.choices, default=PaymentStatus.PENDING)
    receipt_number = models.CharField(max_length=50, blank=True)
    description = models.CharField(max_length=500, blank=True)
    term = models.PositiveSmallIntegerField(choices=Term.choices, null=True, blank=True)
    school_year = models.CharField(
        max_length=9, default=current_school_year, validators=[validate_school_year]
    )

    class Meta:
        db_table = 'billing_payment'
        ordering = ['-due_on', '-created_at']
        indexes = [
            models.Index(fields=['school', 'status'], name='payment_school_status_idx'),
            models.Index(fields=['school', 'child'], name='payment_school_child_idx'),
        ]

    def __str__(self):
        return f"{self.kind} {self.amount} - child {self.child_id}"

    def clean(self):
        if self.status == PaymentStatus.PAID:
            if not self.paid_on:
                raise ValidationError({'paid_on': 'A paid payment needs a payment date.'})
            if not self.method:
                raise ValidationError({'method': 'A paid payment needs a payment method.'})

    def to_dict(self):
        return {
            'id': self.id,
            'child_id': self.child_id,
            'kind': self.kind,
            'amount': str(self.amount),
            'paid_on': self.paid_on.isoformat() if self.paid_on else None,
            'due_on': self.due_on.isoformat() if self.due_on else None,
            'method': self.method,
            'status': self.status,
            'receipt_number': self.receipt_number,
            'description': self.description,
            'term': self.term,
            'school_year': self.school_year,
        }
