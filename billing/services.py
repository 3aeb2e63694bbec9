# billing/services.py
"""
Billing services - fee payments recorded against children.
"""
import logging
from decimal import Decimal
from typing import Any, Dict

from django.db.models import Count, Sum

from core.lifecycle import LifecycleManager
from shared.constants import PaymentStatus
from .models import Payment

logger = logging.getLogger(__name__)


class PaymentService:

    @staticmethod
    def _prepare(data: Dict[str, Any]) -> Dict[str, Any]:
        data = dict(data)
        data.pop('child_id', None)
        for optional in ('status', 'school_year'):
            if optional in data and not data[optional]:
                data.pop(optional)
        return data

    @staticmethod
    def create_payment(principal, school, child, data: Dict[str, Any]) -> Payment:
        data = PaymentService._prepare(data)
        data.setdefault('school_year', child.school_year or school.school_year)
        payment = LifecycleManager(principal).create(Payment, school=school, child=child, **data)
        logger.info(f"Payment {payment.pk} recorded for child {child.pk}: {payment.kind} {payment.amount}")
        return payment

    @staticmethod
    def update_payment(principal, payment: Payment, data: Dict[str, Any]) -> Payment:
        previous_status = payment.status
        payment = LifecycleManager(principal).update(payment, **PaymentService._prepare(data))
        if payment.status != previous_status:
            logger.info(f"Payment {payment.pk} status changed: {previous_status} -> {payment.status}")
        return payment

    @staticmethod
    def delete_payment(principal, payment: Payment):
        return LifecycleManager(principal).soft_delete(payment)

    @staticmethod
    def summary(payments) -> Dict[str, Any]:
        """Totals per status over an already scoped queryset."""
        rows = payments.order_by().values('status').annotate(count=Count('pk'), total=Sum('amount'))
        by_status = {
            status.value: {'count': 0, 'total': '0.00'} for status in PaymentStatus
        }
        grand_total = Decimal('0')
        for row in rows:
            total = row['total'] or Decimal('0')
            by_status[row['status']] = {'count': row['count'], 'total': f"{total:.2f}"}
            if row['status'] != PaymentStatus.CANCELLED:
                grand_total += total
        return {'by_status': by_status, 'total': f"{grand_total:.2f}"}
