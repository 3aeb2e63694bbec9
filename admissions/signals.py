# admissions/signals.py
import logging

from django.dispatch import Signal, receiver

logger = logging.getLogger(__name__)

# Sent once per committed enrollment with ``fact=EnrollmentCompleted``.
enrollment_completed = Signal()


@receiver(enrollment_completed)
def log_enrollment_completed(sender, fact, **kwargs):
    logger.info(
        f"Enrollment completed: guardian {fact.guardian_id} in school {fact.tenant_id}, "
        f"children {list(fact.child_ids)}"
    )
