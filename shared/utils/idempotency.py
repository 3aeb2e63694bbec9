# shared/utils/idempotency.py
"""
Idempotency service to prevent duplicate processing of retried requests.
"""
from django.core.cache import cache

from shared.constants import IDEMPOTENCY_HEADER


class IdempotencyService:
    """Service to ensure operations are processed only once."""

    @staticmethod
    def get_idempotency_key(request, scope=''):
        key = request.headers.get(IDEMPOTENCY_HEADER)
        if not key:
            return None

        # Prefix with caller and scope so keys never collide across users or tenants
        user_id = getattr(request.user, 'id', None) or 'anonymous'
        return f"idemp_{scope}_{user_id}_{key}"

    @staticmethod
    def check_and_lock(key, ttl=300):
        """
        Check if operation was already processed and lock for processing.
        Returns True if should proceed, False if duplicate or in flight.
        """
        if cache.add(f"{key}_lock", True, ttl):
            if cache.get(f"{key}_processed"):
                cache.delete(f"{key}_lock")
                return False
            return True
        return False

    @staticmethod
    def mark_processed(key, ttl=24 * 60 * 60):
        """Mark operation as successfully processed."""
        cache.set(f"{key}_processed", True, ttl)
        cache.delete(f"{key}_lock")

    @staticmethod
    def mark_failed(key):
        """Release the lock so the caller may retry."""
        cache.delete(f"{key}_lock")
