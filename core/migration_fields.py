# core/migration_fields.py
"""
Column set shared by every ``TenantOwnedModel`` table, for use in migrations.
Returns fresh field instances on each call.
"""
import django.db.models.deletion
from django.conf import settings
from django.db import models


def _user_fk():
    return models.ForeignKey(
        blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL,
        related_name='+', to=settings.AUTH_USER_MODEL,
    )


def tenant_owned_fields():
    return [
        ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
        ('created_at', models.DateTimeField(auto_now_add=True)),
        ('updated_at', models.DateTimeField(auto_now=True)),
        ('is_deleted', models.BooleanField(db_index=True, default=False)),
        ('deleted_at', models.DateTimeField(blank=True, null=True)),
        ('created_by', _user_fk()),
        ('updated_by', _user_fk()),
        ('deleted_by', _user_fk()),
        ('school', models.ForeignKey(
            on_delete=django.db.models.deletion.PROTECT, related_name='+', to='core.school',
        )),
    ]
