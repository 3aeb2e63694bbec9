from decimal import Decimal

import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

import core.models
from core.migration_fields import tenant_owned_fields


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('core', '0002_audit_and_lead_teacher'),
        ('students', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Payment',
            fields=tenant_owned_fields() + [
                ('kind', models.CharField(
                    choices=[
                        ('tuition', 'Tuition'),
                        ('canteen', 'Canteen'),
                        ('transport', 'Transport'),
                        ('activity', 'Activity'),
                    ],
                    max_length=20,
                )),
                ('amount', models.DecimalField(
                    decimal_places=2,
                    max_digits=10,
                    validators=[django.core.validators.MinValueValidator(Decimal('0.01'))],
                )),
                ('paid_on', models.DateField(blank=True, null=True)),
                ('due_on', models.DateField(blank=True, null=True)),
                ('method', models.CharField(
                    blank=True,
                    choices=[
                        ('cash', 'Cash'),
                        ('cheque', 'Cheque'),
                        ('transfer', 'Bank transfer'),
                        ('mobile_money', 'Mobile money'),
                    ],
                    max_length=20,
                )),
                ('status', models.CharField(
                    choices=[
                        ('pending', 'Pending'),
                        ('paid', 'Paid'),
                        ('late', 'Late'),
                        ('cancelled', 'Cancelled'),
                    ],
                    default='pending',
                    max_length=20,
                )),
                ('receipt_number', models.CharField(blank=True, max_length=50)),
                ('description', models.CharField(blank=True, max_length=500)),
                ('term', models.PositiveSmallIntegerField(
                    blank=True, choices=[(1, 'First term'), (2, 'Second term'), (3, 'Third term')], null=True,
                )),
                ('school_year', models.CharField(
                    default=core.models.current_school_year,
                    max_length=9,
                    validators=[core.models.validate_school_year],
                )),
                ('child', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE, related_name='payments',
                    to='students.child',
                )),
            ],
            options={
                'db_table': 'billing_payment',
                'ordering': ['-due_on', '-created_at'],
            },
        ),
        migrations.AddIndex(
            model_name='payment',
            index=models.Index(fields=['school', 'status'], name='payment_school_status_idx'),
        ),
        migrations.AddIndex(
            model_name='payment',
            index=models.Index(fields=['school', 'child'], name='payment_school_child_idx'),
        ),
    ]
