import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

import core.models
from core.migration_fields import tenant_owned_fields


def document_fields():
    return tenant_owned_fields() + [
        ('filename', models.CharField(max_length=255)),
        ('content_type', models.CharField(blank=True, max_length=100)),
        ('size', models.PositiveIntegerField(default=0)),
        ('content', models.BinaryField()),
        ('school_year', models.CharField(
            default=core.models.current_school_year,
            max_length=9,
            validators=[core.models.validate_school_year],
        )),
    ]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('core', '0002_audit_and_lead_teacher'),
        ('students', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='ReportCard',
            fields=document_fields() + [
                ('term', models.PositiveSmallIntegerField(
                    choices=[(1, 'First term'), (2, 'Second term'), (3, 'Third term')]
                )),
                ('child', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE, related_name='report_cards',
                    to='students.child',
                )),
            ],
            options={
                'db_table': 'records_report_card',
                'ordering': ['-school_year', 'term'],
            },
        ),
        migrations.AddConstraint(
            model_name='reportcard',
            constraint=models.UniqueConstraint(
                condition=models.Q(('is_deleted', False)),
                fields=('child', 'term', 'school_year'),
                name='uniq_live_report_card',
            ),
        ),
        migrations.CreateModel(
            name='ScheduleFile',
            fields=document_fields() + [
                ('classroom', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE, related_name='schedules',
                    to='core.classroom',
                )),
            ],
            options={
                'db_table': 'records_schedule_file',
                'ordering': ['-school_year', 'filename'],
            },
        ),
        migrations.AddConstraint(
            model_name='schedulefile',
            constraint=models.UniqueConstraint(
                condition=models.Q(('is_deleted', False)),
                fields=('classroom', 'school_year', 'filename'),
                name='uniq_live_schedule_file',
            ),
        ),
    ]
