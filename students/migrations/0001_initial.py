import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

import core.models
from core.migration_fields import tenant_owned_fields


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('core', '0002_audit_and_lead_teacher'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Child',
            fields=tenant_owned_fields() + [
                ('first_name', models.CharField(max_length=100)),
                ('last_name', models.CharField(max_length=100)),
                ('date_of_birth', models.DateField()),
                ('gender', models.CharField(choices=[('M', 'Male'), ('F', 'Female')], max_length=1)),
                ('school_year', models.CharField(
                    default=core.models.current_school_year,
                    max_length=9,
                    validators=[core.models.validate_school_year],
                )),
                ('status', models.CharField(
                    choices=[
                        ('pre_registered', 'Pre-registered'),
                        ('registered', 'Registered'),
                        ('suspended', 'Suspended'),
                        ('graduated', 'Graduated'),
                    ],
                    default='pre_registered',
                    max_length=20,
                )),
                ('enrolled_at', models.DateTimeField(blank=True, null=True)),
                ('uses_canteen', models.BooleanField(default=False)),
                ('classroom', models.ForeignKey(
                    blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL,
                    related_name='children', to='core.classroom',
                )),
            ],
            options={
                'db_table': 'students_child',
                'ordering': ['last_name', 'first_name'],
                'verbose_name_plural': 'Children',
            },
        ),
        migrations.AddIndex(
            model_name='child',
            index=models.Index(fields=['school', 'status'], name='child_school_status_idx'),
        ),
        migrations.AddIndex(
            model_name='child',
            index=models.Index(fields=['school', 'classroom'], name='child_school_class_idx'),
        ),
        migrations.CreateModel(
            name='ParentChildLink',
            fields=tenant_owned_fields() + [
                ('parent', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE, related_name='parent_links',
                    to=settings.AUTH_USER_MODEL,
                )),
                ('child', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE, related_name='parent_links',
                    to='students.child',
                )),
            ],
            options={
                'db_table': 'students_parent_child_link',
            },
        ),
        migrations.AddConstraint(
            model_name='parentchildlink',
            constraint=models.UniqueConstraint(
                condition=models.Q(('is_deleted', False)), fields=('parent', 'child'), name='uniq_live_parent_child'
            ),
        ),
        migrations.AddIndex(
            model_name='parentchildlink',
            index=models.Index(fields=['parent', 'is_deleted'], name='parent_link_live_idx'),
        ),
        migrations.CreateModel(
            name='TeacherChildLink',
            fields=tenant_owned_fields() + [
                ('teacher', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE, related_name='teacher_links',
                    to=settings.AUTH_USER_MODEL,
                )),
                ('child', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE, related_name='teacher_links',
                    to='students.child',
                )),
            ],
            options={
                'db_table': 'students_teacher_child_link',
            },
        ),
        migrations.AddConstraint(
            model_name='teacherchildlink',
            constraint=models.UniqueConstraint(
                condition=models.Q(('is_deleted', False)), fields=('teacher', 'child'), name='uniq_live_teacher_child'
            ),
        ),
        migrations.AddIndex(
            model_name='teacherchildlink',
            index=models.Index(fields=['teacher', 'is_deleted'], name='teacher_link_live_idx'),
        ),
    ]
